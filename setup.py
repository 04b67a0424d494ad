from setuptools import find_packages, setup

setup(
    name="gnudate",
    version="0.1.0",
    description="Free-form date string parsing, compatible with GNU date",
    license="MIT",
    package_dir={"": "pysrc"},
    packages=find_packages("pysrc"),
    python_requires=">=3.9",
    install_requires=[
        # zoneinfo needs this on platforms without a system tz database
        "tzdata>=2020.1; sys_platform == 'win32'",
    ],
    extras_require={
        "test": [
            "pytest",
            "hypothesis",
        ],
    },
)
