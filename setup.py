from setuptools import setup, find_packages

setup(
    name="tablegenerator",
    version="0.1",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy>=1.22",
        "matplotlib>=3.5",
        "pandas>=1.4",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
)
