from setuptools import setup, find_packages

setup(
    name="uniqcount",
    version="0.1.0",
    description="Distinct-count estimation with the CVM sketch, plus a seeded multi-trial accuracy harness",
    author="adamfilli",
    packages=find_packages(include=["uniqcount", "uniqcount.*"]),
    install_requires=[
        "matplotlib",
        "pandas",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "uniqcount=uniqcount.cli:main",
        ],
    },
    include_package_data=True,
    python_requires=">=3.11",
)
