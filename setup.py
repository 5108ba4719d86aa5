"""Setup configuration for chainsaw-runner."""

from setuptools import setup, find_packages

setup(
    name="chainsaw-runner",
    version="0.1.0",
    description="Runs declarative tests against a cluster resource API",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "requests>=2.31.0",
        "pyyaml>=6.0",
        "click>=8.1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "chainsaw-runner=chainsaw_runner.cli:main",
        ],
    },
)
