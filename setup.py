"""Setup configuration for prcost"""

from setuptools import setup, find_packages

setup(
    name="prow-pr-cost-analyzer",
    version="0.1.0",
    description=(
        "CLI tool estimating the cloud cost and retest count of Prow CI jobs "
        "for closed GitHub pull requests."
    ),
    author="Prow PR Cost Analyzer Contributors",
    author_email="",
    python_requires=">=3.10",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "requests>=2.28.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "black>=22.0",
            "flake8>=4.0",
            "mypy>=0.950",
        ],
    },
    entry_points={
        "console_scripts": [
            "prow-pr-cost-analyzer=prcost.main:main",
        ],
    },
)
