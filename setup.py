"""
Setup script for pathshala.

Pathshala is the practice and progress engine of a children's learning
app. It covers three jobs:

1. Math practice - arithmetic problems with countable visual groups
2. Multiple choice - plausible wrong answers around the correct one
3. Progress - accuracy, badges and day streaks from stored records

The 'pathshala' command is a terminal front end over the engine.
"""

from setuptools import find_packages, setup

setup(
    name="pathshala",
    version="1.0.0",
    description="Math practice generation and progress analytics for a children's learning app",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="Pathshala",
    packages=find_packages(include=["pathshala", "pathshala.*"]),
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Database
        "sqlalchemy>=2.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "pathshala=pathshala.cli.main:run",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="learning math practice children education progress",
)
