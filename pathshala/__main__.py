"""
Entry point for running pathshala as a module.

Usage:
    python -m pathshala practice
    python -m pathshala progress
    python -m pathshala --help
"""
from .cli.main import run

if __name__ == "__main__":
    run()
