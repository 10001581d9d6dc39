"""
Entry point for running smeprofile as a module.

Usage:
    python -m smeprofile --help
    python -m smeprofile process answers.json --output profile.json
    python -m smeprofile detect "අපි ආහාර සේවය කරමු"
"""
from .cli import app


if __name__ == "__main__":
    app()
