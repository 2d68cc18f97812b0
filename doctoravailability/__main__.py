"""
Entry point for ``python -m doctoravailability``.

Usage: python -m doctoravailability [command] [options]
"""

from .cli.app import app

if __name__ == "__main__":
    app()
