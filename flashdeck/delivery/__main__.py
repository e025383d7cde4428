"""
Entry point for running flashdeck as a module.

Usage:
    python -m flashdeck.delivery queue 1
    python -m flashdeck.delivery --help
"""
from .cli import main

if __name__ == "__main__":
    main()
