"""
Entry point for running the CLI as a module.

Usage:
    python3 -m aeo_guru <command> [...]
"""

from .cli import main

if __name__ == '__main__':
    main()
