"""
Entry point for running the expression monitor as a module.

Usage:
    python -m expression_monitor [hours]
"""

from .cli import main

if __name__ == "__main__":
    main()
