"""
Main entry point for the navigation engine.

Usage: python -m indoor_nav.main [command] [options]
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
