"""
Main entry point for SmartBrain package

This allows running the package with: python -m smartbrain
"""

import sys

from .cli.main import main

if __name__ == "__main__":
    sys.exit(main())
