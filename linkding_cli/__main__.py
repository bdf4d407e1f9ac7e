#!/usr/bin/env python3
"""
Package entry point for the linkding CLI.

This allows the package to be executed with: python -m linkding_cli
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
