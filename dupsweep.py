#!/usr/bin/env python3
"""
dupsweep Entry Point

This script provides a convenient entry point for running dupsweep
without requiring package installation.

Usage:
    python3 dupsweep.py --path <folder> [options]

This is equivalent to:
    python3 -m dupsweep.cli.main --path <folder> [options]
"""

import sys
import os

# Add the current directory to Python path so we can import dupsweep
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

if __name__ == "__main__":
    from dupsweep.cli.main import main
    sys.exit(main())
