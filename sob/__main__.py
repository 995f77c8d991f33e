"""
Entry point for running sob as a module.

Usage:
    python -m sob build -f sob.toml
"""

import sys
from .cli import main

if __name__ == "__main__":
    sys.exit(main())
