"""
Bootstrap entry point - Run with: python -m mongo_init
"""

import sys

from mongo_init.cli import main

if __name__ == "__main__":
    sys.exit(main())
