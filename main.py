"""
Main entry point script for Vending Tycoon.

This script serves as the executable entry point when running
Vending Tycoon from the command line.
"""

import sys
from vendtycoon.main import main

if __name__ == "__main__":
    sys.exit(main())
