"""
PyAnalyser entry point

Runs the command line front end: python -m pyanalyser --help
"""

import sys

from .cli import main


if __name__ == "__main__":
    sys.exit(main())
