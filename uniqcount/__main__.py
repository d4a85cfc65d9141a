"""Entry point for running the command-line tool.

Usage:
    python -m uniqcount --path corpus.txt
"""

import sys

from uniqcount.cli import main

if __name__ == "__main__":
    sys.exit(main())
