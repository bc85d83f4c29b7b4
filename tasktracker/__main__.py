"""Entry point for task-tracker when run as a module.

This allows the package to be run with: python -m tasktracker
"""

import sys

from tasktracker.cli import main

if __name__ == "__main__":
    sys.exit(main())
