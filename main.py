"""
Entry point for the post type migration tool.
"""

import sys

from post_type_migrator.cli import main

if __name__ == "__main__":
    sys.exit(main())
