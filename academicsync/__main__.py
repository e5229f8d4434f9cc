"""
Package entry point.

Allows running the application via:

    python -m academicsync

This simply forwards execution to academicsync.cli.main().
"""

from academicsync.cli import main

if __name__ == "__main__":
    main()
