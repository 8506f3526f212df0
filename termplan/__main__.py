"""
Package entry point.

Allows running the application via:

    python -m termplan

This simply forwards execution to termplan.cli.main().
"""

from termplan.cli import main

if __name__ == "__main__":
    main()
