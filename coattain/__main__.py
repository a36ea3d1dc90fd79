"""
Package entry point.

Allows running the application via:

    python -m coattain

This simply forwards execution to coattain.cli.main().
"""

from coattain.cli import main

if __name__ == "__main__":
    main()
