"""Main entry point when executing workcache as a package.

This allows running the package using python -m workcache.
"""

from workcache.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
