"""Main entry point when executing reactivecache as a package.

This allows running the package using python -m reactivecache.
"""

from reactivecache.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
