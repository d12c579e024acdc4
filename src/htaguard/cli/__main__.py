"""htaguard CLI module entry point.

Enables running the CLI via: python -m htaguard.cli
"""

from htaguard.cli.main import cli

if __name__ == "__main__":
    cli()
