"""Allow running ssmtunnel as ``python -m ssmtunnel``."""

from ssmtunnel.cli import cli_main

if __name__ == "__main__":
    cli_main()
