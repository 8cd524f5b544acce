"""Allow ``python -m xcreport``."""

from xcreport.cli.main import cli

if __name__ == "__main__":
    cli()
