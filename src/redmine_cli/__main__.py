"""Entry point for running redmine-cli as a module.

Allows running with: python -m redmine_cli
"""

from redmine_cli.cli import app

if __name__ == "__main__":
    app()
