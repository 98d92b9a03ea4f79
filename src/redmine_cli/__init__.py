"""redmine-cli - Work with Redmine issues from the command line.

List, show, open, create, take, finish and edit issues of a Redmine project,
with free-form filters on status, release, parent and assignee.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
