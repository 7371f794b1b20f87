"""git_pr — pull the contents of a GitHub pull request into a local branch."""

__version__ = "1.3"
