"""Exception hierarchy for git-pr.

Library code raises these; only the CLI turns them into printed text and
an exit status.
"""


class GitPrError(Exception):
    """Base class for every error git-pr reports to the user."""


class ConfigurationError(GitPrError):
    """Contradictory options or an unusable config file."""


class DiscoveryError(GitPrError):
    """The owning GitHub repository could not be determined from local state."""


class MetadataError(GitPrError):
    """The hosting API could not be reached or returned something unusable."""


class PullInfoMissing(MetadataError):
    """The PR exists but its head repository or refs are gone."""

    def __init__(self, number: int):
        self.number = number
        super().__init__(
            f"Could not find info for PR #{number} (maybe PR repo was deleted?)"
        )


class ExecutionError(GitPrError):
    """An external command reported a failure in its output."""

    def __init__(self, message: str, result=None):
        self.result = result
        super().__init__(message)
