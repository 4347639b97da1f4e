"""
Domain exceptions for treeshell.

All application errors inherit from ShellError. They are raised where a
resource, program or user error happens and converted into an exit status
by the simple-command executor or the orchestrator.
"""


class ShellError(Exception):
    """Base class for all treeshell exceptions."""

    def __init__(self, message: str, context: dict = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class RedirectionError(ShellError):
    """Raised when a redirection target cannot be opened or wired."""

    pass


class SpawnError(ShellError):
    """Raised when a branch or an external program cannot be created."""

    pass


class WaitError(ShellError):
    """Raised when waiting for a branch fails."""

    pass


class ChannelError(ShellError):
    """Raised when the anonymous pipe between two branches cannot be created."""

    pass


class ProgramNotFoundError(ShellError):
    """Raised when an external program is missing or not executable."""

    pass


class AssignmentError(ShellError):
    """Raised for a malformed or rejected NAME=value assignment."""

    pass


class DirectoryChangeError(ShellError):
    """Raised when the cd built-in cannot reach its target."""

    pass


class TreeDocumentError(ShellError):
    """Raised when a YAML/JSON command tree document is invalid."""

    pass
