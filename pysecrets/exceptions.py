"""Exceptions raised by pysecrets."""


class SecretsError(Exception):
    """Base exception for all pysecrets errors."""


class SecretsConfigError(SecretsError):
    """Configuration is missing or invalid (e.g. no bucket configured)."""


class OutOfScopeError(SecretsError):
    """A local path does not lie inside the managed local root."""

    def __init__(self, path, local_root):
        self.path = path
        self.local_root = local_root
        super().__init__(f"File path {path} must be inside the {local_root}")


class TransferError(SecretsError):
    """A copy between the local filesystem and the bucket failed."""

    def __init__(self, message: str, source: str = "", destination: str = ""):
        self.source = source
        self.destination = destination
        super().__init__(message)


class RemoteNotFoundError(TransferError):
    """The requested object does not exist in the bucket."""


class DiffToolError(SecretsError):
    """Comparing local and staged files failed."""


class DispatchError(SecretsError):
    """No command, or an unknown command, was given on the command line."""
