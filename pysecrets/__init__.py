"""pysecrets - keep a local secrets directory in sync with a shared GCS bucket."""

from .config import Config, SecretsSettings
from .exceptions import (
    DiffToolError,
    DispatchError,
    OutOfScopeError,
    RemoteNotFoundError,
    SecretsConfigError,
    SecretsError,
    TransferError,
)
from .mapper import PathMapper
from .models import (
    DiffReport,
    DiffStatus,
    FileDiff,
    FileTransfer,
    TransferOutcome,
    TransferReport,
)
from .stager import DiffStager
from .transfer import TransferGateway

__all__ = [
    "Config",
    "SecretsSettings",
    "PathMapper",
    "TransferGateway",
    "DiffStager",
    "DiffReport",
    "DiffStatus",
    "FileDiff",
    "FileTransfer",
    "TransferOutcome",
    "TransferReport",
    "SecretsError",
    "SecretsConfigError",
    "OutOfScopeError",
    "TransferError",
    "RemoteNotFoundError",
    "DiffToolError",
    "DispatchError",
]
