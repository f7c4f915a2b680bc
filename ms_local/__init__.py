"""Local filesystem storage provider for multi-provider storage managers."""

from ms_local.core.diagnostics import DiagnosticObserver, LoggingObserver, configure_logging
from ms_local.core.exceptions import (
    AccessDenied,
    DeleteFailed,
    DirectoryCreateFailed,
    InvalidLocator,
    InvalidPlacement,
    NotFound,
    PathOutsideBaseDirectory,
    ReadFailed,
    StorageError,
    UnsupportedScheme,
    WriteFailed,
)
from ms_local.schemas.options import PlacementOptions, StorageConfig, resolve_placement
from ms_local.storage import (
    LocalStorageProvider,
    ReadStream,
    StorageProvider,
    WriteStream,
    get_storage,
)

__version__ = "0.1.0"

__all__ = [
    "AccessDenied",
    "DeleteFailed",
    "DiagnosticObserver",
    "DirectoryCreateFailed",
    "InvalidLocator",
    "InvalidPlacement",
    "LocalStorageProvider",
    "LoggingObserver",
    "NotFound",
    "PathOutsideBaseDirectory",
    "PlacementOptions",
    "ReadFailed",
    "ReadStream",
    "StorageConfig",
    "StorageError",
    "StorageProvider",
    "UnsupportedScheme",
    "WriteFailed",
    "WriteStream",
    "configure_logging",
    "get_storage",
    "resolve_placement",
]
