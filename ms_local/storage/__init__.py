# Storage providers

from functools import lru_cache

from ms_local.storage.base import StorageProvider
from ms_local.storage.local_storage import LocalStorageProvider
from ms_local.storage.streams import ReadStream, WriteStream


@lru_cache(maxsize=1)
def get_storage() -> StorageProvider:
    """Default provider built from the MS_LOCAL_* environment on first use."""
    return LocalStorageProvider()


def __getattr__(name: str):
    # `storage` is built lazily so bad environment values fail on use, not on import
    if name == "storage":
        return get_storage()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "storage",
    "get_storage",
    "StorageProvider",
    "LocalStorageProvider",
    "ReadStream",
    "WriteStream",
]
