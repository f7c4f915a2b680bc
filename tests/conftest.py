import errno

import pytest

from ms_local.schemas.options import StorageConfig
from ms_local.storage.local_storage import LocalStorageProvider


class RecordingObserver:
    """Collects observer events as (level, formatted message)."""

    def __init__(self):
        self.events: list[tuple[str, str]] = []

    def debug(self, message, *args):
        self.events.append(("debug", message % args))

    def error(self, message, *args):
        self.events.append(("error", message % args))

    def messages(self, level):
        return [m for lvl, m in self.events if lvl == level]


class FailingHandle:
    """Wraps an aiofiles handle; writes after the first `fail_after` raise ENOSPC."""

    def __init__(self, handle, fail_after=0):
        self._handle = handle
        self.fail_after = fail_after
        self.calls = 0

    async def write(self, data):
        self.calls += 1
        if self.calls > self.fail_after:
            raise OSError(errno.ENOSPC, "No space left on device")
        return await self._handle.write(data)

    async def close(self):
        await self._handle.close()


@pytest.fixture()
def observer():
    return RecordingObserver()


@pytest.fixture()
def provider(tmp_path, observer):
    return LocalStorageProvider(StorageConfig(base_directory=tmp_path), observer=observer)
