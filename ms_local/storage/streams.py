"""Async read/write streams over aiofiles handles."""

import logging
from typing import Any

import aiofiles.os

from ms_local.core.diagnostics import DiagnosticObserver
from ms_local.core.exceptions import ReadFailed, StorageError, WriteFailed

logger = logging.getLogger(__name__)


async def discard_partial_file(
    path: str,
    error: StorageError | None = None,
    observer: DiagnosticObserver | None = None,
) -> None:
    """
    Best-effort removal of a partially written file.
    A failure is attached to error as cleanup_error and reported, never raised.
    """
    try:
        await aiofiles.os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as cleanup_error:
        logger.warning("Unable to remove partial file %s: %s", path, cleanup_error)
        if error is not None:
            error.cleanup_error = cleanup_error
        if observer is not None:
            observer.error("Unable to remove partial file %s: %s", path, cleanup_error)


class ReadStream:
    """Async iterator over the chunks of an open file. Closes itself at end of file."""

    def __init__(self, handle: Any, path: str, locator: str, chunk_size: int) -> None:
        self._handle = handle
        self.path = path
        self.locator = locator
        self.chunk_size = chunk_size
        self.closed = False

    def __aiter__(self) -> "ReadStream":
        return self

    async def __anext__(self) -> bytes:
        if self.closed:
            raise StopAsyncIteration
        try:
            chunk = await self._handle.read(self.chunk_size)
        except OSError as err:
            await self.close()
            raise ReadFailed(
                f"Unable to read from {self.path}",
                {"locator": self.locator, "path": self.path},
                os_error=err,
            ) from err
        if not chunk:
            await self.close()
            raise StopAsyncIteration
        return chunk

    async def read_all(self) -> bytes:
        """Read the rest of the file."""
        return b"".join([chunk async for chunk in self])

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        await self._handle.close()

    async def __aenter__(self) -> "ReadStream":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


class WriteStream:
    """
    Writable stream bound to a file opened by the provider.

    locator is known as soon as the stream exists. A write fault stops the
    stream, removes the partial file and raises WriteFailed. Leaving an
    ``async with`` block with an exception aborts the same way.
    """

    def __init__(
        self,
        handle: Any,
        path: str,
        locator: str,
        encoding: str = "utf-8",
        observer: DiagnosticObserver | None = None,
    ) -> None:
        self._handle = handle
        self.path = path
        self.locator = locator
        self.encoding = encoding
        self.observer = observer
        self.bytes_written = 0
        self.closed = False
        self.error: StorageError | None = None

    async def write(self, chunk: bytes | str) -> int:
        if self.closed:
            raise WriteFailed(
                f"Stream to {self.path} is closed",
                {"locator": self.locator, "path": self.path},
            )
        try:
            if isinstance(chunk, str):
                chunk = chunk.encode(self.encoding)
            await self._handle.write(chunk)
        except (OSError, LookupError, UnicodeEncodeError) as err:
            await self._fail(err)
            raise self.error from err
        self.bytes_written += len(chunk)
        return len(chunk)

    async def close(self) -> str:
        """Flush and close the file; returns the locator."""
        if self.closed:
            if self.error is not None:
                raise self.error
            return self.locator
        try:
            await self._handle.close()
        except OSError as err:
            self.closed = True
            await self._fail(err, handle_closed=True)
            raise self.error from err
        self.closed = True
        if self.observer is not None:
            self.observer.debug("Closed stream to %s after %d bytes", self.path, self.bytes_written)
        return self.locator

    async def abort(self) -> None:
        """Stop writing and remove whatever was written."""
        if self.error is not None:
            return
        if not self.closed:
            self.closed = True
            try:
                await self._handle.close()
            except OSError as err:
                logger.warning("Error closing aborted stream to %s: %s", self.path, err)
        await discard_partial_file(self.path, None, self.observer)

    async def _fail(self, err: Exception, handle_closed: bool = False) -> None:
        self.error = WriteFailed(
            f"Unable to write to {self.path}",
            {"locator": self.locator, "path": self.path},
            os_error=err if isinstance(err, OSError) else None,
        )
        if self.observer is not None:
            self.observer.error("Error writing to %s: %s", self.path, err)
        if not handle_closed:
            self.closed = True
            try:
                await self._handle.close()
            except OSError as close_err:
                logger.warning("Error closing failed stream to %s: %s", self.path, close_err)
        await discard_partial_file(self.path, self.error, self.observer)

    async def __aenter__(self) -> "WriteStream":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            await self.abort()
        else:
            await self.close()
