"""Local filesystem storage provider."""

import logging
import os
from typing import Any

import aiofiles
import aiofiles.os

from ms_local.core.diagnostics import DiagnosticObserver
from ms_local.core.exceptions import (
    AccessDenied,
    DeleteFailed,
    DirectoryCreateFailed,
    InvalidLocator,
    NotFound,
    PathOutsideBaseDirectory,
    ReadFailed,
    StorageError,
    UnsupportedScheme,
    WriteFailed,
)
from ms_local.schemas.options import PlacementInput, StorageConfig, resolve_placement
from ms_local.storage import paths
from ms_local.storage.base import StorageProvider
from ms_local.storage.streams import ReadStream, WriteStream, discard_partial_file

logger = logging.getLogger(__name__)


def _error_for(
    err: OSError,
    default: type[StorageError],
    message: str,
    details: dict[str, str],
) -> StorageError:
    """Map an OS error onto the provider's error kinds."""
    if isinstance(err, PermissionError):
        error_cls: type[StorageError] = AccessDenied
    elif isinstance(err, FileNotFoundError) and default is ReadFailed:
        error_cls = NotFound
    else:
        error_cls = default
    return error_cls(message, details, os_error=err)


class LocalStorageProvider(StorageProvider):
    """
    Store files under a base directory. Locators look like file://dir/name.txt,
    relative to the base directory.
    """

    def __init__(
        self,
        storage_config: StorageConfig | None = None,
        observer: DiagnosticObserver | None = None,
        **settings: Any,
    ) -> None:
        if storage_config is None:
            storage_config = StorageConfig.from_env(**settings)
        elif settings:
            storage_config = StorageConfig(**{**storage_config.model_dump(), **settings})
        self.config = storage_config
        self.observer = observer

    @property
    def name(self) -> str:
        return "ms-local"

    @property
    def schemes(self) -> tuple[str, ...]:
        return (paths.SCHEME,)

    @property
    def base_directory(self) -> str:
        return str(self.config.base_directory)

    # Path calculations

    def path_for_options(self, options: PlacementInput = None, **overrides: Any) -> str:
        placement = resolve_placement(self.config, options, **overrides)
        return paths.path_for_options(self.base_directory, placement)

    def flattened_path_for_path(self, path: str, separator: str | None = None) -> str:
        return paths.flattened_path_for_path(path, separator or self.config.flatten_separator)

    def file_path_for_url(self, url: Any) -> str | None:
        return paths.file_path_for_url(
            url,
            self.base_directory,
            self.config.flatten_directories,
            self.config.flatten_separator,
        )

    def url_for_file_path(self, path: Any) -> str | None:
        return paths.url_for_file_path(path, self.base_directory)

    def is_within_base_directory(self, path: str) -> bool:
        """Structural containment check; symlinks are not followed."""
        base = os.path.normpath(self.base_directory)
        try:
            return os.path.commonpath([base, os.path.normpath(os.path.abspath(path))]) == base
        except ValueError:
            return False

    def _check_contained(self, path: str, locator: str | None = None) -> None:
        if self.config.confine_to_base_directory and not self.is_within_base_directory(path):
            raise PathOutsideBaseDirectory(
                f"Path {path} is outside of {self.base_directory}",
                {"locator": locator or "", "path": path},
            )

    def _resolve(self, locator: Any) -> str:
        if not self.supports(locator):
            raise UnsupportedScheme(
                f'Unable to handle url "{locator}" due to unsupported scheme',
                {"locator": str(locator)},
            )
        path = self.file_path_for_url(locator)
        if not path:
            raise InvalidLocator(f'Invalid url "{locator}"', {"locator": locator})
        self._check_contained(path, locator)
        logger.debug("Resolved %s to %s", locator, path)
        return path

    # Filesystem helpers

    async def _check_readable(self, path: str, locator: str) -> None:
        details = {"locator": locator, "path": path}
        if not await aiofiles.os.path.exists(path):
            raise NotFound(f"Unable to read from {path}: file does not exist", details)
        if not await aiofiles.os.access(path, os.R_OK):
            raise AccessDenied(f"Unable to read from {path}: permission denied", details)

    async def _create_directories(self, target: str) -> None:
        if not self.config.create_directories:
            return
        directory = os.path.dirname(target)
        if await aiofiles.os.path.isdir(directory):
            return
        if self.observer is not None:
            self.observer.debug("Creating directory %s", directory)
        try:
            # exist_ok covers a concurrent writer creating the same chain
            await aiofiles.os.makedirs(directory, exist_ok=True)
        except OSError as err:
            raise DirectoryCreateFailed(
                f"Could not create directory {directory}",
                {"path": directory},
                os_error=err,
            ) from err

    async def _open_for_writing(self, target: str, mode: int) -> Any:
        def opener(path: str, flags: int) -> int:
            return os.open(path, flags, mode)

        try:
            return await aiofiles.open(target, "wb", opener=opener)
        except OSError as err:
            raise _error_for(err, WriteFailed, f"Unable to open {target} for writing", {"path": target}) from err

    def _prepare_target(self, options: PlacementInput, overrides: dict[str, Any]):
        placement = resolve_placement(self.config, options, **overrides)
        target = paths.path_for_options(self.base_directory, placement)
        self._check_contained(target)
        return placement, target

    # Operations

    async def read(self, locator: str, encoding: str | None = None) -> bytes | str:
        path = self._resolve(locator)
        await self._check_readable(path, locator)
        details = {"locator": locator, "path": path}
        try:
            async with aiofiles.open(path, "rb") as f:
                data = await f.read()
        except OSError as err:
            raise _error_for(err, ReadFailed, f"Unable to read from {path}", details) from err
        if encoding is None:
            return data
        try:
            return data.decode(encoding)
        except (LookupError, UnicodeDecodeError) as err:
            raise ReadFailed(f"Unable to decode {path} as {encoding}", details) from err

    async def read_stream(self, locator: str, chunk_size: int | None = None) -> ReadStream:
        path = self._resolve(locator)
        await self._check_readable(path, locator)
        try:
            handle = await aiofiles.open(path, "rb")
        except OSError as err:
            raise _error_for(
                err, ReadFailed, f"Unable to read from {path}", {"locator": locator, "path": path}
            ) from err
        return ReadStream(handle, path, locator, chunk_size or self.config.read_chunk_size)

    async def write(self, data: bytes | str, options: PlacementInput = None, **overrides: Any) -> str:
        """
        Write data to the location described by options and return its locator.
        Partial output is removed if the write fails.
        """
        placement, target = self._prepare_target(options, overrides)
        details = {"path": target}
        if isinstance(data, str):
            try:
                data = data.encode(placement.encoding)
            except (LookupError, UnicodeEncodeError) as err:
                raise WriteFailed(f"Unable to encode data as {placement.encoding}", details) from err

        await self._create_directories(target)
        handle = await self._open_for_writing(target, placement.mode)
        try:
            try:
                await handle.write(data)
            finally:
                await handle.close()
        except OSError as err:
            error = _error_for(err, WriteFailed, f"Unable to write to {target}", details)
            await discard_partial_file(target, error, self.observer)
            raise error from err

        return self.url_for_file_path(target)

    async def write_stream(self, options: PlacementInput = None, **overrides: Any) -> WriteStream:
        """
        Open the target up front and return a WriteStream for it.
        The stream's locator is available immediately; close() returns it too.
        """
        placement, target = self._prepare_target(options, overrides)
        await self._create_directories(target)
        handle = await self._open_for_writing(target, placement.mode)
        return WriteStream(
            handle,
            target,
            self.url_for_file_path(target),
            encoding=placement.encoding,
            observer=self.observer,
        )

    async def delete(self, locator: str) -> None:
        path = self._resolve(locator)
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            if self.observer is not None:
                self.observer.debug("File %s does not exist, nothing to delete", path)
        except OSError as err:
            raise _error_for(
                err, DeleteFailed, f"Unable to delete {path}", {"locator": locator, "path": path}
            ) from err
