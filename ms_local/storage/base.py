"""Abstract storage provider."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any


class StorageProvider(ABC):
    """Capability surface a multi-provider manager dispatches to."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Identifying token of the provider, e.g. "ms-local"."""
        ...

    @property
    @abstractmethod
    def schemes(self) -> tuple[str, ...]:
        """Locator schemes this provider resolves."""
        ...

    def supports(self, locator: Any) -> bool:
        """True if locator is a string using one of self.schemes."""
        if not isinstance(locator, str):
            return False
        return any(locator.startswith(f"{scheme}://") for scheme in self.schemes)

    @abstractmethod
    async def read(self, locator: str, encoding: str | None = None) -> bytes | str:
        """Return the whole object; str when encoding is given, bytes otherwise."""
        ...

    @abstractmethod
    async def read_stream(self, locator: str, chunk_size: int | None = None) -> AsyncIterator[bytes]:
        """Open the object for reading and return an async iterator of chunks."""
        ...

    @abstractmethod
    async def write(self, data: bytes | str, options: Any = None, **overrides: Any) -> str:
        """Store data and return the locator used to reference it."""
        ...

    @abstractmethod
    async def write_stream(self, options: Any = None, **overrides: Any) -> Any:
        """Open a target for writing and return a stream exposing its locator."""
        ...

    @abstractmethod
    async def delete(self, locator: str) -> None:
        """Remove the object. Removing something already gone is not an error."""
        ...
