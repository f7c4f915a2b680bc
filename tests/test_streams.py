"""Tests for read_stream / write_stream."""

import aiofiles.os
import pytest

from ms_local.core.exceptions import (
    DirectoryCreateFailed,
    NotFound,
    ReadFailed,
    UnsupportedScheme,
    WriteFailed,
)
from ms_local.schemas.options import StorageConfig
from ms_local.storage.local_storage import LocalStorageProvider
from ms_local.storage.streams import ReadStream, WriteStream

from conftest import FailingHandle


# read_stream


@pytest.mark.asyncio()
async def test_read_stream_yields_file_content(provider, tmp_path):
    content = b"0123456789" * 10
    (tmp_path / "data.bin").write_bytes(content)

    stream = await provider.read_stream("file://data.bin", chunk_size=16)
    assert isinstance(stream, ReadStream)
    chunks = [chunk async for chunk in stream]
    assert b"".join(chunks) == content
    assert max(len(c) for c in chunks) == 16
    assert stream.closed


@pytest.mark.asyncio()
async def test_read_stream_read_all(provider, tmp_path):
    (tmp_path / "a.txt").write_text("stream me")
    async with await provider.read_stream("file://a.txt") as stream:
        assert await stream.read_all() == b"stream me"


@pytest.mark.asyncio()
async def test_read_stream_unsupported_scheme(provider):
    with pytest.raises(UnsupportedScheme):
        await provider.read_stream("flupp://a.txt")


@pytest.mark.asyncio()
async def test_read_stream_missing_file(provider):
    with pytest.raises(NotFound):
        await provider.read_stream("file://nothing-here.txt")


@pytest.mark.asyncio()
async def test_read_stream_fault_raises_from_iteration(provider, tmp_path):
    (tmp_path / "a.txt").write_text("content")
    stream = await provider.read_stream("file://a.txt")

    class BrokenHandle:
        async def read(self, size):
            raise OSError(5, "Input/output error")

        async def close(self):
            pass

    await stream._handle.close()
    stream._handle = BrokenHandle()
    with pytest.raises(ReadFailed) as exc_info:
        async for _ in stream:
            pass
    assert exc_info.value.os_error.errno == 5
    assert stream.closed


# write_stream


@pytest.mark.asyncio()
async def test_write_stream(provider, tmp_path, observer):
    stream = await provider.write_stream({"name": "streamed.txt", "path": "out"})
    assert isinstance(stream, WriteStream)
    assert stream.locator == "file://out/streamed.txt"

    await stream.write("Test ")
    await stream.write(b"Data")
    locator = await stream.close()

    assert locator == "file://out/streamed.txt"
    assert (tmp_path / "out" / "streamed.txt").read_text() == "Test Data"
    assert stream.bytes_written == 9
    assert "Closed stream to %s after 9 bytes" % stream.path in observer.messages("debug")


@pytest.mark.asyncio()
async def test_write_stream_pipes_read_stream(provider, tmp_path):
    (tmp_path / "source.bin").write_bytes(b"x" * 1000)
    source = await provider.read_stream("file://source.bin", chunk_size=100)
    async with await provider.write_stream(name="copy.bin") as target:
        async for chunk in source:
            await target.write(chunk)
    assert (tmp_path / "copy.bin").read_bytes() == b"x" * 1000
    assert await provider.read(target.locator) == b"x" * 1000


@pytest.mark.asyncio()
async def test_write_stream_file_exists_before_first_write(provider, tmp_path):
    stream = await provider.write_stream(name="early.txt")
    assert (tmp_path / "early.txt").exists()
    await stream.close()


@pytest.mark.asyncio()
async def test_write_stream_directory_create_failure(provider, tmp_path):
    (tmp_path / "blocker").write_text("file")
    with pytest.raises(DirectoryCreateFailed):
        await provider.write_stream(name="f.txt", path="blocker/sub")


@pytest.mark.asyncio()
async def test_write_stream_open_failure_is_immediate(tmp_path):
    provider = LocalStorageProvider(StorageConfig(base_directory=tmp_path, create_directories=False))
    with pytest.raises(WriteFailed):
        await provider.write_stream(name="f.txt", path="missing")


@pytest.mark.asyncio()
async def test_write_stream_error_removes_partial_file(provider, tmp_path, observer):
    stream = await provider.write_stream(name="partial.bin")
    stream._handle = FailingHandle(stream._handle, fail_after=1)

    await stream.write(b"first chunk")
    with pytest.raises(WriteFailed) as exc_info:
        await stream.write(b"second chunk")

    assert exc_info.value.os_error.strerror == "No space left on device"
    assert exc_info.value.cleanup_error is None
    assert stream.closed
    assert not (tmp_path / "partial.bin").exists()
    assert any("Error writing to" in m for m in observer.messages("error"))

    with pytest.raises(WriteFailed):
        await stream.close()


@pytest.mark.asyncio()
async def test_write_stream_cleanup_failure_keeps_original_error(provider, monkeypatch, observer):
    stream = await provider.write_stream(name="partial.bin")
    stream._handle = FailingHandle(stream._handle)

    async def failing_remove(path):
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr(aiofiles.os, "remove", failing_remove)
    with pytest.raises(WriteFailed) as exc_info:
        await stream.write(b"data")
    assert isinstance(exc_info.value.cleanup_error, PermissionError)
    assert exc_info.value.os_error.strerror == "No space left on device"
    assert len(observer.messages("error")) == 2


@pytest.mark.asyncio()
async def test_write_stream_exception_in_block_aborts(provider, tmp_path):
    with pytest.raises(RuntimeError):
        async with await provider.write_stream(name="aborted.txt") as stream:
            await stream.write("half")
            raise RuntimeError("producer failed")
    assert not (tmp_path / "aborted.txt").exists()


@pytest.mark.asyncio()
async def test_write_after_close_fails(provider):
    stream = await provider.write_stream(name="closed.txt")
    await stream.close()
    with pytest.raises(WriteFailed):
        await stream.write(b"late")


@pytest.mark.asyncio()
async def test_write_stream_unknown_encoding_fails_before_opening(provider, tmp_path):
    with pytest.raises(WriteFailed):
        await provider.write_stream(name="enc.txt", path="never", encoding="no-such-codec")
    assert not (tmp_path / "never").exists()


@pytest.mark.asyncio()
async def test_write_stream_unencodable_text_removes_partial_file(provider, tmp_path, observer):
    stream = await provider.write_stream(name="ascii.txt", encoding="ascii")
    await stream.write(b"first")

    with pytest.raises(WriteFailed) as exc_info:
        await stream.write("héllo")

    assert isinstance(exc_info.value.__cause__, UnicodeEncodeError)
    assert exc_info.value.os_error is None
    assert stream.closed
    assert not (tmp_path / "ascii.txt").exists()
    assert any("Error writing to" in m for m in observer.messages("error"))
