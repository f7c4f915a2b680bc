"""
Conversions between placement options, absolute paths and file:// locators.

Pure functions: nothing here touches the filesystem. Locators and placement
paths always separate segments with "/", whatever the host platform uses;
segments are joined onto the base directory with os.path.
"""

import os
from collections.abc import Mapping
from typing import Any
from urllib.parse import ParseResult, SplitResult, quote, unquote

SCHEME = "file"
SCHEME_PREFIX = f"{SCHEME}://"
LOCATOR_SEPARATOR = "/"
DEFAULT_FLATTEN_SEPARATOR = "-"


def _option(options: Any, key: str, default: Any = None) -> Any:
    if options is None:
        return default
    if isinstance(options, Mapping):
        value = options.get(key)
    else:
        value = getattr(options, key, None)
    return default if value is None else value


def _join(base_directory: str | os.PathLike, relative: str) -> str:
    """Join a "/"-separated relative path onto base_directory and normalise it."""
    segments = [s for s in relative.split(LOCATOR_SEPARATOR) if s]
    return os.path.normpath(os.path.join(os.fspath(base_directory), *segments))


def flattened_path_for_path(path: str, separator: str | None = None) -> str:
    """Replace every "/" in path with separator. A leading "/" is kept."""
    separator = separator or DEFAULT_FLATTEN_SEPARATOR
    if path.startswith(LOCATOR_SEPARATOR):
        return LOCATOR_SEPARATOR + path[1:].replace(LOCATOR_SEPARATOR, separator)
    return path.replace(LOCATOR_SEPARATOR, separator)


def path_for_options(
    base_directory: str | os.PathLike,
    options: Any,
    default_flatten: bool = False,
    separator: str | None = None,
) -> str:
    """
    Absolute target path for placement options (PlacementOptions, ResolvedPlacement or a dict).

    options.path is always relative: one leading and one trailing "/" are
    stripped. When flattening, "path/name" becomes "path-name".
    A missing name gives a path ending in a separator, which fails once opened.
    """
    path = _option(options, "path", "")
    name = _option(options, "name", "")
    flatten = _option(options, "flatten", default_flatten)
    separator = separator or _option(options, "separator", DEFAULT_FLATTEN_SEPARATOR)

    # paths are always relative and never end with a slash
    if path.startswith(LOCATOR_SEPARATOR):
        path = path[1:]
    if path.endswith(LOCATOR_SEPARATOR):
        path = path[:-1]

    relative = path + LOCATOR_SEPARATOR + name
    if flatten:
        relative = flattened_path_for_path(relative, separator)

    result = _join(base_directory, relative)
    if not name:
        result = os.path.join(result, "")
    return result


def file_path_for_url(
    url: Any,
    base_directory: str | os.PathLike,
    flatten_directories: bool = False,
    separator: str | None = None,
) -> str | None:
    """
    Absolute path for a file:// locator, or None if it can't be one.

    url may be a string or a urllib.parse split/parse result.
    file://dir/name resolves under base_directory; file:///dir/name is an
    absolute path and resolves to itself.
    """
    if isinstance(url, (SplitResult, ParseResult)):
        if url.scheme != SCHEME:
            return None
        remainder = url.netloc
        if url.path and url.path != LOCATOR_SEPARATOR:
            remainder += url.path
    elif isinstance(url, str):
        if not url.startswith(SCHEME_PREFIX):
            return None
        remainder = url[len(SCHEME_PREFIX):]
    else:
        return None

    if not remainder:
        return None

    relative = unquote(remainder)
    if flatten_directories:
        relative = flattened_path_for_path(relative, separator)

    if relative.startswith(LOCATOR_SEPARATOR):
        return _join(os.sep, relative)
    return _join(base_directory, relative)


def url_for_file_path(path: Any, base_directory: str | os.PathLike) -> str | None:
    """
    Locator for an absolute path, relative to base_directory.

    Paths outside base_directory give a locator starting with "..";
    callers that care check containment themselves.
    """
    if isinstance(path, os.PathLike):
        path = os.fspath(path)
    base = os.fspath(base_directory)
    if not isinstance(path, str) or not path or len(path) < len(base):
        return None

    relative = os.path.relpath(path, base)
    if os.sep != LOCATOR_SEPARATOR:
        relative = relative.replace(os.sep, LOCATOR_SEPARATOR)
    return SCHEME_PREFIX + quote(relative, safe=LOCATOR_SEPARATOR)
