"""Provider configuration defaults, read from the environment."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env so MS_LOCAL_* vars are available
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("true", "1", "yes")


# Root under which all managed files live
BASE_DIRECTORY = Path(
    os.getenv("MS_LOCAL_BASE_DIRECTORY", Path.cwd() / "multi-storage-local")
).absolute()

# Create missing parent directories on write
CREATE_DIRECTORIES = _env_bool("MS_LOCAL_CREATE_DIRECTORIES", True)

# Store everything in a single directory level (a/b/c.txt -> a-b-c.txt)
FLATTEN_DIRECTORIES = _env_bool("MS_LOCAL_FLATTEN_DIRECTORIES", False)
FLATTEN_SEPARATOR = os.getenv("MS_LOCAL_FLATTEN_SEPARATOR", "-")

# Reject locators resolving outside BASE_DIRECTORY
CONFINE_TO_BASE_DIRECTORY = _env_bool("MS_LOCAL_CONFINE_TO_BASE_DIRECTORY", True)

# Stream chunk size (bytes)
READ_CHUNK_SIZE = int(os.getenv("MS_LOCAL_READ_CHUNK_SIZE", 64 * 1024))  # 64 KB

# File write defaults
DEFAULT_ENCODING = os.getenv("MS_LOCAL_DEFAULT_ENCODING", "utf-8")
DEFAULT_FILE_MODE = int(os.getenv("MS_LOCAL_DEFAULT_FILE_MODE", "666"), 8)

LOG_LEVEL = os.getenv("MS_LOCAL_LOG_LEVEL", "INFO").upper()
