"""
Gzip helpers for archive files.
"""

import gzip
from pathlib import Path
from typing import Union

COMPRESSION_LEVEL = 9


def write_gzip_archive(payload: str, path: Union[str, Path]) -> int:
    """
    Compress a text payload and write it to `path` in one go.

    Returns:
        Size of the written archive in bytes
    """
    data = gzip.compress(payload.encode("utf-8"), compresslevel=COMPRESSION_LEVEL)
    Path(path).write_bytes(data)
    return len(data)


def read_gzip_archive(path: Union[str, Path]) -> str:
    """Decompress an archive written by write_gzip_archive."""
    return gzip.decompress(Path(path).read_bytes()).decode("utf-8")
