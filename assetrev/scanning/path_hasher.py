"""CRC-32 fingerprinting of file contents.

This module provides the PathHasher class for computing hex-encoded CRC-32
checksums of files, used as cache-busting fingerprints in destination paths.

The polynomial is given in reversed (LSB-first) form. The IEEE polynomial is
computed with zlib; any other polynomial uses a lookup table built once per
polynomial.

Example:
    >>> from assetrev.scanning import PathHasher
    >>> hasher = PathHasher()
    >>> hasher.hash_bytes(b"123456789")
    'cbf43926'
"""

import zlib
from functools import lru_cache
from pathlib import Path
from typing import Tuple, Union

# Reversed polynomial constants
IEEE = 0xEDB88320
CASTAGNOLI = 0x82F63B78
KOOPMAN = 0xEB31D82E

DEFAULT_POLYNOMIAL = IEEE

# Buffer size for chunked file reading (64KB)
CHUNK_SIZE = 65536

_MASK = 0xFFFFFFFF


@lru_cache(maxsize=None)
def _make_table(polynomial: int) -> Tuple[int, ...]:
    table = []
    for i in range(256):
        crc = i
        for _ in range(8):
            if crc & 1:
                crc = (crc >> 1) ^ polynomial
            else:
                crc >>= 1
        table.append(crc)
    return tuple(table)


class PathHasher:
    """Computes CRC-32 fingerprints of files.

    Instances hold no mutable state and may be shared between scanner
    worker threads.

    Attributes:
        polynomial: Reversed CRC-32 polynomial.
        chunk_size: Number of bytes read per chunk.
    """

    def __init__(self, polynomial: int = DEFAULT_POLYNOMIAL, chunk_size: int = CHUNK_SIZE) -> None:
        if not 0 < polynomial <= _MASK:
            raise ValueError(f"polynomial must be a non-zero 32-bit value, got {polynomial:#x}")
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.polynomial = polynomial
        self.chunk_size = chunk_size
        self._table = None if polynomial == IEEE else _make_table(polynomial)

    def hash_file(self, file_path: Union[str, Path]) -> str:
        """Compute the fingerprint of a file's full content.

        Args:
            file_path: Path to the file to hash.

        Returns:
            The checksum as 8 lowercase hex characters.

        Raises:
            OSError: If the file cannot be opened or read.
        """
        crc = 0
        with open(file_path, "rb") as f:
            while True:
                chunk = f.read(self.chunk_size)
                if not chunk:
                    break
                crc = self._update(crc, chunk)
        return self._encode(crc)

    def hash_bytes(self, data: bytes) -> str:
        """Compute the fingerprint of in-memory data."""
        return self._encode(self._update(0, data))

    def _update(self, crc: int, data: bytes) -> int:
        if self._table is None:
            return zlib.crc32(data, crc)

        table = self._table
        crc = ~crc & _MASK
        for byte in data:
            crc = table[(crc ^ byte) & 0xFF] ^ (crc >> 8)
        return ~crc & _MASK

    @staticmethod
    def _encode(crc: int) -> str:
        # Big-endian byte order, matching the checksum's conventional hex form
        return crc.to_bytes(4, "big").hex()
