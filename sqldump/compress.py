"""
Output sinks for the SQL dumper, with optional compression.

A sink receives text, encodes it as UTF-8 and writes it to a file or to
standard output. write() returns the number of bytes written before
compression so callers can budget statement sizes.
"""

import bz2
import gzip
import logging
import sys
from typing import BinaryIO, Optional

import lz4.frame
import zstandard

from .exceptions import ConfigurationError
from .options import (
    COMPRESS_BZIP2,
    COMPRESS_GZIP,
    COMPRESS_LZ4,
    COMPRESS_NONE,
    COMPRESS_ZSTANDARD,
)


class CompressNone:
    """Writes the dump uncompressed."""

    extension = ''

    def __init__(self, level: int = 0):
        self.level = level
        self.destination: Optional[str] = None
        self._target: Optional[BinaryIO] = None
        self._handle: Optional[BinaryIO] = None

    def open(self, destination: Optional[str] = None) -> None:
        """Open the sink on a file path, or standard output when empty."""
        self.destination = destination or None
        if self.destination:
            self._target = open(self.destination, 'wb')
        else:
            self._target = sys.stdout.buffer
        self._handle = self._wrap(self._target)
        logging.debug(f"Opened {type(self).__name__} sink on {self.destination or 'stdout'}")

    def _wrap(self, target: BinaryIO) -> BinaryIO:
        return target

    def write(self, text: str) -> int:
        data = text.encode('utf-8')
        self._handle.write(data)
        return len(data)

    def close(self) -> None:
        if self._handle is None:
            return
        if self._handle is not self._target:
            self._handle.close()
        if self.destination:
            self._target.close()
        else:
            self._target.flush()
        self._handle = None
        self._target = None


class CompressGzip(CompressNone):
    extension = '.gz'

    def _wrap(self, target: BinaryIO) -> BinaryIO:
        return gzip.GzipFile(fileobj=target, mode='wb', compresslevel=self.level or 9)


class CompressBzip2(CompressNone):
    extension = '.bz2'

    def _wrap(self, target: BinaryIO) -> BinaryIO:
        return bz2.BZ2File(target, mode='wb', compresslevel=self.level or 9)


class CompressZstandard(CompressNone):
    extension = '.zst'

    def _wrap(self, target: BinaryIO) -> BinaryIO:
        compressor = zstandard.ZstdCompressor(level=self.level or 3)
        return compressor.stream_writer(target, closefd=False)


class CompressLz4(CompressNone):
    extension = '.lz4'

    def _wrap(self, target: BinaryIO) -> BinaryIO:
        return lz4.frame.LZ4FrameFile(target, mode='wb', compression_level=self.level)


class CompressManagerFactory:
    """Creates the sink for a compression method."""

    NONE = COMPRESS_NONE
    GZIP = COMPRESS_GZIP
    BZIP2 = COMPRESS_BZIP2
    ZSTANDARD = COMPRESS_ZSTANDARD
    LZ4 = COMPRESS_LZ4

    SINKS = {
        COMPRESS_NONE: CompressNone,
        COMPRESS_GZIP: CompressGzip,
        COMPRESS_BZIP2: CompressBzip2,
        COMPRESS_ZSTANDARD: CompressZstandard,
        COMPRESS_LZ4: CompressLz4,
    }

    @classmethod
    def create(cls, method: str, level: int = 0) -> CompressNone:
        sink_class = cls.SINKS.get(method.lower())
        if sink_class is None:
            raise ConfigurationError(f"Compression method ({method}) is not defined yet")
        return sink_class(level)
