"""
Exact-length reads with an explicit outcome.

A plain read() cannot tell "nothing left" from "cut short": both return
fewer bytes than asked. The record loop needs that difference, since only
a read that got zero bytes at a record boundary is a clean end of capture.
"""
from enum import Enum
from typing import BinaryIO, NamedTuple

DEFAULT_CHUNK_SIZE = 64 * 1024


class ReadStatus(Enum):
    FULL = 'full'     # all requested bytes
    SHORT = 'short'   # some bytes, then end of stream
    EMPTY = 'empty'   # end of stream before any byte


class ReadResult(NamedTuple):
    status: ReadStatus
    data: bytes


def read_exact(stream: BinaryIO, size: int, chunk_size: int = DEFAULT_CHUNK_SIZE) -> ReadResult:
    """
    Read exactly size bytes from stream.

    Keeps calling read() until size bytes arrived or the stream returns
    b"", so raw/unbuffered streams that return partial reads work too.
    Each read() asks for at most chunk_size bytes and the buffer only grows
    as data arrives.
    """
    if size == 0:
        return ReadResult(ReadStatus.FULL, b'')

    buffer = bytearray()
    while len(buffer) < size:
        chunk = stream.read(min(size - len(buffer), chunk_size))
        if not chunk:
            break
        buffer += chunk

    if len(buffer) == size:
        return ReadResult(ReadStatus.FULL, bytes(buffer))
    if not buffer:
        return ReadResult(ReadStatus.EMPTY, b'')
    return ReadResult(ReadStatus.SHORT, bytes(buffer))
