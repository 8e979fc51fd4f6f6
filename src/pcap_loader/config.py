"""
Loader configuration.
"""
from dataclasses import dataclass

from .byte_reader import DEFAULT_CHUNK_SIZE


@dataclass(frozen=True)
class LoaderConfig:
    """Options for reading a capture file."""
    read_chunk_size: int = DEFAULT_CHUNK_SIZE
    """Upper bound on a single read() call while filling a payload"""

    log_header: bool = False
    """Emit the decoded global header as a structured DEBUG log record"""

    def __post_init__(self):
        if self.read_chunk_size <= 0:
            raise ValueError(f"read_chunk_size must be positive, got {self.read_chunk_size}")
