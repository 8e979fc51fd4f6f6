# Capture data model
"""
Capture data models for pcapfile.

THESE MODELS ARE IMMUTABLE. A Capture is built once by the loader and is
read-only history afterwards: records, headers and metadata are frozen
dataclasses and the packet sequence is a tuple.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional, Tuple


@dataclass(frozen=True)
class CaptureHeader:
    """
    Global header found at the start of every legacy pcap file (24 bytes).

    Values are stored exactly as decoded. Interpreting magic_number or
    network is left to the consumer.
    """
    MAGIC_IDENTICAL = 0xA1B2C3D4
    MAGIC_SWAPPED = 0xD4C3B2A1

    magic_number: int
    """Format/byte-order marker (u32)"""

    version_major: int
    version_minor: int

    thiszone: int
    """GMT to local correction in seconds (signed)"""

    sigfigs: int
    """Accuracy of timestamps, 0 in practice"""

    snaplen: int
    """Max bytes captured per packet"""

    network: int
    """Link-layer type (libpcap LINKTYPE_*, 1 = Ethernet)"""

    @property
    def is_swapped(self) -> bool:
        """True if the magic number reads as the byte-swapped marker."""
        return self.magic_number == self.MAGIC_SWAPPED

    @property
    def version(self) -> str:
        return f"{self.version_major}.{self.version_minor}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'magic_number': self.magic_number,
            'magic_hex': f"0x{self.magic_number:08X}",
            'version_major': self.version_major,
            'version_minor': self.version_minor,
            'thiszone': self.thiszone,
            'sigfigs': self.sigfigs,
            'snaplen': self.snaplen,
            'network': self.network,
        }


@dataclass(frozen=True)
class RecordHeader:
    """Per-record header (16 bytes) preceding each packet's data."""
    ts_sec: int
    ts_usec: int

    incl_len: int
    """Bytes stored in the file for this packet"""

    orig_len: int
    """Bytes the packet had on the wire"""

    @property
    def timestamp_us(self) -> int:
        """Microseconds since Unix epoch."""
        return self.ts_sec * 1_000_000 + self.ts_usec

    @property
    def is_truncated(self) -> bool:
        """True if captured length < original length (snaplen limited)."""
        return self.incl_len < self.orig_len


@dataclass(frozen=True)
class PacketRecord:
    """
    One captured packet: its record header plus exactly incl_len bytes.

    A record whose data length disagrees with its header cannot be built.
    """
    header: RecordHeader
    data: bytes

    def __post_init__(self):
        if len(self.data) != self.header.incl_len:
            raise ValueError(
                f"Packet data is {len(self.data)} bytes, "
                f"header declares incl_len={self.header.incl_len}"
            )
        # Keep the payload immutable even if a bytearray was handed in
        if not isinstance(self.data, bytes):
            object.__setattr__(self, 'data', bytes(self.data))

    @property
    def ts_sec(self) -> int:
        return self.header.ts_sec

    @property
    def ts_usec(self) -> int:
        return self.header.ts_usec

    @property
    def incl_len(self) -> int:
        return self.header.incl_len

    @property
    def orig_len(self) -> int:
        return self.header.orig_len

    @property
    def timestamp_us(self) -> int:
        return self.header.timestamp_us


@dataclass(frozen=True)
class FileMetadata:
    """Filesystem facts about the capture file, taken when it was opened."""
    path: str
    size: int
    modified: float
    created: float
    readonly: bool
    accessed: float = field(default=0.0, compare=False)
    """Reading the file may bump atime, so it is left out of equality."""

    @classmethod
    def from_stat(cls, path: str, st: os.stat_result) -> 'FileMetadata':
        # st_birthtime only exists on some platforms; ctime is the fallback
        created = getattr(st, 'st_birthtime', st.st_ctime)
        return cls(
            path=path,
            size=st.st_size,
            modified=st.st_mtime,
            created=created,
            readonly=not (st.st_mode & 0o222),
            accessed=st.st_atime,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'path': self.path,
            'size': self.size,
            'modified': self.modified,
            'accessed': self.accessed,
            'created': self.created,
            'readonly': self.readonly,
        }


@dataclass(frozen=True, repr=False)
class Capture:
    """
    A fully parsed capture file.

    packets are in file order. The tuple is complete: a Capture only
    exists for files that decoded cleanly to the last record.
    """
    header: CaptureHeader
    packets: Tuple[PacketRecord, ...] = field(default_factory=tuple)
    metadata: Optional[FileMetadata] = None

    def __post_init__(self):
        if not isinstance(self.packets, tuple):
            object.__setattr__(self, 'packets', tuple(self.packets))

    def __len__(self) -> int:
        return len(self.packets)

    def __iter__(self) -> Iterator[PacketRecord]:
        return iter(self.packets)

    def __repr__(self) -> str:
        # Listing every packet makes the repr unreadable for real captures
        return (
            f"Capture(header={self.header!r}, "
            f"packet_count={self.packet_count}, "
            f"metadata={self.metadata!r})"
        )

    @property
    def packet_count(self) -> int:
        return len(self.packets)

    @property
    def time_range(self) -> Tuple[int, int]:
        """(first, last) record timestamps in microseconds, (0, 0) if empty."""
        if not self.packets:
            return (0, 0)
        return (self.packets[0].timestamp_us, self.packets[-1].timestamp_us)
