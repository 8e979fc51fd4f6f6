"""
PCAP file format reader (legacy .pcap).

Reference: https://wiki.wireshark.org/Development/LibpcapFileFormat

File structure:
- 24-byte global header
- Repeated packet records:
  - 16-byte packet header
  - Packet data (incl_len bytes)

All multi-byte fields are decoded little-endian. The magic number is
stored as read; a byte-swapped file (magic 0xD4C3B2A1) is not converted.
"""

import logging
import os
import struct
from typing import Any, BinaryIO, Dict, Optional, Tuple

from models.capture import Capture, CaptureHeader, FileMetadata, PacketRecord, RecordHeader
from .byte_reader import DEFAULT_CHUNK_SIZE, ReadStatus, read_exact
from .config import LoaderConfig
from .exceptions import PcapAccessError, PcapHeaderError, PcapTruncatedError

logger = logging.getLogger(__name__)

GLOBAL_HEADER_SIZE = 24
RECORD_HEADER_SIZE = 16

# (field, byte offset, struct format)
GLOBAL_HEADER_FIELDS = (
    ('magic_number', 0, '<I'),
    ('version_major', 4, '<H'),
    ('version_minor', 6, '<H'),
    ('thiszone', 8, '<i'),
    ('sigfigs', 12, '<I'),
    ('snaplen', 16, '<I'),
    ('network', 20, '<I'),
)

RECORD_HEADER_FIELDS = (
    ('ts_sec', 0, '<I'),
    ('ts_usec', 4, '<I'),
    ('incl_len', 8, '<I'),
    ('orig_len', 12, '<I'),
)


def _decode_fields(layout, data: bytes) -> Dict[str, int]:
    return {name: struct.unpack_from(fmt, data, offset)[0] for name, offset, fmt in layout}


def decode_global_header(data: bytes) -> CaptureHeader:
    """
    Decode a 24-byte global header buffer.

    Raises:
        PcapHeaderError: If data is not exactly 24 bytes
    """
    if len(data) != GLOBAL_HEADER_SIZE:
        raise PcapHeaderError(
            f"Global header must be {GLOBAL_HEADER_SIZE} bytes, got {len(data)}",
            expected=GLOBAL_HEADER_SIZE,
            received=len(data),
        )
    return CaptureHeader(**_decode_fields(GLOBAL_HEADER_FIELDS, data))


def decode_record_header(data: bytes) -> RecordHeader:
    """
    Decode a 16-byte packet record header buffer.

    Raises:
        PcapTruncatedError: If data is not exactly 16 bytes
    """
    if len(data) != RECORD_HEADER_SIZE:
        raise PcapTruncatedError(
            f"Record header must be {RECORD_HEADER_SIZE} bytes, got {len(data)}",
            stage='record_header',
            expected=RECORD_HEADER_SIZE,
            received=len(data),
        )
    return RecordHeader(**_decode_fields(RECORD_HEADER_FIELDS, data))


def read_global_header(stream: BinaryIO) -> CaptureHeader:
    """
    Read and decode the global header from the start of stream.

    Raises:
        PcapHeaderError: If fewer than 24 bytes are available
    """
    result = read_exact(stream, GLOBAL_HEADER_SIZE)
    if result.status is not ReadStatus.FULL:
        raise PcapHeaderError(
            f"File too small for PCAP header: got {len(result.data)} of "
            f"{GLOBAL_HEADER_SIZE} bytes",
            offset=0,
            expected=GLOBAL_HEADER_SIZE,
            received=len(result.data),
        )
    return decode_global_header(result.data)


def read_packet(stream: BinaryIO, offset: int = GLOBAL_HEADER_SIZE,
                chunk_size: int = DEFAULT_CHUNK_SIZE) -> Optional[PacketRecord]:
    """
    Read one packet record starting at the current stream position.

    Args:
        stream: Binary stream positioned at a record boundary
        offset: Byte offset of that boundary, used in error reports
        chunk_size: Max bytes per read() while filling the data

    Returns:
        The record, or None if the stream ended exactly at the boundary.

    Raises:
        PcapTruncatedError: If the record header or data is cut short
    """
    result = read_exact(stream, RECORD_HEADER_SIZE, chunk_size)
    if result.status is ReadStatus.EMPTY:
        return None
    if result.status is ReadStatus.SHORT:
        raise PcapTruncatedError(
            f"Truncated packet header at offset {offset}: got {len(result.data)} "
            f"of {RECORD_HEADER_SIZE} bytes",
            stage='record_header',
            offset=offset,
            expected=RECORD_HEADER_SIZE,
            received=len(result.data),
        )

    header = decode_record_header(result.data)

    # incl_len is not checked against snaplen
    payload = read_exact(stream, header.incl_len, chunk_size)
    if payload.status is not ReadStatus.FULL:
        raise PcapTruncatedError(
            f"Truncated packet data at offset {offset}: got {len(payload.data)} "
            f"of {header.incl_len} bytes",
            stage='record_data',
            offset=offset,
            expected=header.incl_len,
            received=len(payload.data),
        )

    return PacketRecord(header=header, data=payload.data)


def read_packets(stream: BinaryIO, offset: int = GLOBAL_HEADER_SIZE,
                 chunk_size: int = DEFAULT_CHUNK_SIZE) -> Tuple[PacketRecord, ...]:
    """
    Read every packet record until a clean end of capture.

    Any truncated record aborts the whole read; records read before it
    are discarded with the exception.
    """
    packets = []
    while True:
        try:
            packet = read_packet(stream, offset, chunk_size)
        except PcapTruncatedError as e:
            logger.warning("Capture truncated after %d packets: %s", len(packets), e)
            raise
        if packet is None:
            break
        packets.append(packet)
        offset += RECORD_HEADER_SIZE + packet.incl_len

    logger.debug("End of capture at offset %d, %d packets", offset, len(packets))
    return tuple(packets)


def read_capture(stream: BinaryIO, metadata: Optional[FileMetadata] = None,
                 config: Optional[LoaderConfig] = None) -> Capture:
    """Decode a whole capture from an open binary stream."""
    config = config or LoaderConfig()

    header = read_global_header(stream)
    if config.log_header:
        logger.debug(
            "PCAP global header: magic=0x%08X version=%s network=%d snaplen=%d",
            header.magic_number, header.version, header.network, header.snaplen,
            extra={'pcap_header': header.to_dict()},
        )

    packets = read_packets(stream, GLOBAL_HEADER_SIZE, config.read_chunk_size)
    return Capture(header=header, packets=packets, metadata=metadata)


class PcapReader:
    """
    Reads a legacy PCAP file into a Capture.

    Usage:
        with PcapReader("capture.pcap") as reader:
            capture = reader.read()
    """

    # Link type (from pcap/bpf.h)
    DLT_EN10MB = 1        # Ethernet

    def __init__(self, filepath: str, config: Optional[LoaderConfig] = None):
        """
        Initialize PCAP reader.

        Args:
            filepath: Path to .pcap file
            config: Loader options, defaults when omitted
        """
        self.filepath = filepath
        self.config = config or LoaderConfig()
        self.file_handle = None
        self.metadata: Optional[FileMetadata] = None
        self._capture: Optional[Capture] = None

    def __enter__(self) -> 'PcapReader':
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def open(self):
        """
        Open the file and collect its metadata.

        Raises:
            PcapAccessError: If the file cannot be opened or stat'ed
        """
        try:
            self.file_handle = open(self.filepath, 'rb')
        except OSError as e:
            raise PcapAccessError(self.filepath, e.strerror or str(e)) from e

        try:
            self.metadata = FileMetadata.from_stat(self.filepath, os.fstat(self.file_handle.fileno()))
        except OSError as e:
            self.close()
            raise PcapAccessError(self.filepath, e.strerror or str(e)) from e

    def read(self) -> Capture:
        """
        Decode the whole file.

        Only the first call reads; later calls return the same Capture.

        Raises:
            RuntimeError: If the reader is not open
            PcapHeaderError: If the global header is incomplete
            PcapTruncatedError: If a packet record is cut short
        """
        if self._capture is not None:
            return self._capture
        if self.file_handle is None:
            raise RuntimeError("PcapReader is not open. Call open() first")

        self._capture = read_capture(self.file_handle, self.metadata, self.config)
        logger.debug("Read %d packets from %s", self._capture.packet_count, self.filepath)
        return self._capture

    def close(self):
        """Close the file handle. The decoded Capture stays available."""
        if self.file_handle is not None:
            self.file_handle.close()
            self.file_handle = None

    def get_session_info(self) -> Dict[str, Any]:
        """Summary of the decoded capture (reads it if needed)."""
        capture = self.read()
        return {
            'packet_count': capture.packet_count,
            'time_range': capture.time_range,
            'link_type': capture.header.network,
            'snaplen': capture.header.snaplen,
            'version': capture.header.version,
            'file_size': self.metadata.size if self.metadata else 0,
            'format': 'pcap',
            'byte_order': '<',
        }


def read_file(path: str, config: Optional[LoaderConfig] = None) -> Capture:
    """
    Parse the capture file at path.

    Returns the complete Capture or raises a PcapError subclass naming the
    stage that failed.
    """
    with PcapReader(path, config) as reader:
        return reader.read()
