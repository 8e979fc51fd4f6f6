"""
Legacy pcap file loading.
"""

from .byte_reader import ReadResult, ReadStatus, read_exact
from .config import LoaderConfig
from .exceptions import (
    PcapError,
    PcapAccessError,
    PcapFormatError,
    PcapHeaderError,
    PcapTruncatedError,
)
from .pcap_reader import (
    PcapReader,
    decode_global_header,
    decode_record_header,
    read_capture,
    read_file,
    read_global_header,
    read_packet,
    read_packets,
)

__all__ = [
    'ReadResult',
    'ReadStatus',
    'read_exact',
    'LoaderConfig',
    'PcapError',
    'PcapAccessError',
    'PcapFormatError',
    'PcapHeaderError',
    'PcapTruncatedError',
    'PcapReader',
    'decode_global_header',
    'decode_record_header',
    'read_capture',
    'read_file',
    'read_global_header',
    'read_packet',
    'read_packets',
]
