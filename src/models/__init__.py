"""
Capture file data models.
"""

from .capture import (
    CaptureHeader,
    RecordHeader,
    PacketRecord,
    FileMetadata,
    Capture,
)

__all__ = [
    'CaptureHeader',
    'RecordHeader',
    'PacketRecord',
    'FileMetadata',
    'Capture',
]
