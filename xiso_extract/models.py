"""
Data model classes for the Xbox disc image extraction utility.
"""

import struct
from dataclasses import dataclass, field

from .constants import (
    ATTR_ARCHIVE,
    ATTR_DIRECTORY,
    ATTR_HIDDEN,
    ATTR_READONLY,
    ATTR_SYSTEM,
    DIR_PTR_SENTINEL,
    DIR_RECORD_HEADER_SIZE,
    HEADER_MAGIC,
    HEADER_OFFSET,
    OFFSET_XGD2,
    OFFSET_XGD3,
    SECTOR_SIZE,
)
from .exceptions import CorruptImageError

_RECORD_HEADER = struct.Struct('<HHIIBB')


@dataclass(frozen=True)
class VolumeLayout:
    """Where to look for the volume header and how the data region is addressed."""
    candidate_offsets: tuple[tuple[str, int], ...] = (
        ("XGD2", OFFSET_XGD2),
        ("XGD3", OFFSET_XGD3),
    )
    header_offset: int = HEADER_OFFSET
    sector_size: int = SECTOR_SIZE
    magic: bytes = HEADER_MAGIC


DEFAULT_LAYOUT = VolumeLayout()


@dataclass(frozen=True)
class VolumeHeader:
    """Located volume header: the matched layout variant and the root directory."""
    variant: str
    root_offset: int      # Absolute byte offset of the data region
    root_dir_sector: int  # Relative to root_offset
    root_dir_size: int
    sector_size: int = SECTOR_SIZE

    def sector_position(self, sector: int) -> int:
        """Absolute byte offset of a data-region sector."""
        return self.root_offset + sector * self.sector_size

    def sector_count(self, size: int) -> int:
        """Number of sectors needed to hold size bytes."""
        return -(-size // self.sector_size)


@dataclass
class DirectoryEntry:
    """One node of an on-disk directory tree."""
    name: str
    sector: int       # Data start, relative to the volume root
    size: int         # File length, or node-table length for directories
    attributes: int
    left: int = 0     # Raw left-child pointer (in 4-byte units)
    right: int = 0    # Raw right-child pointer (in 4-byte units)
    children: list['DirectoryEntry'] = field(default_factory=list)

    @classmethod
    def from_buffer(cls, data: bytes, offset: int) -> tuple['DirectoryEntry', int]:
        """
        Parse a node record at offset.

        Returns the entry and the offset of the next 4-byte aligned record.
        """
        end = offset + DIR_RECORD_HEADER_SIZE
        if end > len(data):
            raise CorruptImageError(f"Directory record at offset {offset} overruns its region")

        left, right, sector, size, attributes, name_len = _RECORD_HEADER.unpack_from(data, offset)
        if left == DIR_PTR_SENTINEL or right == DIR_PTR_SENTINEL:
            # Padding fill; the name bytes are meaningless
            return cls(name='', sector=sector, size=size, attributes=attributes,
                       left=left, right=right), end

        name_end = end + name_len
        if name_end > len(data):
            raise CorruptImageError(f"Directory record name at offset {offset} overruns its region")

        name = data[end:name_end].decode('utf-8', errors='replace')
        pad = (4 - name_end % 4) % 4

        entry = cls(
            name=name,
            sector=sector,
            size=size,
            attributes=attributes,
            left=left,
            right=right,
        )
        return entry, name_end + pad

    def to_bytes(self) -> bytes:
        """Serialize to an unpadded node record."""
        raw_name = self.name.encode('utf-8')
        return _RECORD_HEADER.pack(
            self.left, self.right, self.sector, self.size,
            self.attributes, len(raw_name)
        ) + raw_name

    @property
    def is_sentinel(self) -> bool:
        """Unused tree slot, not a real entry."""
        return self.left == DIR_PTR_SENTINEL or self.right == DIR_PTR_SENTINEL

    @property
    def is_directory(self) -> bool:
        return bool(self.attributes & ATTR_DIRECTORY)

    def attr_string(self) -> str:
        """Return attribute string like 'RHSDA'."""
        attrs = []
        if self.attributes & ATTR_READONLY:
            attrs.append('R')
        if self.attributes & ATTR_HIDDEN:
            attrs.append('H')
        if self.attributes & ATTR_SYSTEM:
            attrs.append('S')
        if self.attributes & ATTR_DIRECTORY:
            attrs.append('D')
        if self.attributes & ATTR_ARCHIVE:
            attrs.append('A')
        return ''.join(attrs) if attrs else '-'


@dataclass
class ExtractionStats:
    """Counters collected during one extraction run."""
    files_extracted: int = 0
    files_skipped: int = 0
    files_replaced: int = 0
    directories_created: int = 0
    bytes_written: int = 0
