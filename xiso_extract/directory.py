"""
XDVDFS directory tree decoding.

Each directory is a node-table region of whole sectors holding a binary
search tree of variable-length records:

    left_ptr   u16   left child, in 4-byte units from the region start
    right_ptr  u16   right child, in 4-byte units from the region start
    sector     u32   data start (node-table region for directories)
    size       u32   data length
    attributes u8    0x10 = directory
    name_len   u8
    name       name_len bytes, padded to a 4-byte boundary

A record with either pointer set to 0xFFFF is sector fill, not an entry.
"""

from collections.abc import Iterator
from typing import BinaryIO

from .constants import DIR_RECORD_HEADER_SIZE
from .exceptions import CorruptImageError, ImageIOError
from .logging_config import get_logger
from .models import DirectoryEntry, VolumeHeader

logger = get_logger('directory')

STRATEGY_TREE = 'tree'
STRATEGY_SCAN = 'scan'
STRATEGIES = (STRATEGY_TREE, STRATEGY_SCAN)


class DirectoryTreeDecoder:
    """
    Decode directory regions into ordered listings.

    Subdirectories are resolved eagerly, depth-first, so the returned
    listing is the complete tree below the requested region.

    Strategies:
        tree - follow left/right pointers from the record at offset 0
        scan - read every record of every sector in the region
    """

    def __init__(self, file: BinaryIO, header: VolumeHeader, strategy: str = STRATEGY_TREE):
        if strategy not in STRATEGIES:
            raise ValueError(f"Unknown decode strategy: {strategy}")
        self.file = file
        self.header = header
        self.strategy = strategy
        self.duplicates_dropped = 0
        self._open_regions: set[int] = set()

    def decode_root(self) -> list[DirectoryEntry]:
        """Decode the whole tree starting at the root directory."""
        return self.decode(self.header.root_dir_sector, self.header.root_dir_size)

    def decode(self, sector: int, size: int) -> list[DirectoryEntry]:
        """
        Decode the node-table region (sector, size).

        Returns entries sorted by case-insensitive name, unique by exact name.

        Raises:
            ImageIOError: A sector of the region could not be read
            CorruptImageError: The tree points outside its region or loops
        """
        if size == 0:
            return []

        # A directory nested inside itself would never terminate
        if sector in self._open_regions:
            raise CorruptImageError(f"Directory at sector {sector} contains itself")

        self._open_regions.add(sector)
        try:
            if self.strategy == STRATEGY_SCAN:
                entries = self._scan(sector, size)
            else:
                entries = self._walk_tree(sector, size)
        finally:
            self._open_regions.discard(sector)

        return self._finalize(entries, sector)

    def read_sector(self, sector: int) -> bytes:
        """Read one full sector of the data region."""
        sector_size = self.header.sector_size
        position = self.header.sector_position(sector)
        try:
            self.file.seek(position)
            data = self.file.read(sector_size)
        except OSError as e:
            raise ImageIOError(f"Unable to read sector {sector} at {position:#x}: {e}")

        if len(data) < sector_size:
            raise ImageIOError(
                f"Unexpected end of image reading sector {sector} at {position:#x}. Broken ISO?"
            )
        return data

    def read_region(self, sector: int, size: int) -> bytes:
        """Read all sectors of a node-table region."""
        count = self.header.sector_count(size)
        return b''.join(self.read_sector(sector + i) for i in range(count))

    def _resolve(self, entry: DirectoryEntry) -> None:
        if entry.is_directory:
            entry.children = self.decode(entry.sector, entry.size)

    def _scan(self, sector: int, size: int) -> list[DirectoryEntry]:
        entries = []
        for i in range(self.header.sector_count(size)):
            data = self.read_sector(sector + i)
            offset = 0
            while offset + DIR_RECORD_HEADER_SIZE <= len(data):
                entry, offset = DirectoryEntry.from_buffer(data, offset)
                if entry.is_sentinel:
                    break
                self._resolve(entry)
                entries.append(entry)
        return entries

    def _walk_tree(self, sector: int, size: int) -> list[DirectoryEntry]:
        region = self.read_region(sector, size)
        entries = []
        visited: set[int] = set()
        pending: list[DirectoryEntry] = []
        offset: int | None = 0

        # In-order traversal with an explicit stack; large flat
        # directories can be far deeper than the recursion limit
        while True:
            while offset is not None:
                node = self._node_at(region, offset, sector, visited)
                if node is None:
                    break
                pending.append(node)
                offset = node.left * 4 if node.left else None

            if not pending:
                break

            node = pending.pop()
            self._resolve(node)
            entries.append(node)
            offset = node.right * 4 if node.right else None

        return entries

    def _node_at(
        self,
        region: bytes,
        offset: int,
        sector: int,
        visited: set[int]
    ) -> DirectoryEntry | None:
        if offset in visited:
            raise CorruptImageError(
                f"Directory tree at sector {sector} revisits record offset {offset}"
            )
        visited.add(offset)

        if offset + DIR_RECORD_HEADER_SIZE > len(region):
            raise CorruptImageError(
                f"Directory tree at sector {sector} points outside its region (offset {offset})"
            )

        entry, _ = DirectoryEntry.from_buffer(region, offset)
        if entry.is_sentinel:
            return None
        return entry

    def _finalize(self, entries: list[DirectoryEntry], sector: int) -> list[DirectoryEntry]:
        # TODO: find out why real images repeat names within one directory
        entries.sort(key=lambda e: e.name.lower())

        listing = []
        seen: set[str] = set()
        for entry in entries:
            if entry.name in seen:
                self.duplicates_dropped += 1
                logger.debug("Dropping duplicate entry %r in directory at sector %d",
                              entry.name, sector)
                continue
            seen.add(entry.name)
            listing.append(entry)
        return listing


def walk_entries(
    entries: list[DirectoryEntry],
    prefix: str = ''
) -> Iterator[tuple[str, DirectoryEntry]]:
    """Yield ('/'-joined path, entry) for every node, depth-first."""
    for entry in entries:
        path = f"{prefix}/{entry.name}"
        yield path, entry
        if entry.is_directory:
            yield from walk_entries(entry.children, path)


def count_files(entries: list[DirectoryEntry]) -> int:
    """Count file (non-directory) entries in a tree."""
    return sum(1 for _, entry in walk_entries(entries) if not entry.is_directory)
