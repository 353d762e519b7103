"""
Xbox disc image session: header, directory tree and payload reads.
"""

from collections.abc import Iterator
from typing import BinaryIO

from .constants import BUFFER_SIZE
from .directory import STRATEGY_TREE, DirectoryTreeDecoder, count_files, walk_entries
from .exceptions import ImageIOError
from .header import locate_header
from .logging_config import get_logger
from .models import DEFAULT_LAYOUT, DirectoryEntry, VolumeLayout

logger = get_logger('image')


class XisoImage:
    """
    An opened, read-only Xbox disc image.

    The full directory tree is decoded once when the image is opened and
    is read-only afterwards. All reads seek to an absolute position first,
    so the single file handle must not be shared between threads.
    """

    def __init__(
        self,
        image_path: str,
        layout: VolumeLayout = DEFAULT_LAYOUT,
        strategy: str = STRATEGY_TREE
    ):
        self.image_path = image_path
        self._file: BinaryIO | None = None
        try:
            self._file = open(image_path, 'rb')
        except OSError as e:
            raise ImageIOError(f"Error opening input file: {e}")

        try:
            self.header = locate_header(self._file, layout)
            self.decoder = DirectoryTreeDecoder(self._file, self.header, strategy)
            self.root: list[DirectoryEntry] = self.decoder.decode_root()
        except Exception:
            self.close()
            raise

        if self.decoder.duplicates_dropped:
            logger.debug("Dropped %d duplicate directory entries",
                         self.decoder.duplicates_dropped)

    @property
    def root_offset(self) -> int:
        return self.header.root_offset

    @property
    def sector_size(self) -> int:
        return self.header.sector_size

    def read_at(self, position: int, size: int) -> bytes:
        """Read exactly size bytes at an absolute image offset."""
        if self._file is None:
            raise ImageIOError("Disk image not open")
        try:
            self._file.seek(position)
            data = self._file.read(size)
        except OSError as e:
            raise ImageIOError(f"Error reading from ISO file at {position:#x}: {e}")

        if len(data) != size:
            raise ImageIOError(
                f"Unexpected end of image at {position + len(data):#x}. Broken ISO?"
            )
        return data

    def iter_file_chunks(
        self,
        entry: DirectoryEntry,
        chunk_size: int = BUFFER_SIZE
    ) -> Iterator[bytes]:
        """
        Yield the payload of a file entry in chunks of at most chunk_size.

        Each chunk is read with its own absolute seek.
        """
        position = self.header.sector_position(entry.sector)
        remaining = entry.size
        while remaining > 0:
            length = min(chunk_size, remaining)
            yield self.read_at(position, length)
            position += length
            remaining -= length

    def walk(self) -> Iterator[tuple[str, DirectoryEntry]]:
        """Yield ('/'-rooted path, entry) for every node in the image."""
        return walk_entries(self.root)

    def count_files(self) -> int:
        return count_files(self.root)

    def close(self) -> None:
        """Close the disc image."""
        if self._file:
            self._file.close()
            self._file = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
