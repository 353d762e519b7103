"""
Extraction of a decoded directory tree to a sink.
"""

from collections.abc import Callable

from .constants import BUFFER_SIZE
from .exceptions import VerificationError
from .image import XisoImage
from .logging_config import get_logger
from .models import DirectoryEntry, ExtractionStats
from .sinks import Sink
from .utils import validate_entry_name

logger = get_logger('extract')

# Called after every chunk with (destination path, bytes done, file size)
ProgressCallback = Callable[[str, int, int], None]


class ExtractionEngine:
    """
    Copy files out of an image, one file and one chunk at a time.

    A destination file that already has the recorded size is left alone;
    that size check is the only resume mechanism. Every written file is
    checked for the recorded size afterwards.
    """

    def __init__(
        self,
        image: XisoImage,
        sink: Sink,
        chunk_size: int = BUFFER_SIZE,
        progress: ProgressCallback | None = None
    ):
        if chunk_size <= 0:
            raise ValueError(f"Invalid chunk size: {chunk_size}")
        self.image = image
        self.sink = sink
        self.chunk_size = chunk_size
        self.progress = progress
        self.stats = ExtractionStats()

    def extract(
        self,
        listing: list[DirectoryEntry],
        destination_root: str,
        exclude: str | None = None
    ) -> int:
        """
        Extract a listing below destination_root.

        Args:
            listing: Top-level entries, usually XisoImage.root
            destination_root: Existing directory on the sink
            exclude: Exact top-level name to leave out entirely

        Returns:
            Number of files written in this run. Files skipped because the
            destination already had the right size are not included; see
            stats.files_skipped.

        Raises:
            VerificationError: A written file has the wrong size
            ImageIOError, LocalFsError, RemoteProtocolError: I/O failures
        """
        if exclude is not None:
            listing = [e for e in listing if e.name != exclude]

        before = self.stats.files_extracted
        self._extract_entries(listing, destination_root)
        return self.stats.files_extracted - before

    def _extract_entries(self, entries: list[DirectoryEntry], parent: str) -> None:
        for entry in entries:
            path = self.sink.join(parent, validate_entry_name(entry.name))
            if entry.is_directory:
                self._ensure_directory(path)
                self._extract_entries(entry.children, path)
            else:
                self.extract_file(entry, path)

    def _ensure_directory(self, path: str) -> None:
        if not self.sink.directory_exists(path):
            logger.debug("Creating directory %s", path)
            self.sink.create_directory(path)
            self.stats.directories_created += 1

    def extract_file(self, entry: DirectoryEntry, path: str) -> bool:
        """
        Extract one file entry to path.

        Returns False if the destination already had the recorded size
        and nothing was written.
        """
        existing = self.sink.query_size(path)
        if existing == entry.size:
            logger.debug("Skipping %s: already %d bytes", path, existing)
            self.stats.files_skipped += 1
            return False
        if existing is not None:
            logger.warning("Corrupt destination file: %s (%d of %d bytes). Replacing.",
                           path, existing, entry.size)
            self.stats.files_replaced += 1

        writer = self.sink.open_write_stream(path)
        done = 0
        try:
            for chunk in self.image.iter_file_chunks(entry, self.chunk_size):
                self.sink.write(writer, chunk)
                done += len(chunk)
                if self.progress:
                    self.progress(path, done, entry.size)
        except BaseException:
            self.sink.discard(writer)
            raise
        self.sink.finalize(writer)

        actual = self.sink.query_size(path)
        if actual != entry.size:
            raise VerificationError(path, entry.size, actual)

        self.stats.files_extracted += 1
        self.stats.bytes_written += done
        logger.info("%s", path)
        return True
