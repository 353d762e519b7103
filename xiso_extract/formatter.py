"""
Output formatting for the Xbox disc image extraction utility.
"""

import json
import sys

from .directory import walk_entries
from .models import DirectoryEntry, ExtractionStats


class OutputFormatter:
    """Handle output formatting (text or JSON)."""

    def __init__(self, json_mode: bool = False, show_progress: bool = True):
        self.json_mode = json_mode
        self.show_progress = show_progress and not json_mode and sys.stderr.isatty()

    def success(self, message: str, **data) -> None:
        """Output success message."""
        if self.json_mode:
            output = {"status": "success", "message": message, **data}
            print(json.dumps(output))
        else:
            print(message)

    def error(self, message: str) -> None:
        """Output error message."""
        if self.json_mode:
            output = {"status": "error", "message": message}
            print(json.dumps(output))
        else:
            print(f"Error: {message}", file=sys.stderr)

    def list_tree(self, entries: list[DirectoryEntry], image_path: str = "") -> None:
        """Output every file of a decoded tree as a '/'-rooted path."""
        files = [(path, entry) for path, entry in walk_entries(entries)
                 if not entry.is_directory]

        if self.json_mode:
            output = {
                "status": "success",
                "image": image_path,
                "files": [
                    {
                        "path": path,
                        "size": entry.size,
                        "sector": entry.sector,
                        "attr": entry.attr_string(),
                    }
                    for path, entry in files
                ],
            }
            print(json.dumps(output))
            return

        print(f"Printing content of {image_path}")
        for path, _ in files:
            print(path)
        print()
        print(f"Number of files: {len(files)}")

    def progress(self, path: str, done: int, total: int) -> None:
        """Single-line byte counter for the file being written."""
        if not self.show_progress:
            return
        end = '\n' if done >= total else ''
        print(f"\r{path}: {done:,} / {total:,} bytes", end=end, file=sys.stderr, flush=True)

    def extraction_summary(self, stats: ExtractionStats, source: str, dest: str) -> None:
        """Output the result of an extraction run."""
        message = f"Files extracted: {stats.files_extracted}"
        if stats.files_skipped:
            message += f" ({stats.files_skipped} already present, skipped)"
        self.success(
            message,
            source=source,
            dest=dest,
            files=stats.files_extracted,
            skipped=stats.files_skipped,
            replaced=stats.files_replaced,
            directories=stats.directories_created,
            bytes=stats.bytes_written,
        )
