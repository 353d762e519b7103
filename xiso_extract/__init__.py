"""
Xbox Disc Image Extraction Utility

A Python package for reading Xbox disc images (XDVDFS, XGD2 and XGD3
layouts) and extracting their content to a local directory or to an
FTP server.
"""

from .constants import (
    ATTR_DIRECTORY,
    BUFFER_SIZE,
    DIR_PTR_SENTINEL,
    HEADER_MAGIC,
    HEADER_OFFSET,
    OFFSET_XGD2,
    OFFSET_XGD3,
    SECTOR_SIZE,
    SYSTEM_UPDATE_DIR,
)
from .exceptions import (
    CorruptImageError,
    FormatError,
    ImageIOError,
    LocalFsError,
    RemoteProtocolError,
    VerificationError,
    XisoError,
)
from .models import (
    DEFAULT_LAYOUT,
    DirectoryEntry,
    ExtractionStats,
    VolumeHeader,
    VolumeLayout,
)
from .header import locate_header
from .directory import DirectoryTreeDecoder, count_files, walk_entries
from .image import XisoImage
from .sinks import ExtractionTarget, FtpSink, LocalSink, Sink, open_target
from .extract import ExtractionEngine
from .formatter import OutputFormatter
from .utils import (
    default_output_path,
    is_remote_destination,
    parse_ftp_url,
    parse_list_line,
    validate_entry_name,
)
from .commands import cmd_extract, cmd_list

__version__ = "1.0.0"

__all__ = [
    # Image access
    "XisoImage",
    "locate_header",
    "DirectoryTreeDecoder",
    "walk_entries",
    "count_files",
    # Extraction
    "ExtractionEngine",
    "ExtractionTarget",
    "Sink",
    "LocalSink",
    "FtpSink",
    "open_target",
    # Data models
    "DirectoryEntry",
    "ExtractionStats",
    "VolumeHeader",
    "VolumeLayout",
    "DEFAULT_LAYOUT",
    # Exceptions
    "XisoError",
    "FormatError",
    "CorruptImageError",
    "ImageIOError",
    "LocalFsError",
    "RemoteProtocolError",
    "VerificationError",
    # Utilities
    "default_output_path",
    "is_remote_destination",
    "parse_ftp_url",
    "parse_list_line",
    "validate_entry_name",
    # Commands
    "cmd_list",
    "cmd_extract",
    # Output
    "OutputFormatter",
    # Constants
    "SECTOR_SIZE",
    "HEADER_OFFSET",
    "HEADER_MAGIC",
    "OFFSET_XGD2",
    "OFFSET_XGD3",
    "DIR_PTR_SENTINEL",
    "ATTR_DIRECTORY",
    "BUFFER_SIZE",
    "SYSTEM_UPDATE_DIR",
]
