"""
Volume header detection for Xbox disc images.

An image holds its game partition at one of two known offsets, depending
on the disc layout it was dumped from. The partition starts with an XDVDFS
volume descriptor:

    offset 0x10000:  "MICROSOFT*XBOX*MEDIA"  (20 bytes)
                     root_dir_sector         (u32, little-endian)
                     root_dir_size           (u32, little-endian)
"""

import struct
from typing import BinaryIO

from .exceptions import FormatError, ImageIOError
from .logging_config import get_logger
from .models import DEFAULT_LAYOUT, VolumeHeader, VolumeLayout

logger = get_logger('header')

_ROOT_POINTER = struct.Struct('<II')


def _read_at(file: BinaryIO, position: int, size: int) -> bytes:
    """Seek and read; a short read at end of file returns fewer bytes."""
    try:
        file.seek(position)
        return file.read(size)
    except OSError as e:
        raise ImageIOError(f"Error reading image at offset {position:#x}: {e}")


def locate_header(file: BinaryIO, layout: VolumeLayout = DEFAULT_LAYOUT) -> VolumeHeader:
    """
    Find the volume header and return the root directory pointer.

    Candidates are probed in layout order; the first one whose magic
    matches becomes the root offset for all further addressing.

    Raises:
        FormatError: No candidate carries the magic
        ImageIOError: The image could not be read
    """
    magic_len = len(layout.magic)

    for variant, offset in layout.candidate_offsets:
        position = offset + layout.header_offset
        data = _read_at(file, position, magic_len + _ROOT_POINTER.size)

        if data[:magic_len] != layout.magic:
            logger.debug("No %s header at %#x", variant, position)
            continue

        if len(data) < magic_len + _ROOT_POINTER.size:
            raise FormatError(f"Truncated {variant} volume header at {position:#x}")

        root_dir_sector, root_dir_size = _ROOT_POINTER.unpack_from(data, magic_len)
        logger.debug("Found %s header at %#x: root directory sector %d, %d bytes",
                     variant, position, root_dir_sector, root_dir_size)

        return VolumeHeader(
            variant=variant,
            root_offset=offset,
            root_dir_sector=root_dir_sector,
            root_dir_size=root_dir_size,
            sector_size=layout.sector_size,
        )

    raise FormatError("Unsupported XISO format: no volume header found")
