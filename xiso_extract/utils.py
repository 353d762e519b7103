"""
Utility functions for the Xbox disc image extraction utility.
"""

import os
from dataclasses import dataclass
from urllib.parse import unquote, urlsplit

from .constants import (
    FTP_DEFAULT_PASSWORD,
    FTP_DEFAULT_PORT,
    FTP_DEFAULT_USER,
    FTP_SCHEME,
)
from .exceptions import CorruptImageError, RemoteProtocolError


@dataclass(frozen=True)
class FtpLocation:
    """Connection details and remote root parsed from an ftp:// URL."""
    host: str
    port: int
    user: str
    password: str
    path: str


def is_remote_destination(destination: str) -> bool:
    """Check if a destination names an FTP server rather than a local directory."""
    return destination.lower().startswith(FTP_SCHEME)


def parse_ftp_url(url: str) -> FtpLocation:
    """
    Parse 'ftp://[user[:password]@]host[:port][/path]'.

    Missing credentials default to the xbox/xbox pair used by dashboard
    FTP servers. The path is always absolute; '/' when omitted.

    Examples:
        'ftp://192.168.1.20/E/Games/Halo' -> host '192.168.1.20', port 21,
                                             path '/E/Games/Halo'
        'ftp://me:pw@box:2121/'          -> user 'me', port 2121, path '/'
    """
    parts = urlsplit(url)
    if parts.scheme.lower() != 'ftp' or not parts.hostname:
        raise RemoteProtocolError(f"Error parsing ftp url {url!r}")

    try:
        port = parts.port or FTP_DEFAULT_PORT
    except ValueError as e:
        raise RemoteProtocolError(f"Error parsing ftp url {url!r}: {e}")

    user = unquote(parts.username) if parts.username else FTP_DEFAULT_USER
    password = unquote(parts.password) if parts.password else FTP_DEFAULT_PASSWORD

    segments = [unquote(s) for s in parts.path.split('/') if s]
    path = '/' + '/'.join(segments)

    return FtpLocation(host=parts.hostname, port=port, user=user,
                       password=password, path=path)


def default_output_path(image_path: str) -> str:
    """Destination used when none is given: the image path without its extension."""
    return os.path.splitext(image_path)[0]


def validate_entry_name(name: str) -> str:
    """
    Reject names that cannot be used as a single path component.

    Raises CorruptImageError for empty names, '.', '..', and names
    containing path separators or NUL.
    """
    if name in ('', '.', '..') or any(c in name for c in '/\\\0'):
        raise CorruptImageError(f"Unsafe entry name in image: {name!r}")
    return name


def parse_list_line(line: str) -> tuple[str, int] | None:
    """
    Parse one line of an FTP LIST reply into (name, size).

    Handles Unix 'ls -l' style and MS-DOS style listings. Returns None
    for directories, totals, and lines that cannot be parsed.

    Examples:
        '-rw-r--r-- 1 xbox xbox 4831838208 Jan 01 00:00 default.xbe'
            -> ('default.xbe', 4831838208)
        '01-01-01  12:00AM           1024 default.xbe'
            -> ('default.xbe', 1024)
    """
    parts = line.split(None, 8)
    if len(parts) == 9 and parts[0][:1] in ('-', 'l'):
        if parts[4].isdigit():
            return parts[8], int(parts[4])
        return None

    parts = line.split(None, 3)
    if len(parts) == 4 and parts[0][:1].isdigit() and parts[2].isdigit():
        return parts[3], int(parts[2])

    return None
