"""
Extraction destinations.

A Sink is where extracted directories and files are written. The
extraction engine only talks to the abstract capability set below, so
local and FTP destinations behave identically from its point of view.
"""

import ftplib
import os
import posixpath
import socket
import stat
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO

from .constants import FTP_FILE_UNAVAILABLE
from .exceptions import LocalFsError, RemoteProtocolError
from .logging_config import get_logger
from .utils import FtpLocation, is_remote_destination, parse_ftp_url, parse_list_line

logger = get_logger('sinks')


class Sink(ABC):
    """
    Abstract extraction destination.

    Subclasses must implement:
    - Paths: join()
    - Directories: directory_exists(), create_directory(), make_root()
    - Files: open_write_stream(), write(), finalize(), query_size()
    """

    @abstractmethod
    def join(self, parent: str, name: str) -> str:
        """Path of name inside parent."""
        pass

    @abstractmethod
    def directory_exists(self, path: str) -> bool:
        pass

    @abstractmethod
    def create_directory(self, path: str) -> None:
        """Create a directory; never an error if it already exists."""
        pass

    @abstractmethod
    def make_root(self, path: str) -> None:
        """Create the destination root, including missing parents."""
        pass

    @abstractmethod
    def open_write_stream(self, path: str) -> Any:
        """Open path for writing, truncating any existing file."""
        pass

    @abstractmethod
    def write(self, writer: Any, data: bytes) -> None:
        pass

    @abstractmethod
    def finalize(self, writer: Any) -> None:
        """Flush and close a write stream."""
        pass

    @abstractmethod
    def discard(self, writer: Any) -> None:
        """Close a write stream after a failed write, without raising."""
        pass

    @abstractmethod
    def query_size(self, path: str) -> int | None:
        """Size of an existing file, or None if there is none."""
        pass

    def close(self) -> None:
        """Release the destination."""
        pass


class LocalSink(Sink):
    """Local filesystem destination."""

    def join(self, parent: str, name: str) -> str:
        return os.path.join(parent, name)

    def directory_exists(self, path: str) -> bool:
        return os.path.isdir(path)

    def create_directory(self, path: str) -> None:
        try:
            os.mkdir(path)
        except FileExistsError:
            if not os.path.isdir(path):
                raise LocalFsError(f"Cannot create directory {path!r}: a file is in the way")
        except OSError as e:
            raise LocalFsError(f"Error creating output directory {path!r}: {e}")

    def make_root(self, path: str) -> None:
        try:
            Path(path).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise LocalFsError(f"Error creating output directory {path!r}: {e}")

    def open_write_stream(self, path: str) -> BinaryIO:
        try:
            return open(path, 'wb')
        except OSError as e:
            raise LocalFsError(f"Error creating file {path!r}: {e}")

    def write(self, writer: BinaryIO, data: bytes) -> None:
        try:
            writer.write(data)
        except OSError as e:
            raise LocalFsError(f"Error writing to file {writer.name!r}: {e}")

    def finalize(self, writer: BinaryIO) -> None:
        try:
            writer.close()
        except OSError as e:
            raise LocalFsError(f"Error flushing file {writer.name!r}: {e}")

    def discard(self, writer: BinaryIO) -> None:
        try:
            writer.close()
        except OSError as e:
            logger.debug("Error closing %s after failed write: %s", writer.name, e)

    def query_size(self, path: str) -> int | None:
        try:
            st = os.stat(path)
        except FileNotFoundError:
            return None
        except OSError as e:
            raise LocalFsError(f"Error getting metadata for {path!r}: {e}")

        if stat.S_ISDIR(st.st_mode):
            raise LocalFsError(f"Expected a file but found a directory: {path!r}")
        return st.st_size


@dataclass
class FtpUpload:
    """An open STOR data connection."""
    path: str
    conn: socket.socket


def _reply_code(error: Exception) -> str:
    return str(error)[:3]


class FtpSink(Sink):
    """
    FTP server destination.

    All paths are absolute remote paths. The session is left in binary
    mode after connecting.
    """

    def __init__(self, ftp: ftplib.FTP):
        self.ftp = ftp

    @classmethod
    def connect(cls, location: FtpLocation) -> 'FtpSink':
        """Connect and log in to the server named by location."""
        ftp = ftplib.FTP()
        try:
            ftp.connect(location.host, location.port)
            ftp.login(location.user, location.password)
            ftp.voidcmd('TYPE I')
        except ftplib.all_errors as e:
            ftp.close()
            raise RemoteProtocolError(
                f"Error connecting to ftp server {location.host}:{location.port}: {e}"
            )
        logger.debug("Connected to %s:%d as %s", location.host, location.port, location.user)
        return cls(ftp)

    def join(self, parent: str, name: str) -> str:
        return posixpath.join(parent, name)

    def directory_exists(self, path: str) -> bool:
        try:
            self.ftp.cwd(path)
        except ftplib.error_perm as e:
            if _reply_code(e) == FTP_FILE_UNAVAILABLE:
                return False
            raise RemoteProtocolError(f"Error changing directory {path!r} on ftp server: {e}")
        except ftplib.all_errors as e:
            raise RemoteProtocolError(f"Error changing directory {path!r} on ftp server: {e}")
        return True

    def create_directory(self, path: str) -> None:
        # Servers differ on recursive MKD, so go one component at a time
        current = ''
        for segment in (s for s in path.split('/') if s):
            current = f"{current}/{segment}"
            if not self.directory_exists(current):
                try:
                    self.ftp.mkd(current)
                except ftplib.all_errors as e:
                    raise RemoteProtocolError(
                        f"Error creating directory {current!r} on ftp server: {e}"
                    )
            self._cwd(current)

    def make_root(self, path: str) -> None:
        self.create_directory(path)

    def open_write_stream(self, path: str) -> FtpUpload:
        try:
            self.ftp.voidcmd('TYPE I')
            conn = self.ftp.transfercmd(f'STOR {path}')
        except ftplib.all_errors as e:
            raise RemoteProtocolError(f"Error opening write stream for file {path!r}: {e}")
        return FtpUpload(path, conn)

    def write(self, writer: FtpUpload, data: bytes) -> None:
        try:
            writer.conn.sendall(data)
        except OSError as e:
            raise RemoteProtocolError(f"Error writing to ftp file {writer.path!r}: {e}")

    def finalize(self, writer: FtpUpload) -> None:
        try:
            writer.conn.close()
            self.ftp.voidresp()
        except ftplib.all_errors as e:
            raise RemoteProtocolError(f"Error finalizing ftp write stream for {writer.path!r}: {e}")

    def discard(self, writer: FtpUpload) -> None:
        try:
            writer.conn.close()
            self.ftp.voidresp()
        except ftplib.all_errors as e:
            logger.debug("Error closing ftp write stream for %s after failed write: %s",
                         writer.path, e)

    def query_size(self, path: str) -> int | None:
        """
        Size of a remote file via SIZE.

        550 means the file is not there. Some console FTP servers overflow
        the SIZE reply for files over 2 GiB; a garbled reply is recovered
        by listing the parent directory instead.
        """
        try:
            resp = self.ftp.sendcmd(f'SIZE {path}')
        except ftplib.error_perm as e:
            if _reply_code(e) == FTP_FILE_UNAVAILABLE:
                return None
            raise RemoteProtocolError(f"ftp file size error for {path!r}: {e}")
        except ftplib.error_proto as e:
            logger.debug("Malformed SIZE reply for %s (%s), falling back to LIST", path, e)
            return self._size_from_listing(path)
        except ftplib.all_errors as e:
            raise RemoteProtocolError(f"ftp file size error for {path!r}: {e}")

        value = resp[3:].strip()
        if resp[:3] != '213' or not value.isdigit():
            logger.debug("Unusable SIZE reply for %s: %r, falling back to LIST", path, resp)
            return self._size_from_listing(path)
        return int(value)

    def _size_from_listing(self, path: str) -> int:
        parent, name = posixpath.split(path)
        lines: list[str] = []
        try:
            self.ftp.cwd(parent or '/')
            try:
                self.ftp.retrlines('LIST', lines.append)
            finally:
                # retrlines leaves the session in ASCII mode
                self.ftp.voidcmd('TYPE I')
        except ftplib.all_errors as e:
            raise RemoteProtocolError(f"ftp list error for {parent!r}: {e}")

        size = None
        for line in lines:
            parsed = parse_list_line(line)
            if parsed is not None and parsed[0] == name:
                size = parsed[1]

        if size is None:
            raise RemoteProtocolError(f"Unable to determine size of {path!r} from directory listing")
        return size

    def _cwd(self, path: str) -> None:
        try:
            self.ftp.cwd(path)
        except ftplib.all_errors as e:
            raise RemoteProtocolError(f"Error changing directory {path!r} on ftp server: {e}")

    def close(self) -> None:
        try:
            self.ftp.quit()
        except ftplib.all_errors as e:
            logger.debug("QUIT failed (%s), closing connection", e)
            self.ftp.close()


@dataclass
class ExtractionTarget:
    """A sink and the root path extraction writes under, for one run."""
    sink: Sink
    root: str

    def close(self) -> None:
        self.sink.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def open_target(destination: str) -> ExtractionTarget:
    """
    Build the extraction target for a destination string.

    'ftp://' URLs connect to the server; anything else is a local
    directory path.
    """
    if is_remote_destination(destination):
        location = parse_ftp_url(destination)
        return ExtractionTarget(FtpSink.connect(location), location.path)
    return ExtractionTarget(LocalSink(), destination)
