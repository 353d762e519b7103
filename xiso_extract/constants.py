"""
Constants for the Xbox disc image (XDVDFS) extraction utility.
"""

# Sector size used for all data region addressing
SECTOR_SIZE = 2048

# Volume descriptor location, relative to the start of the game partition
HEADER_OFFSET = 0x10000
HEADER_MAGIC = b"MICROSOFT*XBOX*MEDIA"  # 20 bytes

# Game partition offsets of the two supported disc layouts
OFFSET_XGD2 = 0xFD90000
OFFSET_XGD3 = 0x2080000

# Directory node records
DIR_RECORD_HEADER_SIZE = 14  # left, right, sector, size, attributes, name_len
DIR_PTR_SENTINEL = 0xFFFF

# File attributes
ATTR_READONLY = 0x01
ATTR_HIDDEN = 0x02
ATTR_SYSTEM = 0x04
ATTR_DIRECTORY = 0x10
ATTR_ARCHIVE = 0x20

# Extraction
BUFFER_SIZE = 4096
SYSTEM_UPDATE_DIR = "$SystemUpdate"

# Remote (FTP) destinations
FTP_SCHEME = "ftp://"
FTP_DEFAULT_PORT = 21
FTP_DEFAULT_USER = "xbox"
FTP_DEFAULT_PASSWORD = "xbox"
FTP_FILE_UNAVAILABLE = "550"
