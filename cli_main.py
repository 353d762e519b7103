#!/usr/bin/env python3
"""
Entry point script for the standalone CLI executable.
Used by PyInstaller to build a single-file xiso_extract binary.
"""

import sys
from xiso_extract.__main__ import main

if __name__ == '__main__':
    sys.exit(main())
