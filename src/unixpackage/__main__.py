#!/usr/bin/env python3
"""UNIXPackage - Module entry point."""
import sys

from unixpackage.cli import main

if __name__ == "__main__":
    sys.exit(main())
