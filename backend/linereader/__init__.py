"""
LogTail Line Reader Package.

Incremental scanning of lines from files being appended to.
Requires Python 3.11+.
"""

from linereader.scanner import LineScanner, ScannedLine

__all__ = ["LineScanner", "ScannedLine"]
