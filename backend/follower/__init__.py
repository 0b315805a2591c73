"""
LogTail Follower Package.

The loop alternating between draining lines and waiting for changes.
Requires Python 3.11+.
"""

from follower.follow import follow, read_available

__all__ = ["follow", "read_available"]
