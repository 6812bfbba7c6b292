"""Disk Scan - per-directory disk usage of a root directory, scanned concurrently.

This package lists the immediate children of a root directory, walks each
child's subtree in parallel, sums the real on-disk size of every regular file
and reports the classified totals on the console and, optionally, as CSV.
"""

from disk_scan.__main__ import main

__all__ = ["main"]
