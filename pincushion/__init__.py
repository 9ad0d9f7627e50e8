"""
pin-cushion – keep local copies of Pinterest boards up to date.

Supports:
  • Tracking any number of boards per user, each in its own directory
  • Polling every board's RSS feed on a shared interval
  • Downloading the original image of every newly pinned item
  • Resumable operation via a per-board "latest download" marker
"""

__version__ = "0.2.0"
