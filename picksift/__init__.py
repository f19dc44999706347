# Picksift Package
"""
Ranking and matching engine for a terminal launcher.

Front-ends:
  - Apps: XDG desktop entries
  - Dmenu: stdin lines, optionally split into columns
  - Clip: clipboard history rows from cclip
"""

__version__ = "0.1.0"
