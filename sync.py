#!/usr/bin/env python3
"""
Napster to Spotify Favorites Sync

Safe re-run script: tracks already in the playlist are never added twice.

Examples:
  # See what would be added without touching the playlist
  python sync.py -p "From Napster" -a "Radiohead" -a "Portishead" --no-changes

  # Add missing favorites, preferring US album releases
  python sync.py -p "From Napster" -a "Radiohead" -m US
"""

from napster_sync.sync_service import main


if __name__ == '__main__':
    main()
