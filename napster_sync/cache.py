"""Per-run memo of Spotify lookups."""

from typing import Dict, List, Optional, Tuple


class ResolutionCache:
    """
    Memoizes confirmed Spotify matches for the duration of one sync run.

    Entries are only written after a confirmed match and are never
    invalidated. Create a fresh instance per run and hand it to the
    resolver and the playlist indexer.
    """

    def __init__(self):
        self.artists: Dict[str, List[str]] = {}
        self.albums: Dict[Tuple[str, str], str] = {}
        self.tracks: Dict[str, Dict[str, str]] = {}
        self.playlists: Dict[str, str] = {}
        self.user_id: Optional[str] = None

    def get_artist_ids(self, artist_name: str) -> Optional[List[str]]:
        return self.artists.get(artist_name)

    def set_artist_ids(self, artist_name: str, artist_ids: List[str]):
        if artist_ids:
            self.artists[artist_name] = list(artist_ids)

    def get_album_id(self, artist_id: str, album_name: str) -> Optional[str]:
        return self.albums.get((artist_id, album_name))

    def set_album_id(self, artist_id: str, album_name: str, album_id: str):
        self.albums[(artist_id, album_name)] = album_id

    def get_album_tracks(self, album_id: str) -> Optional[Dict[str, str]]:
        return self.tracks.get(album_id)

    def set_album_tracks(self, album_id: str, tracks: Dict[str, str]):
        self.tracks[album_id] = tracks

    def get_playlist_id(self, playlist_name: str) -> Optional[str]:
        return self.playlists.get(playlist_name.lower())

    def set_playlist_id(self, playlist_name: str, playlist_id: str):
        self.playlists[playlist_name.lower()] = playlist_id

    def get_user_id(self) -> Optional[str]:
        return self.user_id

    def set_user_id(self, user_id: str):
        self.user_id = user_id

    def stats(self) -> Dict[str, int]:
        """Entry counts per kind, for the end-of-run debug log."""
        return {
            'artists': len(self.artists),
            'albums': len(self.albums),
            'album_tracklists': len(self.tracks),
            'playlists': len(self.playlists),
        }
