"""Exceptions raised while resolving and syncing tracks."""

from typing import List, Optional


class SyncError(Exception):
    """Fatal error that aborts the sync run."""
    pass


class AuthenticationError(SyncError):
    """Raised when a catalog rejects the supplied credentials."""
    pass


class NapsterAPIError(SyncError):
    """Raised when a Napster API request fails or returns an unexpected payload."""
    pass


class PlaylistNotFound(SyncError):
    """Raised when the target Spotify playlist does not exist for the user."""

    def __init__(self, playlist_name: str):
        self.playlist_name = playlist_name
        super().__init__(f"playlist not found: [{playlist_name}]")


class ResolutionError(Exception):
    """
    Recoverable failure to find something in Spotify.

    The import driver turns these into diagnostics and carries on with the
    next album.
    """
    pass


class ArtistNotFound(ResolutionError):
    """Raised when no Spotify artist has the requested name."""

    def __init__(self, artist_name: str):
        self.artist_name = artist_name
        super().__init__(f"artist not found in Spotify: [{artist_name}]")


class AlbumNotFound(ResolutionError):
    """Raised when no album of the candidate artist(s) matches the requested name."""

    def __init__(self, album_name: str, artist_id: Optional[str] = None, candidates: Optional[List[str]] = None):
        self.album_name = album_name
        self.artist_id = artist_id
        self.candidates = candidates or []
        super().__init__(f"album not found in Spotify: [{album_name}]")


class TrackNotFound(ResolutionError):
    """Raised when a single requested track is not on the resolved album."""

    def __init__(self, track_name: str, album_id: str):
        self.track_name = track_name
        self.album_id = album_id
        super().__init__(f"track not found in Spotify: [{track_name}] (album [{album_id}])")
