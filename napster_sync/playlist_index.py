"""Lookup of the target playlist and the tracks it already contains."""

from typing import Dict, Optional, Set
from napster_sync.cache import ResolutionCache
from napster_sync.errors import PlaylistNotFound
from napster_sync.models import NormalizedTrack
from napster_sync.utils.logger import get_logger


logger = get_logger()


class PlaylistIndexer:
    """Reads the destination playlist so tracks already in it are not added twice."""

    PAGE_SIZE = 100

    def __init__(self, spotify_client, cache: Optional[ResolutionCache] = None, page_size: int = PAGE_SIZE):
        """
        Initialize playlist indexer.

        Args:
            spotify_client: Authenticated SpotifyClient
            cache: Cache shared for the run (holds the user and playlist IDs)
            page_size: Page size when reading playlist tracks
        """
        self.spotify_client = spotify_client
        self.cache = cache if cache is not None else ResolutionCache()
        self.page_size = page_size

    def get_current_user_id(self) -> str:
        """Return the authenticated Spotify user's ID."""
        user_id = self.cache.get_user_id()
        if user_id:
            return user_id

        logger.debug("Getting current user ID.")
        user_id = self.spotify_client.get_current_user_id()
        self.cache.set_user_id(user_id)
        return user_id

    def get_playlist_id(self, user_id: str, playlist_name: str) -> str:
        """
        Find one of the user's playlists by name (case-insensitive).

        Raises:
            PlaylistNotFound: If the user has no playlist with that name
        """
        cached = self.cache.get_playlist_id(playlist_name)
        if cached:
            return cached

        logger.debug(f"Getting playlist ID: [{playlist_name}]")

        wanted = playlist_name.strip().lower()
        for playlist in self.spotify_client.get_playlists_for_user(user_id):
            if (playlist['name'] or '').strip().lower() == wanted:
                self.cache.set_playlist_id(playlist_name, playlist['id'])
                return playlist['id']

        raise PlaylistNotFound(playlist_name)

    def build_track_map(self, playlist_id: str, user_id: str, market: Optional[str] = None) -> Dict[str, NormalizedTrack]:
        """
        Read every track currently in the playlist.

        Any read error propagates: an incomplete index would lead to duplicate
        additions.

        Args:
            playlist_id: Spotify playlist ID
            user_id: Playlist owner
            market: Optional two-letter country code

        Returns:
            Spotify track ID -> NormalizedTrack, in playlist order
        """
        logger.debug("Building index with existing songs.")

        existing: Dict[str, NormalizedTrack] = {}
        ignored = 0
        offset = 0

        while True:
            page = self.spotify_client.get_playlist_tracks(
                user_id,
                playlist_id,
                offset=offset,
                limit=self.page_size,
                market=market
            )
            items = page.get('items') or []
            if not items:
                break

            for item in items:
                track = item.get('track')
                # Local files and unavailable tracks have no ID.
                if not track or not track.get('id'):
                    ignored += 1
                    continue
                existing[track['id']] = NormalizedTrack.from_spotify(track)

            if not page.get('next'):
                break

            offset += self.page_size

        if ignored:
            logger.debug(f"Ignored ({ignored}) playlist entries without a track ID.")
        logger.info(f"Playlist {playlist_id} already contains {len(existing)} tracks")
        return existing

    def build_index(self, playlist_id: str, user_id: str, market: Optional[str] = None) -> Set[str]:
        """Set of the Spotify track IDs currently in the playlist."""
        return set(self.build_track_map(playlist_id, user_id, market=market))
