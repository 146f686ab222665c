"""Spotify API client for artist/album lookups and playlist updates."""

from typing import Dict, List, Optional
import spotipy
from spotipy.oauth2 import SpotifyOAuth
from napster_sync.utils.logger import get_logger


logger = get_logger()

SCOPE = "playlist-read-private playlist-read-collaborative playlist-modify-public playlist-modify-private"


class SpotifyClient:
    """
    Client for interacting with Spotify Web API.

    Search and listing methods return Spotify paging objects (dicts with
    ``items`` and ``next``) so callers can control pagination themselves.
    All read calls are safe to repeat; retries and rate-limit backoff are
    left to spotipy.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        retries: int = 5,
        requests_timeout: int = 10
    ):
        """
        Initialize Spotify client.

        Args:
            client_id: Spotify application client ID
            client_secret: Spotify application client secret
            redirect_uri: OAuth redirect URI
            retries: Retries spotipy performs on rate limiting and 5xx responses
            requests_timeout: Per-request timeout in seconds
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.retries = retries
        self.requests_timeout = requests_timeout
        self.sp: Optional[spotipy.Spotify] = None

    def authenticate_user(self, auth_manager: Optional[SpotifyOAuth] = None) -> None:
        """
        Authenticate user with Spotify using OAuth.

        Args:
            auth_manager: Auth manager delivered by the authorizer. If None, a
                SpotifyOAuth manager is created here and opens the browser itself.

        Raises:
            Exception: If authentication fails
        """
        try:
            if auth_manager is None:
                auth_manager = SpotifyOAuth(
                    client_id=self.client_id,
                    client_secret=self.client_secret,
                    redirect_uri=self.redirect_uri,
                    scope=SCOPE,
                    open_browser=True
                )
            self.sp = spotipy.Spotify(
                auth_manager=auth_manager,
                requests_timeout=self.requests_timeout,
                retries=self.retries,
                status_retries=self.retries,
                backoff_factor=0.3
            )

            # Test authentication
            user = self.sp.current_user()
            logger.info(f"Authenticated as Spotify user: {user.get('display_name') or user['id']}")

        except Exception as e:
            logger.error(f"Spotify authentication failed: {e}")
            raise

    def _require_auth(self) -> spotipy.Spotify:
        if not self.sp:
            raise Exception("Not authenticated. Call authenticate_user() first.")
        return self.sp

    def search_artists(self, query: str, limit: int = 50) -> Dict:
        """
        Search artists by name.

        Args:
            query: Artist name
            limit: Page size

        Returns:
            First paging object of artist results
        """
        sp = self._require_auth()
        logger.debug(f"Searching for artist: [{query}]")
        results = sp.search(q=query, type='artist', limit=limit)
        return results['artists']

    def next_artist_page(self, page: Dict) -> Optional[Dict]:
        """
        Fetch the page after ``page`` of an artist search.

        Returns:
            The next paging object, or None when there are no more pages
        """
        sp = self._require_auth()
        if not page.get('next'):
            return None

        results = sp.next(page)
        if not results:
            return None
        return results.get('artists', results)

    def list_artist_albums(
        self,
        artist_id: str,
        offset: int = 0,
        limit: int = 50,
        market: Optional[str] = None,
        album_type: str = 'album'
    ) -> Dict:
        """
        List one page of an artist's albums.

        Args:
            artist_id: Spotify artist ID
            offset: Index of the first album
            limit: Page size
            market: Optional two-letter country code to filter regional releases
            album_type: Album groups to include (default: full albums only)

        Returns:
            Paging object of simplified album objects
        """
        sp = self._require_auth()
        return sp.artist_albums(
            artist_id,
            include_groups=album_type,
            country=market or None,
            limit=limit,
            offset=offset
        )

    def get_album_tracks(self, album_id: str) -> List[Dict]:
        """
        Get the complete tracklist of an album.

        Args:
            album_id: Spotify album ID

        Returns:
            List of simplified track objects (id, name, ...)
        """
        sp = self._require_auth()

        tracks = []
        offset = 0
        limit = 50

        while True:
            results = sp.album_tracks(album_id, limit=limit, offset=offset)
            tracks.extend(results['items'])

            if not results.get('next'):
                break

            offset += limit

        logger.debug(f"Retrieved {len(tracks)} tracks for album {album_id}")
        return tracks

    def get_playlists_for_user(self, user_id: str) -> List[Dict]:
        """
        List all playlists of a user.

        Returns:
            List of playlist dictionaries with keys: id, name, tracks_count
        """
        sp = self._require_auth()

        playlists = []
        offset = 0
        limit = 50

        while True:
            results = sp.user_playlists(user_id, limit=limit, offset=offset)

            for item in results['items']:
                playlists.append({
                    'id': item['id'],
                    'name': item['name'],
                    'tracks_count': (item.get('tracks') or {}).get('total', 0)
                })

            if not results.get('next'):
                break

            offset += limit

        logger.debug(f"Retrieved {len(playlists)} playlists for user {user_id}")
        return playlists

    def get_playlist_tracks(
        self,
        user_id: str,
        playlist_id: str,
        offset: int = 0,
        limit: int = 100,
        market: Optional[str] = None
    ) -> Dict:
        """
        Get one page of playlist items.

        Args:
            user_id: Owner of the playlist (kept for logging; the endpoint is playlist-scoped)
            playlist_id: Spotify playlist ID
            offset: Index of the first item
            limit: Page size
            market: Optional two-letter country code

        Returns:
            Paging object of playlist items, each with a ``track`` object
        """
        sp = self._require_auth()
        logger.debug(f"Reading playlist {playlist_id} of user {user_id} at offset {offset}")
        return sp.playlist_items(
            playlist_id,
            fields='items(track(id,name,artists(name),album(name))),next',
            limit=limit,
            offset=offset,
            market=market or None,
            additional_types=('track',)
        )

    def get_current_user_id(self) -> str:
        """Return the ID of the authenticated user."""
        sp = self._require_auth()
        return sp.current_user()['id']

    def add_tracks_to_playlist(self, user_id: str, playlist_id: str, track_ids: List[str]) -> Dict:
        """
        Add tracks to a playlist.

        Spotify caps the number of IDs per request, so callers send them in
        small batches (see ``add_tracks_in_batches``).

        Returns:
            Spotify's acknowledgement (snapshot_id)
        """
        sp = self._require_auth()
        logger.debug(f"Adding {len(track_ids)} tracks to playlist {playlist_id} of user {user_id}")
        return sp.playlist_add_items(playlist_id, list(track_ids))
