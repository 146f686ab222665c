"""Interactive Spotify authorization that hands its result to the sync exactly once."""

import threading
from concurrent.futures import Future
from typing import Optional
from spotipy.oauth2 import SpotifyOAuth
from napster_sync.spotify_client import SCOPE
from napster_sync.utils.logger import get_logger


logger = get_logger()


class SpotifyAuthorizer:
    """
    Runs the browser-based OAuth handshake in the background.

    spotipy opens the authorization URL in the browser and serves the
    localhost redirect itself. The completed auth manager is delivered through
    a Future, which is resolved exactly once; the sync pipeline blocks on
    ``wait()`` before it starts.
    """

    def __init__(self, client_id: str, client_secret: str, redirect_uri: str, scope: str = SCOPE, cache_path: Optional[str] = None):
        """
        Initialize authorizer.

        Args:
            client_id: Spotify application client ID
            client_secret: Spotify application client secret
            redirect_uri: Registered redirect URI (localhost with a port)
            scope: Space-separated OAuth scopes
            cache_path: Optional token cache file for spotipy
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.scope = scope
        self.cache_path = cache_path
        self._future: Optional[Future] = None
        self._lock = threading.Lock()

    def _create_auth_manager(self) -> SpotifyOAuth:
        return SpotifyOAuth(
            client_id=self.client_id,
            client_secret=self.client_secret,
            redirect_uri=self.redirect_uri,
            scope=self.scope,
            cache_path=self.cache_path,
            open_browser=True
        )

    def _authorize(self, future: Future):
        try:
            auth_manager = self._create_auth_manager()
            logger.debug(f"Opening: [{auth_manager.get_authorize_url()}]")

            # Blocks until the browser redirect comes back (or a cached token is used).
            auth_manager.get_access_token(as_dict=False)
        except Exception as e:
            logger.error(f"Spotify authorization failed: {e}")
            future.set_exception(e)
            return

        logger.info("Authorization is complete.")
        future.set_result(auth_manager)

    def start(self) -> Future:
        """
        Start the handshake on a background thread.

        Returns:
            Future resolved with the authorized SpotifyOAuth manager. Calling
            start() again returns the same Future.
        """
        with self._lock:
            if self._future is None:
                self._future = Future()
                thread = threading.Thread(
                    target=self._authorize,
                    args=(self._future,),
                    name="spotify-authorizer",
                    daemon=True
                )
                thread.start()
            return self._future

    def wait(self, timeout: Optional[float] = None) -> SpotifyOAuth:
        """
        Block until the handshake finishes.

        Args:
            timeout: Seconds to wait (None: forever)

        Returns:
            The authorized SpotifyOAuth manager

        Raises:
            Exception: Whatever the handshake raised
            concurrent.futures.TimeoutError: If ``timeout`` elapses first
        """
        return self.start().result(timeout=timeout)
