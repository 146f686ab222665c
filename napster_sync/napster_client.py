"""
Napster API client for reading a member's favorite tracks.

Authenticates with the OAuth password grant, so it needs both the application
key/secret and the member's username/password.
"""

from typing import Dict, List, Optional
import requests
from napster_sync.errors import AuthenticationError, NapsterAPIError
from napster_sync.utils.logger import get_logger


logger = get_logger()


class NapsterClient:
    """Client for interacting with the Napster API."""

    BASE_URL = "https://api.napster.com"
    API_VERSION = "v2.2"

    def __init__(self, api_key: str, secret_key: str, username: str, password: str, timeout: int = 10):
        """
        Initialize Napster client.

        Args:
            api_key: Napster application API key
            secret_key: Napster application secret
            username: Member username
            password: Member password
            timeout: Per-request timeout in seconds
        """
        self.api_key = api_key
        self.secret_key = secret_key
        self.username = username
        self.password = password
        self.timeout = timeout
        self.access_token: Optional[str] = None

        self._session = requests.Session()
        self._session.headers.update({
            "apikey": self.api_key,
            "Accept": "application/json",
        })

    def authenticate(self) -> None:
        """
        Exchange the member credentials for an access token.

        Raises:
            AuthenticationError: If the credentials are rejected or the request fails
        """
        url = f"{self.BASE_URL}/oauth/token"
        data = {
            'username': self.username,
            'password': self.password,
            'grant_type': 'password'
        }

        try:
            response = self._session.post(
                url,
                data=data,
                auth=(self.api_key, self.secret_key),
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Network error during Napster authentication: {e}")
            raise AuthenticationError(f"Napster authentication failed: {e}")

        if response.status_code in (400, 401, 403):
            logger.error(f"Napster authentication failed with status {response.status_code}")
            logger.error(f"Response: {response.text}")
            raise AuthenticationError(f"Invalid Napster credentials (status {response.status_code})")

        try:
            response.raise_for_status()
            self.access_token = response.json()['access_token']
        except (requests.exceptions.RequestException, ValueError, KeyError) as e:
            raise AuthenticationError(f"Napster authentication failed: {e}")

        self._session.headers["Authorization"] = f"Bearer {self.access_token}"
        logger.info("✅ Authenticated with Napster successfully")

    def _make_request(self, endpoint: str, params: Dict = None, authenticated: bool = True) -> Dict:
        """
        Make a GET request to the Napster API.

        Args:
            endpoint: API endpoint (without base URL and version)
            params: Query parameters
            authenticated: Whether the endpoint needs the member token

        Returns:
            Response JSON

        Raises:
            NapsterAPIError: If request fails
        """
        if authenticated and not self.access_token:
            raise NapsterAPIError("Not authenticated. Call authenticate() first.")

        url = f"{self.BASE_URL}/{self.API_VERSION}/{endpoint}"

        try:
            response = self._session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()

        except requests.exceptions.RequestException as e:
            logger.error(f"Napster API request failed for {endpoint}: {e}")
            if getattr(e, 'response', None) is not None:
                logger.error(f"Response: {e.response.text}")
            raise NapsterAPIError(f"Napster API request failed: {e}")
        except ValueError as e:
            raise NapsterAPIError(f"Napster API returned invalid JSON for {endpoint}: {e}")

    def list_favorites(self, offset: int = 0, limit: int = 100) -> List[Dict]:
        """
        Get one page of the member's favorites.

        Args:
            offset: Index of the first favorite
            limit: Page size

        Returns:
            List of dictionaries with keys: id, type. Every favorite on the page
            is returned, so callers can page by its length. Empty when past the
            last favorite.
        """
        data = self._make_request('me/favorites', {
            'filter': 'track',
            'offset': offset,
            'limit': limit
        })

        favorites = [
            {'id': item['id'], 'type': item.get('type', 'track')}
            for item in data.get('favorites') or []
        ]

        logger.debug(f"({len(favorites)}) favorites received starting at index ({offset}).")
        return favorites

    def get_track_details(self, track_ids: List[str]) -> List[Dict]:
        """
        Get metadata for several tracks in one request.

        Args:
            track_ids: Napster track IDs

        Returns:
            List of dictionaries with keys: id, name, artist_name, album_name
        """
        if not track_ids:
            return []

        data = self._make_request(f"tracks/{','.join(track_ids)}", authenticated=False)

        tracks = []
        for item in data.get('tracks') or []:
            try:
                tracks.append({
                    'id': item['id'],
                    'name': item['name'],
                    'artist_name': item['artistName'],
                    'album_name': item['albumName']
                })
            except KeyError as e:
                raise NapsterAPIError(f"Malformed track detail {item.get('id')}: missing {e}")

        return tracks
