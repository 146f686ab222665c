"""Unit tests for Napster client."""

import pytest
from unittest.mock import Mock, patch
import requests
from napster_sync.errors import AuthenticationError, NapsterAPIError
from napster_sync.napster_client import NapsterClient


@pytest.fixture
def napster_client():
    """Create a Napster client instance."""
    return NapsterClient(
        api_key="test_key",
        secret_key="test_secret",
        username="member",
        password="hunter2"
    )


@pytest.fixture
def authenticated_client(napster_client):
    """Create an authenticated Napster client."""
    napster_client.access_token = "token_abc"
    return napster_client


class TestNapsterClient:
    """Test cases for NapsterClient."""

    def test_init(self, napster_client):
        """Test client initialization."""
        assert napster_client.api_key == "test_key"
        assert napster_client.access_token is None
        assert napster_client._session.headers["apikey"] == "test_key"

    def test_authenticate_success(self, napster_client):
        """Test the password grant."""
        mock_response = Mock()
        mock_response.status_code = 200
        mock_response.json.return_value = {'access_token': 'token_abc', 'expires_in': 86399}

        with patch.object(napster_client._session, 'post', return_value=mock_response) as mock_post:
            napster_client.authenticate()

        assert napster_client.access_token == 'token_abc'
        assert napster_client._session.headers["Authorization"] == "Bearer token_abc"
        kwargs = mock_post.call_args.kwargs
        assert kwargs['auth'] == ("test_key", "test_secret")
        assert kwargs['data'] == {'username': 'member', 'password': 'hunter2', 'grant_type': 'password'}

    def test_authenticate_rejected(self, napster_client):
        """Test authentication failure."""
        mock_response = Mock()
        mock_response.status_code = 401
        mock_response.text = "invalid_grant"

        with patch.object(napster_client._session, 'post', return_value=mock_response):
            with pytest.raises(AuthenticationError, match="Invalid Napster credentials"):
                napster_client.authenticate()

    def test_authenticate_network_error(self, napster_client):
        """Test network failure during authentication."""
        with patch.object(napster_client._session, 'post', side_effect=requests.exceptions.ConnectionError("down")):
            with pytest.raises(AuthenticationError, match="down"):
                napster_client.authenticate()

    def test_make_request_requires_auth(self, napster_client):
        """Test that member endpoints need a token."""
        with pytest.raises(NapsterAPIError, match="Not authenticated"):
            napster_client._make_request('me/favorites')

    def test_make_request_failure(self, authenticated_client):
        """Test failed API request."""
        with patch.object(authenticated_client._session, 'get', side_effect=requests.exceptions.RequestException("Request failed")):
            with pytest.raises(NapsterAPIError, match="Napster API request failed"):
                authenticated_client._make_request('me/favorites')

    @patch.object(NapsterClient, '_make_request')
    def test_list_favorites(self, mock_request, authenticated_client):
        """Test that every favorite on the page is returned with its type."""
        mock_request.return_value = {
            'favorites': [
                {'id': 'tra.1', 'type': 'track'},
                {'id': 'alb.1', 'type': 'album'},
                {'id': 'tra.2', 'type': 'track'},
            ]
        }

        favorites = authenticated_client.list_favorites(offset=100, limit=100)

        assert favorites == [
            {'id': 'tra.1', 'type': 'track'},
            {'id': 'alb.1', 'type': 'album'},
            {'id': 'tra.2', 'type': 'track'},
        ]
        mock_request.assert_called_once_with('me/favorites', {'filter': 'track', 'offset': 100, 'limit': 100})

    @patch.object(NapsterClient, '_make_request')
    def test_list_favorites_past_end(self, mock_request, authenticated_client):
        """Test that the end of the favorites is an empty page."""
        mock_request.return_value = {'favorites': []}

        assert authenticated_client.list_favorites(offset=500) == []

    @patch.object(NapsterClient, '_make_request')
    def test_get_track_details(self, mock_request, authenticated_client):
        """Test bulk track details."""
        mock_request.return_value = {
            'tracks': [
                {'id': 'tra.1', 'name': 'Airbag', 'artistName': 'Radiohead', 'albumName': 'OK Computer'},
                {'id': 'tra.2', 'name': 'Roads', 'artistName': 'Portishead', 'albumName': 'Dummy'},
            ]
        }

        tracks = authenticated_client.get_track_details(['tra.1', 'tra.2'])

        assert tracks[0] == {'id': 'tra.1', 'name': 'Airbag', 'artist_name': 'Radiohead', 'album_name': 'OK Computer'}
        assert len(tracks) == 2
        mock_request.assert_called_once_with('tracks/tra.1,tra.2', authenticated=False)

    @patch.object(NapsterClient, '_make_request')
    def test_get_track_details_malformed(self, mock_request, authenticated_client):
        """Test that a detail without artist name is fatal."""
        mock_request.return_value = {'tracks': [{'id': 'tra.1', 'name': 'Airbag', 'albumName': 'OK Computer'}]}

        with pytest.raises(NapsterAPIError, match="Malformed"):
            authenticated_client.get_track_details(['tra.1'])

    def test_get_track_details_empty(self, authenticated_client):
        """Test that no request is made without IDs."""
        with patch.object(authenticated_client._session, 'get') as mock_get:
            assert authenticated_client.get_track_details([]) == []
        mock_get.assert_not_called()
