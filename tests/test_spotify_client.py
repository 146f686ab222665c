"""Unit tests for Spotify client."""

import pytest
from unittest.mock import Mock, patch
from napster_sync.spotify_client import SpotifyClient


@pytest.fixture
def spotify_client():
    """Create a Spotify client instance."""
    return SpotifyClient(
        client_id="test_client_id",
        client_secret="test_client_secret",
        redirect_uri="http://localhost:8888/authResponse"
    )


@pytest.fixture
def mock_spotify():
    """Create a mock Spotify API object."""
    mock = Mock()
    mock.current_user.return_value = {'id': 'user1', 'display_name': 'Test User'}
    return mock


@pytest.fixture
def authenticated_client(spotify_client, mock_spotify):
    spotify_client.sp = mock_spotify
    return spotify_client


class TestSpotifyClient:
    """Test cases for SpotifyClient."""

    def test_init(self, spotify_client):
        """Test client initialization."""
        assert spotify_client.client_id == "test_client_id"
        assert spotify_client.client_secret == "test_client_secret"
        assert spotify_client.redirect_uri == "http://localhost:8888/authResponse"
        assert spotify_client.sp is None

    @patch('napster_sync.spotify_client.spotipy.Spotify')
    @patch('napster_sync.spotify_client.SpotifyOAuth')
    def test_authenticate_user_success(self, mock_oauth, mock_spotify_class, spotify_client, mock_spotify):
        """Test successful user authentication with retries enabled."""
        mock_spotify_class.return_value = mock_spotify

        spotify_client.authenticate_user()

        assert spotify_client.sp == mock_spotify
        mock_oauth.assert_called_once()
        kwargs = mock_spotify_class.call_args.kwargs
        assert kwargs['auth_manager'] == mock_oauth.return_value
        assert kwargs['retries'] == 5
        mock_spotify.current_user.assert_called_once()

    @patch('napster_sync.spotify_client.spotipy.Spotify')
    @patch('napster_sync.spotify_client.SpotifyOAuth')
    def test_authenticate_user_with_auth_manager(self, mock_oauth, mock_spotify_class, spotify_client, mock_spotify):
        """Test that a delivered auth manager is used as is."""
        mock_spotify_class.return_value = mock_spotify
        auth_manager = Mock()

        spotify_client.authenticate_user(auth_manager=auth_manager)

        mock_oauth.assert_not_called()
        assert mock_spotify_class.call_args.kwargs['auth_manager'] is auth_manager

    @patch('napster_sync.spotify_client.spotipy.Spotify')
    @patch('napster_sync.spotify_client.SpotifyOAuth')
    def test_authenticate_user_failure(self, mock_oauth, mock_spotify_class, spotify_client):
        """Test authentication failure."""
        mock_spotify_class.side_effect = Exception("Auth failed")

        with pytest.raises(Exception, match="Auth failed"):
            spotify_client.authenticate_user()

    def test_not_authenticated(self, spotify_client):
        """Test calls without authentication."""
        with pytest.raises(Exception, match="Not authenticated"):
            spotify_client.search_artists("x")

    def test_search_artists(self, authenticated_client, mock_spotify):
        """Test that the artist paging object is returned."""
        mock_spotify.search.return_value = {
            'artists': {'items': [{'id': 'a1', 'name': 'X'}], 'next': None}
        }

        page = authenticated_client.search_artists("X", limit=20)

        assert page['items'][0]['id'] == 'a1'
        mock_spotify.search.assert_called_once_with(q="X", type='artist', limit=20)

    def test_next_artist_page(self, authenticated_client, mock_spotify):
        """Test reading the following artist page."""
        mock_spotify.next.return_value = {'artists': {'items': [{'id': 'a2'}], 'next': None}}

        page = authenticated_client.next_artist_page({'items': [], 'next': 'https://api/next'})

        assert page == {'items': [{'id': 'a2'}], 'next': None}

    def test_next_artist_page_no_more_pages(self, authenticated_client, mock_spotify):
        """Test that the last page yields None."""
        assert authenticated_client.next_artist_page({'items': [], 'next': None}) is None
        mock_spotify.next.assert_not_called()

    def test_list_artist_albums(self, authenticated_client, mock_spotify):
        """Test album listing filters."""
        mock_spotify.artist_albums.return_value = {'items': [], 'next': None}

        authenticated_client.list_artist_albums('a1', offset=50, limit=50, market='GB')

        mock_spotify.artist_albums.assert_called_once_with(
            'a1', include_groups='album', country='GB', limit=50, offset=50
        )

    def test_get_album_tracks_multiple_pages(self, authenticated_client, mock_spotify):
        """Test that the whole tracklist is read."""
        mock_spotify.album_tracks.side_effect = [
            {'items': [{'id': 't1', 'name': 'A'}], 'next': 'url'},
            {'items': [{'id': 't2', 'name': 'B'}], 'next': None},
        ]

        tracks = authenticated_client.get_album_tracks('al1')

        assert [t['id'] for t in tracks] == ['t1', 't2']
        assert mock_spotify.album_tracks.call_count == 2

    def test_get_playlists_for_user(self, authenticated_client, mock_spotify):
        """Test listing playlists across pages."""
        mock_spotify.user_playlists.side_effect = [
            {'items': [{'id': 'p1', 'name': 'One', 'tracks': {'total': 10}}], 'next': 'url'},
            {'items': [{'id': 'p2', 'name': 'Two', 'tracks': {'total': 20}}], 'next': None},
        ]

        playlists = authenticated_client.get_playlists_for_user('user1')

        assert playlists == [
            {'id': 'p1', 'name': 'One', 'tracks_count': 10},
            {'id': 'p2', 'name': 'Two', 'tracks_count': 20},
        ]

    def test_get_playlist_tracks(self, authenticated_client, mock_spotify):
        """Test reading a page of playlist items."""
        mock_spotify.playlist_items.return_value = {'items': [{'track': {'id': 't1'}}], 'next': None}

        page = authenticated_client.get_playlist_tracks('user1', 'p1', offset=100, limit=100, market='US')

        assert page['items'][0]['track']['id'] == 't1'
        kwargs = mock_spotify.playlist_items.call_args.kwargs
        assert kwargs['offset'] == 100
        assert kwargs['market'] == 'US'

    def test_get_current_user_id(self, authenticated_client):
        """Test reading the current user ID."""
        assert authenticated_client.get_current_user_id() == 'user1'

    def test_add_tracks_to_playlist(self, authenticated_client, mock_spotify):
        """Test adding tracks."""
        mock_spotify.playlist_add_items.return_value = {'snapshot_id': 's1'}

        ack = authenticated_client.add_tracks_to_playlist('user1', 'p1', ['t1', 't2'])

        assert ack == {'snapshot_id': 's1'}
        mock_spotify.playlist_add_items.assert_called_once_with('p1', ['t1', 't2'])
