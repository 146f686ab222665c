"""Resolve Napster (artist, album, track) names to Spotify IDs."""

from typing import Dict, List, Optional
from rapidfuzz import fuzz
from napster_sync.cache import ResolutionCache
from napster_sync.errors import AlbumNotFound, ArtistNotFound, TrackNotFound
from napster_sync.models import TrackResolution
from napster_sync.normalizer import normalize, titles_equal
from napster_sync.utils.logger import get_logger


logger = get_logger()


def track_key(name: str) -> str:
    """
    Key a track title for lookup within an album.

    Titles with no ASCII letters or digits normalize to "", so they are keyed
    by their trimmed lower-case form instead and only match exactly.
    """
    return normalize(name) or (name or "").strip().lower()


class SpotifyResolver:
    """
    Finds Spotify artist, album and track IDs for names coming from another catalog.

    Albums are matched in two passes: a strict pass (exact or normalized name)
    and, only when that fails, a liberal pass that ignores a trailing
    qualifier such as " (Remastered)". Confirmed strict matches are cached;
    liberal matches are not, so they never shadow a later strict lookup.
    """

    ALBUM_PAGE_SIZE = 50
    ARTIST_PAGE_SIZE = 50

    def __init__(
        self,
        spotify_client,
        cache: Optional[ResolutionCache] = None,
        album_page_size: int = ALBUM_PAGE_SIZE,
        max_artist_pages: Optional[int] = None
    ):
        """
        Initialize resolver.

        Args:
            spotify_client: Authenticated SpotifyClient
            cache: Cache shared for the run (a fresh one is created if None)
            album_page_size: Page size when listing an artist's albums
            max_artist_pages: Stop searching after this many artist result pages
                (None: until Spotify reports no more pages)
        """
        self.spotify_client = spotify_client
        self.cache = cache if cache is not None else ResolutionCache()
        self.album_page_size = album_page_size
        self.max_artist_pages = max_artist_pages

    def resolve_artist(self, name: str) -> List[str]:
        """
        Find the Spotify artist IDs registered under a name.

        Spotify can have several artists with the same display name, so every
        exact (case-insensitive) match on the first page that has any match is
        returned, in result order.

        Args:
            name: Artist name

        Returns:
            Non-empty list of Spotify artist IDs

        Raises:
            ArtistNotFound: If no result page contains the name
        """
        cached = self.cache.get_artist_ids(name)
        if cached is not None:
            return list(cached)

        wanted = name.strip().lower()
        found: List[str] = []
        page = None
        page_number = 0

        while True:
            if self.max_artist_pages is not None and page_number >= self.max_artist_pages:
                break

            logger.debug(f"Search for artist [{name}] page ({page_number}).")

            if page is None:
                page = self.spotify_client.search_artists(name, limit=self.ARTIST_PAGE_SIZE)
            else:
                page = self.spotify_client.next_artist_page(page)
                if page is None:
                    break

            items = page.get('items') or []
            if not items:
                break

            for i, artist in enumerate(items):
                if not artist or not artist.get('id'):
                    continue
                if (artist.get('name') or '').strip().lower() == wanted:
                    logger.debug(f"Found ID for artist [{name}]: ({i}) [{artist['id']}]")
                    if artist['id'] not in found:
                        found.append(artist['id'])

            if found:
                break

            page_number += 1

        if not found:
            raise ArtistNotFound(name)

        self.cache.set_artist_ids(name, found)
        return found

    def resolve_album(self, artist_id: str, album_name: str, market: Optional[str] = None, liberal: bool = False) -> str:
        """
        Find an album of an artist by name.

        Only full albums are considered. With ``liberal`` set, trailing
        parenthetical/bracketed clauses are ignored on both sides, which
        catches cases where a remastered edition has replaced the original
        album in Spotify.

        Args:
            artist_id: Spotify artist ID
            album_name: Album name to look for
            market: Optional two-letter country code; filters out duplicate
                regional releases. Without it the first duplicate wins.
            liberal: Use the liberal comparison

        Returns:
            Spotify album ID

        Raises:
            AlbumNotFound: If no album of the artist matches
        """
        logger.debug(f"Searching for album [{album_name}] under artist with ID [{artist_id}].")

        if not liberal:
            cached = self.cache.get_album_id(artist_id, album_name)
            if cached is not None:
                return cached

        candidates: List[str] = []
        offset = 0

        while True:
            page = self.spotify_client.list_artist_albums(
                artist_id,
                offset=offset,
                limit=self.album_page_size,
                market=market
            )
            albums = page.get('items') or []
            if not albums:
                break

            for album in albums:
                album_type = album.get('album_type', 'album')
                candidates.append(f"{album['name']} ({album_type})")

                if album_type != 'album':
                    continue

                if titles_equal(album['name'], album_name, liberal):
                    logger.debug(
                        f"Found ID for album under artist-ID [{artist_id}]: "
                        f"[{album_name}] found as [{album['name']}]"
                    )
                    if not liberal:
                        self.cache.set_album_id(artist_id, album_name, album['id'])
                    return album['id']

            if not page.get('next'):
                break

            offset += self.album_page_size

        logger.debug(f"Album [{album_name}] under artist-ID [{artist_id}] not found (LIBERAL=[{liberal}]).")

        if liberal:
            self._log_candidates(artist_id, album_name, candidates)

        raise AlbumNotFound(album_name, artist_id=artist_id, candidates=candidates)

    @staticmethod
    def _log_candidates(artist_id: str, album_name: str, candidates: List[str]):
        """Log the albums that were available, closest names first."""
        ranked = sorted(
            candidates,
            key=lambda c: fuzz.ratio(normalize(c), normalize(album_name)),
            reverse=True
        )
        for i, candidate in enumerate(ranked):
            logger.debug(f"Available album under artist-ID [{artist_id}]: ({i}) [{candidate}]")

    def _get_album_tracks(self, album_id: str) -> Dict[str, str]:
        """Normalized track name -> Spotify track ID for the whole album, fetched once."""
        tracks = self.cache.get_album_tracks(album_id)
        if tracks is not None:
            return tracks

        tracks = {}
        for track in self.spotify_client.get_album_tracks(album_id):
            if not track or not track.get('id'):
                continue
            key = track_key(track['name'])
            if not key:
                continue
            tracks[key] = track['id']

        self.cache.set_album_tracks(album_id, tracks)
        return tracks

    def resolve_tracks(self, album_id: str, track_names: List[str]) -> TrackResolution:
        """
        Find the Spotify IDs of the named tracks within an album.

        Missing tracks are reported, not raised: a partial match within an
        album is normal.

        Args:
            album_id: Spotify album ID
            track_names: Track names to look up

        Returns:
            TrackResolution with found (ID -> matched name) and missing names
        """
        tracks = self._get_album_tracks(album_id)

        found: Dict[str, str] = {}
        missing: List[str] = []

        for name in track_names:
            normalized = track_key(name)
            track_id = tracks.get(normalized) if normalized else None

            if track_id is not None:
                found[track_id] = normalized
                logger.debug(f"Found: [{album_id}] [{normalized}] => [{track_id}]")
            else:
                missing.append(name)
                logger.debug(f"Track [{normalized}] under album-ID [{album_id}] not found.")

        if missing:
            logger.debug(f"({len(tracks)}) tracks are available in album-ID [{album_id}].")
            for i, available in enumerate(sorted(tracks)):
                logger.debug(f"Available track under album-ID [{album_id}]: ({i}) [{available}]")

        return TrackResolution(found=found, missing=missing, album_id=album_id)

    def resolve_track(self, album_id: str, track_name: str) -> str:
        """
        Find the Spotify ID of a single track within an album.

        Raises:
            TrackNotFound: If the album has no track with that name
        """
        resolution = self.resolve_tracks(album_id, [track_name])
        if not resolution.found:
            raise TrackNotFound(track_name, album_id)
        return next(iter(resolution.found))

    def resolve_album_tracks(
        self,
        artist_name: str,
        album_name: str,
        track_names: List[str],
        market: Optional[str] = None
    ) -> TrackResolution:
        """
        Resolve a group of tracks that share an artist and album.

        Every candidate artist is tried with the strict album comparison
        before any of them is tried with the liberal one. The first
        (artist, pass) combination whose album yields at least one track is
        returned; results are not merged across tied albums.

        Args:
            artist_name: Artist name
            album_name: Album name
            track_names: Track names on that album
            market: Optional two-letter country code

        Returns:
            TrackResolution of the first successful combination

        Raises:
            ArtistNotFound: If the artist is not in Spotify
            AlbumNotFound: If no candidate album yields any of the tracks
        """
        artist_ids = self.resolve_artist(artist_name)

        candidates: List[str] = []
        for liberal in (False, True):
            for artist_id in artist_ids:
                try:
                    album_id = self.resolve_album(artist_id, album_name, market=market, liberal=liberal)
                except AlbumNotFound as e:
                    candidates.extend(c for c in e.candidates if c not in candidates)
                    continue

                resolution = self.resolve_tracks(album_id, track_names)
                if resolution.found:
                    resolution.artist_id = artist_id
                    resolution.liberal = liberal
                    return resolution

                logger.debug(
                    f"Album [{album_name}] ({album_id}) matched for artist-ID [{artist_id}] "
                    f"but none of its tracks did (LIBERAL=[{liberal}])."
                )

        raise AlbumNotFound(album_name, candidates=candidates)
