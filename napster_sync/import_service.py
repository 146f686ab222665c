"""Service that works out which Napster favorites are missing from a Spotify playlist."""

import json
from datetime import datetime
from typing import Dict, List, Optional, Set
from napster_sync.errors import AlbumNotFound, ArtistNotFound, SyncError
from napster_sync.models import AlbumGroupKey, ImportResult, NormalizedTrack
from napster_sync.resolver import track_key
from napster_sync.utils.logger import get_logger


logger = get_logger()


class ImportReport:
    """Report of an import run."""

    def __init__(self):
        """Initialize empty import report."""
        self.start_time = datetime.now()
        self.end_time = None
        self.playlist_name = None
        self.tracks_to_add = []
        self.tracks_added = 0
        self.skipped = 0
        self.already_present = 0
        self.not_found = []
        self.ignored_artists = []
        self.errors = []

    def record_result(self, playlist_name: str, result: ImportResult):
        """Copy the counts and diagnostics of an import result."""
        self.playlist_name = playlist_name
        self.tracks_to_add = [
            {
                'id': track_id,
                'artist': track.artist_name,
                'album': track.album_name,
                'title': track.track_name,
                'fingerprint': track.fingerprint()
            }
            for track_id, track in result.to_add.items()
        ]
        self.skipped = result.skipped
        self.already_present = result.already_present
        self.not_found = list(result.missing)
        self.ignored_artists = list(result.ignored_artists)

    def add_error(self, error: str):
        """Record an error."""
        self.errors.append(error)

    def finalize(self):
        """Mark run as complete."""
        self.end_time = datetime.now()

    def to_dict(self) -> Dict:
        """Convert report to dictionary."""
        duration = None
        if self.end_time:
            duration = (self.end_time - self.start_time).total_seconds()

        return {
            'start_time': self.start_time.isoformat(),
            'end_time': self.end_time.isoformat() if self.end_time else None,
            'duration_seconds': duration,
            'playlist': self.playlist_name,
            'tracks_found': len(self.tracks_to_add),
            'tracks_added': self.tracks_added,
            'skipped': self.skipped,
            'already_in_playlist': self.already_present,
            'missing': len(self.not_found),
            'ignored_artists': self.ignored_artists,
            'not_found': self.not_found,
            'tracks_to_add': self.tracks_to_add,
            'errors': self.errors
        }

    def save_to_file(self, filepath: str):
        """Save report to JSON file."""
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)


class ImportService:
    """
    Reads Napster favorites, groups them per album and resolves them in Spotify.

    Only artists in the allow-list are resolved; everything else is counted
    and reported. Artists and albums that could not be found are remembered
    so later groups don't repeat the same searches.
    """

    NAPSTER_BATCH_SIZE = 100

    def __init__(
        self,
        napster_client,
        resolver,
        indexer,
        batch_size: int = NAPSTER_BATCH_SIZE,
        market: Optional[str] = None
    ):
        """
        Initialize import service.

        Args:
            napster_client: Authenticated NapsterClient
            resolver: SpotifyResolver
            indexer: PlaylistIndexer
            batch_size: Number of favorites read from Napster per request
            market: Optional two-letter country code to filter Spotify albums by
        """
        self.napster_client = napster_client
        self.resolver = resolver
        self.indexer = indexer
        self.batch_size = batch_size
        self.market = market or None

    def fetch_favorites(self) -> List[NormalizedTrack]:
        """
        Read every favorite track from Napster.

        Pages are requested at increasing offsets until an empty page comes
        back; each page's details are fetched in a single request.
        """
        tracks: List[NormalizedTrack] = []
        offset = 0
        batch = 0

        while True:
            batch += 1
            logger.debug(f"Reading favorites batch ({batch}): offset ({offset}) limit ({self.batch_size})")

            favorites = self.napster_client.list_favorites(offset=offset, limit=self.batch_size)
            if not favorites:
                break

            # Advance by the raw page so non-track favorites are not read twice.
            offset += len(favorites)

            track_ids = [f['id'] for f in favorites if f.get('type', 'track') == 'track']
            details = self.napster_client.get_track_details(track_ids)
            tracks.extend(NormalizedTrack.from_napster(detail) for detail in details)

        logger.info(f"Read {len(tracks)} favorite tracks from Napster in {batch - 1} batches")
        return tracks

    @staticmethod
    def group_tracks(tracks: List[NormalizedTrack]) -> Dict[AlbumGroupKey, List[str]]:
        """Group track names by (artist, album), keeping first-seen order and dropping repeats."""
        grouped: Dict[AlbumGroupKey, List[str]] = {}
        for track in tracks:
            key = AlbumGroupKey(track.artist_name, track.album_name)
            names = grouped.setdefault(key, [])
            if track.track_name not in names:
                names.append(track.track_name)
        return grouped

    def preload_existing(self, playlist_name: str, result: ImportResult) -> Dict[str, NormalizedTrack]:
        """Resolve user and playlist IDs and index the tracks already in the playlist."""
        result.user_id = self.indexer.get_current_user_id()
        result.playlist_id = self.indexer.get_playlist_id(result.user_id, playlist_name)
        return self.indexer.build_track_map(result.playlist_id, result.user_id, market=self.market)

    def get_tracks_to_add(self, playlist_name: str, only_artists: List[str]) -> ImportResult:
        """
        Work out which favorites need to be added to the playlist.

        Args:
            playlist_name: Name of the Spotify playlist (case-insensitive)
            only_artists: Artists to import (case-insensitive allow-list)

        Returns:
            ImportResult with the track IDs to add and the diagnostics

        Raises:
            SyncError: If the allow-list is empty or the playlist doesn't exist
        """
        allowed = {a.strip().lower() for a in only_artists or [] if a and a.strip()}
        if not allowed:
            raise SyncError("at least one artist must be given to import")

        result = ImportResult()
        existing = self.preload_existing(playlist_name, result)

        logger.info("Reading Napster favorites.")
        grouped = self.group_tracks(self.fetch_favorites())
        for key in sorted(grouped):
            logger.debug(f"Album group {key}: ({len(grouped[key])}) tracks")

        artist_notices: Set[str] = set()
        missing_artists: Set[str] = set()
        missing_albums: Set[AlbumGroupKey] = set()

        for key, track_names in grouped.items():
            logger.debug(f"Searching for tracks within: [{key.artist_name}] [{key.album_name}]")

            if key.artist_name not in allowed:
                result.skipped += 1
                artist_notices.add(key.artist_name)
                continue

            if key.artist_name in missing_artists or key in missing_albums:
                continue

            self._resolve_group(key, track_names, existing, result, missing_artists, missing_albums)

        result.ignored_artists = sorted(artist_notices)
        self._log_summary(result)
        return result

    def _resolve_group(
        self,
        key: AlbumGroupKey,
        track_names: List[str],
        existing: Dict[str, NormalizedTrack],
        result: ImportResult,
        missing_artists: Set[str],
        missing_albums: Set[AlbumGroupKey]
    ):
        artist_phrase = f"[{key.artist_name}]"
        album_phrase = f"[{key.artist_name}] [{key.album_name}]"

        try:
            resolution = self.resolver.resolve_album_tracks(
                key.artist_name,
                key.album_name,
                track_names,
                market=self.market
            )
        except ArtistNotFound:
            missing_artists.add(key.artist_name)
            result.missing.append(artist_phrase)
            logger.warning(f"ARTIST NOT FOUND IN SPOTIFY: {artist_phrase}")
            return
        except AlbumNotFound:
            missing_albums.add(key)
            result.missing.append(album_phrase)
            logger.warning(f"ALBUM NOT FOUND IN SPOTIFY: {album_phrase}")
            return

        for track_name in resolution.missing:
            track_phrase = f"[{key.artist_name}] [{key.album_name}] [{track_name}]"
            result.missing.append(track_phrase)
            logger.warning(f"TRACK NOT FOUND IN SPOTIFY: {track_phrase}")

        titles = {track_key(name): name for name in track_names}

        for track_id, matched_name in resolution.found.items():
            if track_id in existing:
                logger.info(f"Track already in playlist: {existing[track_id]} [{track_id}]")
                result.already_present += 1
                continue

            if track_id in result.to_add:
                continue

            title = titles.get(matched_name, matched_name)
            logger.info(f"WILL ADD: [{key.artist_name}] [{key.album_name}] [{title}] [{track_id}]")
            result.to_add[track_id] = NormalizedTrack([key.artist_name], key.album_name, title)

    def _log_summary(self, result: ImportResult):
        for artist_name in result.ignored_artists:
            logger.warning(f"IGNORING ARTIST: [{artist_name}]")

        logger.info(f"({result.added}) tracks found to import.")
        logger.info(f"({result.skipped}) tracks skipped.")
        logger.info(f"({len(result.missing)}) tracks missing.")
        logger.info(f"({result.already_present}) tracks already in the playlist.")

        for i, phrase in enumerate(result.missing):
            logger.info(f"NOT FOUND: ({i}) {phrase}")

        logger.debug(f"STATS: ADDED=({result.added}) SKIPPED=({result.skipped}) MISSING=({len(result.missing)})")
