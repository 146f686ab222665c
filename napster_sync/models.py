"""Value types shared by the resolver and the import driver."""

import hashlib
import json
from typing import Dict, Iterable, List, Optional


class NormalizedTrack:
    """A track reduced to lower-case artist, album and title names."""

    def __init__(self, artist_names: Iterable[str], album_name: str, track_name: str):
        """
        Initialize normalized track.

        Args:
            artist_names: Artist names in catalog order (primary artist first)
            album_name: Album name
            track_name: Track title
        """
        self.artist_names = tuple((name or "").strip().lower() for name in artist_names)
        self.album_name = (album_name or "").strip().lower()
        self.track_name = (track_name or "").strip().lower()

    @classmethod
    def from_napster(cls, track: Dict) -> "NormalizedTrack":
        """Build from a Napster track detail (``artist_name``, ``album_name``, ``name``)."""
        return cls([track['artist_name']], track['album_name'], track['name'])

    @classmethod
    def from_spotify(cls, track: Dict) -> "NormalizedTrack":
        """Build from a Spotify track object."""
        artists = [a.get('name', '') for a in track.get('artists') or []]
        album = (track.get('album') or {}).get('name', '')
        return cls(artists, album, track.get('name', ''))

    @property
    def artist_name(self) -> str:
        """Primary artist."""
        return self.artist_names[0] if self.artist_names else ""

    def fingerprint(self) -> str:
        """Deterministic digest of all three fields."""
        payload = json.dumps(
            [list(self.artist_names), self.album_name, self.track_name],
            ensure_ascii=False,
            separators=(',', ':')
        )
        return hashlib.sha1(payload.encode('utf-8')).hexdigest()

    def _key(self):
        return (self.artist_names, self.album_name, self.track_name)

    def __eq__(self, other) -> bool:
        if not isinstance(other, NormalizedTrack):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return f"TRACK<[{', '.join(self.artist_names)}] [{self.album_name}] [{self.track_name}]>"


class AlbumGroupKey:
    """(artist, album) pair used to batch favorites per album."""

    def __init__(self, artist_name: str, album_name: str):
        self.artist_name = (artist_name or "").strip().lower()
        self.album_name = (album_name or "").strip().lower()

    def _key(self):
        return (self.artist_name, self.album_name)

    def __eq__(self, other) -> bool:
        if not isinstance(other, AlbumGroupKey):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: "AlbumGroupKey") -> bool:
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return f"AlbumGroupKey([{self.artist_name}] [{self.album_name}])"


class TrackResolution:
    """Result of looking up a set of track names on one Spotify album."""

    def __init__(
        self,
        found: Optional[Dict[str, str]] = None,
        missing: Optional[List[str]] = None,
        album_id: Optional[str] = None,
        artist_id: Optional[str] = None,
        liberal: bool = False
    ):
        """
        Initialize track resolution.

        Args:
            found: Spotify track ID -> matched (normalized) track name, in request order
            missing: Requested track names with no match on the album
            album_id: Spotify album the tracks were looked up in
            artist_id: Spotify artist the album belongs to
            liberal: Whether the album was only found by the liberal pass
        """
        self.found = found if found is not None else {}
        self.missing = missing if missing is not None else []
        self.album_id = album_id
        self.artist_id = artist_id
        self.liberal = liberal

    def __repr__(self) -> str:
        return (
            f"TrackResolution(album={self.album_id}, found={len(self.found)}, "
            f"missing={len(self.missing)}, liberal={self.liberal})"
        )


class ImportResult:
    """Tracks to add to the playlist plus the diagnostics gathered on the way."""

    def __init__(self):
        self.to_add: Dict[str, NormalizedTrack] = {}
        self.skipped = 0
        self.already_present = 0
        self.missing: List[str] = []
        self.ignored_artists: List[str] = []
        self.user_id: Optional[str] = None
        self.playlist_id: Optional[str] = None

    @property
    def added(self) -> int:
        return len(self.to_add)

    @property
    def track_ids(self) -> List[str]:
        """Track IDs in discovery order."""
        return list(self.to_add.keys())

    def __repr__(self) -> str:
        return (
            f"ImportResult(added={self.added}, skipped={self.skipped}, "
            f"missing={len(self.missing)})"
        )
