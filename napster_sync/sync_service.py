"""Synchronization service for adding Napster favorites to a Spotify playlist."""

import argparse
import logging
import sys
from datetime import datetime
from typing import Dict, List, Optional
from napster_sync.cache import ResolutionCache
from napster_sync.import_service import ImportReport, ImportService
from napster_sync.models import ImportResult
from napster_sync.napster_client import NapsterClient
from napster_sync.playlist_index import PlaylistIndexer
from napster_sync.resolver import SpotifyResolver
from napster_sync.spotify_authorizer import SpotifyAuthorizer
from napster_sync.spotify_client import SpotifyClient
from napster_sync.utils.credentials import CredentialsError, load_credentials
from napster_sync.utils.logger import setup_logger


# Spotify accepts at most 100 IDs per add request; 50 keeps each request small.
SPOTIFY_BATCH_SIZE = 50


def add_tracks_in_batches(
    spotify_client,
    user_id: str,
    playlist_id: str,
    track_ids: List[str],
    batch_size: int = SPOTIFY_BATCH_SIZE
) -> int:
    """
    Add tracks to a playlist in order, at most ``batch_size`` per request.

    Returns:
        Number of add requests issued
    """
    track_ids = list(track_ids)
    calls = 0

    for start in range(0, len(track_ids), batch_size):
        batch = track_ids[start:start + batch_size]
        spotify_client.add_tracks_to_playlist(user_id, playlist_id, batch)
        calls += 1

    return calls


class SyncService:
    """Service for syncing Napster favorites into a Spotify playlist."""

    def __init__(self, credentials_path: str = "credentials.md", log_file: str = None, level: int = logging.INFO):
        """
        Initialize sync service.

        Args:
            credentials_path: Path to credentials file
            log_file: Optional path to log file
            level: Console log level
        """
        self.credentials_path = credentials_path

        # Auto-generate log file name if not provided
        if log_file is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            log_file = f"sync_logs/sync_{timestamp}.log"

        self.logger = setup_logger(log_file=log_file, level=level)
        self.logger.info(f"📝 Sync log file: {log_file}")

        self.spotify_client: SpotifyClient = None
        self.napster_client: NapsterClient = None
        self.cache = ResolutionCache()
        self.report = ImportReport()

    def load_credentials(self, overrides: Optional[Dict[str, Optional[str]]] = None) -> Dict[str, str]:
        """
        Load credentials from the file, the environment and CLI overrides.

        Raises:
            CredentialsError: If a required credential is missing
        """
        try:
            self.logger.info(f"Loading credentials from {self.credentials_path}")
            return load_credentials(self.credentials_path, overrides=overrides)
        except CredentialsError as e:
            self.logger.error(f"Failed to load credentials: {e}")
            self.report.add_error(f"Failed to load credentials: {e}")
            raise

    def authenticate_clients(self, credentials: Dict[str, str], authorizer: Optional[SpotifyAuthorizer] = None):
        """
        Authenticate Spotify and Napster clients.

        The Spotify handshake runs in the background while Napster is
        authenticated; the pipeline continues once the handshake result has
        been handed over.

        Raises:
            Exception: If authentication fails
        """
        try:
            self.logger.info("Authorizing with Spotify (check your browser)...")
            if authorizer is None:
                authorizer = SpotifyAuthorizer(
                    client_id=credentials['SPOTIFY_CLIENT_ID'],
                    client_secret=credentials['SPOTIFY_CLIENT_SECRET'],
                    redirect_uri=credentials['SPOTIFY_REDIRECT_URI']
                )
            authorizer.start()

            self.logger.info("Authenticating with Napster...")
            self.napster_client = NapsterClient(
                api_key=credentials['NAPSTER_API_KEY'],
                secret_key=credentials['NAPSTER_SECRET_KEY'],
                username=credentials['NAPSTER_USERNAME'],
                password=credentials['NAPSTER_PASSWORD']
            )
            self.napster_client.authenticate()

            auth_manager = authorizer.wait()
            self.logger.debug("Received auth-code. Proceeding with import.")

            self.spotify_client = SpotifyClient(
                client_id=credentials['SPOTIFY_CLIENT_ID'],
                client_secret=credentials['SPOTIFY_CLIENT_SECRET'],
                redirect_uri=credentials['SPOTIFY_REDIRECT_URI']
            )
            self.spotify_client.authenticate_user(auth_manager=auth_manager)

            self.logger.info("Authentication successful")

        except Exception as e:
            self.logger.error(f"Authentication failed: {e}")
            self.report.add_error(f"Authentication failed: {e}")
            raise

    def build_import_service(self, market: Optional[str] = None) -> ImportService:
        """Wire the resolver and indexer around the authenticated clients."""
        resolver = SpotifyResolver(self.spotify_client, self.cache)
        indexer = PlaylistIndexer(self.spotify_client, self.cache)
        return ImportService(self.napster_client, resolver, indexer, market=market)

    def run(
        self,
        playlist_name: str,
        only_artists: List[str],
        market: Optional[str] = None,
        no_changes: bool = False,
        report_path: Optional[str] = None
    ) -> ImportResult:
        """
        Resolve the favorites and add the missing ones to the playlist.

        Args:
            playlist_name: Name of the Spotify playlist
            only_artists: Artists to import
            market: Optional two-letter country code to filter Spotify albums by
            no_changes: Resolve and report, but don't modify the playlist
            report_path: Optional path of a JSON report to write

        Returns:
            ImportResult of the run
        """
        try:
            import_service = self.build_import_service(market=market)
            result = import_service.get_tracks_to_add(playlist_name, only_artists)
            self.report.record_result(playlist_name, result)

            if result.added == 0:
                self.logger.warning("No tracks found to import.")
            elif no_changes:
                self.logger.warning("There were changes to make but we were told to not make them.")
            else:
                self.logger.info("Adding tracks to the playlist.")
                for track_id, track in result.to_add.items():
                    self.logger.debug(f"ADDING: [{track_id}] {track}")

                calls = add_tracks_in_batches(
                    self.spotify_client,
                    result.user_id,
                    result.playlist_id,
                    result.track_ids
                )
                self.report.tracks_added = result.added
                self.logger.info(f"Added {result.added} tracks in {calls} requests")

            self.logger.debug(f"Cache: {self.cache.stats()}")
            return result

        except Exception as e:
            self.logger.error(f"Sync failed: {e}")
            self.report.add_error(f"Sync failed: {e}")
            raise

        finally:
            self.report.finalize()
            if report_path:
                self.report.save_to_file(report_path)
                self.logger.info(f"Report saved to: {report_path}")


class ArgumentParser(argparse.ArgumentParser):
    """Argument parser that exits with status 1 on invalid flags."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> ArgumentParser:
    """Create the command-line parser."""
    parser = ArgumentParser(
        description="Add Napster favorite tracks to a Spotify playlist"
    )
    parser.add_argument('--spotify-api-client-id', help='Spotify API client-ID')
    parser.add_argument('--spotify-api-secret-key', help='Spotify API secret key')
    parser.add_argument('--spotify-redirect-uri', help='Spotify OAuth redirect URI')
    parser.add_argument('--napster-api-key', help='Napster API key')
    parser.add_argument('--napster-secret-key', help='Napster secret key')
    parser.add_argument('--napster-username', help='Napster username')
    parser.add_argument('--napster-password', help='Napster password')
    parser.add_argument(
        '-p', '--playlist-name',
        required=True,
        help='Spotify playlist name'
    )
    parser.add_argument(
        '-a', '--only-artists',
        required=True,
        nargs='+',
        action='extend',
        help='Artist(s) to import (may be repeated)'
    )
    parser.add_argument(
        '-m', '--spotify-album-market',
        default=None,
        help='Two-letter country code to filter Spotify albums by'
    )
    parser.add_argument(
        '-n', '--no-changes',
        action='store_true',
        help='Do not make changes to Spotify'
    )
    parser.add_argument(
        '--credentials',
        type=str,
        default='credentials.md',
        help='Path to credentials file (default: credentials.md)'
    )
    parser.add_argument(
        '--log-file',
        type=str,
        default=None,
        help='Path to log file (optional)'
    )
    parser.add_argument(
        '--report',
        type=str,
        default=None,
        help='Path of a JSON report to write (optional)'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Show debug output on the console'
    )
    return parser


def credential_overrides(args: argparse.Namespace) -> Dict[str, Optional[str]]:
    """Map command-line flags onto credential keys."""
    return {
        'SPOTIFY_CLIENT_ID': args.spotify_api_client_id,
        'SPOTIFY_CLIENT_SECRET': args.spotify_api_secret_key,
        'SPOTIFY_REDIRECT_URI': args.spotify_redirect_uri,
        'NAPSTER_API_KEY': args.napster_api_key,
        'NAPSTER_SECRET_KEY': args.napster_secret_key,
        'NAPSTER_USERNAME': args.napster_username,
        'NAPSTER_PASSWORD': args.napster_password,
    }


def main(argv: Optional[List[str]] = None):
    """Main entry point for CLI."""
    args = build_parser().parse_args(argv)

    try:
        service = SyncService(
            credentials_path=args.credentials,
            log_file=args.log_file,
            level=logging.DEBUG if args.debug else logging.INFO
        )

        credentials = service.load_credentials(overrides=credential_overrides(args))
        service.authenticate_clients(credentials)

        service.run(
            playlist_name=args.playlist_name,
            only_artists=args.only_artists,
            market=args.spotify_album_market,
            no_changes=args.no_changes,
            report_path=args.report
        )

        print("\nSync completed successfully!")
        sys.exit(0)

    except KeyboardInterrupt:
        print("\n\nSync interrupted by user")
        sys.exit(1)
    except Exception as e:
        print(f"\nSync failed: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
