#!/usr/bin/env python3
"""
AutoGenre - genre and artist suggestions for audio libraries.

Scans a folder, asks Spotify, Beatport and MusicBrainz about every track,
then (optionally) writes the best suggestion back, renames and organizes.

Usage:
    python -m autogenre /path/to/music [options]
"""

import argparse
import logging
import os
import signal
import sys
import threading
from dataclasses import replace
from typing import List, Optional

from autogenre.aggregator import MetadataAggregator, build_providers
from autogenre.applier import ApplyOrchestrator, build_effective_metadata
from autogenre.config import (
    load_config, validate_config, eprint, setup_logging,
    get_spotify_instructions, get_beatport_instructions
)
from autogenre.errors import ScanError, SettingsError, TagWriteError
from autogenre.folder_manager import FolderManager
from autogenre.interactive import InteractivePrompts
from autogenre.models import (
    AppSettings, ApplyReport, EnhancedAudioFile, ResolutionResult
)
from autogenre.progress import (
    RESOLUTION_BASELINE, SCAN_START, PassGuard, ProgressReporter
)
from autogenre.ranking import choose_suggestion
from autogenre.resolver import BatchResolver
from autogenre.scanner import find_duplicates, scan_folder
from autogenre.settings import load_settings, save_settings
from autogenre.tag_handler import TagHandler

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130


class AutoGenreProcessor:
    """Owns the inventory and runs scan, resolution and apply passes on it."""

    def __init__(self, config: dict, settings: AppSettings,
                 args: argparse.Namespace, prompts: InteractivePrompts):
        """
        Initialize processor.

        Args:
            config: Credentials from load_config()
            settings: Effective settings for this run
            args: CLI arguments
            prompts: Interactive prompts handler
        """
        self.config = config
        self.settings = settings
        self.args = args
        self.prompts = prompts

        self.inventory: List[EnhancedAudioFile] = []
        self.base_folder: Optional[str] = None

        self.reporter = ProgressReporter()
        self.reporter.subscribe(prompts.show_progress)
        self.guard = PassGuard()
        self.cancel_event = threading.Event()

        self.tag_handler = TagHandler()
        self.aggregator = MetadataAggregator(build_providers(
            config, settings,
            skip_spotify=args.skip_spotify,
            skip_beatport=args.skip_beatport,
            skip_musicbrainz=args.skip_musicbrainz,
        ))
        self.resolver = BatchResolver(self.aggregator, self.reporter)
        self.applier = ApplyOrchestrator(self.tag_handler, FolderManager(), self.reporter)

    def install_interrupt_handler(self) -> None:
        """First Ctrl-C cancels after the current file, a second one aborts."""
        signal.signal(signal.SIGINT, self._handle_interrupt)

    def _handle_interrupt(self, _signum, _frame) -> None:
        logger.warning("Interrupt received, finishing current file...")
        self.cancel()
        signal.signal(signal.SIGINT, signal.default_int_handler)

    def cancel(self) -> None:
        """Ask the running pass to stop before its next file."""
        self.cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def scan(self, path: str) -> List[EnhancedAudioFile]:
        """
        Scan a folder and replace the inventory with its files.

        Raises:
            ScanError: If the folder cannot be scanned
            PassInProgressError: If another pass is running
        """
        with self.guard.run("scan"):
            self.cancel_event.clear()
            self.reporter.begin_pass(SCAN_START, "Scanning for audio files...")
            files = scan_folder(path, self.tag_handler)
            self.reporter.advance(RESOLUTION_BASELINE)

            self.inventory = [EnhancedAudioFile.from_audio_file(af) for af in files]
            self.base_folder = path

        return self.inventory

    def resolve(self) -> ResolutionResult:
        """Run a resolution pass over the current inventory."""
        with self.guard.run("resolution"):
            result = self.resolver.resolve(self.inventory, self.cancel_event)
            self.inventory = result.inventory

        logger.info(
            f"Resolution: {result.processed} looked up, {result.skipped} skipped, "
            f"{result.failed} failed"
        )
        return result

    def review_suggestions(self) -> int:
        """
        Ask the user to confirm or change the suggestion of every looked-up file.

        Returns:
            Number of files whose choice changed.
        """
        changed = 0
        reviewed = []
        for af in self.inventory:
            if not af.suggested_metadata:
                reviewed.append(af)
                continue

            index, genre = self.prompts.select_suggestion(af)
            if index is not None:
                af = replace(choose_suggestion(af, index), selected_genre=None)
                changed += 1
            elif genre:
                af = replace(af, selected_genre=genre)
                changed += 1
            reviewed.append(af)

        self.inventory = reviewed
        logger.info(f"Review: {changed} choice(s) changed")
        return changed

    def scan_and_resolve(self, path: str) -> ResolutionResult:
        self.scan(path)
        return self.resolve()

    def apply(self) -> ApplyReport:
        """Run an apply pass over the current inventory."""
        with self.guard.run("apply"):
            report = self.applier.apply(
                self.inventory, self.settings, self.base_folder, self.cancel_event
            )
            self.inventory = report.inventory

        return report

    def pending_changes(self) -> int:
        """Number of files the next apply pass would write."""
        return sum(1 for af in self.inventory if build_effective_metadata(af) is not None)

    def process(self, path: str) -> int:
        """
        Main entry point for a folder: scan, resolve, show, maybe apply.

        Returns:
            Process exit code.
        """
        if not self.aggregator.active_providers:
            eprint("No metadata provider is configured; nothing to look up.")
            return EXIT_ERROR

        files = self.scan(path)
        self.prompts.print(f"\nFound {len(files)} audio file(s) in {path}")

        if self.args.find_duplicates:
            self.prompts.show_duplicates(find_duplicates(self.inventory), self.inventory)

        result = self.resolve()
        if result.cancelled:
            self.prompts.print(f"\n{result.status}")
            return EXIT_INTERRUPTED

        self.prompts.show_suggestions(self.inventory)

        if self.args.choose and self.review_suggestions():
            self.prompts.show_suggestions(self.inventory)

        if not self.args.apply:
            self.prompts.print("\nRun again with --apply to write these suggestions.")
            return EXIT_OK

        count = self.pending_changes()
        if count == 0:
            self.prompts.print("\nNothing to apply.")
            return EXIT_OK

        if not self.prompts.confirm_apply(count):
            self.prompts.print("Skipped.")
            return EXIT_OK

        report = self.apply()
        self.prompts.show_summary(report)

        if report.cancelled:
            return EXIT_INTERRUPTED
        return EXIT_OK


def apply_cli_overrides(settings: AppSettings, args: argparse.Namespace) -> AppSettings:
    """Settings for this run: a flag given on the command line wins over the saved value."""
    overrides = {}
    if args.rename is not None:
        overrides["rename_files"] = args.rename
    if args.organize is not None:
        overrides["organize_files"] = args.organize
    if args.backup is not None:
        overrides["backup_before_changes"] = args.backup
    if args.pattern:
        overrides["folder_pattern"] = args.pattern
    return replace(settings, **overrides)


def restore_backup(backup_path: str, file_path: str, prompts: InteractivePrompts) -> int:
    """Write a tag snapshot back to a file."""
    if not os.path.isfile(backup_path):
        eprint(f"Backup file not found: {backup_path}")
        return EXIT_ERROR
    if not os.path.isfile(file_path):
        eprint(f"Audio file not found: {file_path}")
        return EXIT_ERROR

    try:
        metadata = TagHandler().restore_from_backup(backup_path, file_path)
    except TagWriteError as e:
        eprint(f"Restore failed: {e}")
        return EXIT_ERROR

    prompts.print(
        f"Restored {os.path.basename(file_path)}: "
        f"{metadata.artist or '?'} - {metadata.title or '?'} [{metadata.genre or '?'}]"
    )
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    """Build argument parser."""
    parser = argparse.ArgumentParser(
        description="AutoGenre: suggest genres for audio files from Spotify, "
                    "Beatport and MusicBrainz, then tag, rename and organize them.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show suggestions for a folder
  python -m autogenre /path/to/music

  # Write suggestions without asking
  python -m autogenre /path/to/music --apply --yes

  # Write, rename and sort into genre/artist folders
  python -m autogenre /path/to/music --apply --rename --organize --pattern "{genre}/{artist}"

  # Undo a tag change
  python -m autogenre /path/to/music/track.mp3 --restore-backup \\
      /path/to/music/.autogenre_backups/track.mp3.1700000000.json
"""
    )

    # Required arguments
    parser.add_argument(
        "path",
        help="Folder to scan (or audio file with --restore-backup)"
    )

    # Apply options
    parser.add_argument(
        "--apply",
        action="store_true",
        help="Write accepted suggestions to the files"
    )

    parser.add_argument(
        "--yes", "-y",
        action="store_true",
        help="Auto-confirm all changes (non-interactive)"
    )

    parser.add_argument(
        "--rename",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Rename files to 'Artist - Title.ext' after writing tags (default: from settings)"
    )

    parser.add_argument(
        "--organize",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Move files into folders built from --pattern (default: from settings)"
    )

    parser.add_argument(
        "--pattern",
        help="Folder pattern for --organize, e.g. '{genre}/{artist}' "
             "(fields: genre, artist, title, album, year)"
    )

    parser.add_argument(
        "--backup",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Snapshot current tags before writing (default: from settings)"
    )

    # Providers
    parser.add_argument(
        "--skip-spotify",
        action="store_true",
        help="Do not query Spotify"
    )

    parser.add_argument(
        "--skip-beatport",
        action="store_true",
        help="Do not query Beatport"
    )

    parser.add_argument(
        "--skip-musicbrainz",
        action="store_true",
        help="Do not query MusicBrainz"
    )

    # Extra tools
    parser.add_argument(
        "--choose",
        action="store_true",
        help="Pick a suggestion (or type a genre) for every file before applying"
    )
    parser.add_argument(
        "--find-duplicates",
        action="store_true",
        help="List files that share artist and title after scanning"
    )

    parser.add_argument(
        "--restore-backup",
        metavar="BACKUP",
        help="Restore tags of the audio file PATH from a backup snapshot"
    )

    # Configuration
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to .env file (default: ./.env)"
    )

    parser.add_argument(
        "--settings-file",
        help="Path to settings.json (default: in the user config directory)"
    )

    parser.add_argument(
        "--save-settings",
        action="store_true",
        help="Persist --rename/--organize/--pattern/--backup as new defaults"
    )

    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output"
    )

    # Verbosity
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress non-essential output"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show debug logging"
    )

    parser.add_argument(
        "--log-file",
        help="Also write the log to this file"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose, args.log_file)

    # Initialize prompts
    prompts = InteractivePrompts(
        no_color=args.no_color,
        auto_yes=args.yes,
        quiet=args.quiet
    )

    if args.restore_backup:
        return restore_backup(args.restore_backup, args.path, prompts)

    # Load configuration
    config = load_config(args.env_file)

    try:
        settings = apply_cli_overrides(load_settings(args.settings_file), args)
        if args.save_settings:
            saved_to = save_settings(settings, args.settings_file)
            prompts.print(f"Settings saved to {saved_to}")
    except SettingsError as e:
        eprint(f"Settings error: {e}")
        return EXIT_ERROR

    merged = {
        "spotify_client_id": config.get("spotify_client_id") or settings.spotify_client_id,
        "spotify_client_secret": config.get("spotify_client_secret") or settings.spotify_client_secret,
        "beatport_username": config.get("beatport_username") or settings.beatport_username,
        "beatport_password": config.get("beatport_password") or settings.beatport_password,
    }
    missing = validate_config(merged, args.skip_spotify, args.skip_beatport)

    if missing:
        eprint(f"\nMissing credentials: {', '.join(missing)}")
        if any("SPOTIFY" in m for m in missing):
            eprint(get_spotify_instructions())
        if any("BEATPORT" in m for m in missing):
            eprint(get_beatport_instructions())
        eprint("Providers without credentials are skipped.\n")

    # Run processor
    processor = AutoGenreProcessor(config, settings, args, prompts)
    processor.install_interrupt_handler()

    try:
        return processor.process(args.path)
    except ScanError as e:
        eprint(f"Scan failed: {e}")
        return EXIT_ERROR
    except KeyboardInterrupt:
        processor.cancel()
        print("\nInterrupted by user.")
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
