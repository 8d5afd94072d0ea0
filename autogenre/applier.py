"""Apply pass: write accepted suggestions, then optionally rename and organize."""

import logging
import threading
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from autogenre.folder_manager import FolderManager
from autogenre.models import (
    AppSettings, ApplyReport, AudioFile, EnhancedAudioFile, FileApplyState,
    FileOutcome, Metadata
)
from autogenre.progress import (
    APPLY_BASELINE, APPLY_SPAN, ProgressReporter, pass_progress
)
from autogenre.tag_handler import TagHandler

logger = logging.getLogger(__name__)


def build_effective_metadata(audio_file: EnhancedAudioFile) -> Optional[Metadata]:
    """
    Merge the accepted suggestion into the file's current metadata.

    Genre comes from the user's selected_genre, else the accepted suggestion,
    else the current tags; artist from the suggestion, else the current tags.
    Title, album, year and bpm are carried over.

    Returns:
        The metadata to write, or None when there is nothing to apply.
    """
    suggestion = audio_file.accepted_suggestion
    if suggestion is None:
        return None
    if not suggestion.is_useful and not audio_file.selected_genre:
        return None

    current = audio_file.current_metadata or Metadata()
    return replace(
        current,
        genre=audio_file.selected_genre or suggestion.genre or current.genre,
        artist=suggestion.artist or current.artist,
    )


class ApplyOrchestrator:
    """Runs update -> rename -> organize for every file with a suggestion."""

    def __init__(self, tag_handler: Optional[TagHandler] = None,
                 folder_manager: Optional[FolderManager] = None,
                 reporter: Optional[ProgressReporter] = None):
        """
        Initialize orchestrator.

        Args:
            tag_handler: Writes tags (and backups)
            folder_manager: Renames and moves files
            reporter: Progress/status sink (a private one if omitted)
        """
        self.tag_handler = tag_handler or TagHandler()
        self.folder_manager = folder_manager or FolderManager()
        self.reporter = reporter or ProgressReporter()

    def apply(self, inventory: Sequence[AudioFile], settings: AppSettings,
              base_folder: Optional[str] = None,
              cancel_event: Optional[threading.Event] = None) -> ApplyReport:
        """
        Apply accepted suggestions to every file, in inventory order.

        A failed tag write is the only per-file failure: it is counted,
        recorded as "<filename>: <message>" and ends work on that file.
        Rename and organize failures are logged and never undo the write.

        Args:
            inventory: Annotated inventory from the resolution pass
            settings: Backup / rename / organize switches and folder pattern
            base_folder: Root for organizing (organize is skipped without it)
            cancel_event: Set to stop before the next file

        Returns:
            ApplyReport holding the new inventory, counts and errors.
        """
        total = len(inventory)
        report = ApplyReport()

        self.reporter.begin_pass(APPLY_BASELINE, "Applying metadata changes...")

        for i, audio_file in enumerate(inventory):
            if cancel_event is not None and cancel_event.is_set():
                logger.info(f"Apply cancelled after {i} of {total} files")
                report.inventory.extend(
                    replace(EnhancedAudioFile.from_audio_file(af)) for af in inventory[i:]
                )
                report.cancelled = True
                self.reporter.set_status(f"Cancelled after {i} of {total} files. {report.message}")
                return report

            record = replace(EnhancedAudioFile.from_audio_file(audio_file))
            report.inventory.append(self._apply_file(record, settings, base_folder, report))

            self.reporter.advance(pass_progress(APPLY_BASELINE, APPLY_SPAN, i, total))

        self.reporter.advance(APPLY_BASELINE + APPLY_SPAN)

        if report.errors:
            logger.error(f"Metadata update errors: {report.errors}")

        self.reporter.set_status(report.message)
        return report

    def _apply_file(self, record: EnhancedAudioFile, settings: AppSettings,
                    base_folder: Optional[str], report: ApplyReport) -> EnhancedAudioFile:
        """Run the steps for one file and return its updated record."""
        effective = build_effective_metadata(record)
        if effective is None:
            report.skipped_count += 1
            return record

        outcome = FileOutcome(filename=record.filename)
        report.outcomes.append(outcome)

        try:
            self.tag_handler.update_metadata(
                record.path, effective, backup=settings.backup_before_changes
            )
        except Exception as e:
            logger.error(f"Error updating {record.filename}: {e}")
            outcome.error = str(e)
            outcome.advance(FileApplyState.WRITE_FAILED)
            report.errors.append(f"{record.filename}: {e}")
            report.failure_count += 1
            return record

        # The tags are on disk now, whatever happens to rename/organize
        record = replace(record, current_metadata=effective)
        outcome.advance(FileApplyState.WRITTEN)

        if settings.rename_files:
            try:
                new_path = self.folder_manager.rename_file(record.path, effective)
            except Exception as e:
                logger.warning(f"Error renaming {record.filename}: {e}")
                outcome.advance(FileApplyState.RENAME_SKIPPED)
            else:
                record = replace(record, path=new_path, filename=Path(new_path).name)
                report.renamed_count += 1
                outcome.advance(FileApplyState.RENAMED)
        else:
            outcome.advance(FileApplyState.RENAME_SKIPPED)

        if settings.organize_files and base_folder:
            try:
                new_path = self.folder_manager.organize_file(
                    record.path, effective, base_folder, settings.folder_pattern
                )
            except Exception as e:
                logger.warning(f"Error organizing {record.filename}: {e}")
                outcome.advance(FileApplyState.ORGANIZE_SKIPPED)
            else:
                record = replace(record, path=new_path, filename=Path(new_path).name)
                report.organized_count += 1
                outcome.advance(FileApplyState.ORGANIZED)
        else:
            outcome.advance(FileApplyState.ORGANIZE_SKIPPED)

        outcome.advance(FileApplyState.DONE)
        report.success_count += 1
        return record
