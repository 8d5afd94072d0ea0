"""Batch resolution: attach ranked suggestions to every identifiable file."""

import logging
import threading
from typing import List, Optional, Sequence

from autogenre.aggregator import MetadataAggregator, fetch_metadata
from autogenre.models import AudioFile, EnhancedAudioFile, ResolutionResult
from autogenre.progress import (
    RESOLUTION_BASELINE, RESOLUTION_SPAN, ProgressReporter, pass_progress
)

logger = logging.getLogger(__name__)


def _unannotated(audio_file: AudioFile) -> EnhancedAudioFile:
    """Fresh record for this pass, without suggestions from earlier passes."""
    return EnhancedAudioFile(
        path=audio_file.path,
        filename=audio_file.filename,
        extension=audio_file.extension,
        current_metadata=audio_file.current_metadata,
    )


class BatchResolver:
    """Resolves suggestions for an inventory, one file at a time."""

    def __init__(self, aggregator: MetadataAggregator,
                 reporter: Optional[ProgressReporter] = None,
                 baseline: float = RESOLUTION_BASELINE,
                 span: float = RESOLUTION_SPAN):
        """
        Initialize resolver.

        Args:
            aggregator: Provider aggregator used for each lookup
            reporter: Progress/status sink (a private one if omitted)
            baseline: Progress value when the pass starts
            span: Share of the progress bar this pass fills
        """
        self.aggregator = aggregator
        self.reporter = reporter or ProgressReporter()
        self.baseline = baseline
        self.span = span

    def resolve(self, inventory: Sequence[AudioFile],
                cancel_event: Optional[threading.Event] = None) -> ResolutionResult:
        """
        Resolve suggestions for every file, in inventory order.

        Files without both artist and title are left unannotated. A failing
        lookup is logged and leaves only that file unannotated. The cancel
        event is checked before each file; the file in flight always
        completes and files not yet started are carried over unannotated.

        Args:
            inventory: Files from the last scan (or a previous pass)
            cancel_event: Set to stop before the next file

        Returns:
            ResolutionResult with a new inventory in the same order.
        """
        total = len(inventory)
        annotated: List[EnhancedAudioFile] = []
        result = ResolutionResult(inventory=annotated, status="")

        self.reporter.begin_pass(
            self.baseline,
            f"Found {total} audio files. Fetching metadata...",
        )

        for i, audio_file in enumerate(inventory):
            if cancel_event is not None and cancel_event.is_set():
                logger.info(f"Resolution cancelled after {i} of {total} files")
                annotated.extend(_unannotated(af) for af in inventory[i:])
                result.cancelled = True
                result.status = f"Cancelled after {i} of {total} files"
                self.reporter.set_status(result.status)
                return result

            annotated.append(self._resolve_file(audio_file, result))

            self.reporter.advance(pass_progress(self.baseline, self.span, i, total))
            self.reporter.set_status(f"Processed {i + 1}/{total}: {audio_file.filename}")

        self.reporter.advance(self.baseline + self.span)
        result.status = f"Completed! Processed {total} files"
        self.reporter.set_status(result.status)
        return result

    def _resolve_file(self, audio_file: AudioFile,
                      result: ResolutionResult) -> EnhancedAudioFile:
        """Look up one file; never raises."""
        record = _unannotated(audio_file)
        metadata = audio_file.current_metadata

        if metadata is None or not metadata.is_identifiable:
            logger.debug(f"Skipping {audio_file.filename}: artist or title unknown")
            result.skipped += 1
            return record

        try:
            record.suggested_metadata = fetch_metadata(
                self.aggregator, metadata.artist, metadata.title
            )
        except Exception as e:
            logger.warning(f"Error fetching metadata for {audio_file.filename}: {e}")
            result.failed += 1
            return record

        result.processed += 1
        logger.debug(
            f"{audio_file.filename}: {len(record.suggested_metadata)} suggestion(s)"
        )
        return record
