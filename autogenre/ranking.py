"""Ordering of provider suggestions by confidence."""

from dataclasses import replace
from typing import Iterable, List

from autogenre.models import EnhancedAudioFile, MetadataResult


def rank_suggestions(results: Iterable[MetadataResult]) -> List[MetadataResult]:
    """
    Order suggestions by confidence, most reliable first.

    The sort is stable, so suggestions with equal confidence keep the order
    in which their providers answered. Nothing is dropped or re-scored.

    Args:
        results: Suggestions in provider response order

    Returns:
        New list; position 0 is the accepted suggestion.
    """
    return sorted(results, key=lambda r: r.confidence.rank, reverse=True)


def choose_suggestion(audio_file: EnhancedAudioFile,
                      index: int) -> EnhancedAudioFile:
    """
    Make another suggestion the accepted one.

    Moves the suggestion at ``index`` to the front; the rest keep their
    relative order.

    Args:
        audio_file: Annotated file
        index: Position of the suggestion to accept

    Returns:
        A copy of the file with reordered suggestions.

    Raises:
        IndexError: If the file has no suggestion at ``index``.
    """
    suggestions = list(audio_file.suggested_metadata or [])
    if not 0 <= index < len(suggestions):
        raise IndexError(
            f"{audio_file.filename} has no suggestion #{index} "
            f"({len(suggestions)} available)"
        )
    chosen = suggestions.pop(index)
    return replace(audio_file, suggested_metadata=[chosen] + suggestions)
