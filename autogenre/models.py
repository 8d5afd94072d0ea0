"""Data models for AutoGenre."""

from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from functools import total_ordering
from pathlib import Path
from typing import List, Optional


@total_ordering
class Confidence(Enum):
    """Reliability label a provider attaches to its suggestion."""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @property
    def rank(self) -> int:
        """Numeric position in the ordering (higher is more reliable)."""
        return _CONFIDENCE_RANK[self]

    def __lt__(self, other):
        if not isinstance(other, Confidence):
            return NotImplemented
        return self.rank < other.rank


_CONFIDENCE_RANK = {
    Confidence.HIGH: 3,
    Confidence.MEDIUM: 2,
    Confidence.LOW: 1,
}


@dataclass
class Metadata:
    """The semantic tag set of one audio file. None means unknown."""
    title: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    genre: Optional[str] = None
    year: Optional[int] = None
    bpm: Optional[int] = None

    @property
    def is_identifiable(self) -> bool:
        """Check if artist and title are both known (needed for lookups)."""
        return bool(self.artist) and bool(self.title)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Metadata":
        """Build Metadata from a dict, normalizing empty strings to None."""
        values = {}
        for f in fields(cls):
            value = data.get(f.name)
            if value == "":
                value = None
            if value is not None and f.name in ("year", "bpm"):
                value = int(value)
            values[f.name] = value
        return cls(**values)


@dataclass(frozen=True)
class MetadataResult:
    """One suggestion from one provider."""
    genre: Optional[str]
    artist: Optional[str]
    confidence: Confidence
    source: str

    @property
    def is_useful(self) -> bool:
        """Check if the suggestion carries a genre or an artist."""
        return bool(self.genre) or bool(self.artist)


@dataclass
class AudioFile:
    """Identity record for one audio file found by a scan."""
    path: str
    filename: str
    extension: str
    current_metadata: Optional[Metadata] = None

    @classmethod
    def from_path(cls, file_path: str,
                  metadata: Optional[Metadata] = None) -> "AudioFile":
        path = Path(file_path)
        return cls(
            path=str(path),
            filename=path.name,
            extension=path.suffix.lower().lstrip("."),
            current_metadata=metadata,
        )


@dataclass
class EnhancedAudioFile(AudioFile):
    """An AudioFile annotated with ranked provider suggestions."""
    suggested_metadata: Optional[List[MetadataResult]] = None
    selected_genre: Optional[str] = None

    @classmethod
    def from_audio_file(cls, audio_file: AudioFile) -> "EnhancedAudioFile":
        if isinstance(audio_file, EnhancedAudioFile):
            return audio_file
        return cls(
            path=audio_file.path,
            filename=audio_file.filename,
            extension=audio_file.extension,
            current_metadata=audio_file.current_metadata,
        )

    @property
    def accepted_suggestion(self) -> Optional[MetadataResult]:
        """The suggestion applied by default (first after ranking)."""
        if self.suggested_metadata:
            return self.suggested_metadata[0]
        return None


@dataclass
class AppSettings:
    """Process-wide configuration persisted between sessions."""
    spotify_client_id: str = ""
    spotify_client_secret: str = ""
    beatport_username: str = ""
    beatport_password: str = ""
    folder_pattern: str = "{genre}"
    backup_before_changes: bool = True
    organize_files: bool = False
    rename_files: bool = False

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "AppSettings":
        """Build settings from a dict; unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


class FileApplyState(Enum):
    """Steps a file goes through during an apply pass."""
    PENDING = "pending"
    WRITE_FAILED = "write-failed"
    WRITTEN = "written"
    RENAMED = "renamed"
    RENAME_SKIPPED = "rename-skipped"
    ORGANIZED = "organized"
    ORGANIZE_SKIPPED = "organize-skipped"
    DONE = "done"


@dataclass
class FileOutcome:
    """Trail of apply states for a single file."""
    filename: str
    states: List[FileApplyState] = field(
        default_factory=lambda: [FileApplyState.PENDING]
    )
    error: Optional[str] = None

    @property
    def final_state(self) -> FileApplyState:
        return self.states[-1]

    def advance(self, state: FileApplyState) -> None:
        self.states.append(state)


@dataclass
class ResolutionResult:
    """Output of a resolution pass."""
    inventory: List[EnhancedAudioFile]
    status: str
    processed: int = 0
    skipped: int = 0
    failed: int = 0
    cancelled: bool = False


@dataclass
class ApplyReport:
    """Output of an apply pass."""
    inventory: List[EnhancedAudioFile] = field(default_factory=list)
    success_count: int = 0
    failure_count: int = 0
    organized_count: int = 0
    renamed_count: int = 0
    skipped_count: int = 0
    errors: List[str] = field(default_factory=list)
    outcomes: List[FileOutcome] = field(default_factory=list)
    cancelled: bool = False

    @property
    def message(self) -> str:
        """Human-readable one-line summary."""
        message = f"Completed! {self.success_count} files updated successfully"
        if self.organized_count > 0:
            message += f", {self.organized_count} organized"
        if self.failure_count > 0:
            message += f", {self.failure_count} failed"
        return message
