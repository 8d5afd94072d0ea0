"""File renaming and pattern-based folder organization."""

import logging
import shutil
from pathlib import Path

from autogenre.errors import FileOperationError
from autogenre.models import Metadata
from autogenre.utils import expand_folder_pattern, generate_track_filename

logger = logging.getLogger(__name__)


class FolderManager:
    """Renames audio files and moves them into pattern folders."""

    def generate_filename(self, metadata: Metadata, extension: str) -> str:
        """
        Generate filename based on metadata: {ARTIST} - {TITLE}.{ext}

        Args:
            metadata: Metadata with file info
            extension: File extension (e.g., '.mp3' or 'mp3')

        Returns:
            New filename
        """
        return generate_track_filename(metadata, extension)

    def build_target_folder(self, metadata: Metadata, base_folder: str,
                            pattern: str) -> Path:
        """
        Resolve the folder a file belongs in under base_folder.

        Raises:
            FileOperationError: If the pattern points outside base_folder
        """
        base = Path(base_folder)
        relative = expand_folder_pattern(pattern, metadata)
        target = base / relative if relative else base

        if not target.resolve().is_relative_to(base.resolve()):
            raise FileOperationError(f"Folder pattern escapes base folder: {pattern}")
        return target

    def rename_file(self, file_path: str, metadata: Metadata) -> str:
        """
        Rename audio file to "Artist - Title.ext" in its folder.

        Args:
            file_path: Current file path
            metadata: Metadata to build the name from

        Returns:
            New path (unchanged if the file already has that name)

        Raises:
            FileOperationError: If the source is missing or the name is taken
        """
        current = Path(file_path)

        if not current.exists():
            raise FileOperationError(f"Source file not found: {current}")

        new_name = self.generate_filename(metadata, current.suffix)
        new_path = current.parent / new_name

        if current.name == new_name:
            return str(current)

        if new_path.exists():
            raise FileOperationError(f"File already exists: {new_path}")

        try:
            current.rename(new_path)
        except OSError as e:
            raise FileOperationError(f"Failed to rename file: {e}") from e

        logger.debug(f"Renamed {current.name} -> {new_name}")
        return str(new_path)

    def organize_file(self, file_path: str, metadata: Metadata,
                      base_folder: str, pattern: str) -> str:
        """
        Move audio file into base_folder/<expanded pattern>/.

        Args:
            file_path: Current file path
            metadata: Metadata used to expand the pattern
            base_folder: Root of the organized library
            pattern: Folder pattern such as "{genre}/{artist}"

        Returns:
            New path (unchanged if the file is already in place)

        Raises:
            FileOperationError: If the source is missing, the target exists,
                or the folders cannot be created
        """
        source = Path(file_path)

        if not source.exists():
            raise FileOperationError(f"Source file not found: {source}")

        target_folder = self.build_target_folder(metadata, base_folder, pattern)
        target = target_folder / source.name

        if target.resolve() == source.resolve():
            return str(source)

        if target.exists():
            raise FileOperationError(f"File already exists at destination: {target}")

        try:
            target_folder.mkdir(parents=True, exist_ok=True)
            shutil.move(str(source), str(target))
        except OSError as e:
            raise FileOperationError(f"Failed to move file: {e}") from e

        logger.debug(f"Moved {source.name} -> {target_folder}")
        return str(target)
