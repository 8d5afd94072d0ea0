"""
AutoGenre - bulk genre/artist correction for audio libraries.

This package provides tools to:
- Scan a folder for audio files and read their tags
- Ask Spotify, Beatport and MusicBrainz for genre/artist suggestions
- Rank suggestions by confidence and pick a default per file
- Write accepted suggestions back, with optional backup, rename and
  folder organization
"""

__version__ = "1.0.0"
