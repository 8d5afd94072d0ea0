"""Console output and confirmations."""

from typing import List, Optional, Sequence, Tuple

from autogenre.models import ApplyReport, AudioFile, EnhancedAudioFile, MetadataResult


class InteractivePrompts:
    """Handles user interaction and confirmations."""

    COLORS = {
        "reset": "\033[0m",
        "bold": "\033[1m",
        "green": "\033[92m",
        "yellow": "\033[93m",
        "red": "\033[91m",
        "cyan": "\033[96m",
        "dim": "\033[2m",
    }

    TRUNCATE_LEN = 28

    def __init__(self, no_color: bool = False, auto_yes: bool = False,
                 quiet: bool = False):
        """
        Initialize interactive prompts.

        Args:
            no_color: Disable colored output
            auto_yes: Auto-confirm all changes
            quiet: Suppress non-essential output
        """
        self.no_color = no_color
        self.auto_yes = auto_yes
        self.quiet = quiet

        if no_color:
            self.COLORS = {k: "" for k in self.COLORS}

    def _c(self, color: str, text: str) -> str:
        """Apply color to text."""
        return f"{self.COLORS.get(color, '')}{text}{self.COLORS['reset']}"

    def _truncate(self, value: str, width: Optional[int] = None) -> str:
        width = width or self.TRUNCATE_LEN
        if len(value) > width:
            return value[:width - 3] + "..."
        return value

    def _cell(self, text: str, width: int, color: Optional[str] = None) -> str:
        """Truncate and pad to width, then color; padding ignores escape codes."""
        cell = f"{self._truncate(text, width):<{width}}"
        return self._c(color, cell) if color else cell

    def print(self, *args, **kwargs):
        """Print unless quiet mode."""
        if not self.quiet:
            print(*args, **kwargs)

    def show_progress(self, progress: float, status: str = "") -> None:
        """Display progress bar; usable as a ProgressReporter listener."""
        if self.quiet:
            return

        bar_width = 30
        filled = int(bar_width * progress / 100)
        bar = "=" * filled + "-" * (bar_width - filled)

        print(f"\r[{bar}] {progress:5.1f}% {status}\033[K", end="", flush=True)

        if progress >= 100:
            print()

    def format_suggestion(self, suggestion: MetadataResult) -> str:
        """One-line description of a suggestion."""
        genre = suggestion.genre or "?"
        artist = suggestion.artist or "?"
        return f"{genre} / {artist} [{suggestion.confidence.value}, {suggestion.source}]"

    def show_suggestions(self, inventory: Sequence[EnhancedAudioFile]) -> None:
        """Display current genre vs accepted suggestion for every file."""
        print(f"\n{'File':<30} {'Current genre':<20} {'Suggested':<40}")
        print(f"{'=' * 30} {'=' * 20} {'=' * 40}")

        for af in inventory:
            current = af.current_metadata.genre if af.current_metadata else None
            current_str = self._cell(current, 20) if current else self._cell("(empty)", 20, "dim")

            suggestion = af.accepted_suggestion
            if af.suggested_metadata is None:
                suggested_str = self._c("dim", "(not looked up)")
            elif suggestion is None:
                suggested_str = self._c("dim", "(no suggestions)")
            else:
                text = self.format_suggestion(suggestion)
                if af.selected_genre:
                    text = f"{af.selected_genre} (selected)"
                changed = (af.selected_genre or suggestion.genre) != current
                suggested_str = self._c("green", text) if changed else text

            print(f"{self._cell(af.filename, 30)} {current_str} {suggested_str}")

    def confirm_apply(self, count: int) -> bool:
        """Ask before writing suggestions to ``count`` files."""
        if self.auto_yes:
            return True
        if count == 0:
            return False

        choice = input(
            f"\n{self._c('bold', f'Apply suggestions to {count} file(s)? [y/N]: ')} "
        ).strip().lower()
        return choice == "y"

    def select_suggestion(self, af: EnhancedAudioFile) -> Tuple[Optional[int], Optional[str]]:
        """
        Let user pick a suggestion for one file, or type a genre.

        Args:
            af: Annotated file with ranked suggestions

        Returns:
            Tuple of (suggestion index or None, typed genre or None).
            (None, None) keeps the current choice.
        """
        suggestions = af.suggested_metadata or []

        print(f"\n{self._c('cyan', af.filename)}")
        for i, suggestion in enumerate(suggestions, 1):
            print(f"  [{i}] {self.format_suggestion(suggestion)}")
        print(f"  [g] Enter genre manually")
        print(f"  [k] Keep current choice")

        while True:
            choice = input(f"\n{self._c('bold', f'Select suggestion [1-{len(suggestions)}/g/k]: ')} ").strip()

            if choice.lower() in ("k", ""):
                return None, None
            if choice.lower() == "g":
                genre = input("Genre: ").strip()
                if genre:
                    return None, genre
                continue

            try:
                idx = int(choice)
                if 1 <= idx <= len(suggestions):
                    return idx - 1, None
            except ValueError:
                pass

            print(self._c("red", "Invalid selection. Try again."))

    def show_duplicates(self, groups: List[List[int]],
                        inventory: Sequence[AudioFile]) -> None:
        """List groups of files that look like the same track."""
        if not groups:
            self.print("\nNo duplicates found.")
            return

        print(f"\n{self._c('yellow', f'Possible duplicates ({len(groups)} group(s)):')}")
        for group in groups:
            first = inventory[group[0]].current_metadata
            print(f"  {first.artist} - {first.title}")
            for index in group:
                print(f"    - {inventory[index].path}")

    def show_summary(self, report: ApplyReport) -> None:
        """Display final apply summary."""
        print(f"\n{self._c('bold', '=' * 60)}")
        print(f"{self._c('bold', 'Apply Summary')}")
        print("=" * 60)

        print(f"Tags updated:        {self._c('green', str(report.success_count))}")
        print(f"Files renamed:       {report.renamed_count}")
        print(f"Files organized:     {report.organized_count}")
        print(f"Files skipped:       {report.skipped_count}")
        print(f"Failed:              {report.failure_count}")

        if report.errors:
            print(f"\n{self._c('red', 'Errors:')}")
            for error in report.errors[:10]:  # Limit displayed errors
                print(f"  - {error}")
            if len(report.errors) > 10:
                print(f"  ... and {len(report.errors) - 10} more errors")

        print(f"\n{report.message}")
