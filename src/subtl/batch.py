"""
Batch runner: walks the input tree and runs the caption pipeline per file.
"""
from typing import Callable, Optional
from dataclasses import dataclass

from rich.console import Console
from rich.markup import escape

from .config import Settings
from .files import backup_and_write, discover_files, group_files, read_subtitle, subtitle_format
from .pipeline import CaptionPipeline, FileOutcome

console = Console()


@dataclass
class BatchSummary:
    files: int = 0
    changed: int = 0
    unchanged: int = 0
    failed: int = 0
    translated: int = 0
    cached: int = 0
    rejected: int = 0

    def add(self, outcome: FileOutcome) -> None:
        self.translated += outcome.translated
        self.cached += outcome.cached
        self.rejected += outcome.rejected


class BatchRunner:
    """Processes every subtitle file under the input root, one at a time"""

    def __init__(self, settings: Settings, pipeline: CaptionPipeline):
        self.settings = settings
        self.pipeline = pipeline

    def translate_file(self, rel_path: str) -> FileOutcome:
        """Translate one file; writes backup, output and cache when it changed"""
        console.print(f"\nReading {escape(rel_path)}")
        content = read_subtitle(self.settings.input_path, rel_path)
        outcome = self.pipeline.process(content, subtitle_format(rel_path))

        if outcome.content is None:
            console.print("No changes to file detected")
            return outcome

        backup_and_write(
            rel_path,
            outcome.content,
            input_root=self.settings.input_path,
            backup_root=self.settings.backup_path,
            output_root=self.settings.output_path,
        )
        self.pipeline.commit(outcome)
        self.pipeline.cache.save()
        console.print(f"[green]Completed file {escape(rel_path)}[/green]")
        return outcome

    def run(self, on_file: Optional[Callable[[str], None]] = None) -> BatchSummary:
        """Run over all discovered files

        Args:
            on_file: Called after each file, successful or not

        Returns:
            Counts for the whole run
        """
        summary = BatchSummary()
        groups = group_files(discover_files(self.settings.input_path), self.settings.work_unit_pattern)
        console.print(f"Found {len(groups)} folder entries.")

        for key, files in groups.items():
            console.print(f"\nParsing {escape(key)}...")
            for rel_path in files:
                summary.files += 1
                try:
                    outcome = self.translate_file(rel_path)
                except Exception as e:
                    summary.failed += 1
                    console.print(f"[red]Failed to process {escape(rel_path)}: {escape(str(e))}[/red]")
                else:
                    summary.add(outcome)
                    if outcome.content is None:
                        summary.unchanged += 1
                    else:
                        summary.changed += 1
                if on_file is not None:
                    on_file(rel_path)
        return summary

    def count_files(self) -> int:
        return len(discover_files(self.settings.input_path))
