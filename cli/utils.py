"""Utility functions for CLI output."""

import sys
from typing import Optional, TextIO

from cli.constants import GREEN, RESET
from uploader.session import UploadSession
from uploader.types import UploadOutcome


class ProgressPrinter:
    """Upload session observer that renders progress on a single terminal line."""

    def __init__(self, filename: str, stream: Optional[TextIO] = None):
        """
        Initialize the progress printer.

        Args:
            filename: Display name for the file
            stream: Output stream (the current sys.stdout by default)
        """
        self.filename = filename
        self.stream = stream or sys.stdout

    def attach(self, session: UploadSession) -> None:
        session.set_progress_observer(self.on_progress)
        session.set_pause_observer(self.on_pause)
        session.set_completion_observer(self.on_completion)

    def on_progress(self, fraction: float, text: str) -> None:
        self.stream.write(f"\r{self.filename}: {GREEN}{text}{RESET}")
        self.stream.flush()

    def on_pause(self) -> None:
        self.stream.write(f"\n{self.filename}: paused\n")
        self.stream.flush()

    def on_completion(self, outcome: UploadOutcome) -> None:
        self.stream.write(f"\n{self.filename}: {describe_outcome(outcome)}\n")
        self.stream.flush()


def describe_outcome(outcome: UploadOutcome) -> str:
    """
    Summarize an upload outcome for display.

    Returns:
        Human-readable status line
    """
    if outcome.error is not None:
        return f"upload failed ({type(outcome.error).__name__}: {outcome.error})"
    if outcome.ok:
        return f"upload finished (HTTP {outcome.status_code})"
    return f"upload rejected by server (HTTP {outcome.status_code})"
