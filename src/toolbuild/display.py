"""Rich-based status output.

Prints one line per target as results are collected:

    [built] git-uncommitted
    [up-to-date] remotes
    [failed] transcode-media

Errors go to a separate stderr console. Output degrades to plain text when
the stream is not a terminal.
"""

import threading

from rich.console import Console
from rich.text import Text

from .errors import ToolbuildError
from .models import BuildResult, TargetStatus

_STATUS_STYLES = {
    TargetStatus.BUILT: "bold green",
    TargetStatus.UP_TO_DATE: "dim",
    TargetStatus.FAILED: "bold red",
}


class StatusDisplay:
    """Console renderer implementing StatusCallback.

    Args:
        console: Console for status lines. If None, creates a stdout console.
        error_console: Console for error detail. If None, creates a stderr console.
    """

    def __init__(self, console: Console | None = None, error_console: Console | None = None) -> None:
        self._console = console if console is not None else Console(highlight=False)
        self._error_console = error_console if error_console is not None else Console(stderr=True, highlight=False)
        self._lock = threading.Lock()

    @staticmethod
    def format_result(result: BuildResult) -> Text:
        """Format a result as `[status] name`."""
        status = result.status
        return Text.assemble((f"[{status}]", _STATUS_STYLES[status]), " ", result.name)

    def on_result(self, result: BuildResult) -> None:
        with self._lock:
            self._console.print(self.format_result(result), soft_wrap=True)

    def on_complete(self) -> None:
        """Announce a fully successful build."""
        self._console.print()
        self._console.print(Text("build completed", style="bold green"))

    def failed(self, error: ToolbuildError) -> None:
        """Print a run failure with all its detail to stderr."""
        self._error_console.print()
        self._error_console.print(Text("===", style="bold red"))
        self._error_console.print(Text.assemble(("build failed: ", "bold red"), str(error)), soft_wrap=True)
