"""Exception types and CLI error rendering."""

from __future__ import annotations

from pathlib import Path

from rich.markup import escape

from pcaphost.utils.logger import console_err


class PcapHostError(Exception):
    """Base exception for pcaphost errors."""

    def __init__(self, message: str, suggestion: str | None = None):
        """
        Args:
            message: Error message
            suggestion: Optional hint for fixing the error
        """
        self.message = message
        self.suggestion = suggestion
        super().__init__(message)

    def display(self) -> None:
        console_err.print(f"[bold red]Error:[/bold red] {escape(self.message)}")
        if self.suggestion:
            console_err.print(f"[yellow]Suggestion:[/yellow] {escape(self.suggestion)}")


class CaptureError(PcapHostError):
    """A capture file could not be read."""

    def __init__(self, file_path: Path | str, reason: str, suggestion: str | None = None):
        self.file_path = Path(file_path)
        self.reason = reason
        super().__init__(f"{self.file_path}: {reason}", suggestion)


class CaptureOpenError(CaptureError):
    """The capture file is missing, unreadable or not a pcap/pcapng file."""

    def __init__(self, file_path: Path | str, reason: str):
        super().__init__(
            file_path,
            f"cannot open capture ({reason})",
            "Please check that the path exists and is a valid PCAP/PCAPNG file.",
        )


class CaptureReadError(CaptureError):
    """The capture stream failed after it was opened."""

    def __init__(self, file_path: Path | str, reason: str):
        super().__init__(file_path, f"capture read failed ({reason})")


class HostFormatError(PcapHostError, ValueError):
    """A stored host value does not decode into a host record."""

    def __init__(self, text: str, reason: str = "expected 4 comma separated fields"):
        self.text = text
        super().__init__(
            f"Wrong serialized host value: {text!r} ({reason})",
            "The store may be corrupt; run 'pcaphost truncate' and parse again.",
        )


class ExtractionStateError(PcapHostError, RuntimeError):
    """The host extraction stream was consumed out of order."""


class ConfigurationError(PcapHostError):
    """An environment setting has an invalid value."""

    def __init__(self, key: str, value: str, reason: str):
        self.key = key
        super().__init__(
            f"Invalid configuration {key}={value!r}: {reason}",
            f"Unset {key} or give it a valid value.",
        )


def handle_error(error: Exception, *, show_traceback: bool = False) -> int:
    """
    Render an error on stderr and return the process exit code.

    Args:
        error: The exception to handle
        show_traceback: Whether to show the full traceback

    Returns:
        Exit code (non-zero)
    """
    if isinstance(error, PcapHostError):
        error.display()
    else:
        console_err.print(f"[bold red]Unexpected error:[/bold red] {escape(str(error))}")
        if not show_traceback:
            console_err.print("[dim]Run with -vv for more details[/dim]")

    if show_traceback:
        import traceback

        console_err.print("\n[dim]Traceback:[/dim]")
        traceback.print_exception(type(error), error, error.__traceback__)
    return 1
