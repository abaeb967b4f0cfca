"""
Output scanning: turn a step's streamed output into a scan impulse.
"""

from typing import Optional

from ..ansi import strip_ansi
from .models import Impulse


def search_window(buffer, term: str) -> bool:
    """Look for `term` near the end of `buffer`.

    Only the trailing 2*len(term) bytes of the buffer are searched (the
    whole buffer when it is shorter). Lengths are measured in UTF-8 bytes.
    `buffer` may be a bytearray; only the window is copied.
    """
    length = len(term.encode('utf-8'))
    start = max(len(buffer) - 2 * length, 0)
    window = buffer[start:].decode('utf-8', errors='replace')
    return window.count(term) > 0


class OutputScanner:
    """Accumulates stripped output for one step run and records at most one
    scan impulse.

    Example:
        scanner = OutputScanner(scan_ok="done", scan_err="error")
        for chunk in session.read_chunks():
            impulse = scanner.feed(chunk)
    """

    def __init__(self, scan_ok: Optional[str] = None, scan_err: Optional[str] = None):
        self.scan_ok = scan_ok
        self.scan_err = scan_err
        self.buffer = bytearray()
        self.impulse: Optional[Impulse] = None

    def feed(self, chunk: bytes) -> Optional[Impulse]:
        """Add a raw chunk of output.

        Returns:
            The impulse recorded by this chunk, or None. An impulse is
            returned once per scanner; later matches are ignored.
        """
        stripped = strip_ansi(chunk)
        self.buffer.extend(stripped)

        if self.impulse is not None:
            return None

        impulse = self.classify(self.buffer)
        if impulse is not None:
            self.impulse = impulse
        return impulse

    def classify(self, buffer) -> Optional[Impulse]:
        """Test the error pattern first, then the success pattern."""
        if self.scan_err is not None and search_window(buffer, self.scan_err):
            return Impulse.SCAN_ERR
        if self.scan_ok is not None and search_window(buffer, self.scan_ok):
            return Impulse.SCAN_OK
        return None
