"""
ANSI escape sequence removal.
"""
import re

# CSI sequences, OSC strings (BEL or ST terminated), charset selection,
# then any other two-byte escape.
ANSI_ESCAPE_RE = re.compile(
    rb"\x1b\[[0-?]*[ -/]*[@-~]"
    rb"|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)"
    rb"|\x1b[()][0-9A-Za-z]"
    rb"|\x1b[@-Z\\-_]"
)


def strip_ansi(data):
    """Remove terminal escape sequences from a bytes object."""
    return ANSI_ESCAPE_RE.sub(b"", data)
