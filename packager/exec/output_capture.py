"""
Output capture helpers for run commands.

Process output is fully buffered until exit, decoded as UTF-8 and truncated
before it is written to the log.
"""

from dataclasses import dataclass


# Log preview limit for captured output
TEXT_LIMIT_BYTES = 8 * 1024


def decode_output(raw: bytes) -> str:
    """Decode captured bytes, replacing undecodable sequences."""
    if not raw:
        return ""
    try:
        return raw.decode('utf-8')
    except UnicodeDecodeError:
        return raw.decode('utf-8', errors='replace')


def truncate_text(text: str, limit: int = TEXT_LIMIT_BYTES) -> str:
    """
    Truncate text so its UTF-8 encoding fits in ``limit`` bytes.
    Multi-byte characters are never split.
    """
    if len(text.encode('utf-8')) <= limit:
        return text

    output = text[:limit]
    while len(output.encode('utf-8')) > limit:
        output = output[:-1]
    return output + "\n... [truncated]"


@dataclass
class RunResult:
    """Result of a run command."""
    command: str
    exit_code: int
    stdout: str = ""
    stderr: str = ""
    used_shell: bool = False

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0
