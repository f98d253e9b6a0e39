"""Incremental line framing for chunked SSE bodies."""

from __future__ import annotations

import codecs
from typing import Optional


class LineFramer:
    """Turns arbitrarily chunked transport data into complete lines.

    Bytes go through an incremental UTF-8 decoder first, so a multi-byte
    character split across two reads is reassembled rather than mangled.
    Text is then split on ``"\\n"``; the trailing fragment after the last
    newline is kept as the buffer until a later chunk completes it.
    """

    def __init__(self) -> None:
        self.buffer = ""
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def decode(self, data: bytes, final: bool = False) -> str:
        return self._decoder.decode(data, final=final)

    def feed(self, chunk: str) -> list[str]:
        """Append ``chunk`` and return every line it completed."""
        self.buffer += chunk
        lines = self.buffer.split("\n")
        self.buffer = lines.pop()
        return lines

    def feed_bytes(self, data: bytes) -> list[str]:
        return self.feed(self.decode(data))

    def flush(self) -> Optional[str]:
        """Return the unterminated remainder as a final line, if any.

        Called once at end-of-stream so a last frame without a trailing
        newline is not lost.
        """
        remainder = self.buffer + self.decode(b"", final=True)
        self.buffer = ""
        if not remainder.strip():
            return None
        return remainder
