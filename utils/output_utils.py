from __future__ import annotations

import os
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, Optional, TextIO


class OutputLevel(Enum):
    """
    Message output levels, in ascending order of importance.
    """
    DEBUG = 1
    INFO = 2
    WARNING = 3
    ERROR = 4
    CRITICAL = 5


@dataclass
class Style:
    """Foreground color name plus a couple of ANSI effects."""
    fg: Optional[str] = None
    bold: bool = False
    dim: bool = False

    # Basic named colors
    COLORS = {
        'black': 30, 'red': 31, 'green': 32, 'yellow': 33,
        'blue': 34, 'magenta': 35, 'cyan': 36, 'white': 37, 'gray': 90,
    }

    def apply(self, text: str) -> str:
        codes = []
        if self.fg and self.fg.lower() in self.COLORS:
            codes.append(str(self.COLORS[self.fg.lower()]))
        if self.bold:
            codes.append('1')
        if self.dim:
            codes.append('2')
        if not codes:
            return text
        return f"\033[{';'.join(codes)}m{text}\033[0m"


class OutputHandler:
    """
    Writes messages to the console with optional color, respecting an
    overall output level (e.g. INFO, WARNING).

    Prompts are written through prompt(), which bypasses levels and styling
    so the user sees the text exactly as given.
    """

    def __init__(self, config: Any) -> None:
        """
        Expected config usage:
          - config.get_option('DEFAULT', 'colors', fallback=True) => bool
          - config.get_option('DEFAULT', 'output_level', fallback='INFO') => str
        """
        self.config = config
        self._stream: Optional[TextIO] = None
        self._color_enabled = bool(config.get_option('DEFAULT', 'colors', fallback=True)) and self._supports_color()

        self.level_styles: Dict[OutputLevel, Style] = {
            OutputLevel.DEBUG: Style(fg='gray', dim=True),
            OutputLevel.INFO: Style(),
            OutputLevel.WARNING: Style(fg='yellow'),
            OutputLevel.ERROR: Style(fg='red', bold=True),
            OutputLevel.CRITICAL: Style(fg='red', bold=True),
        }

        level_str = str(config.get_option('DEFAULT', 'output_level', fallback='INFO'))
        try:
            self.level = OutputLevel[level_str.upper()]
        except KeyError:
            self.level = OutputLevel.INFO
            self.error(f"Invalid output level '{level_str}', using INFO")

    @staticmethod
    def _supports_color() -> bool:
        """Honor NO_COLOR, TTY detection and dumb terminals."""
        if os.environ.get('NO_COLOR'):
            return False
        if not hasattr(sys.stdout, 'isatty') or not sys.stdout.isatty():
            return False
        return os.environ.get('TERM', '').lower() not in ('dumb', 'unknown', '')

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def set_stream(self, stream: TextIO) -> None:
        """
        Switch output to a different stream (useful in testing).
        """
        self._stream = stream

    def prompt(self, text: str) -> None:
        """Write prompt text verbatim, without a trailing newline, and flush."""
        self.stream.write(text)
        self.stream.flush()

    def write(
            self,
            message: Any = '',
            level: OutputLevel = OutputLevel.INFO,
            style: Optional[Style] = None,
            end: str = '\n',
            flush: bool = False
    ) -> None:
        if level.value < self.level.value:
            return
        msg_str = str(message)
        if self._color_enabled:
            msg_str = (style or self.level_styles.get(level, Style())).apply(msg_str)
        print(msg_str, end=end, file=self.stream, flush=flush)

    @contextmanager
    def suppress_below(self, level: OutputLevel) -> Iterator[None]:
        """Temporarily raise the output threshold."""
        previous = self.level
        if level.value > previous.value:
            self.level = level
        try:
            yield
        finally:
            self.level = previous

    def debug(self, message: Any, **kwargs) -> None:
        self.write(message, level=OutputLevel.DEBUG, **kwargs)

    def info(self, message: Any, **kwargs) -> None:
        self.write(message, level=OutputLevel.INFO, **kwargs)

    def warning(self, message: Any, **kwargs) -> None:
        self.write(message, level=OutputLevel.WARNING, **kwargs)

    def error(self, message: Any, **kwargs) -> None:
        self.write(message, level=OutputLevel.ERROR, **kwargs)

    def critical(self, message: Any, **kwargs) -> None:
        self.write(message, level=OutputLevel.CRITICAL, **kwargs)

    def success(self, message: Any, **kwargs) -> None:
        """Output a 'success' message in green and bold."""
        self.write(message, style=Style(fg='green', bold=True), **kwargs)
