from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, TextIO, Union


class OutputLevel(Enum):
    """Console message levels, lowest first."""
    DEBUG = 1
    INFO = 2
    WARNING = 3
    ERROR = 4


@dataclass(frozen=True)
class Style:
    fg: Optional[str] = None
    bold: bool = False
    dim: bool = False


_FG_CODES: Dict[str, int] = {
    'red': 31, 'green': 32, 'yellow': 33, 'cyan': 36, 'gray': 90,
}

_LEVEL_STYLES: Dict[OutputLevel, Style] = {
    OutputLevel.DEBUG: Style(fg='gray', dim=True),
    OutputLevel.INFO: Style(),
    OutputLevel.WARNING: Style(fg='yellow'),
    OutputLevel.ERROR: Style(fg='red', bold=True),
}


def ansi(text: str, style: Style) -> str:
    """Wrap text in SGR codes for the given style; unchanged if the style is empty."""
    codes: List[str] = []
    if style.fg in _FG_CODES:
        codes.append(str(_FG_CODES[style.fg]))
    if style.bold:
        codes.append('1')
    if style.dim:
        codes.append('2')
    if not codes:
        return text
    return f"\033[{';'.join(codes)}m{text}\033[0m"


class OutputHandler:
    """
    Console writer for the quote viewer.

    Reads two options from the app config:
      - [DEFAULT] colors: ANSI styling, only honoured on a TTY without NO_COLOR
      - [DEFAULT] output_level: messages below this level are dropped
    """

    def __init__(self, config: Any, stream: Optional[TextIO] = None) -> None:
        self._stream: TextIO = stream or sys.stdout
        self._color_enabled = (
            bool(config.get_option('DEFAULT', 'colors', fallback=True))
            and self._is_color_terminal(self._stream)
        )

        level_name = str(config.get_option('DEFAULT', 'output_level', fallback='INFO'))
        self.level = OutputLevel.__members__.get(level_name.upper())
        if self.level is None:
            self.level = OutputLevel.INFO
            self.error(f"Invalid output level '{level_name}', using INFO")

    @staticmethod
    def _is_color_terminal(stream: TextIO) -> bool:
        if os.environ.get('NO_COLOR'):
            return False
        isatty = getattr(stream, 'isatty', None)
        if isatty is None or not isatty():
            return False
        return os.environ.get('TERM', '').lower() not in ('', 'dumb', 'unknown')

    def set_stream(self, stream: TextIO) -> None:
        self._stream = stream

    def style_text(self, text: str, fg: Optional[str] = None, bold: bool = False, dim: bool = False) -> str:
        """Inline styling for part of a line; plain text when colors are off."""
        if not self._color_enabled:
            return text
        return ansi(text, Style(fg=fg, bold=bold, dim=dim))

    def write(
            self,
            message: Any = '',
            level: OutputLevel = OutputLevel.INFO,
            style: Optional[Style] = None,
            spacing: Optional[Union[int, List[int]]] = None,
    ) -> None:
        """
        Print one message if its level passes the threshold.

        spacing: blank lines around the message, an int for both sides or [before, after]
        """
        if level.value < self.level.value:
            return

        text = str(message)
        if self._color_enabled:
            text = ansi(text, style or _LEVEL_STYLES[level])

        if spacing is None:
            before = after = 0
        elif isinstance(spacing, int):
            before = after = spacing
        else:
            before, after = spacing

        self._stream.write('\n' * before + text + '\n' + '\n' * after)
        self._stream.flush()

    def debug(self, message: Any, **kwargs) -> None:
        self.write(message, level=OutputLevel.DEBUG, **kwargs)

    def warning(self, message: Any, **kwargs) -> None:
        self.write(message, level=OutputLevel.WARNING, **kwargs)

    def error(self, message: Any, **kwargs) -> None:
        self.write(message, level=OutputLevel.ERROR, **kwargs)

    def status(self, message: Any, **kwargs) -> None:
        """Progress line, cyan when colors are on."""
        self.write(message, style=Style(fg='cyan'), **kwargs)
