# input_utils.py
from __future__ import annotations

import math
import struct
import sys
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, NamedTuple, Optional, TextIO, Union

from utils.locale_utils import InputLocale


class TargetKind(Enum):
    """
    Closed set of primitive kinds the input handler can parse into.
    Adding a kind means adding a branch to InputHandler._parse.
    """
    BOOL = 'bool'
    INT8 = 'int8'
    UINT8 = 'uint8'
    INT16 = 'int16'
    UINT16 = 'uint16'
    INT32 = 'int32'
    UINT32 = 'uint32'
    INT64 = 'int64'
    UINT64 = 'uint64'
    CHAR = 'char'
    FLOAT32 = 'float32'
    FLOAT64 = 'float64'
    DECIMAL = 'decimal'

    @classmethod
    def coerce(cls, kind: Union['TargetKind', str]) -> 'TargetKind':
        """Accept a member or its short name ('int32', 'bool', ...)."""
        if isinstance(kind, cls):
            return kind
        if isinstance(kind, str):
            try:
                return cls(kind.strip().lower())
            except ValueError:
                pass
        raise ValueError(f"Unsupported target kind: {kind!r}")

    @property
    def is_integer(self) -> bool:
        return self in INTEGER_BOUNDS

    def describe(self) -> str:
        """Short human-readable description of the accepted values."""
        if self in INTEGER_BOUNDS:
            low, high = INTEGER_BOUNDS[self]
            return f"integer {low}..{high}"
        return _DESCRIPTIONS[self]


INTEGER_BOUNDS = {
    TargetKind.INT8: (-2 ** 7, 2 ** 7 - 1),
    TargetKind.UINT8: (0, 2 ** 8 - 1),
    TargetKind.INT16: (-2 ** 15, 2 ** 15 - 1),
    TargetKind.UINT16: (0, 2 ** 16 - 1),
    TargetKind.INT32: (-2 ** 31, 2 ** 31 - 1),
    TargetKind.UINT32: (0, 2 ** 32 - 1),
    TargetKind.INT64: (-2 ** 63, 2 ** 63 - 1),
    TargetKind.UINT64: (0, 2 ** 64 - 1),
}

_DESCRIPTIONS = {
    TargetKind.BOOL: "y/yes/true or n/no/false",
    TargetKind.CHAR: "exactly one character",
    TargetKind.FLOAT32: "single-precision number",
    TargetKind.FLOAT64: "double-precision number",
    TargetKind.DECIMAL: "arbitrary-precision decimal number",
}

TRUTHY_VALUES = ('y', 'yes', 'true')
FALSY_VALUES = ('n', 'no', 'false')

# Read faults treated as if the user entered an empty line
READ_ERRORS = (OSError, MemoryError, ValueError, EOFError)


class ParseOutcome(NamedTuple):
    """
    Result of one prompt cycle. Unpacks as (value, success); value is None
    whenever success is False.
    """
    value: Any
    success: bool

    @classmethod
    def ok(cls, value: Any) -> 'ParseOutcome':
        return cls(value, True)

    @classmethod
    def failed(cls) -> 'ParseOutcome':
        return cls(None, False)


class InputHandler:
    """
    Prompts on the console and parses a single line into a TargetKind.

    Bad input never raises: every parse or read failure is reported as
    ParseOutcome.failed(). Re-prompting is left to the caller, with ask()
    available as a convenience loop.
    """

    def __init__(
            self,
            config: Any,
            output_handler: Optional[Any] = None,
            logger: Optional[Any] = None,
            input_locale: Optional[InputLocale] = None,
            stream: Optional[TextIO] = None
    ) -> None:
        """
        Initialize the input handler.
        The locale defaults to the one described by the [INPUT] config section;
        streams default to sys.stdin / sys.stdout, looked up at call time.
        """
        self.config = config
        self.output = output_handler
        self.logger = logger
        self.locale = input_locale or InputLocale.from_config(config)
        self._stream: Optional[TextIO] = stream
        self._eof = False

    def set_input_stream(self, stream: TextIO) -> None:
        """Read from a different stream (useful in testing)."""
        self._stream = stream

    @property
    def at_eof(self) -> bool:
        """True when the last read found the input stream exhausted or broken."""
        return self._eof

    # --- Core operation --------------------------------------------------
    def try_get_input(
            self,
            prompt: Optional[str] = "",
            kind: Union[TargetKind, str] = TargetKind.BOOL
    ) -> ParseOutcome:
        """
        Write the prompt, read one line, and parse it as `kind`.

        Args:
            prompt: Text written verbatim before reading (no newline appended)
            kind: The TargetKind (or its short name) to parse into

        Returns:
            ParseOutcome(value, True) on success, ParseOutcome(None, False) otherwise
        """
        kind = TargetKind.coerce(kind)
        self._write_prompt(prompt or "")
        text = self.locale.lower(self._read_line())
        self._log('input_read', {'kind': kind.value, 'length': len(text), 'eof': self._eof})
        if not text:
            return ParseOutcome.failed()

        outcome = self._parse(text, kind)
        details = {'kind': kind.value, 'success': outcome.success}
        if self.logger is not None and self.logger.is_enabled('input', 'trace'):
            details['text'] = text
        self._log('input_parsed', details)
        return outcome

    def _write_prompt(self, prompt: str) -> None:
        if self.output is not None:
            self.output.prompt(prompt)
            return
        sys.stdout.write(prompt)
        sys.stdout.flush()

    def _read_line(self) -> str:
        stream = self._stream if self._stream is not None else sys.stdin
        try:
            line = stream.readline()
        except READ_ERRORS as e:
            self._eof = True
            self._log('read_failed', {'error': type(e).__name__, 'message': str(e)})
            return ""
        if not line:
            self._eof = True
            return ""
        self._eof = False
        if line.endswith('\n'):
            line = line[:-1]
            if line.endswith('\r'):
                line = line[:-1]
        return line

    # --- Parsing ---------------------------------------------------------
    def _parse(self, text: str, kind: TargetKind) -> ParseOutcome:
        if kind is TargetKind.BOOL:
            return self._parse_bool(text)
        elif kind in INTEGER_BOUNDS:
            return self._parse_integer(text, *INTEGER_BOUNDS[kind])
        elif kind is TargetKind.CHAR:
            return ParseOutcome.ok(text) if len(text) == 1 else ParseOutcome.failed()
        elif kind is TargetKind.FLOAT32:
            return self._parse_float(text, single=True)
        elif kind is TargetKind.FLOAT64:
            return self._parse_float(text, single=False)
        elif kind is TargetKind.DECIMAL:
            return self._parse_decimal(text)
        raise ValueError(f"Unsupported target kind: {kind!r}")

    @staticmethod
    def _parse_bool(text: str) -> ParseOutcome:
        folded = text.casefold()
        if folded in TRUTHY_VALUES:
            return ParseOutcome.ok(True)
        if folded in FALSY_VALUES:
            return ParseOutcome.ok(False)
        return ParseOutcome.failed()

    @staticmethod
    def _parse_integer(text: str, low: int, high: int) -> ParseOutcome:
        if not text.isascii():
            return ParseOutcome.failed()
        try:
            value = int(text)
        except ValueError:
            return ParseOutcome.failed()
        if low <= value <= high:
            return ParseOutcome.ok(value)
        return ParseOutcome.failed()

    def _parse_float(self, text: str, single: bool) -> ParseOutcome:
        number = self.locale.to_invariant_number(text)
        if number is None or not number.isascii():
            return ParseOutcome.failed()
        try:
            value = float(number)
        except ValueError:
            return ParseOutcome.failed()

        explicit_infinity = 'inf' in number
        # A finite literal too large for a double comes back as inf
        if math.isinf(value) and not explicit_infinity:
            return ParseOutcome.failed()
        if single and math.isfinite(value):
            try:
                value = struct.unpack('f', struct.pack('f', value))[0]
            except OverflowError:
                return ParseOutcome.failed()
            # Packing rounds out-of-range values to inf on some interpreters
            if math.isinf(value):
                return ParseOutcome.failed()
        return ParseOutcome.ok(value)

    def _parse_decimal(self, text: str) -> ParseOutcome:
        number = self.locale.to_invariant_number(text)
        if number is None or not number.isascii():
            return ParseOutcome.failed()
        try:
            value = Decimal(number)
        except (InvalidOperation, ValueError):
            return ParseOutcome.failed()
        if not value.is_finite():
            return ParseOutcome.failed()
        return ParseOutcome.ok(value)

    # --- Caller-side helpers ---------------------------------------------
    def ask(
            self,
            prompt: str = "",
            kind: Union[TargetKind, str] = TargetKind.BOOL,
            default: Any = None,
            attempts: Optional[int] = None,
            error_message: Optional[str] = None
    ) -> Any:
        """
        Prompt until the input parses as `kind`.

        Args:
            prompt: The prompt shown on every attempt
            kind: The TargetKind to parse into
            default: Returned when attempts run out or the input stream ends
            attempts: Maximum number of prompts; None keeps asking until EOF
            error_message: Shown after each failed attempt; defaults to
                           [INPUT].retry_message
        """
        kind = TargetKind.coerce(kind)
        if attempts is None:
            attempts = self.config.get_option('INPUT', 'retry_attempts', fallback=None)
        if error_message is None:
            error_message = self.config.get_option(
                'INPUT', 'retry_message', fallback="Invalid input, please try again."
            )

        tries = 0
        while attempts is None or tries < int(attempts):
            tries += 1
            value, success = self.try_get_input(prompt, kind)
            if success:
                return value
            if self._eof:
                break
            if self.output and error_message:
                self.output.error(f"{error_message} (expected {kind.describe()})")
        return default

    def get_int(self, prompt: str = "", **kwargs) -> Optional[int]:
        """Convenience method for 64-bit integer input."""
        return self.ask(prompt, TargetKind.INT64, **kwargs)

    def get_float(self, prompt: str = "", **kwargs) -> Optional[float]:
        """Convenience method for float input."""
        return self.ask(prompt, TargetKind.FLOAT64, **kwargs)

    def get_bool(self, prompt: str = "", **kwargs) -> Optional[bool]:
        """Convenience method for yes/no input."""
        return self.ask(prompt, TargetKind.BOOL, **kwargs)

    def get_char(self, prompt: str = "", **kwargs) -> Optional[str]:
        return self.ask(prompt, TargetKind.CHAR, **kwargs)

    def get_decimal(self, prompt: str = "", **kwargs) -> Optional[Decimal]:
        return self.ask(prompt, TargetKind.DECIMAL, **kwargs)

    def _log(self, event: str, data: dict) -> None:
        if self.logger is not None:
            self.logger.input_event(event, data)
