from __future__ import annotations

import os
import sys
from decimal import Decimal
from io import StringIO

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir, os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from utils.input_utils import InputHandler, ParseOutcome, TargetKind
from utils.locale_utils import InputLocale

# All tests pin the invariant locale ('.' decimal point, Unicode default casing)
# unless a test passes another InputLocale explicitly.


class FakeConfig:
    def __init__(self, opts: dict | None = None):
        self._opts = opts or {}

    def get_option(self, section: str, option: str, fallback=None):
        return self._opts.get((section, option), fallback)


class CaptureOutput:
    def __init__(self):
        self.prompts = []
        self.errors = []

    def prompt(self, text):
        self.prompts.append(text)

    def error(self, message, **kwargs):
        self.errors.append(str(message))


class BrokenStream:
    def __init__(self, exc: BaseException):
        self.exc = exc

    def readline(self):
        raise self.exc


def make_handler(text: str = '', input_locale: InputLocale | None = None):
    out = CaptureOutput()
    handler = InputHandler(
        FakeConfig(),
        output_handler=out,
        input_locale=input_locale or InputLocale.invariant(),
        stream=StringIO(text),
    )
    return handler, out


def parse(text: str, kind, input_locale: InputLocale | None = None) -> ParseOutcome:
    handler, _ = make_handler(text + '\n', input_locale)
    return handler.try_get_input('', kind)


@pytest.mark.parametrize('kind, low, high', [
    (TargetKind.INT8, -128, 127),
    (TargetKind.UINT8, 0, 255),
    (TargetKind.INT16, -32768, 32767),
    (TargetKind.UINT16, 0, 65535),
    (TargetKind.INT32, -2147483648, 2147483647),
    (TargetKind.UINT32, 0, 4294967295),
    (TargetKind.INT64, -9223372036854775808, 9223372036854775807),
    (TargetKind.UINT64, 0, 18446744073709551615),
])
def test_integer_bounds(kind, low, high):
    assert parse(str(low), kind) == (low, True)
    assert parse(str(high), kind) == (high, True)
    assert parse(str(low - 1), kind) == (None, False)
    assert parse(str(high + 1), kind) == (None, False)


def test_integer_rejects_malformed_text():
    assert not parse('12.5', TargetKind.INT32).success
    assert not parse('12abc', TargetKind.INT32).success
    assert not parse('0x10', TargetKind.INT32).success
    assert parse('+42', TargetKind.INT32) == (42, True)
    assert parse(' 42 ', TargetKind.INT32) == (42, True)


def test_float64_bounds_and_overflow():
    assert parse('1.7976931348623157e308', TargetKind.FLOAT64) == (1.7976931348623157e308, True)
    assert parse('-1.7976931348623157e308', TargetKind.FLOAT64) == (-1.7976931348623157e308, True)
    assert not parse('1.8e308', TargetKind.FLOAT64).success
    assert not parse('-1.8e308', TargetKind.FLOAT64).success
    assert parse('2.5', TargetKind.FLOAT64) == (2.5, True)


def test_float64_accepts_explicit_infinity():
    value, success = parse('-Infinity', TargetKind.FLOAT64)
    assert success and value == float('-inf')


def test_float32_rounds_to_single_precision():
    value, success = parse('3.4028235e38', TargetKind.FLOAT32)
    assert success
    assert value == 3.4028234663852886e38
    value, success = parse('-3.4028235e38', TargetKind.FLOAT32)
    assert success and value == -3.4028234663852886e38
    value, success = parse('0.1', TargetKind.FLOAT32)
    assert success and value != 0.1 and abs(value - 0.1) < 1e-8


def test_float32_rejects_values_beyond_range():
    assert parse('3.5e38', TargetKind.FLOAT32) == (None, False)
    assert parse('-1e39', TargetKind.FLOAT32) == (None, False)
    assert parse('-3.5e38', TargetKind.FLOAT32) == (None, False)
    value, success = parse('-inf', TargetKind.FLOAT32)
    assert success and value == float('-inf')


def test_decimal_invariant_locale():
    assert parse('3.14', TargetKind.DECIMAL) == (Decimal('3.14'), True)
    assert parse('-0.5', TargetKind.DECIMAL) == (Decimal('-0.5'), True)
    assert not parse('3,14', TargetKind.DECIMAL).success
    assert not parse('nan', TargetKind.DECIMAL).success
    assert not parse('infinity', TargetKind.DECIMAL).success


def test_decimal_with_comma_locale():
    de = InputLocale.from_tag('de_DE', decimal_point=',')
    assert parse('3,14', TargetKind.DECIMAL, de) == (Decimal('3.14'), True)
    assert not parse('3.14', TargetKind.DECIMAL, de).success
    assert parse('2,5', TargetKind.FLOAT64, de) == (2.5, True)


def test_decimal_keeps_precision():
    text = '1.000000000000000000000000000000000001'
    assert parse(text, TargetKind.DECIMAL) == (Decimal(text), True)


@pytest.mark.parametrize('text', ['y', 'Y', 'yes', 'YES', 'true', 'True'])
def test_bool_truthy(text):
    assert parse(text, TargetKind.BOOL) == (True, True)


@pytest.mark.parametrize('text', ['n', 'N', 'no', 'false', 'FALSE'])
def test_bool_falsy(text):
    assert parse(text, TargetKind.BOOL) == (False, True)


@pytest.mark.parametrize('text', ['maybe', '1', '0', 'ye', 'yess', ' yes'])
def test_bool_rejects_other_tokens(text):
    assert parse(text, TargetKind.BOOL) == (None, False)


def test_char():
    assert parse('a', TargetKind.CHAR) == ('a', True)
    assert parse('ab', TargetKind.CHAR) == (None, False)


def test_char_is_lower_cased():
    assert parse('Q', TargetKind.CHAR) == ('q', True)


def test_turkic_casing():
    tr = InputLocale.from_tag('tr_TR')
    assert parse('I', TargetKind.CHAR, tr) == ('ı', True)
    assert parse('I', TargetKind.CHAR) == ('i', True)


@pytest.mark.parametrize('kind', list(TargetKind))
def test_empty_line_fails_for_every_kind(kind):
    handler, _ = make_handler('\n')
    assert handler.try_get_input('', kind) == (None, False)


@pytest.mark.parametrize('kind', list(TargetKind))
def test_end_of_stream_fails_for_every_kind(kind):
    handler, _ = make_handler('')
    assert handler.try_get_input('', kind) == (None, False)
    assert handler.at_eof


@pytest.mark.parametrize('exc', [OSError('boom'), MemoryError(), ValueError('I/O operation on closed file')])
def test_stream_failure_is_empty_input(exc):
    handler, _ = make_handler()
    handler.set_input_stream(BrokenStream(exc))
    assert handler.try_get_input('Value: ', TargetKind.INT32) == (None, False)
    assert handler.at_eof


def test_keyboard_interrupt_propagates():
    handler, _ = make_handler()
    handler.set_input_stream(BrokenStream(KeyboardInterrupt()))
    with pytest.raises(KeyboardInterrupt):
        handler.try_get_input('', TargetKind.INT32)


def test_closed_stream_is_empty_input():
    stream = StringIO('5\n')
    stream.close()
    handler, _ = make_handler()
    handler.set_input_stream(stream)
    assert handler.try_get_input('', TargetKind.INT32) == (None, False)


def test_one_line_consumed_per_call():
    handler, out = make_handler('7\n8\n')
    assert handler.try_get_input('first: ', TargetKind.INT32) == (7, True)
    assert handler.try_get_input('second: ', TargetKind.INT32) == (8, True)
    assert handler.try_get_input('third: ', TargetKind.INT32) == (None, False)
    assert out.prompts == ['first: ', 'second: ', 'third: ']


def test_windows_line_endings_are_stripped():
    handler, _ = make_handler('x\r\n')
    assert handler.try_get_input('', TargetKind.CHAR) == ('x', True)


def test_last_line_without_newline():
    handler, _ = make_handler('12')
    assert handler.try_get_input('', TargetKind.UINT8) == (12, True)


def test_prompt_written_verbatim_to_stdout(monkeypatch):
    buf = StringIO()
    monkeypatch.setattr(sys, 'stdout', buf)
    handler = InputHandler(FakeConfig(), input_locale=InputLocale.invariant(), stream=StringIO('yes\n'))
    assert handler.try_get_input('Continue? ', TargetKind.BOOL) == (True, True)
    assert buf.getvalue() == 'Continue? '


def test_none_prompt_writes_nothing():
    handler, out = make_handler('yes\n')
    handler.try_get_input(None, TargetKind.BOOL)
    assert out.prompts == ['']


def test_reads_from_stdin_by_default(monkeypatch):
    monkeypatch.setattr(sys, 'stdin', StringIO('255\n'))
    handler = InputHandler(FakeConfig(), output_handler=CaptureOutput(), input_locale=InputLocale.invariant())
    assert handler.try_get_input('', 'uint8') == (255, True)


def test_kind_names_are_accepted():
    assert parse('-5', 'int8') == (-5, True)
    assert parse('-5', 'INT8') == (-5, True)


def test_unknown_kind_is_a_programming_error():
    handler, _ = make_handler('5\n')
    with pytest.raises(ValueError):
        handler.try_get_input('', 'int128')
    with pytest.raises(ValueError):
        handler.try_get_input('', int)


def test_locale_defaults_to_config():
    cfg = FakeConfig({('INPUT', 'locale'): 'tr_TR', ('INPUT', 'decimal_point'): ','})
    handler = InputHandler(cfg, output_handler=CaptureOutput(), stream=StringIO('1,5\n'))
    assert handler.locale.turkic_casing
    assert handler.try_get_input('', TargetKind.DECIMAL) == (Decimal('1.5'), True)


@pytest.mark.parametrize('text, kind', [
    ('١٢', TargetKind.INT8),
    ('١٢', TargetKind.UINT64),
    ('١.٥', TargetKind.FLOAT64),
    ('١.٥', TargetKind.FLOAT32),
    ('١.٥', TargetKind.DECIMAL),
    ('１２', TargetKind.INT32),
])
def test_numbers_require_ascii_digits(text, kind):
    assert parse(text, kind) == (None, False)
