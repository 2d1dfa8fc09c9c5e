from __future__ import annotations

import locale
from dataclasses import dataclass
from typing import Any, Optional


# Languages whose casing maps dotted/dotless i differently from Unicode defaults
_TURKIC_LANGUAGES = ('tr', 'az')


@dataclass(frozen=True)
class InputLocale:
    """
    Casing and numeric rules applied to console input.

    Passed explicitly to the input handler so tests can pin a fixed locale
    instead of depending on the process-wide one.
    """
    name: str = 'invariant'
    decimal_point: str = '.'
    turkic_casing: bool = False

    @classmethod
    def invariant(cls) -> 'InputLocale':
        return cls()

    @classmethod
    def from_tag(cls, tag: str, decimal_point: str = '.') -> 'InputLocale':
        """Build a locale from a tag such as 'tr_TR', 'de-DE' or 'en_US.UTF-8'."""
        tag = (tag or '').strip()
        if not tag or tag.lower() in ('invariant', 'c', 'posix'):
            return cls(decimal_point=decimal_point or '.')
        language = tag.replace('-', '_').split('_')[0].split('.')[0].lower()
        return cls(
            name=tag,
            decimal_point=decimal_point or '.',
            turkic_casing=language in _TURKIC_LANGUAGES,
        )

    @classmethod
    def system(cls) -> 'InputLocale':
        """Snapshot the process locale (LC_CTYPE for casing, LC_NUMERIC for numbers)."""
        tag, _ = locale.getlocale(locale.LC_CTYPE)
        # Python only initializes LC_CTYPE from the environment; LC_NUMERIC stays "C"
        previous = locale.setlocale(locale.LC_NUMERIC)
        try:
            locale.setlocale(locale.LC_NUMERIC, '')
            decimal_point = locale.localeconv().get('decimal_point') or '.'
        except locale.Error:
            decimal_point = '.'
        finally:
            locale.setlocale(locale.LC_NUMERIC, previous)
        return cls.from_tag(tag or 'invariant', decimal_point=decimal_point)

    @classmethod
    def from_config(cls, config: Any) -> 'InputLocale':
        """
        Resolve the locale from [INPUT] settings:
          - locale: 'invariant' (default), 'system', or a tag like 'tr_TR'
          - decimal_point: optional override of the decimal point character
        """
        name = str(config.get_option('INPUT', 'locale', fallback='invariant') or 'invariant').strip()
        decimal_point = config.get_option('INPUT', 'decimal_point', fallback=None)
        if name.lower() == 'system':
            base = cls.system()
            if decimal_point:
                return cls(base.name, str(decimal_point), base.turkic_casing)
            return base
        return cls.from_tag(name, decimal_point=str(decimal_point) if decimal_point else '.')

    def lower(self, text: str) -> str:
        if self.turkic_casing:
            text = text.replace('I', 'ı').replace('İ', 'i')
        return text.lower()

    def to_invariant_number(self, text: str) -> Optional[str]:
        """
        Rewrite a number typed in this locale into Python's float/Decimal syntax.
        Returns None when the text uses '.' while the locale's decimal point is
        something else, since grouping separators are not accepted.
        """
        if self.decimal_point == '.':
            return text
        if '.' in text:
            return None
        return text.replace(self.decimal_point, '.')
