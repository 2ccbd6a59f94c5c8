# json_options.py
# Dialect toggles consulted by the lexer; fixed before a parse starts

from dataclasses import dataclass, fields


@dataclass(frozen=True)
class ParseOptions:
    """
    Four independent relaxations of RFC 8259 JSON.

    allow_infinity_and_nan                 Infinity, -Infinity, NaN as numbers
    allow_explicit_plus_sign_in_mantissa   +5, +1.5e3
    allow_single_quote_strings             'text', with \\' as an escape
    allow_number_to_start_with_dot         .5, -.5e1
    """
    allow_infinity_and_nan: bool = False
    allow_explicit_plus_sign_in_mantissa: bool = False
    allow_single_quote_strings: bool = False
    allow_number_to_start_with_dot: bool = False

    @staticmethod
    def default_options() -> "ParseOptions":
        return DEFAULT_OPTIONS

    @staticmethod
    def relaxed_options() -> "ParseOptions":
        return RELAXED_OPTIONS

    def enabled(self):
        """Names of the relaxations switched on, in declaration order."""
        return [f.name for f in fields(self) if getattr(self, f.name)]


DEFAULT_OPTIONS = ParseOptions()
RELAXED_OPTIONS = ParseOptions(True, True, True, True)
