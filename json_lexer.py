# json_lexer.py
# Regex-driven JSON tokenizer over Source bytes with located diagnostics
#
# =============================================================================
#  LEXER DESIGN
# =============================================================================
#
# One compiled master regex with named groups classifies each token on
# match. The groups are deliberately loose (any escape, any run of number
# characters, any identifier); each matched token is then checked strictly
# against the active ParseOptions. That split gives precise messages such
# as "leading zeros are not allowed" at the offending byte instead of a
# generic "invalid character" at the start of the token.
#
# Scanning happens on bytes, so every offset is a byte offset into the
# Source and maps straight onto its line table. String bodies are decoded
# as UTF-8 after validation.
#
# Any byte the master regex cannot cover is reported as an unexpected
# character at exactly that offset.
# =============================================================================

import decimal
import functools
import math
import re
from typing import Iterator, List, Tuple

from json_location import Location, ParseError
from json_options import DEFAULT_OPTIONS, ParseOptions
from json_source import DEFAULT_TAB_SIZE, Source

# ---------------------------------------------------------------------------
# REGEX BLUEPRINT
# ---------------------------------------------------------------------------
_WHITESPACE = rb"[ \t\r\n]+"
# Unrolled loop: linear even when the closing quote never comes.
_DQ_STRING  = rb'"[^"\\]*(?:\\.[^"\\]*)*"'
_SQ_STRING  = rb"'[^'\\]*(?:\\.[^'\\]*)*'"
_WORD       = rb"[-+]?[A-Za-z_][A-Za-z0-9_]*"
_NUMBER     = rb"(?=[-+.0-9])[-+]?[0-9]*(?:\.[0-9]*)?(?:[eE][-+]?[0-9]*)?"

_KEYWORDS = {b"true": True, b"false": False, b"null": None}
_SPECIAL_WORDS = {b"Infinity": float("inf"), b"NaN": float("nan")}

_SIMPLE_ESCAPES = {
    ord('"'): '"',
    ord("\\"): "\\",
    ord("/"): "/",
    ord("b"): "\b",
    ord("f"): "\f",
    ord("n"): "\n",
    ord("r"): "\r",
    ord("t"): "\t",
}
_HEX_DIGITS = frozenset(b"0123456789abcdefABCDEF")
_STRING_SPECIAL_RE = re.compile(rb"[\\\x00-\x1f]")
_DIGITS = frozenset(b"0123456789")


@functools.lru_cache(maxsize=None)
def _token_re(allow_single_quote_strings: bool):
    """Master regex for the given string delimiters. Cached per variant."""
    quotes = rb"\"'" if allow_single_quote_strings else rb'"'
    string = _DQ_STRING + (rb"|" + _SQ_STRING if allow_single_quote_strings else b"")
    return re.compile(
        rb"(?P<STRING>" + string + rb")|"
        rb"(?P<UNTERMINATED>[" + quotes + rb"])|"
        rb"(?P<WORD>" + _WORD + rb")|"
        rb"(?P<NUMBER>" + _NUMBER + rb")|"
        rb"(?P<BRACE>[{}])|"
        rb"(?P<BRACKET>[\[\]])|"
        rb"(?P<COMMA>,)|"
        rb"(?P<COLON>:)|"
        rb"(?P<WHITESPACE>" + _WHITESPACE + rb")",
        re.DOTALL,
    )


# ---------------------------------------------------------------------------
# TOKEN RECORD
# ---------------------------------------------------------------------------
class Token(Tuple[str, object, int]):
    """
    Immutable token record: (kind, value, absolute_offset).

    kind is one of STRING, NUMBER, LITERAL, BRACE, BRACKET, COMMA, COLON.
    value is already converted: str for strings, int or float for numbers,
    True/False/None for literals, the punctuation character otherwise.
    The offset is the byte offset of the token's first character.
    """

    @property
    def kind(self) -> str:
        return self[0]

    @property
    def value(self):
        return self[1]

    @property
    def offset(self) -> int:
        return self[2]


class _Scanner:
    """Bundles what every error needs: the source and the tab width."""

    def __init__(self, source: Source, options: ParseOptions, tab_size: int):
        self.source = source
        self.options = options
        self.tab_size = tab_size
        self.contents = source.contents if source.contents is not None else b""

    def error(self, offset: int, message: str) -> ParseError:
        return ParseError(Location(self.source, offset), message, self.tab_size)

    def describe_char(self, offset: int) -> str:
        """Human-readable rendering of the (possibly multibyte) char at offset."""
        lead = self.contents[offset]
        if lead < 0x80:
            return repr(chr(lead))
        width = 2 if lead >= 0xC0 else 1
        if lead >= 0xE0:
            width = 3
        if lead >= 0xF0:
            width = 4
        chunk = bytes(self.contents[offset:offset + width])
        try:
            return repr(chunk.decode("utf-8"))
        except UnicodeDecodeError:
            return f"byte 0x{lead:02x}"

    # -----------------------------------------------------------------------
    # STRING VALIDATION
    # -----------------------------------------------------------------------
    def decode_string(self, raw: bytes, token_start: int) -> str:
        """
        Unescape a complete quoted string and reject anything invalid.

        Handles four classes of errors with precise offsets:
        1) Raw control characters, which JSON requires to be escaped.
        2) Escape syntax - unknown escape, short or non-hex unicode escape.
        3) Unicode correctness - unpaired surrogate escapes.
        4) Encoding - bytes that are not valid UTF-8.
        """
        inner = raw[1:-1]
        base = token_start + 1
        n = len(inner)
        out: List[str] = []
        i = 0
        while i < n:
            m = _STRING_SPECIAL_RE.search(inner, i)
            j = m.start() if m else n
            if j > i:
                out.append(self._decode_utf8(inner[i:j], base + i))
            if m is None:
                break
            i = j
            if inner[i] != 0x5C:
                raise self.error(base + i, "control character in string must be escaped")
            esc = inner[i + 1]
            if esc == 0x75:  # u
                code, i = self._decode_unicode_escape(inner, i, base)
                out.append(chr(code))
                continue
            if esc in _SIMPLE_ESCAPES:
                out.append(_SIMPLE_ESCAPES[esc])
            elif esc == 0x27 and self.options.allow_single_quote_strings:
                out.append("'")
            else:
                shown = chr(esc) if 0x20 < esc < 0x7F else f"\\x{esc:02x}"
                raise self.error(base + i, f"invalid escape \\{shown}")
            i += 2
        return "".join(out)

    def _decode_utf8(self, chunk: bytes, offset: int) -> str:
        try:
            return chunk.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise self.error(offset + exc.start, "invalid UTF-8 in string") from None

    def _read_hex4(self, inner: bytes, i: int, base: int) -> int:
        """Read the four hex digits of the \\u escape starting at inner[i]."""
        digits = inner[i + 2:i + 6]
        if len(digits) < 4:
            raise self.error(base + i, "incomplete unicode escape")
        for k, d in enumerate(digits):
            if d not in _HEX_DIGITS:
                shown = bytes(inner[i:i + 6]).decode("utf-8", "replace")
                raise self.error(base + i + 2 + k, f"invalid hex escape {shown}")
        return int(digits, 16)

    def _decode_unicode_escape(self, inner: bytes, i: int, base: int) -> Tuple[int, int]:
        """Decode \\uXXXX (or a surrogate pair) at inner[i]; return (code, next_i)."""
        code = self._read_hex4(inner, i, base)
        if 0xDC00 <= code <= 0xDFFF:
            raise self.error(base + i, "unpaired surrogate in string")
        if code < 0xD800 or code > 0xDBFF:
            return code, i + 6
        j = i + 6
        if inner[j:j + 2] != b"\\u":
            raise self.error(base + i, "unpaired surrogate in string")
        low = self._read_hex4(inner, j, base)
        if not 0xDC00 <= low <= 0xDFFF:
            raise self.error(base + i, "unpaired surrogate in string")
        return 0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00), j + 6

    # -----------------------------------------------------------------------
    # NUMBER VALIDATION
    # -----------------------------------------------------------------------
    def convert_number(self, raw: bytes, start: int):
        """
        Check a loosely matched number against the active dialect.

        Integer literals become int (exact, unbounded); literals with a
        fraction or exponent become float. A float literal too large to
        represent is an error rather than a silent infinity.
        """
        opts = self.options
        n = len(raw)
        i = 0
        if raw[0] in b"+-":
            if raw[0] == 0x2B and not opts.allow_explicit_plus_sign_in_mantissa:
                raise self.error(start, "explicit plus sign is not allowed")
            i = 1
        int_start = i
        while i < n and raw[i] in _DIGITS:
            i += 1
        int_digits = i - int_start
        if int_digits > 1 and raw[int_start] == 0x30:
            raise self.error(start + int_start + 1, "leading zeros are not allowed")
        is_float = False
        if i < n and raw[i] == 0x2E:
            if int_digits == 0 and not opts.allow_number_to_start_with_dot:
                raise self.error(start + i, "number must have a digit before the decimal point")
            is_float = True
            i += 1
            frac_start = i
            while i < n and raw[i] in _DIGITS:
                i += 1
            if i == frac_start:
                raise self.error(start + i, "expected digit after decimal point")
        elif int_digits == 0:
            raise self.error(start + i, "expected digit")
        if i < n and raw[i] in b"eE":
            is_float = True
            i += 1
            if i < n and raw[i] in b"+-":
                i += 1
            exp_start = i
            while i < n and raw[i] in _DIGITS:
                i += 1
            if i == exp_start:
                raise self.error(start + i, "expected digit in exponent")
        if i != n:
            raise self.error(start + i, "unexpected character in number")

        text = raw.decode("ascii")
        if not is_float:
            # Decimal has no digit cap, unlike int(str) on 3.11+
            return int(decimal.Decimal(text))
        value = float(text)
        if math.isinf(value):
            raise self.error(start, "number is out of range")
        return value

    def convert_word(self, raw: bytes, start: int) -> Token:
        if raw in _KEYWORDS:
            return Token(("LITERAL", _KEYWORDS[raw], start))
        sign = raw[:1] if raw[:1] in (b"-", b"+") else b""
        body = raw[len(sign):]
        if body in _SPECIAL_WORDS and self.options.allow_infinity_and_nan:
            if body == b"NaN" and sign:
                raise self.error(start, "NaN cannot be signed")
            if sign == b"+" and not self.options.allow_explicit_plus_sign_in_mantissa:
                raise self.error(start, "explicit plus sign is not allowed")
            value = _SPECIAL_WORDS[body]
            return Token(("NUMBER", -value if sign == b"-" else value, start))
        shown = raw.decode("ascii")
        if len(shown) > 32:
            shown = shown[:29] + "..."
        if body in _SPECIAL_WORDS:
            raise self.error(start, f"{shown} is not allowed in strict JSON")
        raise self.error(start, f"invalid literal '{shown}'")


def lex(source: Source, options: ParseOptions = DEFAULT_OPTIONS,
        tab_size: int = DEFAULT_TAB_SIZE) -> Iterator[Token]:
    """
    Single-pass generator producing tokens. Rejects any gap in regex coverage.

    Errors are raised lazily, when the parser pulls the offending token, so
    a grammar error earlier in the input is always reported first.
    """
    scanner = _Scanner(source, options, tab_size)
    contents = scanner.contents
    size = len(contents)
    pos = 0
    for m in _token_re(options.allow_single_quote_strings).finditer(contents):
        kind = m.lastgroup
        start = m.start()

        if start != pos:
            raise scanner.error(pos, f"unexpected character {scanner.describe_char(pos)}")
        pos = m.end()

        if kind == "WHITESPACE":
            continue
        raw = bytes(contents[start:pos])
        if kind == "STRING":
            yield Token(("STRING", scanner.decode_string(raw, start), start))
        elif kind == "NUMBER":
            yield Token(("NUMBER", scanner.convert_number(raw, start), start))
        elif kind == "WORD":
            yield scanner.convert_word(raw, start)
        elif kind == "UNTERMINATED":
            opened = Location(source, start).get_line_and_column(tab_size)
            raise scanner.error(size, f"unterminated string starting at {opened}")
        else:
            yield Token((kind, raw.decode("ascii"), start))

    if pos != size:
        raise scanner.error(pos, f"unexpected character {scanner.describe_char(pos)}")
