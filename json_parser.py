# json_parser.py
# Recursive-descent JSON parser producing an immutable AST with located errors
#
# =============================================================================
#  PARSER IMPLEMENTATION: RECURSIVE DESCENT FOR STRUCTURE
# =============================================================================
#
# JSON grammar is LL(1): no left recursion, no precedence, so every rule
# maps to one function and a single token of lookahead decides each branch.
#
#   value  -> object | array | string | number | true | false | null
#   object -> '{' (pair (',' pair)*)? '}'
#   pair   -> string ':' value
#   array  -> '[' (value (',' value)*)? ']'
#
# The first error aborts the parse. There is no recovery and no partial
# tree: the caller gets either the root value or one ParseError whose
# message already reads "file:line:column: message".
#
# Trailing commas are rejected in every dialect. Duplicate object keys are
# accepted and the last value wins.
#
# A depth guard (default 256) keeps hostile nesting well inside the Python
# recursion limit.
#
# =============================================================================
#  REFERENCES
# =============================================================================
# [1] RFC 8259 - The JavaScript Object Notation (JSON) Data Interchange Format
# =============================================================================

import argparse
import logging
import sys
from typing import Iterator, List, Optional, Tuple, Union

from json_ast import (
    FALSE,
    NULL,
    TRUE,
    ArrayValue,
    NumberValue,
    ObjectValue,
    StringValue,
    Value,
)
from json_lexer import Token, lex
from json_location import Location, ParseError
from json_options import DEFAULT_OPTIONS, RELAXED_OPTIONS, ParseOptions
from json_source import DEFAULT_TAB_SIZE, Source, load_file, load_stdin

log = logging.getLogger("jsonloc.parser")

# ---------------------------------------------------------------------------
# CONSTANTS AND TUNABLES
# ---------------------------------------------------------------------------
DEPTH_LIMIT_DEFAULT = 256   # Two frames per level keeps this under the default recursion limit

_LITERALS = {True: TRUE, False: FALSE, None: NULL}


# ---------------------------------------------------------------------------
# LOOKAHEAD RING
# ---------------------------------------------------------------------------
class LookAhead:
    """
    One-slot pushback iterator over the token stream.

    Also remembers where the input ends and the offset of the last token
    handed out, so grammar errors can be located without rescanning.
    """
    def __init__(self, iterable: Iterator[Token], source: Source, tab_size: int):
        self._iter = iter(iterable)
        self._buf: List[Token] = []
        self.source = source
        self.tab_size = tab_size
        self.end_offset = source.contents_size
        self.last_offset = 0

    def __iter__(self):
        return self

    def __next__(self) -> Token:
        if self._buf:
            tok = self._buf.pop()
        else:
            tok = next(self._iter)
        self.last_offset = tok[2]
        return tok

    def peek(self) -> Token:
        if not self._buf:
            self._buf.append(next(self._iter))
        return self._buf[-1]

    def error(self, offset: int, message: str) -> ParseError:
        return ParseError(Location(self.source, offset), message, self.tab_size)

    def end_of_input(self) -> ParseError:
        return self.error(self.end_offset, "unexpected end of input")


# ---------------------------------------------------------------------------
# PARSER UTILITY
# ---------------------------------------------------------------------------
def _describe(token: Token) -> str:
    kind, value, _ = token
    if kind == "STRING":
        text = value if len(value) <= 20 else value[:17] + "..."
        return f"string {text!r}"
    if kind == "NUMBER":
        return f"number {value!r}"
    if kind == "LITERAL":
        return {True: "'true'", False: "'false'", None: "'null'"}[value]
    return f"'{value}'"


def _next(tokens: LookAhead) -> Token:
    try:
        return next(tokens)
    except StopIteration:
        raise tokens.end_of_input() from None


def _peek(tokens: LookAhead) -> Token:
    try:
        return tokens.peek()
    except StopIteration:
        raise tokens.end_of_input() from None


def _expect(tokens: LookAhead, expected_kind: str, expected_value: Optional[str] = None):
    """
    Consume and verify the next token. Raises a located error naming both
    what was found and what was expected.
    """
    tok = _next(tokens)
    kind, value, pos = tok
    if kind != expected_kind or (expected_value is not None and value != expected_value):
        exp = expected_kind.lower() if expected_value is None else f"'{expected_value}'"
        raise tokens.error(pos, f"unexpected {_describe(tok)} - expected {exp}")
    return value


# ---------------------------------------------------------------------------
# CORE VALUE PARSER
# ---------------------------------------------------------------------------
def _parse_value(tokens: LookAhead, depth: int, max_depth: int) -> Value:
    """Dispatch on the next token."""
    tok = _next(tokens)
    kind, value, pos = tok

    if kind == "STRING":
        return StringValue(value)
    if kind == "NUMBER":
        return NumberValue(value)
    if kind == "LITERAL":
        return _LITERALS[value]
    if kind in ("BRACE", "BRACKET") and value in "{[":
        if depth >= max_depth:
            raise tokens.error(pos, f"maximum nesting depth of {max_depth} exceeded")
        if value == "{":
            return _parse_object(tokens, depth + 1, max_depth)
        return _parse_array(tokens, depth + 1, max_depth)

    raise tokens.error(pos, f"unexpected {_describe(tok)} - expected a value")


# ---------------------------------------------------------------------------
# ARRAY PARSER
# ---------------------------------------------------------------------------
def _parse_array(tokens: LookAhead, depth: int, max_depth: int) -> ArrayValue:
    items: List[Value] = []
    pk = _peek(tokens)
    if pk[0] == "BRACKET" and pk[1] == "]":
        next(tokens)
        return ArrayValue(items)

    while True:
        items.append(_parse_value(tokens, depth, max_depth))
        tok = _next(tokens)
        if tok[0] == "BRACKET" and tok[1] == "]":
            break
        if tok[0] != "COMMA":
            raise tokens.error(tok[2], f"unexpected {_describe(tok)} - expected ',' or ']'")
    return ArrayValue(items)


# ---------------------------------------------------------------------------
# OBJECT PARSER
# ---------------------------------------------------------------------------
def _parse_object(tokens: LookAhead, depth: int, max_depth: int) -> ObjectValue:
    """
    Parse a JSON object.

    Members are collected as pairs and folded by ObjectValue, so a repeated
    key overwrites the earlier value while keeping its original position.
    """
    pairs: List[Tuple[str, Value]] = []
    pk = _peek(tokens)
    if pk[0] == "BRACE" and pk[1] == "}":
        next(tokens)
        return ObjectValue(pairs)

    while True:
        key = _expect(tokens, "STRING")
        _expect(tokens, "COLON", ":")
        pairs.append((key, _parse_value(tokens, depth, max_depth)))
        tok = _next(tokens)
        if tok[0] == "BRACE" and tok[1] == "}":
            break
        if tok[0] != "COMMA":
            raise tokens.error(tok[2], f"unexpected {_describe(tok)} - expected ',' or '}}'")
    return ObjectValue(pairs)


# ---------------------------------------------------------------------------
# PUBLIC API
# ---------------------------------------------------------------------------
def parse(source: Source, options: ParseOptions = DEFAULT_OPTIONS, *,
          max_depth: int = DEPTH_LIMIT_DEFAULT, tab_size: int = DEFAULT_TAB_SIZE) -> Value:
    """
    Parse the whole of ``source`` into an AST value.

    Any JSON value may be the root. Empty or whitespace-only input and
    anything after the root value are errors. The caller must keep
    ``source`` alive while it still uses the locations carried by a raised
    ParseError; the error message itself is already fully rendered.
    """
    if not isinstance(source, Source):
        raise TypeError(f"parse() expects a Source, got {type(source).__name__}")
    log.debug("parsing %s (%d bytes) relaxations=%s",
              source.file_name or "<unknown>", source.contents_size, options.enabled())

    tokens = LookAhead(lex(source, options, tab_size), source, tab_size)
    try:
        tokens.peek()
    except StopIteration:
        raise tokens.error(tokens.end_offset, "empty input - expected a JSON value") from None

    try:
        result = _parse_value(tokens, 0, max_depth)
    except RecursionError:
        raise tokens.error(tokens.last_offset, "nesting too deep for the interpreter recursion limit") from None
    try:
        extra = next(tokens)
    except StopIteration:
        log.debug("parsed %s: root is %s", source.file_name or "<unknown>", result.kind)
        return result
    raise tokens.error(extra[2], f"extra data after root value: {_describe(extra)}")


def parse_text(text: Union[str, bytes], options: ParseOptions = DEFAULT_OPTIONS,
               file_name: str = "", **kwargs) -> Value:
    """Convenience wrapper: build a Source from ``text`` and parse it."""
    return parse(Source(file_name, text), options, **kwargs)


# ---------------------------------------------------------------------------
# CLI ENTRYPOINT
# ---------------------------------------------------------------------------
def _options_from_args(args: argparse.Namespace) -> ParseOptions:
    if args.relaxed:
        return RELAXED_OPTIONS
    return ParseOptions(
        allow_infinity_and_nan=args.allow_infinity_and_nan,
        allow_explicit_plus_sign_in_mantissa=args.allow_plus_sign,
        allow_single_quote_strings=args.allow_single_quotes,
        allow_number_to_start_with_dot=args.allow_leading_dot,
    )


def _cli(argv: List[str]) -> int:
    """
    Command-line interface for validation runs.

    Exit codes: 0 when the document parses, 1 on a parse error, 2 when the
    input cannot be read.
    """
    ap = argparse.ArgumentParser(description="Location-aware JSON validator")
    ap.add_argument("file", help="JSON file to verify, or - for standard input")
    ap.add_argument("--debug", action="store_true", help="dump token stream and exit")
    ap.add_argument("--max-depth", type=int, default=DEPTH_LIMIT_DEFAULT)
    ap.add_argument("--tab-size", type=int, default=DEFAULT_TAB_SIZE,
                    help="tab stop width used for reported columns")
    ap.add_argument("--relaxed", action="store_true", help="enable every relaxation below")
    ap.add_argument("--allow-infinity-and-nan", action="store_true")
    ap.add_argument("--allow-plus-sign", action="store_true",
                    help="accept an explicit + before a number")
    ap.add_argument("--allow-single-quotes", action="store_true",
                    help="accept 'single quoted' strings")
    ap.add_argument("--allow-leading-dot", action="store_true",
                    help="accept numbers such as .5")
    ap.add_argument("-v", "--verbose", action="store_true", help="log debug output to stderr")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s: %(levelname)s: %(message)s",
    )
    options = _options_from_args(args)

    try:
        source = load_stdin() if args.file == "-" else load_file(args.file)
    except OSError as exc:
        print(f"error: cannot read {args.file}: {exc.strerror or exc}", file=sys.stderr)
        return 2

    try:
        if args.debug:
            for kind, value, offset in lex(source, options, args.tab_size):
                print(f"{Location(source, offset).to_string(args.tab_size)}: {kind} {value!r}")
            return 0
        parse(source, options, max_depth=args.max_depth, tab_size=args.tab_size)
    except ParseError as exc:
        print(f"SyntaxError: {exc}", file=sys.stderr)
        return 1
    print("OK")
    return 0


def main() -> None:
    sys.exit(_cli(sys.argv[1:]))


# ---------------------------------------------------------------------------
# MAIN GUARD
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    main()
