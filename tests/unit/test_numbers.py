import math

import pytest

import json_parser as jp
from json_location import ParseError
from json_options import DEFAULT_OPTIONS, RELAXED_OPTIONS, ParseOptions


@pytest.mark.parametrize("text, expected", [
    ("0", 0),
    ("-0", 0),
    ("42", 42),
    ("-17", -17),
    ("12345678901234567890123", 12345678901234567890123),
    ("1.5", 1.5),
    ("-0.25", -0.25),
    ("1e3", 1000.0),
    ("1E-2", 0.01),
    ("-1.5e+2", -150.0),
])
def test_strict_numbers(text, expected):
    value = jp.parse_text(text).value
    assert value == expected
    assert type(value) is type(expected)


def test_big_integer_is_exact():
    text = "9" * 40
    assert jp.parse_text(text).value == int(text)


def test_integer_longer_than_str_digit_limit():
    text = "9" * 5000
    value = jp.parse_text(text).value
    assert isinstance(value, int)
    assert value == 10 ** 5000 - 1
    assert jp.parse_text("[-" + text + "]")[0].value == -(10 ** 5000 - 1)


@pytest.mark.parametrize("text, message, column", [
    ("01", "leading zeros are not allowed", 2),
    ("-007", "leading zeros are not allowed", 3),
    ("1.", "expected digit after decimal point", 3),
    ("1.e5", "expected digit after decimal point", 3),
    ("1e", "expected digit in exponent", 3),
    ("1e+", "expected digit in exponent", 4),
    ("-", "expected digit", 2),
    (".5", "number must have a digit before the decimal point", 1),
    ("+5", "explicit plus sign is not allowed", 1),
    ("1e400", "number is out of range", 1),
    ("[1,-]", "expected digit", 5),
])
def test_malformed_numbers_are_located(text, message, column):
    with pytest.raises(ParseError) as ei:
        jp.parse_text(text)
    assert ei.value.msg == message
    assert ei.value.colno == column


def test_tiny_exponent_underflows_to_zero():
    assert jp.parse_text("1e-400").value == 0.0


def test_dot_number_relaxed():
    assert jp.parse_text(".5", RELAXED_OPTIONS).value == 0.5
    assert jp.parse_text("-.5e1", RELAXED_OPTIONS).value == -5.0
    with pytest.raises(ParseError):
        jp.parse_text(".", RELAXED_OPTIONS)


def test_plus_sign_relaxed():
    value = jp.parse_text("+5", RELAXED_OPTIONS).value
    assert value == 5 and isinstance(value, int)
    assert jp.parse_text("+1.5e1", RELAXED_OPTIONS).value == 15.0


def test_infinity_and_nan_relaxed():
    assert math.isnan(jp.parse_text("NaN", RELAXED_OPTIONS).value)
    assert jp.parse_text("Infinity", RELAXED_OPTIONS).value == math.inf
    assert jp.parse_text("-Infinity", RELAXED_OPTIONS).value == -math.inf
    assert jp.parse_text("+Infinity", RELAXED_OPTIONS).value == math.inf


@pytest.mark.parametrize("text", ["NaN", "Infinity", "-Infinity"])
def test_infinity_and_nan_strict(text):
    with pytest.raises(ParseError) as ei:
        jp.parse_text(text, DEFAULT_OPTIONS)
    assert ei.value.msg == f"{text} is not allowed in strict JSON"


def test_signed_nan_rejected():
    with pytest.raises(ParseError) as ei:
        jp.parse_text("-NaN", RELAXED_OPTIONS)
    assert ei.value.msg == "NaN cannot be signed"


def test_plus_infinity_needs_plus_sign_flag():
    only_special = ParseOptions(allow_infinity_and_nan=True)
    assert jp.parse_text("-Infinity", only_special).value == -math.inf
    with pytest.raises(ParseError) as ei:
        jp.parse_text("+Infinity", only_special)
    assert ei.value.msg == "explicit plus sign is not allowed"


def test_number_followed_by_letters():
    with pytest.raises(ParseError) as ei:
        jp.parse_text("[0x14]")
    assert ei.value.msg == "invalid literal 'x14'"
    assert ei.value.colno == 3
