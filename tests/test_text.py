import pytest

from pdp.text import (
    FormatError,
    count_digits10,
    count_digits16,
    estimate_size,
    format_pack,
    format_value,
    is_equal_digits10,
)

SAMPLE_UNSIGNED = [0, 1, 9, 10, 99, 100, 12345, 10**18, 10**19 - 1, 10**19, (1 << 64) - 1]


@pytest.mark.parametrize("n", SAMPLE_UNSIGNED)
def test_count_digits10_matches_decimal_length(n):
    assert count_digits10(n) == len(str(n))


def test_count_digits10_largest_power_in_table():
    assert count_digits10(10000000000000000000) == 20
    assert count_digits10(0) == 1


@pytest.mark.parametrize("n", SAMPLE_UNSIGNED + [0xF, 0x10, 0xFFFF, 0x10000])
def test_count_digits16_matches_hex_length(n):
    assert count_digits16(n) == len(format(n, "x"))


@pytest.mark.parametrize("bad", [-1, 1 << 64])
def test_count_digits_rejects_out_of_range(bad):
    with pytest.raises(ValueError):
        count_digits10(bad)
    with pytest.raises(ValueError):
        count_digits16(bad)


@pytest.mark.parametrize("value", [0, 7, 42, -42, 123456789, -(1 << 63), (1 << 64) - 1])
def test_is_equal_digits10_accepts_own_spelling(value):
    assert is_equal_digits10(value, format_value(value)) is True


@pytest.mark.parametrize(
    "value, text",
    [(5, "-5"), (-5, "5"), (12, "012"), (12, "13"), (0, ""), (0, "-0"), (100, "10")],
)
def test_is_equal_digits10_rejects_mismatch(value, text):
    assert is_equal_digits10(value, text) is False


def test_format_value_bool_and_bytes():
    assert format_value(True) == "true"
    assert format_value(False) == "false"
    assert format_value(b"\xab") == "0xab"


def test_format_value_rejects_unsupported():
    with pytest.raises(TypeError):
        format_value(object())
    with pytest.raises(ValueError):
        format_value(1 << 64)


@pytest.mark.parametrize(
    "value", [True, False, "", "abc", 0, -1, -(1 << 63), (1 << 64) - 1, b"\x00\xff", "x"]
)
def test_estimate_is_upper_bound(value):
    assert estimate_size(value) >= len(format_value(value))


def test_estimate_fixed_sizes():
    assert estimate_size(True) == 5
    assert estimate_size("hello") == len("hello")


def test_format_pack_substitutes_in_order():
    assert format_pack("{} + {} = {}", 1, 2, 3) == "1 + 2 = 3"
    assert format_pack("name={} ok={}", "gdb", True) == "name=gdb ok=true"


def test_format_pack_without_args_copies_text():
    assert format_pack("plain text") == "plain text"


def test_format_pack_lone_brace_is_kept():
    assert format_pack('{"{}":', "key") == '{"key":'
    assert format_pack(',"{}":', "key") == ',"key":'


def test_format_pack_extra_arguments():
    with pytest.raises(FormatError):
        format_pack("no placeholder", 1)


def test_format_pack_insufficient_arguments():
    with pytest.raises(FormatError):
        format_pack("{} and {}", 1)


def test_format_pack_error_is_value_error():
    with pytest.raises(ValueError):
        format_pack("{}")