from urllib.parse import unquote

import pytest

from camstream.uri import uri_get_string, uri_get_true


@pytest.mark.parametrize("value", ["1", "10", "1abc", "true", "TRUE", "True", "yes", "YES", "yEs"])
def test_true_values(value):
    assert uri_get_true({"key": value}, "key") is True


@pytest.mark.parametrize("value", ["0", "", "false", "no", "y", "truee", " 1", "2"])
def test_false_values(value):
    assert uri_get_true({"key": value}, "key") is False


def test_missing_key_is_false():
    assert uri_get_true({"other": "1"}, "key") is False


def test_key_lookup_is_case_insensitive():
    assert uri_get_true({"Extra_Headers": "1"}, "extra_headers") is True
    assert uri_get_string({"KEY": "abc"}, "key") == "abc"


def test_first_matching_pair_wins():
    params = [("key", "0"), ("key", "1")]
    assert uri_get_true(params, "key") is False
    assert uri_get_string(params, "key") == "0"


def test_string_missing_is_none():
    assert uri_get_string({}, "key") is None


def test_string_encodes_reserved_characters():
    assert uri_get_string({"key": "a b/c"}, "key") == "a%20b%2Fc"


def test_string_keeps_unreserved_characters():
    value = "AZaz09-._~"
    assert uri_get_string({"key": value}, "key") == value


@pytest.mark.parametrize("value", ["<script>", "a&b=c", "100%", "привет", "x?y#z"])
def test_string_round_trip(value):
    encoded = uri_get_string({"key": value}, "key")
    assert unquote(encoded) == value
    assert all(ch.isascii() for ch in encoded)
    assert not set(encoded) & set("<>&=?#/ ")