from __future__ import annotations

import hashlib

import pytest

from chain_lotto.draw import compute_index, parse_ether, to_ether
from chain_lotto.errors import ValidationError


def test_compute_index_matches_sha256():
    idx, seed_hash_hex, seed_int = compute_index(b"block", 7)
    assert seed_hash_hex == hashlib.sha256(b"block").hexdigest()
    assert seed_int == int(seed_hash_hex, 16)
    assert idx == seed_int % 7


def test_compute_index_in_range():
    for n in range(1, 30):
        idx, _, _ = compute_index(f"seed-{n}".encode(), n)
        assert 0 <= idx < n


def test_compute_index_rejects_empty():
    with pytest.raises(ValueError):
        compute_index(b"x", 0)


@pytest.mark.parametrize(
    "wei, text",
    [
        (0, "0"),
        (10**16, "0.01"),
        (5 * 10**15, "0.005"),
        (10**18, "1"),
        (10_000 * 10**18, "10000"),
    ],
)
def test_to_ether(wei, text):
    assert to_ether(wei) == text


def test_parse_ether():
    assert parse_ether("0.01") == 10**16
    assert parse_ether(" 2 ") == 2 * 10**18
    assert parse_ether("0.000000000000000001") == 1


@pytest.mark.parametrize(
    "bad", ["abc", "-1", "0.0000000000000000001", "", "inf", "-Infinity", "NaN", "sNaN"]
)
def test_parse_ether_rejects(bad):
    with pytest.raises(ValidationError):
        parse_ether(bad)
