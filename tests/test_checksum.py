"""Tests for the rolling substitution checksum."""

import random

import pytest

from config.constants import CHECKSUM_ALPHABET, CHECKSUM_TABLE
from simlogger.checksum import (
    ChecksumEngine,
    ChecksumState,
    absorb,
    absorb_bytes,
    absorb_string,
    checksum,
    checksum_lines,
    to_digest_string,
)


class TestTables:
    """The frozen tables."""

    def test_alphabet_size(self):
        assert len(CHECKSUM_ALPHABET) == 63
        assert len(set(CHECKSUM_ALPHABET)) == 63

    def test_table_is_permutation(self):
        assert sorted(CHECKSUM_TABLE) == list(range(63))


class TestKnownDigests:
    """Digests that every log ever written depends on."""

    @pytest.mark.parametrize("text,expected", [
        ("", "012345"),
        ("A", "UB7RYL"),
        ("0", "B7RYLN"),
        ("AB", "KBOK06"),
        ("ab", "QBC8XP"),
        ("AC", "Y3QY47"),
        ("BA", "G9KAP5"),
        ("ABC", "GOHLFW"),
        ("HFDTE010203", "NFG496"),
        ("maxspeed5.0", "21P4K4"),
        ("5.0maxspeed", "4BJE99"),
        ("CX UNLOCKEDWX LOCKEDNO THERM FILE", "K3TRNT"),
        ("EGTKEGLL", "5B6Q4J"),
    ])
    def test_golden(self, text, expected):
        assert checksum(text) == expected

    def test_case_matters(self):
        assert checksum("AB") != checksum("ab")

    def test_order_matters(self):
        assert checksum("AB") != checksum("BA")
        assert checksum("maxspeed5.0") != checksum("5.0maxspeed")

    def test_substitution_changes_digest(self):
        assert checksum("AB") != checksum("AC")


class TestIgnoredCharacters:
    """Characters outside the alphabet neither advance nor change anything."""

    @pytest.mark.parametrize("text", ["A-B", "A B", "A\r\nB", "A=B", "A\tB", "Aé_B"])
    def test_filtered(self, text):
        assert checksum(text) == "KBOK06"

    def test_absorb_unknown_leaves_state(self):
        state = ChecksumState()
        absorb(state, "-")
        assert state.index == 1
        assert state.digest == [0, 1, 2, 3, 4, 5]

    def test_index_advances(self):
        state = absorb(ChecksumState(), "A")
        assert state.index == 2

    def test_bytes_outside_alphabet_ignored(self):
        state = absorb_bytes(ChecksumState(), b"AB\x00\xffC")
        assert to_digest_string(state) == "GOHLFW"


NOT_IN_ALPHABET = " -_=:;/\\\t\r\n#@!?()[]{}'\"éü\x00"


def random_strings(seed, count=100, max_length=40):
    rng = random.Random(seed)
    return [
        "".join(rng.choice(CHECKSUM_ALPHABET) for _ in range(rng.randint(1, max_length)))
        for _ in range(count)
    ]


class TestSweeps:
    """Seeded sweeps over random alphabet strings."""

    @pytest.mark.parametrize("seed", [1, 2])
    def test_every_substitution_changes_digest(self, seed):
        rng = random.Random(seed)
        for text in random_strings(seed):
            position = rng.randrange(len(text))
            original = checksum(text)
            for replacement in CHECKSUM_ALPHABET:
                if replacement == text[position]:
                    continue
                changed = text[:position] + replacement + text[position + 1:]
                assert checksum(changed) != original, (text, position, replacement)

    @pytest.mark.parametrize("seed", [3, 4])
    def test_insertions_outside_alphabet_ignored(self, seed):
        rng = random.Random(seed)
        for text in random_strings(seed):
            padded = text
            for _ in range(rng.randint(1, 10)):
                at = rng.randint(0, len(padded))
                padded = padded[:at] + rng.choice(NOT_IN_ALPHABET) + padded[at:]
            assert checksum(padded) == checksum(text), repr(padded)

    def test_deterministic(self):
        for text in random_strings(5, count=20):
            engine = ChecksumEngine()
            engine.update(text)
            assert checksum(text) == checksum(text) == engine.digest()


class TestLines:
    """Digest over many lines is the digest of their concatenation."""

    def test_lines_equal_concatenation(self):
        lines = ["HFDTE010203\n", "type=1\n", "span=2.5\n"]
        assert checksum_lines(lines) == checksum("".join(lines))

    def test_line_endings_ignored(self):
        assert checksum_lines(["type1\r\n", "span2.5\r\n"]) == checksum_lines(["type1\n", "span2.5\n"])

    def test_index_wraps(self):
        """Long input still renders a six character digest."""
        digest = checksum("A" * 5000)
        assert len(digest) == 6
        assert all(ch in CHECKSUM_ALPHABET[:36] for ch in digest)


class TestChecksumEngine:
    """Tests for the incremental wrapper."""

    def test_incremental_matches_one_shot(self):
        engine = ChecksumEngine()
        engine.update("type1")
        engine.update("span2.5")
        assert engine.digest() == "QMNO05"

    def test_update_bytes(self):
        engine = ChecksumEngine()
        engine.update_bytes(b"AB")
        assert engine.digest() == "KBOK06"

    def test_reset(self):
        engine = ChecksumEngine()
        engine.update("A")
        engine.reset()
        assert engine.digest() == "012345"

    def test_digest_does_not_consume(self):
        engine = ChecksumEngine()
        engine.update("A")
        engine.digest()
        engine.update("B")
        assert engine.digest() == "KBOK06"
