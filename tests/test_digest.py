"""Tests for the digest catalog: sizes, accumulators, expected-value decoding."""

from __future__ import annotations

import hashlib

import pytest

from alpac.digest import DIGEST_FIELDS, DigestKind, decode_expected
from alpac.exceptions import ConfigurationError


class TestDigestKind:
    @pytest.mark.parametrize("kind", list(DigestKind))
    def test_digest_size_matches_hashlib(self, kind: DigestKind):
        assert kind.new().digest_size == kind.digest_size
        assert hashlib.new(kind.value).digest_size == kind.digest_size

    def test_fields_cover_recipe_keys(self):
        assert DIGEST_FIELDS == ("md5", "sha1", "sha224", "sha256", "sha384", "sha512")

    def test_from_name_is_case_insensitive(self):
        assert DigestKind.from_name("SHA256") is DigestKind.SHA256

    def test_from_name_unknown(self):
        with pytest.raises(ConfigurationError):
            DigestKind.from_name("crc32")

    @pytest.mark.parametrize("kind", list(DigestKind))
    def test_accumulator_is_chunk_invariant(self, kind: DigestKind):
        data = bytes(range(256)) * 13
        whole = kind.new()
        whole.update(data)
        pieces = kind.new()
        for i in range(0, len(data), 37):
            pieces.update(data[i : i + 37])
        assert whole.digest() == pieces.digest()


class TestDecodeExpected:
    def test_decodes_lower_and_upper_hex(self):
        value = hashlib.sha1(b"abc").hexdigest()
        assert decode_expected(DigestKind.SHA1, value) == bytes.fromhex(value)
        assert decode_expected(DigestKind.SHA1, value.upper()) == bytes.fromhex(value)

    def test_strips_whitespace(self):
        value = hashlib.md5(b"abc").hexdigest()
        assert decode_expected(DigestKind.MD5, f"  {value}\n") == bytes.fromhex(value)

    def test_rejects_non_hex(self):
        with pytest.raises(ConfigurationError) as exc:
            decode_expected(DigestKind.MD5, "z" * 32)
        assert exc.value.context["kind"] == "md5"

    def test_rejects_wrong_length(self):
        with pytest.raises(ConfigurationError):
            decode_expected(DigestKind.SHA256, hashlib.md5(b"").hexdigest())

    def test_rejects_non_string(self):
        with pytest.raises(ConfigurationError):
            decode_expected(DigestKind.MD5, 12345)
