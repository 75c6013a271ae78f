"""
Unit tests for app.core.signing: canonical strings, signatures and
timestamp freshness.
"""
import hashlib
import hmac
from datetime import datetime, timezone
from urllib.parse import parse_qs, parse_qsl

import pytest
from starlette.datastructures import QueryParams

from app.core.signing import (
    build_parameter_set,
    canonicalize,
    compute_signature,
    derive_signing_key,
    is_timestamp_fresh,
    parse_timestamp,
    sign_parameters,
    verify_signature,
)

SECRET = "testsecret"
PARAMS = {"user_id": "42", "ts": "1000000000", "app_id": "7"}
CANONICAL = "app_id=7\nts=1000000000\nuser_id=42"
# HMAC-SHA256(key=SHA256("testsecret"), CANONICAL), computed independently
EXPECTED_SIGNATURE = "86f4fd6b771fd2a3cbc8009cf971ce1b968d6196499082c079b6bbd0cdd974ac"
EMPTY_SIGNATURE = "4d761faea5893bb4b8c415139dca8a152a7d72a9544109394ca401ca04bb7771"
NOW = 1_700_000_000


class TestCanonicalize:
    def test_sorts_names(self):
        assert canonicalize(PARAMS) == CANONICAL

    def test_input_order_does_not_matter(self):
        reordered = {"app_id": "7", "user_id": "42", "ts": "1000000000"}
        assert canonicalize(reordered) == canonicalize(PARAMS)

    def test_changing_a_value_changes_output(self):
        changed = dict(PARAMS, user_id="43")
        assert canonicalize(changed) != CANONICAL

    def test_empty_set(self):
        assert canonicalize({}) == ""

    def test_signature_field_excluded(self):
        with_hash = dict(PARAMS, hash="deadbeef")
        assert canonicalize(with_hash) == CANONICAL
        assert "hash=" not in canonicalize(with_hash)

    def test_values_are_not_escaped(self):
        assert canonicalize({"a": "x=y\nz", "b": ""}) == "a=x=y\nz\nb="

    def test_names_compare_bytewise(self):
        # Uppercase sorts before lowercase, '_' (0x5f) before 'a'
        params = {"b": "1", "B": "2", "a_b": "3", "ab": "4", "_": "5"}
        assert canonicalize(params) == "B=2\n_=5\na_b=3\nab=4\nb=1"

    def test_non_ascii_names_follow_utf8_order(self):
        params = {"é": "1", "z": "2", "ü": "3"}
        names = [line.split("=")[0] for line in canonicalize(params).split("\n")]
        assert names == sorted(names, key=lambda name: name.encode("utf-8"))


class TestBuildParameterSet:
    def test_first_occurrence_wins_for_pairs(self):
        pairs = [("user_id", "1"), ("ts", "5"), ("user_id", "2")]
        assert build_parameter_set(pairs) == {"user_id": "1", "ts": "5"}

    def test_accepts_parse_qs_mapping(self):
        parsed = parse_qs("user_id=1&user_id=2&hash=abc&ts=5")
        assert build_parameter_set(parsed) == {"user_id": "1", "ts": "5"}

    def test_accepts_starlette_query_params(self):
        query = QueryParams("user_id=1&ts=5&user_id=2&hash=abc")
        assert build_parameter_set(query) == {"user_id": "1", "ts": "5"}

    def test_signature_field_dropped(self):
        pairs = parse_qsl("hash=abc&app_id=7", keep_blank_values=True)
        assert build_parameter_set(pairs) == {"app_id": "7"}

    def test_blank_values_kept(self):
        pairs = parse_qsl("first_name=&user_id=1", keep_blank_values=True)
        assert build_parameter_set(pairs) == {"first_name": "", "user_id": "1"}


class TestSignature:
    def test_signing_key_is_sha256_of_secret(self):
        key = derive_signing_key(SECRET)
        assert key == hashlib.sha256(b"testsecret").digest()
        assert len(key) == 32
        assert len(derive_signing_key("x" * 500)) == 32

    def test_pinned_vector(self):
        assert compute_signature(PARAMS, SECRET) == EXPECTED_SIGNATURE

    def test_matches_manual_construction(self):
        key = hashlib.sha256(SECRET.encode()).digest()
        manual = hmac.new(key, CANONICAL.encode(), hashlib.sha256).hexdigest()
        assert compute_signature(PARAMS, SECRET) == manual

    def test_empty_set_is_well_defined(self):
        assert compute_signature({}, SECRET) == EMPTY_SIGNATURE
        assert verify_signature({}, EMPTY_SIGNATURE, SECRET) is True

    def test_round_trip(self):
        signature = compute_signature(PARAMS, SECRET)
        assert verify_signature(PARAMS, signature, SECRET) is True

    def test_sign_parameters_adds_hash(self):
        signed = sign_parameters(PARAMS, SECRET)
        assert signed["hash"] == EXPECTED_SIGNATURE
        assert "hash" not in PARAMS

    def test_sign_parameters_replaces_stale_hash(self):
        signed = sign_parameters(dict(PARAMS, hash="old"), SECRET)
        assert signed["hash"] == EXPECTED_SIGNATURE

    @pytest.mark.parametrize("position", [0, 31, 63])
    def test_flipped_character_rejected(self, position):
        flipped = "0" if EXPECTED_SIGNATURE[position] != "0" else "1"
        tampered = EXPECTED_SIGNATURE[:position] + flipped + EXPECTED_SIGNATURE[position + 1:]
        assert verify_signature(PARAMS, tampered, SECRET) is False

    def test_changed_value_rejected(self):
        assert verify_signature(dict(PARAMS, user_id="43"), EXPECTED_SIGNATURE, SECRET) is False

    def test_wrong_secret_rejected(self):
        assert verify_signature(PARAMS, EXPECTED_SIGNATURE, "othersecret") is False

    def test_uppercase_hex_rejected(self):
        assert verify_signature(PARAMS, EXPECTED_SIGNATURE.upper(), SECRET) is False

    @pytest.mark.parametrize("supplied", [None, "", "abc", EXPECTED_SIGNATURE + "0", 12345, "ünïcode"])
    def test_malformed_signature_rejected_without_raising(self, supplied):
        assert verify_signature(PARAMS, supplied, SECRET) is False

    @pytest.mark.parametrize("params", [{"a": "\ud800"}, {"\udcff": "1"}, dict(PARAMS, user_id="\udcff")])
    def test_unencodable_parameters_rejected_without_raising(self, params):
        assert verify_signature(params, EXPECTED_SIGNATURE, SECRET) is False

    def test_hash_inside_params_is_ignored(self):
        with_hash = dict(PARAMS, hash=EXPECTED_SIGNATURE)
        assert verify_signature(with_hash, EXPECTED_SIGNATURE, SECRET) is True


class TestTimestampFreshness:
    @pytest.mark.parametrize(
        "age, expected",
        [
            (0, True),
            (300, True),
            (301, False),
            (-60, True),
            (-61, False),
        ],
    )
    def test_window_boundaries(self, age, expected):
        assert is_timestamp_fresh(str(NOW - age), NOW, 300) is expected

    def test_custom_max_age(self):
        assert is_timestamp_fresh(str(NOW - 30), NOW, 30) is True
        assert is_timestamp_fresh(str(NOW - 31), NOW, 30) is False

    @pytest.mark.parametrize(
        "text",
        ["", "not-a-number", " 1700000000", "1700000000 ", "1_700_000_000", "17e8", "1.5", "٣", None],
    )
    def test_malformed_rejected(self, text):
        assert is_timestamp_fresh(text, NOW, 300) is False

    def test_int64_overflow_rejected(self):
        assert parse_timestamp("9223372036854775807") == 2 ** 63 - 1
        assert parse_timestamp("9223372036854775808") is None
        assert parse_timestamp("-9223372036854775809") is None
        assert is_timestamp_fresh("9223372036854775808", NOW, 300) is False

    def test_signed_values_parse(self):
        assert parse_timestamp("+1700000000") == 1700000000
        assert parse_timestamp("-5") == -5
        assert is_timestamp_fresh("+1700000000", NOW, 300) is True

    def test_accepts_datetime_now(self):
        now = datetime.fromtimestamp(NOW, tz=timezone.utc)
        assert is_timestamp_fresh(str(NOW - 10), now, 300) is True

    def test_defaults_to_current_time(self):
        assert is_timestamp_fresh("1000000000") is False
