"""Tests for call-data decoding and hex argument parsing."""

import base64

import pytest

from challenge_indexer.core.errors import DecodeError
from challenge_indexer.services.decoder import (
    MAX_SAFE_INTEGER,
    CallKind,
    DecodedCall,
    decode_call_data,
    decode_call_data_strict,
    parse_hex_int,
    saturate_safe_int,
)
from tests.conftest import encode_call


def test_decode_function_and_arguments() -> None:
    call = decode_call_data(encode_call("createChallenge@0064@00c8@00@00"))

    assert call == DecodedCall("createChallenge", ("0064", "00c8", "00", "00"))
    assert call.kind is CallKind.CREATE_CHALLENGE


def test_decode_without_arguments() -> None:
    call = decode_call_data(encode_call("closeChallenge"))

    assert call is not None
    assert call.function_name == "closeChallenge"
    assert call.args == ()
    assert call.arg(0) is None


def test_empty_argument_segments_are_dropped() -> None:
    call = decode_call_data(encode_call("submitWorkout@@05@"))

    assert call is not None
    assert call.args == ("05",)


def test_arguments_keep_their_0x_prefix() -> None:
    call = decode_call_data(encode_call("submitWorkout@0x0a"))

    assert call is not None
    assert call.args == ("0x0a",)


def test_untracked_function_has_no_kind() -> None:
    call = decode_call_data(encode_call("ESDTTransfer@544f4b454e@01"))

    assert call is not None
    assert call.kind is None


@pytest.mark.parametrize(
    "data",
    [
        None,
        "",
        "not base64 at all!",
        base64.b64encode(b"\xff\xfe\xfd").decode(),
        encode_call("@0064"),
    ],
)
def test_unusable_call_data_yields_none(data) -> None:
    assert decode_call_data(data) is None


def test_strict_decoder_raises_decode_error() -> None:
    with pytest.raises(DecodeError):
        decode_call_data_strict(base64.b64encode(b"\xc3\x28").decode())


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("05", 5),
        ("0x05", 5),
        ("0X0A", 10),
        ("00c8", 200),
        ("ff" * 32, int("ff" * 32, 16)),
    ],
)
def test_parse_hex_int(value, expected) -> None:
    assert parse_hex_int(value) == expected


@pytest.mark.parametrize("value", [None, "", "0x", "zz", "-5", "5_0", "+1"])
def test_parse_hex_int_rejects_non_hex(value) -> None:
    assert parse_hex_int(value) is None


def test_saturate_safe_int() -> None:
    assert saturate_safe_int(200) == 200
    assert saturate_safe_int(MAX_SAFE_INTEGER + 1) == MAX_SAFE_INTEGER
    assert saturate_safe_int(int("ff" * 16, 16)) == MAX_SAFE_INTEGER
