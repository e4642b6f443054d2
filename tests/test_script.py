import pytest

from assetid.errors import InvalidScript
from assetid.script import (
    Opcode,
    PushData,
    build_pubkey_hash_script,
    build_script_hash_script,
    parse_chunks,
    script_from_asm,
    serialize_chunks,
)

from helpers import hash0, pubkey0, pubkey1, push, redeem_script0, signature0


def test_pubkey_hash_script():
    assert build_pubkey_hash_script(hash0) == b"\x76\xa9\x14" + hash0 + b"\x88\xac"


def test_script_hash_script():
    assert build_script_hash_script(hash0) == b"\xa9\x14" + hash0 + b"\x87"


@pytest.mark.parametrize("size", [0, 19, 21, 32])
def test_builders_reject_wrong_hash_size(size):
    with pytest.raises(ValueError):
        build_pubkey_hash_script(b"\x00" * size)
    with pytest.raises(ValueError):
        build_script_hash_script(b"\x00" * size)


def test_parse_chunks_multisig():
    assert parse_chunks(redeem_script0) == [
        Opcode(0x52),
        PushData(pubkey0),
        PushData(pubkey1),
        Opcode(0x52),
        Opcode(0xAE),
    ]


def test_serialize_drops_push_lengths():
    chunks = parse_chunks(redeem_script0)
    assert serialize_chunks(chunks) == b"\x52" + pubkey0 + pubkey1 + b"\x52\xae"


def test_op_0_is_an_empty_push():
    assert parse_chunks(b"\x00\x51") == [PushData(b""), Opcode(0x51)]
    assert serialize_chunks(parse_chunks(b"\x00\x51")) == b"\x51"


def test_truncated_push():
    with pytest.raises(InvalidScript):
        parse_chunks(b"\x05\x01\x02")


def test_asm_pubkey_hash_output():
    asm = "OP_DUP OP_HASH160 %s OP_EQUALVERIFY OP_CHECKSIG" % hash0.hex()
    assert script_from_asm(asm) == build_pubkey_hash_script(hash0)


def test_asm_node_signature_suffix():
    der = signature0[:-1]
    asm = "%s[ALL] %s" % (der.hex(), pubkey0.hex())
    assert script_from_asm(asm) == push(signature0) + push(pubkey0)


def test_asm_anyonecanpay_suffix():
    der = signature0[:-1]
    assert script_from_asm("%s[SINGLE|ANYONECANPAY]" % der.hex()) == push(der + b"\x83")


def test_asm_small_ints():
    assert script_from_asm("0 2 -1 OP_16") == b"\x00\x52\x4f\x60"


@pytest.mark.parametrize(
    "token, expected",
    [("5", b"\x55"), ("05", b"\x01\x05"), ("00", b"\x01\x00"), ("16", b"\x01\x16")],
)
def test_asm_two_digit_tokens_are_pushes(token, expected):
    assert script_from_asm(token) == expected


@pytest.mark.parametrize("asm", ["OP_BOGUS", "abc", "00[WHATEVER]"])
def test_asm_rejects_unknown_tokens(asm):
    with pytest.raises(InvalidScript):
        script_from_asm(asm)
