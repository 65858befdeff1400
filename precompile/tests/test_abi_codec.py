import pytest

from poseidon import field
from poseidon.errors import (ArrayLengthMismatch, EmptyArray,
                             FieldElementTooLarge)
from precompile.abi import (ABITypeError, ArrayType, BoolType, FieldType,
                            UIntType, decode_args, decode_revert,
                            decode_value, encode_args, encode_call,
                            encode_revert, encode_value, encode_word,
                            parse_type, selector)
from precompile.errors import AbiDecodeError, InvalidSelector
from accumulator.errors import InvalidProof, NullifierAlreadyUsed

P = field.P


def w(x: int) -> bytes:
    return x.to_bytes(32, "big")


# ------------------------------------------------------------------ types


@pytest.mark.parametrize(
    "spec,expected",
    [
        ("field", FieldType()),
        ("uint256", UIntType()),
        ("uint", UIntType()),
        ("bool", BoolType()),
        ("field[]", ArrayType(FieldType())),
        ("uint256[][]", ArrayType(ArrayType(UIntType()))),
    ],
)
def test_parse_type(spec, expected):
    assert parse_type(spec) == expected


@pytest.mark.parametrize("spec", ["", "address", "bytes32", "uint8"])
def test_parse_type_rejects(spec):
    with pytest.raises(ABITypeError):
        parse_type(spec)


# --------------------------------------------------------------- encoding


def test_scalar_words_are_big_endian():
    assert encode_word(1) == bytes(31) + b"\x01"
    assert encode_value(True, "bool") == w(1)
    assert encode_value(False, "bool") == w(0)
    assert encode_value(2**256 - 1, "uint256") == b"\xff" * 32


def test_array_is_length_then_inline_elements():
    assert encode_value([1, 2, 3], "field[]") == w(3) + w(1) + w(2) + w(3)
    assert encode_value([], "field[]") == w(0)
    nested = encode_value([[1], [2, 3]], "field[][]")
    assert nested == w(2) + w(1) + w(1) + w(2) + w(2) + w(3)


def test_encode_rejects_out_of_range():
    with pytest.raises(FieldElementTooLarge):
        encode_value(P, "field")
    with pytest.raises(ValueError):
        encode_value(2**256, "uint256")
    with pytest.raises(ValueError):
        encode_args(["field"], [])


def test_encode_call_prefixes_selector():
    data = encode_call("hashPair(uint256,uint256)", ["field", "field"], [100, 200])
    assert data[:4] == selector("hashPair(uint256,uint256)")
    assert data[4:] == w(100) + w(200)
    assert len(data) == 4 + 64


# --------------------------------------------------------------- decoding


def test_decode_scalars_and_arrays():
    buf = w(7) + w(2) + w(8) + w(9) + w(1)
    assert decode_args(buf, ["field", "field[]", "bool"]) == [7, [8, 9], True]


def test_decode_value_returns_offset():
    buf = w(2) + w(5) + w(6) + w(99)
    value, off = decode_value(buf, "field[]")
    assert value == [5, 6] and off == 96


def test_decode_nested_arrays():
    buf = w(2) + w(1) + w(10) + w(2) + w(20) + w(30)
    assert decode_args(buf, ["field[][]"]) == [[[10], [20, 30]]]


@pytest.mark.parametrize(
    "buf,types",
    [
        (b"", ["field"]),
        (w(1)[:31], ["field"]),
        (w(3) + w(1) + w(2), ["field[]"]),  # truncated array
        (w(1) + w(2), ["field"]),  # trailing word
        (w(1) + b"\x00", ["field"]),  # trailing byte
        (w(2), ["bool"]),  # bool must be 0/1
        (w(1) + w(5), ["field[][]"]),  # inner array truncated
    ],
)
def test_decode_shape_errors(buf, types):
    with pytest.raises(AbiDecodeError):
        decode_args(buf, types)


def test_decode_array_length_cap():
    buf = w(5) + b"".join(w(i) for i in range(5))
    assert decode_args(buf, ["field[]"], max_array_len=5) == [[0, 1, 2, 3, 4]]
    with pytest.raises(AbiDecodeError) as ei:
        decode_args(buf, ["field[]"], max_array_len=4)
    assert ei.value.ctx["length"] == 5


def test_huge_length_word_fails_fast():
    with pytest.raises(AbiDecodeError):
        decode_args(w(2**255) + w(1), ["field[]"], max_array_len=2**256)


def test_field_bounds_checked_after_shape():
    with pytest.raises(FieldElementTooLarge) as ei:
        decode_args(w(P), ["field"])
    assert ei.value.value == P
    # uint256 words are not bounded by p
    assert decode_args(w(P), ["uint256"]) == [P]
    # shape problems win over out-of-range values
    with pytest.raises(AbiDecodeError):
        decode_args(w(P) + b"\x00", ["field"])


def test_field_bounds_checked_inside_arrays():
    with pytest.raises(FieldElementTooLarge):
        decode_args(w(2) + w(1) + w(P), ["field[]"])
    assert decode_args(w(2) + w(1) + w(P), ["field[]"], check_bounds=False) == [[1, P]]


# ----------------------------------------------------------------- revert


def test_revert_field_element_too_large():
    data = encode_revert(FieldElementTooLarge(P, modulus=P))
    assert data[:4] == selector("FieldElementTooLarge(uint256)")
    assert decode_revert(data) == ("FieldElementTooLarge(uint256)", [P])


def test_revert_length_mismatch_and_nullifier():
    assert decode_revert(encode_revert(ArrayLengthMismatch(3, 2))) == (
        "ArrayLengthMismatch(uint256,uint256)",
        [3, 2],
    )
    assert decode_revert(encode_revert(NullifierAlreadyUsed(777))) == ("NullifierAlreadyUsed(uint256)", [777])


@pytest.mark.parametrize(
    "err,sig",
    [
        (EmptyArray(), "EmptyArray()"),
        (InvalidSelector(b"\x00\x00\x00\x00"), "InvalidSelector()"),
        (AbiDecodeError("x"), "AbiDecodeError()"),
        (InvalidProof(root=1, reason="root mismatch"), "InvalidProof()"),
        (RuntimeError("boom"), "UnknownError()"),
    ],
)
def test_revert_no_args(err, sig):
    data = encode_revert(err)
    assert data == selector(sig)
    assert decode_revert(data) == (sig, [])


def test_decode_revert_rejects_garbage():
    with pytest.raises(AbiDecodeError):
        decode_revert(b"\x01\x02")
    with pytest.raises(AbiDecodeError):
        decode_revert(b"\xde\xad\xbe\xef")
