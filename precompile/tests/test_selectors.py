import pytest

from precompile.abi import (FieldType, canonical_signature, keccak256,
                            parse_type, selector, selector_hex)
from precompile.dispatch import CallDispatcher

EXPECTED_SIGNATURES = {
    "hashSingle": "hashSingle(uint256)",
    "hashPair": "hashPair(uint256,uint256)",
    "hashArray": "hashArray(uint256[])",
    "registerRoot": "registerRoot(uint256)",
    "verifyProof": "verifyProof(uint256,uint256[],uint256,uint256)",
    "consumeProof": "consumeProof(uint256,uint256[],uint256,uint256,uint256)",
    "batchVerify": "batchVerify(uint256[],uint256[][],uint256[],uint256)",
    "poseidon1": "poseidon1(uint256)",
    "poseidon2": "poseidon2(uint256,uint256)",
    "poseidonN": "poseidonN(uint256[])",
}


def test_keccak_is_not_sha3():
    assert keccak256(b"").hex() == "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"


@pytest.mark.parametrize(
    "sig,expected",
    [
        ("transfer(address,uint256)", "0xa9059cbb"),
        ("balanceOf(address)", "0x70a08231"),
        ("approve(address, uint256)", "0x095ea7b3"),
    ],
)
def test_selector_matches_solidity_convention(sig, expected):
    assert selector_hex(sig) == expected


def test_canonical_signature_uses_uint256_for_field():
    assert canonical_signature("hashPair", [FieldType(), FieldType()]) == "hashPair(uint256,uint256)"
    assert canonical_signature("f", [parse_type("field[][]"), parse_type("bool")]) == "f(uint256[][],bool)"
    assert canonical_signature("g", []) == "g()"


def test_dispatch_table_signatures():
    d = CallDispatcher()
    sigs = {e.name: e.signature for e in d.entries}
    assert sigs == EXPECTED_SIGNATURES


def test_dispatch_selectors_are_keccak_prefixes_and_unique():
    d = CallDispatcher()
    table = d.selectors()
    assert len(set(table.values())) == len(table) == len(EXPECTED_SIGNATURES)
    for sig, sel in table.items():
        assert sel == "0x" + keccak256(sig.encode()).hex()[:8]
        assert bytes.fromhex(sel[2:]) == selector(sig)


def test_mutating_flags():
    d = CallDispatcher()
    mutating = {e.name for e in d.entries if e.mutates}
    assert mutating == {"registerRoot", "consumeProof"}
