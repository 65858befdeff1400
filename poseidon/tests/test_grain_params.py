import json

import pytest

from poseidon import field
from poseidon.grain import GrainLFSR, generate_parameters
from poseidon.params import (ALPHA, FULL_ROUNDS, PARTIAL_ROUNDS, WIDTH,
                             PoseidonParams, bn254_t3_params, dump_params_json,
                             get_params, load_params_json, register_params,
                             registered_names)

# First round constant and MDS diagonal entry of the standard Grain-derived
# BN254 t=3 (R_F=8, R_P=57) parameter set, as published by circomlib and
# other Poseidon implementations.
RC_0_0 = 0x0EE9A592BA9A9518D05986D656F40C2114C4993C11BB29938D21D47304CD8E6E
MDS_0_0 = 0x109B7F411BA0E4C9B2B70CAF5C36A7B194BE7C11AD24378BFEDB68592BA8118B


def test_default_shape():
    p = bn254_t3_params()
    assert (p.t, p.R_F, p.R_P, p.alpha) == (WIDTH, FULL_ROUNDS, PARTIAL_ROUNDS, ALPHA) == (3, 8, 57, 5)
    assert len(p.rc) == 65 and all(len(row) == 3 for row in p.rc)
    assert len(p.mds) == 3 and all(len(row) == 3 for row in p.mds)
    assert p.rounds == 65


def test_all_entries_canonical():
    p = bn254_t3_params()
    for row in (*p.rc, *p.mds):
        for v in row:
            assert field.is_canonical(v)


def test_matches_published_grain_constants():
    p = bn254_t3_params()
    assert p.rc[0][0] == RC_0_0
    assert p.mds[0][0] == MDS_0_0


def test_mds_is_cauchy_and_invertible_2x2_minors():
    m = bn254_t3_params().mds
    # Every 2x2 minor of a Cauchy matrix with distinct x/y is non-singular.
    for i in range(3):
        for k in range(i + 1, 3):
            for j in range(3):
                for l in range(j + 1, 3):
                    det = (m[i][j] * m[k][l] - m[i][l] * m[k][j]) % field.P
                    assert det != 0


@pytest.mark.slow
def test_generation_is_deterministic_and_shape_sensitive():
    a = generate_parameters(n=254, t=3, r_f=8, r_p=57, modulus=field.P)
    b = generate_parameters(n=254, t=3, r_f=8, r_p=57, modulus=field.P)
    assert a == b
    c = generate_parameters(n=254, t=3, r_f=8, r_p=56, modulus=field.P)
    assert c[0][0] != a[0][0]


def test_lfsr_rejects_oversize_seed_fields():
    with pytest.raises(ValueError):
        GrainLFSR(n=1 << 12, t=3, r_f=8, r_p=57)


def test_lfsr_output_is_bits():
    g = GrainLFSR(n=254, t=3, r_f=8, r_p=57)
    bits = [g.next_bit() for _ in range(256)]
    assert set(bits) <= {0, 1}
    assert 0 < sum(bits) < 256
    assert 0 <= g.next_field_element(254, field.P) < field.P


def test_get_params_default_registers_once():
    p = get_params()
    assert p is get_params("bn254_t3")
    assert "bn254_t3" in registered_names()


def test_unknown_params_name():
    with pytest.raises(KeyError):
        get_params("does-not-exist")


def test_validate_rejects_bad_tables():
    good = bn254_t3_params()
    with pytest.raises(ValueError):
        PoseidonParams(t=3, R_F=8, R_P=57, alpha=5, mds=good.mds, rc=good.rc[:-1]).validate()
    with pytest.raises(ValueError):
        PoseidonParams(t=3, R_F=7, R_P=57, alpha=5, mds=good.mds, rc=good.rc).validate()
    with pytest.raises(ValueError):
        PoseidonParams(t=3, R_F=8, R_P=57, alpha=4, mds=good.mds, rc=good.rc).validate()
    bad_rc = ((field.P, 0, 0),) + good.rc[1:]
    with pytest.raises(ValueError):
        PoseidonParams(t=3, R_F=8, R_P=57, alpha=5, mds=good.mds, rc=bad_rc).validate()


def test_json_dump_load_roundtrip(tmp_path):
    params = bn254_t3_params()
    path = dump_params_json(params, tmp_path / "out" / "bn254_t3_copy.json")
    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw["t"] == 3 and raw["R_P"] == 57
    assert raw["rc"][0][0] == str(RC_0_0)

    loaded = load_params_json(path)
    assert loaded == params
    assert get_params("bn254_t3_copy") == params


def test_load_params_json_accepts_hex_strings(tmp_path):
    params = bn254_t3_params()
    doc = {
        "t": 3,
        "R_F": 8,
        "R_P": 57,
        "mds": [[hex(v) for v in row] for row in params.mds],
        "rc": [[hex(v) for v in row] for row in params.rc],
    }
    p = tmp_path / "hexparams.json"
    p.write_text(json.dumps(doc), encoding="utf-8")
    loaded = load_params_json(p, name="hex_params")
    assert loaded.alpha == 5
    assert loaded.rc == params.rc


def test_register_params_validates():
    good = bn254_t3_params()
    with pytest.raises(ValueError):
        register_params("", good)
    with pytest.raises(ValueError):
        register_params("broken", PoseidonParams(t=3, R_F=8, R_P=57, alpha=5, mds=good.mds[:2], rc=good.rc))
    assert "broken" not in registered_names()
