import threading

import pytest

from accumulator import (MemoryAccumulatorState, NullifierAlreadyUsed,
                         PoseidonMerkleTree, ProofVerifier,
                         SQLiteAccumulatorState)
from poseidon import field
from poseidon.errors import FieldElementTooLarge


@pytest.fixture(params=["memory", "sqlite"])
def state(request):
    if request.param == "memory":
        return MemoryAccumulatorState()
    s = SQLiteAccumulatorState(":memory:")
    request.addfinalizer(s.close)
    return s


def test_roots_append_only(state):
    assert state.add_root(1) is True
    assert state.add_root(1) is False
    assert state.has_root(1)
    assert not state.has_root(2)
    assert state.root_count() == 1


def test_nullifiers_insert_once(state):
    state.add_nullifier(9)
    assert state.has_nullifier(9)
    with pytest.raises(NullifierAlreadyUsed):
        state.add_nullifier(9)
    assert state.nullifier_count() == 1


def test_large_values_roundtrip(state):
    x = field.P - 1
    state.add_root(x)
    state.add_nullifier(x)
    assert state.has_root(x) and state.has_nullifier(x)
    assert not state.has_root(x - 1)


def test_rejects_non_field_values(state):
    with pytest.raises(FieldElementTooLarge):
        state.add_root(field.P)
    with pytest.raises(FieldElementTooLarge):
        state.add_nullifier(field.P)


@pytest.mark.parametrize("value", [field.P, field.P + 1, -1])
def test_lookup_of_non_field_value_is_false(state, value):
    assert state.has_root(value) is False
    assert state.has_nullifier(value) is False


def test_transaction_rolls_back_on_error(state):
    with pytest.raises(RuntimeError):
        with state.transaction():
            state.add_root(5)
            raise RuntimeError("boom")
    if isinstance(state, SQLiteAccumulatorState):
        assert not state.has_root(5)


def test_nested_transactions_join(state):
    with state.transaction():
        with state.transaction():
            state.add_nullifier(3)
        assert state.has_nullifier(3)
    assert state.has_nullifier(3)


def test_sqlite_persists_across_connections(tmp_path):
    db = tmp_path / "acc.sqlite"
    with SQLiteAccumulatorState(db) as s:
        s.add_root(123)
        s.add_nullifier(456)
    with SQLiteAccumulatorState(db) as s:
        assert s.has_root(123)
        assert s.has_nullifier(456)
        with pytest.raises(NullifierAlreadyUsed):
            s.add_nullifier(456)


def _race(verifiers, leaf, proof, root, nullifier):
    results = []
    lock = threading.Lock()
    barrier = threading.Barrier(len(verifiers))

    def worker(v):
        barrier.wait()
        try:
            v.consume_proof(leaf, proof, root, nullifier)
            outcome = "ok"
        except NullifierAlreadyUsed:
            outcome = "used"
        with lock:
            results.append(outcome)

    threads = [threading.Thread(target=worker, args=(v,)) for v in verifiers]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return sorted(results)


def test_concurrent_consume_single_winner_memory():
    tree = PoseidonMerkleTree([1, 2, 3, 4], depth=2)
    v = ProofVerifier(MemoryAccumulatorState())
    v.register_root(tree.root)
    out = _race([v] * 8, 3, tree.proof(2), tree.root, 42)
    assert out == ["ok"] + ["used"] * 7
    assert v.state.nullifier_count() == 1


@pytest.mark.slow
def test_concurrent_consume_single_winner_sqlite(tmp_path):
    db = tmp_path / "race.sqlite"
    tree = PoseidonMerkleTree([1, 2, 3, 4], depth=2)
    states = [SQLiteAccumulatorState(db, timeout=30.0) for _ in range(4)]
    try:
        verifiers = [ProofVerifier(s) for s in states]
        verifiers[0].register_root(tree.root)
        out = _race(verifiers, 3, tree.proof(2), tree.root, 42)
        assert out == ["ok"] + ["used"] * 3
        assert states[0].nullifier_count() == 1
    finally:
        for s in states:
            s.close()
