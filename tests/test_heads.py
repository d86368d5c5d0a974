from __future__ import annotations

from basketledger.store import HeadRecord, HeadTable, MemorySubstrate, fold_heads

ID = "1" * 64
V1 = "2" * 64
V2 = "3" * 64


def test_fold_heads_last_redirect_wins() -> None:
    state = fold_heads(
        [
            HeadRecord(logical_id=ID, version=ID),
            HeadRecord(logical_id=ID, version=V1),
            HeadRecord(logical_id=ID, version=V2),
        ]
    )
    assert state.current == {ID: V2}
    assert state.origin == {ID: ID, V1: ID, V2: ID}
    assert state.order == [ID]


def test_register_is_idempotent(substrate: MemorySubstrate) -> None:
    heads = HeadTable(substrate)
    assert heads.register(ID)
    assert not heads.register(ID)
    assert heads.current(ID) == ID
    assert len(substrate.heads()) == 1


def test_advance_is_compare_and_set(substrate: MemorySubstrate) -> None:
    heads = HeadTable(substrate)
    heads.register(ID)

    assert heads.advance(ID, ID, V1)
    # Stale expectation: the head already moved on.
    assert not heads.advance(ID, ID, V2)
    assert heads.current(ID) == V1
    assert heads.advance(ID, V1, V2)
    assert heads.current(ID) == V2


def test_every_version_resolves_to_its_identity(substrate: MemorySubstrate) -> None:
    heads = HeadTable(substrate)
    heads.register(ID)
    heads.advance(ID, ID, V1)
    heads.advance(ID, V1, V2)

    assert heads.resolve(ID) == ID
    assert heads.resolve(V1) == ID
    assert heads.resolve(V2) == ID
    assert heads.resolve("9" * 64) is None


def test_table_is_rebuilt_from_the_head_log(substrate: MemorySubstrate) -> None:
    heads = HeadTable(substrate)
    heads.register(ID)
    heads.advance(ID, ID, V1)

    reopened = HeadTable(substrate)
    assert reopened.current(ID) == V1
    assert reopened.logical_ids() == [ID]


def test_locks_are_per_identity(substrate: MemorySubstrate) -> None:
    heads = HeadTable(substrate)
    assert heads.lock(ID) is heads.lock(ID)
    assert heads.lock(ID) is not heads.lock(V1)


def test_advance_sees_redirects_from_another_table(substrate: MemorySubstrate) -> None:
    one = HeadTable(substrate)
    two = HeadTable(substrate)
    one.register(ID)
    assert two.current(ID) == ID

    assert one.advance(ID, ID, V1)
    # two last read ID as the head; the substrate says otherwise.
    assert not two.advance(ID, ID, V2)
    assert two.current(ID) == V1
    assert two.resolve(V1) == ID
    assert two.advance(ID, V1, V2)
    assert one.current(ID) == V2


def test_register_loses_to_an_earlier_registration(substrate: MemorySubstrate) -> None:
    one = HeadTable(substrate)
    two = HeadTable(substrate)
    two.current(ID)
    assert one.register(ID)
    assert not two.register(ID)
    assert len(substrate.heads()) == 1


def test_substrate_head_append_is_compare_and_set(substrate: MemorySubstrate) -> None:
    assert substrate.append_head(HeadRecord(logical_id=ID, version=ID), None)
    assert not substrate.append_head(HeadRecord(logical_id=ID, version=ID), None)
    assert not substrate.append_head(HeadRecord(logical_id=ID, version=V2), V1)
    assert substrate.append_head(HeadRecord(logical_id=ID, version=V1), ID)
    assert substrate.heads(1) == [HeadRecord(logical_id=ID, version=V1)]
