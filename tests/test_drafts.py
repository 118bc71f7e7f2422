import pytest

from drafts import DraftStore
from models import ServiceType


def test_create_draft_becomes_active_and_saved(store: DraftStore) -> None:
    draft_id = store.create_draft()
    assert draft_id == "d1"
    assert store.active_draft_id == draft_id
    assert store.active_status() == "saved"
    assert store.get_draft(draft_id).fields_dict() == {}


def test_create_draft_with_initial_fields(store: DraftStore) -> None:
    draft_id = store.create_draft({"provider_id": "P1", "type": "emergency", "bogus": 1})
    d = store.get_draft(draft_id)
    assert d.provider_id == "P1"
    assert d.type is ServiceType.EMERGENCY
    assert not hasattr(d, "bogus")


def test_update_merges_and_keeps_id(store: DraftStore) -> None:
    draft_id = store.create_draft({"provider_id": "P1", "car_id": "C1"})
    store.update_draft(draft_id, {"car_id": "C2", "odometer": 1200, "id": "hijack"})
    d = store.get_draft(draft_id)
    assert d.id == draft_id
    assert d.provider_id == "P1"
    assert d.car_id == "C2"
    assert d.odometer == 1200


def test_update_after_delete_is_noop(store: DraftStore) -> None:
    keep = store.create_draft({"provider_id": "P1"})
    gone = store.create_draft({"provider_id": "P2"})
    store.delete_draft(gone)
    after_delete = store.to_dict()

    store.update_draft(gone, {"provider_id": "resurrected"})

    assert store.to_dict() == after_delete
    assert gone not in store
    assert keep in store


def test_delete_active_clears_pointer_and_status(store: DraftStore) -> None:
    a = store.create_draft()
    b = store.create_draft()
    store.delete_draft(b)
    assert store.active_draft_id is None
    assert store.active_status() == "idle"
    assert "saving_status_by_id" in store.to_dict()
    assert b not in store.to_dict()["saving_status_by_id"]
    assert a in store


def test_delete_missing_is_noop(store: DraftStore) -> None:
    store.create_draft()
    before = store.to_dict()
    store.delete_draft("nope")
    assert store.to_dict() == before


def test_clear_all_drafts(store: DraftStore) -> None:
    store.create_draft()
    store.create_draft()
    store.clear_all_drafts()
    assert len(store) == 0
    assert store.active_draft_id is None
    assert store.to_dict() == {"drafts": {}, "active_draft_id": None, "saving_status_by_id": {}}


def test_set_active_draft_ignores_unknown_ids(store: DraftStore) -> None:
    a = store.create_draft()
    store.set_active_draft("missing")
    assert store.active_draft_id == a

    b = store.create_draft()
    store.set_active_draft(a)
    assert store.active_draft_id == a
    assert b in store


def test_mark_status_targets_active_only(store: DraftStore) -> None:
    a = store.create_draft()
    store.mark_draft_saving()
    b = store.create_draft()

    assert store.status_of(a) == "saving"
    # the active draft is b; a's status must not leak through
    assert store.active_status() == "saved"

    store.mark_draft_saving()
    assert store.active_status() == "saving"
    store.mark_draft_saved()
    assert store.active_status() == "saved"
    assert store.status_of(a) == "saving"


def test_mark_without_active_draft_is_noop(store: DraftStore) -> None:
    a = store.create_draft()
    store.delete_draft(a)
    store.mark_draft_saving()
    store.mark_draft_saved()
    assert store.active_status() == "idle"


def test_set_draft_status_rejects_unknown_status(store: DraftStore) -> None:
    a = store.create_draft()
    with pytest.raises(ValueError):
        store.set_draft_status(a, "done")


def test_list_drafts_labels(store: DraftStore) -> None:
    store.create_draft({"provider_id": "P1", "service_order": "S1", "car_id": "C1"})
    store.create_draft()
    store.create_draft({"provider_id": "P2", "car_id": "C9"})
    store.create_draft({"service_description": "only notes"})

    labels = [item.label for item in store.list_drafts()]
    assert labels == ["P1 • S1 • C1", "Empty draft #1", "P2 • C9", "Empty draft #2"]


def test_empty_draft_numbers_are_recomputed(store: DraftStore) -> None:
    first = store.create_draft()
    store.create_draft()
    store.delete_draft(first)
    assert [item.label for item in store.list_drafts()] == ["Empty draft #1"]


def test_on_change_fires_only_for_effective_mutations(id_factory) -> None:
    calls = []
    store = DraftStore(id_factory=id_factory, on_change=lambda: calls.append(1))

    a = store.create_draft()
    assert len(calls) == 1
    store.update_draft("missing", {"car_id": "x"})
    store.delete_draft("missing")
    store.set_active_draft(a)
    store.mark_draft_saved()
    assert len(calls) == 1

    store.mark_draft_saving()
    assert len(calls) == 2


def test_load_restores_state_and_settles_saving(store: DraftStore, id_factory) -> None:
    a = store.create_draft({"provider_id": "P1", "type": "planned"})
    store.mark_draft_saving()
    raw = store.to_dict()

    restored = DraftStore.from_dict(raw, id_factory=id_factory)
    assert restored.active_draft_id == a
    assert restored.get_draft(a).type is ServiceType.PLANNED
    assert restored.active_status() == "saved"


def test_load_drops_dangling_active_pointer(store: DraftStore) -> None:
    store.load({"drafts": {}, "active_draft_id": "ghost"})
    assert store.active_draft_id is None


def test_type_display_names_are_accepted(store: DraftStore) -> None:
    draft_id = store.create_draft({"type": "Planned"})
    assert store.get_draft(draft_id).type is ServiceType.PLANNED

    store.update_draft(draft_id, {"type": "Unplanned"})
    assert store.get_draft(draft_id).type is ServiceType.UNPLANNED
    store.update_draft(draft_id, {"type": "EMERGENCY"})
    assert store.get_draft(draft_id).to_dict()["type"] == "emergency"
