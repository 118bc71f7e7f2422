import pytest

from autosave import AutoSaveController, AutoSaveState
from drafts import DraftStore


def values(**overrides):
    base = {
        "provider_id": "",
        "service_order": "",
        "car_id": "",
        "odometer": 0,
        "engine_hours": 0,
        "start_date": "2024-01-01",
        "end_date": "2024-01-02",
        "type": "planned",
        "service_description": "",
    }
    base.update(overrides)
    return base


@pytest.fixture
def writes(store: DraftStore, monkeypatch):
    recorded = []
    original = store.update_draft

    def spy(draft_id, changes):
        recorded.append((draft_id, dict(changes)))
        original(draft_id, changes)

    monkeypatch.setattr(store, "update_draft", spy)
    return recorded


@pytest.fixture
def controller(store, scheduler) -> AutoSaveController:
    return AutoSaveController(store, scheduler, delay_ms=600)


def test_first_snapshot_of_a_session_is_not_written(store, scheduler, controller, writes) -> None:
    a = store.create_draft()
    controller.observe(values(), a)
    scheduler.advance(1000)

    assert writes == []
    assert controller.state is AutoSaveState.CLEAN
    assert store.active_status() == "saved"


def test_unchanged_snapshot_is_noop(store, scheduler, controller, writes) -> None:
    a = store.create_draft()
    controller.observe(values(), a)
    controller.observe(values(), a)
    assert scheduler.pending == []
    assert controller.state is AutoSaveState.CLEAN


def test_keystrokes_within_window_coalesce_into_last_value(store, scheduler, controller, writes) -> None:
    a = store.create_draft()
    controller.observe(values(), a)

    controller.observe(values(provider_id="P"), a)
    scheduler.advance(200)
    controller.observe(values(provider_id="P1"), a)
    scheduler.advance(200)
    controller.observe(values(provider_id="P12"), a)

    assert len(scheduler.pending) == 1
    assert writes == []
    assert store.active_status() == "saving"
    assert controller.state is AutoSaveState.PENDING

    scheduler.advance(600)

    assert len(writes) == 1
    assert writes[0][0] == a
    assert writes[0][1]["provider_id"] == "P12"
    assert store.get_draft(a).provider_id == "P12"
    assert store.active_status() == "saved"
    assert controller.state is AutoSaveState.CLEAN


def test_write_fires_only_after_quiet_period(store, scheduler, controller, writes) -> None:
    a = store.create_draft()
    controller.observe(values(), a)
    controller.observe(values(car_id="C1"), a)

    scheduler.advance(599)
    assert writes == []
    scheduler.advance(1)
    assert len(writes) == 1


def test_written_snapshot_becomes_baseline(store, scheduler, controller, writes) -> None:
    a = store.create_draft()
    controller.observe(values(), a)
    controller.observe(values(car_id="C1"), a)
    scheduler.advance(600)

    controller.observe(values(car_id="C1"), a)
    assert scheduler.pending == []
    assert len(writes) == 1


def test_session_switch_drops_pending_write(store, scheduler, controller, writes) -> None:
    a = store.create_draft({"provider_id": "A"})
    controller.observe(values(provider_id="A"), a)
    controller.observe(values(provider_id="A-edited"), a)

    b = store.create_draft({"provider_id": "B"})
    controller.observe(values(provider_id="B"), b)
    scheduler.advance(5000)

    assert writes == []
    assert store.get_draft(a).provider_id == "A"
    assert store.status_of(a) == "saved"
    assert store.active_status() == "saved"


def test_switching_back_starts_a_fresh_session(store, scheduler, controller, writes) -> None:
    a = store.create_draft()
    b = store.create_draft()
    controller.observe(values(), b)

    store.set_active_draft(a)
    controller.observe(values(car_id="loaded-from-a"), a)
    scheduler.advance(1000)
    assert writes == []


def test_reverting_to_baseline_cancels_pending(store, scheduler, controller, writes) -> None:
    a = store.create_draft()
    controller.observe(values(), a)
    controller.observe(values(car_id="typo"), a)
    assert store.active_status() == "saving"

    controller.observe(values(), a)
    scheduler.advance(1000)

    assert writes == []
    assert store.active_status() == "saved"
    assert controller.state is AutoSaveState.CLEAN


def test_cancel_discards_pending_write(store, scheduler, controller, writes) -> None:
    a = store.create_draft()
    controller.observe(values(), a)
    controller.observe(values(car_id="C1"), a)

    controller.cancel()
    scheduler.advance(1000)

    assert writes == []
    assert not controller.has_pending


def test_flush_applies_pending_write_immediately(store, scheduler, controller, writes) -> None:
    a = store.create_draft()
    controller.observe(values(), a)
    controller.observe(values(service_order="S1"), a)

    assert controller.flush() is True
    assert store.get_draft(a).service_order == "S1"
    assert scheduler.pending == []

    scheduler.advance(1000)
    assert len(writes) == 1
    assert controller.flush() is False


def test_late_timer_for_deleted_draft_does_not_resurrect_it(store, scheduler, controller, writes) -> None:
    a = store.create_draft()
    controller.observe(values(), a)
    controller.observe(values(car_id="C1"), a)

    store.delete_draft(a)
    scheduler.advance(1000)

    assert a not in store
    assert len(store) == 0


def test_no_active_draft_means_no_writes(store, scheduler, controller, writes) -> None:
    a = store.create_draft()
    controller.observe(values(), a)
    controller.observe(values(car_id="C1"), a)

    controller.observe(values(car_id="C2"), None)
    scheduler.advance(1000)

    assert writes == []
    assert controller.state is AutoSaveState.CLEAN


def test_pending_write_targets_draft_captured_at_schedule_time(store, scheduler, controller, writes) -> None:
    a = store.create_draft()
    controller.observe(values(), a)
    controller.observe(values(car_id="C1"), a)
    assert controller.pending_draft_id == a

    # active pointer moves without a new observation reaching the controller
    b = store.create_draft()
    scheduler.advance(1000)

    assert writes == [(a, values(car_id="C1"))]
    assert store.get_draft(b).car_id is None
