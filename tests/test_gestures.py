import pytest

from bubbletrack.gestures.controller import (
    GestureController,
    GestureOutcome,
    GestureState,
    PointerEvent,
)
from bubbletrack.surface.reposition import RepositionPolicy


@pytest.fixture()
def calls(store, monkeypatch):
    '''Record move/reset_timer calls while still applying them.'''
    recorded = {'move': [], 'reset': []}
    real_move, real_reset = store.move, store.reset_timer

    def move(activity_id, x, y):
        recorded['move'].append((x, y))
        real_move(activity_id, x, y)

    def reset(activity_id):
        recorded['reset'].append(activity_id)
        real_reset(activity_id)

    monkeypatch.setattr(store, 'move', move)
    monkeypatch.setattr(store, 'reset_timer', reset)
    return recorded


@pytest.fixture()
def bubble(store, tracker):
    tracker.update(800, 600)
    activity_id = store.add('friends', 'Call Sam')
    store.move(activity_id, 100, 100)
    return activity_id


@pytest.fixture()
def gesture(bubble, store, tracker):
    return GestureController(bubble, store, tracker)


def test_tap_without_movement_resets_once(gesture, calls, bubble):
    gesture.pointer_down(1, 50, 50)
    assert gesture.state is GestureState.TRACKING
    assert gesture.pointer_end(1) is GestureOutcome.TAPPED_RESET
    assert calls == {'move': [], 'reset': [bubble]}
    assert gesture.state is GestureState.IDLE


def test_jitter_under_threshold_is_still_a_tap(gesture, calls, store, bubble):
    gesture.pointer_down(1, 50, 50)
    gesture.pointer_move(1, 53, 52)  # hypot ~3.6px
    assert gesture.pointer_end(1) is GestureOutcome.TAPPED_RESET
    assert calls['reset'] == [bubble]


def test_drag_moves_and_never_resets(gesture, calls, store, bubble, clock):
    before = store.get(bubble).last_reset_at
    clock.advance(1_000)
    gesture.pointer_down(1, 50, 50)
    gesture.pointer_move(1, 60, 50)
    gesture.pointer_move(1, 80, 90)
    assert gesture.pointer_end(1) is GestureOutcome.DRAGGED

    assert calls['reset'] == []
    assert calls['move'][-1] == (130, 140)
    assert (store.get(bubble).x, store.get(bubble).y) == (130, 140)
    assert store.get(bubble).last_reset_at == before


def test_drag_back_to_start_is_still_a_drag(gesture, calls):
    gesture.pointer_down(1, 0, 0)
    gesture.pointer_move(1, 20, 0)
    gesture.pointer_move(1, 0, 0)
    assert gesture.pointer_end(1) is GestureOutcome.DRAGGED
    assert calls['reset'] == []


def test_drag_is_clamped_to_bounds(gesture, store, bubble):
    gesture.pointer_down(1, 0, 0)
    assert gesture.pointer_move(1, 5_000, -5_000) == (680, 0)
    gesture.pointer_end(1)
    assert (store.get(bubble).x, store.get(bubble).y) == (680, 0)


def test_second_pointer_is_ignored(gesture, calls, store, bubble):
    gesture.pointer_down(1, 0, 0)
    assert gesture.pointer_down(2, 300, 300) is False
    assert gesture.pointer_move(2, 400, 400) is None
    assert gesture.pointer_end(2) is None
    assert gesture.active_pointer == 1

    gesture.pointer_move(1, 10, 10)
    assert gesture.pointer_end(1) is GestureOutcome.DRAGGED
    assert calls['move'] == [(110, 110)]


def test_moves_after_cancel_are_discarded(gesture, calls):
    gesture.handle(PointerEvent('down', 7, 0, 0))
    gesture.handle(PointerEvent('move', 7, 30, 0))
    assert gesture.handle(PointerEvent('cancel', 7, 30, 0)) is GestureOutcome.DRAGGED
    assert gesture.handle(PointerEvent('move', 7, 90, 0)) is None
    assert calls['move'] == [(130, 100)]


def test_lost_capture_without_movement_counts_as_tap(gesture, calls, bubble):
    gesture.handle(PointerEvent('down', 3, 10, 10))
    assert gesture.handle(PointerEvent('lost_capture', 3, 10, 10)) is GestureOutcome.TAPPED_RESET
    assert calls['reset'] == [bubble]


def test_bounds_change_mid_drag_is_respected(gesture, store, tracker, bubble):
    RepositionPolicy(store).attach(tracker)
    gesture.pointer_down(1, 0, 0)
    gesture.pointer_move(1, 400, 300)
    assert (store.get(bubble).x, store.get(bubble).y) == (500, 400)

    tracker.update(300, 300)
    assert gesture.pointer_move(1, 410, 310) == (180, 180)
    gesture.pointer_end(1)


def test_pointer_down_before_measurement_is_ignored(store, calls):
    from bubbletrack.surface.bounds import BoundsTracker

    activity_id = store.add('friends', 'A')
    gesture = GestureController(activity_id, store, BoundsTracker())
    assert gesture.pointer_down(1, 0, 0) is False
    assert gesture.pointer_end(1) is None
    assert calls['reset'] == []


def test_activity_deleted_mid_gesture(gesture, store, calls, bubble):
    gesture.pointer_down(1, 0, 0)
    store.delete(bubble)
    assert gesture.pointer_move(1, 20, 20) is None
    assert gesture.state is GestureState.IDLE
    assert gesture.pointer_end(1) is None
    assert calls['reset'] == []


def test_tap_on_deleted_activity_does_not_reset(gesture, store, calls, bubble):
    gesture.pointer_down(1, 0, 0)
    store.delete(bubble)
    assert gesture.pointer_end(1) is None
    assert calls['reset'] == []


def test_drag_into_a_wall_still_commits_moves(store, tracker, calls):
    tracker.update(800, 600)
    activity_id = store.add('friends', 'Corner')
    gesture = GestureController(activity_id, store, tracker)

    gesture.pointer_down(1, 100, 100)
    gesture.pointer_move(1, 80, 80)
    assert gesture.pointer_end(1) is GestureOutcome.DRAGGED

    assert calls['move'] == [(0, 0)]
    assert calls['reset'] == []


def test_pinned_drag_does_not_rewrite_storage(store, storage, tracker):
    tracker.update(800, 600)
    activity_id = store.add('friends', 'Corner')
    writes = storage.writes
    gesture = GestureController(activity_id, store, tracker)

    gesture.pointer_down(1, 100, 100)
    gesture.pointer_move(1, 50, 50)
    gesture.pointer_end(1)

    assert storage.writes == writes
