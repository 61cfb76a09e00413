from bubbletrack.models.image import ABSENT, EmbeddedImage, RemoteImage
from bubbletrack.state.actions import (
    AddActivity,
    DeleteActivity,
    ImageLoadFailed,
    RenameActivity,
    ResetActivityTimer,
    UpdateActivityImage,
    UpdateActivityPosition,
)
from bubbletrack.state.reducer import EMPTY_STATE, activities_reducer

T = 1_000


def _with_one():
    return activities_reducer(EMPTY_STATE, AddActivity(id='a', category='friends', title=' Call Sam ', now=T))


def test_add_trims_title_and_stamps_times():
    state = _with_one()
    (activity,) = state.activities
    assert activity.title == 'Call Sam'
    assert activity.created_at == activity.last_reset_at == T
    assert activity.image is ABSENT
    assert (activity.x, activity.y) == (0, 0)


def test_add_whitespace_title_returns_same_state():
    assert activities_reducer(EMPTY_STATE, AddActivity('a', 'friends', '   ', T)) is EMPTY_STATE


def test_add_duplicate_id_is_ignored():
    state = _with_one()
    assert activities_reducer(state, AddActivity('a', 'family', 'Other', T)) is state


def test_unknown_id_operations_return_same_state():
    state = _with_one()
    for action in (
        RenameActivity('zzz', 'x'),
        DeleteActivity('zzz'),
        ResetActivityTimer('zzz', T + 1),
        UpdateActivityPosition('zzz', 5, 5),
        UpdateActivityImage('zzz', 'https://example.com/a.png'),
        ImageLoadFailed('zzz'),
    ):
        assert activities_reducer(state, action) is state


def test_rename_reset_move():
    state = _with_one()
    state = activities_reducer(state, RenameActivity('a', 'Text Sam'))
    state = activities_reducer(state, ResetActivityTimer('a', T + 50))
    state = activities_reducer(state, UpdateActivityPosition('a', 12, 34))
    (activity,) = state.activities
    assert activity.title == 'Text Sam'
    assert activity.last_reset_at == T + 50
    assert activity.created_at == T
    assert (activity.x, activity.y) == (12, 34)


def test_rename_to_blank_is_rejected():
    state = _with_one()
    assert activities_reducer(state, RenameActivity('a', '  ')) is state


def test_move_to_same_position_is_a_no_op():
    state = _with_one()
    assert activities_reducer(state, UpdateActivityPosition('a', 0, 0)) is state


def test_image_classification_and_failure_flag():
    state = _with_one()
    state = activities_reducer(state, UpdateActivityImage('a', 'https://example.com/a.png'))
    assert state.activities[0].image == RemoteImage('https://example.com/a.png')

    state = activities_reducer(state, ImageLoadFailed('a'))
    assert state.activities[0].image_failed is True
    assert activities_reducer(state, ImageLoadFailed('a')) is state

    state = activities_reducer(state, UpdateActivityImage('a', 'data:image/png;base64,AAAA'))
    assert state.activities[0].image == EmbeddedImage('data:image/png;base64,AAAA')
    assert state.activities[0].image_failed is False

    state = activities_reducer(state, UpdateActivityImage('a', None))
    assert state.activities[0].image is ABSENT


def test_delete_keeps_order_of_the_rest():
    state = EMPTY_STATE
    for i in range(3):
        state = activities_reducer(state, AddActivity(f'id{i}', 'c', f't{i}', T))
    state = activities_reducer(state, DeleteActivity('id1'))
    assert [a.id for a in state.activities] == ['id0', 'id2']
