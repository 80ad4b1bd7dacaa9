import pytest

from tiltboard.services.session import NotFound, ValidationFailed


def test_create_clamps_instead_of_failing(board):
    room = board.registry.create_room()
    element = board.elements.create(room.id, 'sid-1', {'kind': 'rect', 'x': 5000, 'y': -3, 'width': 9999})

    assert element.x == 1920
    assert element.y == 0
    assert element.width == 1920
    assert element.height == 100
    assert element.color == '#ffffff'
    assert element.text == ''
    assert element.created_by == 'sid-1'
    assert room.elements[element.id] is element
    assert board.router.events('element-created', room.id) == [element.to_dict()]


def test_create_accepts_type_alias(board):
    room = board.registry.create_room()
    element = board.elements.create(room.id, 'sid-1', {'type': 'text', 'x': 1, 'y': 2, 'text': 'hello'})
    assert element.kind == 'text'
    assert element.text == 'hello'


@pytest.mark.parametrize('attrs, surfaced', [
    ({'x': 1, 'y': 2}, True),
    ({'kind': 'rect', 'y': 2}, True),
    ({'kind': 'rect', 'x': 'a', 'y': 2}, False),
    ({'kind': 'hexagon', 'x': 1, 'y': 2}, False),
])
def test_create_rejections_do_not_broadcast(board, attrs, surfaced):
    room = board.registry.create_room()
    with pytest.raises(ValidationFailed) as info:
        board.elements.create(room.id, 'sid-1', attrs)
    assert info.value.surface is surfaced
    assert room.elements == {}
    assert board.router.sent == []


def test_update_merges_and_reclamps(board):
    room = board.registry.create_room()
    element = board.elements.create(room.id, 'sid-1', {'kind': 'circle', 'x': 100, 'y': 200, 'color': '#000'})
    board.clock.advance(5)

    updated = board.elements.update(room.id, element.id, {'y': 4000, 'color': '#f00', 'createdBy': 'intruder'})
    assert updated.x == 100
    assert updated.y == 1080
    assert updated.color == '#f00'
    assert updated.created_by == 'sid-1'
    assert updated.updated_at == board.clock()
    assert board.router.events('element-updated', room.id)[-1]['updatedAt'] == board.clock()


def test_update_unknown_element(board):
    room = board.registry.create_room()
    with pytest.raises(NotFound):
        board.elements.update(room.id, 'missing', {'x': 1})
    assert board.router.sent == []


def test_update_rejects_bad_geometry_atomically(board):
    room = board.registry.create_room()
    element = board.elements.create(room.id, 'sid-1', {'kind': 'rect', 'x': 10, 'y': 10})
    board.router.clear()
    with pytest.raises(ValidationFailed):
        board.elements.update(room.id, element.id, {'color': '#123', 'x': 'far'})
    assert element.color == '#ffffff'
    assert board.router.sent == []


def test_delete_is_idempotent(board):
    room = board.registry.create_room()
    element = board.elements.create(room.id, 'sid-1', {'kind': 'area', 'x': 10, 'y': 10})
    board.router.clear()

    assert board.elements.delete(room.id, element.id) is element
    assert board.elements.delete(room.id, element.id) is None
    assert board.router.events('element-deleted') == [{'id': element.id}]


def test_element_edit_counts_as_activity(board):
    room = board.registry.create_room()
    board.clock.advance(100)
    board.elements.create(room.id, 'sid-1', {'kind': 'line', 'x': 1, 'y': 1})
    assert room.last_activity_at == board.clock()
