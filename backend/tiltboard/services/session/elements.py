import logging
from typing import Any, Dict, List, Optional

from tiltboard.models import (
    CANVAS_HEIGHT, CANVAS_WIDTH, ELEMENT_KINDS, BoardElement, clamp, clamp_x, clamp_y, is_number, new_id,
)
from .errors import NotFound, ValidationFailed

DEFAULT_SIZE = 100
DEFAULT_COLOR = '#ffffff'

_GEOMETRY = {
    'x': clamp_x,
    'y': clamp_y,
    'width': lambda v: clamp(v, 0, CANVAS_WIDTH),
    'height': lambda v: clamp(v, 0, CANVAS_HEIGHT),
}
_UPDATABLE = ('kind', 'x', 'y', 'width', 'height', 'color', 'text')


def _kind_of(data: Dict[str, Any]):
    # Older clients send ``type``
    return data.get('kind', data.get('type'))


class ElementStore:
    """Freeform board objects, replicated to the whole room."""

    def __init__(self, registry, router, logger=None):
        self.registry = registry
        self.router = router
        self.logger = logger or logging.getLogger(__name__)

    def snapshot(self, room_id) -> List[Dict[str, Any]]:
        room = self.registry.get_room(room_id)
        return [element.to_dict() for element in room.elements.values()]

    def create(self, room_id, identity: str, attrs: Dict[str, Any]) -> BoardElement:
        room = self.registry.get_room(room_id)
        kind = _kind_of(attrs)
        if kind is None or attrs.get('x') is None or attrs.get('y') is None:
            raise ValidationFailed('kind, x and y are required', surface=True)
        if kind not in ELEMENT_KINDS:
            raise ValidationFailed(f'Unknown element kind: {kind}')
        if not (is_number(attrs['x']) and is_number(attrs['y'])):
            raise ValidationFailed('x and y must be numbers')

        width = attrs.get('width')
        height = attrs.get('height')
        now = self.registry.clock()
        element = BoardElement(
            id=new_id(),
            kind=kind,
            x=clamp_x(attrs['x']),
            y=clamp_y(attrs['y']),
            width=_GEOMETRY['width'](width) if is_number(width) and width else DEFAULT_SIZE,
            height=_GEOMETRY['height'](height) if is_number(height) and height else DEFAULT_SIZE,
            color=attrs.get('color') or DEFAULT_COLOR,
            text=str(attrs.get('text') or ''),
            created_by=identity,
            created_at=now,
        )
        room.elements[element.id] = element
        room.touch(now)
        self.logger.info(f"[element-create] room={room.id} element={element.id} kind={kind} by={identity}")
        self.router.to_room(room.id, 'element-created', element.to_dict())
        return element

    def update(self, room_id, element_id, fields: Dict[str, Any]) -> BoardElement:
        room = self.registry.get_room(room_id)
        element = room.elements.get(element_id) if isinstance(element_id, str) else None
        if element is None:
            raise NotFound('Element not found')

        changes: Dict[str, Any] = {}
        for name in _UPDATABLE:
            value = _kind_of(fields) if name == 'kind' else fields.get(name)
            if value is None:
                continue
            if name in _GEOMETRY:
                if not is_number(value):
                    raise ValidationFailed(f'{name} must be a number')
                value = _GEOMETRY[name](value)
            elif name == 'kind' and value not in ELEMENT_KINDS:
                raise ValidationFailed(f'Unknown element kind: {value}')
            elif name == 'text':
                value = str(value)
            changes[name] = value

        now = self.registry.clock()
        for name, value in changes.items():
            setattr(element, name, value)
        element.updated_at = now
        room.touch(now)
        self.router.to_room(room.id, 'element-updated', element.to_dict())
        return element

    def delete(self, room_id, element_id) -> Optional[BoardElement]:
        room = self.registry.get_room(room_id)
        element = room.elements.pop(element_id, None) if isinstance(element_id, str) else None
        if element is None:
            return None
        room.touch(self.registry.clock())
        self.logger.info(f"[element-delete] room={room.id} element={element_id}")
        self.router.to_room(room.id, 'element-deleted', {'id': element_id})
        return element
