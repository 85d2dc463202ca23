"""
Indexed sub-collection operations.

Shared by special ceremonies, upcoming events and the photo gallery.
Every operation returns a new list; the input list is never mutated, so
a rejected operation leaves the temple exactly as it was.
"""

from typing import Any, List, Optional, Sequence, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from app.exceptions import InvalidInput, NotFound

T = TypeVar("T")


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "item"
    return f"Invalid {location}: {first.get('msg', 'invalid value')}"


def validate_item(item: Any, schema: Type[BaseModel]) -> dict:
    """Validate a raw item against its schema and return the stored form."""
    if isinstance(item, schema):
        model = item
    else:
        try:
            model = schema.model_validate(item)
        except ValidationError as e:
            raise InvalidInput(_describe(e)) from e
    if hasattr(model, "to_item"):
        return model.to_item()
    return model.model_dump(by_alias=True, mode="json")


def append(collection: Optional[Sequence[T]], item: Any, schema: Optional[Type[BaseModel]] = None) -> List[Any]:
    """Validate `item` (when a schema is given) and append it at the end."""
    stored = validate_item(item, schema) if schema is not None else item
    return [*(collection or []), stored]


def extend(collection: Optional[Sequence[T]], items: Sequence[T]) -> List[T]:
    return [*(collection or []), *items]


def remove_at(collection: Optional[Sequence[T]], index: int) -> Tuple[List[T], T]:
    """
    Remove the element at `index`.

    Indices outside [0, len) are rejected rather than clamped.
    """
    items = list(collection or [])
    if not isinstance(index, int) or isinstance(index, bool) or index < 0 or index >= len(items):
        raise InvalidInput(
            f"Index {index} is out of range for a collection of {len(items)} item(s).",
            field="index",
        )
    removed = items.pop(index)
    return items, removed


def remove_by_value(
    collection: Optional[Sequence[T]],
    value: Any,
    key: Optional[str] = None,
    not_found_message: str = "Item not found in collection.",
) -> Tuple[List[T], int]:
    """
    Remove the first element equal to `value` (or whose `key` equals it).

    Returns the new list and the index the element occupied.
    """
    items = list(collection or [])
    for index, element in enumerate(items):
        candidate = element.get(key) if key is not None and isinstance(element, dict) else element
        if candidate == value:
            del items[index]
            return items, index
    raise NotFound(not_found_message)
