"""Normalize validation-error responses into a per-field recipe error tree.

A failed recipe submission comes back as arbitrarily shaped JSON, e.g.::

    {
        "title": ["This field is required."],
        "ingredients": [{}, {"quantity": ["Must be positive."]}],
        "non_field_errors": ["Recipe invalid"],
    }

``apply_error_details`` walks that payload and files each message under the
general bucket, a named field, or a field of a specific ingredient or step
row, so the form can render it next to the input it belongs to.
"""

import copy
import logging
from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Literal

logger = logging.getLogger(__name__)

ContextType = Literal["ingredient", "step"]

# Keys that carry messages for the current level rather than a field name
GENERAL_KEYS = frozenset({"non_field_errors", "detail"})

GENERAL_FIELD = "general"


@dataclass
class RecipeErrors:
    """Error tree for one recipe submission attempt."""

    general: list[str] = field(default_factory=list)
    fields: dict[str, list[str]] = field(default_factory=dict)
    ingredients: list[dict[str, list[str]]] = field(default_factory=list)
    steps: list[dict[str, list[str]]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ErrorContext:
    """Marks messages as belonging to one ingredient or step row."""

    type: ContextType
    index: int = 0


class PayloadKind(Enum):
    EMPTY = "empty"
    SCALAR = "scalar"
    LIST = "list"
    KEYED = "keyed"
    OTHER = "other"


def _is_literal(value: Any) -> bool:
    # bool is an int subclass but is not a message
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)


def classify_payload(payload: Any) -> PayloadKind:
    """Classify a decoded JSON value by shape."""
    if payload is None:
        return PayloadKind.EMPTY
    if _is_literal(payload):
        return PayloadKind.SCALAR
    if isinstance(payload, (list, tuple)):
        return PayloadKind.LIST
    if isinstance(payload, Mapping):
        return PayloadKind.KEYED
    return PayloadKind.OTHER


def stringify_message(value: Any) -> str:
    """
    Render a literal the way JSON would print it.

    Examples:
        1.0 -> "1"
        1.5 -> "1.5"
        True -> "true"
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return str(value)


_EXHAUSTED = object()


def normalize_messages(value: Any) -> list[str]:
    """
    Flatten a message source into a list of non-empty strings.

    Strings and numbers become one trimmed message, lists are flattened
    recursively, anything else contributes nothing.

    Examples:
        "  required " -> ["required"]
        ["a", ["b", ""], None, {"x": 1}] -> ["a", "b"]
        42 -> ["42"]
    """
    messages: list[str] = []
    # Explicit stack of iterators so deeply nested lists cannot hit the recursion limit
    stack = [iter((value,))]

    while stack:
        item = next(stack[-1], _EXHAUSTED)
        if item is _EXHAUSTED:
            stack.pop()
            continue

        kind = classify_payload(item)
        if kind is PayloadKind.SCALAR:
            message = stringify_message(item).strip()
            if message:
                messages.append(message)
        elif kind is PayloadKind.LIST:
            stack.append(iter(item))

    return messages


def create_error_state(ingredient_count: int = 0, step_count: int = 0) -> RecipeErrors:
    """Create an empty error tree sized to the form's ingredient and step rows."""
    return RecipeErrors(
        ingredients=[{} for _ in range(ingredient_count)],
        steps=[{} for _ in range(step_count)],
    )


def clone_error_state(errors: RecipeErrors | None) -> RecipeErrors:
    """Deep-copy an error tree; the copy shares no lists or dicts with the source."""
    if errors is None:
        return RecipeErrors()
    return copy.deepcopy(errors)


def _bucket(container: dict[str, list[str]], key: str) -> list[str]:
    return container.setdefault(key, [])


def _indexed_entry(collection: list[dict[str, list[str]]], index: int) -> dict[str, list[str]]:
    while len(collection) <= index:
        collection.append({})
    return collection[index]


def add_field_error(errors: RecipeErrors, field_name: str, messages: Any) -> None:
    """Append messages to a top-level field."""
    normalized = normalize_messages(messages)
    if not normalized:
        return
    _bucket(errors.fields, field_name).extend(normalized)


def add_ingredient_error(errors: RecipeErrors, index: int, field_name: str | None, messages: Any) -> None:
    """Append messages to a field of one ingredient row, growing the row list if needed."""
    normalized = normalize_messages(messages)
    if not normalized:
        return
    entry = _indexed_entry(errors.ingredients, index)
    _bucket(entry, field_name or GENERAL_FIELD).extend(normalized)


def add_step_error(errors: RecipeErrors, index: int, field_name: str | None, messages: Any) -> None:
    """Append messages to a field of one step row, growing the row list if needed."""
    normalized = normalize_messages(messages)
    if not normalized:
        return
    entry = _indexed_entry(errors.steps, index)
    _bucket(entry, field_name or GENERAL_FIELD).extend(normalized)


def _add_context_error(errors: RecipeErrors, context: ErrorContext, field_name: str, messages: Any) -> None:
    if context.type == "ingredient":
        add_ingredient_error(errors, context.index, field_name, messages)
    else:
        add_step_error(errors, context.index, field_name, messages)


def add_general_error(errors: RecipeErrors, messages: Any, context: ErrorContext | None = None) -> None:
    """
    Append general messages.

    With a context, the messages go to the "general" field of that
    ingredient or step row instead of the form-level list.
    """
    normalized = normalize_messages(messages)
    if not normalized:
        return

    if context is not None:
        _add_context_error(errors, context, GENERAL_FIELD, normalized)
        return

    errors.general.extend(normalized)


# A unit of pending work: a function called as fn(errors, *args). Handlers
# return the follow-up tasks for nested payloads, in the order to run them.
Task = tuple[Callable[..., Any], tuple]


def _visit(errors: RecipeErrors, payload: Any, context: ErrorContext | None) -> "list[Task] | None":
    return _HANDLERS[classify_payload(payload)](errors, payload, context)


def _apply_scalar(errors: RecipeErrors, payload: Any, context: ErrorContext | None) -> None:
    add_general_error(errors, [stringify_message(payload)], context)


def _apply_list(errors: RecipeErrors, payload: Any, context: ErrorContext | None) -> list[Task]:
    literals = [stringify_message(item) for item in payload if _is_literal(item)]
    if literals:
        add_general_error(errors, literals, context)

    return [
        (_visit, (item, context))
        for item in payload
        if classify_payload(item) is PayloadKind.KEYED
    ]


def _collection_tasks(items: list[Any], context_type: ContextType) -> list[Task]:
    return [
        (_visit, (item, ErrorContext(type=context_type, index=index)))
        for index, item in enumerate(items)
    ]


def _apply_keyed(errors: RecipeErrors, payload: Mapping, context: ErrorContext | None) -> list[Task]:
    tasks: list[Task] = []
    for key, value in payload.items():
        key = str(key)
        value_kind = classify_payload(value)

        if key in GENERAL_KEYS:
            tasks.append((_visit, (value, context)))
        elif context is not None:
            # Fields inside an ingredient or step row are terminal
            tasks.append((_add_context_error, (context, key, value)))
        elif key == "ingredients" and value_kind is PayloadKind.LIST:
            tasks.extend(_collection_tasks(value, "ingredient"))
        elif key == "steps" and value_kind is PayloadKind.LIST:
            tasks.extend(_collection_tasks(value, "step"))
        elif value_kind is PayloadKind.KEYED:
            tasks.append((_visit, (value, context)))
        else:
            tasks.append((add_field_error, (key, value)))
    return tasks


def _apply_other(errors: RecipeErrors, payload: Any, context: ErrorContext | None) -> None:
    if isinstance(payload, bool):
        add_general_error(errors, [stringify_message(payload)], context)
        return
    logger.debug("Dropping unrecognized error payload of type %s", type(payload).__name__)


def _apply_nothing(errors: RecipeErrors, payload: Any, context: ErrorContext | None) -> None:
    pass


_HANDLERS = {
    PayloadKind.EMPTY: _apply_nothing,
    PayloadKind.SCALAR: _apply_scalar,
    PayloadKind.LIST: _apply_list,
    PayloadKind.KEYED: _apply_keyed,
    PayloadKind.OTHER: _apply_other,
}


def apply_error_details(errors: RecipeErrors, payload: Any, context: ErrorContext | None = None) -> None:
    """
    Merge a validation-error payload into an error tree.

    Routing rules:
        - "non_field_errors" and "detail" hold messages for the current level
        - "ingredients" / "steps" lists map positionally onto row errors
        - any key inside a row becomes a field of that row
        - nested objects are flattened into the current level
        - other keys become top-level field errors
        - bare strings, numbers and their lists are general messages

    Never raises; shapes it does not recognize are dropped. The payload is
    walked depth-first with an explicit stack, so nesting depth is bounded
    only by memory and messages keep their document order.

    Args:
        errors: Error tree to mutate
        payload: Decoded JSON body of a failed validation response
        context: Row the payload belongs to, if any
    """
    pending: list[Task] = [(_visit, (payload, context))]

    while pending:
        fn, args = pending.pop()
        follow_up = fn(errors, *args)
        if follow_up:
            pending.extend(reversed(follow_up))


def has_errors(errors: RecipeErrors | None) -> bool:
    """Check if an error tree holds any message."""
    if errors is None:
        return False

    if errors.general:
        return True

    if any(messages for messages in errors.fields.values()):
        return True

    for entry in (*errors.ingredients, *errors.steps):
        if entry and any(messages for messages in entry.values()):
            return True

    return False
