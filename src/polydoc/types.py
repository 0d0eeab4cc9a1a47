"""
Schema type system.

A schema is a dict mapping field names to field types. Field types can be
given explicitly (``type.string()``) or with plain Python values:

    {
        "id": str,
        "age": int,
        "tags": [str],
        "address": {"city": str},
        "created": datetime,
    }
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from .errors import SchemaConstructionError

JsonDict = Dict[str, Any]


class FieldType:
    """Base field type"""

    kind = "any"

    def accepts(self, value: Any) -> bool:
        return True

    def check(self, value: Any, path: str, enforce_type: str, errors: List[str], time_format: str = "native") -> None:
        if enforce_type == "none":
            return
        if value is None:
            if enforce_type == "strict":
                errors.append(f"Value for [{path}] must not be null")
            return
        if not self.accepts(value):
            errors.append(
                f"Value for [{path}] must be a {self.kind}, got {type(value).__name__}"
            )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"


class StringType(FieldType):
    kind = "string"

    def accepts(self, value: Any) -> bool:
        return isinstance(value, str)


class NumberType(FieldType):
    kind = "number"

    def accepts(self, value: Any) -> bool:
        return isinstance(value, (int, float)) and not isinstance(value, bool)


class BooleanType(FieldType):
    kind = "boolean"

    def accepts(self, value: Any) -> bool:
        return isinstance(value, bool)


class DateType(FieldType):
    kind = "date"

    def accepts(self, value: Any) -> bool:
        return isinstance(value, datetime)

    def check(self, value, path, enforce_type, errors, time_format="native"):
        # Raw models hand out dates as ISO strings, so take them back
        if time_format == "raw" and isinstance(value, str) and _parse_iso(value) is not None:
            return
        super().check(value, path, enforce_type, errors, time_format)


class AnyType(FieldType):
    kind = "any"


class ArrayType(FieldType):
    kind = "array"

    def __init__(self, of: Optional[FieldType] = None):
        self.of = of

    def accepts(self, value: Any) -> bool:
        return isinstance(value, list)

    def check(self, value, path, enforce_type, errors, time_format="native"):
        before = len(errors)
        super().check(value, path, enforce_type, errors, time_format)
        if len(errors) > before or self.of is None or not isinstance(value, list):
            return
        for i, item in enumerate(value):
            self.of.check(item, f"{path}[{i}]", enforce_type, errors, time_format)


class ObjectType(FieldType):
    kind = "object"

    def __init__(self, fields: Optional[Dict[str, FieldType]] = None):
        self.fields: Dict[str, FieldType] = dict(fields or {})

    def accepts(self, value: Any) -> bool:
        return isinstance(value, dict)


_PYTHON_TYPES = {
    str: StringType,
    int: NumberType,
    float: NumberType,
    bool: BooleanType,
    datetime: DateType,
}


def compile_field(spec: Any, path: str = "") -> FieldType:
    """Turn one schema entry into a FieldType"""
    if isinstance(spec, FieldType):
        if isinstance(spec, ObjectType):
            return ObjectType({k: compile_field(v, f"{path}.{k}" if path else k) for k, v in spec.fields.items()})
        return spec
    if isinstance(spec, type):
        if spec in _PYTHON_TYPES:
            return _PYTHON_TYPES[spec]()
        if spec is dict:
            return ObjectType()
        if spec is list:
            return ArrayType()
    if isinstance(spec, dict):
        return ObjectType({k: compile_field(v, f"{path}.{k}" if path else k) for k, v in spec.items()})
    if isinstance(spec, list):
        if len(spec) > 1:
            raise SchemaConstructionError(
                f"An array in the schema can only have one element, found {len(spec)} at [{path}]"
            )
        return ArrayType(compile_field(spec[0], f"{path}[0]") if spec else None)
    raise SchemaConstructionError(f"The value at [{path or '<root>'}] is not a valid schema type: {spec!r}")


def compile_schema(schema: Any) -> ObjectType:
    """Compile the top-level schema of a model"""
    if not isinstance(schema, (dict, ObjectType)):
        raise SchemaConstructionError(
            f"The schema must be a dict or an object type, got {type(schema).__name__}"
        )
    return compile_field(schema)  # type: ignore[return-value]


def _parse_iso(value: str) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def restore_times(field_type: FieldType, value: Any) -> Any:
    """
    Turn the ISO strings a raw-time model handed out back into datetimes,
    wherever `field_type` declares a date. Other values are left untouched.
    """
    if isinstance(field_type, DateType) and isinstance(value, str):
        parsed = _parse_iso(value)
        return value if parsed is None else parsed
    if isinstance(field_type, ObjectType) and isinstance(value, dict):
        return {
            k: restore_times(field_type.fields[k], v) if k in field_type.fields else v
            for k, v in value.items()
        }
    if isinstance(field_type, ArrayType) and field_type.of is not None and isinstance(value, list):
        return [restore_times(field_type.of, v) for v in value]
    return value


# Factories exposed as ``polydoc.type.<name>()``. They shadow builtins in
# this module, so nothing below this point may use `object` or `any`.

def string() -> StringType:
    return StringType()


def number() -> NumberType:
    return NumberType()


def boolean() -> BooleanType:
    return BooleanType()


def date() -> DateType:
    return DateType()


def array(of: Any = None) -> ArrayType:
    return ArrayType(compile_field(of) if of is not None else None)


def object(schema: Optional[JsonDict] = None) -> ObjectType:  # noqa: A001
    return compile_field(schema or {})  # type: ignore[return-value]


def any() -> AnyType:  # noqa: A001
    return AnyType()
