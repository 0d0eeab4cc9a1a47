"""
Document validation against a compiled schema
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .errors import SchemaConstructionError, ValidationError
from .models import EnforceExtra, EnforceType, TimeFormat, ValidateOn
from .types import ObjectType

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)


class OptionsValidator:
    """Checks the enum-valued options of a model"""

    ENUMS = {
        "enforce_extra": EnforceExtra,
        "enforce_type": EnforceType,
        "time_format": TimeFormat,
        "validate": ValidateOn,
    }

    @classmethod
    def validate_and_raise(cls, model_name: str, options: Mapping[str, Any]):
        errors = []
        for key, enum in cls.ENUMS.items():
            value = options.get(key)
            allowed = {member.value for member in enum}
            if value not in allowed:
                errors.append(f"`{key}` must be one of {sorted(allowed)}, got {value!r}")

        if not isinstance(options.get("enforce_missing"), bool):
            errors.append("`enforce_missing` must be a boolean")

        if errors:
            raise SchemaConstructionError(
                f"Invalid options for model {model_name}: {', '.join(errors)}"
            )


class SchemaValidator:
    """Validates document data against an object schema"""

    @classmethod
    def validate_data(
        cls,
        schema: ObjectType,
        data: Dict[str, Any],
        options: Mapping[str, Any],
        *,
        exempt: Optional[List[str]] = None,
    ) -> ValidationResult:
        """
        Walk `data` against `schema`. With ``enforce_extra="remove"`` unknown
        keys are deleted from `data` in place.
        """
        errors: List[str] = []
        removed: List[str] = []
        cls._check_object(schema, data, "", options, set(exempt or ()), errors, removed)
        return ValidationResult(valid=not errors, errors=errors, removed=removed)

    @classmethod
    def _check_object(cls, schema, data, prefix, options, exempt, errors, removed):
        enforce_type = options.get("enforce_type", "loose")
        time_format = options.get("time_format", "native")
        enforce_extra = options.get("enforce_extra", "none")

        for key, field_type in schema.fields.items():
            path = f"{prefix}{key}"
            if key not in data:
                if options.get("enforce_missing") and path not in exempt:
                    errors.append(f"Value for [{path}] must be defined")
                continue
            value = data[key]
            field_type.check(value, path, enforce_type, errors, time_format)
            if isinstance(field_type, ObjectType) and isinstance(value, dict):
                cls._check_object(field_type, value, f"{path}.", options, exempt, errors, removed)

        if not schema.fields:
            # An object declared without fields accepts any key
            return

        extra = [key for key in data if key not in schema.fields and f"{prefix}{key}" not in exempt]
        if enforce_extra == "strict":
            for key in extra:
                errors.append(f"Extra field `{prefix}{key}` not allowed")
        elif enforce_extra == "remove":
            for key in extra:
                del data[key]
                removed.append(f"{prefix}{key}")

    @classmethod
    def validate_and_raise(cls, model_name, schema, data, options, *, exempt=None) -> ValidationResult:
        result = cls.validate_data(schema, data, options, exempt=exempt)
        if not result.valid:
            raise ValidationError(
                f"Document failed validation for model {model_name}: {'; '.join(result.errors)}",
                result.errors,
            )
        if result.removed:
            logger.debug(f"{model_name}: removed extra fields {result.removed}")
        return result
