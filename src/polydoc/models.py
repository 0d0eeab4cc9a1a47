"""
Configuration records and option enums
"""

import os
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv


class EnforceExtra(Enum):
    """What to do with fields that are not in the schema"""
    STRICT = "strict"
    REMOVE = "remove"
    NONE = "none"


class EnforceType(Enum):
    """How strictly field values must match their declared type"""
    STRICT = "strict"
    LOOSE = "loose"
    NONE = "none"


class TimeFormat(Enum):
    """Format of dates returned by the database"""
    RAW = "raw"
    NATIVE = "native"


class ValidateOn(Enum):
    """When documents are validated"""
    ONCREATE = "oncreate"
    ONSAVE = "onsave"


# Option names every model inherits from the facade configuration.
MODEL_OPTION_KEYS = (
    "enforce_missing",
    "enforce_extra",
    "enforce_type",
    "time_format",
    "validate",
)

OPTION_ALIASES = {
    "timeFormat": "time_format",
    "timeoutError": "timeout_error",
    "timeoutGb": "timeout_gb",
}


def normalize_option_keys(options: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Rewrite camelCase option names to their snake_case form."""
    return {OPTION_ALIASES.get(key, key): value for key, value in (options or {}).items()}


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class OdmConfig:
    """Facade configuration, immutable once built"""
    db: str = "test"
    uri: str = "mongodb://localhost:27017"
    # Connection pool tuning, forwarded to the connection layer
    max: int = 1000
    buffer: int = 50
    timeout_error: int = 1000
    timeout_gb: int = 60 * 60 * 1000
    # Defaults for every model
    enforce_missing: bool = False
    enforce_extra: str = EnforceExtra.NONE.value
    enforce_type: str = EnforceType.LOOSE.value
    time_format: str = TimeFormat.NATIVE.value
    validate: str = ValidateOn.ONSAVE.value

    @classmethod
    def from_mapping(cls, mapping: Optional[Mapping[str, Any]] = None, **overrides: Any) -> "OdmConfig":
        """Build a config from a dict; `None` values fall back to the defaults."""
        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}
        for source in (mapping or {}, overrides):
            for key, value in source.items():
                key = OPTION_ALIASES.get(key, key)
                if key in known and value is not None:
                    values[key] = value
        return cls(**values)

    @classmethod
    def from_env(cls, prefix: str = "POLYDOC_", **overrides: Any) -> "OdmConfig":
        """Build a config from environment variables (and a `.env` file)."""
        load_dotenv()

        values: Dict[str, Any] = {}
        for f in fields(cls):
            raw = os.getenv(f"{prefix}{f.name.upper()}")
            if raw is None:
                continue
            if f.type in ("int", int):
                values[f.name] = int(raw)
            elif f.type in ("bool", bool):
                values[f.name] = _env_bool(raw)
            else:
                values[f.name] = raw

        if "uri" not in values and os.getenv("MONGODB_URI"):
            values["uri"] = os.getenv("MONGODB_URI")

        return cls.from_mapping(values, **overrides)

    def model_defaults(self) -> Dict[str, Any]:
        return {key: getattr(self, key) for key in MODEL_OPTION_KEYS}
