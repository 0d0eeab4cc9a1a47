"""
Utility functions for option handling, name validation and logging
"""

import copy
import re
import logging
from typing import Any, Dict, Mapping, Optional
from .errors import SchemaConstructionError


def validate_table_name(table: str) -> str:
    """
    Validate a collection name before handing it to the server.
    Only allows alphanumeric, underscore, dot and hyphen
    """
    if not isinstance(table, str) or not re.match(r'^[a-zA-Z0-9_.-]+$', table):
        raise SchemaConstructionError(
            f"Invalid table name: {table!r}. Only alphanumeric, underscore, dot and hyphen allowed."
        )
    return table


def merge_options(defaults: Mapping[str, Any], overrides: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """
    Layer per-model overrides on top of the global defaults.

    The defaults are deep-copied since the model may mutate its options.
    Each override key replaces the default value wholesale; unknown keys
    are carried through.
    """
    merged = copy.deepcopy(dict(defaults))
    for key, value in (overrides or {}).items():
        merged[key] = value
    return merged


def setup_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Setup logger with consistent format"""
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Clear existing handlers to avoid duplication when several facades are built
    if logger.hasHandlers():
        logger.handlers.clear()

    handler = logging.StreamHandler()
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger
