# src/polydoc/__init__.py
"""
PolyDoc - Object-document mapper for MongoDB
Model registry, class-based models, hooks, secondary indexes
"""

__version__ = "0.3.0"

from . import types as type  # noqa: A001
from .odm import PolyDoc, create_odm
from .models import OdmConfig, EnforceExtra, EnforceType, TimeFormat, ValidateOn
from .model import Model
from .document import Document
from .query import Query, Operator
from .connection import Connection
from .errors import (
    PolyDocError,
    DuplicateModelError,
    ModelNotRegisteredError,
    DatabaseBootstrapError,
    DatabaseExistsError,
    TableExistsError,
    SchemaConstructionError,
    ValidationError,
    DocumentNotFoundError,
    ConnectionError,
)

__all__ = [
    # Facade
    "create_odm",
    "PolyDoc",
    "type",
    # Config
    "OdmConfig",
    "EnforceExtra",
    "EnforceType",
    "TimeFormat",
    "ValidateOn",
    # Models
    "Model",
    "Document",
    "Connection",
    # Query
    "Query",
    "Operator",
    # Errors
    "PolyDocError",
    "DuplicateModelError",
    "ModelNotRegisteredError",
    "DatabaseBootstrapError",
    "DatabaseExistsError",
    "TableExistsError",
    "SchemaConstructionError",
    "ValidationError",
    "DocumentNotFoundError",
    "ConnectionError",
]
