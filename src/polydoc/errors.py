# src/polydoc/errors.py
"""
Structured exceptions for the document mapper
"""
from __future__ import annotations


class PolyDocError(Exception):
    """Base exception for polydoc."""

    pass


class DuplicateModelError(PolyDocError):
    """Raised when a model name is already taken in the registry."""

    def __init__(self, name: str):
        super().__init__(f"Cannot redefine a Model: '{name}' is already registered")
        self.name = name


class ModelNotRegisteredError(PolyDocError):
    """Raised when a model has not been registered in the registry."""

    pass


class DatabaseBootstrapError(PolyDocError):
    """Creating the target database failed for a reason other than existence."""

    pass


class DatabaseExistsError(PolyDocError):
    """The database already exists"""

    def __init__(self, name: str):
        super().__init__(f"Database `{name}` already exists")
        self.name = name


class TableExistsError(PolyDocError):
    """The collection backing a model already exists"""

    def __init__(self, name: str):
        super().__init__(f"Table `{name}` already exists")
        self.name = name


class SchemaConstructionError(PolyDocError):
    """Raised when a model schema or its options are malformed."""

    pass


class ValidationError(PolyDocError):
    """Document validation failed"""

    def __init__(self, message: str, errors=None):
        super().__init__(message)
        self.errors = list(errors or [])


class DocumentNotFoundError(PolyDocError):
    """No document matches the requested primary key"""

    pass


class ConnectionError(PolyDocError):
    """Connection to the database server failed"""

    pass
