from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any, Dict, Optional

from .validation import SchemaValidator

if TYPE_CHECKING:
    from .model import Model


class Document(dict):
    """
    One document of a model.

    Field values are stored as dict items and can also be read as
    attributes. Attributes assigned on the instance (bound methods copied
    from a model class, for instance) live outside of the stored data.
    """

    def __init__(self, model: Model, data: Optional[Dict[str, Any]] = None, *, from_db: bool = False):
        super().__init__(data or {})
        self._model = model
        self._saved = from_db

        model._document_initialized(self)

        if not from_db and model.options.get("validate") == "oncreate":
            self.validate()

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self[name]
        except KeyError:
            raise AttributeError(
                f"'{self._model.name}' document has no field or attribute '{name}'"
            ) from None

    def get_model(self) -> Model:
        return self._model

    def is_saved(self) -> bool:
        return self._saved

    def validate(self):
        """Check the document against its model schema, raising ValidationError"""
        model = self._model
        return SchemaValidator.validate_and_raise(
            model.name, model.schema, self, model.options, exempt=[model.pk]
        )

    async def save(self) -> Document:
        model = self._model
        await model.ready()

        await model._run_hooks("pre", "save", self)
        self.validate()

        if self.get(model.pk) is None:
            self[model.pk] = str(uuid.uuid4())

        await model.collection.replace_one(
            {"_id": self[model.pk]}, model._to_db(self), upsert=True
        )
        self._saved = True

        await model._run_hooks("post", "save", self)
        return self

    async def delete(self) -> Document:
        model = self._model
        await model.ready()

        await model._run_hooks("pre", "delete", self)
        if self.get(model.pk) is not None:
            await model.collection.delete_one({"_id": self[model.pk]})
        self._saved = False

        await model._run_hooks("post", "delete", self)
        return self

    def __repr__(self) -> str:
        return f"<{self._model.name} {dict.__repr__(self)}>"
