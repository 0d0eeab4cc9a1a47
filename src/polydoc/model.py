"""
Models: schema-bound collections with hooks and secondary indexes
"""
from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from pymongo.errors import AutoReconnect
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from .document import Document
from .errors import DocumentNotFoundError, SchemaConstructionError, TableExistsError
from .json_safe import raw_times
from .query import Operator, Query
from .types import ObjectType, compile_schema, restore_times
from .utils import validate_table_name
from .validation import OptionsValidator

logger = logging.getLogger(__name__)

_DEFAULT_RETRY = retry(
    retry=retry_if_exception_type(AutoReconnect),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=6),
    stop=stop_after_attempt(3),
    reraise=True,
)

HOOK_EVENTS = ("save", "delete")


@dataclass
class IndexSpec:
    name: str
    keys: List[Tuple[str, int]]
    options: Dict[str, Any] = field(default_factory=dict)


def _field_ref(*path: str) -> str:
    """Reference to a (possibly nested) field, handed to index functions."""
    return ".".join(path)


class Model:
    """A named collection of documents sharing one schema"""

    def __init__(self, name: str, schema: ObjectType, options: Dict[str, Any], odm):
        self.name = name
        self.schema = schema
        self.options = options
        self.odm = odm
        self.pk: str = options.get("pk", "id")
        self.table_name: str = options.get("table", name)
        self.indexes: List[IndexSpec] = []

        self._hooks: Dict[str, Dict[str, List[Callable]]] = {
            "pre": {event: [] for event in HOOK_EVENTS},
            "post": {event: [] for event in HOOK_EVENTS},
        }
        self._doc_init_callbacks: List[Callable[[Document], None]] = []
        self._ready_task: Optional[asyncio.Future] = None

    @classmethod
    def new(cls, name: str, schema: Any, options: Dict[str, Any], odm) -> Model:
        """Validate the name, options and schema, then build the model."""
        validate_table_name(options.get("table", name))
        OptionsValidator.validate_and_raise(name, options)
        return cls(name, compile_schema(schema), options, odm)

    def __call__(self, data: Optional[Dict[str, Any]] = None, **fields: Any) -> Document:
        values = dict(data or {})
        values.update(fields)
        return Document(self, values)

    def __repr__(self) -> str:
        return f"<Model {self.name}>"

    # -------------------------
    # Hooks
    # -------------------------
    def pre(self, event: str, fn: Callable) -> None:
        self._add_hook("pre", event, fn)

    def post(self, event: str, fn: Callable) -> None:
        self._add_hook("post", event, fn)

    def _add_hook(self, phase: str, event: str, fn: Callable) -> None:
        if event not in HOOK_EVENTS:
            raise ValueError(f"Unknown hook event {event!r}. Must be one of {HOOK_EVENTS}")
        if not callable(fn):
            raise TypeError(f"Hook for {phase}({event!r}) must be callable")
        self._hooks[phase][event].append(fn)

    async def _run_hooks(self, phase: str, event: str, doc: Document) -> None:
        for fn in self._hooks[phase][event]:
            result = fn(doc)
            if inspect.isawaitable(result):
                await result

    def on_document_init(self, callback: Callable[[Document], None]) -> None:
        """Call `callback` with every document this model builds, in construction."""
        self._doc_init_callbacks.append(callback)

    def _document_initialized(self, doc: Document) -> None:
        for callback in self._doc_init_callbacks:
            callback(doc)

    # -------------------------
    # Indexes
    # -------------------------
    def ensure_index(self, name: str, fn: Optional[Callable] = None, **options: Any) -> IndexSpec:
        """
        Declare a secondary index.

        Without `fn` the index covers the field `name`. With `fn`, the
        function receives a field-reference callable and returns one
        reference or a list of them:

            model.ensure_index("path", lambda doc: [doc("parent"), doc("id")])
        """
        if fn is None:
            fields_ = [name]
        else:
            result = fn(_field_ref)
            fields_ = list(result) if isinstance(result, (list, tuple)) else [result]
            if not fields_ or not all(isinstance(f, str) for f in fields_):
                raise SchemaConstructionError(
                    f"Index function for `{name}` must return field references, got {result!r}"
                )

        keys = [("_id" if f == self.pk else f, 1) for f in fields_]
        spec = IndexSpec(name=name, keys=keys, options=options)
        self.indexes.append(spec)

        if self._ready_task is not None:
            logger.warning(f"Index `{name}` on {self.name} declared after ready(); it will not be created")
        return spec

    # -------------------------
    # Lifecycle
    # -------------------------
    def ready(self) -> asyncio.Future:
        """Create the collection and its indexes once; every call shares the result."""
        if self._ready_task is None:
            self._ready_task = asyncio.get_running_loop().create_task(self._prepare())
        return self._ready_task

    async def _prepare(self) -> None:
        await self.odm.db_ready()
        r = self.odm.r
        db = self.odm.config.db

        if self.options.get("init", True):
            try:
                await _DEFAULT_RETRY(r.table_create)(db, self.table_name)
                logger.info(f"Table `{self.table_name}` created")
            except TableExistsError:
                logger.debug(f"Table `{self.table_name}` already exists")

        for spec in self.indexes:
            if spec.keys == [("_id", 1)]:
                # The primary key is always indexed
                continue
            await _DEFAULT_RETRY(r.index_create)(db, self.table_name, spec.name, spec.keys, **spec.options)
            logger.info(f"Index `{spec.name}` ensured on {self.table_name}")

    @property
    def collection(self):
        return self.odm.r.table(self.odm.config.db, self.table_name)

    # -------------------------
    # Storage mapping
    # -------------------------
    def _to_db(self, doc: Document) -> Dict[str, Any]:
        data = dict(doc)
        if self.options.get("time_format") == "raw":
            data = restore_times(self.schema, data)
        if self.pk in data:
            data["_id"] = data.pop(self.pk)
        return data

    def _from_db(self, raw: Dict[str, Any]) -> Document:
        data = dict(raw)
        if "_id" in data:
            data[self.pk] = data.pop("_id")
        if self.options.get("time_format") == "raw":
            data = raw_times(data)
        return Document(self, data, from_db=True)

    # -------------------------
    # Reads
    # -------------------------
    async def get(self, pk: Any) -> Document:
        await self.ready()
        raw = await self.collection.find_one({"_id": pk})
        if raw is None:
            raise DocumentNotFoundError(f"{self.name}: no document with {self.pk}={pk!r}")
        return self._from_db(raw)

    def filter(self, **equals: Any) -> Query:
        query = Query(model=self)
        for key, value in equals.items():
            query.where(key, Operator.EQ, value)
        return query
