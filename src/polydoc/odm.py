from __future__ import annotations

import asyncio
from typing import Any, Dict, Mapping, Optional, Union

from . import errors as Errors
from . import types as schema_types
from .connection import Connection
from .decorators import ClassAdapter
from .errors import DatabaseBootstrapError, DatabaseExistsError, DuplicateModelError
from .model import Model
from .models import OdmConfig, normalize_option_keys
from .query import Query
from .registry import ModelRegistry
from .utils import merge_options, setup_logger


class PolyDoc:
    """
    Entry point of the mapper: configuration, model registry and the
    database readiness gate.

    Building a PolyDoc performs no I/O. Await `db_ready()` (or `open()`)
    before the first query.

    Recognised configuration keys:
      - `db` target database, default "test"
      - `uri` MongoDB connection string
      - `max`, `buffer`, `timeout_error`, `timeout_gb` connection pool tuning
      - `enforce_missing` (bool), default False
      - `enforce_extra` ("strict"|"remove"|"none"), default "none"
      - `enforce_type` ("strict"|"loose"|"none"), default "loose"
      - `time_format` ("raw"|"native"), default "native"
      - `validate` ("oncreate"|"onsave"), default "onsave"
      - `r` an existing connection handle to reuse
    """

    type = schema_types
    Query = Query
    Errors = Errors

    def __init__(
        self,
        config: Optional[Union[OdmConfig, Mapping[str, Any]]] = None,
        *,
        r: Optional[Any] = None,
        **overrides: Any,
    ):
        self.logger = setup_logger(__name__)

        if isinstance(config, OdmConfig):
            if overrides:
                config = OdmConfig.from_mapping(vars(config), **overrides)
        else:
            mapping = dict(config or {})
            r = r if r is not None else mapping.pop("r", None)
            config = OdmConfig.from_mapping(mapping, **overrides)
        self.config: OdmConfig = config

        # Options passed to each model we create
        self._options: Dict[str, Any] = config.model_defaults()

        self.r = r if r is not None else Connection(config)
        self.models = ModelRegistry()
        self._adapter = ClassAdapter(self)
        self._db_ready_task: Optional[asyncio.Future] = None

    # -------------------------
    # Database readiness
    # -------------------------
    def db_ready(self) -> asyncio.Future:
        """
        Ensure the database exists. The first call starts the work; every
        call returns that same awaitable.
        """
        if self._db_ready_task is None:
            self._db_ready_task = asyncio.get_running_loop().create_task(self._create_database())
        return self._db_ready_task

    async def _create_database(self) -> None:
        db = self.config.db
        try:
            await self.r.db_create(db)
            self.logger.info(f"Database `{db}` ready")
        except DatabaseExistsError:
            # Creation is not atomic: a concurrent process may have created
            # the database between the existence check and the create.
            self.logger.debug(f"Database `{db}` already exists")
        except Exception as exc:
            self.logger.error(f"Could not create database `{db}`: {exc}")
            raise DatabaseBootstrapError(f"Could not create database `{db}`: {exc}") from exc

    async def open(self) -> PolyDoc:
        """Create the database, then the collections and indexes of every model."""
        await self.db_ready()
        models = self.models.models()
        if models:
            await asyncio.gather(*(model.ready() for model in models))
        return self

    async def close(self) -> None:
        close = getattr(self.r, "close", None)
        if close is not None:
            await close()

    # -------------------------
    # Models
    # -------------------------
    def get_options(self) -> Dict[str, Any]:
        """The global model options. Returned as-is; do not mutate."""
        return self._options

    def create_model(self, name: str, schema: Any, options: Optional[Mapping[str, Any]] = None) -> Model:
        """
        Create and register a model.

        `options` override the global options for this model only, and may
        also set `table` (collection name), `pk` (primary key field,
        default "id") and `init` (create the collection, default True).
        """
        full_options = merge_options(self._options, normalize_option_keys(options))

        # Two models cannot share the same name
        if name in self.models:
            raise DuplicateModelError(name)

        model = Model.new(name, schema, full_options, self)

        self.models.register(name, model)
        self.logger.info(f"Model `{name}` registered")
        return model

    def create_model_from_class(self, cls_or_name, name: Optional[str] = None):
        return self._adapter.create_model_from_class(cls_or_name, name)

    def adapt_class(self, cls: type, name: Optional[str] = None) -> Model:
        return self._adapter.adapt_class(cls, name)

    def adapt_named_class(self, name: str):
        return self._adapter.adapt_named_class(name)

    def _clean(self) -> None:
        """Forget every model. Speeds up tests; not for other use."""
        self.models.clear()


def create_odm(config: Optional[Union[OdmConfig, Mapping[str, Any]]] = None, **kwargs: Any) -> PolyDoc:
    return PolyDoc(config, **kwargs)
