# src/polydoc/connection.py
import logging
from typing import Any, List, Optional, Tuple

from pymongo import AsyncMongoClient
from pymongo.errors import CollectionInvalid, PyMongoError

from .errors import ConnectionError, DatabaseExistsError, TableExistsError
from .models import OdmConfig

logger = logging.getLogger(__name__)

# Collection created to materialise a new database; MongoDB only persists
# a database once it holds a collection.
MARKER_COLLECTION = "_polydoc"


class Connection:
    """Thin async handle over a MongoDB deployment"""

    def __init__(self, config: Optional[OdmConfig] = None, client: Optional[AsyncMongoClient] = None):
        self.config = config or OdmConfig()
        self._client = client

    @property
    def client(self) -> AsyncMongoClient:
        if self._client is None:
            try:
                # The async client connects on first operation, not here
                self._client = AsyncMongoClient(
                    self.config.uri,
                    maxPoolSize=self.config.max,
                    minPoolSize=self.config.buffer,
                    serverSelectionTimeoutMS=self.config.timeout_error,
                    maxIdleTimeMS=self.config.timeout_gb,
                )
            except PyMongoError as e:
                raise ConnectionError(f"MongoDB init failed: {str(e)}") from e
        return self._client

    def db(self, name: str):
        return self.client[name]

    def table(self, db: str, table: str):
        return self.client[db][table]

    async def db_list(self) -> List[str]:
        return await self.client.list_database_names()

    async def db_create(self, name: str) -> None:
        """Create a database, raising DatabaseExistsError if it is already there."""
        if name in await self.db_list():
            raise DatabaseExistsError(name)
        try:
            await self.client[name].create_collection(MARKER_COLLECTION)
        except CollectionInvalid:
            # Another process created it between the listing and now
            raise DatabaseExistsError(name) from None
        logger.info(f"Database `{name}` created")

    async def table_create(self, db: str, table: str) -> None:
        try:
            await self.client[db].create_collection(table)
        except CollectionInvalid:
            raise TableExistsError(table) from None

    async def index_create(self, db: str, table: str, name: str, keys: List[Tuple[str, int]], **options: Any) -> str:
        return await self.client[db][table].create_index(keys, name=name, **options)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
