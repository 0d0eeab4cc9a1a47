"""
Shared fixtures: an in-memory stand-in for the MongoDB connection handle.
"""
import pytest

from polydoc import PolyDoc
from polydoc.errors import DatabaseExistsError, TableExistsError


_COMPARATORS = {
    "$eq": lambda a, b: a == b,
    "$ne": lambda a, b: a != b,
    "$gt": lambda a, b: a is not None and a > b,
    "$gte": lambda a, b: a is not None and a >= b,
    "$lt": lambda a, b: a is not None and a < b,
    "$lte": lambda a, b: a is not None and a <= b,
    "$in": lambda a, b: a in b,
    "$nin": lambda a, b: a not in b,
}


def _matches(doc, filter_doc):
    for key, condition in filter_doc.items():
        value = doc.get(key)
        if isinstance(condition, dict):
            for op, operand in condition.items():
                if not _COMPARATORS[op](value, operand):
                    return False
        elif value != condition:
            return False
    return True


class FakeCursor:
    def __init__(self, docs):
        self._docs = list(docs)

    def sort(self, keys):
        for key, direction in reversed(keys):
            self._docs.sort(key=lambda d: d.get(key), reverse=direction < 0)
        return self

    def skip(self, count):
        self._docs = self._docs[count:]
        return self

    def limit(self, count):
        self._docs = self._docs[:count]
        return self

    def __aiter__(self):
        self._iter = iter(self._docs)
        return self

    async def __anext__(self):
        try:
            return dict(next(self._iter))
        except StopIteration:
            raise StopAsyncIteration


class FakeCollection:
    def __init__(self):
        self.docs = {}

    async def replace_one(self, filter_doc, replacement, upsert=False):
        self.docs[filter_doc["_id"]] = dict(replacement)

    async def find_one(self, filter_doc):
        for doc in self.docs.values():
            if _matches(doc, filter_doc):
                return dict(doc)
        return None

    async def delete_one(self, filter_doc):
        self.docs.pop(filter_doc["_id"], None)

    async def count_documents(self, filter_doc):
        return sum(1 for doc in self.docs.values() if _matches(doc, filter_doc))

    def find(self, filter_doc):
        return FakeCursor(doc for doc in self.docs.values() if _matches(doc, filter_doc))


class FakeConnection:
    """Records every call the mapper makes on its connection handle."""

    def __init__(self, databases=(), db_error=None):
        self.databases = set(databases)
        self.db_error = db_error
        self.db_create_calls = []
        self.tables = {}
        self.indexes = []
        self.closed = False

    async def db_create(self, name):
        self.db_create_calls.append(name)
        if self.db_error is not None:
            raise self.db_error
        if name in self.databases:
            raise DatabaseExistsError(name)
        self.databases.add(name)

    async def table_create(self, db, table):
        if (db, table) in self.tables:
            raise TableExistsError(table)
        self.tables[(db, table)] = FakeCollection()

    async def index_create(self, db, table, name, keys, **options):
        self.indexes.append((table, name, list(keys), options))
        return name

    def table(self, db, table):
        return self.tables.setdefault((db, table), FakeCollection())

    async def close(self):
        self.closed = True


@pytest.fixture
def connection():
    return FakeConnection()


@pytest.fixture
def odm(connection):
    instance = PolyDoc({"db": "polydoc_test"}, r=connection)
    yield instance
    instance._clean()
