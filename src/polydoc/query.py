from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union
from enum import Enum


class Operator(Enum):
    EQ = "=="
    NE = "!="
    GT = ">"
    GTE = ">="
    LT = "<"
    LTE = "<="
    IN = "in"
    NOT_IN = "not_in"
    CONTAINS = "contains"
    STARTS_WITH = "starts_with"


_MONGO_OPERATORS = {
    Operator.NE: "$ne",
    Operator.GT: "$gt",
    Operator.GTE: "$gte",
    Operator.LT: "$lt",
    Operator.LTE: "$lte",
    Operator.IN: "$in",
    Operator.NOT_IN: "$nin",
}


@dataclass
class QueryFilter:
    field: str
    operator: Operator
    value: Any


@dataclass
class Query:
    """Chainable query over the documents of one model"""

    model: Any = None
    filters: List[QueryFilter] = field(default_factory=list)
    order_by_fields: List[tuple[str, bool]] = field(default_factory=list)  # (field, desc)
    skip_count: int = 0
    take_count: Optional[int] = None
    count_only: bool = False

    def where(self, field: str, operator: Union[Operator, str], value: Any) -> Query:
        """Add filter condition"""
        if isinstance(operator, str):
            operator = Operator(operator)
        self.filters.append(QueryFilter(field, operator, value))
        return self

    def order_by(self, field: str, descending: bool = False) -> Query:
        self.order_by_fields.append((field, descending))
        return self

    def skip(self, count: int) -> Query:
        self.skip_count = count
        return self

    def take(self, count: int) -> Query:
        self.take_count = count
        return self

    def count(self) -> Query:
        """Return count only"""
        self.count_only = True
        return self

    def _field(self, name: str) -> str:
        if self.model is not None and name == self.model.pk:
            return "_id"
        return name

    def _condition(self, f: QueryFilter) -> Dict[str, Any]:
        if f.operator == Operator.EQ:
            return {"$eq": f.value}
        if f.operator == Operator.CONTAINS:
            return {"$regex": re.escape(str(f.value)), "$options": "i"}
        if f.operator == Operator.STARTS_WITH:
            return {"$regex": "^" + re.escape(str(f.value))}
        return {_MONGO_OPERATORS[f.operator]: f.value}

    def to_filter(self) -> Dict[str, Any]:
        """Convert to a MongoDB filter document"""
        grouped: Dict[str, List[QueryFilter]] = {}
        for f in self.filters:
            grouped.setdefault(self._field(f.field), []).append(f)

        result: Dict[str, Any] = {}
        for key, filters in grouped.items():
            # A lone equality keeps the short form
            if len(filters) == 1 and filters[0].operator == Operator.EQ:
                result[key] = filters[0].value
                continue
            condition: Dict[str, Any] = {}
            for f in filters:
                condition.update(self._condition(f))
            result[key] = condition
        return result

    def to_sort(self) -> List[tuple[str, int]]:
        return [(self._field(name), -1 if desc else 1) for name, desc in self.order_by_fields]

    async def run(self) -> Union[List[Any], int]:
        """Execute against the model's collection"""
        if self.model is None:
            raise ValueError("Query is not bound to a model")

        await self.model.ready()
        collection = self.model.collection
        filter_doc = self.to_filter()

        if self.count_only:
            return await collection.count_documents(filter_doc)

        # limit(0) means "no limit" to MongoDB
        if self.take_count == 0:
            return []

        cursor = collection.find(filter_doc)
        sort = self.to_sort()
        if sort:
            cursor = cursor.sort(sort)
        if self.skip_count:
            cursor = cursor.skip(self.skip_count)
        if self.take_count is not None:
            cursor = cursor.limit(self.take_count)

        results = []
        async for raw in cursor:
            results.append(self.model._from_db(raw))
        return results
