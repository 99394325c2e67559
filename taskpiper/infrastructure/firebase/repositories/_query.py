"""Shared list/count helpers for Firestore repositories."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from taskpiper.domain.value_objects.query import Filter, QuerySpec
from taskpiper.infrastructure.firebase._rest_client import CollectionReference


async def run_query(
    coll: CollectionReference,
    to_document: Callable[[str, dict[str, Any]], dict[str, Any]],
    query: QuerySpec,
) -> list[dict[str, Any]]:
    """Filter, order and page on the server; project in process."""
    q = coll.query(query.filter).order_by(query.sort).offset(query.skip).limit(query.limit)
    return [
        query.project(to_document(snapshot.id, snapshot.to_dict()))
        async for snapshot in q.stream()
    ]


async def run_count(coll: CollectionReference, filter_: Filter | None) -> int:
    return await coll.query(filter_).count()
