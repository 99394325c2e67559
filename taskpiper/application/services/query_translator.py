"""Translates list-endpoint query parameters into a QuerySpec.

Parameters arrive as raw strings: ``where``, ``sort`` and ``select`` are
JSON documents, ``skip``/``limit`` are integers and ``count`` is a flag.
A malformed JSON parameter raises MalformedQueryException (400); it is
never treated as if the parameter were absent. Invalid ``skip``/``limit``
values are ignored.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from taskpiper.application.dtos.task import TASK_FIELDS
from taskpiper.application.dtos.user import USER_FIELDS
from taskpiper.domain.enums import FieldKind
from taskpiper.domain.exceptions import MalformedQueryException
from taskpiper.domain.value_objects.query import (
    ID_FIELD,
    AllOf,
    AnyOf,
    FieldCondition,
    Filter,
    FilterOp,
    Projection,
    QuerySpec,
    SortKey,
)
from taskpiper.shared.utils.datetime import parse_client_timestamp
from taskpiper.shared.utils.generators import is_valid_id

_SORT_DIRECTIONS: dict[Any, bool] = {
    1: False,
    -1: True,
    "1": False,
    "-1": True,
    "asc": False,
    "ascending": False,
    "desc": True,
    "descending": True,
}


@dataclass(frozen=True)
class CollectionQueryRules:
    """Per-collection translation rules.

    Attributes:
        fields: Known document fields and their kinds (for value coercion).
        default_limit: Limit applied when ``limit`` is absent; None = unbounded.
        projection_params: Parameter names read for the projection, in priority order.
    """

    fields: Mapping[str, FieldKind]
    default_limit: int | None = None
    projection_params: tuple[str, ...] = ("select",)


def task_query_rules(default_limit: int | None = 100) -> CollectionQueryRules:
    return CollectionQueryRules(fields=TASK_FIELDS, default_limit=default_limit or None)


def user_query_rules() -> CollectionQueryRules:
    # "filter" is a legacy alias for "select" used by older client scripts.
    return CollectionQueryRules(
        fields=USER_FIELDS,
        default_limit=None,
        projection_params=("select", "filter"),
    )


def parse_json_param(name: str, raw: str | None) -> Any:
    """Return the decoded JSON value, or None when the parameter is absent.

    Raises:
        MalformedQueryException: raw is present but not valid JSON.
    """
    if raw is None or not raw.strip():
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedQueryException(name, str(e)) from e


def parse_non_negative_int(raw: str | None) -> int | None:
    """Return raw as a non-negative int; None when absent or invalid."""
    if raw is None:
        return None
    text = raw.strip()
    if not text.isdecimal():
        return None
    return int(text)


class QueryTranslator:
    """Builds QuerySpec / Projection values for one collection."""

    def __init__(self, rules: CollectionQueryRules) -> None:
        self.rules = rules

    def translate(self, params: Mapping[str, str | None]) -> QuerySpec:
        """Translate list parameters. Raises MalformedQueryException on bad JSON."""
        where = parse_json_param("where", params.get("where"))
        sort = parse_json_param("sort", params.get("sort"))
        projection = self.translate_projection(params)

        limit = parse_non_negative_int(params.get("limit"))
        if limit is None:
            limit = self.rules.default_limit
        elif limit == 0:
            # limit=0 means "no limit" in document-store APIs.
            limit = None

        return QuerySpec(
            filter=self.parse_filter(where) if where is not None else None,
            sort=self.parse_sort(sort) if sort is not None else (),
            projection=projection,
            skip=parse_non_negative_int(params.get("skip")),
            limit=limit,
            want_count=params.get("count") == "true",
        )

    def translate_projection(self, params: Mapping[str, str | None]) -> Projection | None:
        """Read the projection from the first projection parameter that is present."""
        for name in self.rules.projection_params:
            raw = params.get(name)
            if raw is None or not raw.strip():
                continue
            return self.parse_projection(name, parse_json_param(name, raw))
        return None

    def parse_filter(self, raw: Any) -> Filter | None:
        """Parse a filter document; None when it matches everything."""
        if not isinstance(raw, dict):
            raise MalformedQueryException("where", "filter must be a JSON object")
        clauses: list[Filter] = []
        for key, value in raw.items():
            if key in ("$and", "$or"):
                node = self._parse_logical(key, value)
                if node is not None:
                    clauses.append(node)
            elif key.startswith("$"):
                raise MalformedQueryException("where", f"unsupported operator {key!r}")
            else:
                clauses.extend(self._parse_field(key, value))
        if not clauses:
            return None
        if len(clauses) == 1:
            return clauses[0]
        return AllOf(tuple(clauses))

    def _parse_logical(self, key: str, value: Any) -> Filter | None:
        if not isinstance(value, list) or not value:
            raise MalformedQueryException("where", f"{key} requires a non-empty array")
        subs = [self.parse_filter(item) for item in value]
        if key == "$or":
            # An empty branch matches everything, so the whole $or does too.
            if any(sub is None for sub in subs):
                return None
            return subs[0] if len(subs) == 1 else AnyOf(tuple(subs))
        kept = [sub for sub in subs if sub is not None]
        if not kept:
            return None
        return kept[0] if len(kept) == 1 else AllOf(tuple(kept))

    def _parse_field(self, name: str, value: Any) -> list[FieldCondition]:
        if isinstance(value, dict) and any(k.startswith("$") for k in value):
            if not all(k.startswith("$") for k in value):
                raise MalformedQueryException(
                    "where", f"cannot mix operators and fields for {name!r}"
                )
            conditions = []
            for token, operand in value.items():
                try:
                    op = FilterOp(token)
                except ValueError:
                    raise MalformedQueryException(
                        "where", f"unsupported operator {token!r}"
                    ) from None
                conditions.append(self._condition(name, op, operand))
            return conditions
        return [self._condition(name, FilterOp.EQ, value)]

    def _condition(self, name: str, op: FilterOp, operand: Any) -> FieldCondition:
        if op in (FilterOp.IN, FilterOp.NIN):
            if not isinstance(operand, list):
                raise MalformedQueryException("where", f"{op.value} requires an array")
            values = tuple(self._coerce(name, item) for item in operand)
            return FieldCondition(name, op, values)
        return FieldCondition(name, op, self._coerce(name, operand))

    def _coerce(self, name: str, value: Any) -> Any:
        kind = self.rules.fields.get(name)
        if value is None or kind is None:
            return value
        if kind is FieldKind.TIMESTAMP:
            parsed = parse_client_timestamp(value)
            if parsed is None:
                raise MalformedQueryException("where", f"invalid timestamp for {name!r}")
            return parsed
        if kind in (FieldKind.ID, FieldKind.ID_LIST) and not isinstance(value, list):
            if not is_valid_id(value):
                raise MalformedQueryException("where", f"invalid id for {name!r}")
        return value

    def parse_sort(self, raw: Any) -> tuple[SortKey, ...]:
        if not isinstance(raw, dict):
            raise MalformedQueryException("sort", "sort must be a JSON object")
        keys = []
        for name, direction in raw.items():
            if isinstance(direction, bool) or not isinstance(direction, (int, float, str)):
                raise MalformedQueryException("sort", f"invalid direction for {name!r}")
            key = direction.lower() if isinstance(direction, str) else direction
            if key not in _SORT_DIRECTIONS:
                raise MalformedQueryException("sort", f"invalid direction for {name!r}")
            keys.append(SortKey(name, descending=_SORT_DIRECTIONS[key]))
        return tuple(keys)

    def parse_projection(self, param: str, raw: Any) -> Projection | None:
        """Parse ``{"field": 0|1}`` or a space-separated string like ``"name -_id"``."""
        if isinstance(raw, str):
            raw = {
                token.lstrip("-"): 0 if token.startswith("-") else 1
                for token in raw.split()
            }
        if not isinstance(raw, dict):
            raise MalformedQueryException(param, "projection must be a JSON object")
        if not raw:
            return None

        flags: dict[str, bool] = {}
        for name, flag in raw.items():
            if isinstance(flag, str) or flag not in (0, 1):
                raise MalformedQueryException(param, f"invalid projection value for {name!r}")
            flags[name] = bool(flag)

        include_id = flags.pop(ID_FIELD, True)
        if not flags:
            if include_id:
                return Projection(fields=(), include=True, include_id=True)
            return Projection(fields=(), include=False, include_id=False)

        modes = set(flags.values())
        if len(modes) > 1:
            raise MalformedQueryException(
                param, "cannot mix inclusion and exclusion in a projection"
            )
        return Projection(fields=tuple(flags), include=modes.pop(), include_id=include_id)
