"""
Filter Language
Mongo-style query filters evaluated against plain JSON documents

Supported:
    {"field": value}                  equality (array fields match on contains)
    {"a.b": value}                    dotted paths, walking through arrays
    {"field": {"$ne"|"$in"|"$nin"|"$gt"|"$gte"|"$lt"|"$lte"|"$regex"|"$exists": ...}}
    {"coordinates": {"$near": {"latitude", "longitude", "max_distance"}}}
    {"$or": [...]}, {"$and": [...]}
"""

import re
from datetime import datetime
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from app.utils import haversine_meters, parse_datetime

_MISSING = object()

SortSpec = Sequence[Tuple[str, int]]


def _walk(value: Any, parts: List[str]) -> List[Any]:
    if not parts:
        return [value]
    if isinstance(value, list):
        found = []
        for item in value:
            found.extend(_walk(item, parts))
        return found
    if isinstance(value, dict) and parts[0] in value:
        return _walk(value[parts[0]], parts[1:])
    return []


def resolve(doc: dict, path: str) -> List[Any]:
    """All values reachable at a dotted path; arrays contribute their elements and themselves"""
    values = []
    for value in _walk(doc, path.split(".")):
        if isinstance(value, list):
            values.extend(value)
        values.append(value)
    return values


def _comparable(left: Any, right: Any) -> Tuple[Any, Any]:
    if isinstance(right, datetime):
        return parse_datetime(left), right
    return left, right


def _compare(op: str, candidates: List[Any], operand: Any) -> bool:
    for candidate in candidates:
        left, right = _comparable(candidate, operand)
        if left is None or right is None or isinstance(left, (list, dict)):
            continue
        try:
            if op == "$gt" and left > right:
                return True
            if op == "$gte" and left >= right:
                return True
            if op == "$lt" and left < right:
                return True
            if op == "$lte" and left <= right:
                return True
        except TypeError:
            continue
    return False


def _equals(candidates: List[Any], operand: Any) -> bool:
    if operand is None:
        return not candidates or any(c is None for c in candidates)
    if isinstance(operand, datetime):
        return any(parse_datetime(c) == operand for c in candidates if isinstance(c, (str, datetime)))
    return any(c == operand for c in candidates)


def _near(candidates: List[Any], operand: dict) -> bool:
    lat = float(operand["latitude"])
    lon = float(operand["longitude"])
    max_distance = float(operand["max_distance"])
    for candidate in candidates:
        if not isinstance(candidate, dict):
            continue
        if candidate.get("latitude") is None or candidate.get("longitude") is None:
            continue
        distance = haversine_meters(lat, lon, float(candidate["latitude"]), float(candidate["longitude"]))
        if distance <= max_distance:
            return True
    return False


def _apply_operator(op: str, operand: Any, candidates: List[Any], exists: bool) -> bool:
    if op == "$eq":
        return _equals(candidates, operand)
    if op == "$ne":
        return not _equals(candidates, operand)
    if op == "$in":
        return any(_equals(candidates, item) for item in operand)
    if op == "$nin":
        return not any(_equals(candidates, item) for item in operand)
    if op in ("$gt", "$gte", "$lt", "$lte"):
        return _compare(op, candidates, operand)
    if op == "$regex":
        pattern = operand if isinstance(operand, re.Pattern) else re.compile(operand, re.IGNORECASE)
        return any(isinstance(c, str) and pattern.search(c) for c in candidates)
    if op == "$exists":
        return exists == bool(operand)
    if op == "$near":
        return _near(candidates, operand)
    raise ValueError(f"Unsupported filter operator: {op}")


def matches(doc: dict, flt: Optional[dict]) -> bool:
    """True when the document satisfies every clause of the filter"""
    if not flt:
        return True
    for key, condition in flt.items():
        if key == "$or":
            if not any(matches(doc, sub) for sub in condition):
                return False
            continue
        if key == "$and":
            if not all(matches(doc, sub) for sub in condition):
                return False
            continue

        candidates = resolve(doc, key)
        exists = bool(_walk(doc, key.split(".")))
        if isinstance(condition, dict) and condition and all(k.startswith("$") for k in condition):
            for op, operand in condition.items():
                if not _apply_operator(op, operand, candidates, exists):
                    return False
        elif not _equals(candidates, condition):
            return False
    return True


def _sort_key(value: Any):
    # None sorts first, then by type bucket so mixed values never raise
    if value is None or value is _MISSING:
        return (0, "")
    if isinstance(value, bool):
        return (1, int(value))
    if isinstance(value, (int, float)):
        return (1, value)
    if isinstance(value, str):
        parsed = parse_datetime(value) if len(value) >= 10 and value[4:5] == "-" else None
        if parsed is not None:
            return (2, parsed.timestamp())
        return (3, value.lower())
    return (4, str(value))


def sort_documents(docs: Iterable[dict], sort: Optional[SortSpec]) -> List[dict]:
    result = list(docs)
    # Apply keys right to left so the first key wins (stable sort)
    for field, direction in reversed(list(sort or [])):
        result.sort(
            key=lambda d: _sort_key(d.get(field, _MISSING) if "." not in field else next(iter(resolve(d, field)), None)),
            reverse=direction < 0,
        )
    return result


def paginate(docs: List[dict], page: int = 1, limit: Optional[int] = None) -> List[dict]:
    if not limit:
        return docs
    page = max(int(page or 1), 1)
    start = (page - 1) * limit
    return docs[start:start + limit]
