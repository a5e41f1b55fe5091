"""Storage-agnostic row filters. Evaluated in memory or compiled by the persistence layer."""

from dataclasses import dataclass
from typing import Any, FrozenSet, Iterable, Mapping, Tuple


class Predicate:
    """Base for filter nodes. matches() evaluates against a plain record mapping."""

    def matches(self, record: Mapping[str, Any]) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class MatchAll(Predicate):
    def matches(self, record: Mapping[str, Any]) -> bool:
        return True


@dataclass(frozen=True)
class MatchNone(Predicate):
    def matches(self, record: Mapping[str, Any]) -> bool:
        return False


@dataclass(frozen=True)
class FieldEquals(Predicate):
    field: str
    value: Any

    def matches(self, record: Mapping[str, Any]) -> bool:
        # A missing relation never matches, even when compared against None.
        return self.field in record and self.value is not None and record[self.field] == self.value


@dataclass(frozen=True)
class FieldIn(Predicate):
    field: str
    values: FrozenSet[Any]

    def matches(self, record: Mapping[str, Any]) -> bool:
        value = record.get(self.field)
        return value is not None and value in self.values


@dataclass(frozen=True)
class FieldIsNull(Predicate):
    field: str

    def matches(self, record: Mapping[str, Any]) -> bool:
        return self.field in record and record[self.field] is None


@dataclass(frozen=True)
class FieldRange(Predicate):
    """Inclusive range. A None bound is open."""

    field: str
    lower: Any = None
    upper: Any = None

    def matches(self, record: Mapping[str, Any]) -> bool:
        value = record.get(self.field)
        if value is None:
            return False
        if self.lower is not None and value < self.lower:
            return False
        return self.upper is None or value <= self.upper


@dataclass(frozen=True)
class TextSearch(Predicate):
    """Case-insensitive substring match over any of the given fields."""

    fields: Tuple[str, ...]
    text: str

    def matches(self, record: Mapping[str, Any]) -> bool:
        needle = self.text.lower()
        return any(
            isinstance(record.get(f), str) and needle in record[f].lower() for f in self.fields
        )


@dataclass(frozen=True)
class AllOf(Predicate):
    parts: Tuple[Predicate, ...]

    def matches(self, record: Mapping[str, Any]) -> bool:
        return all(p.matches(record) for p in self.parts)


@dataclass(frozen=True)
class AnyOf(Predicate):
    parts: Tuple[Predicate, ...]

    def matches(self, record: Mapping[str, Any]) -> bool:
        return any(p.matches(record) for p in self.parts)


def field_in(field: str, values: Iterable[Any]) -> FieldIn:
    return FieldIn(field, frozenset(values))


def all_of(*predicates: Predicate) -> Predicate:
    """Conjunction. MatchAll parts are dropped, any MatchNone part makes the result MatchNone."""
    parts: list[Predicate] = []
    for p in predicates:
        if isinstance(p, MatchNone):
            return MatchNone()
        if isinstance(p, MatchAll):
            continue
        if isinstance(p, AllOf):
            parts.extend(p.parts)
        else:
            parts.append(p)
    if not parts:
        return MatchAll()
    if len(parts) == 1:
        return parts[0]
    return AllOf(tuple(parts))


def any_of(*predicates: Predicate) -> Predicate:
    """Disjunction. MatchNone parts are dropped, any MatchAll part makes the result MatchAll."""
    parts: list[Predicate] = []
    for p in predicates:
        if isinstance(p, MatchAll):
            return MatchAll()
        if isinstance(p, MatchNone):
            continue
        parts.append(p)
    if not parts:
        return MatchNone()
    if len(parts) == 1:
        return parts[0]
    return AnyOf(tuple(parts))
