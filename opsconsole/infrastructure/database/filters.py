"""Compiles security/query predicates into SQLAlchemy WHERE clauses for a mapped row class."""

from sqlalchemy import and_, false, or_, true
from sqlalchemy.sql.elements import ColumnElement

from opsconsole.security.predicates import (
    AllOf,
    AnyOf,
    FieldEquals,
    FieldIn,
    FieldIsNull,
    FieldRange,
    MatchAll,
    MatchNone,
    Predicate,
    TextSearch,
)


def _column(model, field: str):
    column = getattr(model, field, None)
    if column is None:
        raise ValueError(f"{model.__name__} has no column {field!r}")
    return column


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def to_clause(predicate: Predicate, model) -> ColumnElement:
    if isinstance(predicate, MatchAll):
        return true()
    if isinstance(predicate, MatchNone):
        return false()
    if isinstance(predicate, FieldEquals):
        if predicate.value is None:
            return false()
        return _column(model, predicate.field) == predicate.value
    if isinstance(predicate, FieldIn):
        if not predicate.values:
            return false()
        return _column(model, predicate.field).in_(sorted(predicate.values, key=str))
    if isinstance(predicate, FieldIsNull):
        return _column(model, predicate.field).is_(None)
    if isinstance(predicate, FieldRange):
        column = _column(model, predicate.field)
        parts = [column.is_not(None)]
        if predicate.lower is not None:
            parts.append(column >= predicate.lower)
        if predicate.upper is not None:
            parts.append(column <= predicate.upper)
        return and_(*parts)
    if isinstance(predicate, TextSearch):
        pattern = f"%{_escape_like(predicate.text)}%"
        return or_(
            *(_column(model, f).ilike(pattern, escape="\\") for f in predicate.fields)
        )
    if isinstance(predicate, AllOf):
        return and_(*(to_clause(p, model) for p in predicate.parts))
    if isinstance(predicate, AnyOf):
        return or_(*(to_clause(p, model) for p in predicate.parts))
    raise TypeError(f"Unsupported predicate: {type(predicate).__name__}")
