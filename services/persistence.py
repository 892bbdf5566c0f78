"""Dialect-aware upsert helpers.

Per-day records (check-ins, adherence logs, snapshots) are written with a
single INSERT .. ON CONFLICT statement keyed on their natural key, so two
concurrent writers converge on one row instead of racing a read-then-write.
"""
from typing import Any, Dict, Iterable, Optional

from sqlalchemy.dialects import mysql, postgresql, sqlite

from extensions import db

_DIALECT_INSERTS = {
    'postgresql': postgresql.insert,
    'sqlite': sqlite.insert,
    'mysql': mysql.insert,
    'mariadb': mysql.insert,
}


def _dialect_insert(model):
    dialect = db.session.get_bind().dialect.name
    insert = _DIALECT_INSERTS.get(dialect)
    if insert is None:
        raise NotImplementedError(f"Upsert is not supported for the '{dialect}' dialect")
    return dialect, insert(model.__table__)


def _natural_key(values: Dict[str, Any], key_fields: Iterable[str]) -> Dict[str, Any]:
    return {field: values[field] for field in key_fields}


def upsert(model, key_fields: Iterable[str], values: Dict[str, Any],
           update_fields: Optional[Iterable[str]] = None):
    """
    Insert a row, or overwrite the row sharing its natural key.

    Args:
        model: Mapped model class
        key_fields: Columns of the unique constraint (e.g. ('habit_id', 'date'))
        values: Column values for the row, including the key columns
        update_fields: Columns to overwrite on conflict (defaults to all non-key columns)

    Returns:
        The persisted model instance, refreshed from the database
    """
    key_fields = tuple(key_fields)
    if update_fields is None:
        update_fields = [field for field in values if field not in key_fields]

    # Flush pending ORM changes so the statement sees them
    db.session.flush()

    dialect, stmt = _dialect_insert(model)
    stmt = stmt.values(**values)
    if dialect in ('mysql', 'mariadb'):
        stmt = stmt.on_duplicate_key_update({field: stmt.inserted[field] for field in update_fields})
    else:
        stmt = stmt.on_conflict_do_update(
            index_elements=list(key_fields),
            set_={field: stmt.excluded[field] for field in update_fields},
        )
    db.session.execute(stmt)

    query = (
        db.select(model)
        .filter_by(**_natural_key(values, key_fields))
        .execution_options(populate_existing=True)
    )
    return db.session.execute(query).scalar_one()


def insert_ignore(model, key_fields: Iterable[str], values: Dict[str, Any]) -> bool:
    """Insert a row unless one with the same natural key exists. Returns True if inserted."""
    db.session.flush()

    dialect, stmt = _dialect_insert(model)
    stmt = stmt.values(**values)
    if dialect in ('mysql', 'mariadb'):
        stmt = stmt.prefix_with('IGNORE')
    else:
        stmt = stmt.on_conflict_do_nothing(index_elements=list(key_fields))
    result = db.session.execute(stmt)
    return result.rowcount > 0
