"""
Idempotent Sync

Upsert-by-natural-key writes for the derived stat tables.

Rows are matched to existing records by a set of key fields, never by id.
Matched records keep their id and created_at; every write stamps
updated_at. Re-running the same batch converges to the same table contents,
so overlapping runs for the same date or season are safe.
"""

from datetime import date, datetime
from typing import Any, Iterable, Optional, Sequence, Type

from peewee import Model, PeeweeException, chunked

from core.logging import get_logger
from db.base import utcnow
from schemas.store import UpsertResult


log = get_logger("store")

_KEY_CHUNK_SIZE = 500
_AUDIT_FIELDS = ("created_at", "updated_at")


def _key_value(value: Any) -> str:
    """Normalize a key component so DB values and batch values compare equal."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def make_key(values: dict, key_fields: Sequence[str]) -> tuple[str, ...]:
    return tuple(_key_value(values.get(field)) for field in key_fields)


def _field_for(model: Type[Model], name: str):
    return model._meta.combined.get(name)


def _scope_expression(model: Type[Model], scope: dict):
    """Build a WHERE expression from a {field: value | [values]} filter."""
    expression = None
    for name, value in scope.items():
        field = _field_for(model, name)
        if field is None:
            raise ValueError(f"Unknown field '{name}' for {model.__name__}")
        if isinstance(value, (list, tuple, set, frozenset)):
            clause = field.in_(list(value))
        elif value is None:
            clause = field.is_null()
        else:
            clause = field == value
        expression = clause if expression is None else (expression & clause)
    return expression


def fetch_records(
    model: Type[Model],
    order_by: Optional[Sequence[str]] = None,
    **filters: Any,
) -> list[dict]:
    """
    Fetch rows as dicts.

    Args:
        model: Table to read
        order_by: Field names to sort by
        **filters: Field equality filters; list values mean IN

    Returns:
        List of row dicts keyed by field name
    """
    query = model.select()
    if filters:
        query = query.where(_scope_expression(model, filters))
    if order_by:
        query = query.order_by(*[_field_for(model, name) for name in order_by])
    return list(query.dicts())


def _clean_row(model: Type[Model], row: dict) -> dict:
    """Keep only columns the model knows about, keyed by field name."""
    cleaned = {}
    for name, value in row.items():
        field = _field_for(model, name)
        if field is not None:
            cleaned[field.name] = value
    return cleaned


def _load_existing(
    model: Type[Model],
    key_fields: Sequence[str],
    rows: Sequence[dict],
    delete_missing: Optional[dict],
) -> dict[tuple[str, ...], dict]:
    """Fetch existing rows once and index them by natural key."""
    existing: dict[tuple[str, ...], dict] = {}
    lead = _field_for(model, key_fields[0])
    lead_values = sorted({row.get(key_fields[0]) for row in rows if row.get(key_fields[0]) is not None}, key=str)

    for batch in chunked(lead_values, _KEY_CHUNK_SIZE):
        for record in model.select().where(lead.in_(batch)).dicts():
            existing[make_key(record, key_fields)] = record

    if delete_missing:
        for record in model.select().where(_scope_expression(model, delete_missing)).dicts():
            existing.setdefault(make_key(record, key_fields), record)

    return existing


def upsert_by_keys(
    model: Type[Model],
    key_fields: Sequence[str],
    rows: Iterable[dict],
    delete_missing: Optional[dict] = None,
) -> UpsertResult:
    """
    Insert or update rows matched by a natural key.

    Args:
        model: Target table
        key_fields: Field names forming the natural key (e.g. ["team_id", "date"])
        rows: Row dicts; unknown keys are ignored, missing fields are left as-is
              on update (merge)
        delete_missing: Optional narrow scope, e.g. {"date": d, "team_id": [1, 2]}.
              Existing rows inside the scope whose key is not in the batch are
              deleted. Must not be empty.

    Returns:
        UpsertResult with created/updated/deleted counts and row-level errors.
        Errors are collected, not raised, so the rest of the batch is written.
    """
    if not key_fields:
        raise ValueError("upsert_by_keys requires at least one key field")
    if delete_missing is not None and not delete_missing:
        raise ValueError("delete_missing scope must name at least one field")

    table = model._meta.table_name
    result = UpsertResult(table=table)
    pk_name = model._meta.primary_key.name

    # Dedupe the batch on key; the last row for a key wins
    batch: dict[tuple[str, ...], dict] = {}
    for row in rows:
        cleaned = _clean_row(model, row)
        key = make_key(cleaned, key_fields)
        if any(part == "" for part in key):
            result.errors.append(f"{key}: missing key field(s) {list(key_fields)}")
            continue
        if key in batch:
            log.debug("upsert_duplicate_key", table=table, key=key)
        batch[key] = cleaned

    existing = _load_existing(model, key_fields, list(batch.values()), delete_missing)
    now = utcnow()

    for key, row in batch.items():
        current = existing.get(key)
        try:
            if current is not None:
                data = {
                    name: value
                    for name, value in row.items()
                    if name != pk_name and name not in _AUDIT_FIELDS
                }
                data["updated_at"] = now
                model.update(**data).where(
                    model._meta.primary_key == current[pk_name]
                ).execute()
                result.updated += 1
            else:
                data = {name: value for name, value in row.items() if name not in _AUDIT_FIELDS}
                if data.get(pk_name) in (None, ""):
                    data.pop(pk_name, None)
                data["created_at"] = now
                data["updated_at"] = now
                model.insert(**data).execute()
                result.created += 1
        except PeeweeException as e:
            result.errors.append(f"{key}: {type(e).__name__}: {e}")

    if delete_missing:
        stale_ids = [
            record[pk_name]
            for record_key, record in existing.items()
            if record_key not in batch and _in_scope(record, delete_missing)
        ]
        for id_batch in chunked(stale_ids, _KEY_CHUNK_SIZE):
            try:
                result.deleted += (
                    model.delete().where(model._meta.primary_key.in_(id_batch)).execute()
                )
            except PeeweeException as e:
                result.errors.append(f"delete {id_batch}: {type(e).__name__}: {e}")

    log.info(
        "upsert_completed",
        table=table,
        created=result.created,
        updated=result.updated,
        deleted=result.deleted,
        errors=len(result.errors),
    )
    return result


def _in_scope(record: dict, scope: dict) -> bool:
    for name, value in scope.items():
        if isinstance(value, (list, tuple, set, frozenset)):
            allowed = {_key_value(v) for v in value}
            if _key_value(record.get(name)) not in allowed:
                return False
        elif _key_value(record.get(name)) != _key_value(value):
            return False
    return True
