"""
Name resolution for the display keys used by reports and procedures.

Owner names are not unique, so every lookup is an explicit step that
either returns exactly one id or raises.
"""
from typing import List

from housing_history.database import HousingDB
from housing_history.exceptions import AmbiguousNameError, RecordNotFoundError

# entity -> (table, id column, name column)
LOOKUP_TABLES = {
    "owner": ("owner", "owner_id", "full_name"),
    "renter": ("renter", "renter_id", "full_name"),
    "neighborhood": ("neighborhood", "neighborhood_id", "neighborhood_name"),
    "property type": ("property_type", "property_type_id", "property_type_name"),
    "property": ("property", "property_id", "property_id"),
}


def find_ids(db: HousingDB, entity: str, name: str) -> List[int]:
    table, id_col, name_col = LOOKUP_TABLES[entity]
    rows = db.execute(
        f"SELECT {id_col} FROM {table} WHERE {name_col} = ? ORDER BY {id_col}", (name,)
    ).fetchall()
    return [r[0] for r in rows]


def resolve_id(db: HousingDB, entity: str, name: str) -> int:
    ids = find_ids(db, entity, name)
    if not ids:
        raise RecordNotFoundError(
            entity, name,
            f"The specified {entity} '{name}' does not exist in the database. "
            f"Check the spelling of the provided name.",
        )
    if len(ids) > 1:
        raise AmbiguousNameError(entity, name, ids)
    return ids[0]


def require_id(db: HousingDB, entity: str, record_id: int) -> None:
    """Raises RecordNotFoundError when no row carries the given id."""
    table, id_col, _ = LOOKUP_TABLES[entity]
    row = db.execute(f"SELECT 1 FROM {table} WHERE {id_col} = ?", (record_id,)).fetchone()
    if row is None:
        raise RecordNotFoundError(entity, record_id)


def resolve_owner_id(db: HousingDB, full_name: str) -> int:
    return resolve_id(db, "owner", full_name)


def resolve_neighborhood_id(db: HousingDB, neighborhood_name: str) -> int:
    return resolve_id(db, "neighborhood", neighborhood_name)


def resolve_property_type_id(db: HousingDB, property_type_name: str) -> int:
    return resolve_id(db, "property type", property_type_name)
