"""
Write operations that populate the housing tables.

Each call resolves display names to ids, validates the row with its
pydantic model and inserts it inside one transaction: it either fully
commits or fully rolls back. Outcomes are logged as human-readable
notices and failures are re-raised as package errors.
"""
import logging
import sqlite3
from datetime import date
from typing import Callable, Optional, Type, Union

from pydantic import ValidationError

from housing_history.database import HousingDB
from housing_history.exceptions import HousingDataError, InvalidRecordError
from housing_history.lookups import (
    require_id,
    resolve_neighborhood_id,
    resolve_owner_id,
    resolve_property_type_id,
)
from housing_history.models import (
    HousingRecord,
    NeighborhoodRecord,
    OwnerRecord,
    OwnershipRecord,
    PropertyRecord,
    PropertyTypeRecord,
    RentalRecord,
    RenterRecord,
)

logger = logging.getLogger(__name__)


def _validate(model: Type[HousingRecord], **fields) -> HousingRecord:
    try:
        return model(**fields)
    except ValidationError as e:
        raise InvalidRecordError(f"Invalid {model.table} record: {e}") from e


def _run_write(
    description: str,
    db_path: Optional[str],
    build: Callable[[HousingDB], HousingRecord],
) -> int:
    """
    Runs one write inside a single transaction and returns the new row id.
    ``build`` does the lookups and validation against the same connection.
    """
    try:
        with HousingDB(db_path) as db:
            record = build(db)
            cursor = db.execute(record.insert_sql(), record.to_row())
            new_id = cursor.lastrowid
    except sqlite3.IntegrityError as e:
        logger.error(f"{description} failed, transaction rolled back: {e}")
        raise InvalidRecordError(f"{description} violates a table constraint: {e}") from e
    except HousingDataError as e:
        logger.error(f"{description} failed, transaction rolled back: {e}")
        raise
    logger.info(f"{description} recorded successfully (id {new_id}).")
    return new_id


def add_neighborhood(neighborhood_name: str, db_path: Optional[str] = None) -> int:
    return _run_write(
        f"Neighborhood '{neighborhood_name}'",
        db_path,
        lambda db: _validate(NeighborhoodRecord, neighborhood_name=neighborhood_name),
    )


def add_property_type(property_type_name: str, db_path: Optional[str] = None) -> int:
    return _run_write(
        f"Property type '{property_type_name}'",
        db_path,
        lambda db: _validate(PropertyTypeRecord, property_type_name=property_type_name),
    )


def add_owner(full_name: str, db_path: Optional[str] = None) -> int:
    """Owner names may repeat; each call creates a new owner."""
    return _run_write(
        f"Owner '{full_name}'",
        db_path,
        lambda db: _validate(OwnerRecord, full_name=full_name),
    )


def add_renter(full_name: str, db_path: Optional[str] = None) -> int:
    return _run_write(
        f"Renter '{full_name}'",
        db_path,
        lambda db: _validate(RenterRecord, full_name=full_name),
    )


def insert_property(
    neighborhood_name: str,
    property_type_name: str,
    market_value: float,
    address_number: Union[str, int],
    street_name: str,
    street_suffix: Optional[str],
    city: str,
    zip_code: str,
    num_bedrooms: int,
    num_bathrooms: int,
    square_feet: int,
    address_line2: Optional[str] = None,
    db_path: Optional[str] = None,
) -> int:
    """
    Inserts a new property, resolving the neighborhood and property type
    by name. Raises RecordNotFoundError for an unknown name and
    InvalidRecordError for values that break the property constraints.
    """
    def build(db: HousingDB) -> HousingRecord:
        return _validate(
            PropertyRecord,
            neighborhood_id=resolve_neighborhood_id(db, neighborhood_name),
            property_type_id=resolve_property_type_id(db, property_type_name),
            market_value=market_value,
            address_number=address_number,
            street_name=street_name,
            street_suffix=street_suffix,
            address_line2=address_line2,
            city=city,
            zip_code=zip_code,
            num_bedrooms=num_bedrooms,
            num_bathrooms=num_bathrooms,
            square_feet=square_feet,
        )

    return _run_write(f"New property at {address_number} {street_name}", db_path, build)


def record_ownership_transaction(
    owner_full_name: str,
    property_id: int,
    start_year: int,
    end_year: Optional[int] = None,
    db_path: Optional[str] = None,
) -> int:
    """
    Adds an ownership record linking an existing owner to a property.
    ``end_year`` stays None while the owner still holds the property.
    """
    def build(db: HousingDB) -> HousingRecord:
        owner_id = resolve_owner_id(db, owner_full_name)
        require_id(db, "property", property_id)
        return _validate(
            OwnershipRecord,
            property_id=property_id,
            owner_id=owner_id,
            start_year=start_year,
            end_year=end_year,
        )

    return _run_write(f"Ownership of property {property_id} by '{owner_full_name}'", db_path, build)


def add_rental_detail(
    property_id: int,
    renter_id: int,
    start_date: Union[date, str],
    rental_price: float,
    end_date: Optional[Union[date, str]] = None,
    db_path: Optional[str] = None,
) -> int:
    def build(db: HousingDB) -> HousingRecord:
        require_id(db, "property", property_id)
        require_id(db, "renter", renter_id)
        return _validate(
            RentalRecord,
            property_id=property_id,
            renter_id=renter_id,
            start_date=start_date,
            end_date=end_date,
            rental_price=rental_price,
        )

    return _run_write(f"Rental of property {property_id}", db_path, build)
