from datetime import date, datetime
from typing import Optional, Union
import logging

import pandas as pd

from housing_history.config import get_setting
from housing_history.database import get_db
from housing_history.lookups import require_id, resolve_neighborhood_id, resolve_owner_id
from .sql_fragments import (
    ACTIVE_RENTAL_INCOME_SQL,
    CURRENT_OWNERSHIP_FILTER,
    NEIGHBORHOOD_DIVERSITY_SQL,
    NEVER_RENTED_SQL,
    OWNERSHIP_TURNOVER_SQL,
    PRICE_EXTREMES_SQL,
    PROPERTIES_BY_OWNER_SQL,
    PROPERTIES_IN_NEIGHBORHOOD_SQL,
)

logger = logging.getLogger(__name__)

EvaluationTime = Union[date, datetime]


def to_sql_timestamp(as_of: EvaluationTime) -> str:
    """
    Renders an evaluation time in the form rental dates are stored in.
    A plain date compares as midnight, so a rental ending on that date
    is no longer active.
    """
    if isinstance(as_of, datetime):
        return as_of.strftime("%Y-%m-%d %H:%M:%S")
    return as_of.isoformat()


class OwnershipReportsMixin:
    db_path: Optional[str]

    def get_ownership_turnover(self) -> pd.DataFrame:
        """Average ownership changes per neighborhood, over properties that changed hands."""
        with get_db(self.db_path) as db:
            return db.query(OWNERSHIP_TURNOVER_SQL)

    def get_properties_by_owner(self, full_name: str, current_only: bool = False) -> pd.DataFrame:
        """
        Every property linked to the named owner, most valuable first.

        Raises RecordNotFoundError when no owner has that name and
        AmbiguousNameError when several do; an owner with no properties
        yields an empty frame.
        """
        with get_db(self.db_path, snapshot=True) as db:
            owner_id = resolve_owner_id(db, full_name)
            return self._properties_by_owner(db, owner_id, current_only)

    def get_properties_by_owner_id(self, owner_id: int, current_only: bool = False) -> pd.DataFrame:
        with get_db(self.db_path, snapshot=True) as db:
            require_id(db, "owner", owner_id)
            return self._properties_by_owner(db, owner_id, current_only)

    def _properties_by_owner(self, db, owner_id: int, current_only: bool) -> pd.DataFrame:
        sql = PROPERTIES_BY_OWNER_SQL.format(
            current_filter=CURRENT_OWNERSHIP_FILTER if current_only else ""
        )
        df = db.query(sql, (owner_id,))
        logger.debug(f"Owner {owner_id}: {len(df)} properties (current_only={current_only})")
        return df


class RentalReportsMixin:
    db_path: Optional[str]

    def get_never_rented(self) -> pd.DataFrame:
        """Share of each neighborhood's properties with no rental history."""
        with get_db(self.db_path) as db:
            return db.query(NEVER_RENTED_SQL)

    def get_active_rental_income(self, as_of: Optional[EvaluationTime] = None) -> pd.DataFrame:
        """
        Total rent of active rentals per neighborhood.

        A rental is active when it has no end date or ends strictly after
        ``as_of`` (defaults to now).
        """
        as_of = as_of or datetime.now()
        with get_db(self.db_path) as db:
            return db.query(ACTIVE_RENTAL_INCOME_SQL, (to_sql_timestamp(as_of),))


class PropertyReportsMixin:
    db_path: Optional[str]

    def get_properties_in_neighborhood(self, neighborhood_name: str) -> pd.DataFrame:
        """Raises RecordNotFoundError for an unknown neighborhood name."""
        with get_db(self.db_path, snapshot=True) as db:
            neighborhood_id = resolve_neighborhood_id(db, neighborhood_name)
            return db.query(PROPERTIES_IN_NEIGHBORHOOD_SQL, (neighborhood_id,))

    def get_properties_in_neighborhood_id(self, neighborhood_id: int) -> pd.DataFrame:
        with get_db(self.db_path, snapshot=True) as db:
            require_id(db, "neighborhood", neighborhood_id)
            return db.query(PROPERTIES_IN_NEIGHBORHOOD_SQL, (neighborhood_id,))

    def get_price_extremes(self, limit: Optional[int] = None) -> pd.DataFrame:
        """
        Most and least expensive properties per property type.
        Ties at the cut-off are all kept, so a type can return more than
        ``limit`` rows per category.
        """
        if limit is None:
            limit = get_setting("reports", "price_rank_limit")
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")
        with get_db(self.db_path) as db:
            return db.query(PRICE_EXTREMES_SQL, {"rank_limit": limit})


class DemographicReportsMixin:
    db_path: Optional[str]

    def get_neighborhood_diversity(self) -> pd.DataFrame:
        with get_db(self.db_path) as db:
            return db.query(NEIGHBORHOOD_DIVERSITY_SQL)
