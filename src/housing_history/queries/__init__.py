from typing import Callable, Dict, Optional

import pandas as pd

from .reports import (
    OwnershipReportsMixin,
    RentalReportsMixin,
    PropertyReportsMixin,
    DemographicReportsMixin,
    to_sql_timestamp,
)


class HousingAnalytics(OwnershipReportsMixin, RentalReportsMixin, PropertyReportsMixin, DemographicReportsMixin):
    """
    Unified entry point for housing history analytics.
    Every report is read-only and opens its own connection, so reports
    can run side by side against the same database.
    """

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path

    def reports(self) -> Dict[str, Callable[..., pd.DataFrame]]:
        """Neighborhood/type-wide reports by their command line name."""
        return {
            "turnover": self.get_ownership_turnover,
            "never-rented": self.get_never_rented,
            "rental-income": self.get_active_rental_income,
            "price-extremes": self.get_price_extremes,
            "diversity": self.get_neighborhood_diversity,
        }
