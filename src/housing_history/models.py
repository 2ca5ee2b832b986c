from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Any, ClassVar, Optional, Tuple
import pandas as pd

ZIP_PATTERN = r"^[0-9]{5}$"


def _blank_to_none(v: Any) -> Any:
    """CSV cells arrive as strings; empty or NaN cells mean 'not provided'."""
    if v is None:
        return None
    if isinstance(v, float) and pd.isna(v):
        return None
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


class HousingRecord(BaseModel):
    """
    Base for rows written to the housing tables.
    Field names match column names, so a validated record can be turned
    straight into an INSERT.
    """
    table: ClassVar[str]

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
        "str_strip_whitespace": True,
    }

    @field_validator("*", mode="before")
    @classmethod
    def blank_cells(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @classmethod
    def columns(cls) -> Tuple[str, ...]:
        return tuple(cls.model_fields)

    @classmethod
    def insert_sql(cls) -> str:
        cols = cls.columns()
        placeholders = ", ".join(["?"] * len(cols))
        return f"INSERT INTO {cls.table} ({', '.join(cols)}) VALUES ({placeholders})"

    def to_row(self) -> tuple:
        data = self.model_dump()
        return tuple(data[c] for c in self.columns())

    def row_id(self) -> Any:
        """Primary key value, used to label rejected rows."""
        return next(iter(self.model_dump().values()))


class NeighborhoodRecord(HousingRecord):
    table: ClassVar[str] = "neighborhood"

    neighborhood_id: Optional[int] = None
    neighborhood_name: str = Field(..., min_length=1)


class PropertyTypeRecord(HousingRecord):
    table: ClassVar[str] = "property_type"

    property_type_id: Optional[int] = None
    property_type_name: str = Field(..., min_length=1)


class OwnerRecord(HousingRecord):
    table: ClassVar[str] = "owner"

    owner_id: Optional[int] = None
    full_name: str = Field(..., min_length=1, description="Display name, not unique")


class RenterRecord(HousingRecord):
    table: ClassVar[str] = "renter"

    renter_id: Optional[int] = None
    full_name: str = Field(..., min_length=1)


class PropertyRecord(HousingRecord):
    """
    A single property. Market value must be positive when present;
    room counts and square footage are non-negative and the zip code is
    exactly five digits.
    """
    table: ClassVar[str] = "property"

    property_id: Optional[int] = None
    neighborhood_id: int
    property_type_id: int
    market_value: Optional[float] = Field(None, gt=0)

    # Address
    address_number: str
    street_name: str
    street_suffix: Optional[str] = None
    address_line2: Optional[str] = None
    city: str
    zip_code: str = Field(..., pattern=ZIP_PATTERN, alias="zip")

    # Layout
    num_bedrooms: int = Field(0, ge=0)
    num_bathrooms: int = Field(0, ge=0)
    square_feet: int = Field(0, ge=0)

    @field_validator("address_number", "zip_code", mode="before")
    @classmethod
    def as_text(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return _blank_to_none(v)

    @field_validator("num_bedrooms", "num_bathrooms", "square_feet", mode="before")
    @classmethod
    def clean_counts(cls, v: Any) -> Any:
        """Counts exported as '3.0' still parse; missing counts default to 0."""
        v = _blank_to_none(v)
        if v is None:
            return 0
        try:
            as_float = float(v)
        except (TypeError, ValueError):
            return v  # let pydantic report the bad value
        return int(as_float) if as_float.is_integer() else v


class OwnershipRecord(HousingRecord):
    """One link in a property's chain of owners. An open end year means current."""
    table: ClassVar[str] = "ownership"

    ownership_id: Optional[int] = None
    property_id: int
    owner_id: int
    ownership_start_year: int = Field(..., alias="start_year")
    ownership_end_year: Optional[int] = Field(None, alias="end_year")

    @model_validator(mode="after")
    def end_not_before_start(self) -> "OwnershipRecord":
        if self.ownership_end_year is not None and self.ownership_end_year < self.ownership_start_year:
            raise ValueError(
                f"Ownership end year {self.ownership_end_year} is before start year {self.ownership_start_year}"
            )
        return self


class RentalRecord(HousingRecord):
    table: ClassVar[str] = "rental_detail"

    rental_id: Optional[int] = None
    property_id: int
    renter_id: int
    start_date: str
    end_date: Optional[str] = None
    rental_price: float = Field(..., gt=0)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def standardize_date(cls, v: Any) -> Optional[str]:
        """
        Converts dates such as '7/7/2015', '2015-07-07 00:00:00' or
        date objects to ISO 8601 'YYYY-MM-DD'.
        """
        v = _blank_to_none(v)
        if v is None:
            return None
        try:
            dt = pd.to_datetime(v, dayfirst=False)
        except (ValueError, TypeError):
            raise ValueError(f"Unrecognised date: {v!r}")
        if pd.isna(dt):
            raise ValueError(f"Unrecognised date: {v!r}")
        return dt.strftime("%Y-%m-%d")

    @model_validator(mode="after")
    def end_after_start(self) -> "RentalRecord":
        if self.end_date is not None and self.end_date <= self.start_date:
            raise ValueError(f"Rental end date {self.end_date} must be after start date {self.start_date}")
        return self


class DemographicRecord(HousingRecord):
    table: ClassVar[str] = "demographic_info"

    demographic_id: Optional[int] = None
    neighborhood_id: int
    total_population: int = Field(0, ge=0)
    white_population: int = Field(0, ge=0)
    black_population: int = Field(0, ge=0)
    hispanic_population: int = Field(0, ge=0)
    asian_population: int = Field(0, ge=0)
