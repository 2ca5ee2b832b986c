from datetime import date

from housing_history.models import (
    DemographicRecord,
    OwnershipRecord,
    PropertyRecord,
    RentalRecord,
)
from pydantic import ValidationError
import pytest

def valid_property(**overrides):
    data = {
        "neighborhood_id": "1",
        "property_type_id": "2",
        "market_value": "350000",
        "address_number": "12",
        "street_name": "Pike",
        "street_suffix": "St",
        "city": "Seattle",
        "zip": "98101",
        "num_bedrooms": "3",
        "num_bathrooms": "2.0",
        "square_feet": "1400",
    }
    data.update(overrides)
    return data

def test_property_record_valid():
    """CSV strings are coerced to the column types."""
    record = PropertyRecord(**valid_property())
    assert record.neighborhood_id == 1
    assert record.market_value == 350000.0
    assert record.zip_code == "98101"
    assert record.num_bathrooms == 2
    assert record.address_line2 is None

def test_property_record_blank_cells_become_none():
    record = PropertyRecord(**valid_property(address_line2="   ", market_value="", square_feet=""))
    assert record.address_line2 is None
    assert record.market_value is None
    assert record.square_feet == 0

@pytest.mark.parametrize("zip_code", ["9810", "981011", "98l01", ""])
def test_property_record_rejects_bad_zip(zip_code):
    with pytest.raises(ValidationError):
        PropertyRecord(**valid_property(zip=zip_code))

def test_property_record_numeric_zip_keeps_digits():
    record = PropertyRecord(**valid_property(zip=98101, address_number=12))
    assert record.zip_code == "98101"
    assert record.address_number == "12"

@pytest.mark.parametrize("field, value", [
    ("market_value", "0"),
    ("market_value", "-10"),
    ("num_bedrooms", "-1"),
    ("square_feet", "-5"),
    ("num_bathrooms", "1.5"),
])
def test_property_record_rejects_out_of_range(field, value):
    with pytest.raises(ValidationError):
        PropertyRecord(**valid_property(**{field: value}))

def test_property_record_row_order_matches_columns():
    record = PropertyRecord(**valid_property())
    row = record.to_row()
    assert len(row) == len(PropertyRecord.columns())
    assert row[PropertyRecord.columns().index("zip_code")] == "98101"
    assert PropertyRecord.insert_sql().startswith("INSERT INTO property (property_id, neighborhood_id")

def test_ownership_end_before_start_rejected():
    with pytest.raises(ValidationError):
        OwnershipRecord(property_id=1, owner_id=1, start_year=2010, end_year=2009)

def test_ownership_open_and_same_year():
    assert OwnershipRecord(property_id=1, owner_id=1, start_year=2010).ownership_end_year is None
    same = OwnershipRecord(property_id=1, owner_id=1, ownership_start_year="2010", ownership_end_year="2010")
    assert same.ownership_end_year == 2010

def test_rental_dates_standardized():
    record = RentalRecord(property_id=1, renter_id=1, start_date="7/7/2015", end_date=date(2015, 8, 7), rental_price="660")
    assert record.start_date == "2015-07-07"
    assert record.end_date == "2015-08-07"

def test_rental_end_must_follow_start():
    with pytest.raises(ValidationError):
        RentalRecord(property_id=1, renter_id=1, start_date="2015-07-07", end_date="2015-07-07", rental_price=1)

def test_rental_invalid_date_and_price():
    with pytest.raises(ValidationError):
        RentalRecord(property_id=1, renter_id=1, start_date="NOT A DATE", rental_price=100)
    with pytest.raises(ValidationError):
        RentalRecord(property_id=1, renter_id=1, start_date="2015-07-07", rental_price=0)

def test_demographic_counts_non_negative():
    with pytest.raises(ValidationError):
        DemographicRecord(neighborhood_id=1, total_population=-1)

def test_missing_required():
    with pytest.raises(ValidationError):
        RentalRecord(renter_id=1, start_date="2020-01-01", rental_price=10)  # Missing property_id
