import logging
from typing import Optional

from housing_history.database import HousingDB

logger = logging.getLogger(__name__)

# Schema Definition
# Write-time invariants live in CHECK constraints; derived values
# (price per sqft, ownership duration, diversity index) are read-time views.
SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS neighborhood (
    neighborhood_id INTEGER PRIMARY KEY,
    neighborhood_name TEXT NOT NULL UNIQUE
);

CREATE TABLE IF NOT EXISTS property_type (
    property_type_id INTEGER PRIMARY KEY,
    property_type_name TEXT NOT NULL UNIQUE
);

-- full_name is a display key only; duplicates are allowed
CREATE TABLE IF NOT EXISTS owner (
    owner_id INTEGER PRIMARY KEY,
    full_name TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS renter (
    renter_id INTEGER PRIMARY KEY,
    full_name TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS property (
    property_id INTEGER PRIMARY KEY,
    neighborhood_id INTEGER NOT NULL REFERENCES neighborhood(neighborhood_id),
    property_type_id INTEGER NOT NULL REFERENCES property_type(property_type_id),
    market_value REAL,
    address_number TEXT NOT NULL,
    street_name TEXT NOT NULL,
    street_suffix TEXT,
    address_line2 TEXT,
    city TEXT NOT NULL,
    zip_code TEXT NOT NULL,
    num_bedrooms INTEGER NOT NULL DEFAULT 0,
    num_bathrooms INTEGER NOT NULL DEFAULT 0,
    square_feet INTEGER NOT NULL DEFAULT 0,
    CONSTRAINT ck_property_valid_values CHECK (
        (market_value IS NULL OR market_value > 0) AND
        num_bedrooms >= 0 AND
        num_bathrooms >= 0 AND
        square_feet >= 0 AND
        zip_code GLOB '[0-9][0-9][0-9][0-9][0-9]'
    )
);

CREATE TABLE IF NOT EXISTS ownership (
    ownership_id INTEGER PRIMARY KEY,
    property_id INTEGER NOT NULL REFERENCES property(property_id),
    owner_id INTEGER NOT NULL REFERENCES owner(owner_id),
    ownership_start_year INTEGER NOT NULL,
    ownership_end_year INTEGER,
    CONSTRAINT ck_ownership_duration CHECK (
        ownership_end_year IS NULL OR ownership_end_year >= ownership_start_year
    )
);

-- Dates are ISO-8601 text (YYYY-MM-DD) so string comparison is chronological
CREATE TABLE IF NOT EXISTS rental_detail (
    rental_id INTEGER PRIMARY KEY,
    property_id INTEGER NOT NULL REFERENCES property(property_id),
    renter_id INTEGER NOT NULL REFERENCES renter(renter_id),
    start_date TEXT NOT NULL,
    end_date TEXT,
    rental_price REAL NOT NULL,
    CONSTRAINT ck_rental_detail_valid CHECK (
        rental_price > 0 AND
        (end_date IS NULL OR end_date > start_date)
    )
);

CREATE TABLE IF NOT EXISTS demographic_info (
    demographic_id INTEGER PRIMARY KEY,
    neighborhood_id INTEGER NOT NULL REFERENCES neighborhood(neighborhood_id),
    total_population INTEGER NOT NULL DEFAULT 0 CHECK (total_population >= 0),
    white_population INTEGER NOT NULL DEFAULT 0 CHECK (white_population >= 0),
    black_population INTEGER NOT NULL DEFAULT 0 CHECK (black_population >= 0),
    hispanic_population INTEGER NOT NULL DEFAULT 0 CHECK (hispanic_population >= 0),
    asian_population INTEGER NOT NULL DEFAULT 0 CHECK (asian_population >= 0)
);

CREATE INDEX IF NOT EXISTS idx_property_neighborhood ON property(neighborhood_id);
CREATE INDEX IF NOT EXISTS idx_property_type ON property(property_type_id);
CREATE INDEX IF NOT EXISTS idx_ownership_property ON ownership(property_id);
CREATE INDEX IF NOT EXISTS idx_ownership_owner ON ownership(owner_id);
CREATE INDEX IF NOT EXISTS idx_rental_property ON rental_detail(property_id);
CREATE INDEX IF NOT EXISTS idx_owner_name ON owner(full_name);

CREATE VIEW IF NOT EXISTS property_details AS
SELECT
    p.*,
    p.market_value / NULLIF(p.square_feet, 0) as price_per_sqft
FROM property p;

CREATE VIEW IF NOT EXISTS ownership_details AS
SELECT
    ow.*,
    NULLIF(ow.ownership_end_year, 0) - ow.ownership_start_year as ownership_duration_years
FROM ownership ow;

-- Simpson diversity: 1 - sum of squared population shares
CREATE VIEW IF NOT EXISTS demographic_details AS
SELECT
    d.*,
    ROUND(1.0 - (
        (CAST(d.white_population AS REAL) / NULLIF(d.total_population, 0)) * (CAST(d.white_population AS REAL) / NULLIF(d.total_population, 0)) +
        (CAST(d.black_population AS REAL) / NULLIF(d.total_population, 0)) * (CAST(d.black_population AS REAL) / NULLIF(d.total_population, 0)) +
        (CAST(d.hispanic_population AS REAL) / NULLIF(d.total_population, 0)) * (CAST(d.hispanic_population AS REAL) / NULLIF(d.total_population, 0)) +
        (CAST(d.asian_population AS REAL) / NULLIF(d.total_population, 0)) * (CAST(d.asian_population AS REAL) / NULLIF(d.total_population, 0))
    ), 4) as diversity_index
FROM demographic_info d;
"""

def init_db(db_path: Optional[str] = None) -> None:
    """Creates every table, index and view that does not exist yet."""
    db = HousingDB(db_path)
    logger.info(f"Initializing database schema at {db.db_path}")
    with db:
        db.execute_script(SCHEMA_SQL)
