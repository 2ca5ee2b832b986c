import pytest

from housing_history.config import CONFIG_ENV_VAR, load_config
from housing_history.database import HousingDB
from housing_history.queries import HousingAnalytics
from housing_history.schema import init_db


@pytest.fixture(autouse=True)
def default_config(monkeypatch, tmp_path):
    """Run every test against built-in defaults, not the repo's YAML file."""
    monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "missing_config.yaml"))
    load_config.cache_clear()
    yield
    load_config.cache_clear()


@pytest.fixture
def empty_db(tmp_path):
    db_path = str(tmp_path / "housing.db")
    init_db(db_path)
    return db_path


NEIGHBORHOODS = [
    (1, "Capitol Hill"),
    (2, "Ballard"),
    (3, "Fremont"),
    (4, "Empty Acres"),  # no properties
]

PROPERTY_TYPES = [
    (1, "Condo"),
    (2, "Single Family"),
]

OWNERS = [
    (1, "Jerrylee Breagan"),
    (2, "Ana Ortiz"),
    (3, "Sam Lee"),
    (4, "Sam Lee"),  # shares a name with owner 3
    (5, "Priya Nair"),  # owns nothing
]

RENTERS = [
    (1, "Renter One"),
    (2, "Renter Two"),
]

# Condo values follow the [100k, 100k, 90k, 80k, 70k, 60k, 50k] ranking fixture
PROPERTIES = [
    # id, hood, type, value, number, street, suffix, line2, city, zip, beds, baths, sqft
    (1, 1, 1, 100000, "101", "Pine", "St", "Apt 4", "Seattle", "98101", 2, 1, 1000),
    (2, 1, 1, 100000, "102", "Pine", "St", "", "Seattle", "98101", 2, 1, 800),
    (3, 1, 1, 90000, "103", "Pine", "St", None, "Seattle", "98101", 1, 1, 0),
    (4, 2, 1, 80000, "20", "Market", "St", None, "Seattle", "98107", 1, 1, 600),
    (5, 2, 1, 70000, "22", "Market", "St", None, "Seattle", "98107", 1, 1, 550),
    (6, 2, 1, 60000, "24", "Market", "St", None, "Seattle", "98107", 1, 1, 500),
    (7, 3, 1, 50000, "7", "Leary", "Way", None, "Seattle", "98103", 0, 1, 400),
    (8, 3, 2, 500000, "300", "Fremont", "Ave", None, "Seattle", "98103", 3, 2, 2000),
    (9, 2, 2, 750000, "15", "Shilshole", "Ave", None, "Seattle", "98107", 4, 3, 2500),
    (10, 3, 2, None, "310", "Fremont", "Ave", None, "Seattle", "98103", 3, 2, 1800),
]

OWNERSHIPS = [
    # id, property, owner, start, end
    (1, 1, 1, 2000, 2005),
    (2, 1, 2, 2005, 2010),
    (3, 1, 1, 2010, None),
    (4, 2, 2, 2001, None),
    (5, 3, 3, 1999, 2004),
    (6, 3, 2, 2004, None),
    (7, 4, 1, 2015, 2020),
    (8, 4, 3, 2020, None),
    (9, 5, 4, 2010, None),
    (10, 9, 1, 1990, 1995),
    (11, 9, 2, 1995, 2000),
    (12, 9, 3, 2000, 2010),
    (13, 9, 4, 2010, None),
    (14, 8, 1, 2018, None),
]

RENTALS = [
    # id, property, renter, start, end, price
    (1, 1, 1, "2020-01-01", None, 2000),
    (2, 1, 2, "2018-01-01", "2019-01-01", 1500),
    (3, 4, 1, "2023-01-01", "2024-12-31", 1800),
    (4, 7, 2, "2022-01-01", "2024-05-31", 1200),
    (5, 8, 1, "2024-01-01", "2024-06-01", 3000),
]

DEMOGRAPHICS = [
    # id, hood, total, white, black, hispanic, asian
    (1, 1, 100, 50, 20, 20, 10),
    (2, 2, 100, 100, 0, 0, 0),
    (3, 3, 0, 0, 0, 0, 0),
]


def seed(db_path: str) -> None:
    with HousingDB(db_path) as db:
        db.execute_many("INSERT INTO neighborhood VALUES (?,?)", NEIGHBORHOODS)
        db.execute_many("INSERT INTO property_type VALUES (?,?)", PROPERTY_TYPES)
        db.execute_many("INSERT INTO owner VALUES (?,?)", OWNERS)
        db.execute_many("INSERT INTO renter VALUES (?,?)", RENTERS)
        db.execute_many("INSERT INTO property VALUES (?,?,?,?,?,?,?,?,?,?,?,?,?)", PROPERTIES)
        db.execute_many("INSERT INTO ownership VALUES (?,?,?,?,?)", OWNERSHIPS)
        db.execute_many("INSERT INTO rental_detail VALUES (?,?,?,?,?,?)", RENTALS)
        db.execute_many("INSERT INTO demographic_info VALUES (?,?,?,?,?,?,?)", DEMOGRAPHICS)


@pytest.fixture
def db_path(empty_db):
    seed(empty_db)
    return empty_db


@pytest.fixture
def analytics(db_path):
    return HousingAnalytics(db_path)
