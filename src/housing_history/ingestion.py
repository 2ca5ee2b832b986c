import csv
import logging
import os
import sqlite3
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Type

import pandas as pd
from pydantic import ValidationError

from housing_history.config import get_setting
from housing_history.database import HousingDB
from housing_history.models import (
    DemographicRecord,
    HousingRecord,
    NeighborhoodRecord,
    OwnerRecord,
    OwnershipRecord,
    PropertyRecord,
    PropertyTypeRecord,
    RentalRecord,
    RenterRecord,
)
from housing_history.schema import init_db

logger = logging.getLogger(__name__)

# Load order respects foreign keys: lookup tables first, then properties,
# then the rows that reference properties.
SOURCE_FILES: List[Tuple[str, Type[HousingRecord]]] = [
    ("neighborhoods.csv", NeighborhoodRecord),
    ("property_types.csv", PropertyTypeRecord),
    ("owners.csv", OwnerRecord),
    ("renters.csv", RenterRecord),
    ("properties.csv", PropertyRecord),
    ("ownerships.csv", OwnershipRecord),
    ("rentals.csv", RentalRecord),
    ("demographics.csv", DemographicRecord),
]


@dataclass
class LoadSummary:
    inserted: Dict[str, int] = field(default_factory=dict)
    rejected: Dict[str, int] = field(default_factory=dict)

    @property
    def total_inserted(self) -> int:
        return sum(self.inserted.values())

    @property
    def total_rejected(self) -> int:
        return sum(self.rejected.values())


def _insert_batch(db: HousingDB, model: Type[HousingRecord], batch: List[HousingRecord], writer) -> Tuple[int, int]:
    """
    Bulk inserts a validated batch. If the batch trips a table constraint
    (e.g. a dangling foreign key), rows are retried one at a time so only
    the offending rows end up in the rejects file.
    """
    if not batch:
        return 0, 0
    try:
        db.execute("SAVEPOINT batch")
        db.execute_many(model.insert_sql(), [r.to_row() for r in batch])
        db.execute("RELEASE SAVEPOINT batch")
        return len(batch), 0
    except sqlite3.IntegrityError:
        db.execute("ROLLBACK TO SAVEPOINT batch")
        db.execute("RELEASE SAVEPOINT batch")

    inserted = rejected = 0
    for record in batch:
        try:
            db.execute(record.insert_sql(), record.to_row())
            inserted += 1
        except sqlite3.IntegrityError as e:
            rejected += 1
            writer.writerow([model.table, record.row_id(), f"Constraint: {e}", str(record.model_dump())])
    return inserted, rejected


def load_file(
    db: HousingDB,
    csv_path: str,
    model: Type[HousingRecord],
    writer,
    batch_size: int,
) -> Tuple[int, int]:
    """Validates and inserts one CSV; returns (inserted, rejected)."""
    total_inserted = 0
    total_rejected = 0

    # dtype=str keeps zip codes and ids exactly as written; the models coerce
    chunk_iterator = pd.read_csv(csv_path, chunksize=batch_size, dtype=str, keep_default_na=False)
    for chunk in chunk_iterator:
        batch: List[HousingRecord] = []
        for row in chunk.to_dict("records"):
            try:
                batch.append(model(**row))
            except ValidationError as e:
                total_rejected += 1
                row_id = next(iter(row.values()), "UNKNOWN")
                writer.writerow([model.table, row_id, str(e), str(row)])

        inserted, rejected = _insert_batch(db, model, batch, writer)
        total_inserted += inserted
        total_rejected += rejected

    return total_inserted, total_rejected


def load_directory(
    data_dir: str,
    db_path: Optional[str] = None,
    rejects_path: Optional[str] = None,
    batch_size: Optional[int] = None,
) -> LoadSummary:
    """
    Loads every known CSV found in ``data_dir`` into the database.
    Missing files are skipped; invalid rows go to the rejects CSV.
    """
    if not os.path.isdir(data_dir):
        raise FileNotFoundError(f"Data directory {data_dir} not found.")

    batch_size = batch_size or get_setting("ingestion", "batch_size")
    rejects_path = rejects_path or os.path.join(data_dir, get_setting("ingestion", "rejects_file"))

    init_db(db_path)
    summary = LoadSummary()

    with open(rejects_path, "w", newline="") as f_reject:
        writer = csv.writer(f_reject)
        writer.writerow(["table", "row_id", "error_message", "raw_data"])

        with HousingDB(db_path) as db:
            for filename, model in SOURCE_FILES:
                csv_path = os.path.join(data_dir, filename)
                if not os.path.exists(csv_path):
                    logger.info(f"Skipping {filename}: not present in {data_dir}")
                    continue

                logger.info(f"Loading {csv_path} into {model.table}...")
                inserted, rejected = load_file(db, csv_path, model, writer, batch_size)
                summary.inserted[model.table] = inserted
                summary.rejected[model.table] = rejected
                logger.info(f"{model.table}: inserted {inserted}, rejected {rejected}")

    logger.info(
        f"Load complete. Total inserted: {summary.total_inserted}. "
        f"Total rejected: {summary.total_rejected} (see {rejects_path})"
    )
    return summary
