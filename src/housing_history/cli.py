import argparse
import logging
import os
import sys
from datetime import datetime
from typing import List, Optional

import pandas as pd

from housing_history import procedures
from housing_history.config import CONFIG_ENV_VAR, load_config
from housing_history.exceptions import HousingDataError
from housing_history.ingestion import load_directory
from housing_history.queries import HousingAnalytics
from housing_history.schema import init_db

logger = logging.getLogger(__name__)

REPORT_NAMES = ["turnover", "never-rented", "rental-income", "price-extremes", "diversity"]


def configure_logging(config: dict, verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else getattr(logging, str(config["logging"]["level"]).upper(), logging.INFO)
    logging.basicConfig(level=level, format=config["logging"]["format"], stream=sys.stderr)


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected a whole number, got {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"Must be at least 1, got {number}")
    return number


def parse_date(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected YYYY-MM-DD[ HH:MM:SS], got {value!r}")


def emit(df: pd.DataFrame, fmt: str) -> None:
    if fmt == "csv":
        df.to_csv(sys.stdout, index=False)
    elif df.empty:
        print("(no rows)")
    else:
        print(df.to_string(index=False))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="housing-history", description="Historical housing analytics")
    parser.add_argument("--config", help=f"YAML config file (default: ${CONFIG_ENV_VAR} or config/housing_config.yaml)")
    parser.add_argument("--db", help="SQLite database path (overrides config)")
    parser.add_argument("--format", choices=["table", "csv"], default="table", help="Output format for reports")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create tables and views")

    load = sub.add_parser("load", help="Load CSV files from a directory")
    load.add_argument("data_dir")
    load.add_argument("--rejects", help="Where to write rejected rows")
    load.add_argument("--batch-size", type=positive_int)

    report = sub.add_parser("report", help="Run a neighborhood or property type report")
    report.add_argument("name", choices=REPORT_NAMES)
    report.add_argument("--as-of", type=parse_date, help="Evaluation time for rental-income")
    report.add_argument("--limit", type=positive_int, help="Rank cut-off for price-extremes")

    owner = sub.add_parser("owner", help="Properties linked to an owner")
    owner.add_argument("full_name")
    owner.add_argument("--current", action="store_true", help="Only properties the owner currently holds")

    hood = sub.add_parser("neighborhood", help="Properties in a neighborhood")
    hood.add_argument("neighborhood_name")

    prop = sub.add_parser("add-property", help="Insert a property")
    prop.add_argument("--neighborhood", required=True)
    prop.add_argument("--property-type", required=True)
    prop.add_argument("--market-value", type=float, required=True)
    prop.add_argument("--address-number", required=True)
    prop.add_argument("--street-name", required=True)
    prop.add_argument("--street-suffix")
    prop.add_argument("--address-line2")
    prop.add_argument("--city", required=True)
    prop.add_argument("--zip-code", required=True)
    prop.add_argument("--bedrooms", type=int, default=0)
    prop.add_argument("--bathrooms", type=int, default=0)
    prop.add_argument("--square-feet", type=int, default=0)

    own = sub.add_parser("record-ownership", help="Record an ownership transaction")
    own.add_argument("--owner", required=True)
    own.add_argument("--property-id", type=int, required=True)
    own.add_argument("--start-year", type=int, required=True)
    own.add_argument("--end-year", type=int)

    rent = sub.add_parser("add-rental", help="Add a rental detail")
    rent.add_argument("--property-id", type=int, required=True)
    rent.add_argument("--renter-id", type=int, required=True)
    rent.add_argument("--start-date", required=True)
    rent.add_argument("--end-date")
    rent.add_argument("--price", type=float, required=True)

    return parser


def run(args: argparse.Namespace, config: dict) -> None:
    db_path = args.db or config["database"]["path"]
    analytics = HousingAnalytics(db_path)

    if args.command == "init-db":
        init_db(db_path)
    elif args.command == "load":
        summary = load_directory(
            args.data_dir,
            db_path,
            rejects_path=args.rejects or os.path.join(args.data_dir, config["ingestion"]["rejects_file"]),
            batch_size=args.batch_size or config["ingestion"]["batch_size"],
        )
        print(f"Inserted: {summary.total_inserted} | Rejected: {summary.total_rejected}")
    elif args.command == "report":
        kwargs = {}
        if args.name == "rental-income" and args.as_of is not None:
            kwargs["as_of"] = args.as_of
        if args.name == "price-extremes":
            kwargs["limit"] = args.limit if args.limit is not None else config["reports"]["price_rank_limit"]
        emit(analytics.reports()[args.name](**kwargs), args.format)
    elif args.command == "owner":
        emit(analytics.get_properties_by_owner(args.full_name, current_only=args.current), args.format)
    elif args.command == "neighborhood":
        emit(analytics.get_properties_in_neighborhood(args.neighborhood_name), args.format)
    elif args.command == "add-property":
        new_id = procedures.insert_property(
            neighborhood_name=args.neighborhood,
            property_type_name=args.property_type,
            market_value=args.market_value,
            address_number=args.address_number,
            street_name=args.street_name,
            street_suffix=args.street_suffix,
            city=args.city,
            zip_code=args.zip_code,
            num_bedrooms=args.bedrooms,
            num_bathrooms=args.bathrooms,
            square_feet=args.square_feet,
            address_line2=args.address_line2,
            db_path=db_path,
        )
        print(f"New property inserted successfully! (property_id {new_id})")
    elif args.command == "record-ownership":
        new_id = procedures.record_ownership_transaction(
            args.owner, args.property_id, args.start_year, args.end_year, db_path=db_path
        )
        print(f"Property transaction recorded successfully! (ownership_id {new_id})")
    elif args.command == "add-rental":
        new_id = procedures.add_rental_detail(
            args.property_id, args.renter_id, args.start_date, args.price,
            end_date=args.end_date, db_path=db_path,
        )
        print(f"Rental detail added successfully. (rental_id {new_id})")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    config = load_config(args.config)
    configure_logging(config, args.verbose)

    try:
        run(args, config)
    except (HousingDataError, FileNotFoundError) as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
