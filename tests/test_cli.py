import csv
import io
import os

import pytest

from housing_history.cli import main


def test_report_as_csv(db_path, capsys):
    assert main(["--db", db_path, "--format", "csv", "report", "turnover"]) == 0
    rows = list(csv.DictReader(io.StringIO(capsys.readouterr().out)))
    assert [r["neighborhood_name"] for r in rows] == ["Ballard", "Capitol Hill"]


def test_rental_income_as_of(db_path, capsys):
    assert main(["--db", db_path, "--format", "csv", "report", "rental-income", "--as-of", "2024-05-30"]) == 0
    rows = list(csv.DictReader(io.StringIO(capsys.readouterr().out)))
    assert {r["neighborhood_name"] for r in rows} == {"Capitol Hill", "Ballard", "Fremont"}


def test_price_extremes_limit(db_path, capsys):
    assert main(["--db", db_path, "--format", "csv", "report", "price-extremes", "--limit", "1"]) == 0
    rows = list(csv.DictReader(io.StringIO(capsys.readouterr().out)))
    most_condo = [r for r in rows if r["property_type_name"] == "Condo" and r["rank_category"] == "Most Expensive"]
    assert [r["property_id"] for r in most_condo] == ["1", "2"]


def test_owner_lookup_table_output(db_path, capsys):
    assert main(["--db", db_path, "owner", "Jerrylee Breagan", "--current"]) == 0
    out = capsys.readouterr().out
    assert "300 Fremont Ave, Seattle 98103" in out
    assert "15 Shilshole" not in out


def test_owner_not_found_exits_nonzero(db_path, capsys):
    assert main(["--db", db_path, "owner", "Nobody Here"]) == 1
    assert "does not exist" in capsys.readouterr().err


def test_empty_result_message(db_path, capsys):
    assert main(["--db", db_path, "neighborhood", "Empty Acres"]) == 0
    assert "(no rows)" in capsys.readouterr().out


def test_write_commands(empty_db, capsys):
    assert main(["--db", empty_db, "init-db"]) == 0
    assert main(["--db", empty_db, "add-property", "--neighborhood", "Nowhere", "--property-type", "Condo",
                 "--market-value", "1", "--address-number", "1", "--street-name", "A",
                 "--city", "Seattle", "--zip-code", "98101"]) == 1
    assert "Nowhere" in capsys.readouterr().err


@pytest.mark.parametrize("limit", ["0", "-1", "five"])
def test_price_extremes_rejects_bad_limit(db_path, capsys, limit):
    with pytest.raises(SystemExit) as excinfo:
        main(["--db", db_path, "report", "price-extremes", "--limit", limit])
    assert excinfo.value.code == 2
    assert "--limit" in capsys.readouterr().err


def test_config_file_applies_without_touching_environment(db_path, tmp_path, capsys):
    config_path = tmp_path / "cli.yaml"
    config_path.write_text("reports:\n  price_rank_limit: 1\n")
    env_before = os.environ.get("HOUSING_CONFIG")

    assert main(["--config", str(config_path), "--db", db_path, "--format", "csv", "report", "price-extremes"]) == 0
    rows = list(csv.DictReader(io.StringIO(capsys.readouterr().out)))
    assert {r["property_rank"] for r in rows} == {"1"}
    assert os.environ.get("HOUSING_CONFIG") == env_before


def test_database_path_from_config(db_path, tmp_path, capsys):
    config_path = tmp_path / "db.yaml"
    config_path.write_text(f"database:\n  path: {db_path}\n")

    assert main(["--config", str(config_path), "--format", "csv", "report", "turnover"]) == 0
    rows = list(csv.DictReader(io.StringIO(capsys.readouterr().out)))
    assert [r["neighborhood_name"] for r in rows] == ["Ballard", "Capitol Hill"]
