"""Import chemicals and their recipes from a spreadsheet export into the inventory."""

from __future__ import annotations

import argparse
import csv
import sys
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Iterator, Protocol, Sequence, TextIO

from chemimport.client import DEFAULT_BASE_URL, InventoryClient, InventoryError
from chemimport.columns import ColumnError, Columns
from chemimport.models import (
    PayloadChemical,
    PayloadChemicalRecipe,
    PortalChemical,
    PortalChemicalRecipe,
    PortalSafetyInfo,
    ProcessingResult,
)

DEFAULT_ENV_FILE = "chemical_inventory.env"
DEFAULT_CSV_FILE = "chemicals-05-20-16-55.csv"

_REQUIRED_FIELDS = {
    "chemical": ("chemical_name", "missing chemical name"),
    "recipe": ("recipe_title", "missing recipe title"),
}


class _Inventory(Protocol):
    def find_chemical(self, name: str) -> PortalChemical | None: ...

    def find_recipe(self, title: str, chemical_id: str) -> PortalChemicalRecipe | None: ...

    def create_chemical(self, payload: PayloadChemical) -> str: ...

    def create_recipe(self, payload: PayloadChemicalRecipe) -> str: ...


def remove_extra_space(text: str) -> str:
    """Strip leading and trailing spaces (only the space character)."""
    return text.strip(" ")


def check_required_fields(record_type: str, row: Sequence[str], columns: Columns) -> None:
    """Raise ColumnError if the row lacks the field ``record_type`` requires."""
    try:
        attr, message = _REQUIRED_FIELDS[record_type]
    except KeyError:
        raise ValueError("unknown record type") from None
    if not columns.value_from_row(row, getattr(columns, attr)):
        raise ColumnError(message)


class ProcessLog:
    """CSV log with one line per processing step."""

    HEADER = ["FileRowNum", "Type", "Status", "DatabaseID", "ErrorMsg", "ProcessedAt"]

    def __init__(self, stream: TextIO, name: str = "") -> None:
        self.name = name
        self._writer = csv.writer(stream, lineterminator="\n")
        self._writer.writerow(self.HEADER)

    def write(
        self, row_num: int, step: str, status: str, database_id: str, error_msg: str
    ) -> ProcessingResult:
        entry = ProcessingResult(
            file_row_num=row_num,
            step=step,
            status=status,
            database_id=database_id,
            error_msg=error_msg,
        )
        self._writer.writerow(entry.to_row())
        return entry


@dataclass
class ImportSummary:
    """Counters gathered while importing."""

    rows: int = 0
    created_chemicals: int = 0
    created_recipes: int = 0
    empty_recipes: int = 0
    errors: int = 0
    chemical_validation_errors: int = 0
    check_chemical_errors: int = 0
    create_chemical_errors: int = 0
    missing_chemical_id_errors: int = 0
    check_recipe_errors: int = 0
    create_recipe_errors: int = 0

    def consistent(self) -> bool:
        """True if the total error count equals the sum of the breakdown."""
        return self.errors == (
            self.chemical_validation_errors
            + self.check_chemical_errors
            + self.create_chemical_errors
            + self.missing_chemical_id_errors
            + self.check_recipe_errors
            + self.create_recipe_errors
        )

    def report(self, log_name: str) -> str:
        lines = [
            "=== Processing Summary ===",
            f"Log file created:              {log_name}",
            f"Total rows processed:          {self.rows}",
            f"Chemicals created:             {self.created_chemicals}",
            f"Chemical recipes created:      {self.created_recipes}",
            f"Empty recipe rows:             {self.empty_recipes}",
            "",
            "=== Error Summary ===",
            f"Total errors:                        {self.errors}",
            "Breakdown:",
            f"\t- Missing chemical name errors:    {self.chemical_validation_errors}",
            f"\t- Check chemical errors:           {self.check_chemical_errors}",
            f"\t- Create chemical errors:          {self.create_chemical_errors}",
            f"\t- Missing chemical ID errors:      {self.missing_chemical_id_errors}",
            f"\t- Check recipe errors:             {self.check_recipe_errors}",
            f"\t- Create recipe errors:            {self.create_recipe_errors}",
            "",
            "=== Consistency Check ===",
            f"Is total error count correct?  {str(self.consistent()).lower()}",
        ]
        return "\n".join(lines)


def _import_chemical(
    row: Sequence[str],
    row_num: int,
    columns: Columns,
    client: _Inventory,
    log: ProcessLog,
    summary: ImportSummary,
) -> str | None:
    """Find or create the row's chemical; return its ID, or None after a failure."""
    notes = ""
    if columns.has_column(columns.ghs_flammable_liquid_category):
        try:
            value = columns.value_from_row(row, columns.ghs_flammable_liquid_category)
        except ColumnError as exc:
            print(exc)
        else:
            if value:
                notes = "GHS Flammable liquid category: " + value

    payload = PayloadChemical(
        name=remove_extra_space(columns.value_from_row(row, columns.chemical_name)),
        safety_info=PortalSafetyInfo(
            cas_number=columns.optional_value_from_row(row, columns.cas_number, ""),
            un_number=columns.optional_value_from_row(row, columns.un_number, ""),
            hazard_class=columns.optional_value_from_row(row, columns.hazard_class, ""),
            safety_notes=notes,
        ),
    )

    try:
        existing = client.find_chemical(payload.name)
    except InventoryError as exc:
        print(f"Error checking if chemical exists in DB: {exc} - skipping")
        log.write(row_num, "Check if chemical already exists",
                  "cannot check if chemical exists", "", str(exc))
        summary.errors += 1
        summary.check_chemical_errors += 1
        return None

    if existing is not None:
        print(f"Chemical {payload.name} already exists in DB - skipping")
        log.write(row_num, "Check if chemical already exists", "success", existing.id, "")
        return existing.id

    try:
        chemical_id = client.create_chemical(payload)
    except InventoryError as exc:
        print(f"Error creating new chemical: {exc} - skipping")
        log.write(row_num, "Create new chemical", "cannot create new chemical", "", str(exc))
        summary.errors += 1
        summary.create_chemical_errors += 1
        return None
    print(f"Created new chemical {payload.name} with ID {chemical_id}")
    log.write(row_num, "Create new chemical", "success", chemical_id, "")
    summary.created_chemicals += 1
    return chemical_id


def _import_recipe(
    row: Sequence[str],
    row_num: int,
    chemical_id: str,
    columns: Columns,
    client: _Inventory,
    log: ProcessLog,
    summary: ImportSummary,
) -> bool:
    """Find or create the row's recipe; return False if the row number must not advance."""
    try:
        check_required_fields("recipe", row, columns)
    except ColumnError:
        print("Recipe title is empty - skipping")
        log.write(row_num, "Validate row", "missing recipe title", "", "recipe title is empty")
        summary.empty_recipes += 1
        return True

    if not chemical_id:
        print("Error - chemicalID is empty - skipping")
        log.write(row_num, "Validate chemical ID", "missing chemical ID", "",
                  "no chemical ID available")
        summary.missing_chemical_id_errors += 1
        summary.errors += 1
        return False

    payload = PayloadChemicalRecipe(
        title=remove_extra_space(columns.value_from_row(row, columns.recipe_title)),
        chemical_uuid=uuid.UUID(chemical_id),
    )

    try:
        existing = client.find_recipe(payload.title, chemical_id)
    except InventoryError as exc:
        print(f"Error checking if chemical recipe exists in DB: {exc} - skipping")
        log.write(row_num, "Check if chemical recipe already exists",
                  "cannot check if chemical recipe exists", "", str(exc))
        summary.errors += 1
        summary.check_recipe_errors += 1
        return True

    if existing is not None:
        print(f"Chemical recipe {payload.title} already exists in DB - skipping")
        log.write(row_num, "Check if chemical recipe already exists", "success",
                  existing.id, "")
        return True

    try:
        recipe_id = client.create_recipe(payload)
    except InventoryError as exc:
        print(f"Error creating new chemical recipe: {exc} - skipping")
        log.write(row_num, "Create new chemical recipe",
                  "cannot create new chemical recipe", "", str(exc))
        summary.errors += 1
        summary.create_recipe_errors += 1
        return True
    print(f"Created new chemical recipe {payload.title} with ID {recipe_id}")
    log.write(row_num, "Create new chemical recipe", "success", recipe_id, "")
    summary.created_recipes += 1
    return True


def _process_row(
    row: Sequence[str],
    row_num: int,
    columns: Columns,
    client: _Inventory,
    log: ProcessLog,
    summary: ImportSummary,
) -> bool:
    print("Step 0: Validating required fields")
    try:
        check_required_fields("chemical", row, columns)
    except ColumnError as exc:
        print(f"Validation error in row {row_num}: {exc} - skipping")
        log.write(row_num, "Validate row ", "missing chemical name", "", str(exc))
        summary.errors += 1
        summary.chemical_validation_errors += 1
        return True

    print("Step 1: Processing chemical data and safety info")
    chemical_id = _import_chemical(row, row_num, columns, client, log, summary)
    if chemical_id is None:
        return True

    print("Step 2: Processing chemical recipe data - "
          "if there's chem recipe information to process")
    return _import_recipe(row, row_num, chemical_id, columns, client, log, summary)


def import_rows(
    rows: Iterable[Sequence[str]],
    columns: Columns,
    client: _Inventory,
    log: ProcessLog,
) -> ImportSummary:
    """Import every data row; a csv.Error raised by ``rows`` is logged and skipped."""
    summary = ImportSummary()
    records = iter(rows)
    row_num = 1
    while True:
        print(f"\rProcessing row {row_num} ")
        try:
            row = next(records)
        except StopIteration:
            break
        except csv.Error as exc:
            print(f"Error reading row {row_num}: {exc} - skipping")
            log.write(row_num, "Read row", "cannot read", "", str(exc))
            summary.errors += 1
            row_num += 1
            continue
        if _process_row(row, row_num, columns, client, log, summary):
            row_num += 1
    summary.rows = row_num
    return summary


class _CsvRecords:
    """Non-blank CSV records that must all have as many fields as the first one."""

    def __init__(self, reader: Iterator[list[str]]) -> None:
        self._reader = reader
        self._field_count: int | None = None

    def __iter__(self) -> _CsvRecords:
        return self

    def __next__(self) -> list[str]:
        record = next(self._reader)
        while not record:
            record = next(self._reader)
        if self._field_count is None:
            self._field_count = len(record)
        elif len(record) != self._field_count:
            line = getattr(self._reader, "line_num", "?")
            raise csv.Error(f"record on line {line}: wrong number of fields")
        return record


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Import chemicals and recipes from a CSV export into the inventory."
    )
    parser.add_argument("--env", default=DEFAULT_ENV_FILE, help="column mapping .env file")
    parser.add_argument("--csv", default=DEFAULT_CSV_FILE, help="CSV file to import")
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL, help="inventory service URL")
    return parser.parse_args(argv)


def _fail(message: str) -> int:
    print(message, file=sys.stderr)
    return 1


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    columns = Columns()
    try:
        columns.load_from_env(args.env)
    except ColumnError as exc:
        return _fail(f"Failed to load column mappings: {exc}")

    log_name = f"log-{datetime.now():%Y-%m-%d-%H-%M}.csv"
    try:
        log_file = open(log_name, "w", newline="", encoding="utf-8")
    except OSError as exc:
        return _fail(f"failed to create log file: {exc}")

    with log_file:
        log = ProcessLog(log_file, name=log_name)
        try:
            source = open(args.csv, newline="", encoding="utf-8")
        except OSError as exc:
            return _fail(f"failed to open file: {exc}")
        with source:
            records = _CsvRecords(csv.reader(source))
            try:
                next(records)
            except StopIteration:
                return _fail("failed to read header: EOF")
            except csv.Error as exc:
                return _fail(f"failed to read header: {exc}")
            summary = import_rows(records, columns, InventoryClient(args.base_url), log)

    print()
    print()
    print(summary.report(log_name))
    return 0


if __name__ == "__main__":
    sys.exit(main())