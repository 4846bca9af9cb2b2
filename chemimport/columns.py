"""Spreadsheet column mapping for the chemical import."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv

NO_COLUMN = -1

_ENV_MAPPINGS = {
    "COLUMN_CHEMICAL_NAME": "chemical_name",
    "COLUMN_CAS_NUMBER": "cas_number",
    "COLUMN_UN_NUMBER": "un_number",
    "COLUMN_HAZARD_CLASS": "hazard_class",
    "COLUMN_GHS_FLAMMABLE_LIQUID_CATEGORY": "ghs_flammable_liquid_category",
    "COLUMN_RECIPE_TITLE": "recipe_title",
    "COLUMN_SUPPLIER_NAME": "supplier_name",
    "COLUMN_LOCATION_NAME": "location_name",
    "COLUMN_CIID": "ciid",
    "COLUMN_LOT_NUMBER": "lot_number",
    "COLUMN_AMOUNT": "amount",
    "COLUMN_EXPIRATION_DATE": "expiration_date",
    "COLUMN_PARENT_ID": "parent_id",
    "COLUMN_LABEL": "label",
}


class ColumnError(Exception):
    """Raised when a column cannot be read or the mapping cannot be loaded."""


def letter_to_index(col_letter: str) -> int:
    """Convert a spreadsheet column letter to a zero-based index (A -> 0, AA -> 26)."""
    result = 0
    for char in col_letter.upper():
        result = result * 26 + (ord(char) - ord("A") + 1)
    return result - 1


@dataclass
class Columns:
    """Zero-based column indices; -1 marks a column that is not mapped."""

    chemical_name: int = NO_COLUMN
    cas_number: int = NO_COLUMN
    un_number: int = NO_COLUMN
    hazard_class: int = NO_COLUMN
    ghs_flammable_liquid_category: int = NO_COLUMN

    recipe_title: int = NO_COLUMN

    supplier_name: int = NO_COLUMN

    location_name: int = NO_COLUMN

    ciid: int = NO_COLUMN
    lot_number: int = NO_COLUMN
    amount: int = NO_COLUMN
    expiration_date: int = NO_COLUMN
    parent_id: int = NO_COLUMN
    label: int = NO_COLUMN

    api_base_url: str = ""
    raw_csv: str = ""

    def load_from_env(self, filename: str | os.PathLike[str]) -> None:
        """Load the .env file and set every column named in the environment.

        Variables already present in the environment take precedence over the file.
        """
        path = Path(filename)
        if not path.is_file():
            raise ColumnError(f"error loading .env file: {path}: no such file")
        try:
            load_dotenv(path, override=False)
        except (OSError, UnicodeDecodeError) as exc:
            raise ColumnError(f"error loading .env file: {exc}") from exc

        known = {f.name for f in fields(self)}
        for env_name, attr in _ENV_MAPPINGS.items():
            assert attr in known
            col_letter = os.environ.get(env_name, "")
            if col_letter:
                setattr(self, attr, letter_to_index(col_letter))

    def has_column(self, column_index: int) -> bool:
        return column_index >= 0

    def value_from_row(self, row: Sequence[str], column_index: int) -> str:
        """Return the cell at ``column_index``, raising ColumnError if unavailable."""
        if not self.has_column(column_index):
            raise ColumnError(f"column index {column_index} is not available")
        if column_index >= len(row):
            raise ColumnError(
                f"index {column_index} is out of range for row with length {len(row)}"
            )
        return row[column_index]

    def optional_value_from_row(
        self, row: Sequence[str], column_index: int, default: str
    ) -> str:
        """Return the cell at ``column_index``, or ``default`` if missing or empty."""
        if not self.has_column(column_index) or column_index >= len(row):
            return default
        return row[column_index] or default