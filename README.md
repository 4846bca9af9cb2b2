# chemimport

`chemimport` reads a spreadsheet of chemicals that has been exported as CSV and
loads it into a chemical inventory service over HTTP. For each data row it:

1. checks that the chemical name is present;
2. looks the chemical up by name and creates it if it does not exist yet. The
   new chemical carries its safety information: CAS number, UN number, hazard
   class, and the GHS flammable-liquid category as a safety note
   (`GHS Flammable liquid category: <value>`);
3. if the row has a recipe title, looks for a recipe with that title among the
   chemical's recipes and creates it if it is missing.

Every step is written to a CSV log. At the end a summary of what was created
and what failed is printed.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Describing the spreadsheet

The layout of the spreadsheet is given by an env file that maps each field to a
spreadsheet column letter (`A`, `B`, ..., `Z`, `AA`, ...). A field whose
variable is missing or empty counts as absent from the sheet. Variables already
set in the environment take precedence over the file.

```
COLUMN_CHEMICAL_NAME=B
COLUMN_CAS_NUMBER=C
COLUMN_UN_NUMBER=D
COLUMN_HAZARD_CLASS=E
COLUMN_GHS_FLAMMABLE_LIQUID_CATEGORY=F
COLUMN_RECIPE_TITLE=G
COLUMN_SUPPLIER_NAME=H
COLUMN_LOCATION_NAME=M
COLUMN_CIID=A
COLUMN_LOT_NUMBER=J
COLUMN_AMOUNT=L
COLUMN_EXPIRATION_DATE=V
COLUMN_PARENT_ID=N
COLUMN_LABEL=O
```

The env file must exist; if it does not, the import stops before it begins.

The first line of the CSV file is taken as a header and skipped. Blank lines are
ignored. A line whose number of fields differs from the header's is logged as a
read error and skipped.

## Running an import

```
chemimport --env chemical_inventory.env --csv chemicals.csv --base-url http://localhost:8092
```

Options:

- `--env` — the column-mapping env file (default `chemical_inventory.env`).
- `--csv` — the CSV export to import (default `chemicals-05-20-16-55.csv`).
- `--base-url` — the address of the inventory service (the default is a fixed
  address on the local network, so this is usually worth giving).

Leading and trailing spaces are removed from chemical names and recipe titles
before they are looked up or created. The command exits with status 1, with a
message on standard error, if the env file, the log file, the CSV file or its
header cannot be read or written; otherwise it exits with status 0.

The service is expected to provide:

- `GET /chemicals/name?name=...` — 200 with the chemical, or 500 when there is
  no chemical of that name;
- `GET /chemicals/<id>/recipes` — 200 with a list of the chemical's recipes, or
  500 when it has none;
- `POST /chemicals` and `POST /recipes/` — 201 with the created record.

Any other answer, or a failed connection, is logged as an error for that row.

## The processing log

Each run writes `log-YYYY-MM-DD-HH-MM.csv` in the current directory, with the
columns

```
FileRowNum,Type,Status,DatabaseID,ErrorMsg,ProcessedAt
```

One line is written per step. A successful lookup or creation records the
database ID, and a failure records the error message. Each line is stamped with
the time in RFC 3339 form. Rows that fail a step are skipped and counted in the
error summary. The run ends with a check that the error total matches the sum
of its breakdown.

## Using it from Python

The building blocks can be imported:

- `chemimport.columns` — `Columns` (with `load_from_env`, `has_column`,
  `value_from_row` and `optional_value_from_row`), `letter_to_index` and
  `ColumnError`.
- `chemimport.models` — dataclasses for the inventory's records
  (`PortalChemical`, `PortalChemicalRecipe`, `PortalChemicalInstance`, ...)
  and request payloads (`PayloadChemical`, `PayloadChemicalRecipe`, ...), with
  `to_dict` / `from_dict` for their JSON form, and `ProcessingResult` for a log
  line.
- `chemimport.client` — `InventoryClient` with `find_chemical`, `find_recipe`,
  `create_chemical` and `create_recipe`. Failures raise `InventoryError`.
- `chemimport.importer` — `import_rows`, `ProcessLog`, `ImportSummary`,
  `check_required_fields`, `remove_extra_space` and `main`.

```python
import csv
from chemimport.columns import Columns
from chemimport.client import InventoryClient
from chemimport.importer import ProcessLog, import_rows

columns = Columns(chemical_name=0, recipe_title=1)
with open("log.csv", "w", newline="") as out, open("data.csv", newline="") as src:
    rows = csv.reader(src)
    next(rows)
    summary = import_rows(rows, columns, InventoryClient("http://localhost:8092"),
                          ProcessLog(out, name="log.csv"))
print(summary.report("log.csv"))
```

## What it does not do

Only chemicals and their recipes are imported. The supplier, location, CIID,
lot number, amount, expiration date, parent ID and label columns are read into
`Columns`, but nothing is done with them. No suppliers, storage locations,
owners or chemical instances are created. The instance models in
`chemimport.models` describe those records, but the client has no calls that
send them.