import csv
import io
import uuid

import pytest
import responses

from chemimport.client import InventoryError
from chemimport.columns import ColumnError, Columns
from chemimport.importer import (
    ImportSummary,
    ProcessLog,
    check_required_fields,
    import_rows,
    main,
    remove_extra_space,
)
from chemimport.models import PortalChemical, PortalChemicalRecipe

NEW_CHEM_ID = "6f1c2b9e-0000-4000-8000-000000000001"
NEW_RECIPE_ID = "6f1c2b9e-0000-4000-8000-000000000002"
OLD_CHEM_ID = "6f1c2b9e-0000-4000-8000-000000000003"
OLD_RECIPE_ID = "6f1c2b9e-0000-4000-8000-000000000004"


class FakeClient:
    def __init__(self, chemicals=None, recipes=None, failures=()):
        self.chemicals = dict(chemicals or {})
        self.recipes = dict(recipes or {})
        self.failures = set(failures)
        self.created_chemicals = []
        self.created_recipes = []

    def _check(self, op):
        if op in self.failures:
            raise InventoryError(f"{op} failed")

    def find_chemical(self, name):
        self._check("find_chemical")
        return self.chemicals.get(name)

    def find_recipe(self, title, chemical_id):
        self._check("find_recipe")
        return self.recipes.get((title, chemical_id))

    def create_chemical(self, payload):
        self._check("create_chemical")
        self.created_chemicals.append(payload)
        return NEW_CHEM_ID

    def create_recipe(self, payload):
        self._check("create_recipe")
        self.created_recipes.append(payload)
        return NEW_RECIPE_ID


class FlakyRows:
    def __init__(self, items):
        self._items = iter(items)

    def __iter__(self):
        return self

    def __next__(self):
        item = next(self._items)
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def columns():
    return Columns(chemical_name=0, recipe_title=1, cas_number=2, ghs_flammable_liquid_category=3)


@pytest.fixture
def stream():
    return io.StringIO()


@pytest.fixture
def log(stream):
    return ProcessLog(stream, name="log.csv")


@pytest.fixture
def http():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as mock:
        yield mock


def entries(stream):
    return list(csv.reader(stream.getvalue().splitlines()))[1:]


def test_remove_extra_space_only_strips_spaces():
    assert remove_extra_space("  1-butanol  ") == "1-butanol"
    assert remove_extra_space("\tacetone ") == "\tacetone"


def test_check_required_fields(columns):
    assert check_required_fields("chemical", ["acetone", ""], columns) is None
    with pytest.raises(ColumnError, match="missing chemical name"):
        check_required_fields("chemical", ["", "x"], columns)
    with pytest.raises(ColumnError, match="missing recipe title"):
        check_required_fields("recipe", ["acetone", ""], columns)
    with pytest.raises(ValueError, match="unknown record type"):
        check_required_fields("supplier", ["acetone"], columns)


def test_check_required_fields_unmapped_column():
    with pytest.raises(ColumnError, match="is not available"):
        check_required_fields("chemical", ["acetone"], Columns())


def test_process_log_header_and_row(stream, log):
    entry = log.write(3, "Create new chemical", "success", "abc", "")
    lines = list(csv.reader(stream.getvalue().splitlines()))
    assert lines[0] == ProcessLog.HEADER
    assert lines[1] == entry.to_row()
    assert lines[1][:5] == ["3", "Create new chemical", "success", "abc", ""]


def test_summary_consistency_and_report():
    summary = ImportSummary(errors=2, check_chemical_errors=1, create_recipe_errors=1)
    assert summary.consistent()
    text = summary.report("log.csv")
    assert "Log file created:              log.csv" in text
    assert text.endswith("Is total error count correct?  true")
    summary.errors += 1
    assert not summary.consistent()


def test_new_chemical_and_recipe_are_created(columns, log, stream):
    client = FakeClient()
    summary = import_rows([["  1-butanol ", " 99.9% ", "71-36-3", "3"]], columns, client, log)
    assert (summary.created_chemicals, summary.created_recipes, summary.errors) == (1, 1, 0)
    assert summary.rows == 2
    chemical = client.created_chemicals[0]
    assert chemical.name == "1-butanol"
    assert chemical.safety_info.cas_number == "71-36-3"
    assert chemical.safety_info.safety_notes == "GHS Flammable liquid category: 3"
    recipe = client.created_recipes[0]
    assert recipe.title == "99.9%"
    assert recipe.chemical_uuid == uuid.UUID(NEW_CHEM_ID)
    assert [(e[1], e[2], e[3]) for e in entries(stream)] == [
        ("Create new chemical", "success", NEW_CHEM_ID),
        ("Create new chemical recipe", "success", NEW_RECIPE_ID),
    ]


def test_existing_records_are_reused(columns, log, stream):
    client = FakeClient(
        chemicals={"1-butanol": PortalChemical(id=OLD_CHEM_ID, name="1-butanol")},
        recipes={("99.9%", OLD_CHEM_ID): PortalChemicalRecipe(id=OLD_RECIPE_ID, title="99.9%")},
    )
    summary = import_rows([["1-butanol", "99.9%", "", ""]], columns, client, log)
    assert client.created_chemicals == [] and client.created_recipes == []
    assert summary.created_chemicals == summary.created_recipes == summary.errors == 0
    assert [(e[1], e[3]) for e in entries(stream)] == [
        ("Check if chemical already exists", OLD_CHEM_ID),
        ("Check if chemical recipe already exists", OLD_RECIPE_ID),
    ]


def test_missing_chemical_name(columns, log, stream):
    summary = import_rows([["", "99.9%", "", ""]], columns, FakeClient(), log)
    assert summary.chemical_validation_errors == summary.errors == 1
    first = entries(stream)[0]
    assert first[1:3] == ["Validate row ", "missing chemical name"]
    assert first[4] == "missing chemical name"


def test_empty_recipe_title_is_not_an_error(columns, log, stream):
    summary = import_rows([["acetone", "", "", ""]], columns, FakeClient(), log)
    assert summary.empty_recipes == 1
    assert summary.errors == 0
    assert entries(stream)[-1][1:5] == [
        "Validate row", "missing recipe title", "", "recipe title is empty"
    ]


@pytest.mark.parametrize(
    "op, counter, status",
    [
        ("find_chemical", "check_chemical_errors", "cannot check if chemical exists"),
        ("create_chemical", "create_chemical_errors", "cannot create new chemical"),
        ("find_recipe", "check_recipe_errors", "cannot check if chemical recipe exists"),
        ("create_recipe", "create_recipe_errors", "cannot create new chemical recipe"),
    ],
)
def test_service_failures_are_counted(columns, log, stream, op, counter, status):
    summary = import_rows(
        [["acetone", "99.9%", "", ""]], columns, FakeClient(failures={op}), log
    )
    assert getattr(summary, counter) == summary.errors == 1
    assert summary.consistent()
    last = entries(stream)[-1]
    assert last[2] == status
    assert last[4] == f"{op} failed"


def test_missing_chemical_id_does_not_advance_row(columns, log, stream):
    client = FakeClient(chemicals={"acetone": PortalChemical(id="")})
    summary = import_rows([["acetone", "99.9%", "", ""]], columns, client, log)
    assert summary.missing_chemical_id_errors == 1
    assert summary.rows == 1
    assert entries(stream)[-1][2] == "missing chemical ID"


def test_read_errors_are_logged_and_skipped(columns, log, stream):
    rows = FlakyRows([csv.Error("bad line"), ["acetone", "", "", ""]])
    summary = import_rows(rows, columns, FakeClient(), log)
    assert summary.errors == 1
    assert not summary.consistent()
    assert summary.created_chemicals == 1
    first = entries(stream)[0]
    assert first[:5] == ["1", "Read row", "cannot read", "", "bad line"]


def test_main_runs_import(tmp_path, monkeypatch, capsys, http):
    base = "http://inventory.test"
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("COLUMN_CHEMICAL_NAME", "A")
    monkeypatch.setenv("COLUMN_RECIPE_TITLE", "B")
    (tmp_path / "cols.env").write_text("")
    (tmp_path / "in.csv").write_text("name,recipe\n1-butanol,99.9%\n")
    http.get(base + "/chemicals/name", status=500)
    http.post(base + "/chemicals", status=201, json={"id": NEW_CHEM_ID})
    http.get(f"{base}/chemicals/{NEW_CHEM_ID}/recipes", json=[])
    http.post(base + "/recipes/", status=201, json={"id": NEW_RECIPE_ID})

    code = main(["--env", "cols.env", "--csv", "in.csv", "--base-url", base])

    assert code == 0
    logs = list(tmp_path.glob("log-*.csv"))
    assert len(logs) == 1
    rows = list(csv.reader(logs[0].read_text().splitlines()))
    assert rows[0] == ProcessLog.HEADER
    assert [r[3] for r in rows[1:]] == [NEW_CHEM_ID, NEW_RECIPE_ID]
    assert "Is total error count correct?  true" in capsys.readouterr().out


def test_main_fails_without_env_file(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main(["--env", "missing.env"]) == 1
    assert "Failed to load column mappings" in capsys.readouterr().err


def test_main_fails_on_empty_csv(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("COLUMN_CHEMICAL_NAME", "A")
    (tmp_path / "cols.env").write_text("")
    (tmp_path / "in.csv").write_text("")
    assert main(["--env", "cols.env", "--csv", "in.csv"]) == 1
    assert "failed to read header: EOF" in capsys.readouterr().err