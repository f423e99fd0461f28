import pytest

from secret_child import settings
from secret_child.main import cli, slugify
from secret_child.normalize import read_participants, read_prior_assignments

ROSTER = (
    "Employee_Name,Employee_EmailID\n"
    "Ana,ana@corp.example\nBen,ben@corp.example\nCho,cho@corp.example\n"
    "Dev,dev@corp.example\n"
)


@pytest.fixture
def roster(tmp_path):
    path = tmp_path / "employees.csv"
    path.write_text(ROSTER)
    return path


def test_cli_writes_output_file(roster, tmp_path):
    out = tmp_path / "out.csv"

    assert cli([str(roster), "-o", str(out), "--seed", "3"]) == 0

    mapping = read_prior_assignments(out)
    assert list(mapping) == [p.email for p in read_participants(roster)]
    assert all(giver != receiver for giver, receiver in mapping.items())


def test_cli_writes_stdout_by_default(roster, capsys):
    assert cli([str(roster), "--seed", "1"]) == 0

    out = capsys.readouterr().out
    assert out.startswith(
        "Employee_Name,Employee_EmailID,Secret_Child_Name,Secret_Child_EmailID\n")
    assert out.count("\n") == 5


def test_cli_seed_is_reproducible(roster, tmp_path):
    first, second = tmp_path / "a.csv", tmp_path / "b.csv"
    cli([str(roster), "-o", str(first), "--seed", "99"])
    cli([str(roster), "-o", str(second), "--seed", "99"])

    assert first.read_text() == second.read_text()


def test_cli_respects_previous(roster, tmp_path):
    last_year = tmp_path / "last.csv"
    cli([str(roster), "-o", str(last_year), "--seed", "5"])
    out = tmp_path / "this.csv"

    assert cli([str(roster), "-p", str(last_year), "-o", str(out)]) == 0

    before = read_prior_assignments(last_year)
    after = read_prior_assignments(out)
    assert all(after[g] != before[g] for g in before)


def test_cli_log_writes_labelled_copy(roster, tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(settings, "OUTPUT_DIR", tmp_path / "output")

    assert cli([str(roster), "--log", "-label", "Office Party"]) == 0

    written = list((tmp_path / "output").glob("*/" + settings.OUTPUT_FILENAME))
    assert len(written) == 1
    assert written[0].parent.name.endswith("office-party")
    assert written[0].read_text() == capsys.readouterr().out


def test_cli_fails_on_impossible_draw(tmp_path):
    roster = tmp_path / "two.csv"
    roster.write_text("Employee_Name,Employee_EmailID\nA,a@x.com\nB,b@x.com\n")
    prior = tmp_path / "prior.csv"
    prior.write_text("Employee_EmailID,Secret_Child_EmailID\n"
                     "a@x.com,b@x.com\nb@x.com,a@x.com\n")

    assert cli([str(roster), "-p", str(prior), "--attempts", "20"]) == 1


def test_cli_fails_on_bad_roster(tmp_path):
    roster = tmp_path / "bad.csv"
    roster.write_text("Name,Email\nA,a@x.com\n")

    assert cli([str(roster)]) == 1


@pytest.mark.parametrize("value, expected", [
    ("1700000000-Office Party!", "1700000000-office-party"),
    ("Ünïcode  names", "unicode-names"),
    ("--trim--", "trim"),
])
def test_slugify(value, expected):
    assert slugify(value) == expected


def test_cli_reads_trailing_comma_export(tmp_path):
    roster = tmp_path / "export.csv"
    roster.write_text("Employee_Name,Employee_EmailID\n"
                      "Ana,ana@x.com,\nBen,ben@x.com,\nCho,cho@x.com,\n")
    out = tmp_path / "out.csv"

    assert cli([str(roster), "-o", str(out)]) == 0
    assert list(read_prior_assignments(out)) == [
        "ana@x.com", "ben@x.com", "cho@x.com"]


def test_cli_falls_back_to_input_dir(tmp_path, monkeypatch):
    input_dir = tmp_path / "input"
    input_dir.mkdir()
    (input_dir / "team.csv").write_text(ROSTER)
    monkeypatch.setattr(settings, "INPUT_DIR", input_dir)
    monkeypatch.chdir(tmp_path)
    out = tmp_path / "out.csv"

    assert cli(["team.csv", "-o", str(out)]) == 0
    assert len(read_prior_assignments(out)) == 4


def test_cli_fails_on_missing_input(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "INPUT_DIR", tmp_path / "input")

    assert cli([str(tmp_path / "nobody.csv")]) == 1


def test_cli_fails_on_non_csv_input(tmp_path):
    roster = tmp_path / "employees.xlsx"
    roster.write_text(ROSTER)

    assert cli([str(roster)]) == 1


def test_cli_fails_on_unwritable_output(roster, tmp_path):
    out = tmp_path / "missing" / "out.csv"

    assert cli([str(roster), "-o", str(out)]) == 1
    assert not out.exists()


def test_cli_second_log_with_same_label_fails_cleanly(roster, tmp_path,
                                                      monkeypatch, capsys):
    monkeypatch.setattr(settings, "OUTPUT_DIR", tmp_path / "output")

    assert cli([str(roster), "--log", "-label", "party"]) == 0
    capsys.readouterr()

    assert cli([str(roster), "--log", "-label", "party"]) == 1
    assert capsys.readouterr().out == ""
