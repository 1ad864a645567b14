from pathlib import Path

from lxml import etree

from xbrl_survey.cli import main

TEST_TAXONOMY = Path(__file__).parent / "fixtures" / "taxonomies" / "test_industry" / "2025"

ANSWERS = """\
tGATE: Oui
t001: 12
t002: hello
t003: "1500.5"
t004: Option A
t005:
  fr: 40
  de: 60
t006: 10
tPercentageClients: 25
t008: 2025-06-30
"""


def write_answers(tmp_path, text=ANSWERS):
    path = tmp_path / "answers.yml"
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_inspect(capsys):
    assert main(["--verbose", "inspect", str(TEST_TAXONOMY), "--locale", "en"]) == 0
    out = capsys.readouterr().out
    assert "Questions: 9" in out
    assert "Inherent Risk" in out
    assert "1.1 Activity Status" in out
    assert "Q1 tGATE (boolean) [gate]: Did you perform any activity?" in out


def test_generate_to_file(tmp_path):
    output = tmp_path / "out.xml"
    code = main([
        "generate", str(TEST_TAXONOMY), "--answers", write_answers(tmp_path),
        "--entity-id", "ENTITY_001", "--period", "2025-12-31",
        "--output", str(output),
    ])
    assert code == 0
    doc = etree.fromstring(output.read_bytes())
    ns = {"strix": "https://test.example.com/dcm/DTS/test_survey_2025"}
    assert doc.find("strix:t003", ns).text == "1500.50"
    assert len(doc.findall("strix:t005", ns)) == 2


def test_validate_reports_errors(tmp_path, capsys):
    answers = write_answers(tmp_path, "tGATE: Oui\nt004: Option Z\n")
    code = main([
        "validate", str(TEST_TAXONOMY), "--answers", answers,
        "--entity-id", "E", "--period", "2025-12-31", "--locale", "en",
    ])
    out = capsys.readouterr().out
    assert code == 1
    assert "t004: t004 must be one of: Option A, Option B, Par l'entité" in out
    assert "Number of clients is required" in out


def test_validate_clean_answers(tmp_path, capsys):
    code = main([
        "validate", str(TEST_TAXONOMY), "--answers", write_answers(tmp_path),
        "--entity-id", "E", "--period", "2025-12-31",
    ])
    assert code == 0
    assert "Completion: 100.0%" in capsys.readouterr().out


def test_taxonomy_errors_exit_nonzero(tmp_path, capsys):
    missing = tmp_path / "nothing" / "2025"
    missing.mkdir(parents=True)
    assert main(["inspect", str(missing)]) == 1
    assert "ERROR" in capsys.readouterr().err
