from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest
from typer.testing import CliRunner

from cat_cli.main import app

runner = CliRunner()

TMX = """<?xml version="1.0" encoding="UTF-8"?>
<tmx version="1.4">
  <header srclang="en" />
  <body>
    <tu><tuv xml:lang="en"><seg>Hello world.</seg></tuv><tuv xml:lang="ko"><seg>안녕하세요 세계.</seg></tuv></tu>
    <tu><tuv xml:lang="en"><seg>Save the file.</seg></tuv><tuv xml:lang="ko"><seg>파일을 저장하세요.</seg></tuv></tu>
  </body>
</tmx>
"""


def _create(tmp_path: Path) -> Path:
    projects_root = tmp_path / "projects"
    result = runner.invoke(app, ["create-project", "Demo", "--root", str(projects_root)])
    assert result.exit_code == 0, result.output
    return projects_root


def _import_tmx(tmp_path: Path, projects_root: Path) -> None:
    tmx_path = tmp_path / "main.tmx"
    tmx_path.write_text(TMX, encoding="utf-8")
    result = runner.invoke(app, ["tm-import", "demo", str(tmx_path), "--root", str(projects_root)])
    assert result.exit_code == 0, result.output
    assert "Imported 2 of 2 entries into Main" in result.output


def test_tm_import_is_idempotent_and_listed(tmp_path: Path) -> None:
    projects_root = _create(tmp_path)
    _import_tmx(tmp_path, projects_root)

    again = runner.invoke(
        app, ["tm-import", "demo", str(tmp_path / "main.tmx"), "--root", str(projects_root)]
    )
    info = runner.invoke(app, ["project-info", "demo", "--root", str(projects_root)])

    assert "Imported 0 of 2 entries into Main" in again.output
    assert "TM: Main (2 entries)" in info.output


def test_tm_import_rejects_invalid_tmx(tmp_path: Path) -> None:
    projects_root = _create(tmp_path)
    broken = tmp_path / "broken.tmx"
    broken.write_text("<tmx><body>", encoding="utf-8")

    result = runner.invoke(app, ["tm-import", "demo", str(broken), "--root", str(projects_root)])

    assert result.exit_code == 1


def test_tm_export_writes_stored_entries(tmp_path: Path) -> None:
    projects_root = _create(tmp_path)
    _import_tmx(tmp_path, projects_root)
    output = tmp_path / "export.tmx"

    result = runner.invoke(app, ["tm-export", "demo", str(output), "--root", str(projects_root)])
    missing = runner.invoke(
        app, ["tm-export", "demo", str(output), "--tm", "Other", "--root", str(projects_root)]
    )

    assert result.exit_code == 0, result.output
    assert "Exported 2 entries" in result.output
    assert "<seg>파일을 저장하세요.</seg>" in output.read_text(encoding="utf-8")
    assert missing.exit_code == 1


def test_analyze_reports_tiers_and_savings(tmp_path: Path) -> None:
    projects_root = _create(tmp_path)
    _import_tmx(tmp_path, projects_root)
    document = tmp_path / "doc.txt"
    document.write_text("Hello world. Something else entirely.", encoding="utf-8")

    result = runner.invoke(app, ["analyze", "demo", str(document), "--root", str(projects_root)])

    assert result.exit_code == 0, result.output
    assert "Total words: 5" in result.output
    assert "Savings: 900 (36%)" in result.output


def test_analyze_writes_workbook(tmp_path: Path) -> None:
    pytest.importorskip("openpyxl")
    projects_root = _create(tmp_path)
    document = tmp_path / "doc.txt"
    document.write_text("One line only.", encoding="utf-8")
    output = tmp_path / "analysis.xlsx"

    result = runner.invoke(
        app,
        ["analyze", "demo", str(document), "--output", str(output), "--root", str(projects_root)],
    )

    assert result.exit_code == 0, result.output
    assert output.is_file()


def test_pretranslate_then_qa(tmp_path: Path) -> None:
    projects_root = _create(tmp_path)
    _import_tmx(tmp_path, projects_root)
    document = tmp_path / "doc.txt"
    document.write_text("Hello world. Save the file. Unknown words here.", encoding="utf-8")
    output = tmp_path / "doc.xliff"

    pretranslated = runner.invoke(
        app, ["pretranslate", "demo", str(document), str(output), "--root", str(projects_root)]
    )
    checked = runner.invoke(app, ["qa", "demo", str(output), "--root", str(projects_root)])

    assert pretranslated.exit_code == 0, pretranslated.output
    assert "Applied 2 exact match(es)" in pretranslated.output
    assert 'state="translated"' in output.read_text(encoding="utf-8")
    assert checked.exit_code == 0, checked.output
    assert "0 issue(s) found" in checked.output


def test_qa_fails_on_error_level_issues(tmp_path: Path) -> None:
    projects_root = _create(tmp_path)
    term = runner.invoke(app, ["term-add", "demo", "world", "세계", "--root", str(projects_root)])
    document = tmp_path / "review.xliff"
    document.write_text(
        """<?xml version="1.0" encoding="UTF-8"?>
<xliff version="1.2" xmlns="urn:oasis:names:tc:xliff:document:1.2">
  <file source-language="en" target-language="ko" datatype="plaintext" original="doc.txt">
    <body>
      <trans-unit id="1" approved="yes"><source>Hello world.</source><target state="final">안녕하세요.</target></trans-unit>
      <trans-unit id="2" approved="yes"><source>Save it.</source><target state="final"></target></trans-unit>
    </body>
  </file>
</xliff>
""",
        encoding="utf-8",
    )

    result = runner.invoke(app, ["qa", "demo", str(document), "--root", str(projects_root)])

    assert term.exit_code == 0, term.output
    assert "Term saved: world -> 세계" in term.output
    assert result.exit_code == 1
    assert "#1 [warning] Terminology Not Used" in result.output
    assert "#2 [error] Empty Target: Target segment is empty" in result.output
    assert "2 issue(s) found" in result.output


def test_newer_database_schema_is_reported(tmp_path: Path) -> None:
    projects_root = _create(tmp_path)
    conn = sqlite3.connect(projects_root / "demo" / "project.db")
    try:
        conn.execute("UPDATE schema_meta SET value = '99' WHERE key = 'schema_version'")
        conn.commit()
    finally:
        conn.close()

    result = runner.invoke(app, ["project-info", "demo", "--root", str(projects_root)])

    assert result.exit_code == 1
    assert "newer than supported" in result.output


def test_legacy_xls_workbook_is_rejected(tmp_path: Path) -> None:
    projects_root = _create(tmp_path)
    workbook = tmp_path / "legacy.xls"
    workbook.write_bytes(b"\xd0\xcf\x11\xe0")

    result = runner.invoke(app, ["analyze", "demo", str(workbook), "--root", str(projects_root)])

    assert result.exit_code == 1
    assert "save the file as .xlsx" in result.output
