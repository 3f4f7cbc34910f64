from __future__ import annotations

import logging
from pathlib import Path

import typer

from cat_core.exchange.errors import ExchangeFormatError
from cat_core.exchange.tmx import generate_tmx, parse_tmx
from cat_core.exchange.xlsx import export_analysis, read_source_texts
from cat_core.glossary.termbase import TermbaseEntry
from cat_core.glossary.termbase_store import add_term, list_terms
from cat_core.project.create_project import ProjectInfo, create_project, load_project_info
from cat_core.qa.checks import QASeverity, issue_type_name
from cat_core.session import EditorSession
from cat_core.tm.tm_store import (
    create_tm,
    find_tm_by_name,
    import_tm_entries,
    list_tms,
    load_entries_for_matching,
)

app = typer.Typer(help="catkit translation memory and QA CLI")

_ROOT_OPTION_HELP = "Projects root path. Defaults to ./projects."


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging.")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _fail(exc: Exception) -> typer.Exit:
    typer.secho(str(exc), fg=typer.colors.RED, err=True)
    return typer.Exit(code=1)


def _load_project(slug: str, root: Path | None) -> ProjectInfo:
    try:
        return load_project_info(slug, root=root)
    except (FileNotFoundError, RuntimeError, ValueError) as exc:
        raise _fail(exc) from exc


def _open_session(project: ProjectInfo) -> EditorSession:
    tm_ids = [stored.id for stored in list_tms(db_path=project.db_path)]
    entries = load_entries_for_matching(db_path=project.db_path, tm_ids=tm_ids)
    termbase = list_terms(db_path=project.db_path, client_id=project.config.client_id)
    return EditorSession.from_config(project.config, tm_entries=entries, termbase=termbase)


def _load_document(session: EditorSession, document: Path) -> None:
    suffix = document.suffix.lower()
    if suffix in (".xliff", ".xlf"):
        session.load_xliff(document.read_bytes(), file_name=document.name)
    elif suffix == ".xls":
        raise ValueError("Legacy .xls workbooks are not supported; save the file as .xlsx")
    elif suffix == ".xlsx":
        session.load_sources(read_source_texts(file_path=document), file_name=document.name)
    else:
        session.load_text(document.read_text(encoding="utf-8"), file_name=document.name)


@app.command("create-project")
def create_project_command(
    name: str = typer.Argument(..., help="Human-readable project name."),
    slug: str | None = typer.Option(None, "--slug", help="Slug override."),
    source: str = typer.Option("en", "--source", help="Source language code."),
    target: str = typer.Option("ko", "--target", help="Target language code."),
    delimiter: str = typer.Option("sentence", "--delimiter", help="sentence, newline or paragraph."),
    root: Path | None = typer.Option(None, "--root", help=_ROOT_OPTION_HELP, file_okay=False),
) -> None:
    """Create a project folder with config.yml and a SQLite database."""

    try:
        created = create_project(
            name,
            slug=slug,
            source_lang=source,
            target_lang=target,
            delimiter=delimiter,
            root=root,
        )
    except (FileExistsError, ValueError) as exc:
        raise _fail(exc) from exc

    typer.echo(f"Project created: {created.slug}")
    typer.echo(f"Path: {created.project_path}")
    typer.echo(f"Database: {created.db_path}")


@app.command("project-info")
def project_info_command(
    slug: str = typer.Argument(..., help="Project slug."),
    root: Path | None = typer.Option(None, "--root", help=_ROOT_OPTION_HELP, file_okay=False),
) -> None:
    """Show project configuration, stored TMs and schema version."""

    project = _load_project(slug, root)
    typer.echo(f"Project: {project.name} ({project.slug})")
    typer.echo(f"Languages: {project.config.source_lang} -> {project.config.target_lang}")
    typer.echo(f"Schema version: {project.schema_version}")
    for stored in list_tms(db_path=project.db_path):
        typer.echo(f"TM: {stored.name} ({stored.entry_count} entries)")


@app.command("tm-import")
def tm_import_command(
    slug: str = typer.Argument(..., help="Project slug."),
    tmx_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="TMX file."),
    tm_name: str = typer.Option("Main", "--tm", help="TM to import into; created if missing."),
    root: Path | None = typer.Option(None, "--root", help=_ROOT_OPTION_HELP, file_okay=False),
) -> None:
    """Import translation units from a TMX file."""

    project = _load_project(slug, root)
    try:
        entries = parse_tmx(tmx_path.read_bytes())
    except ExchangeFormatError as exc:
        raise _fail(exc) from exc

    stored = find_tm_by_name(db_path=project.db_path, name=tm_name)
    tm_id = stored.id if stored is not None else create_tm(
        db_path=project.db_path,
        name=tm_name,
        source_lang=project.config.source_lang,
        target_langs=[project.config.target_lang],
        client_id=project.config.client_id,
    )
    saved = import_tm_entries(
        db_path=project.db_path,
        tm_id=tm_id,
        entries=entries,
        target_lang=project.config.target_lang,
    )
    typer.echo(f"Imported {saved} of {len(entries)} entries into {tm_name}")


@app.command("tm-export")
def tm_export_command(
    slug: str = typer.Argument(..., help="Project slug."),
    output: Path = typer.Argument(..., dir_okay=False, help="TMX file to write."),
    tm_name: str = typer.Option("Main", "--tm", help="TM to export."),
    root: Path | None = typer.Option(None, "--root", help=_ROOT_OPTION_HELP, file_okay=False),
) -> None:
    """Export a stored TM as TMX."""

    project = _load_project(slug, root)
    stored = find_tm_by_name(db_path=project.db_path, name=tm_name)
    if stored is None:
        raise _fail(ValueError(f"TM not found: {tm_name}"))

    entries = load_entries_for_matching(db_path=project.db_path, tm_ids=[stored.id])
    output.write_text(
        generate_tmx(entries, project.config.source_lang, project.config.target_lang),
        encoding="utf-8",
    )
    typer.echo(f"Exported {len(entries)} entries to {output}")


@app.command("term-add")
def term_add_command(
    slug: str = typer.Argument(..., help="Project slug."),
    source: str = typer.Argument(..., help="Source term."),
    target: str = typer.Argument(..., help="Approved target term."),
    note: str = typer.Option("", "--note", help="Usage note."),
    root: Path | None = typer.Option(None, "--root", help=_ROOT_OPTION_HELP, file_okay=False),
) -> None:
    """Add or update a termbase entry in the project's scope."""

    project = _load_project(slug, root)
    add_term(
        db_path=project.db_path,
        entry=TermbaseEntry(source=source, target=target, note=note),
        client_id=project.config.client_id,
    )
    typer.echo(f"Term saved: {source} -> {target}")


@app.command("analyze")
def analyze_command(
    slug: str = typer.Argument(..., help="Project slug."),
    document: Path = typer.Argument(..., exists=True, dir_okay=False, help="TXT, XLSX or XLIFF."),
    output: Path | None = typer.Option(None, "--output", help="Write the analysis as XLSX."),
    root: Path | None = typer.Option(None, "--root", help=_ROOT_OPTION_HELP, file_okay=False),
) -> None:
    """Show the match-tier breakdown and cost of a document against the project TMs."""

    project = _load_project(slug, root)
    session = _open_session(project)
    try:
        _load_document(session, document)
    except ValueError as exc:
        raise _fail(exc) from exc

    analysis = session.analysis()
    if analysis is None:
        raise _fail(ValueError("Document has no segments."))

    for result in analysis.tiers:
        typer.echo(
            f"{result.tier.name:>7}  segments={result.segments:<5} words={result.words:<6} "
            f"cost={round(result.cost)}"
        )
    typer.echo(f"Total words: {analysis.total_words}")
    typer.echo(f"Savings: {round(analysis.savings)} ({analysis.savings_percent}%)")

    if output is not None:
        export_analysis(analysis, session.settings.word_rate, output)
        typer.echo(f"Analysis written to {output}")


@app.command("qa")
def qa_command(
    slug: str = typer.Argument(..., help="Project slug."),
    document: Path = typer.Argument(..., exists=True, dir_okay=False, help="XLIFF to check."),
    root: Path | None = typer.Option(None, "--root", help=_ROOT_OPTION_HELP, file_okay=False),
) -> None:
    """Run every enabled QA check; exits with 1 when an error-level issue is found."""

    project = _load_project(slug, root)
    session = _open_session(project)
    try:
        session.load_xliff(document.read_bytes(), file_name=document.name)
    except ExchangeFormatError as exc:
        raise _fail(exc) from exc

    issues = session.run_qa()
    for issue in issues:
        typer.echo(
            f"#{issue.segment_id + 1} [{issue.severity.value}] "
            f"{issue_type_name(issue.type)}: {issue.message}"
        )
    typer.echo(f"{len(issues)} issue(s) found")

    if any(issue.severity is QASeverity.ERROR for issue in issues):
        raise typer.Exit(code=1)


@app.command("pretranslate")
def pretranslate_command(
    slug: str = typer.Argument(..., help="Project slug."),
    document: Path = typer.Argument(..., exists=True, dir_okay=False, help="TXT, XLSX or XLIFF."),
    output: Path = typer.Argument(..., dir_okay=False, help="XLIFF file to write."),
    root: Path | None = typer.Option(None, "--root", help=_ROOT_OPTION_HELP, file_okay=False),
) -> None:
    """Fill every 100%+ match from the TM and save the result as XLIFF."""

    project = _load_project(slug, root)
    session = _open_session(project)
    try:
        _load_document(session, document)
    except ValueError as exc:
        raise _fail(exc) from exc

    applied = session.apply_all_100_plus_matches()
    output.write_text(session.export_xliff(), encoding="utf-8")
    typer.echo(f"Applied {applied} exact match(es); wrote {output}")


if __name__ == "__main__":
    app()
