"""batesmerge CLI application with Typer."""

import logging
from pathlib import Path
from typing import Annotated, NoReturn

import typer

from batesmerge import __version__
from batesmerge.app.unite_service import united_filename, validate_coverage
from batesmerge.bates.errors import BatesError
from batesmerge.bates.numbers import parse_range
from batesmerge.bates.ring import ReferenceRing
from batesmerge.bootstrap import bootstrap_application
from batesmerge.config import get_settings, set_settings
from batesmerge.utils.cli_output import json_response

app = typer.Typer(
    name="batesmerge",
    help="Discover bates-numbered productions and keep united PDFs current",
    add_completion=True,
    no_args_is_help=True,
)
audit_app = typer.Typer(help="Audit ledger of united file generation")
app.add_typer(audit_app, name="audit")


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        typer.echo(f"batesmerge version {__version__}")
        raise typer.Exit()


def _fail(exc: Exception) -> NoReturn:
    typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
    data_dir: Annotated[
        Path | None,
        typer.Option("--data-dir", help="Override data directory"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log discovery and unite details"),
    ] = False,
) -> None:
    """batesmerge - bates-numbered production toolkit."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    settings = get_settings()
    if data_dir:
        settings.data_dir = data_dir
    set_settings(settings)


@app.command("parse")
def parse_command(
    name: Annotated[str, typer.Argument(help="Bates range or production filename")],
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Parse a bates range such as 'COB0002421-COB0003964' or 'OCA 51-562.pdf'."""

    candidate = Path(name)
    stem = candidate.stem if candidate.suffix.lower() == ".pdf" else candidate.name

    try:
        bates_range = parse_range(stem)
    except BatesError as exc:
        _fail(exc)

    if json_output:
        typer.echo(
            json_response(
                "bates_range",
                1,
                prefix=bates_range.prefix,
                start=bates_range.start.number,
                end=bates_range.end.number,
                width=bates_range.width,
                pages=bates_range.page_count,
            )
        )
        return

    typer.echo(f"Prefix: {bates_range.prefix}")
    typer.echo(f"Start:  {bates_range.start}")
    typer.echo(f"End:    {bates_range.end}")
    typer.echo(f"Width:  {bates_range.width if bates_range.width is not None else '-'}")
    typer.echo(f"Pages:  {bates_range.page_count}")


@app.command("label")
def label_command(
    file: Annotated[Path, typer.Argument(help="Production PDF whose name carries a bates range")],
    page: Annotated[int, typer.Option("--page", "-p", help="1-based page in the file", min=1)],
    to_page: Annotated[
        int | None,
        typer.Option("--to", help="Second page; prints the range between both pages", min=1),
    ] = None,
    short: Annotated[bool, typer.Option("--short", help="Print 'COB 2421' instead of 'COB0002421'")]
    = False,
) -> None:
    """Print the bates label for a page of a production file."""

    try:
        source = parse_range(file.stem)
        ring = ReferenceRing()
        copied = ring.copy(source, page)
        if to_page is None:
            typer.echo(copied.format(short=short))
            return
        ring.copy(source, to_page)
        typer.echo(ring.paste_text())
    except (BatesError, IndexError) as exc:
        _fail(exc)


@app.command("discover")
def discover_command(
    root: Annotated[Path, typer.Argument(help="Discovery root holding production folders")],
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """List every bates series found under ROOT with its coverage status."""

    container = bootstrap_application()
    try:
        series = container.unite_service.scan(root.resolve())
    except BatesError as exc:
        _fail(exc)

    gaps: dict[str, str | None] = {}
    for prefix, files in series.items():
        try:
            validate_coverage(prefix, files)
            gaps[prefix] = None
        except BatesError as exc:
            gaps[prefix] = str(exc)

    if json_output:
        report = [
            {
                "prefix": prefix,
                "first": files[0].bates_range.start.number,
                "last": files[-1].bates_range.end.number,
                "united_name": united_filename(prefix, files),
                "contiguous": gaps[prefix] is None,
                "gap": gaps[prefix],
                "files": [str(entry.path) for entry in files],
            }
            for prefix, files in series.items()
        ]
        typer.echo(json_response("series_discovery", 1, root=str(root), series=report))
        return

    if not series:
        typer.secho("No bates-numbered PDFs found", fg=typer.colors.YELLOW)
        return

    for prefix, files in series.items():
        gap = gaps[prefix]
        first = files[0].bates_range.start.number
        last = files[-1].bates_range.end.number
        typer.secho(
            f"{prefix}: {first}-{last} ({len(files)} files)",
            fg=typer.colors.GREEN if gap is None else typer.colors.RED,
        )
        if gap is not None:
            typer.secho(f"  {gap}", fg=typer.colors.RED)
        for entry in files:
            typer.echo(f"  {entry.name}")


@app.command("plan")
def plan_command(
    root: Annotated[Path, typer.Argument(help="Discovery root holding production folders")],
    force: Annotated[bool, typer.Option("--force", help="Include up-to-date series")] = False,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Show which united files are missing or older than their sources."""

    container = bootstrap_application()
    try:
        targets = container.unite_service.plan(root.resolve(), force=force)
    except (BatesError, FileNotFoundError) as exc:
        _fail(exc)

    if json_output:
        typer.echo(
            json_response(
                "unite_plan",
                1,
                root=str(root),
                targets=[target.model_dump(mode="json") for target in targets],
            )
        )
        return

    if not targets:
        typer.secho("All united files are current", fg=typer.colors.GREEN)
        return

    for target in targets:
        reason = "missing" if target.output_mtime is None else "stale"
        typer.echo(f"{target.output_path.name} ({reason}, {len(target.sources)} sources)")
        for path in target.superseded:
            typer.echo(f"  supersedes {path.name}")


@app.command("unite")
def unite_command(
    root: Annotated[Path, typer.Argument(help="Discovery root holding production folders")],
    force: Annotated[bool, typer.Option("--force", help="Regenerate every series")] = False,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Show the plan without writing")]
    = False,
    verify_pages: Annotated[
        bool | None,
        typer.Option(
            "--verify-pages/--no-verify-pages",
            help="Check page counts against bates ranges before writing",
        ),
    ] = None,
    prune: Annotated[
        bool | None,
        typer.Option("--prune/--keep-superseded", help="Delete older united files per series"),
    ] = None,
) -> None:
    """Regenerate stale united PDFs under ROOT."""

    container = bootstrap_application()
    service = container.unite_service
    resolved_root = root.resolve()

    if dry_run:
        try:
            targets = service.plan(resolved_root, force=force)
        except (BatesError, FileNotFoundError) as exc:
            _fail(exc)
        typer.secho("✓ Dry-run preview", fg=typer.colors.GREEN)
        for target in targets:
            typer.echo(f"  would write {target.output_path.name} ({target.page_count} pages)")
        if not targets:
            typer.echo("  nothing to do")
        raise typer.Exit(code=0)

    try:
        results = service.run(
            resolved_root,
            force=force,
            verify_pages=verify_pages,
            prune_superseded=prune,
        )
    except (BatesError, FileNotFoundError) as exc:
        _fail(exc)

    if not results:
        typer.secho("All united files are current", fg=typer.colors.GREEN)
        return

    for result in results:
        typer.secho(
            f"✓ {result.output_path.name} ({result.pages} pages)",
            fg=typer.colors.GREEN,
        )
        for removed in result.removed:
            typer.echo(f"  removed {removed.name}")


@app.command("verify")
def verify_command(
    root: Annotated[Path, typer.Argument(help="Discovery root holding production folders")],
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Check every series for gaps and page counts that disagree with file names."""

    container = bootstrap_application()
    try:
        problems = container.unite_service.verify(root.resolve())
    except BatesError as exc:
        _fail(exc)

    if json_output:
        typer.echo(
            json_response(
                "production_verification",
                1,
                root=str(root),
                valid=not problems,
                error_count=len(problems),
                errors=problems,
            )
        )
    elif problems:
        typer.secho(
            f"Production verification failed ({len(problems)} errors):",
            fg=typer.colors.RED,
            err=True,
        )
        for problem in problems:
            typer.echo(f"  - {problem}", err=True)
    else:
        typer.secho(f"Productions verified: {root}", fg=typer.colors.GREEN)

    if problems:
        raise typer.Exit(code=1)


@audit_app.command("show")
def audit_show(
    prefix: Annotated[
        str | None,
        typer.Option("--prefix", help="Only show united files for this series"),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
    tail: Annotated[
        int | None,
        typer.Option("--tail", "-n", help="Show last N entries"),
    ] = None,
) -> None:
    """Show which united files were written, when, and from which sources."""

    ledger = bootstrap_application().ledger_port
    if ledger is None:
        typer.secho("Audit ledger is disabled", fg=typer.colors.YELLOW)
        return

    try:
        records = ledger.history(prefix.upper() if prefix else None)
    except ValueError as exc:
        _fail(exc)

    if not records:
        typer.secho("No united files recorded", fg=typer.colors.YELLOW)
        return

    if tail:
        records = records[-tail:]

    if json_output:
        typer.echo(
            json_response(
                "unite_history",
                1,
                total_entries=len(records),
                entries=[record.model_dump(mode="json") for record in records],
            )
        )
        return

    for record in records:
        typer.echo(
            f"{record.timestamp} | {record.label} | {record.output_path.name} | "
            f"{record.pages} pages | sha256 {record.sha256[:12]}"
        )


@audit_app.command("verify")
def audit_verify() -> None:
    """Verify audit ledger integrity."""

    ledger = bootstrap_application().ledger_port
    if ledger is None:
        typer.secho("Audit ledger is disabled", fg=typer.colors.YELLOW)
        return

    valid, error = ledger.verify()
    if valid:
        typer.secho("Audit ledger is valid", fg=typer.colors.GREEN)
        return

    typer.secho(error or "Audit ledger integrity check failed", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
