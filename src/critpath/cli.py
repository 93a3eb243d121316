"""Command-line interface for critpath."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from typing import Annotated

import typer

from . import context
from .config import discover_config
from .exceptions import CritpathError, DependencyConflictError
from .graph import GraphGenerator, GraphView
from .loader import load_project_file, resolve_project_id
from .logger import setup_logger
from .models import Milestone
from .scheduler import (
    CPMResult,
    MilestoneService,
    ReassignmentDecision,
    calculate_critical_path,
)
from .store import YamlFileStore

app = typer.Typer(
    name="critpath",
    help="Critical path scheduling for project milestones",
    add_completion=False,
)

ProjectFileArg = Annotated[Path, typer.Argument(help="Path to the project YAML file")]
ProjectOption = Annotated[
    str | None,
    typer.Option("--project", "-p", help="Project ID (optional if the file has one project)"),
]


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbosity level: 0=silent (default), 1=show changes, 2=show all checks, 3=debug",
            min=0,
            max=3,
        ),
    ] = 0,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config file (default: critpath_config.yaml)",
        ),
    ] = None,
) -> None:
    """Global options for critpath commands."""
    setup_logger(verbose)
    context.set_config_path(config)


@contextmanager
def _exit_on_error() -> Iterator[None]:
    """Report critpath errors on stderr and exit with status 1."""
    try:
        yield
    except DependencyConflictError as e:
        typer.echo(f"Error: {e}", err=True)
        typer.echo(
            "Resolve with --accept-suggestion, --replacement ID or --no-replacement", err=True
        )
        raise typer.Exit(1) from e
    except (CritpathError, FileNotFoundError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e


def _parse_date_option(date_str: str | None, option_name: str) -> date | None:
    """Parse a YYYY-MM-DD CLI option."""
    if date_str is None:
        return None

    try:
        return date.fromisoformat(date_str)
    except ValueError:
        typer.echo(
            f"Error: Invalid date format '{date_str}' for {option_name}. Use YYYY-MM-DD format.",
            err=True,
        )
        raise typer.Exit(1) from None


def _fmt(value: date | None) -> str:
    return value.isoformat() if value is not None else "-"


def _format_table(milestones: list[Milestone]) -> str:
    headers = ["ID", "NAME", "ES", "EF", "LS", "LF", "SLACK", "CRITICAL"]
    rows = [
        [
            m.id,
            m.name,
            _fmt(m.earliest_start),
            _fmt(m.earliest_finish),
            _fmt(m.latest_start),
            _fmt(m.latest_finish),
            str(m.slack) if m.slack is not None else "-",
            "yes" if m.is_critical else "",
        ]
        for m in milestones
    ]
    widths = [max(len(row[i]) for row in [headers, *rows]) for i in range(len(headers))]
    lines = [
        "  ".join(cell.ljust(widths[i]) for i, cell in enumerate(row)).rstrip()
        for row in [headers, *rows]
    ]
    return "\n".join(lines)


def _echo_warnings(result: CPMResult) -> None:
    for warning in result.warnings:
        typer.echo(f"Warning: {warning}", err=True)


def _compute(file: Path, project: str | None, current_date: date | None) -> tuple[str, CPMResult]:
    project_file = load_project_file(file)
    project_id = resolve_project_id(project_file, project)
    config = discover_config(file)
    anchor = project_file.projects[project_id].start_date
    result = calculate_critical_path(
        project_file.milestones_for(project_id),
        anchor,
        config=config.scheduler,
        current_date=current_date,
    )
    return project_id, result


def _service(file: Path, current_date: date | None = None) -> MilestoneService:
    config = discover_config(file)
    return MilestoneService(YamlFileStore(file), config.scheduler, current_date=current_date)


@app.command()
def schedule(
    file: ProjectFileArg,
    *,
    project: ProjectOption = None,
    current_date: Annotated[
        str | None,
        typer.Option(
            "--current-date",
            help="Fallback anchor for milestones without any start date (YYYY-MM-DD)",
        ),
    ] = None,
    write: Annotated[
        bool,
        typer.Option("--write", help="Write computed windows back into the project file"),
    ] = False,
) -> None:
    """Compute earliest/latest windows, slack and the critical path."""
    parsed_current_date = _parse_date_option(current_date, "--current-date")

    with _exit_on_error():
        if write:
            project_id = resolve_project_id(load_project_file(file), project)
            result = _service(file, parsed_current_date).recalculate(project_id)
        else:
            project_id, result = _compute(file, project, parsed_current_date)

    _echo_warnings(result)
    ordered = sorted(
        result.milestones,
        key=lambda m: (m.order if m.order is not None else 0, m.earliest_start or date.min),
    )
    typer.echo(_format_table(ordered))
    if result.project_end is not None:
        typer.echo(f"\nProject {project_id} ends {result.project_end.isoformat()}")
    if write:
        typer.echo(f"Schedule written to {file}")


@app.command("critical-path")
def critical_path(
    file: ProjectFileArg,
    *,
    project: ProjectOption = None,
) -> None:
    """Print the critical milestones ordered by earliest start."""
    with _exit_on_error():
        _, result = _compute(file, project, None)

    _echo_warnings(result)
    for milestone_id in result.critical_path:
        milestone = result.get(milestone_id)
        assert milestone is not None
        typer.echo(f"{milestone_id}\t{_fmt(milestone.earliest_start)}\t{milestone.name}")


@app.command()
def graph(
    file: ProjectFileArg,
    *,
    project: ProjectOption = None,
    view: Annotated[
        GraphView, typer.Option("--view", help="Type of graph to generate")
    ] = GraphView.ALL,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output file path")] = None,
) -> None:
    """Generate the milestone dependency graph in DOT format."""
    with _exit_on_error():
        project_id, result = _compute(file, project, None)

    dot_output = GraphGenerator(result.milestones, title=project_id).generate(view)

    if output:
        output.write_text(dot_output, encoding="utf-8")
        typer.echo(f"Graph written to {output}")
    else:
        typer.echo(dot_output)


@app.command()
def add(  # noqa: PLR0913 - CLI command needs multiple options
    file: ProjectFileArg,
    *,
    milestone_id: Annotated[str, typer.Option("--id", help="Milestone ID")],
    name: Annotated[str, typer.Option("--name", help="Milestone name")],
    project: ProjectOption = None,
    duration: Annotated[int | None, typer.Option("--duration", help="Duration in days")] = None,
    start_date: Annotated[
        str | None, typer.Option("--start-date", help="Fixed start date (YYYY-MM-DD)")
    ] = None,
    end_date: Annotated[
        str | None, typer.Option("--end-date", help="Fixed end date (YYYY-MM-DD)")
    ] = None,
    depends_on: Annotated[
        list[str] | None,
        typer.Option("--depends-on", "-d", help="ID of a milestone this one depends on"),
    ] = None,
) -> None:
    """Add a milestone and recalculate the project."""
    parsed_start = _parse_date_option(start_date, "--start-date")
    parsed_end = _parse_date_option(end_date, "--end-date")

    with _exit_on_error():
        project_id = resolve_project_id(load_project_file(file), project)
        created = _service(file).create_milestone(
            project_id,
            Milestone(
                id=milestone_id,
                project_id=project_id,
                name=name,
                start_date=parsed_start,
                end_date=parsed_end,
                duration=duration,
                dependencies=depends_on or [],
            ),
        )

    critical = " (critical)" if created.is_critical else ""
    typer.echo(
        f"Added {created.id}: {_fmt(created.earliest_start)} - "
        f"{_fmt(created.earliest_finish)}, slack {created.slack}{critical}"
    )


@app.command()
def delete(
    file: ProjectFileArg,
    milestone_id: Annotated[str, typer.Argument(help="ID of the milestone to delete")],
    *,
    project: ProjectOption = None,
    replacement: Annotated[
        str | None,
        typer.Option("--replacement", help="Dependency that dependents should use instead"),
    ] = None,
    no_replacement: Annotated[
        bool,
        typer.Option("--no-replacement", help="Drop the dependency from dependents"),
    ] = False,
    accept_suggestion: Annotated[
        bool,
        typer.Option("--accept-suggestion", help="Apply the suggested reassignment"),
    ] = False,
) -> None:
    """Delete a milestone, reassigning the milestones that depend on it."""
    chosen = [replacement is not None, no_replacement, accept_suggestion]
    if sum(chosen) > 1:
        typer.echo(
            "Error: Use only one of --replacement, --no-replacement, --accept-suggestion",
            err=True,
        )
        raise typer.Exit(1)

    with _exit_on_error():
        project_id = resolve_project_id(load_project_file(file), project)
        service = _service(file)

        decision: ReassignmentDecision | None = None
        if replacement is not None:
            decision = ReassignmentDecision.replace_with(replacement)
        elif no_replacement:
            decision = ReassignmentDecision.no_replacement()
        elif accept_suggestion:
            decision = ReassignmentDecision.accept(service.plan_deletion(project_id, milestone_id))

        outcome = service.delete_milestone(project_id, milestone_id, decision)

    typer.echo(f"Deleted {outcome.deleted_id}")
    if outcome.reassigned_ids:
        target = decision.replacement_id if decision and decision.replacement_id else "nothing"
        typer.echo(f"Re-pointed {', '.join(outcome.reassigned_ids)} to {target}")


def main() -> int:
    """Main entry point."""
    app()
    return 0


if __name__ == "__main__":
    main()
