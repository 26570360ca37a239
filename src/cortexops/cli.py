"""Command line interface for cortexops."""

import logging
from pathlib import Path
from typing import Optional

import typer
import yaml
from pydantic import ValidationError

from cortexops.common.config import Config
from cortexops.common.exceptions import CompositionError
from cortexops.composer.assembler import PlaybookAssembler
from cortexops.composer.batch import BatchRunner, load_jobs
from cortexops.composer.builder import ProjectBuilder
from cortexops.composer.catalog import default_catalog
from cortexops.composer.engine import CompositionEngine
from cortexops.composer.export import to_zip_bytes, write_project
from cortexops.composer.router import route_for
from cortexops.composer.validation import TextValidator

app = typer.Typer(help="Compose Ansible projects from a catalog of roles.")


def _builder(config: Config) -> ProjectBuilder:
    catalog = default_catalog(config.TEMPLATES_DIR)
    engine = CompositionEngine(
        catalog,
        assembler=PlaybookAssembler(app_name=config.APP_NAME),
    )
    return ProjectBuilder(engine)


def _fail(error: CompositionError) -> None:
    """Print a composition error and exit: 2 for bad input, 1 otherwise."""
    if error.is_input_error:
        typer.echo(f"Input error: {error}", err=True)
        raise SystemExit(2)
    typer.echo(f"Error: {error}", err=True)
    raise SystemExit(1)


@app.callback()
def main(
    ctx: typer.Context,
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level (default: LOG_LEVEL setting)."
    ),
) -> None:
    """Load settings and configure logging for every command."""
    config = Config()
    if log_level:
        config.LOG_LEVEL = log_level.upper()

    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    ctx.obj = config


@app.command(name="roles")
def list_roles(ctx: typer.Context) -> None:
    """List catalog roles with their category and host group."""
    config: Config = ctx.obj
    catalog = default_catalog(config.TEMPLATES_DIR)

    for descriptor in catalog.describe():
        typer.echo(
            f"{descriptor.role_id:<18} {descriptor.title:<20} "
            f"{descriptor.category:<16} {route_for(descriptor.role_id)}"
        )

    aliases = catalog.aliases()
    if aliases:
        typer.echo("")
        typer.echo("Aliases:")
        for alias, target in sorted(aliases.items()):
            typer.echo(f"  {alias} -> {target}")
    typer.echo("")
    typer.echo("Custom roles: custom:<name> scaffolds a new role called <name>")


@app.command()
def generate(
    ctx: typer.Context,
    roles: list[str] = typer.Argument(..., help="Role ids in execution order."),
    env: Optional[str] = typer.Option(
        None, "--env", "-e", help="staging or production (default: DEFAULT_ENVIRONMENT)."
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Output directory (default: OUTPUT_DIR)."
    ),
    zip_path: Optional[Path] = typer.Option(
        None, "--zip", help="Write a zip archive to this path instead of a directory."
    ),
    all_environments: bool = typer.Option(
        False, "--all-environments", help="Include inventories for every environment."
    ),
    overwrite: bool = typer.Option(False, "--overwrite", help="Replace existing files."),
) -> None:
    """Compose a project and write it to disk."""
    config: Config = ctx.obj
    environment = env or config.DEFAULT_ENVIRONMENT

    try:
        project = _builder(config).build(roles, environment, all_environments=all_environments)
    except CompositionError as e:
        _fail(e)

    if zip_path is not None:
        if zip_path.exists() and not overwrite:
            typer.echo(f"Error: {zip_path} already exists (use --overwrite)", err=True)
            raise SystemExit(1)
        zip_path.parent.mkdir(parents=True, exist_ok=True)
        zip_path.write_bytes(to_zip_bytes(project, root=Path(config.OUTPUT_DIR).name))
        typer.echo(f"Wrote {zip_path}")
        return

    output_dir = output or Path(config.OUTPUT_DIR)
    written = write_project(project, output_dir, overwrite=overwrite)
    typer.echo(
        f"Generated {len(project.roles)} role(s) for {project.environment.value}: "
        f"{len(written)} file(s) written to {output_dir}"
    )
    for entry in project.plan:
        typer.echo(f"  {entry.name} -> {entry.host_group}")


@app.command()
def batch(
    ctx: typer.Context,
    jobs_file: Path = typer.Argument(..., help="YAML or JSON file listing jobs."),
    output_dir: Optional[Path] = typer.Option(
        None, "--output-dir", "-o", help="Parent directory for job outputs (default: OUTPUT_DIR)."
    ),
    parallel: Optional[int] = typer.Option(
        None, "--parallel", "-p", help="Worker count (default: BATCH_MAX_WORKERS)."
    ),
    fail_fast: bool = typer.Option(False, "--fail-fast", help="Stop at the first failed job."),
    overwrite: bool = typer.Option(False, "--overwrite", help="Replace existing files."),
) -> None:
    """Compose every job in a batch file, one output directory per job."""
    config: Config = ctx.obj

    try:
        jobs = load_jobs(jobs_file, default_environment=config.DEFAULT_ENVIRONMENT)
    except (OSError, ValueError, ValidationError, yaml.YAMLError) as e:
        typer.echo(f"Input error: cannot read batch file {jobs_file}: {e}", err=True)
        raise SystemExit(2)

    base_dir = output_dir or Path(config.OUTPUT_DIR)
    runner = BatchRunner(
        _builder(config),
        max_workers=parallel or config.BATCH_MAX_WORKERS,
        fail_fast=fail_fast,
    )

    def _write(job, project):
        write_project(project, base_dir / job.name, overwrite=overwrite)

    try:
        report = runner.run(jobs, on_result=_write)
    except CompositionError as e:
        _fail(e)
    except OSError as e:
        typer.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    typer.echo(f"Batch finished: {report.succeeded} succeeded, {report.failed} failed")
    for error in report.errors:
        typer.echo(f"  {error.job}: {error.error}", err=True)
    if report.failed:
        raise SystemExit(1)


@app.command()
def validate(
    ctx: typer.Context,
    roles: list[str] = typer.Argument(..., help="Role ids in execution order."),
    env: Optional[str] = typer.Option(
        None, "--env", "-e", help="staging or production (default: DEFAULT_ENVIRONMENT)."
    ),
) -> None:
    """Compose a project in memory and check every generated file parses."""
    config: Config = ctx.obj

    try:
        project = _builder(config).build(roles, env or config.DEFAULT_ENVIRONMENT)
    except CompositionError as e:
        _fail(e)

    issues = TextValidator().validate_project(project)
    if issues:
        for issue in issues:
            typer.echo(f"{issue.path}: {issue.message}", err=True)
        raise SystemExit(1)

    typer.echo(f"OK: {len(project.files())} file(s) well-formed")
