from datetime import date
from pathlib import Path

import click
from rich import pretty
from rich.console import Console
from rich.table import Table
from textx.exceptions import TextXError

from servicegen import __version__
from servicegen.api.gen_logging import configure_gen_logging
from servicegen.api.generator import check_schema, generate, resolve_targets
from servicegen.api.generators import BACKENDS
from servicegen.api.pipeline import extract_services
from servicegen.config import get_settings
from servicegen.errors import GenerationFailed, SchemaMismatch
from servicegen.language import build_model

pretty.install()
console = Console()


def _today():
    return date.today().strftime('%Y-%m-%d')


def report_failure(action, error):
    """Print every diagnostic of a failed run in red."""
    if isinstance(error, GenerationFailed):
        console.print(
            f"[{_today()}] {action} failed for '{error.block}' with {len(error.errors)} error(s):",
            style="red",
        )
        for e in error.errors:
            console.print(f"  - {e.format()}", style="red", markup=False)
    else:
        console.print(f"[{_today()}] {action} failed with error(s): {error}", style="red", markup=False)


def load_services(model_path):
    return extract_services(build_model(model_path), get_settings())


@click.group()
@click.version_option(__version__, prog_name="svcgen")
@click.option("-v", "--verbose", is_flag=True, help="Log per-method detail (overrides SVCGEN_LOG_LEVEL).")
@click.option("-q", "--quiet", is_flag=True, help="Only log warnings and errors (overrides SVCGEN_LOG_LEVEL).")
@click.pass_context
def cli(context, verbose, quiet):
    context.ensure_object(dict)
    configure_gen_logging(verbose=verbose, quiet=quiet, settings=get_settings())


@cli.command("validate", help="Parse and extract every service block of a model.")
@click.pass_context
@click.argument("model_path")
def validate(context, model_path):
    try:
        services = load_services(model_path)
    except (GenerationFailed, TextXError, OSError) as e:
        report_failure("Validation", e)
        context.exit(1)
    names = ", ".join(s.name for s in services)
    console.print(f"[{_today()}] Model validation success! ({names})", style='green')


@cli.command("inspect", help="Print the operations, roles and shapes of every service.")
@click.pass_context
@click.argument("model_path")
def inspect_cmd(context, model_path):
    try:
        services = load_services(model_path)
    except (GenerationFailed, TextXError, OSError) as e:
        report_failure("Inspect", e)
        context.exit(1)

    for service in services:
        table = Table(title=service.name, show_lines=False)
        table.add_column("Method", style="cyan")
        table.add_column("Kind")
        table.add_column("Route", style="green")
        table.add_column("Parameters")
        table.add_column("Returns")
        table.add_column("Visibility")
        for method, op in zip(service.methods, service.operations):
            params = ", ".join(f"{p.wire_name}:{p.role.value}" for p in method.params)
            prefix = "async " if method.is_asynchronous else ""
            table.add_row(
                f"{prefix}{method.name}",
                op.kind.value,
                f"{op.verb} {op.path}",
                params or "-",
                method.return_shape.describe(),
                op.visibility.value,
            )
        console.print(table)


@cli.command("generate", help="Emit artifacts for one or more backends.")
@click.pass_context
@click.argument("model_path")
@click.option(
    "--target", "-t", "targets",
    multiple=True,
    help="Backend to generate (repeatable, or 'all'). Default: configured targets.",
)
@click.option("--out", "out_dir", default=None, help="Output directory (default: ./generated)")
def generate_cmd(context, model_path, targets, out_dir):
    settings = get_settings()
    try:
        model = build_model(model_path)
        out_path = Path(out_dir or settings.OUTPUT_DIR).resolve()
        written = generate(model, list(targets), out_path, settings)
    except (GenerationFailed, TextXError, OSError) as e:
        report_failure("Generate", e)
        context.exit(1)
    console.print(f"[{_today()}] {len(written)} file(s) emitted to: {out_path}", style="green")


@cli.command("check", help="Fail when an emitted artifact no longer matches the model.")
@click.pass_context
@click.argument("model_path")
@click.option("--target", "target", required=True, help="Backend that produced the artifact.")
@click.option("--against", "against", required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--service", "service_name", default=None, help="Service block to check (default: first).")
def check_cmd(context, model_path, target, against, service_name):
    try:
        resolve_targets([target])
        services = load_services(model_path)
        if not services:
            raise click.BadParameter(f"'{model_path}' declares no service", param_hint="MODEL_PATH")
        service = services[0]
        if service_name is not None:
            matches = [s for s in services if s.name == service_name]
            if not matches:
                raise click.BadParameter(f"No service named '{service_name}'", param_hint="--service")
            service = matches[0]
        check_schema(service, target, against)
    except SchemaMismatch as e:
        console.print(f"[{_today()}] Schema drift detected: {e.message}", style="red", markup=False)
        for line in e.hints:
            console.print(f"  {line}", style="red", markup=False)
        context.exit(1)
    except (GenerationFailed, TextXError, OSError) as e:
        report_failure("Check", e)
        context.exit(1)
    console.print(f"[{_today()}] {against} is up to date.", style="green")


@cli.command("backends", help="List the available backends.")
def backends_cmd():
    table = Table(title="Backends")
    table.add_column("Name", style="cyan")
    table.add_column("Streaming")
    table.add_column("Description")
    for backend in BACKENDS.values():
        table.add_row(backend.name, "yes" if backend.supports_streaming else "no", backend.description)
    console.print(table)


def main():
    cli(prog_name="svcgen")


if __name__ == "__main__":
    main()
