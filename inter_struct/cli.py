import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .errors import ConfigurationError
from .expand import Expansion, expand
from .settings import load_settings

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    name="inter-struct",
    help="inter-struct CLI: synthesize field mappings between record classes.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

FileArg = Annotated[Path, typer.Argument(help="Source file declaring the class.")]
ClassArg = Annotated[str, typer.Argument(help="Name of the annotated source class.")]
ModeOpt = Annotated[
    Optional[list[str]],
    typer.Option("--mode", "-m", help="Mode to generate (repeatable). Defaults to all annotated modes."),
]
RootOpt = Annotated[Optional[Path], typer.Option(help="Project root directory.")]
ResolverOpt = Annotated[Optional[str], typer.Option(help="Target resolution: registry or filesystem.")]


def _run(
    file: Path,
    class_name: str,
    mode: Optional[list[str]],
    root: Optional[Path],
    resolver: Optional[str],
) -> Expansion:
    try:
        settings = load_settings(root_dir=root, resolver=resolver)
    except ConfigurationError as e:
        err_console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=2)

    logging.basicConfig(level=settings.log_level.upper())
    try:
        return expand(file, class_name, modes=mode, settings=settings)
    except ValueError as e:
        err_console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=2)


def _report(expansion: Expansion) -> None:
    for diagnostic in expansion.diagnostics:
        err_console.print(f"[red]{escape(str(diagnostic))}[/red]", highlight=False, soft_wrap=True)
    if expansion.has_errors:
        raise typer.Exit(code=1)


@app.command("expand")
def expand_command(
    file: FileArg,
    class_name: ClassArg,
    mode: ModeOpt = None,
    root: RootOpt = None,
    resolver: ResolverOpt = None,
    output: Annotated[Optional[Path], typer.Option("--output", "-o", help="Write the code to a file.")] = None,
) -> None:
    """Print the generated mapping functions."""
    expansion = _run(file, class_name, mode, root, resolver)
    code = expansion.render()
    if output is not None:
        output.write_text(code, encoding="utf-8")
        console.print(f"[green]Wrote[/green] {len(expansion.plans)} functions to {escape(str(output))}")
    else:
        console.print(code, markup=False, highlight=False, soft_wrap=True)
    _report(expansion)


@app.command("plan")
def plan_command(
    file: FileArg,
    class_name: ClassArg,
    mode: ModeOpt = None,
    root: RootOpt = None,
    resolver: ResolverOpt = None,
) -> None:
    """Show the field actions of every plan."""
    expansion = _run(file, class_name, mode, root, resolver)
    for plan in expansion.plans:
        table = Table(title=escape(str(plan)))
        table.add_column("Field")
        table.add_column("Action")
        table.add_column("Flags")
        for action in plan.actions:
            flags = [
                name
                for name, on in (
                    ("clone", action.clone),
                    ("if-absent", action.only_if_absent),
                    ("eager-clone", action.eager_clone),
                )
                if on
            ]
            table.add_row(action.target, action.kind.value, ", ".join(flags))
        for name in plan.uncovered:
            table.add_row(name, "[dim]uncovered[/dim]", "")
        console.print(table)
    _report(expansion)


def main() -> None:
    app()
