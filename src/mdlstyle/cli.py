from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from mdlstyle import __version__
from mdlstyle.config import ConfigError, ProjectSettings, find_style_file, load_file, load_settings
from mdlstyle.logging_utils import configure_logging
from mdlstyle.types import ResolvedRuleSet

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="mdlstyle — load and inspect Markdown lint style files.",
)
console = Console()
err_console = Console(stderr=True)
logger = logging.getLogger(__name__)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def _main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Verbose logs (printed to stderr)."),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Reduce non-essential output."),
    ] = False,
) -> None:
    """mdlstyle CLI."""

    if verbose and quiet:
        raise typer.BadParameter("Choose at most one: --verbose or --quiet.")
    configure_logging(verbose=verbose, quiet=quiet)
    ctx.obj = {"verbose": verbose, "quiet": quiet}


def _cli_settings(ctx: typer.Context) -> dict[str, bool]:
    obj = ctx.find_root().obj
    if not isinstance(obj, dict):
        return {"verbose": False, "quiet": False}
    return {"verbose": bool(obj.get("verbose", False)), "quiet": bool(obj.get("quiet", False))}


_StyleArgument = Annotated[
    Path | None,
    typer.Argument(
        dir_okay=False,
        help="Style file (default: discovered from [tool.mdlstyle] or markdownlint.rb).",
    ),
]
_ProjectOption = Annotated[
    Path,
    typer.Option(
        "--path",
        exists=True,
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
        help="Project directory used to discover settings (default: current directory).",
    ),
]


def _load_style(style: Path | None, project_dir: Path) -> tuple[Path, ResolvedRuleSet, ProjectSettings]:
    try:
        settings = load_settings(project_dir)
        style_path = style if style is not None else find_style_file(project_dir, settings)
        if style_path is None:
            err_console.print(
                f"No style file found in {project_dir}. Pass one explicitly or set `tool.mdlstyle.style`.",
                markup=False,
                soft_wrap=True,
            )
            raise typer.Exit(code=2)
        logger.debug("using style file %s", style_path)
        return style_path, load_file(style_path), settings
    except ConfigError as exc:
        err_console.print(f"Invalid style configuration: {exc}", markup=False, soft_wrap=True)
        raise typer.Exit(code=2) from exc


@app.command()
def check(
    ctx: typer.Context,
    style: _StyleArgument = None,
    path: _ProjectOption = Path("."),
    strict: Annotated[
        bool | None,
        typer.Option("--strict/--no-strict", help="Fail on rule ids unknown to the catalog (default: from config)."),
    ] = None,
) -> None:
    """
    Load a style file and report problems.

    Exit codes: 0 ok, 1 unknown rule ids in strict mode, 2 invalid style file.
    """

    from mdlstyle.catalog import rule_ids
    from mdlstyle.evaluator import validate_rule_ids

    style_path, ruleset, settings = _load_style(style, path)
    unknown = validate_rule_ids(ruleset, rule_ids(settings.extra_rules))
    effective_strict = settings.strict if strict is None else strict

    if not _cli_settings(ctx)["quiet"]:
        console.print(
            f"{style_path}: all={'yes' if ruleset.default_enabled else 'no'}, "
            f"{len(ruleset.disabled)} excluded, {len(ruleset.overrides)} configured",
            markup=False,
            soft_wrap=True,
        )
    if unknown and effective_strict:
        err_console.print(f"Unknown rule id(s): {', '.join(unknown)}", markup=False, soft_wrap=True)
        raise typer.Exit(code=1)


@app.command()
def show(
    style: _StyleArgument = None,
    path: _ProjectOption = Path("."),
    output_format: Annotated[
        str,
        typer.Option("--format", help="Output format: terminal, json, style.", show_default=True),
    ] = "terminal",
    enabled_only: Annotated[
        bool,
        typer.Option("--enabled-only", help="Only show rules enabled by the style."),
    ] = False,
) -> None:
    """
    Show the resolved rule set of a style file.
    """

    from rich.table import Table

    from mdlstyle.catalog import all_rules
    from mdlstyle.evaluator import is_rule_enabled
    from mdlstyle.serialize import dump_style, render_json

    normalized = output_format.strip().lower()
    if normalized not in {"terminal", "json", "style"}:
        raise typer.BadParameter("Unsupported format. Use: terminal, json, style.")

    _style_path, ruleset, settings = _load_style(style, path)
    if normalized == "json":
        typer.echo(render_json(ruleset))
        return
    if normalized == "style":
        typer.echo(dump_style(ruleset), nl=False)
        return

    # Configured ids outside the catalog are still listed so typos stay visible.
    known = {r.rule_id: r.title for r in all_rules(settings.extra_rules)}
    for rule_id in sorted(set(ruleset.overrides) | set(ruleset.disabled)):
        known.setdefault(rule_id, "(unknown rule)")

    table = Table(title="Markdown lint style")
    table.add_column("ID", style="bold", no_wrap=True)
    table.add_column("Enabled", justify="center")
    table.add_column("Options")
    table.add_column("Title")
    for rule_id in sorted(known):
        enabled = is_rule_enabled(ruleset, rule_id)
        if enabled_only and not enabled:
            continue
        options = ruleset.overrides.get(rule_id, {})
        table.add_row(
            rule_id,
            "yes" if enabled else "no",
            ", ".join(f"{k}={v!r}" for k, v in options.items()) or "-",
            known[rule_id],
        )
    console.print(table)


@app.command()
def rules(
    path: _ProjectOption = Path("."),
    output_format: Annotated[
        str,
        typer.Option("--format", help="Output format: terminal, json.", show_default=True),
    ] = "terminal",
) -> None:
    """
    List known rule ids (built-in catalog + `tool.mdlstyle.extra-rules`).
    """

    from rich.table import Table

    from mdlstyle.catalog import all_rules

    try:
        settings = load_settings(path)
    except ConfigError as exc:
        err_console.print(f"Invalid configuration: {exc}", markup=False, soft_wrap=True)
        raise typer.Exit(code=2) from exc

    rows = [{"rule_id": r.rule_id, "title": r.title} for r in all_rules(settings.extra_rules)]

    normalized = output_format.strip().lower()
    if normalized == "json":
        typer.echo(json.dumps(rows, indent=2, sort_keys=True))
        return
    if normalized != "terminal":
        raise typer.BadParameter("Unsupported format. Use: terminal, json.")

    table = Table(title="Markdown lint rules")
    table.add_column("ID", style="bold", no_wrap=True)
    table.add_column("Title")
    for row in rows:
        table.add_row(row["rule_id"], row["title"])
    console.print(table)
