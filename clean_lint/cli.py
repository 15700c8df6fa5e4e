"""CLI entry point: command definitions using Click.

Commands:
    check         Lint files and directories, exit 1 on failing diagnostics
    rules         List every registered rule
    explain       Describe one rule and its defaults
    init          Generate a template config file
"""

import json
import sys
from typing import Any

import click

from clean_lint import __version__
from clean_lint.models import SEVERITIES, severity_rank

_FORMATS = ("text", "json", "github")


# ---------------------------------------------------------------------------
# Helpers shared by all commands
# ---------------------------------------------------------------------------

def _load_config(ctx: click.Context):
    """Load the configuration named by --config. Exits on error."""
    from clean_lint.config import ConfigError, load

    obj = ctx.obj
    try:
        config = load(obj["config_path"], required=obj["config_explicit"])
    except ConfigError as exc:
        click.echo(f"Configuration error: {exc}", err=True)
        sys.exit(1)

    if obj["verbose"]:
        source = config.source or "built-in defaults"
        click.echo(f"[verbose] Using configuration from {source}", err=True)

    return config


def _emit(text: str, ctx: click.Context) -> None:
    """Write *text* to stdout or to the file specified by --output."""
    output_path: str | None = ctx.obj["output_path"]
    if output_path:
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(text + "\n")
        click.echo(f"Report written to '{output_path}'", err=True)
    else:
        click.echo(text)


def _emit_json(data: Any, ctx: click.Context) -> None:
    indent = 2 if ctx.obj["pretty"] else None
    _emit(json.dumps(data, indent=indent, ensure_ascii=False), ctx)


def _handle_lint_errors(func):
    """Decorator that catches linter exceptions and exits cleanly."""
    import functools

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        from clean_lint.evaluator import RuleExecutionError
        from clean_lint.registry import RegistryError
        from clean_lint.walker import SourceNotFoundError

        try:
            return func(*args, **kwargs)
        except SourceNotFoundError as exc:
            click.echo(f"Input error: {exc}", err=True)
            sys.exit(1)
        except RegistryError as exc:
            click.echo(f"Rule error: {exc}", err=True)
            sys.exit(1)
        except RuleExecutionError as exc:
            click.echo(f"Internal error: {exc}", err=True)
            sys.exit(1)

    return wrapper


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------

@click.group()
@click.option("--config", "config_path", default=None,
              help="Path to the configuration file.  [default: .clean-lint.yaml if present]")
@click.option("--output", "output_path", default=None,
              help="Write the report to a file instead of stdout.")
@click.option("--pretty", is_flag=True, default=False,
              help="Pretty-print JSON output.")
@click.option("--verbose", is_flag=True, default=False,
              help="Enable verbose logging.")
@click.version_option(__version__, prog_name="clean-lint")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, output_path: str | None,
        pretty: bool, verbose: bool) -> None:
    """Clean code linter. Check Python code against clean-code heuristics."""
    from clean_lint.config import DEFAULT_CONFIG_PATH

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path or DEFAULT_CONFIG_PATH
    ctx.obj["config_explicit"] = config_path is not None
    ctx.obj["output_path"] = output_path
    ctx.obj["pretty"] = pretty
    ctx.obj["verbose"] = verbose


# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------

@cli.command("check")
@click.argument("paths", nargs=-1)
@click.option("--format", "output_format", type=click.Choice(_FORMATS), default="text", show_default=True,
              help="Report format.")
@click.option("--min-severity", type=click.Choice(SEVERITIES), default=None,
              help="Hide diagnostics below this severity (overrides config).")
@click.option("--fail-on", type=click.Choice(SEVERITIES), default=None,
              help="Exit 1 when a diagnostic at or above this severity is found (overrides config).")
@click.option("--exclude", multiple=True,
              help="Glob pattern of files to skip (repeatable).")
@click.pass_context
@_handle_lint_errors
def check_command(ctx: click.Context, paths: tuple[str, ...], output_format: str,
                  min_severity: str | None, fail_on: str | None, exclude: tuple[str, ...]) -> None:
    """Lint PATHS (files or directories, default: current directory)."""
    from clean_lint.evaluator import Evaluator
    from clean_lint.reports.diagnostics import build_report
    from clean_lint.reports.text import format_github, format_text

    config = _load_config(ctx)
    if min_severity:
        config.min_severity = min_severity
    if fail_on:
        config.fail_on = fail_on
    config.exclude.extend(exclude)

    targets = list(paths) or ["."]
    evaluator = Evaluator(config)

    if ctx.obj["verbose"]:
        click.echo(
            f"[verbose] Checking {', '.join(targets)} with {len(evaluator.active)} rule(s)",
            err=True,
        )

    result = evaluator.lint_paths(targets)

    if ctx.obj["verbose"]:
        click.echo(f"[verbose] Scanned {len(result.files)} file(s)", err=True)

    if output_format == "json":
        _emit_json(build_report(result, targets), ctx)
    elif output_format == "github":
        _emit(format_github(result), ctx)
    else:
        _emit(format_text(result), ctx)

    threshold = severity_rank(config.fail_on)
    if any(severity_rank(d.severity) >= threshold for d in result.diagnostics):
        sys.exit(1)


# ---------------------------------------------------------------------------
# rules / explain
# ---------------------------------------------------------------------------

@cli.command("rules")
@click.option("--json", "as_json", is_flag=True, default=False, help="List rules as JSON.")
@click.pass_context
def rules_command(ctx: click.Context, as_json: bool) -> None:
    """List every registered rule."""
    from clean_lint.reports.text import format_rules
    from clean_lint.rules import REGISTRY

    if as_json:
        _emit_json([_rule_dict(rule) for rule in REGISTRY], ctx)
    else:
        _emit(format_rules(REGISTRY), ctx)


@cli.command("explain")
@click.argument("rule_id")
@click.pass_context
@_handle_lint_errors
def explain_command(ctx: click.Context, rule_id: str) -> None:
    """Describe RULE_ID: the heuristic, its severity and default options."""
    from clean_lint.rules import REGISTRY

    rule = REGISTRY.get(rule_id)
    lines = [
        f"{rule.id}: {rule.name}",
        f"category: {rule.category}",
        f"severity: {rule.severity}",
        "",
        rule.description,
    ]
    if rule.options:
        lines.append("")
        lines.append("options:")
        lines.extend(f"  {key}: {json.dumps(value)}" for key, value in rule.options.items())
    _emit("\n".join(lines), ctx)


def _rule_dict(rule) -> dict:
    return {
        "id": rule.id,
        "name": rule.name,
        "category": rule.category,
        "severity": rule.severity,
        "description": rule.description,
        "options": rule.options,
    }


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------

@cli.command("init")
@click.option("--output", "output_path", default=".clean-lint.yaml", show_default=True,
              help="Path where the template config file will be written.")
def init_command(output_path: str) -> None:
    """Generate a template .clean-lint.yaml file."""
    from clean_lint.config import ConfigError, generate_template
    try:
        generate_template(output_path)
        click.echo(f"Template written to '{output_path}'.")
        click.echo("Turn rules off or tune their options to match your codebase.")
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
