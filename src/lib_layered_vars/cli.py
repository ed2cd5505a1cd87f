"""CLI adapter for ``lib_layered_vars`` built on ``lib_cli_exit_tools``.

Purpose
-------
Expose profile resolution through a command line interface so operators can
inspect what a consumer would receive (eager values, deferred templates,
override provenance) and render deferred entries without writing Python.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command wiring traceback handling into
  ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata.
* :func:`cli_resolve` – resolves a profile and prints the export as JSON.
* :func:`cli_render` – resolves, then renders one deferred entry.
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
Outermost layer. Builds a :class:`ConsumerContext` plus override mappings from
options and calls :func:`lib_layered_vars.core.resolve`. Resolution errors
propagate to ``lib_cli_exit_tools`` which owns exit codes and traceback
rendering.
"""

from __future__ import annotations

import json
import sys
from importlib import metadata
from pathlib import Path
from typing import Any, Callable, Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .adapters.layer_sources.structured import ProfileFileSource
from .adapters.overrides import load_override_file, parse_assignments
from .core import resolve
from .domain.model import SKIP_LAYER, ConsumerContext, OverrideSource
from .domain.resolution import Resolution

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000


def _resolve_version() -> str:
    """Return the installed package version, or ``"0.0.0"`` for source checkouts."""

    try:
        return metadata.version("lib_layered_vars")
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="Profile-aware layered variable resolver",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name="lib_layered_vars",
    message="lib_layered_vars version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool) -> None:
    """Root command configuring traceback handling for all subcommands.

    Side Effects
        Mutates ``lib_cli_exit_tools.config.traceback`` and
        ``lib_cli_exit_tools.config.traceback_force_color``.
    """

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata("lib_layered_vars")
    except metadata.PackageNotFoundError:
        click.echo("lib_layered_vars (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', 'lib_layered_vars')}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.11')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")


_LAYER_PATH = click.Path(path_type=str, file_okay=False, dir_okay=True)
_OVERRIDE_FILE = click.Path(path_type=Path, exists=True, file_okay=True, dir_okay=False, readable=True)


def _resolution_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the options shared by ``resolve`` and ``render``."""

    options = [
        click.option("--consumer", "consumer_id", required=True, help="Consumer identifier (also the prefix)"),
        click.option("--profile", "active_profile", required=True, help="Candidate active profile"),
        click.option("--profiles", "profile_list", multiple=True, required=True, help="Permitted profile (repeatable)"),
        click.option("--fallback", "fallback_profile", default=None, help="Profile used when the candidate is rejected"),
        click.option("--defaults", "defaults_path", type=_LAYER_PATH, required=True, help=f"Defaults layer directory or '{SKIP_LAYER}'"),
        click.option("--instant", "instant_path", type=_LAYER_PATH, required=True, help=f"Instant layer directory or '{SKIP_LAYER}'"),
        click.option("--deferred", "deferred_path", type=_LAYER_PATH, required=True, help=f"Deferred layer directory or '{SKIP_LAYER}'"),
        click.option("--prefix/--no-prefix", "prefix_enabled", default=False, show_default=True, help="Prefix exported names with the consumer id"),
        click.option("--strict/--no-strict", default=False, show_default=True, help="Reject layer files lacking the existence marker"),
        click.option("--inventory", "inventory_file", type=_OVERRIDE_FILE, default=None, help="Inventory override file"),
        click.option("--caller-scope", "caller_scope_file", type=_OVERRIDE_FILE, default=None, help="Caller-scope override file"),
        click.option("--call-site", "call_site_file", type=_OVERRIDE_FILE, default=None, help="Call-site override file"),
        click.option("--set", "assignments", multiple=True, help="Call-site override KEY=VALUE (repeatable)"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@cli.command("resolve", context_settings=CLICK_CONTEXT_SETTINGS)
@_resolution_options
@click.option("--indent", type=int, default=None, help="Pretty-print JSON output with the provided indent size")
@click.option(
    "--provenance/--no-provenance",
    default=False,
    help="Include provenance and override notes in the output",
)
def cli_resolve(indent: Optional[int], provenance: bool, **options: Any) -> None:
    """Resolve a profile and print eager variables plus deferred templates as JSON."""

    resolution = _run_resolution(options)
    exported = resolution.variables.as_dict()
    exported[resolution.container_name] = resolution.deferred.templates()
    if not provenance:
        click.echo(json.dumps(exported, indent=indent, separators=(",", ":"), default=str))
        return
    payload = {
        "profile": resolution.profile,
        "variables": exported,
        "provenance": resolution.variables.provenance(),
        "overridden": {key: source.name.lower() for key, source in resolution.overridden.items()},
    }
    click.echo(json.dumps(payload, indent=indent, separators=(",", ":"), default=str))


@cli.command("render", context_settings=CLICK_CONTEXT_SETTINGS)
@_resolution_options
@click.option("--env", "env_assignments", multiple=True, help="Access-time variable change KEY=VALUE (repeatable)")
@click.argument("key")
def cli_render(key: str, env_assignments: Sequence[str], **options: Any) -> None:
    """Resolve a profile, then render deferred entry KEY.

    The entry renders against the eager variables and override values, with
    ``--env`` changes applied on top as they would be at access time.
    """

    resolution = _run_resolution(options)
    if key not in resolution.deferred:
        known = ", ".join(sorted(resolution.deferred)) or "none"
        raise click.BadParameter(f"{key!r} is not a deferred variable (known: {known})", param_hint="KEY")
    try:
        updates = parse_assignments(env_assignments)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--env") from exc
    environment = resolution.live_environment(updates)
    value = resolution.render(key, environment)
    click.echo(value if isinstance(value, str) else json.dumps(value, default=str))


def _run_resolution(options: dict[str, Any]) -> Resolution:
    """Build context and overrides from CLI *options* and resolve."""

    strict = options.pop("strict")
    overrides = _collect_overrides(
        inventory=options.pop("inventory_file"),
        caller_scope=options.pop("caller_scope_file"),
        call_site=options.pop("call_site_file"),
        assignments=options.pop("assignments"),
    )
    context = ConsumerContext.from_mapping(options)
    return resolve(context, source=ProfileFileSource(strict=strict), overrides=overrides)


def _collect_overrides(
    *,
    inventory: Optional[Path],
    caller_scope: Optional[Path],
    call_site: Optional[Path],
    assignments: Sequence[str],
) -> dict[OverrideSource, dict[str, Any]]:
    """Load override files and ``--set`` pairs, keyed by source."""

    overrides: dict[OverrideSource, dict[str, Any]] = {}
    for source, path in (
        (OverrideSource.INVENTORY, inventory),
        (OverrideSource.CALLER_SCOPE, caller_scope),
        (OverrideSource.CALL_SITE, call_site),
    ):
        if path is not None:
            overrides[source] = dict(load_override_file(str(path)))
    try:
        pairs = parse_assignments(assignments)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--set") from exc
    if pairs:
        overrides.setdefault(OverrideSource.CALL_SITE, {}).update(pairs)
    return overrides


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name="lib_layered_vars",
            )
        except BaseException as exc:  # noqa: BLE001 - funnel through shared printers
            lib_cli_exit_tools.print_exception_message(
                trace_back=lib_cli_exit_tools.config.traceback,
                length_limit=(
                    _TRACEBACK_VERBOSE_LIMIT if lib_cli_exit_tools.config.traceback else _TRACEBACK_SUMMARY_LIMIT
                ),
            )
            return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))
