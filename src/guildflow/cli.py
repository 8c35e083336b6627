# src/guildflow/cli.py
"""guildflow Command Line Interface.

Entry point for the guildflow CLI tool. Workflows are JSON (or YAML)
documents; executing a node rewrites the document with the node's new
payload.
"""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path
from typing import Any, Literal

import typer
import yaml
from dynaconf.vendor.ruamel.yaml.parser import ParserError as YamlParserError
from dynaconf.vendor.ruamel.yaml.scanner import ScannerError as YamlScannerError
from pydantic import ValidationError

from guildflow import __version__
from guildflow.contracts import (
    GuildflowError,
    NodeExecutionResult,
    NodeKind,
    ProgressUpdate,
    TemplateResources,
    UnresolvedResourceError,
)
from guildflow.core.config import BOT_TOKEN_ENV_VAR, GuildflowSettings, load_settings
from guildflow.core.dag import GraphStore, GraphValidationError, WorkflowGraph
from guildflow.core.document import dump_document, load_document
from guildflow.core.resources import resources_before

__all__ = ["app"]

app = typer.Typer(
    name="guildflow",
    help="guildflow: provisioning workflows for chat-platform guilds.",
    no_args_is_help=True,
)

OutputFormat = Literal["console", "json", "yaml"]

# Kinds that never talk to the platform and so run without a bot token.
_LOCAL_KINDS = frozenset(
    {
        NodeKind.SET_GAME_FLAG,
        NodeKind.CONDITIONAL_BRANCH,
        NodeKind.SELECT_BRANCH,
        NodeKind.SHUFFLE_ASSIGN,
        NodeKind.RECORD_COMBINATION,
        NodeKind.KANBAN,
    }
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"guildflow version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from a .env file.

    Raises:
        typer.Exit: If an explicit env_file does not exist
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(f"Error: .env file not found: {env_file}", fg=typer.colors.RED, err=True)
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)

    return load_dotenv(override=False)


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
        exists=False,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """guildflow: provisioning workflows for chat-platform guilds."""
    from guildflow.core.logging import configure_logging

    configure_logging(json_output=json_logs, level="DEBUG" if verbose else "INFO")

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho("Warning: --env-file ignored because --no-dotenv is set.", fg=typer.colors.YELLOW, err=True)


# === Helpers ===


def _load_store(workflow: Path) -> GraphStore:
    """Load a workflow file into a graph store, exiting with a message on failure."""
    try:
        document = load_document(workflow)
    except FileNotFoundError:
        typer.echo(f"Error: Workflow file not found: {workflow}", err=True)
        raise typer.Exit(1) from None
    except yaml.YAMLError as e:
        typer.echo(f"YAML syntax error in {workflow}: {e}", err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.echo(f"Invalid workflow document {workflow}:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None
    except ValueError as e:
        typer.echo(f"Invalid workflow document {workflow}: {e}", err=True)
        raise typer.Exit(1) from None

    try:
        return GraphStore.from_document(document)
    except GraphValidationError as e:
        typer.echo(f"Workflow graph error: {e}", err=True)
        raise typer.Exit(1) from None


def _load_settings(settings: Path | None) -> GuildflowSettings:
    """Load a settings file (defaults without one) and apply its logging section."""
    if settings is None:
        return GuildflowSettings()
    try:
        loaded = load_settings(settings.expanduser())
    except (YamlParserError, YamlScannerError) as e:
        typer.echo(f"YAML syntax error in {settings}: {e.problem}", err=True)
        raise typer.Exit(1) from None
    except FileNotFoundError:
        typer.echo(f"Error: Settings file not found: {settings}", err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None

    from guildflow.core.logging import configure_logging

    configure_logging(json_output=loaded.logging.json_output, level=loaded.logging.level)
    return loaded


def _emit(payload: Any, output_format: OutputFormat) -> None:
    """Print a structured payload as JSON or YAML."""
    if output_format == "yaml":
        typer.echo(yaml.safe_dump(payload, allow_unicode=True, sort_keys=False), nl=False)
    else:
        typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))


def _catalog_payload(catalog: TemplateResources) -> dict[str, Any]:
    return {
        "roles": [{"name": r.name, "sourceNodeId": r.source_node_id} for r in catalog.roles],
        "channels": [{"name": c.name, "type": str(c.type), "sourceNodeId": c.source_node_id} for c in catalog.channels],
        "gameFlags": [{"key": f.key, "sourceNodeId": f.source_node_id} for f in catalog.game_flags],
    }


def _result_payload(result: NodeExecutionResult) -> dict[str, Any]:
    return {
        "nodeId": result.node_id,
        "kind": str(result.kind),
        "executed": result.executed,
        "total": result.total,
        "succeeded": result.success_count,
        "failures": [dict(failure) for failure in result.failures],
        "activeHandles": list(result.active_handles),
        "flagsWritten": result.flags_written,
    }


# === Commands ===


@app.command()
def validate(
    workflow: Path = typer.Argument(..., help="Path to the workflow document."),
) -> None:
    """Check a workflow document's structure and report warnings."""
    store = _load_store(workflow)
    graph = WorkflowGraph.from_elements(store.nodes, store.edges)
    try:
        warnings = graph.validate()
    except GraphValidationError as e:
        typer.echo(f"Workflow graph error: {e}", err=True)
        raise typer.Exit(1) from None

    typer.echo(f"Workflow valid: {graph.node_count} nodes, {graph.edge_count} edges")
    for warning in warnings:
        typer.secho(f"  warning [{warning.code}] {warning.message}", fg=typer.colors.YELLOW)


@app.command()
def resources(
    workflow: Path = typer.Argument(..., help="Path to the workflow document."),
    node_id: str = typer.Argument(..., help="Node whose upstream resources to list."),
    output_format: OutputFormat = typer.Option(
        "console",
        "--format",
        "-f",
        help="Output format: 'console', 'json', or 'yaml'.",
    ),
) -> None:
    """List the roles, channels, and flags declared upstream of a node."""
    store = _load_store(workflow)
    try:
        store.get_node(node_id)
    except GraphValidationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    catalog = resources_before(node_id, store.nodes, store.edges)
    if output_format != "console":
        _emit(_catalog_payload(catalog), output_format)
        return

    if catalog.is_empty:
        typer.echo(f"No resources declared upstream of {node_id}.")
        return
    for title, entries in (
        ("Roles", [f"{r.name}  (from {r.source_node_id})" for r in catalog.roles]),
        ("Channels", [f"{c.name} [{c.type}]  (from {c.source_node_id})" for c in catalog.channels]),
        ("Flags", [f"{f.key}  (from {f.source_node_id})" for f in catalog.game_flags]),
    ):
        if entries:
            typer.echo(f"{title}:")
            for entry in entries:
                typer.echo(f"  {entry}")


@app.command("expand-blueprint")
def expand_blueprint(
    workflow: Path = typer.Argument(..., help="Path to the workflow document."),
    node_id: str = typer.Argument(..., help="Blueprint node to expand."),
) -> None:
    """Replace a Blueprint node with its provisioning chain."""
    store = _load_store(workflow)
    before = store.state.node_ids()
    try:
        store.expand_blueprint(node_id)
    except GraphValidationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    dump_document(store.to_document(), workflow)
    created = sorted(store.state.node_ids() - before)
    typer.echo(f"Expanded {node_id} into {len(created)} nodes: {', '.join(created)}")


@app.command()
def execute(
    workflow: Path = typer.Argument(..., help="Path to the workflow document."),
    node_id: str = typer.Argument(..., help="Node to execute."),
    session_name: str = typer.Option(..., "--session", help="Session name (created on first use)."),
    guild_id: str = typer.Option(..., "--guild", help="Guild id the session provisions."),
    settings: Path | None = typer.Option(None, "--settings", "-s", help="Path to settings YAML file."),
    selection: str | None = typer.Option(None, "--select", help="Option label for a SelectBranch node."),
    source_id: str | None = typer.Option(None, "--source", help="Source option id for a RecordCombination node."),
    target_id: str | None = typer.Option(None, "--target", help="Target option id for a RecordCombination node."),
    memo: str | None = typer.Option(None, "--memo", help="Memo stored with a recorded pair."),
    card_id: str | None = typer.Option(None, "--card", help="Card id for a Kanban node."),
    column_id: str | None = typer.Option(None, "--column", help="Column id for a Kanban node."),
    output_format: OutputFormat = typer.Option(
        "console",
        "--format",
        "-f",
        help="Output format: 'console', 'json', or 'yaml'.",
    ),
) -> None:
    """Execute one node against a session and save the updated workflow."""
    from guildflow.clients.discord import DiscordActionClient
    from guildflow.core.attachments import FilesystemAttachmentStore
    from guildflow.core.registry import RegistryDB, SqlResourceStore, SqlSessionStore
    from guildflow.engine.executors import ExecutionContext, OperatorInput, SessionContext, execute_node

    config = _load_settings(settings)
    store = _load_store(workflow)
    try:
        node = store.get_node(node_id)
    except GraphValidationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    token = os.environ.get(BOT_TOKEN_ENV_VAR, "")
    if not token and node.type not in _LOCAL_KINDS:
        typer.echo(f"Error: {BOT_TOKEN_ENV_VAR} is not set; {node.type} nodes call the platform.", err=True)
        raise typer.Exit(1)

    db = RegistryDB.from_url(config.store.url, echo=config.store.echo)
    sessions = SqlSessionStore(db)
    session = sessions.find_session(session_name, guild_id) or sessions.create_session(session_name, guild_id)
    sessions.touch(session.id)

    def show_progress(update: ProgressUpdate) -> None:
        if output_format == "console":
            typer.echo(f"  [{update.current}/{update.total}] {update.item}")

    async def run() -> NodeExecutionResult:
        async with DiscordActionClient(token, api=config.api, retry=config.retry) as client:
            ctx = ExecutionContext(
                session=SessionContext(session_id=session.id, session_name=session.name, guild_id=session.guild_id),
                client=client,
                resources=SqlResourceStore(db),
                sessions=sessions,
                attachments=FilesystemAttachmentStore(config.attachments.base_path),
                on_progress=show_progress,
                member_page_size=config.api.member_page_size,
            )
            operator_input = OperatorInput(
                selection=selection,
                source_id=source_id,
                target_id=target_id,
                memo=memo,
                card_id=card_id,
                column_id=column_id,
            )
            return await execute_node(store, node_id, ctx, operator_input)

    try:
        result = asyncio.run(run())
    except UnresolvedResourceError as e:
        typer.echo(f"Error: {e}", err=True)
        if e.declared_upstream:
            typer.echo("  Execute the upstream nodes that create them first.", err=True)
        raise typer.Exit(1) from None
    except GuildflowError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    finally:
        db.close()

    dump_document(store.to_document(), workflow)

    if output_format != "console":
        _emit(_result_payload(result), output_format)
    else:
        status = "executed" if result.executed else "not complete"
        typer.echo(f"{node_id}: {status} ({result.success_count}/{result.total} succeeded)")
        for handle in result.active_handles:
            typer.echo(f"  active port: {handle}")
        for key, value in result.flags_written.items():
            typer.echo(f"  flag {key} = {value}")
        for failure in result.failures:
            typer.secho(f"  failed: {failure['item']}: {failure['error']}", fg=typer.colors.RED, err=True)
    if result.failures:
        raise typer.Exit(1)


@app.command()
def flags(
    session_name: str = typer.Option(..., "--session", help="Session name."),
    guild_id: str | None = typer.Option(None, "--guild", help="Guild id, to disambiguate sessions."),
    settings: Path | None = typer.Option(None, "--settings", "-s", help="Path to settings YAML file."),
    output_format: OutputFormat = typer.Option(
        "console",
        "--format",
        "-f",
        help="Output format: 'console', 'json', or 'yaml'.",
    ),
) -> None:
    """Show the game flags of a session."""
    from guildflow.core.registry import RegistryDB, SqlSessionStore

    config = _load_settings(settings)
    db = RegistryDB.from_url(config.store.url, echo=config.store.echo)
    try:
        sessions = SqlSessionStore(db)
        session = sessions.find_session(session_name, guild_id)
        if session is None:
            typer.echo(f"Error: Session not found: {session_name}", err=True)
            raise typer.Exit(1)
        current = sessions.get_flags(session.id)
    finally:
        db.close()

    if output_format != "console":
        _emit(current, output_format)
        return
    if not current:
        typer.echo(f"No flags set in session {session_name}.")
        return
    for key, value in sorted(current.items()):
        typer.echo(f"{key} = {value}")


if __name__ == "__main__":
    app()
