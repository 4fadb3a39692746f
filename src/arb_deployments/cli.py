"""Typer CLI for deploying and querying the Arb contract."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, NoReturn, Optional

import typer
from dotenv import load_dotenv

from .artifacts import CompiledArtifact, parse_hardhat_artifact
from .config_store import ConfigStore
from .constants import DEFAULT_CONTRACT_NAME, DEFAULT_CONTRACT_VERSION, DEFAULT_LOGICAL_NAME
from .deployer import DeploymentController
from .exceptions import DeploymentError
from .paths import get_default_artifact_path
from .query import ALL_GROUPS, BALANCES, CONTRACT_INFO, SELF_TEST, TOKEN_INFO, VALIDATION, BatchedQueryClient
from .records import reconcile as reconcile_records
from .rpc import JsonRpcClient
from .settings import NetworkContext, Settings, network_config
from .types import ContractInfo, QueryGroupResult, QueryReport, TokenEntry, TokenInfo
from .units import format_ether, format_units

app = typer.Typer(help="Deploy the Arb contract and query it")

# Command aliases accepted by `interact`
GROUP_ALIASES = {
    "info": CONTRACT_INFO,
    "balances": BALANCES,
    "tokens": TOKEN_INFO,
    "validate": VALIDATION,
    "test": SELF_TEST,
}


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Load .env and configure logging."""
    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _fail(message: str) -> NoReturn:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(code=1)


def _load_artifact(artifact: Optional[Path], version: str) -> CompiledArtifact:
    return parse_hardhat_artifact(artifact or get_default_artifact_path(DEFAULT_CONTRACT_NAME), version)


@app.command()
def deploy(
    network: Optional[str] = typer.Option(None, help="Target network (defaults to $ARB_NETWORK)"),
    artifact: Optional[Path] = typer.Option(None, help="Hardhat artifact JSON"),
    version: str = typer.Option(DEFAULT_CONTRACT_VERSION, help="Version the contract must report"),
    name: str = typer.Option(DEFAULT_LOGICAL_NAME, help="Config key for the deployed address"),
) -> None:
    """Deploy the contract, wait for confirmations and record it."""
    try:
        settings = Settings.from_env(network)
        compiled = _load_artifact(artifact, version)
        context = NetworkContext.from_settings(settings)
        store = ConfigStore(settings.config_path, settings.network)
        controller = DeploymentController(store, settings.deployments_dir, logical_name=name)
        record = controller.deploy(compiled, context)
    except (DeploymentError, ValueError) as e:
        _fail(f"Deployment failed: {e}")

    typer.echo("=" * 50)
    typer.echo("Deployment completed")
    typer.echo("=" * 50)
    typer.echo(f"Contract address:\t{record.contract_address}")
    typer.echo(f"Transaction:\t\t{record.transaction_hash}")
    typer.echo(f"Block:\t\t\t{record.block_number} ({record.confirmations} confirmations)")
    typer.echo(f"Gas used:\t\t{record.gas_used} (limit {record.gas_limit})")
    typer.echo(f"Total cost:\t\t{format_ether(record.total_cost_wei)} {context.native_symbol}")
    if record.explorer_url:
        typer.echo(f"Explorer:\t\t{record.explorer_url}")
    if controller.record_path:
        typer.echo(f"Record:\t\t\t{controller.record_path}")
    for diagnostic in record.diagnostics:
        typer.echo(f"Warning: {diagnostic}", err=True)


def _render_item_value(result: QueryGroupResult, key: str, value: object, tokens: Dict[str, TokenEntry]) -> str:
    if isinstance(value, TokenInfo):
        return (
            f"{value.symbol} at {value.address}, decimals {value.decimals}, "
            f"balance {format_units(value.balance, value.decimals)}, "
            f"supply {format_units(value.total_supply, value.decimals)}"
        )
    if isinstance(value, ContractInfo):
        deployed = datetime.fromtimestamp(value.deployed, tz=timezone.utc).isoformat()
        return (
            f"version {value.version}, deployed {deployed}, paused {value.paused}, "
            f"owner {value.owner}"
        )
    if result.group == BALANCES and isinstance(value, int):
        decimals = tokens[key].decimals if key in tokens else 18
        return format_units(value, decimals)
    if isinstance(value, bool):
        return "valid" if value else "invalid"
    return str(value)


def render_report(report: QueryReport, tokens: Dict[str, TokenEntry]) -> None:
    for result in report.results:
        typer.echo(f"\n[{result.group}] {result.status.value}")
        if result.error:
            typer.echo(f"  error: {result.error}")
        for item in result.items:
            line = f"  {item.key}: {_render_item_value(result, item.key, item.value, tokens)}"
            if item.error:
                line += f" ({item.error})"
            typer.echo(line)

    typer.echo(
        f"\n{len(report.succeeded)} group(s) succeeded, {len(report.failed)} failed"
    )


@app.command()
def interact(
    command: str = typer.Argument("all", help="info | balances | tokens | validate | test | all"),
    network: Optional[str] = typer.Option(None, help="Target network (defaults to $ARB_NETWORK)"),
    artifact: Optional[Path] = typer.Option(None, help="Hardhat artifact JSON (for the ABI)"),
    name: str = typer.Option(DEFAULT_LOGICAL_NAME, help="Config key of the deployed contract"),
) -> None:
    """Query the deployed contract. Failing groups do not change the exit code."""
    if command == "all":
        groups = list(ALL_GROUPS)
    elif command in GROUP_ALIASES:
        groups = [GROUP_ALIASES[command]]
    else:
        _fail(f"Unknown command '{command}'")

    try:
        settings = Settings.from_env(network)
        compiled = _load_artifact(artifact, DEFAULT_CONTRACT_VERSION)
        store = ConfigStore(settings.config_path, settings.network)
        client = BatchedQueryClient.from_config(
            store,
            JsonRpcClient(settings.resolved_rpc_url),
            compiled.abi,
            logical_name=name,
            native_symbol=network_config(settings.network)["native_symbol"],
        )
    except (DeploymentError, ValueError) as e:
        _fail(str(e))

    render_report(client.run(groups), client.tokens)


@app.command()
def reconcile(
    network: Optional[str] = typer.Option(None, help="Target network (defaults to $ARB_NETWORK)"),
    repair: bool = typer.Option(False, help="Write missing config entries"),
) -> None:
    """Find deployment records that never made it into the config."""
    try:
        settings = Settings.from_env(network)
        store = ConfigStore(settings.config_path, settings.network)
        unreconciled = reconcile_records(store, settings.deployments_dir, repair=repair)
    except (DeploymentError, ValueError) as e:
        _fail(str(e))

    if not unreconciled:
        typer.echo("Config matches the latest deployment records")
        return

    for record in unreconciled:
        action = "repaired" if repair else "missing from config"
        typer.echo(f"{record.logical_name}: {record.contract_address} ({record.deployment_time}) {action}")


@app.command("validate-config")
def validate_config(
    network: Optional[str] = typer.Option(None, help="Target network (defaults to $ARB_NETWORK)"),
) -> None:
    """Check token and contract entries of the network config."""
    try:
        settings = Settings.from_env(network)
    except ValueError as e:
        _fail(str(e))

    result = ConfigStore(settings.config_path, settings.network).validate()
    for warning in result.warnings:
        typer.echo(f"Warning: {warning}")
    for error in result.errors:
        typer.echo(f"Error: {error}", err=True)

    if not result.valid:
        raise typer.Exit(code=1)
    typer.echo(f"{settings.config_path} is valid")
