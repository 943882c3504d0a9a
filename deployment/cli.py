"""
Deployment CLI
==============

    switch-deploy list
    switch-deploy deploy SwitchAssetsModule [--dry-run]
    switch-deploy verify-command SwitchAssetsModule switchAssets --chain-id 84532 [--args-file args.js]
    switch-deploy assets register "Warehouse 4, Lagos"
    switch-deploy assets transfer 0x<asset id> 0x<new owner>
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import typer

from .artifacts import ArtifactResolver
from .asset_client import Asset, SwitchAssetsClient, switch_assets_handle
from .config import configure_logging, load_config
from .descriptor import ContractFuture
from .errors import DeploymentError
from .executor import Web3ContractDeployer, connect, resolve_artifacts, run_module
from .journal import DeploymentJournal
from .modules import MODULES
from .registry import ModuleRegistry
from .verification import VerificationRecord

app = typer.Typer(help="Deploy and inspect contract deployment modules.", no_args_is_help=True)


def load_registry() -> ModuleRegistry:
    registry = ModuleRegistry()
    for build in MODULES:
        build(registry)
    return registry


def _fail(message: str) -> None:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(1)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging.")) -> None:
    configure_logging(logging.DEBUG if verbose else logging.INFO)


@app.command("list")
def list_modules() -> None:
    """Show the available modules, their steps and outputs."""
    with load_registry() as registry:
        for module in registry:
            typer.echo(module.name)
            for step in module.all_steps():
                deps = ", ".join(f.id for f in step.dependencies())
                line = f"  {step.future.id}: {step.artifact_name} ({len(step.args)} args)"
                if deps:
                    line += f" after {deps}"
                typer.echo(line)
            for name, future in module.outputs.items():
                typer.echo(f"  -> {name} = {future.id}")


@app.command()
def deploy(
    module: str = typer.Argument(..., help="Module name, e.g. SwitchAssetsModule."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Only resolve artifacts, send nothing."),
    env_file: Optional[Path] = typer.Option(None, "--env-file", help="Read settings from this .env file."),
) -> None:
    """Deploy a module to the configured network."""
    try:
        config = load_config(str(env_file) if env_file else None)
    except DeploymentError as e:
        _fail(str(e))

    with load_registry() as registry:
        if module not in registry:
            _fail(f"unknown module '{module}' (known: {', '.join(registry.names())})")
        descriptor = registry.get(module)
        resolver = ArtifactResolver(config.artifacts_dir)

        try:
            artifacts = resolve_artifacts(descriptor, resolver)
            if dry_run:
                for future_id, artifact in artifacts.items():
                    typer.echo(f"{future_id}: {artifact.fully_qualified_name}")
                return

            private_key = config.require_private_key()
            w3 = connect(config)
            deployer = Web3ContractDeployer(w3, private_key, config.tx_timeout)
            journal = DeploymentJournal.for_chain(config.deployments_dir, w3.eth.chain_id)
            handles = run_module(descriptor, deployer, resolver, journal)
        except DeploymentError as e:
            _fail(str(e))

    for name, handle in handles.items():
        typer.echo(f"{name}: {handle.address}")


@app.command("verify-command")
def verify_command(
    module: str = typer.Argument(..., help="Module name."),
    output: str = typer.Argument(..., help="Output name, e.g. switchAssets."),
    chain_id: int = typer.Option(..., "--chain-id", help="Chain the module was deployed to."),
    args_file: Optional[Path] = typer.Option(
        None, "--args-file", help="Write constructor args to this JS module and pass it to hardhat."),
    env_file: Optional[Path] = typer.Option(None, "--env-file", help="Read settings from this .env file."),
) -> None:
    """Print the hardhat verify command for a deployed output."""
    try:
        config = load_config(str(env_file) if env_file else None)
    except DeploymentError as e:
        _fail(str(e))

    with load_registry() as registry:
        if module not in registry:
            _fail(f"unknown module '{module}'")
        descriptor = registry.get(module)
        if output not in descriptor.outputs:
            _fail(f"module '{module}' has no output '{output}'")

        future = descriptor.outputs[output]
        try:
            addresses = DeploymentJournal.for_chain(config.deployments_dir, chain_id).deployed_addresses()
        except DeploymentError as e:
            _fail(str(e))
        if future.id not in addresses:
            _fail(f"{future.id} has not been deployed on chain {chain_id}")

        step = descriptor.step_for(future)
        args = _journaled_args(step.args, addresses)
        record = VerificationRecord(
            contract_name=future.artifact_name.rsplit(":", 1)[-1],
            address=addresses[future.id],
            network=config.network,
            constructor_args=args,
            explorer_url=config.explorer_url,
        )

    if args_file is not None:
        args_file.write_text(record.constructor_args_module())
        typer.echo(record.command(str(args_file)))
    elif record.needs_args_file:
        _fail(f"{future.id} has array constructor arguments; pass --args-file")
    else:
        typer.echo(record.command())
    link = record.explorer_link()
    if link:
        typer.echo(link)


assets_app = typer.Typer(help="Operate the deployed SwitchAssets registry.", no_args_is_help=True)
app.add_typer(assets_app, name="assets")

ENV_FILE_OPTION = typer.Option(None, "--env-file", help="Read settings from this .env file.")


def _asset_client(env_file: Optional[Path]) -> SwitchAssetsClient:
    config = load_config(str(env_file) if env_file else None)
    private_key = config.require_private_key()
    w3 = connect(config)
    handle = switch_assets_handle(config, w3.eth.chain_id)
    return SwitchAssetsClient(w3, handle, private_key, config.tx_timeout)


def _echo_asset(asset: Asset) -> None:
    typer.echo(f"{asset.asset_id} owner={asset.owner} registered_at={asset.registered_at} {asset.description}")


@assets_app.command("register")
def register_asset(
    description: str = typer.Argument(..., help="Asset description."),
    env_file: Optional[Path] = ENV_FILE_OPTION,
) -> None:
    """Register a new asset owned by PRIVATE_KEY's account."""
    try:
        asset = _asset_client(env_file).register_asset(description)
    except (DeploymentError, ValueError) as e:
        _fail(str(e))
    _echo_asset(asset)


@assets_app.command("get")
def get_asset(
    asset_id: str = typer.Argument(..., help="0x-prefixed bytes32 asset id."),
    env_file: Optional[Path] = ENV_FILE_OPTION,
) -> None:
    """Show one asset."""
    try:
        asset = _asset_client(env_file).get_asset(asset_id)
    except (DeploymentError, ValueError) as e:
        _fail(str(e))
    _echo_asset(asset)


@assets_app.command("list")
def list_assets(
    mine: bool = typer.Option(False, "--mine", help="Only assets owned by PRIVATE_KEY's account."),
    env_file: Optional[Path] = ENV_FILE_OPTION,
) -> None:
    """List registered assets."""
    try:
        client = _asset_client(env_file)
        assets = client.get_my_assets() if mine else client.get_all_assets()
    except (DeploymentError, ValueError) as e:
        _fail(str(e))
    for asset in assets:
        _echo_asset(asset)


@assets_app.command("transfer")
def transfer_asset(
    asset_id: str = typer.Argument(..., help="0x-prefixed bytes32 asset id."),
    new_owner: str = typer.Argument(..., help="Address of the new owner."),
    env_file: Optional[Path] = ENV_FILE_OPTION,
) -> None:
    """Transfer an asset owned by PRIVATE_KEY's account."""
    try:
        transfer = _asset_client(env_file).transfer_asset(asset_id, new_owner)
    except (DeploymentError, ValueError) as e:
        _fail(str(e))
    typer.echo(f"{transfer.asset_id}: {transfer.old_owner} -> {transfer.new_owner} (tx {transfer.tx_hash})")


def _journaled_args(args: Any, addresses: Dict[str, str]) -> Any:
    if isinstance(args, ContractFuture):
        return addresses[args.id]
    if isinstance(args, tuple):
        return tuple(_journaled_args(arg, addresses) for arg in args)
    return args


if __name__ == '__main__':
    app()
