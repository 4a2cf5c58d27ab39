"""Main CLI application for localnet."""

import asyncio
import json
import logging
from pathlib import Path

import click

from ..crypto import generate_staking_keypair, node_id_from_public_key, save_staking_files
from ..errors import NetworkError
from ..models import Allocation, NetworkConfig, RunnerSettings
from ..network import build_genesis, default_network_config, new_network, validate_network_config

logger = logging.getLogger(__name__)


@click.group()
@click.option('--debug', is_flag=True, help='Enable debug logging')
def cli(debug):
    """localnet CLI - Run disposable local clusters of blockchain nodes."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


@cli.group()
def keygen():
    """Generate staking identities."""
    pass


@keygen.command('staking')
@click.option('--output', required=True, help='Output directory')
def keygen_staking(output):
    """Generate a staking key and self-signed certificate."""
    click.echo("Generating staking identity...")

    keypair = generate_staking_keypair()
    key_path, cert_path = save_staking_files(keypair, output)

    click.echo(f"\n✓ Staking identity generated:")
    click.echo(f"  Key:         {key_path}")
    click.echo(f"  Certificate: {cert_path}")
    click.echo(f"\nNode ID: {node_id_from_public_key(keypair.public_key)}")


@cli.group()
def genesis():
    """Manage genesis documents."""
    pass


@genesis.command('create')
@click.option('--network-id', required=True, type=int, help='Numeric network ID')
@click.option('--staker', multiple=True, required=True, help='Initial staker node ID')
@click.option('--allocation', multiple=True, help='Initial balance (address:balance)')
@click.option('--message', help='Genesis message')
@click.option('--output', required=True, help='Output genesis path')
def genesis_create(network_id, staker, allocation, message, output):
    """Create a genesis document."""
    allocations = []
    for allocation_str in allocation:
        address, balance = allocation_str.rsplit(':', 1)
        allocations.append(Allocation(address=address, balance=int(balance)))

    document = build_genesis(network_id, allocations, staker, message=message)
    with open(output, 'w') as f:
        f.write(document)

    click.echo(f"✓ Genesis created: {output}")
    click.echo(f"  Network ID: {network_id}")
    click.echo(f"  Stakers:    {len(staker)}")


@cli.group()
def config():
    """Manage network configs."""
    pass


@config.command('default')
@click.option('--binary-path', required=True, help='Path to the node binary')
@click.option('--nodes', default=5, help='Number of nodes')
@click.option('--output', required=True, help='Output network config path')
def config_default(binary_path, nodes, output):
    """Write the default network config."""
    network_config = default_network_config(binary_path, node_count=nodes)
    path = network_config.to_file(output)
    click.echo(f"✓ Default network config written: {path}")


@config.command('validate')
@click.option('--config', 'config_path', required=True, help='Path to network config')
def config_validate(config_path):
    """Validate a network config without starting anything."""
    network_config = NetworkConfig.from_file(config_path)
    try:
        validated = validate_network_config(network_config)
    except NetworkError as e:
        click.echo(f"✗ Invalid config: {e}", err=True)
        raise SystemExit(1)

    click.echo(f"✓ Config valid")
    click.echo(f"  Network ID: {validated.network_id}")
    click.echo(f"  Nodes:      {', '.join(validated.names) or '(none)'}")


async def _run_network(network_config: NetworkConfig, settings: RunnerSettings, timeout: float):
    net = await new_network(network_config, settings=settings)
    try:
        await net.healthy(timeout)
        click.echo("\n=== Network Status ===")
        click.echo(json.dumps(net.get_status(), indent=2))
        click.echo("\nNetwork healthy. Press Ctrl+C to stop.")
        await asyncio.Event().wait()
    finally:
        await net.stop()


@cli.command()
@click.option('--config', 'config_path', help='Path to network config')
@click.option('--binary-path', help='Run the default network with this node binary')
@click.option('--root-dir', type=click.Path(file_okay=False), help='Directory for node data')
@click.option('--timeout', default=120.0, help='Seconds to wait for the network to become healthy')
@click.option('--health-interval', default=1.0, help='Seconds between health polls')
def start(config_path, binary_path, root_dir, timeout, health_interval):
    """Start a network and keep it running until interrupted."""
    if bool(config_path) == bool(binary_path):
        raise click.UsageError("Give exactly one of --config or --binary-path")

    if config_path:
        network_config = NetworkConfig.from_file(config_path)
    else:
        network_config = default_network_config(binary_path)

    settings = RunnerSettings(
        root_dir=Path(root_dir) if root_dir else None,
        health_check_interval=health_interval,
    )

    try:
        asyncio.run(_run_network(network_config, settings, timeout))
    except KeyboardInterrupt:
        click.echo("\nStopped.")
    except NetworkError as e:
        logger.error(f"Network failed: {e}")
        raise SystemExit(1)


def main():
    """Entry point for CLI."""
    cli()


if __name__ == '__main__':
    main()
