"""Click commands wrapping the monitor and resolvers.

Each command loads configuration from ``CLOUDPROV_*`` variables, configures
logging, opens an HTTP gateway for the duration of the command and exits
with status 1 on any cloudprov error.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import click

from cloudprov import __version__
from cloudprov.config import load_config
from cloudprov.core import ProvenanceResolver, ReferenceResolver, StateMonitor
from cloudprov.errors import CloudProvError
from cloudprov.gateway import HttpResourceGateway, ResourceGateway
from cloudprov.ids import parse_resource_id
from cloudprov.models.config import CloudProvConfig
from cloudprov.models.resources import ResourceKind
from cloudprov.observability.logging import get_logger, setup_logging

T = TypeVar("T")

_RESOURCE_ID = click.argument("resource_id", type=str)


def _run(config: CloudProvConfig, action: Callable[[ResourceGateway], Awaitable[T]]) -> T:
    async def _with_gateway() -> T:
        async with HttpResourceGateway(config.gateway) as gateway:
            return await action(gateway)

    try:
        return asyncio.run(_with_gateway())
    except CloudProvError as exc:
        get_logger("cli").error("command_failed", error=str(exc), error_type=type(exc).__name__)
        raise click.ClickException(str(exc)) from exc


def _parse_id(value: str) -> int:
    try:
        return parse_resource_id(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc


@click.group()
@click.version_option(__version__, prog_name="cloudprov")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Lifecycle helpers for cloud control-plane resources."""
    config = load_config()
    setup_logging(config.log.level, config.log.format)
    ctx.obj = config


@cli.command()
@_RESOURCE_ID
@click.option("--timeout", type=float, default=None, help="Seconds to wait; 0 waits forever.")
@click.option("--watch", "stream", is_flag=True, help="Print every polled state.")
@click.option("--fail-fast/--no-fail-fast", default=None, help="Stop as soon as the resource reports failure.")
@click.option("--kind", type=click.Choice([ResourceKind.DISK.value, ResourceKind.ARCHIVE.value]), default="disk")
@click.pass_obj
def wait(
    config: CloudProvConfig,
    resource_id: str,
    timeout: float | None,
    stream: bool,
    fail_fast: bool | None,
    kind: str,
) -> None:
    """Wait until RESOURCE_ID becomes available."""
    rid = _parse_id(resource_id)
    deadline = config.monitor.default_timeout if timeout is None else timeout

    async def _wait(gateway: ResourceGateway) -> None:
        monitor = StateMonitor(
            gateway,
            kind=ResourceKind(kind),
            poll_interval=config.monitor.poll_interval,
            fail_fast=config.monitor.fail_fast,
        )
        if not stream:
            await monitor.wait_until_ready(rid, deadline, fail_fast=fail_fast)
            return

        watch = monitor.watch_until_ready(rid, deadline)
        async for resource in watch.progress():
            suffix = f" ({resource.migrated_mb} MB copied)" if resource.migrated_mb is not None else ""
            click.echo(f"{resource.resource_id}: {resource.state.value}{suffix}")
        await watch.result()

    _run(config, _wait)
    click.echo(f"{rid}: available")


@cli.command("can-edit")
@_RESOURCE_ID
@click.option("--kind", type=click.Choice([ResourceKind.DISK.value, ResourceKind.ARCHIVE.value]), default="disk")
@click.pass_obj
def can_edit(config: CloudProvConfig, resource_id: str, kind: str) -> None:
    """Report whether RESOURCE_ID may be edited in place."""
    rid = _parse_id(resource_id)

    async def _can_edit(gateway: ResourceGateway) -> bool:
        resolver = ProvenanceResolver(
            gateway,
            allow_edit_tags=config.provenance.allow_edit_tags,
            max_depth=config.provenance.max_depth,
        )
        return await resolver.can_edit(rid, ResourceKind(kind))

    editable = _run(config, _can_edit)
    click.echo("editable" if editable else "not editable")
    if not editable:
        raise SystemExit(2)


@cli.command("connect-filter")
@click.argument("interface_id", type=str)
@click.argument("packet_filter", type=str)
@click.pass_obj
def connect_filter(config: CloudProvConfig, interface_id: str, packet_filter: str) -> None:
    """Attach PACKET_FILTER (id or name) to INTERFACE_ID."""
    nic_id = _parse_id(interface_id)

    async def _connect(gateway: ResourceGateway) -> int | None:
        return await ReferenceResolver(gateway).attach(nic_id, packet_filter)

    attached = _run(config, _connect)
    if attached is None:
        click.echo("nothing to attach")
    else:
        click.echo(f"packet filter {attached} attached to interface {nic_id}")
