"""CLI entry point for the xychain end-to-end harness."""

from __future__ import annotations

import asyncio
import logging
import sys

import click
import httpx

from xychain_e2e.config import load_config
from xychain_e2e.errors import ChainConnectionError, HarnessError
from xychain_e2e.harness import Harness, run_scenarios
from xychain_e2e.identities import dev_keypair
from xychain_e2e.models.config import HarnessConfig
from xychain_e2e.scenarios import SCENARIOS
from xychain_e2e.utils import to_dollar, to_day


def _usd(minor: int) -> str:
    return f"${to_dollar(minor)}"


def _resolve_account(uri: str, cfg: HarnessConfig) -> str:
    """A dev name (`dave`, `//Dave`) or an SS58 address, as an address."""
    if uri.startswith("/") or uri.isalpha():
        return dev_keypair(uri, cfg.ss58_format).ss58_address
    return uri


def _load(ctx: click.Context) -> HarnessConfig:
    return ctx.obj["config"]


@click.group()
@click.option("-c", "--config", "config_path", default=None, help="Path to config TOML file")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option("--url", default=None, help="Node WebSocket URL (overrides config)")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool, url: str | None) -> None:
    """xychain-e2e - End-to-end test client for an xy-chain node."""
    cfg = load_config(config_path)
    if url:
        cfg.url = url
    ctx.ensure_object(dict)
    ctx.obj["config"] = cfg

    level = logging.DEBUG if verbose else getattr(logging, cfg.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # substrate-interface logs every RPC payload at debug
    if not verbose:
        logging.getLogger("substrateinterface").setLevel(logging.WARNING)


# ── Scenarios ──────────────────────────────────────────


@cli.command()
@click.argument("names", nargs=-1)
@click.option("--payload", default=None, help="File minted by the nft_download scenario")
@click.pass_context
def run(ctx: click.Context, names: tuple[str, ...], payload: str | None) -> None:
    """Run end-to-end scenarios (default: those enabled in config)."""
    cfg = _load(ctx)
    if payload:
        cfg.payload_path = payload

    unknown = [n for n in names if n not in SCENARIOS]
    if unknown:
        click.echo(f"Error: unknown scenario(s): {', '.join(unknown)}", err=True)
        click.echo(f"Available: {', '.join(SCENARIOS)}", err=True)
        sys.exit(2)

    try:
        results = asyncio.run(run_scenarios(cfg, list(names) or None))
    except ChainConnectionError as exc:
        click.echo(f"Connection failed: {exc}", err=True)
        sys.exit(1)

    click.echo("")
    for r in results:
        tag = "SKIP" if r.skipped else ("PASS" if r.passed else "FAIL")
        click.echo(f"  [{tag}] {r.name:15s} {r.duration_s:6.1f}s")
        if r.error:
            click.echo(f"         {r.error}")

    failed = [r for r in results if not r.passed]
    click.echo(f"\n{len(results) - len(failed)}/{len(results)} scenarios passed")
    if failed:
        sys.exit(1)


@cli.command("list")
def list_scenarios() -> None:
    """List available scenarios."""
    for name, fn in SCENARIOS.items():
        doc = (sys.modules[fn.__module__].__doc__ or "").strip().splitlines()
        click.echo(f"  {name:15s} {doc[0] if doc else ''}")


# ── Info ───────────────────────────────────────────────


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show harness configuration."""
    cfg = _load(ctx)
    click.echo(f"Node URL:        {cfg.url}")
    click.echo(f"SS58 format:     {cfg.ss58_format}")
    click.echo(f"Connect timeout: {cfg.connect_timeout}s")
    click.echo(f"Request timeout: {cfg.request_timeout}s")
    click.echo(f"Submit timeout:  {cfg.submit_timeout}s")
    click.echo(f"Scenarios:       {', '.join(cfg.scenarios) or '(none)'}")
    click.echo(f"Payload:         {cfg.payload_path or '(not set)'}")
    click.echo(f"Output:          {cfg.output_path or '(beside payload)'}")
    click.echo(f"Log level:       {cfg.log_level}")


@cli.command()
@click.pass_context
def health(ctx: click.Context) -> None:
    """Probe the node's HTTP RPC endpoint with system_health."""
    cfg = _load(ctx)
    body = {"jsonrpc": "2.0", "id": 1, "method": "system_health", "params": []}
    try:
        resp = httpx.post(cfg.http_url, json=body, timeout=cfg.connect_timeout)
        resp.raise_for_status()
        result = resp.json().get("result")
    except (httpx.HTTPError, ValueError) as exc:
        click.echo(f"Node unreachable at {cfg.http_url}: {exc}", err=True)
        sys.exit(1)

    if not isinstance(result, dict):
        click.echo(f"Unexpected response: {resp.text}", err=True)
        sys.exit(1)
    click.echo(f"Node:       {cfg.http_url}")
    click.echo(f"Peers:      {result.get('peers')}")
    click.echo(f"Syncing:    {result.get('isSyncing')}")


@cli.command()
@click.argument("uri")
@click.pass_context
def account(ctx: click.Context, uri: str) -> None:
    """Show bank account data and interest for a dev name or address."""
    cfg = _load(ctx)

    async def _account():
        address = _resolve_account(uri, cfg)
        async with Harness(cfg) as h:
            data = await h.queries.account_data(address)
            interest = await h.queries.interest_pa(address)

        click.echo(f"Address:    {address}")
        click.echo(f"Free:       {_usd(data.free)}")
        click.echo(f"Reserved:   {_usd(data.reserved)}")
        click.echo(f"Interest:   {_usd(interest)} p.a.")
        if data.locked:
            click.echo("Locked:")
            for fund in data.locked:
                click.echo(f"  #{fund.id} {_usd(fund.amount)} ({fund.reason.value}) "
                           f"unlocks at block {fund.unlock_at} (day {to_day(fund.unlock_at):.1f})")

    try:
        asyncio.run(_account())
    except HarnessError as exc:
        click.echo(f"Query failed: {exc}", err=True)
        sys.exit(1)


@cli.command()
@click.argument("uri")
@click.pass_context
def pending(ctx: click.Context, uri: str) -> None:
    """List PODs a dev name or address is delivering and receiving."""
    cfg = _load(ctx)

    async def _pending():
        address = _resolve_account(uri, cfg)
        async with Harness(cfg) as h:
            pods = await h.queries.pending_pods(address)

        click.echo(f"Address:    {address}")
        for label, items in (("Delivering", pods.delivering), ("Receiving", pods.receiving)):
            click.echo(f"{label}:")
            if not items:
                click.echo("  (none)")
            for p in items:
                click.echo(f"  pod={p.pod_id} nft={p.nft_id} name={p.nft_name.decode(errors='replace')} "
                           f"price={_usd(p.price)} expires={p.expiry_block} from={p.sender[:12]}...")

    try:
        asyncio.run(_pending())
    except HarnessError as exc:
        click.echo(f"Query failed: {exc}", err=True)
        sys.exit(1)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
