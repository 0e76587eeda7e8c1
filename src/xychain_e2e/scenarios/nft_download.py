"""Mint a file as an NFT, fetch it back over RPC and compare bytes."""

from __future__ import annotations

from pathlib import Path

from xychain_e2e.errors import AssertionFailure
from xychain_e2e.payloads import read_payload, write_payload
from xychain_e2e.scenarios.base import ScenarioContext, ScenarioSkipped, expect_equal
from xychain_e2e.scenarios.nft_pod import mint_and_approve
from xychain_e2e.utils import bytes_to_hex, file_name_to_bytes


def output_path_for(payload_path: Path, configured: str = "") -> Path:
    """Where the downloaded payload goes: configured path, else `output<ext>` beside the input."""
    if configured:
        return Path(configured)
    return payload_path.with_name("output" + payload_path.suffix)


async def run(ctx: ScenarioContext) -> None:
    if not ctx.cfg.payload_path:
        raise ScenarioSkipped("no payload_path configured")

    source = Path(ctx.cfg.payload_path)
    data = read_payload(source)
    ctx.step("Read %d bytes from %s", len(data), source)

    nft_id = await mint_and_approve(ctx, "dave", file_name_to_bytes(source.name), data)

    nft = await ctx.queries.nft_data(nft_id)
    if nft is None:
        raise AssertionFailure(f"nft_data({nft_id})", "payload", None)
    expect_equal(f"nft {nft_id} file name", source.name.encode("utf-8"), nft.file_name)

    target = write_payload(output_path_for(source, ctx.cfg.output_path), nft.data)
    ctx.step("Downloaded nft %d to %s", nft_id, target)

    written = read_payload(target)
    if written != data:
        raise AssertionFailure(
            f"downloaded payload of nft {nft_id}",
            f"{len(data)} bytes, {bytes_to_hex(data[:16])}...",
            f"{len(written)} bytes, {bytes_to_hex(written[:16])}...",
        )
