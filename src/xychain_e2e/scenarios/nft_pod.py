"""Mint, approve and trade NFTs through pay-on-delivery."""

from __future__ import annotations

from xychain_e2e.errors import AssertionFailure
from xychain_e2e.models.records import Response
from xychain_e2e.scenarios.base import (
    ScenarioContext,
    expect_equal,
    expect_in,
    expect_not_in,
)
from xychain_e2e.utils import bytes_to_hex, from_dollar, to_dollar

DAVE_NFT = (b"FILE", b"NFT")
EVE_NFT = (b"FILE1", b"NFT1")

DAVE_TO_EVE_PRICE = from_dollar(30)
EVE_TO_CHARLIE_PRICE = from_dollar(50)
CHARLIE_TIP = from_dollar(10)


async def mint_and_approve(ctx: ScenarioContext, owner_name: str,
                           file_name: bytes, data: bytes) -> int:
    """Request a mint as `owner_name`, check the pending entry, approve it."""
    owner = ctx.account(owner_name)
    nft_id = await ctx.queries.next_nft_id()
    ctx.step("Next nft id is %d", nft_id)

    await ctx.actions.request_mint(owner, file_name, data)
    pending = await ctx.queries.pending_nft(nft_id)
    if pending is None:
        raise AssertionFailure(f"pending nft {nft_id}", "a pending entry", None)
    expect_equal(f"pending nft {nft_id} file name", bytes_to_hex(file_name), pending.file_name)
    expect_equal(f"pending nft {nft_id} requester", owner.ss58_address, pending.requester)
    ctx.step("%s requested nft %d (%s)", owner_name, nft_id, file_name.decode())

    await ctx.actions.approve_nft(ctx.auditor, nft_id, Response.ACCEPT)
    expect_equal(f"owner of nft {nft_id} after approval",
                 owner.ss58_address, await ctx.queries.owner(nft_id))
    ctx.step("Auditor approved nft %d for %s", nft_id, owner_name)
    return nft_id


async def create_pod(ctx: ScenarioContext, sender_name: str, receiver_name: str,
                     nft_id: int, price: int, fee: int) -> int:
    """Create a POD and check the sender paid exactly the POD fee."""
    sender = ctx.account(sender_name)
    receiver = ctx.account(receiver_name)
    pod_id = await ctx.queries.next_pod_id()

    before = await ctx.queries.free_balance(sender.public_key)
    await ctx.actions.create_pod(sender, receiver.public_key, nft_id, price)
    after = await ctx.queries.free_balance(sender.public_key)

    expect_equal(f"{sender_name} balance after creating pod {pod_id}", before - fee, after)
    ctx.step(
        "%s sent nft %d to %s in pod %d for $%s (paid $%s fee)",
        sender_name, nft_id, receiver_name, pod_id, to_dollar(price), to_dollar(fee),
    )
    return pod_id


async def run(ctx: ScenarioContext) -> None:
    charlie = ctx.account("charlie")
    dave = ctx.account("dave")
    eve = ctx.account("eve")
    q = ctx.queries

    dave_nft = await mint_and_approve(ctx, "dave", *DAVE_NFT)
    eve_nft = await mint_and_approve(ctx, "eve", *EVE_NFT)

    fee = await q.pod_fee()
    ctx.step("The fee of creating a POD is $%s", to_dollar(fee))

    dave_to_eve = await create_pod(ctx, "dave", "eve", dave_nft, DAVE_TO_EVE_PRICE, fee)
    eve_to_charlie = await create_pod(ctx, "eve", "charlie", eve_nft, EVE_TO_CHARLIE_PRICE, fee)

    # Eve delivers one and receives one; Charlie receives; Dave delivers.
    eve_delivering, eve_receiving = (await q.pending_pods(eve.public_key)).pod_ids()
    expect_in("eve delivering pods", eve_to_charlie, eve_delivering)
    expect_in("eve receiving pods", dave_to_eve, eve_receiving)
    charlie_pods = await q.pending_pods(charlie.public_key)
    expect_in("charlie receiving pods", eve_to_charlie, charlie_pods.pod_ids()[1])
    for pod in charlie_pods.receiving:
        if pod.pod_id == eve_to_charlie:
            expect_equal("charlie pod sender", eve.ss58_address, pod.sender)
            expect_equal("charlie pod nft name", EVE_NFT[0], pod.nft_name)
            expect_equal("charlie pod price", EVE_TO_CHARLIE_PRICE, pod.price)
    dave_delivering, _ = (await q.pending_pods(dave.public_key)).pod_ids()
    expect_in("dave delivering pods", dave_to_eve, dave_delivering)
    ctx.step("Pending pods reported for eve, charlie and dave")

    # Charlie accepts, paying price + tip to Eve.
    expect_equal(f"owner of nft {eve_nft} before accept", eve.ss58_address, await q.owner(eve_nft))
    charlie_before = await q.free_balance(charlie.public_key)
    eve_before = await q.free_balance(eve.public_key)

    await ctx.actions.receive_pod(charlie, eve_to_charlie, Response.ACCEPT, CHARLIE_TIP)

    paid = EVE_TO_CHARLIE_PRICE + CHARLIE_TIP
    expect_equal("charlie balance after accepting",
                 charlie_before - paid, await q.free_balance(charlie.public_key))
    expect_equal("eve balance after charlie accepted",
                 eve_before + paid, await q.free_balance(eve.public_key))
    expect_equal(f"owner of nft {eve_nft} after accept",
                 charlie.ss58_address, await q.owner(eve_nft))
    eve_delivering, eve_receiving = (await q.pending_pods(eve.public_key)).pod_ids()
    expect_not_in("eve delivering pods after accept", eve_to_charlie, eve_delivering)
    expect_in("eve receiving pods after accept", dave_to_eve, eve_receiving)
    ctx.step("Charlie accepted pod %d paying $%s", eve_to_charlie, to_dollar(paid))

    # Eve rejects Dave's offer; nothing moves.
    eve_before = await q.free_balance(eve.public_key)
    dave_before = await q.free_balance(dave.public_key)

    await ctx.actions.receive_pod(eve, dave_to_eve, Response.REJECT, 0)

    expect_equal("eve balance after rejecting", eve_before, await q.free_balance(eve.public_key))
    expect_equal("dave balance after eve rejected",
                 dave_before, await q.free_balance(dave.public_key))
    expect_equal(f"owner of nft {dave_nft} after reject", dave.ss58_address, await q.owner(dave_nft))
    _, eve_receiving = (await q.pending_pods(eve.public_key)).pod_ids()
    expect_not_in("eve receiving pods after reject", dave_to_eve, eve_receiving)
    dave_delivering, _ = (await q.pending_pods(dave.public_key)).pod_ids()
    expect_not_in("dave delivering pods after reject", dave_to_eve, dave_delivering)
    ctx.step("Eve rejected pod %d", dave_to_eve)
