"""End-to-end scenarios against the in-memory chain."""

from __future__ import annotations

import pytest

from xychain_e2e.errors import (
    AssertionFailure,
    ChainConnectionError,
    SubmissionRejected,
    SubmissionTimeout,
)
from xychain_e2e.models.records import Response
from xychain_e2e.scenarios import SCENARIOS, ScenarioRunner, nft_download, nft_pod
from xychain_e2e.scenarios.base import expect_equal, expect_in, expect_not_in
from xychain_e2e.utils import from_dollar

from tests.conftest import make_test_config


@pytest.fixture
def runner(scenario_ctx):
    return ScenarioRunner(scenario_ctx, SCENARIOS)


@pytest.fixture
def payload(tmp_path):
    p = tmp_path / "input.txt"
    p.write_bytes(b"hello xy-chain\n" * 64)
    return p


# ── Expectations ─────────────────────────────────────────────────


def test_expectation_helpers():
    expect_equal("same", 1, 1)
    expect_in("member", 2, [1, 2])
    expect_not_in("absent", 3, [1, 2])
    with pytest.raises(AssertionFailure, match="balance: expected 5, got 4"):
        expect_equal("balance", 5, 4)
    with pytest.raises(AssertionError):
        expect_in("member", 3, [1, 2])
    with pytest.raises(AssertionFailure):
        expect_not_in("absent", 1, [1, 2])


# ── nft_pod ──────────────────────────────────────────────────────


async def test_nft_pod_moves_ownership_and_funds(scenario_ctx, fake_chain, accounts):
    start = {name: await fake_chain.free_balance(kp.public_key) for name, kp in accounts.items()}

    await nft_pod.run(scenario_ctx)

    charlie, dave, eve = accounts["charlie"], accounts["dave"], accounts["eve"]
    fee = fake_chain.fee
    paid = from_dollar(50) + from_dollar(10)
    assert fake_chain.owners == {1: dave.ss58_address, 2: charlie.ss58_address}
    assert fake_chain.pods == {}
    assert fake_chain.balances[charlie.ss58_address] == start["charlie"] - paid
    assert fake_chain.balances[eve.ss58_address] == start["eve"] - fee + paid
    assert fake_chain.balances[dave.ss58_address] == start["dave"] - fee


async def test_nft_pod_submits_in_order(scenario_ctx, fake_chain, accounts):
    await nft_pod.run(scenario_ctx)

    names = [name for name, _ in fake_chain.calls]
    assert names == [
        "request_mint", "approve_nft", "request_mint", "approve_nft",
        "create_pod", "create_pod", "receive_pod", "receive_pod",
    ]
    approvals = [args for name, args in fake_chain.calls if name == "approve_nft"]
    assert all(args[0] == accounts["bob"].ss58_address for args in approvals)
    receipts = [args for name, args in fake_chain.calls if name == "receive_pod"]
    assert receipts[0][1:] == (2, Response.ACCEPT, from_dollar(10))
    assert receipts[1][1:] == (1, Response.REJECT, 0)


async def test_nft_pod_records_steps(scenario_ctx):
    await nft_pod.run(scenario_ctx)
    assert any("fee of creating a POD" in s for s in scenario_ctx.steps)
    assert any("Eve rejected pod 1" in s for s in scenario_ctx.steps)


async def test_wrong_pod_fee_is_an_assertion_failure(scenario_ctx, fake_chain):
    fake_chain.charged_fee = fake_chain.fee * 2
    with pytest.raises(AssertionFailure, match="dave balance after creating pod 1"):
        await nft_pod.run(scenario_ctx)


async def test_mint_checks_pending_requester(scenario_ctx, fake_chain, accounts):
    nft_id = await nft_pod.mint_and_approve(scenario_ctx, "eve", b"a.bin", b"\x00\x01")
    assert nft_id == 1
    assert fake_chain.owners[1] == accounts["eve"].ss58_address


# ── nft_download ─────────────────────────────────────────────────


def test_output_path_defaults_beside_payload(tmp_path):
    source = tmp_path / "pic.png"
    assert nft_download.output_path_for(source) == tmp_path / "output.png"
    assert str(nft_download.output_path_for(source, "/tmp/x.bin")) == "/tmp/x.bin"


async def test_nft_download_round_trip(scenario_ctx, payload):
    scenario_ctx.cfg = make_test_config(payload_path=str(payload))

    await nft_download.run(scenario_ctx)

    out = payload.with_name("output.txt")
    assert out.read_bytes() == payload.read_bytes()


async def test_nft_download_detects_corrupted_payload(scenario_ctx, fake_chain, payload, tmp_path):
    fake_chain.corrupt_payload = True
    scenario_ctx.cfg = make_test_config(
        payload_path=str(payload), output_path=str(tmp_path / "out" / "got.txt"),
    )
    with pytest.raises(AssertionFailure, match="downloaded payload"):
        await nft_download.run(scenario_ctx)


# ── Runner ───────────────────────────────────────────────────────


async def test_runner_runs_everything(runner, scenario_ctx, payload):
    scenario_ctx.cfg = make_test_config(payload_path=str(payload))

    results = await runner.run()

    assert [r.name for r in results] == ["nft_pod", "nft_download"]
    assert all(r.passed and not r.skipped for r in results)
    assert all(r.duration_s >= 0 for r in results)
    assert results[0].steps and results[1].steps


async def test_download_without_payload_is_skipped(runner):
    [result] = await runner.run(["nft_download"])
    assert result.passed
    assert result.skipped
    assert "payload_path" in result.error


async def test_failed_scenario_does_not_stop_the_next(runner, fake_chain, scenario_ctx, payload):
    fake_chain.charged_fee = 0
    scenario_ctx.cfg = make_test_config(payload_path=str(payload))

    pod, download = await runner.run(["nft_pod", "nft_download"])

    assert not pod.passed
    assert pod.error.startswith("AssertionFailure:")
    assert download.passed


async def test_unexpected_error_fails_only_its_scenario(runner, fake_chain, scenario_ctx, payload):
    fake_chain.fail["create_pod"] = ValueError("Parameter 'to_user' not specified")
    scenario_ctx.cfg = make_test_config(payload_path=str(payload))

    pod, download = await runner.run(["nft_pod", "nft_download"])

    assert not pod.passed
    assert pod.error == "ValueError: Parameter 'to_user' not specified"
    assert download.passed


async def test_rejected_extrinsic_fails_the_scenario(runner, fake_chain):
    fake_chain.fail["receive_pod"] = SubmissionRejected("NotPodReceiver", "0x01", "0x02")

    [result] = await runner.run(["nft_pod"])

    assert not result.passed
    assert "NotPodReceiver" in result.error


async def test_timed_out_extrinsic_fails_the_scenario(runner, fake_chain):
    fake_chain.fail["create_pod"] = SubmissionTimeout(60, "0x01", "ready")
    [result] = await runner.run(["nft_pod"])
    assert result.error.startswith("SubmissionTimeout:")


async def test_connection_loss_aborts_the_run(runner, fake_chain):
    fake_chain.fail["request_mint"] = ChainConnectionError("connection closed")
    with pytest.raises(ChainConnectionError):
        await runner.run(["nft_pod", "nft_download"])


async def test_unknown_scenario(runner):
    with pytest.raises(KeyError, match="bogus"):
        await runner.run(["nft_pod", "bogus"])
