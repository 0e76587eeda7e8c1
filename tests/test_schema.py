"""Custom RPC surface: declaration, param encoding and response decoding."""

from __future__ import annotations

import pytest

from xychain_e2e.chain.schema import CUSTOM_RPC, CUSTOM_TYPES, RpcMethod, RpcParam, RpcSchema
from xychain_e2e.errors import DecodeError
from xychain_e2e.models.records import (
    LockReason,
    NftData,
    PendingNftPods,
    RpcAccountData,
    RpcLockedFund,
    RpcNftData,
)
from xychain_e2e.utils import DOLLAR, public_key_to_address

from tests.factories import (
    ALICE_ADDRESS,
    ALICE_PUBLIC_KEY,
    make_account_data_json,
    make_locked_fund_json,
    make_pending_pods_json,
    make_rpc_nft_data_json,
)


@pytest.fixture
def schema():
    return RpcSchema()


# ── Declarations ─────────────────────────────────────────────────


def test_custom_rpc_surface():
    assert set(CUSTOM_RPC) == {"account_data", "interest_pa", "pending_pods", "nft_data"}
    assert CUSTOM_RPC["account_data"].type == "RpcAccountData"
    assert CUSTOM_RPC["interest_pa"].type == "String"
    assert CUSTOM_RPC["pending_pods"].type == "PendingNftPods"
    assert [p.type for p in CUSTOM_RPC["pending_pods"].params] == ["AccountId"]


def test_custom_types_table():
    assert CUSTOM_TYPES["LockReason"] == {"_enum": ["Stake", "Redeem", "Auditor"]}
    assert CUSTOM_TYPES["RpcNftData"]["nft_name"] == "Vec<u8>"
    assert CUSTOM_TYPES["PodId"] == "u32"


def test_required_methods_exclude_optional_ones(schema):
    required = schema.required_wire_names()
    assert "xyChain_account_data" in required
    assert "xyChain_pending_pods" in required
    assert "xyChain_nft_data" not in required


def test_unknown_method(schema):
    with pytest.raises(KeyError, match="not declared"):
        schema.method("mint_everything")


def test_register_method_and_types(schema):
    schema.register_types({"Score": "u16", "Badge": {"level": "Score"}})
    schema.register_method(RpcMethod("badge", (RpcParam("who", "AccountId"),), "Badge"))
    assert schema.method("badge").wire_name() == "xyChain_badge"
    assert schema.decode("Badge", {"level": 7}) == {"level": 7}


# ── Encoding ─────────────────────────────────────────────────────


def test_encode_params_normalizes_accounts(schema):
    method = schema.method("account_data")
    assert schema.encode_params(method, (ALICE_PUBLIC_KEY,)) == [ALICE_ADDRESS]


def test_encode_params_checks_arity(schema):
    with pytest.raises(TypeError):
        schema.encode_params(schema.method("account_data"), ())


def test_encode_nft_id(schema):
    assert schema.encode_params(schema.method("nft_data"), ("3",)) == [3]


# ── Decoding ─────────────────────────────────────────────────────


def test_decode_account_data(schema):
    raw = make_account_data_json(
        free=10 * DOLLAR,
        locked=[make_locked_fund_json(id=2, amount=3, reason="Auditor", unlock_at=900)],
    )
    data = schema.decode("RpcAccountData", raw)
    assert data == RpcAccountData(
        free=10 * DOLLAR,
        reserved=0,
        locked=[RpcLockedFund(id=2, amount=3, reason=LockReason.AUDITOR, unlock_at=900)],
    )


def test_decode_enum_by_index_and_object(schema):
    assert schema.decode("LockReason", 1) is LockReason.REDEEM
    assert schema.decode("LockReason", {"Stake": None}) is LockReason.STAKE


def test_decode_unknown_enum_variant(schema):
    with pytest.raises(DecodeError, match="not one of"):
        schema.decode("LockReason", "Vacation")


def test_decode_pending_pods(schema):
    raw = make_pending_pods_json(
        delivering=[make_rpc_nft_data_json(pod_id=4, nft_name=b"FILE1")],
        receiving=[make_rpc_nft_data_json(pod_id=5, bytes_as_list=False)],
    )
    pods = schema.decode("PendingNftPods", raw)
    assert isinstance(pods, PendingNftPods)
    assert pods.pod_ids() == ([4], [5])
    first = pods.delivering[0]
    assert isinstance(first, RpcNftData)
    assert first.nft_name == b"FILE1"
    assert first.sender == ALICE_ADDRESS
    assert first.price == 30 * DOLLAR
    assert pods.receiving[0].nft_name == b"FILE"


def test_decode_sender_given_as_hex(schema):
    raw = make_rpc_nft_data_json(sender=ALICE_PUBLIC_KEY)
    assert schema.decode("RpcNftData", raw).sender == ALICE_ADDRESS


def test_decode_sender_uses_the_configured_prefix():
    raw = make_rpc_nft_data_json(sender=ALICE_ADDRESS)

    pod = RpcSchema(ss58_format=0).decode("RpcNftData", raw)

    assert pod.sender != ALICE_ADDRESS
    assert pod.sender == public_key_to_address(ALICE_PUBLIC_KEY, 0)
    assert pod.sender.startswith("15oF4uVJwmo4")


def test_decode_option(schema):
    assert schema.decode("Option<NftData>", None) is None
    nft = schema.decode("Option<NftData>", {"data": "0x0102", "file_name": list(b"a.txt")})
    assert nft == NftData(data=b"\x01\x02", file_name=b"a.txt")


def test_decode_balance_strings(schema):
    assert schema.decode("String", "1000000000000") == DOLLAR
    assert schema.decode("String", "0x10") == 16
    assert schema.decode("String", 7) == 7
    with pytest.raises(DecodeError):
        schema.decode("String", "lots")


def test_decode_missing_field(schema):
    raw = make_account_data_json()
    del raw["reserved"]
    with pytest.raises(DecodeError, match="reserved"):
        schema.decode("RpcAccountData", raw)


def test_decode_wrong_shape(schema):
    with pytest.raises(DecodeError):
        schema.decode("PendingNftPods", [])
    with pytest.raises(DecodeError):
        schema.decode("PendingNftPods", {"delivering": {}, "receiving": []})


def test_decode_uint_range(schema):
    assert schema.decode("PodId", 2**32 - 1) == 2**32 - 1
    with pytest.raises(DecodeError, match="out of range"):
        schema.decode("PodId", 2**32)
    with pytest.raises(DecodeError):
        schema.decode("NftId", -1)
    with pytest.raises(DecodeError):
        schema.decode("NftId", True)


def test_decode_bad_bytes(schema):
    with pytest.raises(DecodeError):
        schema.decode("Vec<u8>", [1, 256])
    with pytest.raises(DecodeError):
        schema.decode("Vec<u8>", "0x123")


def test_decode_unknown_type(schema):
    with pytest.raises(DecodeError, match="unknown type"):
        schema.decode("Mystery", 1)
