"""Custom RPC surface and type definitions exposed by the xy-chain node.

The node serializes custom RPC results as JSON. The type table below
describes that JSON so responses can be checked and turned into the
records in `xychain_e2e.models.records`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable

from xychain_e2e.errors import DecodeError
from xychain_e2e.models.records import (
    LockReason,
    NftData,
    PendingNftPods,
    RpcAccountData,
    RpcLockedFund,
    RpcNftData,
)
from xychain_e2e.utils import (
    DEFAULT_SS58_FORMAT,
    bytes_to_hex,
    hex_to_bytes,
    normalize_account,
)

RPC_NAMESPACE = "xyChain"


@dataclass(frozen=True)
class RpcParam:
    name: str
    type: str


@dataclass(frozen=True)
class RpcMethod:
    """A custom RPC call declared on top of the node's default surface."""

    name: str
    params: tuple[RpcParam, ...]
    type: str
    description: str = ""
    optional: bool = False  # absent on older nodes

    def wire_name(self, namespace: str = RPC_NAMESPACE) -> str:
        return f"{namespace}_{self.name}"


CUSTOM_RPC: dict[str, RpcMethod] = {
    "account_data": RpcMethod(
        name="account_data",
        params=(RpcParam("who", "AccountId"),),
        type="RpcAccountData",
        description="For getting Account Data of a user.",
    ),
    "interest_pa": RpcMethod(
        name="interest_pa",
        params=(RpcParam("who", "AccountId"),),
        type="String",
        description="Estimates interest yearned per year for a user.",
    ),
    "pending_pods": RpcMethod(
        name="pending_pods",
        params=(RpcParam("who", "AccountId"),),
        type="PendingNftPods",
        description="For getting related Nft in POD info for a user.",
    ),
    "nft_data": RpcMethod(
        name="nft_data",
        params=(RpcParam("nft_id", "NftId"),),
        type="Option<NftData>",
        description="For getting the payload of an approved Nft.",
        optional=True,
    ),
}

CUSTOM_TYPES: dict[str, Any] = {
    "RpcAccountData": {
        "free": "String",
        "reserved": "String",
        "locked": "Vec<RpcLockedFund>",
    },
    "RpcLockedFund": {
        "id": "LockId",
        "amount": "String",
        "reason": "LockReason",
        "unlock_at": "BlockNumber",
    },
    "LockId": "u64",
    "LockReason": {
        "_enum": ["Stake", "Redeem", "Auditor"],
    },
    "PendingNftPods": {
        "delivering": "Vec<RpcNftData>",
        "receiving": "Vec<RpcNftData>",
    },
    "RpcNftData": {
        "pod_id": "PodId",
        "sender": "AccountId",
        "nft_id": "NftId",
        "nft_name": "Vec<u8>",
        "expiry_block": "BlockNumber",
        "price": "String",
    },
    "NftData": {
        "data": "Vec<u8>",
        "file_name": "Vec<u8>",
    },
    "PodId": "u32",
    "NftId": "u32",
    "BlockNumber": "u32",
}

# Struct types that map onto a record class; the rest decode to dicts.
RECORD_TYPES: dict[str, Callable[..., Any]] = {
    "RpcAccountData": RpcAccountData,
    "RpcLockedFund": RpcLockedFund,
    "PendingNftPods": PendingNftPods,
    "RpcNftData": RpcNftData,
    "NftData": NftData,
}

ENUM_TYPES: dict[str, Callable[[str], Any]] = {
    "LockReason": LockReason,
}

_UINT_BITS = {"u8": 8, "u16": 16, "u32": 32, "u64": 64, "u128": 128}
_GENERIC = re.compile(r"^(Vec|Option)<(.+)>$")


@dataclass
class RpcSchema:
    """Registry of custom calls and types used to encode params and decode results."""

    methods: dict[str, RpcMethod] = field(default_factory=lambda: dict(CUSTOM_RPC))
    types: dict[str, Any] = field(default_factory=lambda: dict(CUSTOM_TYPES))
    records: dict[str, Callable[..., Any]] = field(default_factory=lambda: dict(RECORD_TYPES))
    enums: dict[str, Callable[[str], Any]] = field(default_factory=lambda: dict(ENUM_TYPES))
    namespace: str = RPC_NAMESPACE
    ss58_format: int = DEFAULT_SS58_FORMAT

    def method(self, name: str) -> RpcMethod:
        try:
            return self.methods[name]
        except KeyError:
            raise KeyError(f"custom RPC {name!r} is not declared in the schema") from None

    def required_wire_names(self) -> list[str]:
        return [m.wire_name(self.namespace) for m in self.methods.values() if not m.optional]

    def register_types(self, types: dict[str, Any]) -> None:
        self.types.update(types)

    def register_method(self, method: RpcMethod) -> None:
        self.methods[method.name] = method

    # ── Encoding ───────────────────────────────────────────

    def encode_params(self, method: RpcMethod, args: tuple[Any, ...]) -> list[Any]:
        if len(args) != len(method.params):
            raise TypeError(
                f"{method.name} takes {len(method.params)} argument(s), got {len(args)}"
            )
        return [self.encode(p.type, a) for p, a in zip(method.params, args)]

    def encode(self, type_name: str, value: Any) -> Any:
        type_name = self._resolve(type_name)
        if type_name == "AccountId":
            return normalize_account(value, self.ss58_format)
        if type_name in _UINT_BITS:
            return int(value)
        if type_name == "Vec<u8>":
            return bytes_to_hex(value) if not isinstance(value, str) else value
        return value

    # ── Decoding ───────────────────────────────────────────

    def decode(self, type_name: str, value: Any) -> Any:
        """Decode a JSON value according to a registered type name."""
        resolved = self._resolve(type_name)

        match = _GENERIC.match(resolved)
        if match and resolved != "Vec<u8>":
            kind, inner = match.groups()
            if kind == "Option":
                return None if value is None else self.decode(inner, value)
            if not isinstance(value, list):
                raise DecodeError(f"{resolved}: expected a list, got {value!r}")
            return [self.decode(inner, item) for item in value]

        if resolved == "Vec<u8>":
            return self._decode_bytes(value)
        if resolved in _UINT_BITS:
            return self._decode_uint(resolved, value)
        if resolved == "String":
            return self._decode_numeric_string(value)
        if resolved == "AccountId":
            try:
                return normalize_account(value, self.ss58_format)
            except DecodeError as exc:
                raise DecodeError(f"AccountId: {exc}") from exc

        definition = self.types.get(resolved)
        if isinstance(definition, dict) and "_enum" in definition:
            return self._decode_enum(resolved, definition["_enum"], value)
        if isinstance(definition, dict):
            return self._decode_struct(resolved, definition, value)

        raise DecodeError(f"unknown type {type_name!r}")

    def _resolve(self, type_name: str) -> str:
        seen = set()
        while isinstance(self.types.get(type_name), str):
            if type_name in seen:
                raise DecodeError(f"type alias cycle at {type_name!r}")
            seen.add(type_name)
            type_name = self.types[type_name]
        match = _GENERIC.match(type_name)
        if match:
            kind, inner = match.groups()
            inner = self._resolve(inner)
            return f"{kind}<{inner}>"
        return type_name

    def _decode_struct(self, name: str, fields: dict[str, str], value: Any) -> Any:
        if not isinstance(value, dict):
            raise DecodeError(f"{name}: expected an object, got {value!r}")
        missing = [f for f in fields if f not in value]
        if missing:
            raise DecodeError(f"{name}: missing field(s) {', '.join(missing)}")
        decoded = {f: self.decode(t, value[f]) for f, t in fields.items()}
        factory = self.records.get(name)
        return factory(**decoded) if factory else decoded

    def _decode_enum(self, name: str, variants: list[str], value: Any) -> Any:
        if isinstance(value, int) and 0 <= value < len(variants):
            variant = variants[value]
        elif isinstance(value, str) and value in variants:
            variant = value
        elif isinstance(value, dict) and len(value) == 1 and next(iter(value)) in variants:
            variant = next(iter(value))
        else:
            raise DecodeError(f"{name}: {value!r} is not one of {variants}")
        factory = self.enums.get(name)
        return factory(variant) if factory else variant

    @staticmethod
    def _decode_uint(type_name: str, value: Any) -> int:
        if isinstance(value, str):
            try:
                value = int(value, 16) if value[:2] in ("0x", "0X") else int(value)
            except ValueError:
                raise DecodeError(f"{type_name}: {value!r} is not an integer") from None
        if isinstance(value, bool) or not isinstance(value, int):
            raise DecodeError(f"{type_name}: {value!r} is not an integer")
        if value < 0 or value >= 1 << _UINT_BITS[type_name]:
            raise DecodeError(f"{type_name}: {value} out of range")
        return value

    @staticmethod
    def _decode_numeric_string(value: Any) -> int:
        """Balances travel as decimal strings (or hex for u128 on some nodes)."""
        if isinstance(value, bool):
            raise DecodeError(f"String: {value!r} is not a balance")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            try:
                return int(value, 16) if value[:2] in ("0x", "0X") else int(value)
            except ValueError:
                pass
        raise DecodeError(f"String: {value!r} is not a balance")

    @staticmethod
    def _decode_bytes(value: Any) -> bytes:
        if isinstance(value, str):
            return hex_to_bytes(value)
        if isinstance(value, list):
            if not all(isinstance(b, int) and 0 <= b < 256 for b in value):
                raise DecodeError(f"Vec<u8>: {value!r} is not a byte list")
            return bytes(value)
        raise DecodeError(f"Vec<u8>: {value!r} is not bytes")
