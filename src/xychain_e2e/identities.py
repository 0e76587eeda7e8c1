"""Deterministic development identities."""

from __future__ import annotations

from functools import lru_cache

from substrateinterface import Keypair, KeypairType

from xychain_e2e.utils import DEFAULT_SS58_FORMAT

DEV_URIS = ("//Alice", "//Bob", "//Charlie", "//Dave", "//Eve", "//Ferdie")

AUDITOR_URI = "//Bob"


@lru_cache(maxsize=None)
def dev_keypair(uri: str, ss58_format: int = DEFAULT_SS58_FORMAT) -> Keypair:
    """Derive the sr25519 keypair for a secret URI such as `//Dave`."""
    if not uri.startswith("/"):
        uri = "//" + uri.capitalize()
    return Keypair.create_from_uri(
        uri, ss58_format=ss58_format, crypto_type=KeypairType.SR25519
    )


def dev_accounts(ss58_format: int = DEFAULT_SS58_FORMAT) -> dict[str, Keypair]:
    """Every well-known dev identity, keyed by lowercase name."""
    return {uri.lstrip("/").lower(): dev_keypair(uri, ss58_format) for uri in DEV_URIS}
