"""Deterministic development identities."""

from __future__ import annotations

from xychain_e2e.identities import AUDITOR_URI, DEV_URIS, dev_accounts, dev_keypair

from tests.factories import ALICE_ADDRESS, ALICE_PUBLIC_KEY, BOB_ADDRESS


def test_known_dev_addresses():
    assert dev_keypair("//Alice").ss58_address == ALICE_ADDRESS
    assert dev_keypair("//Alice").public_key.hex() == ALICE_PUBLIC_KEY[2:]
    assert dev_keypair(AUDITOR_URI).ss58_address == BOB_ADDRESS


def test_bare_names_are_dev_uris():
    assert dev_keypair("dave").ss58_address == dev_keypair("//Dave").ss58_address


def test_derivation_is_deterministic():
    assert dev_keypair("//Eve") is dev_keypair("//Eve")
    assert dev_accounts()["eve"].ss58_address == dev_keypair("//Eve").ss58_address


def test_dev_accounts_are_distinct():
    accounts = dev_accounts()
    assert set(accounts) == {uri.lstrip("/").lower() for uri in DEV_URIS}
    assert len({kp.ss58_address for kp in accounts.values()}) == len(DEV_URIS)
