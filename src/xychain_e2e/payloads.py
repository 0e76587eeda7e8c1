"""Reading and writing NFT payload files."""

from __future__ import annotations

import logging
from pathlib import Path

from xychain_e2e.errors import PayloadError
from xychain_e2e.utils import hex_to_bytes

log = logging.getLogger(__name__)


def read_payload(path: str | Path) -> bytes:
    """Read a file to mint as an NFT payload. Raises PayloadError."""
    p = Path(path).expanduser()
    try:
        data = p.read_bytes()
    except OSError as exc:
        raise PayloadError(str(p), exc.strerror or str(exc)) from exc
    if not data:
        raise PayloadError(str(p), "file is empty")
    log.debug("Read %d bytes from %s", len(data), p)
    return data


def write_payload(path: str | Path, payload: bytes | str) -> Path:
    """Write a payload given as bytes or hex. Returns the resolved path."""
    p = Path(path).expanduser()
    data = hex_to_bytes(payload) if isinstance(payload, str) else bytes(payload)
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(data)
    except OSError as exc:
        raise PayloadError(str(p), exc.strerror or str(exc)) from exc
    log.info("File saved to %s (%d bytes)", p, len(data))
    return p
