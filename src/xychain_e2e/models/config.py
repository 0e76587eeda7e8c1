"""Configuration models for the harness."""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_SCENARIOS = ["nft_pod", "nft_download"]


@dataclass
class HarnessConfig:
    """Complete harness configuration."""

    # Node
    url: str = "ws://127.0.0.1:9944"
    ss58_format: int = 42
    connect_timeout: float = 10.0  # seconds
    request_timeout: float = 30.0  # seconds per JSON-RPC request

    # Submission
    submit_timeout: float = 60.0  # seconds until SubmissionTimeout

    # Scenarios
    scenarios: list[str] = field(default_factory=lambda: list(DEFAULT_SCENARIOS))
    payload_path: str = ""  # file minted by nft_download
    output_path: str = ""  # where nft_download writes the fetched payload

    # Logging
    log_level: str = "info"

    @property
    def http_url(self) -> str:
        """The same endpoint over HTTP, for one-shot health checks."""
        if self.url.startswith("wss://"):
            return "https://" + self.url[len("wss://"):]
        if self.url.startswith("ws://"):
            return "http://" + self.url[len("ws://"):]
        return self.url
