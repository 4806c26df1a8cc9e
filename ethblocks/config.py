"""Project-level configuration and path helpers."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from .models import OverflowPolicy

PROJECT_ROOT = Path(__file__).resolve().parent.parent
LOGS_DIR = PROJECT_ROOT / "logs"
DEFAULT_LOG_PATH = LOGS_DIR / "app.log"

DEFAULT_PROVIDER_URL = "http://localhost:8545"
DEFAULT_NETWORK_ID = 3  # Ropsten
DEFAULT_EVENT_TYPES = ("Transfer", "Approval")


PathLike = Union[str, Path]


def resolve_path(env_value: PathLike | None) -> Path | None:
    """Resolve a path from the environment relative to the project root."""
    if not env_value:
        return None

    candidate = Path(env_value)
    return candidate if candidate.is_absolute() else PROJECT_ROOT / candidate


def parse_event_types(env_value: str | None) -> list[str]:
    """Parse a comma separated list of event types, keeping order, no duplicates."""
    if not env_value:
        return list(DEFAULT_EVENT_TYPES)

    event_types: list[str] = []
    for name in env_value.split(","):
        name = name.strip()
        if name and name not in event_types:
            event_types.append(name)

    if not event_types:
        raise ValueError(f"EVENT_TYPES has no event names: {env_value!r}")
    return event_types


def _optional_int(name: str, value: str | None) -> int | None:
    if value is None or value.strip() == "":
        return None
    try:
        return int(value)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {value!r}") from e


@dataclass
class Settings:
    """Runtime settings, normally read from the environment."""

    provider_url: str = DEFAULT_PROVIDER_URL
    network_id: int = DEFAULT_NETWORK_ID
    account: str | None = None
    contract_address: str | None = None
    artifact_path: Path | None = None
    event_types: list[str] = field(default_factory=lambda: list(DEFAULT_EVENT_TYPES))
    queue_capacity: int | None = None
    queue_overflow: OverflowPolicy = OverflowPolicy.DROP_OLDEST
    poll_interval: float = 2.0
    api_host: str = "localhost"
    api_port: int = 8000

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables."""
        network_id = _optional_int("ETH_NETWORK_ID", os.getenv("ETH_NETWORK_ID"))
        api_port = _optional_int("API_PORT", os.getenv("API_PORT"))

        capacity = _optional_int("EVENT_QUEUE_CAPACITY", os.getenv("EVENT_QUEUE_CAPACITY"))
        if capacity is not None and capacity < 1:
            raise ValueError(f"EVENT_QUEUE_CAPACITY must be at least 1, got {capacity}")

        overflow_value = os.getenv("EVENT_QUEUE_OVERFLOW", OverflowPolicy.DROP_OLDEST.value)
        try:
            overflow = OverflowPolicy(overflow_value.strip().lower())
        except ValueError as e:
            raise ValueError(
                f"EVENT_QUEUE_OVERFLOW must be 'drop_oldest' or 'reject', got {overflow_value!r}"
            ) from e

        poll_interval_value = os.getenv("EVENT_POLL_INTERVAL", "2.0")
        try:
            poll_interval = float(poll_interval_value)
        except ValueError as e:
            raise ValueError(
                f"EVENT_POLL_INTERVAL must be a number, got {poll_interval_value!r}"
            ) from e
        if poll_interval <= 0:
            raise ValueError(f"EVENT_POLL_INTERVAL must be positive, got {poll_interval}")

        return cls(
            provider_url=os.getenv("ETH_PROVIDER_URL", DEFAULT_PROVIDER_URL),
            network_id=DEFAULT_NETWORK_ID if network_id is None else network_id,
            account=os.getenv("ETH_ACCOUNT") or None,
            contract_address=os.getenv("TOKEN_CONTRACT_ADDRESS") or None,
            artifact_path=resolve_path(os.getenv("TOKEN_ARTIFACT_PATH")),
            event_types=parse_event_types(os.getenv("EVENT_TYPES")),
            queue_capacity=capacity,
            queue_overflow=overflow,
            poll_interval=poll_interval,
            api_host=os.getenv("API_HOST", "localhost"),
            api_port=8000 if api_port is None else api_port,
        )
