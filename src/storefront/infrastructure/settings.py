"""Runtime configuration read from environment variables."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"
_DEFAULT_GATEWAY_URL = "https://sandbox.payfast.co.za/eng/process"


def _int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


@dataclass(frozen=True)
class GatewaySettings:
    """Merchant credentials and URLs for the redirect payment gateway."""

    url: str = _DEFAULT_GATEWAY_URL
    merchant_id: str = ""
    merchant_key: str = ""
    return_url: str = ""
    cancel_url: str = ""
    notify_url: str = ""
    passphrase: str | None = None

    @staticmethod
    def from_env(environ: Mapping[str, str] | None = None) -> GatewaySettings:
        env = os.environ if environ is None else environ
        return GatewaySettings(
            url=env.get("PAYFAST_URL", _DEFAULT_GATEWAY_URL),
            merchant_id=env.get("PAYFAST_MERCHANT_ID", ""),
            merchant_key=env.get("PAYFAST_MERCHANT_KEY", ""),
            return_url=env.get("PAYFAST_RETURN_URL", ""),
            cancel_url=env.get("PAYFAST_CANCEL_URL", ""),
            notify_url=env.get("PAYFAST_NOTIFY_URL", ""),
            passphrase=env.get("PAYFAST_PASSPHRASE") or None,
        )


@dataclass(frozen=True)
class Settings:
    data_dir: Path = _DEFAULT_DATA_DIR
    # Seconds to wait for a data file lock before giving up.
    lock_timeout: float = 5.0
    # 0 sends notifications inline (still isolated from failures).
    notify_workers: int = 2
    gateway: GatewaySettings = field(default_factory=GatewaySettings)

    @staticmethod
    def from_env(environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        return Settings(
            data_dir=Path(env.get("STOREFRONT_DATA_DIR", _DEFAULT_DATA_DIR)),
            lock_timeout=_float(env, "STOREFRONT_LOCK_TIMEOUT", 5.0),
            notify_workers=_int(env, "STOREFRONT_NOTIFY_WORKERS", 2),
            gateway=GatewaySettings.from_env(env),
        )
