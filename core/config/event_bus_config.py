#!/usr/bin/env python3
"""Event bus configuration

Connection settings for the NATS JetStream broker that receives
inventory events.
"""
import os
from dataclasses import dataclass
from typing import Optional


def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default


def _float(val: str, default: float) -> float:
    try:
        return float(val) if val else default
    except ValueError:
        return default


def _bool(val: str) -> bool:
    return val.lower() in ("true", "1", "yes")


@dataclass
class EventBusConfig:
    """NATS connection and stream settings"""
    enabled: bool = True

    # ===========================================
    # NATS (native - port 4222)
    # ===========================================
    nats_host: str = "localhost"
    nats_port: int = 4222
    nats_url: Optional[str] = None
    connect_timeout: float = 2.0

    # JetStream stream holding every inventory.* subject
    stream_name: str = "inventory-stream"

    @property
    def servers(self) -> str:
        return self.nats_url or f"nats://{self.nats_host}:{self.nats_port}"

    @classmethod
    def from_env(cls) -> 'EventBusConfig':
        """Load event bus configuration from environment variables"""
        return cls(
            enabled=_bool(os.getenv("EVENT_BUS_ENABLED", "true")),
            nats_host=os.getenv("NATS_HOST", "localhost"),
            nats_port=_int(os.getenv("NATS_PORT", "4222"), 4222),
            nats_url=os.getenv("NATS_URL"),
            connect_timeout=_float(os.getenv("NATS_CONNECT_TIMEOUT", "2"), 2.0),
            stream_name=os.getenv("NATS_STREAM", "inventory-stream"),
        )
