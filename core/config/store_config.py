#!/usr/bin/env python3
"""Hosted table store configuration

Connection settings for the PostgREST endpoint that holds the
products and inventory tables.
"""
import os
from dataclasses import dataclass

def _float(val: str, default: float) -> float:
    try:
        return float(val) if val else default
    except ValueError:
        return default


@dataclass
class StoreConfig:
    """Table store endpoint and table names"""
    url: str = "http://localhost:54321"
    api_key: str = ""
    timeout: float = 10.0
    products_table: str = "products"
    inventory_table: str = "inventory"

    @property
    def rest_url(self) -> str:
        return f"{self.url.rstrip('/')}/rest/v1"

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.api_key)

    @classmethod
    def from_env(cls) -> 'StoreConfig':
        """Load store configuration from environment variables"""
        return cls(
            url=os.getenv("SUPABASE_URL", "http://localhost:54321"),
            api_key=os.getenv("SUPABASE_ANON_KEY", ""),
            timeout=_float(os.getenv("STORE_TIMEOUT", "10"), 10.0),
            products_table=os.getenv("PRODUCTS_TABLE", "products"),
            inventory_table=os.getenv("INVENTORY_TABLE", "inventory"),
        )
