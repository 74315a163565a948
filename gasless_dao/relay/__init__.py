"""
Relayer Package

RelayService submits signed forward requests from the relayer's account;
the FastAPI routes expose it to wallets and front-ends.
"""

from .routes import build_relay_app, create_app, create_relay_router, relay_router
from .service import (
    DEFAULT_RELAY_GAS_LIMIT,
    NonceMismatchError,
    RelayError,
    RelayerNotConfiguredError,
    RelayReceipt,
    RelayService,
)

__all__ = [
    "DEFAULT_RELAY_GAS_LIMIT",
    "NonceMismatchError",
    "RelayError",
    "RelayReceipt",
    "RelayService",
    "RelayerNotConfiguredError",
    "build_relay_app",
    "create_app",
    "create_relay_router",
    "relay_router",
]
