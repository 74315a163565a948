"""
FastAPI Router for the Relay Endpoint

    POST /api/relay                  submit {request, signature}
    GET  /api/relay/nonce/{address}  current forwarder nonce for an address

Numbers in requests and responses are decimal strings so 256-bit values
survive JSON clients. Errors are returned as {"error": ..., "message": ...}.
"""

from typing import Any

import structlog
from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse

from ..config import DAOSettings, get_settings
from ..deployment import Deployment, deploy_gasless_dao
from ..monitoring.logging import LoggingContextMiddleware, configure_logging
from .service import NonceMismatchError, RelayerNotConfiguredError, RelayService

logger = structlog.get_logger(__name__)

relay_router = APIRouter(prefix="/relay", tags=["Relay"])


def _error(status_code: int, error: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, **extra})


def get_relay_service(request: Request) -> RelayService | None:
    return getattr(request.app.state, "relay_service", None)


# ==================== Relay Routes ====================


@relay_router.post("")
async def relay_meta_transaction(request: Request):
    """
    Relay a signed ForwardRequest through the forwarder.

    The relayer pays for the transaction. The request's nonce must be the
    sender's current forwarder nonce.
    """
    try:
        body = await request.json()
    except ValueError:
        body = None
    if not isinstance(body, dict) or not body.get("request") or not body.get("signature"):
        return _error(400, "Missing request or signature")

    service = get_relay_service(request)
    if service is None or not service.is_configured:
        return _error(
            500,
            "Relayer not configured",
            message="Relayer private key or forwarder address missing",
        )

    try:
        receipt = service.relay(body["request"], body["signature"])
    except NonceMismatchError as e:
        return _error(
            400,
            "Nonce mismatch",
            expected=str(e.expected),
            received=str(e.received),
        )
    except RelayerNotConfiguredError as e:
        return _error(500, "Relayer not configured", message=str(e))
    except Exception as e:
        logger.error("relay_failed", error=str(e), error_type=type(e).__name__)
        return _error(500, "Failed to relay transaction", message=str(e) or "Unknown error")

    return {
        "success": receipt.success,
        "txHash": receipt.tx_hash,
        "blockNumber": receipt.block_number,
    }


@relay_router.get("/nonce/{address}")
async def get_forwarder_nonce(address: str, request: Request):
    """Current forwarder nonce of an address, as a decimal string."""
    service = get_relay_service(request)
    if service is None:
        return _error(500, "Relayer not configured", message="Forwarder is not configured")

    try:
        nonce = service.get_nonce(address)
    except ValueError:
        return _error(400, "Invalid address", message=f"Not an address: {address}")

    return {"address": address, "nonce": str(nonce)}


# ==================== Router Factory ====================


def create_relay_router() -> APIRouter:
    """
    Create the API router exposing the relay endpoints.

    Mount under /api:
        app.include_router(create_relay_router(), prefix="/api")
    """
    router = APIRouter()
    router.include_router(relay_router)
    return router


def create_app(relay_service: RelayService | None = None) -> FastAPI:
    """Standalone relay application with correlation-id logging."""
    app = FastAPI(title="Gasless DAO Relayer")
    app.state.relay_service = relay_service
    app.add_middleware(LoggingContextMiddleware)
    app.include_router(create_relay_router(), prefix="/api")
    return app


def build_relay_app(
    settings: DAOSettings | None = None,
    deployment: Deployment | None = None,
) -> FastAPI:
    """
    Relay application for a local network built from settings.

    Configures logging, deploys the forwarder and the DAO (unless a
    deployment is passed in) and serves the relayer configured by
    `relayer_private_key`. Usable as a uvicorn factory:

        uvicorn gasless_dao.relay.routes:build_relay_app --factory
    """
    settings = settings or get_settings()
    configure_logging(
        level=settings.log_level,
        json_output=settings.log_json or settings.is_production,
    )

    deployment = deployment or deploy_gasless_dao(settings=settings)
    service = RelayService.from_settings(
        deployment.chain,
        deployment.forwarder_address,
        settings,
    )
    if not service.is_configured:
        logger.warning("relayer_not_configured", hint="Set GASLESS_DAO_RELAYER_PRIVATE_KEY")

    app = create_app(service)
    app.state.deployment = deployment
    logger.info(
        "relay_app_ready",
        chain_id=deployment.chain.chain_id,
        forwarder=deployment.forwarder_address,
        dao=deployment.dao_address,
    )
    return app
