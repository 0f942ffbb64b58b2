"""FastAPI application serving the console wallet endpoints."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from console_wallet.config import ConsoleBackendConfig
from console_wallet.server.handlers import ConsoleHandlers
from console_wallet.signing.base import Signer
from console_wallet.signing.client import TransactionSignerClient
from console_wallet.signing.router import build_signer
from console_wallet.wallet.relay import RelayClient

logger = logging.getLogger("console_wallet.server")

ACCOUNT_PATH = "/api/console-account"
PROXY_TX_PATH = "/api/proxy-tx"


def create_app(
    config: ConsoleBackendConfig | None = None,
    signer: Signer | None = None,
    relay_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the ASGI app.

    Parameters
    ----------
    config:
        Service configuration; defaults are used when omitted.
    signer:
        Signing backend. When omitted it is built from ``config.signing``.
    relay_transport:
        Optional httpx transport for the RPC relay (tests use a mock).
    """
    config = config or ConsoleBackendConfig()
    signer = signer or build_signer(config)
    handlers = ConsoleHandlers(
        config=config,
        signer_client=TransactionSignerClient(
            signer, timeout=config.signing.timeout_seconds
        ),
        relay_client=RelayClient.from_config(config.relay, transport=relay_transport),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Relaying transactions to {handlers.relay_client.rpc_url}")
        logger.info(f"Signing backend: {handlers.signer_client.signer.name}")
        logger.info("Endpoints:")
        logger.info(f"  POST {ACCOUNT_PATH} - Create custodial wallet")
        logger.info(f"  POST {PROXY_TX_PATH} - Proxy blockchain transactions")
        if config.derivation.uses_legacy_salt:
            logger.warning(
                "Wallet derivation uses the legacy shared salt; anyone who knows "
                "it can recompute every player's address. Set derivation.salt."
            )
        yield

    app = FastAPI(title="Console Wallet Backend", lifespan=lifespan)
    app.state.config = config
    app.state.handlers = handlers

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_methods=["POST", "GET", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return JSONResponse({"error": "Endpoint not found"}, status_code=404)
        return JSONResponse(
            {"error": str(exc.detail)},
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    # ------------------------------------------------------------------
    # API routes
    # ------------------------------------------------------------------

    @app.post(ACCOUNT_PATH)
    async def console_account(request: Request):
        raw_body = await request.body()
        # PBKDF2 is CPU-bound; keep the event loop free for other requests.
        result = await run_in_threadpool(handlers.create_account, raw_body)
        return JSONResponse(result.body, status_code=result.status_code)

    @app.post(PROXY_TX_PATH)
    async def proxy_tx(request: Request):
        raw_body = await request.body()
        result = await handlers.submit_transaction(raw_body)
        return JSONResponse(result.body, status_code=result.status_code)

    return app


# ------------------------------------------------------------------
# Runner
# ------------------------------------------------------------------


def run_server(config: ConsoleBackendConfig, host: str | None = None, port: int | None = None) -> None:
    app = create_app(config)
    uvicorn.run(
        app,
        host=host or config.server.host,
        port=port or config.server.port,
        log_level=config.logging.level.lower(),
    )
