from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from bitly_gateway.config.settings import Settings, get_settings
from bitly_gateway.config.store import ConfigStore
from bitly_gateway.constants import CONFIG_QUERY_PARAM, SERVER_VERSION
from bitly_gateway.exchange.client import ExchangeClientFactory
from bitly_gateway.exchange.paper import PaperExchange, PaperLedger
from bitly_gateway.gateway.server import GatewayMCP
from bitly_gateway.infra.logging import setup_logging
from bitly_gateway.network.registry import ConnectionFactory
from bitly_gateway.network.rpc import RpcConnection
from bitly_gateway.session.factory import SessionFactory
from bitly_gateway.tools.builtins import register_builtins
from bitly_gateway.tools.context import ToolContext
from bitly_gateway.tools.registry import ToolRegistry

logger = structlog.get_logger()


def _paper_client_factory() -> ExchangeClientFactory:
    ledger = PaperLedger()

    def factory(network_id: int, connection: Any) -> PaperExchange:
        return PaperExchange(ledger, network_id, connection)

    return factory


# EXCHANGE_CLIENT name -> builder of the per-session client factory
CLIENT_FACTORIES: dict[str, Callable[[], ExchangeClientFactory]] = {
    "paper": _paper_client_factory,
}


def select_client_factory(name: str) -> ExchangeClientFactory:
    """Build the client factory registered under name. Raises ValueError if unknown."""
    builder = CLIENT_FACTORIES.get(name)
    if builder is None:
        raise ValueError(f"Unknown exchange client: {name} (available: {sorted(CLIENT_FACTORIES)})")
    return builder()


def create_app(
    settings: Settings | None = None,
    *,
    connection_factory: ConnectionFactory = RpcConnection,
    client_factory: ExchangeClientFactory | None = None,
    sleep: Callable[[float], Awaitable[None]] | None = None,
) -> FastAPI:
    """Build the gateway app. Collaborators are injectable for tests."""
    settings = settings or get_settings()
    endpoint = settings.gateway.endpoint

    store = ConfigStore(connection_factory=connection_factory)
    session_factory = SessionFactory(
        store, client_factory or select_client_factory(settings.exchange.client),
    )

    tool_registry = ToolRegistry()
    register_builtins(tool_registry)

    context_kwargs: dict[str, Any] = {"exchange": settings.exchange}
    if sleep is not None:
        context_kwargs["sleep"] = sleep
    context = ToolContext(store=store, session_factory=session_factory, **context_kwargs)

    mcp_server = GatewayMCP(
        tool_registry,
        context,
        host=settings.gateway.host,
        streamable_http_path=endpoint,
        stateless_http=True,
        json_response=True,
        log_level=settings.logging.level,
    )
    mcp_app = mcp_server.streamable_http_app()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Application lifespan: apply startup config and run the MCP session manager."""
        setup_logging(json_output=settings.logging.json_output, log_level=settings.logging.level)
        await store.reconfigure_from_env(settings)

        async with mcp_server.session_manager.run():
            logger.info(
                "gateway_started",
                host=settings.gateway.host,
                port=settings.gateway.port,
                endpoint=endpoint,
                exchange_client=settings.exchange.client,
                tools=len(tool_registry.names()),
                configured=store.snapshot.is_configured,
            )
            yield

        logger.info("gateway_stopped")

    app = FastAPI(title="Bitly MCP Gateway", version=SERVER_VERSION, lifespan=lifespan)
    app.state.store = store
    app.state.tool_registry = tool_registry
    app.state.mcp_server = mcp_server

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["mcp-session-id"],
    )

    @app.middleware("http")
    async def apply_url_config(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Reconfigure from ?config= on MCP requests before the message is handled."""
        if request.url.path.rstrip("/") == endpoint and CONFIG_QUERY_PARAM in request.query_params:
            result = await store.reconfigure(str(request.url))
            logger.info("url_config_applied", ok=result.ok, changed=result.changed, code=result.code)
        return await call_next(request)

    @app.get("/health")
    async def health() -> dict[str, Any]:
        snapshot = store.snapshot
        return {
            "status": "ok",
            "configured": snapshot.is_configured,
            "networks": snapshot.registry.network_ids(),
        }

    # Routes declared above take precedence over the MCP app's catch-all mount.
    app.mount("/", mcp_app)

    return app
