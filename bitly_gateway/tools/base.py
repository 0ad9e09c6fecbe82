from __future__ import annotations

from abc import ABC, abstractmethod
from enum import StrEnum
from typing import TYPE_CHECKING, Any

import structlog

from bitly_gateway.network.descriptors import block_interval_ms

if TYPE_CHECKING:
    from bitly_gateway.exchange.client import ExchangeClient
    from bitly_gateway.session.factory import ExchangeSession
    from bitly_gateway.tools.context import ToolContext
    from bitly_gateway.tools.params import ToolParams

logger = structlog.get_logger()


class ToolGroup(StrEnum):
    account = "account"
    market = "market"
    trading = "trading"
    history = "history"
    prices = "prices"
    admin = "admin"


class RiskLevel(StrEnum):
    """Tool-level risk classification.

    low: read-only queries. high: submits transactions or changes gateway
    state. Undeclared tools default to 'high'.
    """

    low = "low"
    high = "high"


class BaseTool(ABC):
    """Abstract base class for gateway tools."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique tool name exposed in the catalogue."""
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description of what the tool does."""
        ...

    @property
    @abstractmethod
    def params_model(self) -> type[ToolParams]:
        """Pydantic model validating the tool's arguments."""
        ...

    @property
    def parameters(self) -> dict:
        """JSON Schema describing the tool's input parameters (camelCase)."""
        return self.params_model.model_json_schema(by_alias=True)

    @property
    def group(self) -> ToolGroup:
        return ToolGroup.market

    @property
    def risk_level(self) -> RiskLevel:
        return RiskLevel.high

    @abstractmethod
    async def execute(self, params: Any, context: ToolContext) -> Any:
        """Execute the tool with validated params. Returns a JSON-serializable value."""
        ...


class SessionTool(BaseTool):
    """Tool that runs one delegate call inside a fresh exchange session.

    Session errors (NotConfigured, UnknownNetwork, Unauthorized) propagate
    unchanged; so do delegate errors.
    """

    @property
    def risk_level(self) -> RiskLevel:
        return RiskLevel.low

    @abstractmethod
    async def invoke(self, client: ExchangeClient, params: Any) -> Any:
        """Call exactly one exchange client operation."""
        ...

    async def execute(self, params: Any, context: ToolContext) -> Any:
        factory = context.session_factory
        session = await factory.create_session(params.network_id)
        # The registry may have been rebuilt since the session was created.
        session = await factory.rebind(session)
        return await self.run(session, params, context)

    async def run(self, session: ExchangeSession, params: Any, context: ToolContext) -> Any:
        return await self.invoke(session.client, params)


class SettlingTool(SessionTool):
    """State-mutating tool: waits for settlement, then refreshes candle data.

    The refresh is best-effort; its failure never fails the tool.
    """

    @property
    def group(self) -> ToolGroup:
        return ToolGroup.trading

    @property
    def risk_level(self) -> RiskLevel:
        return RiskLevel.high

    async def run(self, session: ExchangeSession, params: Any, context: ToolContext) -> Any:
        result = await self.invoke(session.client, params)

        delay_ms = (
            block_interval_ms(params.network_id, context.exchange.default_block_time_ms)
            + context.exchange.settlement_margin_ms
        )
        await context.sleep(delay_ms / 1000)

        try:
            await session.client.update_kline(params.pair_id)
        except Exception:
            logger.warning(
                "kline_refresh_failed",
                tool_name=self.name,
                network_id=params.network_id,
                pair_id=params.pair_id,
                exc_info=True,
            )
        return result
