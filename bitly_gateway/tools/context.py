from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from bitly_gateway.config.settings import ExchangeSettings

if TYPE_CHECKING:
    from bitly_gateway.config.store import ConfigStore
    from bitly_gateway.session.factory import SessionFactory


@dataclass(frozen=True)
class ToolContext:
    """Runtime context handed to every tool execution.

    store: owner of the swappable config/registry snapshot.
    session_factory: builds the per-call exchange session.
    sleep: awaited for the settlement wait; tests inject a fake clock.
    """

    store: ConfigStore
    session_factory: SessionFactory
    exchange: ExchangeSettings = field(default_factory=ExchangeSettings)
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
