"""Core dispatch: tool lookup → argument validation → execute → serialize.

Session and delegate errors propagate unchanged; the transport maps them.
"""

from __future__ import annotations

import dataclasses
import json
import time
from decimal import Decimal
from typing import Any

import structlog
from pydantic import BaseModel, ValidationError

from bitly_gateway.infra.errors import InvalidParamsError, ToolNotFoundError
from bitly_gateway.tools.context import ToolContext
from bitly_gateway.tools.registry import ToolRegistry

logger = structlog.get_logger()


def _json_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, bytes):
        return "0x" + value.hex()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def serialize_result(value: Any) -> str:
    """Render a tool result as compact JSON text. Strings pass through unchanged."""
    if isinstance(value, str):
        return value
    return json.dumps(value, default=_json_default, separators=(",", ":"), ensure_ascii=False)


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        loc = ".".join(str(p) for p in item["loc"]) or "arguments"
        parts.append(f"{loc}: {item['msg']}")
    return "; ".join(parts)


async def dispatch_tool(
    *,
    registry: ToolRegistry,
    context: ToolContext,
    name: str,
    arguments: dict[str, Any] | None,
) -> str:
    """Run one tool call and return its serialized result.

    Raises ToolNotFoundError / InvalidParamsError before any handler logic
    runs. Errors from the handler itself are not wrapped.
    """
    tool = registry.get(name)
    if tool is None:
        raise ToolNotFoundError(name)

    try:
        params = tool.params_model.model_validate(arguments or {})
    except ValidationError as e:
        raise InvalidParamsError(
            f"Invalid arguments for {name}: {_format_validation_error(e)}"
        ) from e

    network_id = getattr(params, "network_id", None)
    started = time.monotonic()
    result = await tool.execute(params, context)
    logger.info(
        "tool_dispatched",
        tool_name=name,
        network_id=network_id,
        group=tool.group.value,
        risk_level=tool.risk_level.value,
        duration_ms=round((time.monotonic() - started) * 1000, 1),
    )
    return serialize_result(result)
