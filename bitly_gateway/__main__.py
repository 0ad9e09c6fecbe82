"""Run the gateway: python -m bitly_gateway"""

from __future__ import annotations

import uvicorn

from bitly_gateway.config.settings import get_settings
from bitly_gateway.gateway.app import create_app


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        create_app(settings),
        host=settings.gateway.host,
        port=settings.gateway.port,
        log_level=settings.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
