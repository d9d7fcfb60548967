"""
Server entry point for Workforce Risk.

Run with `workforce-risk` (console script) or
`uvicorn workforce_risk.server:app`.
"""

import logging

import uvicorn

from workforce_risk.api.routes import create_app
from workforce_risk.config.datadog_logger import configure_logging
from workforce_risk.config.settings import get_settings

settings = get_settings()
configure_logging(settings)

app = create_app()

logging.getLogger(__name__).info(
    f"Workforce Risk initialized (env={settings.environment}, "
    f"workforce_configured={settings.workforce_configured}, "
    f"llm_configured={bool(settings.anthropic_api_key)})"
)


def main():
    uvicorn.run(
        "workforce_risk.server:app",
        host=settings.host,
        port=settings.port,
        timeout_keep_alive=75,
        reload=False,
    )


if __name__ == "__main__":
    main()
