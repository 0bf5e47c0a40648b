"""Process entry point: serve the users API with uvicorn.

Host and port come from ``HOST`` / ``PORT`` (defaults ``127.0.0.1`` and
``3000``). Run with ``users-api`` or ``python -m users_api.main``.
"""

from __future__ import annotations

import logging

import uvicorn

from users_api.app import create_app
from users_api.core.config import get_settings


def main() -> None:
    settings = get_settings()
    app = create_app(settings)
    logging.getLogger(__name__).info("Server running on http://%s:%s", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    try:
        main()
    except (KeyboardInterrupt, SystemExit):
        pass
