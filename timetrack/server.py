"""Console entry point: validate configuration, then serve the API."""

import argparse
import logging
import sys

from pydantic import ValidationError

from timetrack.logging_config import configure_logging

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Run the time tracker API")
    parser.add_argument("--host", default="0.0.0.0")  # noqa: S104
    parser.add_argument("--port", type=int, default=3000)
    parser.add_argument("--init-db", action="store_true", help="create missing tables and exit")
    args = parser.parse_args(argv)

    configure_logging()
    try:
        from timetrack.config import get_settings

        settings = get_settings()
    except ValidationError as exc:
        logger.error("Invalid configuration:\n%s", exc)
        sys.exit(1)

    if args.init_db:
        from timetrack.database import init_db

        init_db()
        logger.info("Database tables created")
        return

    import uvicorn

    logger.info("Serving on http://%s:%d (health check: /healthz)", args.host, args.port)
    uvicorn.run(
        "timetrack.main:app",
        host=args.host,
        port=args.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
