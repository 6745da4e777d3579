"""Run the service with uvicorn: ``python -m revops_maturity``."""

import uvicorn

from revops_maturity.settings import get_settings


def main() -> None:
    """Start uvicorn using host and port from the environment settings."""
    settings = get_settings()
    uvicorn.run(
        "revops_maturity.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
