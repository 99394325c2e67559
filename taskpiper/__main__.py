"""Run the API with uvicorn: ``python -m taskpiper``."""

import uvicorn

from taskpiper.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "taskpiper.main:app",
        host=settings.host,
        port=settings.port,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    main()
