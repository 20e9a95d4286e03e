"""Run the API with uvicorn: `python -m api`."""
import logging

import uvicorn

from core.config import get_settings


def main() -> None:
    """Configure logging and serve the application."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    uvicorn.run("api.main:app", host="0.0.0.0", port=8000, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
