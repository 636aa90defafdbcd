import logging
import os

import uvicorn

from movie_api.core.logging import setup_logging
from movie_api.core.settings import get_settings
from movie_api.main import check_settings


def run() -> None:
    settings = get_settings()
    setup_logging(settings.log_level)
    check_settings(settings)
    logging.getLogger("startup").info("Serving on port %s", os.getenv("PORT", "3000"))
    uvicorn.run(
        "movie_api.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
    )


if __name__ == "__main__":
    run()
