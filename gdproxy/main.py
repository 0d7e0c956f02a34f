"""Process entry point: configure logging and serve the relay with uvicorn."""
import logging

import uvicorn

from gdproxy.core.config import Settings


def run():
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("gdproxy.api.main:app", host=settings.host, port=settings.port,
                log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
