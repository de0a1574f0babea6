import sys

from dotenv import load_dotenv
from loguru import logger

from src.api.availability_server import run_server
from src.config import get_settings

load_dotenv()


def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


if __name__ == "__main__":
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Starting availability server")
    run_server(host=settings.api_host, port=settings.api_port)
