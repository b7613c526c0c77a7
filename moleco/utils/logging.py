# Logging configuration for the MoleCo swatch generator.

import logging
import sys
from moleco.config import settings


def setup_logging():
    # Configure application logging.
    handlers = [logging.StreamHandler(sys.stdout)]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file, mode="a"))

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper()),
        format=settings.log_format,
        handlers=handlers
    )

    # Set specific logger levels
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("fastapi").setLevel(logging.INFO)

    return logging.getLogger("moleco")


# Initialize logger
logger = setup_logging()
