import logging

import uvicorn

from .config import settings

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

uvicorn.run("resume_optimizer.main:app", host=settings.host, port=settings.port)
