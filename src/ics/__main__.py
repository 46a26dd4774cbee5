import sys

import uvicorn
from loguru import logger

from ics import __version__
from ics.app import create_web_app
from ics.config import get_app_settings


def __configure_logger():
    app_settings = get_app_settings()
    logger.remove()
    logger.add(sys.stdout, level=app_settings.log_level.upper(), format=app_settings.log_fmt)
    logger.add(sys.stderr, level="ERROR", format=app_settings.log_fmt)
    logger.add("logs/log_{time}.log", level=app_settings.log_level.upper(), retention="10 days",
               format=app_settings.log_fmt)


if __name__ == "__main__":
    __configure_logger()

    print(f"ics v{__version__}")
    app_cfg = get_app_settings()
    print(f" * max input size: {app_cfg.max_input_bytes} bytes\n"
          f" * encoder params:")

    for image_format, params in (app_cfg.encoder_params or {}).items():
        print(f" ** {image_format} -> {params}")

    l = logger.bind(source="core")
    l.info("Starting web host")

    web_app = create_web_app()
    uvicorn.run(web_app, **app_cfg.uvicorn)
