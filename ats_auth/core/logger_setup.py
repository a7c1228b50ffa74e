"""
Logger Setup
-----------
Loguru configuration shared by the auth service and the admin gateway.

Every record carries the emitting service's name, so logs from both
processes can be interleaved in one stream.
"""

import sys
from typing import Optional

from loguru import logger

from ats_auth.core.config_manager import ApplicationSettings, settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>{extra[service]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[service]} | "
    "{name}:{function}:{line} | {message}"
)


def configure_logger(
    app_settings: Optional[ApplicationSettings] = None,
    service_name: str = "auth",
) -> None:
    """
    Replace loguru's default handler with the service handlers.

    Args:
        app_settings: Settings providing level and debug mode. Defaults to
                      the global settings.
        service_name: Value of the `service` field on every record; also
                      names the log file outside debug mode.
    """
    app_settings = app_settings or settings

    logger.remove()
    logger.configure(extra={"service": service_name})

    logger.add(
        sys.stdout,
        format=CONSOLE_FORMAT,
        level=app_settings.log_level,
        colorize=True,
        backtrace=True,
        diagnose=app_settings.debug,
    )

    # Rotating file handler outside debug mode
    if not app_settings.debug:
        logger.add(
            f"logs/{service_name}_{{time:YYYY-MM-DD}}.log",
            rotation="500 MB",
            retention="10 days",
            level=app_settings.log_level,
            format=FILE_FORMAT,
            backtrace=True,
            diagnose=False,
        )

    logger.info(f"Logger configured for {service_name} with level: {app_settings.log_level}")
