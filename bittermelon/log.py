"""Logging setup shared by scripts and embedding applications."""

import logging

from bittermelon.config import Settings, get_settings

LOG_FORMAT = "%(asctime)s - {app_name} - %(name)s - %(levelname)s - %(message)s"


def log_format(settings: Settings) -> str:
    """LOG_FORMAT with the application name filled in."""
    return LOG_FORMAT.format(app_name=settings.app_name.replace("%", "%%"))


def configure_logging(settings: Settings | None = None) -> None:
    """
    Configure root logging from settings.

    Modules log through logging.getLogger(__name__); this only installs the
    handler and level. Calling it twice is harmless because basicConfig is a
    no-op once the root logger has handlers.
    """
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format=log_format(settings),
    )
