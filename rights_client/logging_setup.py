# rights_client/logging_setup.py
import logging
import sys

LOG_FORMAT = "%(levelname)s [%(name)s]: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Console logging for scripts. Library modules only ever call logging.getLogger(__name__)."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, stream=sys.stderr)
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)
