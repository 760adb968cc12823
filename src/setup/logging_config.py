import logging

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the API process."""
    logging.basicConfig(level=level.upper(), format=_FORMAT)
    # Request lines from httpx are noisy at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)
