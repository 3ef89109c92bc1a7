import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the service process."""
    logging.basicConfig(format=LOG_FORMAT, level=getattr(logging, level.upper(), logging.INFO))
