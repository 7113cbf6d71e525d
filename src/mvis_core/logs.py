import logging


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Configure stderr logging for a command-line run and return its logger."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(message)s")
    return logging.getLogger("mvis")
