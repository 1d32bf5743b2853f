"""
Logging configuration for SmartBrain
"""

import logging


def setup_logging(debug: bool = False) -> None:
    """
    Configure root logging for the command line tools

    Per-tick detail is logged at DEBUG, lifecycle edges at INFO.

    Args:
        debug: If True, enable DEBUG level logging
    """
    log_level = logging.DEBUG if debug else logging.INFO

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    if debug:
        logging.debug("Debug logging enabled")
