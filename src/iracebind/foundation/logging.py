from __future__ import annotations

import logging


def configure_iracebind_logging(*, level: int = logging.INFO) -> None:
    """
    Configure a minimal console logger for iracebind.

    Notes:
        - This is opt-in (library code must not call logging.basicConfig()).
        - The handler is only attached if neither the root logger nor the "iracebind" logger has handlers.
    """
    root = logging.getLogger()
    package_logger = logging.getLogger("iracebind")

    # If the user already configured logging, don't interfere.
    if root.handlers or package_logger.handlers:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(name)s %(levelname)s: %(message)s"))
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    package_logger.propagate = False


__all__ = ["configure_iracebind_logging"]
