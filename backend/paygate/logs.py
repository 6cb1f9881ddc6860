"""Request outcome logging."""
import logging

from fastapi import Request

logger = logging.getLogger("paygate.access")


def log_status(request: Request, status: int, message: str) -> None:
    """
    Log a request outcome as "[status] [METHOD] [path] message".

    Level follows the status class: 5xx error, 4xx warning, everything else info.
    """
    if 500 <= status < 600:
        level = logging.ERROR
    elif 400 <= status < 500:
        level = logging.WARNING
    else:
        level = logging.INFO

    path = request.url.path
    if request.url.query:
        path = f"{path}?{request.url.query}"

    logger.log(level, f"[{status}] [{request.method}] [{path}] {message}")
