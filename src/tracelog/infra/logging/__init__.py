from __future__ import annotations

from .handlers import (
    build_formatter,
    close_handlers,
    create_rotating_file_handler,
    create_stream_handler,
)

__all__ = [
    "build_formatter",
    "close_handlers",
    "create_rotating_file_handler",
    "create_stream_handler",
]
