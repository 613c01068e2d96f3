from .catchall import CatchAllExceptionMiddleware
from .handlers import plain_text_errors, register_error_handlers

__all__ = ["CatchAllExceptionMiddleware", "plain_text_errors", "register_error_handlers"]
