"""Django middleware that writes one log line per request, with sensitive parameters masked."""

from request_log.utils.request_context import get_context, set_custom_data

__all__ = ["get_context", "set_custom_data"]
