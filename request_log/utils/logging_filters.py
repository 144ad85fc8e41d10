"""Logging filters that tie records to the request being handled."""

import logging

from request_log.utils.request_context import get_request_id


class RequestIdFilter(logging.Filter):
    """
    Stamp ``record.request_id`` with the id of the current request.

    Use ``%(request_id)s`` / ``{request_id}`` in a formatter to correlate the
    request line with everything else logged while handling it. Records
    emitted outside a request get ``placeholder``.
    """

    def __init__(self, name: str = '', placeholder: str = '-'):
        super().__init__(name)
        self.placeholder = placeholder

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, 'request_id'):
            record.request_id = get_request_id() or self.placeholder
        return True
