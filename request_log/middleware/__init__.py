"""Middleware for the request log"""
from .request_logger import RequestLogMiddleware

__all__ = ["RequestLogMiddleware"]
