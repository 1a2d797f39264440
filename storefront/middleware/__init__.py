"""
Middleware modules for the Storefront Service
"""

from .trace_context import RequestTrace, TraceContextMiddleware, current_trace, get_trace_id

__all__ = ["RequestTrace", "TraceContextMiddleware", "current_trace", "get_trace_id"]
