"""
Event publishing
"""

from .publisher import DaprEventPublisher, event_publisher

__all__ = ["DaprEventPublisher", "event_publisher"]
