from .notifier import EventNotifier, EventType

__all__ = ["EventNotifier", "EventType"]
