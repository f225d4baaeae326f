"""Pipeline event notifiers."""

from taller.infrastructure.notifications.log_notifier import LogNotifier

__all__ = ["LogNotifier"]
