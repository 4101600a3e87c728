"""Notification sink interface."""

from abc import ABC, abstractmethod


class NotificationError(Exception):
    """A backup summary could not be delivered."""
    pass


class NotificationSinkInterface(ABC):
    """Fire-and-forget delivery of a text message."""

    @abstractmethod
    async def send(self, subject: str, body: str) -> None:
        """
        Deliver a message.

        Raises:
            NotificationError: If delivery fails
        """
        pass


class NullNotificationSink(NotificationSinkInterface):
    """Sink used when no delivery channel is configured."""

    async def send(self, subject: str, body: str) -> None:
        raise NotificationError("No notification channel configured")
