"""Exception types raised by the notification system."""


class NotificationError(Exception):
    """Base class for notification failures."""


class EmailConfigError(NotificationError):
    """Required email transport configuration is missing."""


class EmailDeliveryError(NotificationError):
    """The email provider rejected or failed the send."""

    def __init__(self, message: str, status: int | str | None = None):
        super().__init__(message)
        self.status = status

    def __str__(self) -> str:
        message = super().__str__()
        if self.status is None:
            return message
        return f"{message} (status {self.status})"
