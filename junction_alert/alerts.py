import logging

logger = logging.getLogger(__name__)


class AlertSink:
    """Delivery side of an alert: notification, vibration and speech.

    Platform integrations subclass this; the base class does nothing.
    """

    def notify(self, title: str, body: str, sound: bool = True, data: dict = None) -> None:
        pass

    def vibrate(self, pattern) -> None:
        pass

    def speak(self, text: str) -> None:
        pass


class LoggingAlertSink(AlertSink):
    """Writes every alert to the log; the default when no device is attached."""

    def notify(self, title: str, body: str, sound: bool = True, data: dict = None) -> None:
        logger.info(f"NOTIFY {title}: {body} (sound={sound}, data={data})")

    def vibrate(self, pattern) -> None:
        logger.info(f"VIBRATE {list(pattern)}")

    def speak(self, text: str) -> None:
        logger.info(f"SPEAK {text}")
