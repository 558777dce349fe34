import logging
from functools import lru_cache

from firebase_admin import messaging

from database import get_firebase_app

logger = logging.getLogger(__name__)


class TopicNotifier:
    """Broadcasts push notifications to every subscriber of a topic"""

    def __init__(self, app=None):
        self.app = app

    def send(self, topic: str, title: str, body: str) -> str:
        message = messaging.Message(
            notification=messaging.Notification(title=title, body=body),
            topic=topic,
        )
        message_id = messaging.send(message, app=self.app)
        logger.info("Notification %s sent to topic %s", message_id, topic)
        return message_id


@lru_cache()
def get_notifier() -> TopicNotifier:
    return TopicNotifier(get_firebase_app())
