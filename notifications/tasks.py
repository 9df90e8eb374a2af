import logging

import requests
from celery import shared_task
from django.conf import settings

from notifications.models import TelegramSubscriber

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org/bot{token}/sendMessage"


@shared_task(
    bind=True,
    autoretry_for=(requests.RequestException,),
    retry_kwargs={"max_retries": 3, "countdown": 10},
)
def send_telegram_notification(self, message: str):
    """
    Send notification message to all subscribed Telegram admins
    """
    token = settings.TELEGRAM_BOT_TOKEN
    if not token:
        logger.warning("TELEGRAM_BOT_TOKEN is not set, notification dropped")
        return 0

    url = TELEGRAM_API_URL.format(token=token)
    sent = 0

    for subscriber in TelegramSubscriber.objects.all():
        payload = {
            "chat_id": subscriber.chat_id,
            "text": message,
        }

        response = requests.post(url, json=payload, timeout=5)
        response.raise_for_status()
        sent += 1

    return sent
