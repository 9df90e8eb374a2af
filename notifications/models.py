from django.db import models


class TelegramSubscriber(models.Model):
    """Telegram chat of an administrator who receives booking events."""

    chat_id = models.BigIntegerField(unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return str(self.chat_id)
