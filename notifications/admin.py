from django.contrib import admin

from notifications.models import TelegramSubscriber


@admin.register(TelegramSubscriber)
class TelegramSubscriberAdmin(admin.ModelAdmin):
    list_display = ("id", "chat_id", "created_at")
