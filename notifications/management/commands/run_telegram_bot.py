import asyncio

from aiogram import Bot, Dispatcher
from aiogram.filters import CommandStart
from aiogram.types import Message
from asgiref.sync import sync_to_async
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from notifications.models import TelegramSubscriber


class Command(BaseCommand):
    help = "Run the Telegram bot that subscribes admins to booking notifications"

    def handle(self, *args, **options):
        if not settings.TELEGRAM_BOT_TOKEN:
            raise CommandError("TELEGRAM_BOT_TOKEN is not set")
        asyncio.run(self.run_bot(settings.TELEGRAM_BOT_TOKEN))

    async def run_bot(self, token):
        bot = Bot(token=token)
        dp = Dispatcher()

        @dp.message(CommandStart())
        async def start_handler(message: Message):
            await sync_to_async(
                TelegramSubscriber.objects.get_or_create
            )(chat_id=message.chat.id)

            await message.answer(
                "✅ You are subscribed to car booking notifications!"
            )

        self.stdout.write(self.style.SUCCESS("🤖 Telegram bot started"))
        await dp.start_polling(bot)
