"""Telegram channel adapter using python-telegram-bot."""

from __future__ import annotations

import logging

from ..models import IncomingMessage, OutgoingMessage
from .base import ChannelAdapter, MessageHandler

logger = logging.getLogger(__name__)

FALLBACK_ERROR_REPLY = "Tuvimos un problema. Intenta nuevamente más tarde."


class TelegramAdapter(ChannelAdapter):
    """Telegram Bot API adapter (long polling)."""

    def __init__(self, config: dict, on_message: MessageHandler):
        super().__init__(config, on_message)
        self._app = None
        self.bot_token = config.get("bot_token", "")

    @property
    def name(self) -> str:
        return "telegram"

    def to_incoming(self, update) -> IncomingMessage | None:
        """Convert a telegram Update into an IncomingMessage (None if it has no text)."""
        message = update.effective_message
        if message is None or not message.text:
            return None
        user = update.effective_user
        chat = update.effective_chat
        bot_id = self._app.bot.id if self._app else None
        return IncomingMessage(
            channel="telegram",
            sender_id=str(user.id) if user else str(chat.id),
            sender_name=(user.full_name if user else "") or "Cliente",
            text=message.text,
            is_group=chat.type != "private",
            from_me=bool(user and bot_id is not None and user.id == bot_id),
            metadata={"chat_id": chat.id},
        )

    async def handle_update(self, update, context=None) -> None:
        msg = self.to_incoming(update)
        if msg is None:
            return
        try:
            response = await self.on_message(msg)
        except Exception as e:
            logger.error(f"Error handling message: {e}", exc_info=True)
            if not msg.is_group and not msg.from_me:
                await update.effective_message.reply_text(FALLBACK_ERROR_REPLY)
            return
        if response is not None:
            await update.effective_message.reply_text(response.text)

    async def _start(self) -> None:
        try:
            from telegram.ext import Application, MessageHandler as TGMessageHandler, filters
        except ImportError:
            raise ImportError(
                "python-telegram-bot not installed. Run: pip install turnero[telegram]"
            )

        if not self.bot_token:
            raise ValueError("Telegram channel enabled but bot_token is empty")

        logger.info(f"Building Telegram app with token: {self.bot_token[:10]}...")
        self._app = Application.builder().token(self.bot_token).build()
        # Commands like /start reach the engine as plain text too
        self._app.add_handler(TGMessageHandler(filters.TEXT, self.handle_update))

        logger.info("Telegram adapter starting (polling)")
        await self._app.initialize()
        await self._app.start()
        await self._app.updater.start_polling()

    async def _stop(self) -> None:
        if self._app:
            await self._app.updater.stop()
            await self._app.stop()
            await self._app.shutdown()
            self._app = None
            logger.info("Telegram adapter stopped")

    async def send_message(self, sender_id: str, message: OutgoingMessage) -> None:
        if self._app:
            await self._app.bot.send_message(chat_id=int(sender_id), text=message.text)
