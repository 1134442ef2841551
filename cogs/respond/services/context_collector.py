"""Conversation context collection from the bot's message cache."""

import logging
from typing import Any, Callable, Iterable, List

from ..models.chat import Author, ChatMessage

logger = logging.getLogger(__name__)


class ContextCollector:
    """Reads recent channel messages from an in-memory cache."""

    def __init__(self, message_cache: Callable[[], Iterable[Any]]):
        """
        Initialize context collector.

        Args:
            message_cache: Callable returning cached messages oldest first,
                e.g. ``lambda: bot.cached_messages``
        """
        self.message_cache = message_cache

    def collect(self, channel_id: int, context_length: int) -> List[ChatMessage]:
        """
        Get up to ``context_length`` most recent messages of a channel.

        Every message is tagged with the ``user`` role, including messages
        written by bots.

        Args:
            channel_id: Discord channel ID
            context_length: Maximum number of messages to return

        Returns:
            ChatMessage list, oldest first (may be empty)
        """
        if context_length <= 0:
            return []

        channel_messages = [
            message for message in self.message_cache()
            if message.channel.id == channel_id
        ]
        recent = channel_messages[-context_length:]

        logger.debug(
            f"Collected {len(recent)}/{len(channel_messages)} cached messages "
            f"for channel {channel_id}"
        )

        return [
            ChatMessage(
                content=message.content or "",
                role="user",
                author=Author(
                    display_name=message.author.display_name,
                    is_bot=bool(message.author.bot),
                ),
            )
            for message in recent
        ]
