"""Main respond service orchestrating collection, completion and presentation."""

import json
import logging
from typing import Optional

from ..core.config import ChatScope, OutputMode, RespondSettings
from ..core.exceptions import (
    EmptyChoicesException,
    EmptyContextException,
    MalformedResponseException,
    MissingApiKeyException,
    RequestInFlightException,
    UpstreamException,
)
from ..core.in_flight import InFlightGuard
from ..models.chat import GenerationResult
from ..models.outcome import OutcomeKind, RespondOutcome
from .completion_client import OpenRouterClient, build_request
from .context_collector import ContextCollector
from .response_interpreter import estimate_tokens, extract_text, format_debug_info

logger = logging.getLogger(__name__)

SCOPE_NOTICE = "AI responses are not enabled for this type of channel. Check your plugin settings."
MISSING_KEY_NOTICE = "Please set your OpenRouter API key with `/respondsettings apikey`."
EMPTY_CONTEXT_NOTICE = "No messages found to generate context."
IN_FLIGHT_NOTICE = "A response is already being generated for this channel."
EMPTY_CHOICES_NOTICE = "Failed to generate response."
ERROR_NOTICE = "Error generating AI response. Check the console for details."


def is_scope_allowed(is_guild_channel: bool, chat_scope: ChatScope) -> bool:
    """Check whether responses are permitted for the channel type."""
    if chat_scope is ChatScope.DMS:
        return not is_guild_channel
    if chat_scope is ChatScope.CHANNELS:
        return is_guild_channel
    return True


class RespondService:
    """Generates AI responses for a channel and decides how to show them."""

    def __init__(
        self,
        collector: ContextCollector,
        client: OpenRouterClient,
        guard: Optional[InFlightGuard] = None,
    ):
        """
        Initialize respond service.

        Args:
            collector: Reads conversation context from the message cache
            client: OpenRouter completion client
            guard: Per-channel in-flight guard, used when enabled in settings
        """
        self.collector = collector
        self.client = client
        self.guard = guard or InFlightGuard()

    async def generate(self, channel_id: int, settings: RespondSettings) -> GenerationResult:
        """
        Run one completion for the channel's recent history.

        Args:
            channel_id: Discord channel ID
            settings: Settings snapshot for this invocation

        Returns:
            GenerationResult with the generated text

        Raises:
            MissingApiKeyException: No API key configured
            EmptyContextException: No cached messages for the channel
            UpstreamException: Non-success HTTP status
            MalformedResponseException: Unparseable response body
            EmptyChoicesException: Response without choices
        """
        if not settings.api_key:
            raise MissingApiKeyException()

        context = self.collector.collect(channel_id, settings.context_length)
        if not context:
            raise EmptyContextException(channel_id)

        request = build_request(settings.model, context, settings.system_instructions)

        if settings.show_debug_info:
            logger.info(
                f"OpenRouter request for channel {channel_id} "
                f"(~{estimate_tokens(request.messages)} estimated tokens): "
                f"{json.dumps(request.to_payload(), ensure_ascii=False)}"
            )

        response = await self.client.complete(settings.api_key, request)
        text = extract_text(response)

        if settings.show_debug_info or settings.show_token_count:
            logger.info(format_debug_info(response))

        return GenerationResult(text=text, request=request, response=response)

    async def respond(
        self,
        channel_id: int,
        is_guild_channel: bool,
        settings: RespondSettings,
    ) -> RespondOutcome:
        """
        Full invocation: scope gate, generation and presentation.

        Never raises; every failure becomes a notice outcome.

        Args:
            channel_id: Discord channel ID
            is_guild_channel: Whether the channel belongs to a guild
            settings: Settings snapshot for this invocation

        Returns:
            RespondOutcome for the cog to render
        """
        if not is_scope_allowed(is_guild_channel, settings.chat_scope):
            logger.debug(f"Channel {channel_id} outside chat scope {settings.chat_scope.value}")
            return RespondOutcome.notice(SCOPE_NOTICE)

        try:
            if settings.single_flight_per_channel:
                async with self.guard.claim(channel_id):
                    result = await self.generate(channel_id, settings)
            else:
                result = await self.generate(channel_id, settings)

        except MissingApiKeyException:
            return RespondOutcome.notice(MISSING_KEY_NOTICE)
        except EmptyContextException:
            return RespondOutcome.notice(EMPTY_CONTEXT_NOTICE)
        except RequestInFlightException:
            return RespondOutcome.notice(IN_FLIGHT_NOTICE)
        except EmptyChoicesException as e:
            if settings.log_errors:
                logger.error(f"Error generating AI response: {e}")
            return RespondOutcome.notice(EMPTY_CHOICES_NOTICE)
        except UpstreamException as e:
            if settings.log_errors:
                logger.error(f"OpenRouter API error (status {e.status}): {e.body}")
            return RespondOutcome.notice(ERROR_NOTICE)
        except MalformedResponseException as e:
            if settings.log_errors:
                logger.error(f"Malformed completion response: {e}")
            return RespondOutcome.notice(ERROR_NOTICE)
        except Exception as e:
            if settings.log_errors:
                logger.exception(f"Error generating AI response: {e}")
            return RespondOutcome.notice(ERROR_NOTICE)

        return self.present(result, settings)

    def present(self, result: GenerationResult, settings: RespondSettings) -> RespondOutcome:
        """Compose the outcome for the configured output mode."""
        status_notice = None
        usage = result.response.usage
        if settings.show_token_count and usage is not None:
            status_notice = f"Generated response ({usage.total_tokens} tokens)"

        if settings.output_mode is OutputMode.TYPEBAR:
            return RespondOutcome(
                kind=OutcomeKind.TYPEBAR,
                content=result.text,
                status_notice=status_notice,
                result=result,
            )

        content = result.text
        if settings.show_debug_info:
            content = f"{content}\n\n{format_debug_info(result.response)}"

        return RespondOutcome(
            kind=OutcomeKind.EPHEMERAL,
            content=content,
            status_notice=status_notice,
            result=result,
        )
