"""
Custom Exceptions for Respond Module
====================================

Defines the failure kinds of a single AI response invocation.
"""


class RespondException(Exception):
    """Base exception for respond module."""

    def __init__(self, message: str, original_error: Exception = None):
        self.message = message
        self.original_error = original_error
        super().__init__(self.message)

    def __str__(self):
        if self.original_error:
            return f"{self.message} (Caused by: {self.original_error})"
        return self.message


class MissingApiKeyException(RespondException):
    """Exception raised when no OpenRouter API key is configured."""

    def __init__(self):
        super().__init__("OpenRouter API key is not configured")


class EmptyContextException(RespondException):
    """Exception raised when no cached messages were found for a channel."""

    def __init__(self, channel_id: int):
        self.channel_id = channel_id
        super().__init__(f"[Channel {channel_id}] No messages found to generate context")


class UpstreamException(RespondException):
    """Exception raised when the completion API answers with a non-success status."""

    def __init__(self, status: int, body: str):
        self.status = status
        self.body = body
        super().__init__(f"OpenRouter API error ({status}): {body}")


class EmptyChoicesException(RespondException):
    """Exception raised when a completion response carries no usable text."""

    def __init__(self, response_id: str = None, detail: str = "returned no choices"):
        self.response_id = response_id
        super().__init__(f"Completion {response_id or '<unknown>'} {detail}")



class MalformedResponseException(RespondException):
    """Exception raised when a completion response cannot be parsed."""


class RequestInFlightException(RespondException):
    """Exception raised when a channel already has a response being generated."""

    def __init__(self, channel_id: int):
        self.channel_id = channel_id
        super().__init__(f"[Channel {channel_id}] A response is already being generated")


class ConfigurationException(RespondException):
    """Exception raised for invalid settings values."""

    def __init__(self, config_key: str, message: str = None):
        self.config_key = config_key
        msg = message or f"Configuration error for key: {config_key}"
        super().__init__(msg)
