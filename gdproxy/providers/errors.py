"""Failure types raised by the relay pipeline. Each one knows its HTTP status."""
from __future__ import annotations


class RelayError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequest(RelayError):
    status_code = 400


class InvalidRequest(BadRequest):
    pass


class UpstreamError(RelayError):
    """Network, timeout or decode failure while talking to an upstream host."""


class ExtractionError(RelayError):
    """The embed page did not contain the player initializer."""


class ProxyError(RelayError):
    """The media request could not be built or sent."""


def describe(exc: BaseException) -> str:
    # timeouts stringify to ""
    return str(exc) or exc.__class__.__name__
