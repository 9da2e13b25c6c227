"""
Custom exception classes for the relay.

Inbound frames are decoded into a tagged union before dispatch. Every way
a frame can fail to decode has its own exception, so callers can log and
count the failure without inspecting raw payloads.
"""

from typing import Any


class MessageDecodeError(Exception):
    """
    Inbound frame could not be turned into a routable message.

    Attributes:
        reason: Short machine-readable label, used for metrics.
    """

    reason = "decode_error"


class MalformedMessageError(MessageDecodeError):
    """
    Frame is not a JSON object.

    Raised for unparseable text and for JSON values that are not objects.
    """

    reason = "malformed"


class UnknownMessageTypeError(MessageDecodeError):
    """
    Frame carries a discriminator no handler is registered for.
    """

    reason = "unknown_type"

    def __init__(self, msg_type: Any):
        self.msg_type = msg_type
        super().__init__(f"Unknown message type: {msg_type!r}")


class InvalidPayloadError(MessageDecodeError):
    """
    Frame has a known discriminator but its payload has the wrong shape.

    Raised, for example, when a register frame declares a role other than
    host or client, or a ready frame omits the player name.
    """

    reason = "invalid_payload"

    def __init__(self, msg_type: str, errors: list[dict[str, Any]]):
        self.msg_type = msg_type
        self.errors = errors
        super().__init__(
            f"Invalid payload for message type {msg_type!r}: "
            + "; ".join(
                f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}"
                for err in errors
            )
        )
