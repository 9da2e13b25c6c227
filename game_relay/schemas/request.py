import json
from typing import Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)
from typing_extensions import Annotated

from game_relay.api.ws.constants import MessageType, Role
from game_relay.exceptions import (
    InvalidPayloadError,
    MalformedMessageError,
    UnknownMessageTypeError,
)


class RegisterValue(BaseModel):
    """
    Payload of a register frame.

    Extra fields are kept and forwarded to the host with the new_client
    notification.
    """

    model_config = ConfigDict(extra="allow")

    playerName: Optional[str] = None


class RegisterMessage(BaseModel):
    """
    Declares the role of the sending connection.

    Attributes:
        role: host or client.
        value: Optional client details, e.g. the display name.
    """

    type: Literal["register"]
    role: Role
    value: RegisterValue = Field(default_factory=RegisterValue)

    @field_validator("value", mode="before")
    @classmethod
    def default_missing_value(cls, v: Any) -> Any:
        """
        Treat an explicit null value like an omitted one.

        Args:
            v: Raw value field of the frame.

        Returns:
            The raw value, or an empty mapping for null.
        """
        return {} if v is None else v


class BroadcastMessage(BaseModel):
    """
    Free-form text relayed verbatim to every other connection.
    """

    type: Literal["message"]
    message: str


class ReadyValue(BaseModel):
    model_config = ConfigDict(extra="allow")

    playerName: str


class ReadyMessage(BaseModel):
    type: Literal["ready"]
    value: ReadyValue


class ControlsMessage(BaseModel):
    """
    Input state of a player. The control fields are not interpreted.
    """

    type: Literal["controls"]
    value: dict[str, Any] = {}


InboundMessage = Annotated[
    Union[RegisterMessage, BroadcastMessage, ReadyMessage, ControlsMessage],
    Field(discriminator="type"),
]

inbound_message_adapter = TypeAdapter(InboundMessage)

_KNOWN_TYPES = frozenset(msg_type.value for msg_type in MessageType)


def decode_message(text: str) -> InboundMessage:
    """
    Decode a raw text frame into one of the inbound message variants.

    Decoding is done in two steps: the discriminator is checked first, so
    unknown message types are reported separately from known types with a
    payload of the wrong shape.

    Args:
        text: Raw text frame as received from the transport.

    Returns:
        The validated message model.

    Raises:
        MalformedMessageError: Frame is not a JSON object.
        UnknownMessageTypeError: The type field is missing or not known.
        InvalidPayloadError: The payload does not match the message type.
    """
    try:
        payload = json.loads(text)
    except (json.JSONDecodeError, TypeError) as ex:
        raise MalformedMessageError(f"Frame is not valid JSON: {ex}") from ex

    if not isinstance(payload, dict):
        raise MalformedMessageError(
            f"Frame must be a JSON object, got {type(payload).__name__}"
        )

    msg_type = payload.get("type")
    if not isinstance(msg_type, str) or msg_type not in _KNOWN_TYPES:
        raise UnknownMessageTypeError(msg_type)

    try:
        return inbound_message_adapter.validate_python(payload)
    except ValidationError as ex:
        raise InvalidPayloadError(msg_type, ex.errors()) from ex
