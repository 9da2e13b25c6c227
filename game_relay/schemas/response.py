import json
from typing import Any

from pydantic import BaseModel, Field

from game_relay.api.ws.constants import NotificationType


class NotificationModel(BaseModel):
    """
    Envelope of every frame sent to the host.

    Attributes:
        type: What happened.
        message: Human-readable description.
        data: Event payload, always carrying the client identifier.
    """

    type: NotificationType = Field(frozen=True)
    message: str
    data: dict[str, Any] = {}

    def to_text(self) -> str:
        return json.dumps(self.model_dump(mode="json"))

    @classmethod
    def new_client(
        cls, client_id: str, details: dict[str, Any] | None = None
    ) -> "NotificationModel":
        """
        Builds the notification for a client registration.

        The client's own details are sent first, so the server-assigned
        identifier and ready flag always win over client-supplied fields.
        """
        data = dict(details or {})
        data.update(clientId=client_id, ready=False)
        return cls(
            type=NotificationType.NEW_CLIENT,
            message="A new client has connected",
            data=data,
        )

    @classmethod
    def client_disconnected(cls, client_id: str) -> "NotificationModel":
        return cls(
            type=NotificationType.CLIENT_DISCONNECTED,
            message=f"Client with ID {client_id} has disconnected",
            data={"clientId": client_id},
        )

    @classmethod
    def player_ready(
        cls, client_id: str, details: dict[str, Any]
    ) -> "NotificationModel":
        """
        Builds the readiness notification from the ready value.

        Like new_client, the identifier and the ready flag are set last.
        """
        data = dict(details)
        data.update(clientId=client_id, ready=True)
        return cls(
            type=NotificationType.PLAYER_READY,
            message="A player is ready",
            data=data,
        )

    @classmethod
    def player_controls(
        cls, client_id: str, controls: dict[str, Any]
    ) -> "NotificationModel":
        data = dict(controls)
        data["clientId"] = client_id
        return cls(
            type=NotificationType.PLAYER_CONTROLS,
            message="Player controls received",
            data=data,
        )
