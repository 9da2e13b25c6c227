from enum import Enum


class MessageType(str, Enum):
    """
    Discriminator values of inbound frames.

    Attributes:
        REGISTER: Connection declares its role (host or client).
        MESSAGE: Free-form text relayed to every other connection.
        READY: Registered client signals readiness.
        CONTROLS: Registered client streams input state to the host.
    """

    REGISTER = "register"
    MESSAGE = "message"
    READY = "ready"
    CONTROLS = "controls"

    def __str__(self):
        return self.value


class Role(str, Enum):
    """
    Roles a connection can declare with a register frame.
    """

    HOST = "host"
    CLIENT = "client"

    def __str__(self):
        return self.value


class NotificationType(str, Enum):
    """
    Types of the envelopes sent to the host.

    Attributes:
        NEW_CLIENT: A client registered.
        CLIENT_DISCONNECTED: A registered client closed its connection.
        PLAYER_READY: A registered client signalled readiness.
        PLAYER_CONTROLS: A registered client sent input state.
    """

    NEW_CLIENT = "new_client"
    CLIENT_DISCONNECTED = "client_disconnected"
    PLAYER_READY = "player_ready"
    PLAYER_CONTROLS = "player_controls"

    def __str__(self):
        return self.value


class DropReason(str, Enum):
    """
    Why an inbound frame or an outbound send was dropped.

    Used as the label of the dropped messages counter.
    """

    MALFORMED = "malformed"
    UNKNOWN_TYPE = "unknown_type"
    INVALID_PAYLOAD = "invalid_payload"
    UNREGISTERED_SENDER = "unregistered_sender"
    HOST_UNAVAILABLE = "host_unavailable"
    SEND_FAILED = "send_failed"

    def __str__(self):
        return self.value
