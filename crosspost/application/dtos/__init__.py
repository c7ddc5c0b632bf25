from .connection_dto import (
    AckDTO,
    AuthorizationUrlDTO,
    BlueskySessionRequestDTO,
    BlueskySessionResponseDTO,
    ConnectedAccountDTO,
    ConnectRequestDTO,
    DisconnectRequestDTO,
)
from .publish_dto import (
    PublishOutcomeDTO,
    PublishRequestDTO,
    PublishResultDTO,
    PublishSummaryDTO,
)

__all__ = [
    "AckDTO",
    "AuthorizationUrlDTO",
    "BlueskySessionRequestDTO",
    "BlueskySessionResponseDTO",
    "ConnectRequestDTO",
    "ConnectedAccountDTO",
    "DisconnectRequestDTO",
    "PublishOutcomeDTO",
    "PublishRequestDTO",
    "PublishResultDTO",
    "PublishSummaryDTO",
]
