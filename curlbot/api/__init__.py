"""
API Module - Wire format of the match protocol.

One JSON object per newline-terminated line, UTF-8. Each message is
validated into a pydantic model before the engine sees it, and engine
values are encoded through the same models on the way out.
"""

from .schemas import (
    Command,
    # Inbound
    DcMessage,
    IsReadyMessage,
    NewGameMessage,
    UpdateMessage,
    GameOverMessage,
    INBOUND_MESSAGES,
    # Outbound
    DcOkMessage,
    ReadyOkMessage,
    MoveMessage,
    # Shared
    Vector2Model,
    GameSettingModel,
    GameStateModel,
    ShotModel,
    ConcedeModel,
    MoveModel,
    move_to_model,
    model_to_move,
)

__all__ = [
    "Command",
    # Inbound
    "DcMessage",
    "IsReadyMessage",
    "NewGameMessage",
    "UpdateMessage",
    "GameOverMessage",
    "INBOUND_MESSAGES",
    # Outbound
    "DcOkMessage",
    "ReadyOkMessage",
    "MoveMessage",
    # Shared
    "Vector2Model",
    "GameSettingModel",
    "GameStateModel",
    "ShotModel",
    "ConcedeModel",
    "MoveModel",
    "move_to_model",
    "model_to_move",
]
