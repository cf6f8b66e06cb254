from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator


T = TypeVar("T")


class RemoteStatus(str, Enum):
    """Lifecycle of an asynchronous resource."""

    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class StatusEnvelope(BaseModel, Generic[T]):
    """Status wrapper shared by every asynchronous resource in the wizard.

    ``data`` only exists alongside ``success`` and ``error`` only alongside
    ``error``; the validator rejects any other combination.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    status: RemoteStatus = Field(default=RemoteStatus.IDLE, description="Resource status")
    data: Optional[T] = Field(default=None, description="Payload, success only")
    error: Optional[str] = Field(default=None, description="Error message, error only")

    @model_validator(mode="after")
    def _check_invariant(self) -> "StatusEnvelope[T]":
        if self.data is not None and self.status != RemoteStatus.SUCCESS:
            raise ValueError(f"data is only allowed on success, got status={self.status.value}")
        if self.error is not None and self.status != RemoteStatus.ERROR:
            raise ValueError(f"error is only allowed on error, got status={self.status.value}")
        return self

    @classmethod
    def idle(cls) -> "StatusEnvelope[Any]":
        return cls(status=RemoteStatus.IDLE)

    @classmethod
    def loading(cls) -> "StatusEnvelope[Any]":
        return cls(status=RemoteStatus.LOADING)

    @classmethod
    def success(cls, data: Any = None) -> "StatusEnvelope[Any]":
        return cls(status=RemoteStatus.SUCCESS, data=data)

    @classmethod
    def failure(cls, error: Optional[str] = None) -> "StatusEnvelope[Any]":
        return cls(status=RemoteStatus.ERROR, error=error)

    @property
    def is_idle(self) -> bool:
        return self.status == RemoteStatus.IDLE

    @property
    def is_loading(self) -> bool:
        return self.status == RemoteStatus.LOADING

    @property
    def is_success(self) -> bool:
        return self.status == RemoteStatus.SUCCESS

    @property
    def is_error(self) -> bool:
        return self.status == RemoteStatus.ERROR
