"""Memo domain models."""

from datetime import datetime, timezone
from typing import Annotated

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, BeforeValidator, Field, PlainSerializer


def nd_array_before_validator(x: list[float]) -> NDArray[np.float32]:
    return np.array(x, dtype=np.float32)


def nd_array_serializer(x: NDArray[np.float32]) -> list[float]:
    return x.tolist()  # type: ignore


NumPyArray = Annotated[
    np.ndarray,
    BeforeValidator(nd_array_before_validator),
    PlainSerializer(nd_array_serializer, return_type=list),
]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Memo(BaseModel):
    """A recorded voice memo.

    Attributes:
        id: Opaque, stable identifier
        owner_id: Identifier of the user who recorded the memo
        audio_url: Location of the uploaded audio
        transcription: Transcribed text of the recording
        summary: Short generated summary, shown as the memo title
        tags: Tags attached by the user or the annotator
        embedding: Embedding of the transcription, None when not embedded yet
        created_at: Creation timestamp
        updated_at: Timestamp of the last edit
        deleted_at: Soft-delete marker
        related_memo_ids: Ordered IDs of semantically related memos
    """

    id: str
    owner_id: str
    audio_url: str = ""
    transcription: str = ""
    summary: str = ""
    tags: list[str] = []
    embedding: NumPyArray | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime | None = None
    deleted_at: datetime | None = None
    related_memo_ids: list[str] = []

    model_config = {"arbitrary_types_allowed": True}

    @property
    def title(self) -> str:
        return self.summary

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def has_embedding(self) -> bool:
        return self.embedding is not None and self.embedding.size > 0
