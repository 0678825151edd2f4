from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from echolog.domain.memo import Memo


class CreateMemoRequest(BaseModel):
    audio_url: str = Field(..., min_length=1)
    transcription: str = Field(..., min_length=1)
    summary: str = Field(..., min_length=1)
    tags: List[str] = Field(..., min_length=1, max_length=10)
    embedding: Optional[List[float]] = None


class UpdateMemoRequest(BaseModel):
    transcription: Optional[str] = None
    summary: Optional[str] = None
    tags: Optional[List[str]] = Field(default=None, max_length=10)
    embedding: Optional[List[float]] = None


class SearchMemoRequest(BaseModel):
    embedding: List[float]
    limit: int = Field(default=5, ge=1, le=50)


class ContentRequest(BaseModel):
    content: str = Field(..., min_length=1)


class MemoResponse(BaseModel):
    id: str
    audio_url: str
    transcription: str
    summary: str
    tags: List[str]
    embedding: Optional[List[float]] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    related_memo_ids: List[str] = []

    @classmethod
    def from_memo(cls, memo: Memo) -> "MemoResponse":
        return cls(
            id=memo.id,
            audio_url=memo.audio_url,
            transcription=memo.transcription,
            summary=memo.summary,
            tags=memo.tags,
            embedding=memo.embedding.tolist() if memo.embedding is not None else None,
            created_at=memo.created_at,
            updated_at=memo.updated_at,
            related_memo_ids=memo.related_memo_ids,
        )


class SearchResult(MemoResponse):
    similarity: float


class Pagination(BaseModel):
    total: int
    skip: int
    limit: int
    has_more: bool


class RecentMemosResponse(BaseModel):
    data: List[MemoResponse]
    pagination: Pagination


class TitleResponse(BaseModel):
    title: str


class TagsResponse(BaseModel):
    tags: List[str]
