from typing import List, Literal

from pydantic import BaseModel, Field, field_validator

MAX_TITLE_LENGTH = 30
MAX_TAGS = 5
DEFAULT_TAG = "general"


class LLMMessage(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str


class MemoTitle(BaseModel):
    """A short title for a voice memo"""

    title: str = Field(
        ...,
        description=f"A concise title for the memo, at most {MAX_TITLE_LENGTH} characters",
    )

    @field_validator("title")
    @classmethod
    def truncate(cls, value: str) -> str:
        return value.strip()[:MAX_TITLE_LENGTH]


class MemoTags(BaseModel):
    """Topic tags describing a voice memo"""

    tags: List[str] = Field(
        ...,
        description=(
            f"Between 3 and {MAX_TAGS} short tags naming the categories or topics of the memo"
        ),
    )

    @field_validator("tags")
    @classmethod
    def clean(cls, value: List[str]) -> List[str]:
        tags = []
        for tag in value:
            tag = tag.strip()
            if tag and tag not in tags:
                tags.append(tag)
        return tags[:MAX_TAGS]
