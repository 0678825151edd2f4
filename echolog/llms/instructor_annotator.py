from typing import List

from instructor import Instructor
from loguru import logger

from echolog.cache import TTLCache
from echolog.llms.schemas import (
    DEFAULT_TAG,
    MAX_TAGS,
    MAX_TITLE_LENGTH,
    LLMMessage,
    MemoTags,
    MemoTitle,
)

TITLE_SYSTEM_MESSAGE = (
    "You write titles for voice memos. Given the transcription of a memo, reply with one "
    f"concise title of at most {MAX_TITLE_LENGTH} characters, in the language of the memo."
)

TAGS_SYSTEM_MESSAGE = (
    "You analyse voice memos and tag them. Given the transcription of a memo, extract "
    f"3 to {MAX_TAGS} tags naming its categories or topics, in the language of the memo."
)


class InstructorMemoAnnotator:
    """Generates memo titles and tags through an instructor client, caching the results."""

    def __init__(
        self,
        instructor: Instructor,
        cache: TTLCache,
        *,
        model: str = "gpt-4o-mini",
        ttl_seconds: float = 3600,
    ) -> None:
        self.instructor = instructor
        self.cache = cache
        self.model = model
        self.ttl_seconds = ttl_seconds

    def generate_title(self, content: str) -> str:
        key = self.cache.make_key("title", content)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Using cached title")
            return cached

        response = self.instructor.chat.completions.create(
            model=self.model,
            messages=self._messages(TITLE_SYSTEM_MESSAGE, content),  # type: ignore
            response_model=MemoTitle,
        )
        title = response.title or "Untitled"
        self.cache.set(key, title, self.ttl_seconds)
        return title

    def extract_tags(self, content: str) -> List[str]:
        key = self.cache.make_key("tags", content)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Using cached tags")
            return list(cached)

        response = self.instructor.chat.completions.create(
            model=self.model,
            messages=self._messages(TAGS_SYSTEM_MESSAGE, content),  # type: ignore
            response_model=MemoTags,
        )
        tags = response.tags or [DEFAULT_TAG]
        self.cache.set(key, tags, self.ttl_seconds)
        return list(tags)

    @staticmethod
    def _messages(system_message: str, content: str) -> list[dict]:
        return [
            m.model_dump()
            for m in [
                LLMMessage(role="system", content=system_message),
                LLMMessage(role="user", content=content),
            ]
        ]
