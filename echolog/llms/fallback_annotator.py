import re
from typing import List

from echolog.llms.schemas import DEFAULT_TAG, MAX_TAGS, MAX_TITLE_LENGTH

SENTENCE_END = re.compile(r"[。.!！?？\n]")
WORD_SEPARATORS = re.compile(r"[。、.,!！?？\s]+")


class FallbackMemoAnnotator:
    """Annotator used when no LLM is configured."""

    def generate_title(self, content: str) -> str:
        first_sentence = SENTENCE_END.split(content.strip(), maxsplit=1)[0].strip()
        if not first_sentence:
            return "Untitled"
        if len(first_sentence) > MAX_TITLE_LENGTH:
            return first_sentence[:MAX_TITLE_LENGTH] + "..."
        return first_sentence

    def extract_tags(self, content: str) -> List[str]:
        tags: List[str] = []
        for word in WORD_SEPARATORS.split(content):
            if 2 < len(word) < 10 and word not in tags:
                tags.append(word)
            if len(tags) == MAX_TAGS:
                break
        return tags or [DEFAULT_TAG]
