from typing import List, Protocol


class MemoAnnotator(Protocol):
    def generate_title(self, content: str) -> str: ...

    def extract_tags(self, content: str) -> List[str]:
        """Extract a handful of topic tags from memo content."""
        ...
