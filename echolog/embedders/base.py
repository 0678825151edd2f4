from typing import Protocol

import numpy as np


class Embedder(Protocol):
    dimensions: int

    def embed(self, text: str) -> np.ndarray:
        """Embed memo text or a search query into the memo embedding space."""
        ...
