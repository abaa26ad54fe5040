from typing import Protocol

import numpy as np


class Embedder(Protocol):
    model_id: str
    dimensions: int

    def embed(self, text: str) -> np.ndarray:
        """Embed ``text``; raises ValueError when there is nothing to embed."""
        ...
