"""Deterministic feature-hashing embedder that runs without a model download."""

from hashlib import sha256

import numpy as np

LOCAL_EMBEDDING_MODEL_ID = "tentacle-core/hash-embedding-v1"
LOCAL_EMBEDDING_DIMENSIONS = 384

MIN_TOKEN_BYTES = 2
MAX_WEIGHTED_TOKEN_BYTES = 24
HASHES_PER_TOKEN = 4


def _is_token_char(char: str) -> bool:
    return char.isalnum() or char == "-"


def tokenize(text: str) -> list[str]:
    """Lowercased runs of alphanumerics and dashes, at least two bytes long."""
    tokens = []
    current: list[str] = []
    for char in text.strip().lower():
        if _is_token_char(char):
            current.append(char)
            continue
        if current:
            tokens.append("".join(current))
        current = []
    if current:
        tokens.append("".join(current))
    return [token for token in tokens if len(token.encode("utf-8")) >= MIN_TOKEN_BYTES]


class HashEmbedder:
    """Embeds text by hashing its tokens into signed buckets of a fixed-size vector.

    Each token adds ``1 + min(len, 24) / 24`` to four buckets picked from its SHA-256
    digest; the result is L2-normalized.
    """

    def __init__(self, dimensions: int = LOCAL_EMBEDDING_DIMENSIONS):
        self.dimensions = dimensions
        self.model_id = LOCAL_EMBEDDING_MODEL_ID

    def embed(self, text: str) -> np.ndarray:
        if not text.strip():
            raise ValueError("Cannot embed empty text")

        vector = np.zeros(self.dimensions, dtype=np.float32)
        for token in tokenize(text):
            self._accumulate(token, vector)

        magnitude = float(np.linalg.norm(vector))
        if magnitude <= np.finfo(np.float32).eps:
            return np.zeros(self.dimensions, dtype=np.float32)
        return (vector / magnitude).astype(np.float32)

    def _accumulate(self, token: str, vector: np.ndarray) -> None:
        encoded = token.encode("utf-8")
        digest = sha256(encoded).digest()
        weight = 1.0 + min(len(encoded), MAX_WEIGHTED_TOKEN_BYTES) / MAX_WEIGHTED_TOKEN_BYTES

        for offset in range(0, 8 * HASHES_PER_TOKEN, 8):
            value = int.from_bytes(digest[offset : offset + 8], "little")
            sign = -1.0 if value >> 63 else 1.0
            vector[value % self.dimensions] += sign * weight
