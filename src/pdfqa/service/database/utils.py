"""Similarity scoring helpers."""

import math


def cosine_similarity(vec_a: list[float], vec_b: list[float]) -> float:
    """Cosine of the angle between two embeddings, in [-1, 1].

    Degenerate input (empty, different lengths, or a zero vector) scores 0.0.
    """
    if not vec_a or len(vec_a) != len(vec_b):
        return 0.0

    norms = math.hypot(*vec_a) * math.hypot(*vec_b)
    if norms == 0:
        return 0.0
    return math.fsum(a * b for a, b in zip(vec_a, vec_b)) / norms


def normalize_similarity(score: float) -> float:
    """Clamp a raw score into the [0, 1] range reported with citations."""
    return max(0.0, min(1.0, float(score)))
