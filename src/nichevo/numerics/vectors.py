"""
Vector Maths Module

Small vector helpers used to compare the behaviour of networks. Malformed
arguments never raise: they produce NaN (or 0) sentinels.

Functions:
    clamp:          Restrict a value to [min, max]
    dot:            Dot product of two vectors of equal dimension
    vector_length:  Euclidean length of a vector
    angle_between:  Angle between two vectors, in degrees
"""

import math
from typing import Sequence

import numpy as np


def clamp(x: float, minimum: float, maximum: float) -> float:
    return float(np.minimum(np.maximum(x, minimum), maximum))


def dot(vector1: Sequence[float] | None, vector2: Sequence[float] | None) -> float:
    """
    Return the dot product of two vectors with the same dimension.

    Returns NaN if either vector is None or their dimensions differ,
    and 0 for two empty vectors.
    """
    if vector1 is None or vector2 is None or len(vector1) != len(vector2):
        return math.nan

    if len(vector1) == 0:
        return 0.0

    return float(np.dot(np.asarray(vector1, dtype=float), np.asarray(vector2, dtype=float)))


def vector_length(vector: Sequence[float] | None) -> float:
    """
    Return the length (magnitude, not dimension) of a vector.

    Returns NaN for None and 0 for an empty vector.
    """
    if vector is None:
        return math.nan

    if len(vector) == 0:
        return 0.0

    return float(np.linalg.norm(np.asarray(vector, dtype=float)))


def angle_between(vector1: Sequence[float] | None, vector2: Sequence[float] | None) -> float:
    """
    Return the angle between two vectors with the same dimension, in degrees.

    Returns NaN if the dot product is undefined (None or mismatched vectors),
    and 0 when either vector has no direction (zero length).
    """
    product = dot(vector1, vector2)
    if math.isnan(product):
        return math.nan

    length1 = vector_length(vector1)
    length2 = vector_length(vector2)
    if length1 == 0 or length2 == 0:
        return 0.0

    # half-angle form, exact for parallel and antiparallel vectors
    a = np.asarray(vector1, dtype=float) * length2
    b = np.asarray(vector2, dtype=float) * length1

    return math.degrees(2 * math.atan2(np.linalg.norm(a - b), np.linalg.norm(a + b)))
