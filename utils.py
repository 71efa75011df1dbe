import json
import math
from numbers import Real
from typing import Optional, Sequence, Tuple

import numpy as np

from config import DESCRIPTOR_LENGTH
from errors import InvalidDescriptor

def to_descriptor(values, length: int = DESCRIPTOR_LENGTH) -> np.ndarray:
    """Validate a raw face encoding and return it as a float vector.

    Raises InvalidDescriptor unless ``values`` is a flat sequence of exactly
    ``length`` finite numbers.
    """
    if isinstance(values, (list, tuple)):
        if not all(isinstance(v, Real) and not isinstance(v, bool) for v in values):
            raise InvalidDescriptor()
    elif not isinstance(values, np.ndarray):
        raise InvalidDescriptor()
    try:
        vec = np.asarray(values, dtype=np.float64)
    except (TypeError, ValueError):
        raise InvalidDescriptor()
    if vec.ndim != 1 or vec.shape[0] != length:
        raise InvalidDescriptor()
    if not np.all(np.isfinite(vec)):
        raise InvalidDescriptor()
    return vec

def euclidean_distance(a, b) -> float:
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    return float(np.sqrt(np.sum((a - b) ** 2)))

def find_best_match(query, candidates: Sequence) -> Tuple[Optional[object], float]:
    """Nearest candidate to ``query`` by Euclidean distance.

    ``candidates`` must expose a ``descriptor`` vector. The first candidate in
    iteration order wins ties. An empty sequence gives ``(None, inf)``.
    """
    query = to_descriptor(query)
    if not candidates:
        return None, math.inf
    matrix = np.vstack([c.descriptor for c in candidates])
    distances = np.sqrt(np.sum((matrix - query) ** 2, axis=1))
    # argmin returns the first index of the minimum
    idx = int(np.argmin(distances))
    return candidates[idx], float(distances[idx])

def match_descriptor(query, candidates: Sequence, threshold: float):
    # candidates: objects with a descriptor vector, in tie-break order
    best, best_dist = find_best_match(query, candidates)
    if best is not None and best_dist <= threshold:
        return best, best_dist
    return None, best_dist

def serialize_descriptor(vec) -> str:
    return json.dumps([float(x) for x in vec])

def deserialize_descriptor(text: str) -> np.ndarray:
    try:
        values = json.loads(text)
    except (TypeError, ValueError):
        raise InvalidDescriptor()
    return to_descriptor(values)
