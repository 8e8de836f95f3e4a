from __future__ import annotations

import numpy as np


def format_elapsed_seconds(seconds: float) -> str:
    """Render seconds as the shortest positional decimal that round-trips."""
    value = max(0.0, float(seconds))
    return np.format_float_positional(value, unique=True, trim="-")
