from __future__ import annotations

import numpy as np

from .errors import DegenerateInterpolation
from .models import AlignedPoint, QueryLocation, Triple, as_triple

# |n_val| relative to the product of the two (lat, lon) edge lengths, i.e. the
# sine of the angle between the edges. Below this the stations are collinear.
COLLINEAR_TOLERANCE = 1e-9


def interpolate(location: QueryLocation, points: Triple[AlignedPoint]) -> float:
    """Evaluate the plane through 3 (lat, lon, value) points at `location`.

    Points outside the triangle spanned by the samples are extrapolated.
    Raises DegenerateInterpolation when the samples are collinear in (lat, lon).
    """
    p, q, r = (np.array([pt.lat, pt.lon, pt.value], dtype=np.float64) for pt in as_triple(points, "points"))
    e1, e2 = q - p, r - p
    # normal . (X - p) = 0 for every X on the plane
    a, b, c = (float(n) for n in np.cross(e1, e2))
    scale = float(np.hypot(e1[0], e1[1]) * np.hypot(e2[0], e2[1]))
    if scale == 0.0 or abs(c) <= COLLINEAR_TOLERANCE * scale:
        raise DegenerateInterpolation()

    value = p[2] - (a * (location.lat - p[0]) + b * (location.lon - p[1])) / c
    if not np.isfinite(value):
        raise DegenerateInterpolation("Plane evaluation is not finite; stations are nearly collinear")
    return float(value)
