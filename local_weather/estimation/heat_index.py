"""Heat index regression.

Blazejczyk et al. 2012 polynomial in Celsius and percent relative humidity,
see https://www.ncbi.nlm.nih.gov/pmc/articles/PMC3801457/.
"""
from __future__ import annotations

C1 = -8.78469475556
C2 = 1.61139411
C3 = 2.33854883889
C4 = -0.14611605
C5 = -0.012308094
C6 = -0.0164248277778
C7 = 0.002211732
C8 = 0.00072546
C9 = -0.000003582

# Below this temperature (C) the regression is not meaningful.
THRESHOLD_C = 20.0


def heat_index(temperature: float, humidity: float) -> float:
    if temperature < THRESHOLD_C:
        return temperature
    t, h = temperature, humidity
    t2 = t * t
    h2 = h * h
    return (
        C1
        + C2 * t
        + C3 * h
        + C4 * t * h
        + C5 * t2
        + C6 * h2
        + C7 * t2 * h
        + C8 * t * h2
        + C9 * t2 * h2
    )
