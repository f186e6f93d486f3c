"""Color mapping: sample rank to RGBA display color.

Colors are float RGBA in [0, 1]. Alpha is kept low because the canvas
draws with additive composition, so dense regions of the ribbon glow.

The COLORMAPS entries are the vectorized index_colors and hue_colors.
color_by_index and hsva_to_rgba are scalar reference versions of the same
mappings, one sample at a time; the vectorized ones are checked against them.
"""

import numpy as np

# Per-sample alpha; thousands of overlapping lines sum towards white.
DEFAULT_ALPHA = 0.05


def color_by_index(index, capacity, alpha=DEFAULT_ALPHA):
    """Ice-blue gradient color for the sample at 1-based position `index`."""
    frac = index / capacity
    return (0.125 * frac, 0.5 + 0.5 * frac, 1.0, alpha)


def index_colors(n, capacity, alpha=DEFAULT_ALPHA):
    """Vectorized color_by_index for ranks 0..n-1 (positions 1..n).

    Returns:
        (n, 4) float64 RGBA array.
    """
    frac = np.arange(1, n + 1, dtype=np.float64) / capacity
    colors = np.empty((n, 4), dtype=np.float64)
    colors[:, 0] = 0.125 * frac
    colors[:, 1] = 0.5 + 0.5 * frac
    colors[:, 2] = 1.0
    colors[:, 3] = alpha
    return colors


def hsva_to_rgba(h, s, v, a):
    """Convert a single HSVA color (h in degrees) to an RGBA tuple."""
    if s <= 0.0:
        return (v, v, v, a)

    hh = 0.0 if h >= 360.0 else h
    hh = hh / 60.0
    sector = int(hh)
    ff = hh - sector

    p = v * (1.0 - s)
    q = v * (1.0 - s * ff)
    t = v * (1.0 - s * (1.0 - ff))

    if sector == 0:
        return (v, t, p, a)
    if sector == 1:
        return (q, v, p, a)
    if sector == 2:
        return (p, v, t, a)
    if sector == 3:
        return (p, q, v, a)
    if sector == 4:
        return (t, p, v, a)
    return (v, p, q, a)


def hue_colors(n, capacity, alpha=DEFAULT_ALPHA):
    """Full hue wheel across the field at full saturation and value.

    Vectorized equivalent of hsva_to_rgba(hue, 1, 1, alpha) per sample.
    """
    hues = (360.0 * np.arange(1, n + 1, dtype=np.float64) / capacity) % 360.0
    h_sector = hues / 60.0
    sector = h_sector.astype(np.int64) % 6
    f = h_sector - np.floor(h_sector)

    # p = 0 (saturation = 1), q = 1-f, t = f (value = 1)
    one = np.ones(n)
    zero = np.zeros(n)
    q = 1.0 - f
    t = f

    r = np.select(
        [sector == 0, sector == 1, sector == 2, sector == 3, sector == 4],
        [one, q, zero, zero, t], default=one,
    )
    g = np.select(
        [sector == 0, sector == 1, sector == 2, sector == 3, sector == 4],
        [t, one, one, q, zero], default=zero,
    )
    b = np.select(
        [sector == 0, sector == 1, sector == 2, sector == 3, sector == 4],
        [zero, zero, t, one, one], default=q,
    )

    colors = np.empty((n, 4), dtype=np.float64)
    colors[:, 0] = r
    colors[:, 1] = g
    colors[:, 2] = b
    colors[:, 3] = alpha
    return colors


# Available colormaps: name -> callable(n, capacity) -> (n, 4) RGBA
COLORMAPS = {
    "Ice": index_colors,
    "Hue Wheel": hue_colors,
}
