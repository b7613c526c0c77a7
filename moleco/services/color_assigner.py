"""Deterministic colors for substance identifiers."""
import hashlib
import logging
import math
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

import numpy as np
from coloraide import Color as _ColorAide

from moleco.config import settings
from moleco.processors.errors import EmptyIdentifier
from moleco.processors.mixture_tree import ComponentTable

logger = logging.getLogger(__name__)

_SLICE_WIDTH = 4
_SLICE_SPAN = float(2 ** (8 * _SLICE_WIDTH))


@dataclass(frozen=True)
class Color:
    """An OkLCh point plus its gamut-mapped sRGB form."""
    lightness: float
    chroma: float
    hue: float
    hex: str
    rgb: Tuple[int, int, int]

    def oklab(self) -> Tuple[float, float, float]:
        radians = math.radians(self.hue)
        return (
            self.lightness,
            self.chroma * math.cos(radians),
            self.chroma * math.sin(radians)
        )

    def to_dict(self) -> Dict:
        return {
            "lightness": self.lightness,
            "chroma": self.chroma,
            "hue": self.hue,
            "hex": self.hex,
            "rgb": list(self.rgb),
        }


@dataclass(frozen=True)
class ColorScheme:
    """Primary color with its complementary and two accents at the same lightness and chroma."""
    primary: Color
    first_accent: Color
    second_accent: Color
    complementary: Color


def _hash_slices(identifier: str) -> Tuple[float, ...]:
    digest = hashlib.sha512(identifier.encode("utf-8")).digest()
    return tuple(
        int.from_bytes(digest[i:i + _SLICE_WIDTH], "big") / _SLICE_SPAN
        for i in range(0, len(digest), _SLICE_WIDTH)
    )


def _scale(unit: float, low: float, high: float) -> float:
    return low + unit * (high - low)


def make_color(lightness: float, chroma: float, hue: float) -> Color:
    """Build a Color from OkLCh coordinates, mapping it into the sRGB gamut."""
    display = _ColorAide("oklch", [lightness, chroma, hue]).convert("srgb")
    if not display.in_gamut():
        display.fit()
    hex_value = display.to_string(hex=True)
    rgb = tuple(int(hex_value[i:i + 2], 16) for i in (1, 3, 5))
    return Color(lightness=lightness, chroma=chroma, hue=hue, hex=hex_value, rgb=rgb)


class ColorAssigner:
    """
    Maps substance identifiers onto OkLCh colors.

    Hue comes from the first 32 bits of the SHA-512 digest of the identifier,
    spread uniformly over the circle. The next two 32-bit slices pick lightness
    and chroma inside the configured sub-ranges, which keep every result away
    from black, white and gray. Nothing but the identifier text is consulted.
    """

    def __init__(
        self,
        lightness_range: Optional[Tuple[float, float]] = None,
        chroma_range: Optional[Tuple[float, float]] = None,
        cache_size: Optional[int] = None
    ):
        self.lightness_range = lightness_range or (settings.lightness_min, settings.lightness_max)
        self.chroma_range = chroma_range or (settings.chroma_min, settings.chroma_max)
        self.cache_size = settings.color_cache_size if cache_size is None else cache_size
        # Least recently used entries are evicted first
        self._cache: "OrderedDict[str, ColorScheme]" = OrderedDict()

    def scheme(self, identifier: str) -> ColorScheme:
        """
        Compute the color scheme of one substance identifier.

        Raises:
            EmptyIdentifier: identifier is empty
        """
        if not identifier:
            raise EmptyIdentifier("Cannot assign a color to an empty identifier")

        if identifier in self._cache:
            self._cache.move_to_end(identifier)
            return self._cache[identifier]

        slices = _hash_slices(identifier)
        primary_hue = slices[0] * 360.0
        lightness = _scale(slices[1], *self.lightness_range)
        chroma = _scale(slices[2], *self.chroma_range)

        complementary_hue = primary_hue + 165.0 + slices[3] * 30.0
        first_accent_hue = _scale(slices[4], primary_hue + 5.0, complementary_hue - 5.0)
        second_accent_hue = _scale(slices[5], complementary_hue + 5.0, primary_hue + 355.0)

        scheme = ColorScheme(
            primary=make_color(lightness, chroma, primary_hue),
            first_accent=make_color(lightness, chroma, first_accent_hue % 360.0),
            second_accent=make_color(lightness, chroma, second_accent_hue % 360.0),
            complementary=make_color(lightness, chroma, complementary_hue % 360.0)
        )
        logger.debug(
            "Identifier %r -> L=%.4f C=%.4f h=%.2f (%s)",
            identifier, lightness, chroma, primary_hue, scheme.primary.hex
        )
        if self.cache_size > 0:
            self._cache[identifier] = scheme
            while len(self._cache) > self.cache_size:
                self._cache.popitem(last=False)
        return scheme

    def color(self, identifier: str) -> Color:
        return self.scheme(identifier).primary

    def assign(self, components: ComponentTable) -> Dict[int, Color]:
        """Color for each 1-based component index."""
        return {index: self.color(identifier) for index, identifier in components.indexed()}


_default_assigner = None


def get_assigner() -> ColorAssigner:
    global _default_assigner
    if _default_assigner is None:
        _default_assigner = ColorAssigner()
    return _default_assigner


def assign_color(identifier: str) -> Color:
    """Color of a single substance identifier."""
    return get_assigner().color(identifier)


def assign_colors(components: ComponentTable) -> Dict[int, Color]:
    """Colors for every component of a table, keyed by 1-based index."""
    return get_assigner().assign(components)


def color_distance(first: Color, second: Color) -> float:
    """Perceptual (Oklab Euclidean) distance between two colors."""
    return _ColorAide("oklch", [first.lightness, first.chroma, first.hue]).delta_e(
        _ColorAide("oklch", [second.lightness, second.chroma, second.hue]),
        method="ok"
    )


def _pairwise_distances(colors: Iterable[Color]) -> np.ndarray:
    points = np.array([c.oklab() for c in colors], dtype=float).reshape(-1, 3)
    diffs = points[:, None, :] - points[None, :, :]
    distances = np.sqrt((diffs ** 2).sum(axis=-1))
    return distances[np.triu_indices(len(points), k=1)]


def minimum_separation(colors: Iterable[Color]) -> float:
    """Smallest pairwise Oklab distance among colors; inf for fewer than two."""
    distances = _pairwise_distances(colors)
    return float(distances.min()) if distances.size else float("inf")


def collision_rate(colors: Iterable[Color], threshold: float) -> float:
    """Fraction of color pairs closer than threshold."""
    distances = _pairwise_distances(colors)
    return float((distances < threshold).mean()) if distances.size else 0.0
