"""Weight descriptors carried by the weighting section of a mixture identifier."""
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from moleco.processors.errors import MalformedWeight, UnknownWeightKind

_LITERAL_RE = re.compile(r"^(?P<mantissa>[0-9.:]*)(?P<kind>[A-Za-z]*)(?P<exponent>.*)$")
_NUMBER_RE = re.compile(r"^\d+(\.\d+)?$")
_EXPONENT_RE = re.compile(r"^[+-]?\d+$")

# Largest decimal exponent a float can carry
_MAX_EXPONENT = 308


class WeightScale(Enum):
    """How a weight relates to the whole of its sibling set."""
    FRACTION = "fraction"
    PERCENT = "percent"
    RELATIVE = "relative"


class WeightKind(Enum):
    """Unit tags of the weighting section."""
    WEIGHT_FRACTION = "wf"
    WEIGHT_BY_VOLUME = "wv"
    PERCENTAGE_POINTS = "pp"
    MOLAR_RATIO = "mr"
    VOLUME_FRACTION = "rf"
    MOLE_FRACTION = "mf"
    VOLUME_PARTS = "vp"
    MOLALITY = "mb"

    @property
    def scale(self) -> WeightScale:
        return _KIND_SCALES[self]

    @property
    def is_relative(self) -> bool:
        return self.scale is WeightScale.RELATIVE


_KIND_SCALES = {
    WeightKind.WEIGHT_FRACTION: WeightScale.FRACTION,
    WeightKind.WEIGHT_BY_VOLUME: WeightScale.FRACTION,
    WeightKind.VOLUME_FRACTION: WeightScale.FRACTION,
    WeightKind.PERCENTAGE_POINTS: WeightScale.PERCENT,
    WeightKind.MOLE_FRACTION: WeightScale.PERCENT,
    WeightKind.VOLUME_PARTS: WeightScale.RELATIVE,
    WeightKind.MOLAR_RATIO: WeightScale.RELATIVE,
    WeightKind.MOLALITY: WeightScale.RELATIVE,
}


@dataclass(frozen=True)
class WeightDescriptor:
    """
    A known weight: magnitude is ``mantissa * 10**exponent`` in units of ``kind``.

    Unknown weights (empty slots) are represented by ``None`` wherever a
    descriptor is expected.
    """
    kind: WeightKind
    mantissa: float
    exponent: int
    bounds: Optional[Tuple[float, float]] = None

    @property
    def magnitude(self) -> float:
        if self.exponent < 0:
            return self.mantissa / 10.0 ** -self.exponent
        return self.mantissa * 10.0 ** self.exponent

    @property
    def is_relative(self) -> bool:
        return self.kind.is_relative

    def fraction(self) -> Optional[float]:
        """Share of the enclosing sibling set, or None for relative kinds."""
        scale = self.kind.scale
        if scale is WeightScale.FRACTION:
            return self.magnitude
        if scale is WeightScale.PERCENT:
            return self.magnitude / 100
        return None

    def __str__(self) -> str:
        if self.bounds is not None:
            mantissa = f"{_format_number(self.bounds[0])}:{_format_number(self.bounds[1])}"
        else:
            mantissa = _format_number(self.mantissa)
        return f"{mantissa}{self.kind.value}{self.exponent}"

    @classmethod
    def parse(
        cls,
        literal: str,
        offset: Optional[int] = None,
        path: Optional[Tuple[int, ...]] = None
    ) -> "WeightDescriptor":
        """
        Parse a weight literal such as "37wf-2", "6pp1" or "10:15pp0".

        Raises:
            MalformedWeight: Missing, non-numeric or out-of-range mantissa/exponent, missing kind
            UnknownWeightKind: Kind tag outside the vocabulary
        """
        match = _LITERAL_RE.match(literal)
        mantissa_text = match.group("mantissa")
        kind_text = match.group("kind")
        exponent_text = match.group("exponent")

        if not mantissa_text:
            raise MalformedWeight(f"Weight {literal!r} has no numeric value", offset, path)
        if not kind_text:
            raise MalformedWeight(f"Weight {literal!r} has no kind tag", offset, path)
        try:
            kind = WeightKind(kind_text)
        except ValueError:
            known = ", ".join(k.value for k in WeightKind)
            raise UnknownWeightKind(
                f"Unrecognized weight kind {kind_text!r} in {literal!r}, expected one of: {known}",
                offset,
                path
            )

        bounds = None
        if ":" in mantissa_text:
            parts = mantissa_text.split(":")
            if len(parts) != 2 or not all(_NUMBER_RE.match(p) for p in parts):
                raise MalformedWeight(f"Invalid weight range in {literal!r}", offset, path)
            low, high = float(parts[0]), float(parts[1])
            bounds = (low, high)
            mantissa = (low + high) / 2
        elif _NUMBER_RE.match(mantissa_text):
            mantissa = float(mantissa_text)
        else:
            raise MalformedWeight(f"Invalid weight value in {literal!r}", offset, path)

        if not _EXPONENT_RE.match(exponent_text):
            raise MalformedWeight(f"Invalid weight exponent in {literal!r}", offset, path)
        digits = exponent_text.lstrip("+-").lstrip("0") or "0"
        if len(digits) > len(str(_MAX_EXPONENT)) or int(digits) > _MAX_EXPONENT:
            raise MalformedWeight(
                f"Weight exponent out of range in {literal!r}, limit is +/-{_MAX_EXPONENT}",
                offset,
                path
            )

        exponent = -int(digits) if exponent_text.startswith("-") else int(digits)
        descriptor = cls(kind=kind, mantissa=mantissa, exponent=exponent, bounds=bounds)
        if not math.isfinite(descriptor.magnitude):
            raise MalformedWeight(f"Weight {literal!r} is too large", offset, path)
        return descriptor


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else repr(value)
