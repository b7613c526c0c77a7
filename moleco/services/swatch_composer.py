"""Flattening of a normalized mixture tree into rendered segments."""
from dataclasses import dataclass
from typing import Dict, List, Mapping, Sequence

from moleco.processors.mixture_tree import MixtureLeaf
from moleco.processors.weight_normalizer import NormalizedTree
from moleco.services.color_assigner import Color


@dataclass(frozen=True)
class RenderedSegment:
    """One proportionally sized segment of a swatch."""
    component_index: int
    proportion: float
    color: Color
    depth: int

    def to_dict(self) -> Dict:
        return {
            "component_index": self.component_index,
            "proportion": self.proportion,
            "color": self.color.to_dict(),
            "depth": self.depth,
        }


def compose(normalized: NormalizedTree, colors: Mapping[int, Color]) -> List[RenderedSegment]:
    """
    Emit one segment per component leaf, in document order.

    Explicit empty slots still hold their share of the whole but produce no
    segment.

    Args:
        normalized: Output of the weight normalizer
        colors: Color per 1-based component index

    Returns:
        Ordered list of RenderedSegment
    """
    segments = []
    for leaf in normalized.leaves():
        node: MixtureLeaf = leaf.node
        if node.is_empty_slot:
            continue
        segments.append(RenderedSegment(
            component_index=node.component_index,
            proportion=leaf.proportion,
            color=colors[node.component_index],
            depth=leaf.depth
        ))
    return segments


def component_totals(segments: Sequence[RenderedSegment]) -> Dict[int, float]:
    """Total proportion per component, in order of first appearance."""
    totals: Dict[int, float] = {}
    for segment in segments:
        totals[segment.component_index] = totals.get(segment.component_index, 0.0) + segment.proportion
    return totals
