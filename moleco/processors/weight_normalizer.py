"""Resolution of mixture weights into proportions of the whole."""
import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from moleco.config import settings
from moleco.processors.mixture_tree import MixtureGroup, MixtureNode, MixtureTree
from moleco.processors.weights import WeightDescriptor

logger = logging.getLogger(__name__)


class ResidualSplitPolicy:
    """
    Default sibling-set policy.

    Fraction and percent weights take their own share. Whatever they leave
    is split among the remaining siblings: relative weights (volume parts,
    molarity, molality) by value, unknown weights as if they held the mean
    relative value, or equally when no relative weight is present. Shares
    are rescaled when fixed weights overshoot 1 or nothing can absorb the
    residual.
    """

    def resolve(self, weights: Sequence[Optional[WeightDescriptor]]) -> List[float]:
        """
        Compute local shares for one sibling set.

        Args:
            weights: One entry per sibling, None for unknown

        Returns:
            Shares in [0, 1] summing to 1
        """
        shares = [0.0] * len(weights)
        fixed = {
            i: w.fraction()
            for i, w in enumerate(weights)
            if w is not None and not w.is_relative
        }
        fixed_sum = sum(fixed.values())
        others = [i for i in range(len(weights)) if i not in fixed]

        if fixed_sum > 1 or not others:
            if fixed_sum <= 0:
                return [1.0 / len(weights)] * len(weights)
            for i, fraction in fixed.items():
                shares[i] = fraction / fixed_sum
            return shares

        for i, fraction in fixed.items():
            shares[i] = fraction

        residual = max(0.0, 1.0 - fixed_sum)
        relative = [weights[i].magnitude for i in others if weights[i] is not None]
        unknown_weight = sum(relative) / len(relative) if relative else 1.0
        other_weights = [
            weights[i].magnitude if weights[i] is not None else unknown_weight
            for i in others
        ]
        total = sum(other_weights)
        if total <= 0:
            other_weights = [1.0] * len(others)
            total = float(len(others))

        for i, weight in zip(others, other_weights):
            shares[i] = residual * weight / total
        return shares


@dataclass(frozen=True)
class NormalizedNode:
    """A mixture node with its share of the parent (local) and of the whole (proportion)."""
    node: MixtureNode
    local: float
    proportion: float
    depth: int
    children: Tuple["NormalizedNode", ...] = ()

    @property
    def is_group(self) -> bool:
        return isinstance(self.node, MixtureGroup)


@dataclass(frozen=True)
class NormalizedTree:
    tree: MixtureTree
    root: NormalizedNode

    def leaves(self) -> Iterator[NormalizedNode]:
        """Leaves in document order."""
        yield from _walk(self.root)

    def leaf_sum(self) -> float:
        return sum(leaf.proportion for leaf in self.leaves())


def _walk(node: NormalizedNode) -> Iterator[NormalizedNode]:
    if not node.is_group:
        yield node
        return
    for child in node.children:
        yield from _walk(child)


class WeightNormalizer:
    """Turns a MixtureTree into proportions of the whole, one sibling set at a time."""

    def __init__(self, policy: Optional[ResidualSplitPolicy] = None, tolerance: Optional[float] = None):
        """
        Initialize normalizer.

        Args:
            policy: Sibling-set policy, ResidualSplitPolicy by default
            tolerance: Allowed drift of the leaf sum from 1
        """
        self.policy = policy or ResidualSplitPolicy()
        self.tolerance = settings.sum_tolerance if tolerance is None else tolerance

    def normalize(self, tree: MixtureTree) -> NormalizedTree:
        root = self._normalize_group(tree.root, local=1.0, proportion=1.0, depth=-1)
        normalized = NormalizedTree(tree=tree, root=root)

        total = normalized.leaf_sum()
        if abs(total - 1.0) > self.tolerance:
            logger.warning("Leaf proportions sum to %.12f, outside tolerance %g", total, self.tolerance)
        logger.debug("Resolved proportions: %s", [round(leaf.proportion, 6) for leaf in normalized.leaves()])
        return normalized

    def _normalize_group(
        self,
        group: MixtureGroup,
        local: float,
        proportion: float,
        depth: int
    ) -> NormalizedNode:
        shares = self.policy.resolve([child.weight for child in group.children])
        children = []
        for child, share in zip(group.children, shares):
            child_proportion = proportion * share
            if isinstance(child, MixtureGroup):
                children.append(self._normalize_group(child, share, child_proportion, depth + 1))
            else:
                children.append(NormalizedNode(
                    node=child,
                    local=share,
                    proportion=child_proportion,
                    depth=depth + 1
                ))
        return NormalizedNode(
            node=group,
            local=local,
            proportion=proportion,
            depth=depth,
            children=tuple(children)
        )


def normalize(tree: MixtureTree) -> NormalizedTree:
    """Resolve every node of the tree into its proportion of the whole."""
    return WeightNormalizer().normalize(tree)
