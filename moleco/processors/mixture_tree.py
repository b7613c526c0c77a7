"""Mixture tree: components, grouping and weights merged into one validated structure."""
import logging
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple, Union

from moleco.processors.errors import MixtureStructureMismatch, UnknownComponentReference
from moleco.processors.structure_parser import StructureGroup, StructureLeaf, StructureNode
from moleco.processors.weights import WeightDescriptor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComponentTable:
    """Substance identifiers of one input, referenced 1-based by the grouping section."""
    identifiers: Tuple[str, ...]

    def __len__(self) -> int:
        return len(self.identifiers)

    def __iter__(self) -> Iterator[str]:
        return iter(self.identifiers)

    def __contains__(self, index: object) -> bool:
        return isinstance(index, int) and 1 <= index <= len(self.identifiers)

    def identifier_for(self, index: int) -> str:
        if index not in self:
            raise UnknownComponentReference(
                f"Component {index} does not exist, mixture has {len(self)} component(s)"
            )
        return self.identifiers[index - 1]

    def indexed(self) -> Iterator[Tuple[int, str]]:
        return enumerate(self.identifiers, start=1)


@dataclass(frozen=True)
class MixtureLeaf:
    """A component position; ``component_index`` is None for an explicit empty slot."""
    component_index: Optional[int]
    weight: Optional[WeightDescriptor] = None

    @property
    def is_empty_slot(self) -> bool:
        return self.component_index is None


@dataclass(frozen=True)
class MixtureGroup:
    children: Tuple["MixtureNode", ...]
    weight: Optional[WeightDescriptor] = None


MixtureNode = Union[MixtureLeaf, MixtureGroup]


@dataclass(frozen=True)
class MixtureTree:
    """Root group plus the component table it references."""
    root: MixtureGroup
    components: ComponentTable
    notation: str = "MInChI"
    version: str = ""

    def leaves(self) -> Iterator[Tuple[MixtureLeaf, int]]:
        """Yield (leaf, depth) in document order; children of the root have depth 0."""
        yield from _walk_leaves(self.root, 0)

    @property
    def leaf_count(self) -> int:
        return sum(1 for _ in self.leaves())


def _walk_leaves(group: MixtureGroup, depth: int) -> Iterator[Tuple[MixtureLeaf, int]]:
    for child in group.children:
        if isinstance(child, MixtureGroup):
            yield from _walk_leaves(child, depth + 1)
        else:
            yield child, depth


def single_substance_tree(
    components: ComponentTable,
    notation: str = "InChI",
    version: str = ""
) -> MixtureTree:
    """Tree for an identifier with exactly one substance and no weights."""
    return MixtureTree(
        root=MixtureGroup(children=(MixtureLeaf(component_index=1),)),
        components=components,
        notation=notation,
        version=version
    )


def build_mixture_tree(
    grouping: StructureGroup,
    weighting: StructureGroup,
    components: ComponentTable,
    notation: str = "MInChI",
    version: str = ""
) -> MixtureTree:
    """
    Merge the grouping and weighting trees position by position.

    Args:
        grouping: Parsed "/n" section (leaf payload = component index)
        weighting: Parsed "/g" section (payload = WeightDescriptor or None)
        components: Component table the grouping indices refer to

    Returns:
        MixtureTree carrying identity and weight on every node

    Raises:
        MixtureStructureMismatch: The trees differ in shape
        UnknownComponentReference: A grouping index is outside the component table
    """
    root = _merge_group(grouping, weighting, components, ())

    referenced = {
        leaf.component_index
        for leaf, _ in _walk_leaves(root, 0)
        if not leaf.is_empty_slot
    }
    unreferenced = [index for index, _ in components.indexed() if index not in referenced]
    if unreferenced:
        logger.warning("Components not referenced by the grouping section: %s", unreferenced)

    return MixtureTree(root=root, components=components, notation=notation, version=version)


def _merge_group(
    grouping: StructureGroup,
    weighting: StructureGroup,
    components: ComponentTable,
    path: Tuple[int, ...]
) -> MixtureGroup:
    if len(grouping.children) != len(weighting.children):
        raise MixtureStructureMismatch(
            f"Grouping has {len(grouping.children)} element(s) but weighting has "
            f"{len(weighting.children)}",
            offset=weighting.offset,
            path=path
        )
    children = tuple(
        _merge_node(g, w, components, path + (position,))
        for position, (g, w) in enumerate(zip(grouping.children, weighting.children))
    )
    return MixtureGroup(children=children, weight=weighting.payload)


def _merge_node(
    grouping: StructureNode,
    weighting: StructureNode,
    components: ComponentTable,
    path: Tuple[int, ...]
) -> MixtureNode:
    if isinstance(grouping, StructureGroup) and isinstance(weighting, StructureGroup):
        return _merge_group(grouping, weighting, components, path)

    if isinstance(grouping, StructureLeaf) and isinstance(weighting, StructureLeaf):
        index = grouping.payload
        if index is not None and index not in components:
            raise UnknownComponentReference(
                f"Component {index} does not exist, mixture has {len(components)} component(s)",
                offset=grouping.offset,
                path=path
            )
        return MixtureLeaf(component_index=index, weight=weighting.payload)

    expected, found = (
        ("group", "value") if isinstance(grouping, StructureGroup) else ("value", "group")
    )
    raise MixtureStructureMismatch(
        f"Grouping has a {expected} where weighting has a {found}",
        offset=weighting.offset,
        path=path
    )
