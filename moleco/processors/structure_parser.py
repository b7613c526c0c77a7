"""
Parser for the bracketed, ampersand-delimited grouping and weighting sections.

Both sections share one grammar::

    section  := marker sequence
    sequence := element ("&" element)*
    element  := "" | token | "{" sequence "}" token?

An empty element is an explicit empty slot. A token directly after a closing
bracket is the value of that group. When a single group spans the whole
payload its brackets are dropped, so ``n{1&2}`` and ``n1&2`` are the same
flat sequence.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple, Type, Union

from moleco.processors.errors import (
    IdentifierParseError,
    MalformedGrouping,
    MalformedWeight,
    UnbalancedGrouping
)
from moleco.processors.weights import WeightDescriptor

logger = logging.getLogger(__name__)

OPEN = "{"
CLOSE = "}"
SEPARATOR = "&"

Path = Tuple[int, ...]
TokenParser = Callable[[str, int, Path], Any]


@dataclass(frozen=True)
class StructureLeaf:
    """Leaf of a parsed section; ``token`` is empty for an explicit empty slot."""
    token: str
    offset: int
    payload: Any = None

    @property
    def is_empty(self) -> bool:
        return not self.token


@dataclass(frozen=True)
class StructureGroup:
    """Ordered group of a parsed section, optionally carrying its own value."""
    children: Tuple["StructureNode", ...]
    offset: int
    value: Optional[str] = None
    payload: Any = None


StructureNode = Union[StructureLeaf, StructureGroup]


class _SectionParser:
    """Recursive descent over one section payload."""

    def __init__(
        self,
        text: str,
        base_offset: int,
        leaf_parser: TokenParser,
        value_parser: TokenParser,
        malformed: Type[IdentifierParseError]
    ):
        self.text = text
        self.base_offset = base_offset
        self.leaf_parser = leaf_parser
        self.value_parser = value_parser
        self.malformed = malformed
        self.pos = 0

    def _peek(self) -> Optional[str]:
        return self.text[self.pos] if self.pos < len(self.text) else None

    def _offset(self, pos: Optional[int] = None) -> int:
        return self.base_offset + (self.pos if pos is None else pos)

    def parse_root(self) -> StructureGroup:
        children = self._parse_sequence(())
        if self._peek() is not None:
            raise UnbalancedGrouping(f"Unexpected {self._peek()!r}", offset=self._offset())
        return StructureGroup(children=children, offset=self.base_offset)

    def _parse_sequence(self, path: Path) -> Tuple[StructureNode, ...]:
        children = []
        index = 0
        while True:
            children.append(self._parse_element(path + (index,)))
            if self._peek() != SEPARATOR:
                return tuple(children)
            self.pos += 1
            index += 1

    def _parse_element(self, path: Path) -> StructureNode:
        if self._peek() == OPEN:
            start = self.pos
            self.pos += 1
            children = self._parse_sequence(path)
            if self._peek() != CLOSE:
                raise UnbalancedGrouping("Missing closing bracket", offset=self._offset(start), path=path)
            self.pos += 1
            value_start = self.pos
            value = self._read_token(path)
            payload = self.value_parser(value, self._offset(value_start), path) if value else None
            return StructureGroup(
                children=children,
                offset=self._offset(start),
                value=value or None,
                payload=payload
            )

        start = self.pos
        token = self._read_token(path)
        payload = self.leaf_parser(token, self._offset(start), path) if token else None
        return StructureLeaf(token=token, offset=self._offset(start), payload=payload)

    def _read_token(self, path: Path) -> str:
        start = self.pos
        while self._peek() not in (None, SEPARATOR, CLOSE):
            if self._peek() == OPEN:
                raise self.malformed(
                    f"Expected '{SEPARATOR}' before '{OPEN}'",
                    offset=self._offset(),
                    path=path
                )
            self.pos += 1
        return self.text[start:self.pos]


def _check_balance(payload: str, base_offset: int) -> None:
    open_positions = []
    for pos, char in enumerate(payload):
        if char == OPEN:
            open_positions.append(pos)
        elif char == CLOSE:
            if not open_positions:
                raise UnbalancedGrouping("Unmatched closing bracket", offset=base_offset + pos)
            open_positions.pop()
    if open_positions:
        raise UnbalancedGrouping("Unmatched opening bracket", offset=base_offset + open_positions[-1])


def _spans_whole_payload(payload: str) -> bool:
    if not payload.startswith(OPEN) or not payload.endswith(CLOSE):
        return False
    depth = 0
    for pos, char in enumerate(payload):
        if char == OPEN:
            depth += 1
        elif char == CLOSE:
            depth -= 1
            if depth == 0:
                return pos == len(payload) - 1
    return False


def parse_structure(
    section: str,
    marker: str,
    leaf_parser: TokenParser,
    value_parser: Optional[TokenParser] = None,
    base_offset: int = 0,
    malformed: Type[IdentifierParseError] = MalformedGrouping
) -> StructureGroup:
    """
    Parse a raw section into a generic ordered tree.

    Args:
        section: Raw section text starting with its marker letter
        marker: Expected marker letter ("n" or "g")
        leaf_parser: Turns a non-empty leaf token into its payload
        value_parser: Turns a group's trailing value into its payload (defaults to leaf_parser)
        base_offset: Offset of the section within the full identifier
        malformed: Error raised for tokens that break the grammar

    Returns:
        Root StructureGroup; a bare top level becomes one group of its elements

    Raises:
        UnbalancedGrouping: Brackets do not match
    """
    if not section.startswith(marker):
        raise malformed(f"Section must start with '{marker}'", offset=base_offset)

    payload = section[len(marker):]
    offset = base_offset + len(marker)
    _check_balance(payload, offset)

    if _spans_whole_payload(payload):
        payload = payload[1:-1]
        offset += 1

    parser = _SectionParser(
        payload,
        offset,
        leaf_parser,
        value_parser or leaf_parser,
        malformed
    )
    root = parser.parse_root()
    logger.debug("Parsed '%s' section with %d top-level element(s)", marker, len(root.children))
    return root


def _component_reference(token: str, offset: int, path: Path) -> int:
    if not token.isdigit() or int(token) < 1:
        raise MalformedGrouping(
            f"Component reference {token!r} is not a positive integer",
            offset=offset,
            path=path
        )
    return int(token)


def _reject_group_value(token: str, offset: int, path: Path) -> None:
    raise MalformedGrouping(
        f"Grouping section groups cannot carry a value, got {token!r}",
        offset=offset,
        path=path
    )


def _weight_descriptor(token: str, offset: int, path: Path) -> WeightDescriptor:
    return WeightDescriptor.parse(token, offset=offset, path=path)


def parse_grouping(section: str, base_offset: int = 0) -> StructureGroup:
    """Parse a "/n" section; leaf payloads are 1-based component indices (None for empty slots)."""
    return parse_structure(
        section,
        "n",
        _component_reference,
        value_parser=_reject_group_value,
        base_offset=base_offset,
        malformed=MalformedGrouping
    )


def parse_weighting(section: str, base_offset: int = 0) -> StructureGroup:
    """Parse a "/g" section; payloads are WeightDescriptor, None where the slot is empty."""
    return parse_structure(
        section,
        "g",
        _weight_descriptor,
        base_offset=base_offset,
        malformed=MalformedWeight
    )
