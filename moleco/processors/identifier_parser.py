"""Parsing of InChI / MInChI identifiers into validated mixture trees."""
import logging
from typing import Optional, Tuple

from moleco.processors.errors import IdentifierParseError
from moleco.processors.identifier_splitter import SplitIdentifier, split_identifier
from moleco.processors.mixture_tree import (
    ComponentTable,
    MixtureTree,
    build_mixture_tree,
    single_substance_tree
)
from moleco.processors.structure_parser import parse_grouping, parse_weighting

logger = logging.getLogger(__name__)


class IdentifierParser:
    """Parser for single-substance and mixture identifiers."""

    def __init__(self, strict_version_check: Optional[bool] = None):
        """
        Initialize parser.

        Args:
            strict_version_check: Reject unsupported format versions; None uses settings
        """
        self.strict_version_check = strict_version_check

    def split(self, text: str) -> SplitIdentifier:
        return split_identifier(text, strict_version_check=self.strict_version_check)

    def parse(self, text: str) -> MixtureTree:
        """
        Parse identifier text into a MixtureTree.

        Args:
            text: InChI or MInChI string

        Returns:
            MixtureTree; a single substance becomes a one-leaf tree

        Raises:
            IdentifierParseError: Any subclass, on the first problem found
        """
        split = self.split(text)
        components = ComponentTable(identifiers=split.components)

        if not split.is_mixture:
            return single_substance_tree(components, notation=split.notation, version=split.version)

        grouping = parse_grouping(split.grouping.text, base_offset=split.grouping.offset)
        weighting = parse_weighting(split.weighting.text, base_offset=split.weighting.offset)
        tree = build_mixture_tree(
            grouping,
            weighting,
            components,
            notation=split.notation,
            version=split.version
        )
        logger.debug(
            "Parsed mixture with %d component(s) and %d leaf position(s)",
            len(components), tree.leaf_count
        )
        return tree

    def validate(self, text: str) -> Tuple[bool, str]:
        """
        Validate identifier text without raising exceptions.

        Returns:
            Tuple of (is_valid, error_message)
        """
        try:
            self.parse(text)
            return True, ""
        except IdentifierParseError as e:
            return False, str(e)


# Convenience functions
def parse(text: str, strict_version_check: Optional[bool] = None) -> MixtureTree:
    """Parse identifier text into a MixtureTree."""
    return IdentifierParser(strict_version_check).parse(text)


def validate_identifier(text: str, strict_version_check: Optional[bool] = None) -> Tuple[bool, str]:
    """Validate identifier text; returns (is_valid, error_message)."""
    return IdentifierParser(strict_version_check).validate(text)
