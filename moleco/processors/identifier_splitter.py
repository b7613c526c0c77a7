"""Splitting of InChI / MInChI text into substance identifiers and structure sections."""
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from moleco.config import settings
from moleco.processors.errors import (
    EmptyIdentifier,
    IncompleteMixtureStructure,
    UnsupportedFormat
)

logger = logging.getLogger(__name__)

INCHI_TAG = "InChI"
MINCHI_TAG = "MInChI"
KEY_TAGS = ("InChIKey", "MInChIKey")

LAYER_SEPARATOR = "/"
COMPONENT_SEPARATOR = "&"
GROUPING_MARKER = "n"
WEIGHTING_MARKER = "g"


@dataclass(frozen=True)
class RawSection:
    """A raw grouping or weighting layer, marker letter included."""
    text: str
    offset: int


@dataclass(frozen=True)
class SplitIdentifier:
    """Result of splitting one identifier; offsets point into the input text."""
    notation: str
    version: str
    components: Tuple[str, ...]
    component_offsets: Tuple[int, ...]
    grouping: Optional[RawSection] = None
    weighting: Optional[RawSection] = None

    @property
    def is_mixture(self) -> bool:
        return self.grouping is not None


def _layers_with_offsets(body: str, start: int) -> List[Tuple[str, int]]:
    layers = []
    offset = start
    for layer in body.split(LAYER_SEPARATOR):
        layers.append((layer, offset))
        offset += len(layer) + len(LAYER_SEPARATOR)
    return layers


def _is_section(layer: str, marker: str) -> bool:
    return layer.startswith(marker)


def split_identifier(text: str, strict_version_check: Optional[bool] = None) -> SplitIdentifier:
    """
    Split identifier text into its substance identifiers and raw structure sections.

    Args:
        text: Full identifier, e.g. "InChI=1S/H2O/h1H2" or
            "MInChI=0.00.1S/CH2O/c1-2/h1H2&H2O/h1H2/n{1&2}/g{37wf-2&}"
        strict_version_check: Reject unsupported versions; defaults to settings

    Returns:
        SplitIdentifier with prefix-free substance identifiers

    Raises:
        UnsupportedFormat: Unknown tag, key form or unsupported version
        IncompleteMixtureStructure: Only one of the grouping/weighting sections present
        EmptyIdentifier: No structure text, or an empty component between separators
    """
    if not isinstance(text, str) or not text.strip():
        raise EmptyIdentifier("Identifier must be a non-empty string", offset=0)

    # Leading whitespace still counts towards offsets
    lead = len(text) - len(text.lstrip())
    text = text.strip()
    if strict_version_check is None:
        strict_version_check = settings.strict_version_check

    tag, equals, rest = text.partition("=")
    if not equals:
        raise UnsupportedFormat("No InChI or MInChI provided", offset=lead)
    if tag in KEY_TAGS:
        raise UnsupportedFormat(
            f"{tag} is a hashed key and cannot be decomposed, use the full identifier",
            offset=lead
        )
    if tag not in (INCHI_TAG, MINCHI_TAG):
        raise UnsupportedFormat(f"Unrecognized format tag {tag!r}", offset=lead)

    version_offset = lead + len(tag) + 1
    version, slash, body = rest.partition(LAYER_SEPARATOR)
    if not version:
        raise UnsupportedFormat(f"Missing {tag} version", offset=version_offset)

    supported = (
        settings.supported_inchi_versions if tag == INCHI_TAG
        else settings.supported_minchi_versions
    )
    if strict_version_check and version not in supported:
        raise UnsupportedFormat(
            f"Only {tag} version {', '.join(supported)} is supported, got {version!r}",
            offset=version_offset
        )

    body_offset = version_offset + len(version) + len(slash)
    if not body:
        raise EmptyIdentifier(f"{tag} has no structure layers", offset=body_offset)

    if tag == INCHI_TAG:
        logger.debug("Single substance identifier, version %s", version)
        return SplitIdentifier(
            notation=tag,
            version=version,
            components=(body,),
            component_offsets=(body_offset,)
        )

    return _split_mixture(tag, version, body, body_offset)


def _split_mixture(tag: str, version: str, body: str, body_offset: int) -> SplitIdentifier:
    layers = _layers_with_offsets(body, body_offset)
    grouping = weighting = None

    last_text, last_offset = layers[-1]
    if len(layers) >= 2 and _is_section(last_text, WEIGHTING_MARKER) \
            and _is_section(layers[-2][0], GROUPING_MARKER):
        grouping = RawSection(*layers[-2])
        weighting = RawSection(last_text, last_offset)
        layers = layers[:-2]
    elif _is_section(last_text, WEIGHTING_MARKER):
        raise IncompleteMixtureStructure(
            "Weighting section '/g' present without a preceding grouping section '/n'",
            offset=last_offset
        )
    elif _is_section(last_text, GROUPING_MARKER):
        raise IncompleteMixtureStructure(
            "Grouping section '/n' present without a following weighting section '/g'",
            offset=last_offset
        )

    for layer_text, layer_offset in layers:
        if _is_section(layer_text, GROUPING_MARKER) or _is_section(layer_text, WEIGHTING_MARKER):
            raise IncompleteMixtureStructure(
                "Grouping and weighting sections must be the last two layers",
                offset=layer_offset
            )

    substances = LAYER_SEPARATOR.join(layer for layer, _ in layers)
    if not substances:
        raise EmptyIdentifier("Mixture has no substance identifiers", offset=body_offset)

    components = []
    offsets = []
    offset = body_offset
    for index, component in enumerate(substances.split(COMPONENT_SEPARATOR), start=1):
        if not component:
            raise EmptyIdentifier(f"Component {index} is empty", offset=offset)
        components.append(component)
        offsets.append(offset)
        offset += len(component) + len(COMPONENT_SEPARATOR)

    if grouping is None and len(components) > 1:
        raise IncompleteMixtureStructure(
            f"Mixture of {len(components)} components has no grouping and weighting sections",
            offset=body_offset + len(body)
        )

    logger.debug(
        "Split %s %s into %d component(s), mixture sections: %s",
        tag, version, len(components), grouping is not None
    )
    return SplitIdentifier(
        notation=tag,
        version=version,
        components=tuple(components),
        component_offsets=tuple(offsets),
        grouping=grouping,
        weighting=weighting
    )
