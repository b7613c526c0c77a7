"""Main swatch service orchestrating the parse, normalize, color and compose pipeline."""
import hashlib
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from moleco.config import settings
from moleco.processors.errors import IdentifierParseError, UnsupportedFormat
from moleco.processors.identifier_parser import IdentifierParser
from moleco.processors.identifier_splitter import MINCHI_TAG
from moleco.processors.mixture_tree import ComponentTable
from moleco.processors.weight_normalizer import NormalizedTree, WeightNormalizer
from moleco.services.color_assigner import Color, ColorAssigner, ColorScheme
from moleco.services.swatch_composer import RenderedSegment, component_totals, compose

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Swatch:
    """Everything a renderer needs for one identifier."""
    identifier: str
    notation: str
    version: str
    components: ComponentTable
    colors: Dict[int, Color]
    segments: Tuple[RenderedSegment, ...]

    @property
    def is_mixture(self) -> bool:
        return self.notation == "MInChI"

    def totals(self) -> Dict[int, float]:
        return component_totals(self.segments)


class SwatchService:
    """Service for turning identifiers into swatches."""

    def __init__(
        self,
        parser: Optional[IdentifierParser] = None,
        normalizer: Optional[WeightNormalizer] = None,
        assigner: Optional[ColorAssigner] = None,
        cache_size: Optional[int] = None
    ):
        """
        Initialize swatch service.

        Args:
            parser: Identifier parser
            normalizer: Weight normalizer
            assigner: Color assigner
            cache_size: Maximum number of cached swatches; 0 disables caching
        """
        self.parser = parser or IdentifierParser()
        self.normalizer = normalizer or WeightNormalizer()
        self.assigner = assigner or ColorAssigner()
        self.cache_size = settings.swatch_cache_size if cache_size is None else cache_size

        # Cache for finished swatches, least recently used evicted first
        self.swatch_cache: "OrderedDict[str, Swatch]" = OrderedDict()

    def _get_identifier_hash(self, identifier: str) -> str:
        """Generate hash for swatch caching."""
        return hashlib.md5(identifier.encode()).hexdigest()

    def normalize(self, identifier: str) -> NormalizedTree:
        return self.normalizer.normalize(self.parser.parse(identifier))

    def generate(self, identifier: str) -> Swatch:
        """
        Build the swatch of one identifier.

        Args:
            identifier: InChI or MInChI string

        Returns:
            Swatch with ordered segments

        Raises:
            IdentifierParseError: The identifier cannot be parsed
        """
        identifier_hash = self._get_identifier_hash(identifier)
        if identifier_hash in self.swatch_cache:
            self.swatch_cache.move_to_end(identifier_hash)
            return self.swatch_cache[identifier_hash]

        start_time = time.time()
        normalized = self.normalize(identifier)
        tree = normalized.tree
        colors = self.assigner.assign(tree.components)
        segments = compose(normalized, colors)

        swatch = Swatch(
            identifier=identifier,
            notation=tree.notation,
            version=tree.version,
            components=tree.components,
            colors=colors,
            segments=tuple(segments)
        )
        logger.info(
            "Generated %s swatch with %d segment(s) in %.4fs",
            tree.notation, len(segments), time.time() - start_time
        )
        if self.cache_size > 0:
            self.swatch_cache[identifier_hash] = swatch
            while len(self.swatch_cache) > self.cache_size:
                self.swatch_cache.popitem(last=False)
        return swatch

    def try_generate(self, identifier: str) -> Dict:
        """
        Build a swatch, reporting failures instead of raising.

        Returns:
            Dictionary with success flag and either the swatch or error details
        """
        try:
            return {"success": True, "swatch": self.generate(identifier)}
        except IdentifierParseError as e:
            logger.info("Rejected identifier %r: %s", identifier, e)
            return {
                "success": False,
                "error": str(e),
                "kind": e.kind,
                "offset": e.offset,
            }

    def schemes(self, identifiers: List[str]) -> Dict[str, ColorScheme]:
        """Color schemes for substance identifiers (InChI or bare layers)."""
        results = {}
        for identifier in identifiers:
            if "=" in identifier:
                split = self.parser.split(identifier)
                if split.notation == MINCHI_TAG:
                    raise UnsupportedFormat(
                        "Color schemes are computed per substance, request a swatch for mixtures",
                        offset=0
                    )
                key = split.components[0]
            else:
                key = identifier
            results[identifier] = self.assigner.scheme(key)
        return results
