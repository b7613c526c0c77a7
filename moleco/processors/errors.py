"""Error taxonomy for identifier parsing and swatch composition."""
from typing import Optional, Tuple


class IdentifierParseError(ValueError):
    """
    Base class for every failure raised while turning an identifier into a swatch.

    Attributes:
        offset: Character offset into the full identifier text, when known
        path: Child positions (0-based) leading to the offending node, when known
    """

    kind = "ParseError"

    def __init__(
        self,
        message: str,
        offset: Optional[int] = None,
        path: Optional[Tuple[int, ...]] = None
    ):
        self.message = message
        self.offset = offset
        self.path = tuple(path) if path is not None else None
        super().__init__(self._describe())

    def _describe(self) -> str:
        context = []
        if self.offset is not None:
            context.append(f"offset {self.offset}")
        if self.path is not None:
            context.append("position " + (".".join(str(p) for p in self.path) or "root"))
        if context:
            return f"{self.message} (at {', '.join(context)})"
        return self.message


class UnsupportedFormat(IdentifierParseError):
    kind = "UnsupportedFormat"


class IncompleteMixtureStructure(IdentifierParseError):
    kind = "IncompleteMixtureStructure"


class UnbalancedGrouping(IdentifierParseError):
    kind = "UnbalancedGrouping"


class MalformedGrouping(IdentifierParseError):
    kind = "MalformedGrouping"


class UnknownWeightKind(IdentifierParseError):
    kind = "UnknownWeightKind"


class MalformedWeight(IdentifierParseError):
    kind = "MalformedWeight"


class MixtureStructureMismatch(IdentifierParseError):
    kind = "MixtureStructureMismatch"


class UnknownComponentReference(IdentifierParseError):
    kind = "UnknownComponentReference"


class EmptyIdentifier(IdentifierParseError):
    kind = "EmptyIdentifier"
