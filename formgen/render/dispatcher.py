"""Render dispatcher: selects a render strategy per field kind."""

from collections.abc import Mapping

from ..core.logging import get_logger
from ..core.schema import FieldDescriptor, FieldKind
from .context import RenderContext
from .fields import (
    ArrayRenderer,
    CheckboxRenderer,
    DateRenderer,
    EmailRenderer,
    FieldRenderer,
    FileRenderer,
    HiddenRenderer,
    ImageRenderer,
    NumberRenderer,
    ObjectRenderer,
    PasswordRenderer,
    RadioRenderer,
    RangeRenderer,
    RecordRenderer,
    RenderResult,
    SelectRenderer,
    StarRatingRenderer,
    TextareaRenderer,
    TextRenderer,
    UnionRenderer,
    UrlRenderer,
)

logger = get_logger(__name__)


def default_strategies() -> dict[str, FieldRenderer]:
    """Strategy table keyed by field kind and presentation kind names."""
    return {
        FieldKind.TEXT.value: TextRenderer(),
        FieldKind.EMAIL.value: EmailRenderer(),
        FieldKind.URL.value: UrlRenderer(),
        FieldKind.TEXTAREA.value: TextareaRenderer(),
        FieldKind.NUMBER.value: NumberRenderer(),
        FieldKind.RANGE.value: RangeRenderer(),
        FieldKind.BOOLEAN.value: CheckboxRenderer(),
        FieldKind.DATE.value: DateRenderer(),
        FieldKind.ENUM.value: SelectRenderer(),
        FieldKind.FILE.value: FileRenderer(),
        FieldKind.OBJECT.value: ObjectRenderer(),
        FieldKind.ARRAY.value: ArrayRenderer(),
        FieldKind.RECORD.value: RecordRenderer(),
        FieldKind.UNION.value: UnionRenderer(),
        # Presentation overrides selectable through field options
        "checkbox": CheckboxRenderer(),
        "select": SelectRenderer(),
        "radio": RadioRenderer(),
        "stars": StarRatingRenderer(),
        "image": ImageRenderer(),
        "password": PasswordRenderer(),
        "hidden": HiddenRenderer(),
    }


class RenderDispatcher:
    """Renders descriptors by delegating to the strategy registered for their kind.

    Unknown kinds always degrade to the ``fallback`` strategy (plain text by
    default); rendering never fails because of a kind.
    """

    def __init__(
        self,
        strategies: Mapping[str, FieldRenderer] | None = None,
        fallback: str = FieldKind.TEXT.value,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            strategies: Extra or replacement strategies keyed by kind name
            fallback: Kind whose strategy renders unknown kinds
        """
        self._strategies = default_strategies()
        self._strategies.update(strategies or {})
        self.fallback = fallback

    def register(self, kind: str, strategy: FieldRenderer) -> None:
        """Register or replace the strategy for a kind."""
        self._strategies[kind] = strategy

    def strategy_for(self, kind: str) -> FieldRenderer:
        """Strategy rendering ``kind``, the fallback strategy for unknown kinds."""
        strategy = self._strategies.get(kind)
        if strategy is not None:
            return strategy
        logger.debug("No strategy for field kind, using fallback", kind=kind)
        return self._strategies.get(self.fallback) or self._strategies[FieldKind.TEXT.value]

    def render(
        self, descriptor: FieldDescriptor, context: RenderContext | None = None
    ) -> RenderResult:
        """Render one descriptor (and its nested descriptors)."""
        context = context or RenderContext()
        return self.strategy_for(descriptor.effective_kind).render(
            descriptor, context, self
        )


def render(
    descriptor: FieldDescriptor, context: RenderContext | None = None
) -> RenderResult:
    """Render a descriptor with the default strategy table."""
    return RenderDispatcher().render(descriptor, context)
