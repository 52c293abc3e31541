"""Form generation: schema in, markup, styles and behavior script out."""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from pydantic import BaseModel

from ..behavior.bindings import BehaviorScript, Binding
from ..behavior.rules import ConditionalRuleCompiler, hidden_targets, parse_rules
from ..config import FormOptions
from ..core.cache import FormInstanceCache
from ..core.logging import OperationTimer, get_logger
from ..core.mapper import DescriptorMapper
from ..core.paths import MISSING
from ..core.schema import FieldDescriptor, FieldKind, find_descriptor
from ..validation.errors import FORM_ERROR_KEY
from ..validation.submission import FORM_ID_FIELD, decode_submission
from .context import RenderContext
from .dispatcher import RenderDispatcher
from .fields import ArrayRenderer, RenderResult
from .markup import tag, text
from .styles import stylesheet

logger = get_logger(__name__)


@dataclass(frozen=True)
class GeneratedForm:
    """The three artifacts of a generated form plus what they were built from.

    ``markup`` is the form element, ``styles`` the CSS rules and ``script``
    the JavaScript attaching the behavior bindings (empty for static forms).
    """

    markup: str
    styles: str
    script: str
    form_id: str
    descriptors: Mapping[str, FieldDescriptor] = field(repr=False)
    bindings: tuple[Binding, ...] = ()
    instance_id: str | None = None

    def document(self) -> str:
        """Markup with styles and script inlined, ready to embed in a page."""
        parts = [f"<style>\n{self.styles}\n</style>", self.markup]
        if self.script:
            parts.append(f"<script>\n{self.script}</script>")
        return "\n".join(parts)


class FormGenerator:
    """Assembles complete forms from schemas.

    The generator is stateless apart from its collaborators; each call maps
    the schema afresh.
    """

    def __init__(
        self,
        mapper: DescriptorMapper | None = None,
        dispatcher: RenderDispatcher | None = None,
        compiler: ConditionalRuleCompiler | None = None,
    ) -> None:
        self.mapper = mapper or DescriptorMapper()
        self.dispatcher = dispatcher or RenderDispatcher()
        self.compiler = compiler or ConditionalRuleCompiler()

    def generate(
        self,
        schema: Any,
        options: FormOptions | Mapping[str, Any] | None = None,
        values: Mapping[str, Any] | BaseModel | None = None,
        errors: Mapping[str, str] | None = None,
        cache: FormInstanceCache | None = None,
    ) -> GeneratedForm:
        """Generate a form for ``schema``.

        Args:
            schema: Pydantic model class or dataclass
            options: Form options (settings defaults if omitted)
            values: Current values, flat or nested, or a model instance
            errors: Error messages keyed by canonical path
            cache: When given, the instance is stored and its id embedded in
                the form so it can be validated or extended later

        Returns:
            The generated form

        Raises:
            SchemaIntrospectionError: If the schema cannot be mapped
        """
        options = FormOptions.coerce(options)
        schema_name = getattr(schema, "__name__", repr(schema))
        with OperationTimer(logger, "generate_form", schema=schema_name):
            descriptors = self.mapper.map_schema(
                schema, field_options=options.field_options
            )
            rules = parse_rules(options.conditional_logic)
            context = RenderContext.create(
                values=self._initial_values(descriptors, values),
                errors=errors,
                options=options,
            )
            context = replace(
                context,
                hidden=frozenset(hidden_targets(rules, context.values, descriptors)),
            )

            results = [
                self.dispatcher.render(descriptor, context)
                for descriptor in descriptors.values()
            ]
            rule_bindings = self.compiler.compile(rules, descriptors)

            instance_id = cache.store(schema, options) if cache is not None else None
            form_id = context.dom_id("form")
            markup = self._form_markup(
                form_id, options, descriptors, results, context, errors, instance_id
            )
            behavior = BehaviorScript.collect(
                *(result.bindings for result in results), rule_bindings
            )

        return GeneratedForm(
            markup=markup,
            styles=stylesheet(options.theme),
            script=behavior.render(form_id) if options.interactive else "",
            form_id=form_id,
            descriptors=descriptors,
            bindings=behavior.bindings,
            instance_id=instance_id,
        )

    def generate_field(
        self,
        schema: Any,
        path: str,
        options: FormOptions | Mapping[str, Any] | None = None,
        value: Any = MISSING,
        error: str | None = None,
    ) -> RenderResult:
        """Render the field unit for a single path of ``schema``.

        Raises:
            KeyError: If the path does not name a field of the schema
        """
        options = FormOptions.coerce(options)
        descriptors = self.mapper.map_schema(schema, field_options=options.field_options)
        descriptor = find_descriptor(descriptors, path)
        if descriptor is None:
            raise KeyError(f"Unknown field path: {path}")

        context = RenderContext.create(options=options)
        context = context.with_overrides(
            {path: value} if value is not MISSING else {}, errors={path: error}
        )
        return self.dispatcher.render(descriptor, context)

    def render_array_item(
        self,
        cache: FormInstanceCache,
        form_id: str,
        path: str,
        index: int,
    ) -> RenderResult:
        """Render one new entry of an array or record field of a cached form.

        Raises:
            FormInstanceNotFound: If the form instance is unknown or expired
            KeyError: If the path does not name a field of the form
            TypeError: If the field is not repeatable
        """
        entry = cache.get(form_id)
        descriptor = find_descriptor(entry.descriptors, path)
        if descriptor is None:
            raise KeyError(f"Unknown field path: {path}")
        if descriptor.kind not in (FieldKind.ARRAY, FieldKind.RECORD):
            raise TypeError(f"Field '{path}' is not an array or record")

        strategy = self.dispatcher.strategy_for(descriptor.effective_kind)
        if not isinstance(strategy, ArrayRenderer):
            raise TypeError(f"Field '{path}' is not rendered as a repeatable field")

        context = RenderContext.create(options=entry.options)
        return strategy.render_entry(descriptor, context, self.dispatcher, index, MISSING)

    def _initial_values(
        self,
        descriptors: Mapping[str, FieldDescriptor],
        values: Mapping[str, Any] | BaseModel | None,
    ) -> dict[str, Any]:
        if values is None:
            return {}
        if isinstance(values, BaseModel):
            return values.model_dump()
        if not values:
            return {}
        return decode_submission(descriptors, values, keep_alternatives=True)

    def _form_markup(
        self,
        form_id: str,
        options: FormOptions,
        descriptors: Mapping[str, FieldDescriptor],
        results: list[RenderResult],
        context: RenderContext,
        errors: Mapping[str, str] | None,
        instance_id: str | None,
    ) -> str:
        multipart = any(
            descriptor.effective_kind in ("file", "image")
            for top in descriptors.values()
            for descriptor in top.walk()
        )
        layout = "zf-horizontal" if options.layout == "horizontal" else "zf-vertical"
        body = []
        form_error = (errors or {}).get(FORM_ERROR_KEY)
        body.append(
            tag(
                "div",
                {
                    "class": context.css("error", "zf-form-error"),
                    "data-error-for": FORM_ERROR_KEY,
                    "role": "alert",
                },
                text(form_error or ""),
            )
        )
        if instance_id is not None:
            body.append(
                tag("input", {"type": "hidden", "name": FORM_ID_FIELD, "value": instance_id})
            )
        body.extend(result.markup for result in results)
        body.append(
            tag(
                "button",
                {"type": "submit", "class": context.css("submit_button")},
                text(options.submit_label),
            )
        )
        return tag(
            "form",
            {
                "id": form_id,
                "class": context.css("form", layout, f"zf-theme-{options.theme}"),
                "action": options.action,
                "method": options.method.lower(),
                "enctype": "multipart/form-data" if multipart else None,
            },
            "".join(body),
        )


def generate_form(
    schema: Any,
    options: FormOptions | Mapping[str, Any] | None = None,
    values: Mapping[str, Any] | BaseModel | None = None,
    errors: Mapping[str, str] | None = None,
    cache: FormInstanceCache | None = None,
) -> GeneratedForm:
    """Generate a form with a default generator."""
    return FormGenerator().generate(schema, options, values, errors, cache)


def generate_field(
    schema: Any,
    path: str,
    options: FormOptions | Mapping[str, Any] | None = None,
    value: Any = MISSING,
    error: str | None = None,
) -> RenderResult:
    """Render a single field unit with a default generator."""
    return FormGenerator().generate_field(schema, path, options, value, error)


def render_array_item(
    cache: FormInstanceCache, form_id: str, path: str, index: int
) -> RenderResult:
    """Render a new array or record entry of a cached form."""
    return FormGenerator().render_array_item(cache, form_id, path, index)
