"""Render strategies, one per field kind.

Each strategy turns a descriptor into a field unit (label, control, error
slot) plus the behavior bindings the control needs. A strategy declares which
descriptor constraints it translates into native browser attributes; all other
constraints are left to server-side validation.
"""

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import BaseModel

from ..behavior.bindings import (
    ARRAY_ADD,
    ARRAY_REMOVE,
    MIRROR_VALUE,
    PREVIEW_FILE,
    READ_TEXT_FILE,
    SELECT_ALTERNATIVE,
    STAR_RATING,
    VALIDATE,
    BehaviorScript,
    Binding,
)
from ..core.paths import ALTERNATIVE_SUFFIX, MISSING
from ..core.schema import FieldDescriptor, FieldKind
from .context import RenderContext
from .markup import format_value, tag, text

if TYPE_CHECKING:
    from .dispatcher import RenderDispatcher

TRUTHY_VALUES = frozenset({"true", "on", "1", "yes"})


@dataclass(frozen=True)
class RenderResult:
    """Markup for one field plus the bindings it needs."""

    markup: str
    bindings: tuple[Binding, ...] = ()

    @property
    def behavior(self) -> BehaviorScript:
        """Bindings wrapped as a behavior script."""
        return BehaviorScript(self.bindings)


def array_placeholder(path: str) -> str:
    """Index placeholder used in the item template of the array at ``path``.

    The nesting depth is part of the placeholder so that templates of nested
    arrays survive instantiation of their enclosing item.
    """
    return f"__i{path.count('[')}__"


class FieldRenderer:
    """Base render strategy for single-control fields."""

    native_constraints: ClassVar[frozenset[str]] = frozenset()
    validate_event: ClassVar[str] = "blur"
    validates: ClassVar[bool] = True

    def render(
        self,
        descriptor: FieldDescriptor,
        context: RenderContext,
        dispatcher: "RenderDispatcher",
    ) -> RenderResult:
        """Render the descriptor as a complete field unit."""
        context = self.scoped_context(descriptor, context)
        control, bindings = self.render_control(descriptor, context, dispatcher)
        return RenderResult(
            self.field_unit(descriptor, context, control),
            (*self.validation_bindings(descriptor, context), *bindings),
        )

    def render_control(
        self,
        descriptor: FieldDescriptor,
        context: RenderContext,
        dispatcher: "RenderDispatcher",
    ) -> tuple[str, tuple[Binding, ...]]:
        """Render the control element(s) and their bindings."""
        raise NotImplementedError

    def scoped_context(
        self, descriptor: FieldDescriptor, context: RenderContext
    ) -> RenderContext:
        """Deactivate the context when a conditional rule hides this field."""
        if descriptor.path in context.hidden:
            return context.deactivated("rule")
        return context

    def current_value(self, descriptor: FieldDescriptor, context: RenderContext) -> Any:
        """Value to display: the submitted value, else the schema default."""
        value = context.value_at(descriptor.path)
        if value is MISSING and descriptor.has_default:
            return descriptor.default
        return value

    def native_attributes(self, descriptor: FieldDescriptor) -> dict[str, Any]:
        """Native constraint attributes this strategy can express.

        HTML bounds are inclusive, so exclusive bounds are left to the server.
        """
        constraints = descriptor.constraints
        candidates = {
            "required": constraints.required,
            "minlength": constraints.min_length,
            "maxlength": constraints.max_length,
            "min": None if constraints.exclusive_min else constraints.min,
            "max": None if constraints.exclusive_max else constraints.max,
            "step": constraints.step,
            "pattern": constraints.pattern,
        }
        attrs: dict[str, Any] = {}
        for name, value in candidates.items():
            if name not in self.native_constraints or value is None or value is False:
                continue
            attrs[name] = value if value is True else format_value(value)
        return attrs

    def control_attributes(
        self, descriptor: FieldDescriptor, context: RenderContext, **leading: Any
    ) -> dict[str, Any]:
        """Common attributes of the primary control."""
        element_id = context.dom_id(descriptor.path)
        attrs: dict[str, Any] = {
            **leading,
            "id": element_id,
            "name": descriptor.path,
            **self.native_attributes(descriptor),
        }
        if descriptor.hints.placeholder:
            attrs["placeholder"] = descriptor.hints.placeholder
        if context.error_for(descriptor.path):
            attrs["aria-invalid"] = "true"
        attrs["aria-describedby"] = f"{element_id}-error"
        attrs.update(context.disabled_attrs())
        return attrs

    def validation_bindings(
        self, descriptor: FieldDescriptor, context: RenderContext
    ) -> tuple[Binding, ...]:
        """Live single-field validation, when enabled."""
        if not (self.validates and context.interactive and context.validate_url):
            return ()
        if context.bare_path == descriptor.path:
            return ()
        return (
            Binding(
                path=descriptor.path,
                event=self.validate_event,
                effect=VALIDATE,
                params={"url": context.validate_url},
            ),
        )

    def label(
        self, descriptor: FieldDescriptor, context: RenderContext, for_control: bool = True
    ) -> str:
        """Label element, marked when the field is required."""
        element_id = context.dom_id(descriptor.path)
        content = text(descriptor.label)
        if descriptor.constraints.required:
            content += tag("span", {"class": "zf-required", "aria-hidden": "true"}, "*")
        return tag(
            "label",
            {
                "class": context.css("label"),
                "id": f"{element_id}-label",
                "for": element_id if for_control else None,
            },
            content,
        )

    def error_slot(self, descriptor: FieldDescriptor, context: RenderContext) -> str:
        """Element the field's error message is shown in."""
        return tag(
            "div",
            {
                "class": context.css("error"),
                "id": f"{context.dom_id(descriptor.path)}-error",
                "data-error-for": descriptor.path,
                "role": "alert",
            },
            text(context.error_for(descriptor.path) or ""),
        )

    def field_unit(
        self,
        descriptor: FieldDescriptor,
        context: RenderContext,
        control: str,
        label: str | None = None,
    ) -> str:
        """Wrap a control with its label, help text and error slot."""
        if context.bare_path == descriptor.path:
            return control

        element_id = context.dom_id(descriptor.path)
        parts = [self.label(descriptor, context) if label is None else label, control]
        if descriptor.hints.description:
            parts.append(
                tag(
                    "small",
                    {"class": context.css("help"), "id": f"{element_id}-help"},
                    text(descriptor.hints.description),
                )
            )
        parts.append(self.error_slot(descriptor, context))
        return tag(
            "div",
            {
                "class": context.css("field", f"zf-kind-{descriptor.effective_kind}"),
                "id": f"{element_id}-field",
                "data-path": descriptor.path,
                "data-kind": descriptor.effective_kind,
                "hidden": descriptor.path in context.hidden,
            },
            "".join(parts),
        )


class TextRenderer(FieldRenderer):
    """Single-line text input."""

    input_type: ClassVar[str] = "text"
    native_constraints = frozenset({"required", "minlength", "maxlength", "pattern"})

    def render_control(self, descriptor, context, dispatcher):
        attrs = self.control_attributes(
            descriptor, context, type=self.input_type, **{"class": context.css("input")}
        )
        attrs["value"] = format_value(self.current_value(descriptor, context))
        return tag("input", attrs), ()


class EmailRenderer(TextRenderer):
    input_type = "email"


class UrlRenderer(TextRenderer):
    input_type = "url"


class PasswordRenderer(TextRenderer):
    """Password input; the current value is never echoed back."""

    input_type = "password"

    def current_value(self, descriptor, context):
        return None


class HiddenRenderer(TextRenderer):
    """Hidden input without label or error slot."""

    input_type = "hidden"
    native_constraints = frozenset()
    validates = False

    def render(self, descriptor, context, dispatcher):
        context = self.scoped_context(descriptor, context)
        attrs = {
            "type": "hidden",
            "id": context.dom_id(descriptor.path),
            "name": descriptor.path,
            "value": format_value(self.current_value(descriptor, context)),
            **context.disabled_attrs(),
        }
        return RenderResult(tag("input", attrs))


class TextareaRenderer(FieldRenderer):
    """Multi-line text, optionally filled from an uploaded text document."""

    native_constraints = frozenset({"required", "minlength", "maxlength"})
    default_rows: ClassVar[int] = 5

    def render_control(self, descriptor, context, dispatcher):
        attrs = self.control_attributes(
            descriptor,
            context,
            **{"class": context.css("textarea")},
            rows=descriptor.hints.rows or self.default_rows,
        )
        control = tag(
            "textarea", attrs, text(self.current_value(descriptor, context))
        )
        if not descriptor.hints.document_upload:
            return control, ()

        upload_id = f"{attrs['id']}-upload"
        upload = tag(
            "input",
            {
                "type": "file",
                "id": upload_id,
                "class": context.css("input", "zf-document-upload"),
                "accept": descriptor.hints.accept or ".txt,.md,.csv,.json,text/plain",
                "aria-label": f"Load {descriptor.label} from a file",
                **context.disabled_attrs(),
            },
        )
        binding = Binding(
            path=descriptor.path,
            event="change",
            effect=READ_TEXT_FILE,
            params={"source": upload_id},
        )
        return control + upload, (binding,)


class NumberRenderer(FieldRenderer):
    """Numeric input; non-integer fields accept any step unless one is declared."""

    native_constraints = frozenset({"required", "min", "max", "step"})

    def render_control(self, descriptor, context, dispatcher):
        attrs = self.control_attributes(
            descriptor, context, type="number", **{"class": context.css("input")}
        )
        if "step" not in attrs and not descriptor.constraints.integer:
            attrs["step"] = "any"
        attrs["value"] = format_value(self.current_value(descriptor, context))
        return tag("input", attrs), ()


class RangeRenderer(FieldRenderer):
    """Slider with a live readout of the current value."""

    native_constraints = frozenset({"min", "max", "step"})
    validate_event = "change"

    def render_control(self, descriptor, context, dispatcher):
        constraints = descriptor.constraints
        minimum = constraints.min if constraints.min is not None else 0
        maximum = constraints.max if constraints.max is not None else 100
        value = self.current_value(descriptor, context)
        if value is MISSING or value is None or value == "":
            value = minimum

        attrs = self.control_attributes(
            descriptor, context, type="range", **{"class": context.css("input", "zf-range")}
        )
        attrs.setdefault("min", format_value(minimum))
        attrs.setdefault("max", format_value(maximum))
        attrs["value"] = format_value(value)

        output_id = f"{attrs['id']}-output"
        unit = descriptor.hints.unit
        readout = tag(
            "span",
            {"class": "zf-range-readout"},
            tag("output", {"id": output_id, "for": attrs["id"]}, text(value))
            + (tag("span", {"class": "zf-range-unit"}, text(unit)) if unit else ""),
        )
        limits = tag(
            "span",
            {"class": "zf-range-limits"},
            tag("span", {}, text(minimum)) + tag("span", {}, text(maximum)),
        )
        binding = Binding(
            path=descriptor.path,
            event="input",
            effect=MIRROR_VALUE,
            params={"target": output_id},
        )
        return tag("input", attrs) + readout + limits, (binding,)


class StarRatingRenderer(FieldRenderer):
    """Clickable star rating stored in a hidden input."""

    native_constraints = frozenset({"required"})
    validate_event = "change"
    default_stars: ClassVar[int] = 5

    def render_control(self, descriptor, context, dispatcher):
        count = int(descriptor.constraints.max or self.default_stars)
        value = self.current_value(descriptor, context)
        try:
            rating = int(format_value(value) or 0)
        except ValueError:
            rating = 0

        attrs = self.control_attributes(descriptor, context, type="hidden")
        attrs["value"] = format_value(value)
        container_id = f"{attrs['id']}-stars"
        stars = "".join(
            tag(
                "button",
                {
                    "type": "button",
                    "class": "zf-star zf-star-active" if star <= rating else "zf-star",
                    "data-star": star,
                    "aria-label": f"{star} of {count}",
                    **context.disabled_attrs(),
                },
                "&#9733;",
            )
            for star in range(1, count + 1)
        )
        control = tag("input", attrs) + tag(
            "div",
            {"class": "zf-stars", "id": container_id, "role": "radiogroup"},
            stars,
        )
        binding = Binding(
            path=descriptor.path,
            event="click",
            effect=STAR_RATING,
            params={"container": container_id},
        )
        return control, (binding,)


class CheckboxRenderer(FieldRenderer):
    """Checkbox submitting ``true`` when checked; absence decodes to false."""

    validate_event = "change"

    def render_control(self, descriptor, context, dispatcher):
        value = self.current_value(descriptor, context)
        checked = value is True or format_value(value).lower() in TRUTHY_VALUES
        attrs = self.control_attributes(
            descriptor,
            context,
            type="checkbox",
            **{"class": context.css("checkbox")},
            value="true",
        )
        attrs["checked"] = checked
        return tag("input", attrs), ()

    def field_unit(self, descriptor, context, control, label=None):
        # label follows the box
        inline = tag(
            "span", {"class": "zf-checkbox-line"}, control + self.label(descriptor, context)
        )
        return super().field_unit(descriptor, context, inline, label="")


class DateRenderer(FieldRenderer):
    """Date, date-time or time input depending on the schema format."""

    native_constraints = frozenset({"required", "min", "max"})
    validate_event = "change"
    input_types: ClassVar[Mapping[str, str]] = {
        "date": "date",
        "date-time": "datetime-local",
        "time": "time",
    }

    def render_control(self, descriptor, context, dispatcher):
        input_type = self.input_types.get(descriptor.format or "date", "date")
        attrs = self.control_attributes(
            descriptor, context, type=input_type, **{"class": context.css("input")}
        )
        attrs["value"] = format_value(self.current_value(descriptor, context))
        return tag("input", attrs), ()


class SelectRenderer(FieldRenderer):
    """Drop-down list of choices."""

    native_constraints = frozenset({"required"})
    validate_event = "change"

    def render_control(self, descriptor, context, dispatcher):
        selected = format_value(self.current_value(descriptor, context))
        placeholder = descriptor.hints.placeholder or "-- Select --"
        options = [tag("option", {"value": ""}, text(placeholder))]
        options.extend(
            tag(
                "option",
                {"value": option.value, "selected": option.value == selected},
                text(option.label),
            )
            for option in descriptor.effective_options
        )
        attrs = self.control_attributes(
            descriptor, context, **{"class": context.css("select")}
        )
        attrs.pop("placeholder", None)
        return tag("select", attrs, "".join(options)), ()


class RadioRenderer(FieldRenderer):
    """Radio button group of choices."""

    native_constraints = frozenset({"required"})
    validate_event = "change"

    def render_control(self, descriptor, context, dispatcher):
        selected = format_value(self.current_value(descriptor, context))
        base = self.control_attributes(
            descriptor, context, type="radio", **{"class": context.css("radio")}
        )
        base.pop("placeholder", None)
        buttons = []
        for index, option in enumerate(descriptor.effective_options):
            attrs = {
                **base,
                "id": f"{base['id']}-{index}",
                "value": option.value,
                "checked": option.value == selected,
            }
            buttons.append(
                tag(
                    "label",
                    {"class": "zf-radio-option"},
                    tag("input", attrs) + tag("span", {}, text(option.label)),
                )
            )
        group = tag(
            "div",
            {
                "class": "zf-radio-group",
                "role": "radiogroup",
                "aria-labelledby": f"{base['id']}-label",
            },
            "".join(buttons),
        )
        return group, ()

    def label(self, descriptor, context, for_control=True):
        return super().label(descriptor, context, for_control=False)


class FileRenderer(FieldRenderer):
    """File input with a client-side preview; validated only on submit."""

    native_constraints = frozenset({"required"})
    validates = False
    image: ClassVar[bool] = False

    def render_control(self, descriptor, context, dispatcher):
        image = self.image or descriptor.hints.image_upload
        attrs = self.control_attributes(
            descriptor, context, type="file", **{"class": context.css("input", "zf-file")}
        )
        attrs.pop("placeholder", None)
        attrs["accept"] = descriptor.hints.accept or ("image/*" if image else None)
        attrs["multiple"] = descriptor.hints.multiple

        name_id = f"{attrs['id']}-name"
        preview_id = f"{attrs['id']}-preview" if image else None
        control = tag("input", attrs) + tag("span", {"class": "zf-file-name", "id": name_id}, "")
        if preview_id:
            control += tag("div", {"class": "zf-file-preview", "id": preview_id}, "")
        binding = Binding(
            path=descriptor.path,
            event="change",
            effect=PREVIEW_FILE,
            params={"name_target": name_id, "preview_target": preview_id},
        )
        return control, (binding,)


class ImageRenderer(FileRenderer):
    image = True


class ObjectRenderer(FieldRenderer):
    """Fieldset containing the rendered members of a nested object."""

    validates = False

    def render_control(self, descriptor, context, dispatcher):
        results = [
            dispatcher.render(child, context) for child in descriptor.children.values()
        ]
        legend = tag("legend", {"class": context.css("legend")}, text(descriptor.label))
        fieldset = tag(
            "fieldset",
            {
                "class": context.css("fieldset"),
                "id": f"{context.dom_id(descriptor.path)}-fieldset",
            },
            legend + "".join(result.markup for result in results),
        )
        return fieldset, tuple(binding for result in results for binding in result.bindings)

    def field_unit(self, descriptor, context, control, label=None):
        return super().field_unit(descriptor, context, control, label="")


class ArrayRenderer(FieldRenderer):
    """Repeatable items with add/remove controls and a client-side item template."""

    validates = False
    default_add_label: ClassVar[str] = "Add Item"

    def render_control(self, descriptor, context, dispatcher):
        element_id = context.dom_id(descriptor.path)
        entries = self.entries(descriptor, context)
        results = [
            self.render_entry(descriptor, context, dispatcher, index, entry)
            for index, entry in enumerate(entries)
        ]

        placeholder = array_placeholder(descriptor.path)
        template_context = replace(context, disabled_reason=None, errors={})
        prototype = self.render_entry(
            descriptor, template_context, dispatcher, placeholder, MISSING
        )

        add_id = f"{element_id}-add"
        items_id = f"{element_id}-items"
        template_id = f"{element_id}-template"
        constraints = descriptor.constraints
        container = tag(
            "div",
            {
                "class": context.css("array"),
                "id": element_id,
                "data-path": descriptor.path,
                "data-min-items": constraints.min_length,
                "data-max-items": constraints.max_length,
            },
            tag(
                "div",
                {"class": context.css("array_items"), "id": items_id},
                "".join(result.markup for result in results),
            )
            + tag("template", {"id": template_id}, prototype.markup)
            + tag(
                "div",
                {"class": context.css("array_controls")},
                tag(
                    "button",
                    {
                        "type": "button",
                        "class": context.css("button", "zf-add-item"),
                        "id": add_id,
                        **context.disabled_attrs(),
                    },
                    text(descriptor.hints.add_label or self.default_add_label),
                ),
            ),
        )

        bindings = [
            Binding(
                path=descriptor.path,
                event="click",
                effect=ARRAY_ADD,
                params={
                    "button": add_id,
                    "items": items_id,
                    "template": template_id,
                    "placeholder": placeholder,
                    "next": len(entries),
                    "max": constraints.max_length,
                },
            ),
            Binding(
                path=descriptor.path,
                event="click",
                effect=ARRAY_REMOVE,
                params={"container": element_id, "min": constraints.min_length or 0},
            ),
        ]
        for result in (*results, prototype):
            bindings.extend(result.bindings)
        return container, tuple(bindings)

    def label(self, descriptor, context, for_control=True):
        return super().label(descriptor, context, for_control=False)

    def entries(self, descriptor: FieldDescriptor, context: RenderContext) -> list[Any]:
        """Current item values, padded to the declared minimum."""
        value = self.current_value(descriptor, context)
        items = list(value) if isinstance(value, list | tuple) else []
        minimum = descriptor.constraints.min_length or 0
        items.extend([MISSING] * (minimum - len(items)))
        return items

    def render_entry(
        self,
        descriptor: FieldDescriptor,
        context: RenderContext,
        dispatcher: "RenderDispatcher",
        index: int | str,
        entry: Any,
    ) -> RenderResult:
        """Render one item wrapped with its remove button."""
        item = descriptor.entry(index)
        item = item.at(
            item.path,
            hints=item.hints.merged(type(item.hints)(label=self.item_label(descriptor))),
        )
        result = dispatcher.render(item, context)
        return RenderResult(
            tag(
                "div",
                {"class": context.css("array_item"), "data-index": index},
                result.markup + self.remove_button(descriptor, context),
            ),
            result.bindings,
        )

    def item_label(self, descriptor: FieldDescriptor) -> str:
        if descriptor.item is not None and descriptor.item.hints.label:
            return descriptor.item.hints.label
        return f"{descriptor.label} item"

    def remove_button(self, descriptor: FieldDescriptor, context: RenderContext) -> str:
        label = descriptor.hints.remove_label or "Remove"
        return tag(
            "button",
            {
                "type": "button",
                "class": context.css("button", "zf-remove-item"),
                "data-remove-item": True,
                "aria-label": f"{label} {self.item_label(descriptor)}",
                **context.disabled_attrs(),
            },
            text(label),
        )


class RecordRenderer(ArrayRenderer):
    """Key/value pairs; at least one empty pair is always shown."""

    default_add_label = "Add Key-Value Pair"

    def entries(self, descriptor, context):
        value = self.current_value(descriptor, context)
        pairs = list(value.items()) if isinstance(value, Mapping) else []
        return pairs or [("", MISSING)]

    def render_entry(self, descriptor, context, dispatcher, index, entry):
        key, value = entry if entry is not MISSING else ("", MISSING)
        key_path = f"{descriptor.path}[{index}].key"
        value_path = f"{descriptor.path}[{index}].value"
        item = descriptor.item.at(
            value_path, name="value", hints=descriptor.item.hints.merged(
                type(descriptor.item.hints)(label="Value")
            )
        )
        entry_context = context.with_overrides(
            {key_path: key, value_path: value},
            errors={value_path: context.error_for(f"{descriptor.path}[{key}]") if key else None},
        )
        # entry paths are positional, live validation addresses fields by key
        entry_context = replace(entry_context, validate_url=None)

        key_input = tag(
            "input",
            {
                "type": "text",
                "class": context.css("input", "zf-record-key"),
                "id": context.dom_id(key_path),
                "name": key_path,
                "value": format_value(key),
                "placeholder": "Key",
                "aria-label": f"{descriptor.label} key",
                **context.disabled_attrs(),
            },
        )
        result = dispatcher.render(item, entry_context)
        markup = tag(
            "div",
            {"class": context.css("array_item", "zf-record-item"), "data-index": index},
            tag("div", {"class": "zf-record-key"}, key_input)
            + tag("div", {"class": "zf-record-value"}, result.markup)
            + self.remove_button(descriptor, context),
        )
        return RenderResult(markup, result.bindings)

    def item_label(self, descriptor):
        return f"{descriptor.label} entry"


class UnionRenderer(FieldRenderer):
    """Radio-selected alternatives; only the active one is enabled."""

    validates = False

    def render_control(self, descriptor, context, dispatcher):
        element_id = context.dom_id(descriptor.path)
        group = f"{descriptor.path}{ALTERNATIVE_SUFFIX}"
        active = self.active_alternative(descriptor, context)
        errors = {
            path: message
            for path, message in context.errors.items()
            if path != descriptor.path
        }

        radios = []
        panels = []
        bindings: list[Binding] = []
        for alternative in descriptor.alternatives:
            index = alternative.discriminator
            is_active = index == active
            radios.append(
                tag(
                    "label",
                    {"class": "zf-union-option"},
                    tag(
                        "input",
                        {
                            "type": "radio",
                            "class": context.css("radio"),
                            "id": f"{element_id}-alt-{index}",
                            "name": group,
                            "value": index,
                            "checked": is_active,
                            **context.disabled_attrs(),
                        },
                    )
                    + tag("span", {}, text(self.alternative_label(alternative))),
                )
            )

            panel_context = replace(
                context,
                namespace=f"{context.namespace}-alt{index}",
                errors=errors,
                bare_path=descriptor.path,
            )
            if not is_active:
                panel_context = panel_context.deactivated("alternative")
            result = dispatcher.render(alternative, panel_context)
            bindings.extend(result.bindings)
            panels.append(
                tag(
                    "div",
                    {
                        "class": "zf-union-alternative",
                        "data-alternative": index,
                        "hidden": not is_active,
                    },
                    result.markup,
                )
            )

        control = tag(
            "div",
            {"class": "zf-union", "id": element_id},
            tag(
                "div",
                {
                    "class": "zf-union-options",
                    "role": "radiogroup",
                    "aria-labelledby": f"{element_id}-label",
                },
                "".join(radios),
            )
            + "".join(panels),
        )
        bindings.insert(
            0,
            Binding(
                path=descriptor.path,
                event="change",
                effect=SELECT_ALTERNATIVE,
                params={"group": group},
            ),
        )
        return control, tuple(bindings)

    def label(self, descriptor, context, for_control=True):
        return super().label(descriptor, context, for_control=False)

    def alternative_label(self, alternative: FieldDescriptor) -> str:
        if alternative.hints.label:
            return alternative.hints.label
        return f"Option {alternative.discriminator + 1}"

    def active_alternative(
        self, descriptor: FieldDescriptor, context: RenderContext
    ) -> int:
        """Alternative chosen in the submission, else the first one accepting the value."""
        chosen = context.value_at(f"{descriptor.path}{ALTERNATIVE_SUFFIX}")
        if chosen is not MISSING:
            try:
                index = int(chosen)
            except (TypeError, ValueError):
                index = -1
            if 0 <= index < len(descriptor.alternatives):
                return index

        value = self.current_value(descriptor, context)
        if value is not MISSING and value is not None:
            for alternative in descriptor.alternatives:
                if _accepts(alternative, value):
                    return alternative.discriminator
        return 0


def _accepts(alternative: FieldDescriptor, value: Any) -> bool:
    kind = alternative.kind
    if isinstance(value, BaseModel):
        annotation = alternative.source.annotation if alternative.source else None
        return isinstance(annotation, type) and isinstance(value, annotation)
    if isinstance(value, bool):
        return kind is FieldKind.BOOLEAN
    if isinstance(value, int | float):
        return kind in (FieldKind.NUMBER, FieldKind.RANGE)
    if isinstance(value, Mapping):
        return kind in (FieldKind.OBJECT, FieldKind.RECORD)
    if isinstance(value, list | tuple):
        return kind is FieldKind.ARRAY
    if isinstance(value, str):
        if kind is FieldKind.ENUM:
            return any(option.value == value for option in alternative.options)
        return kind in (
            FieldKind.TEXT,
            FieldKind.EMAIL,
            FieldKind.URL,
            FieldKind.TEXTAREA,
            FieldKind.DATE,
        )
    return False
