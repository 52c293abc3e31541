"""Configuration management for formgen.

Process-wide defaults come from environment variables through Pydantic
Settings (``FORMGEN_`` prefix). Per-call options are plain Pydantic models
that accept both the snake_case field names and the camelCase keys used in
JSON/YAML option files.
"""

from collections.abc import Mapping
from typing import Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict


class FormgenSettings(BaseSettings):
    """Process-wide formgen configuration."""

    model_config = SettingsConfigDict(env_prefix="FORMGEN_", case_sensitive=False)

    # Environment
    environment: Literal["development", "testing", "production"] = Field(
        default="development", description="Application environment"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    json_logs: bool = Field(default=False, description="Enable JSON formatted logs")

    # Rendering defaults
    default_theme: Literal["dark", "light"] = Field(
        default="dark", description="Theme used when a call does not choose one"
    )
    default_layout: Literal["vertical", "horizontal"] = Field(
        default="vertical", description="Layout used when a call does not choose one"
    )
    submit_label: str = Field(default="Submit", description="Submit button text")
    id_namespace: str = Field(
        default="zf", description="Prefix for generated element ids"
    )

    # Form instance cache
    cache_ttl_seconds: float = Field(
        default=1800.0, gt=0, description="Lifetime of cached form instances"
    )

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"


class OptionHint(BaseModel):
    """A caller-supplied choice for select and radio fields."""

    model_config = ConfigDict(frozen=True)

    value: str
    label: str


class FieldOptions(BaseModel):
    """Presentation hints for a single field.

    Hints change how a field looks, never what it accepts: ``kind`` may
    switch the rendering strategy but constraints always come from the schema.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    label: str | None = None
    placeholder: str | None = None
    description: str | None = None
    kind: str | None = Field(
        default=None, validation_alias=AliasChoices("kind", "type", "widget")
    )
    options: tuple[OptionHint, ...] | None = None
    add_label: str | None = Field(default=None, alias="addLabel")
    remove_label: str | None = Field(default=None, alias="removeLabel")
    rows: int | None = Field(default=None, gt=0)
    accept: str | None = None
    multiple: bool = False
    unit: str | None = None
    image_upload: bool = Field(default=False, alias="imageUpload")
    document_upload: bool = Field(default=False, alias="documentUpload")

    @field_validator("options", mode="before")
    @classmethod
    def coerce_options(cls, value: Any) -> Any:
        """Accept bare strings and ``(value, label)`` pairs as options."""
        if value is None or isinstance(value, str):
            return value

        coerced = []
        for option in value:
            if isinstance(option, str):
                coerced.append({"value": option, "label": option[:1].upper() + option[1:]})
            elif isinstance(option, list | tuple) and len(option) == 2:
                coerced.append({"value": str(option[0]), "label": str(option[1])})
            else:
                coerced.append(option)
        return coerced

    def merged(self, overrides: "FieldOptions") -> "FieldOptions":
        """Return a copy with every hint explicitly set on ``overrides`` applied."""
        updates = {
            name: getattr(overrides, name) for name in overrides.model_fields_set
        }
        return self.model_copy(update=updates) if updates else self


class RuleOptions(BaseModel):
    """Conditional visibility configuration for one target field.

    The target is shown only while the controlling field's value equals (or,
    with ``notEquals``, differs from) the configured value.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    controlling_field: str = Field(
        validation_alias=AliasChoices(
            "controlling_field", "controllingField", "show", "when"
        )
    )
    equals: Any = None
    not_equals: Any = Field(
        default=None, validation_alias=AliasChoices("not_equals", "notEquals")
    )

    @model_validator(mode="after")
    def check_single_predicate(self) -> "RuleOptions":
        """Exactly one of equals/notEquals must be configured."""
        predicates = {"equals", "not_equals"} & self.model_fields_set
        if len(predicates) != 1:
            raise ValueError("Specify exactly one of 'equals' or 'notEquals'")
        return self

    @property
    def negated(self) -> bool:
        """True when the rule uses ``notEquals``."""
        return "not_equals" in self.model_fields_set

    @property
    def value(self) -> Any:
        """The value the controlling field is compared against."""
        return self.not_equals if self.negated else self.equals


class FormOptions(BaseModel):
    """Options for a single form generation call."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    action: str = "#"
    method: str = "POST"
    submit_label: str = Field(default="Submit", alias="submitLabel")
    layout: Literal["vertical", "horizontal"] = "vertical"
    theme: Literal["dark", "light"] = "dark"
    id_namespace: str = Field(default="zf", alias="idNamespace")
    interactive: bool = True
    validate_url: str | None = Field(default=None, alias="validateUrl")
    field_options: dict[str, FieldOptions] = Field(
        default_factory=dict, alias="fieldOptions"
    )
    conditional_logic: dict[str, RuleOptions] = Field(
        default_factory=dict, alias="conditionalLogic"
    )
    custom_classes: dict[str, str] = Field(default_factory=dict, alias="customClasses")

    @classmethod
    def from_settings(
        cls, settings: FormgenSettings | None = None, **overrides: Any
    ) -> "FormOptions":
        """Build options whose defaults come from process settings.

        Args:
            settings: Settings to read defaults from (global settings if omitted)
            **overrides: Option values taking precedence over the defaults,
                keyed by field name or camelCase alias

        Returns:
            Validated form options
        """
        settings = settings or get_settings()
        data: dict[str, Any] = {
            "submitLabel": settings.submit_label,
            "layout": settings.default_layout,
            "theme": settings.default_theme,
            "idNamespace": settings.id_namespace,
        }
        for key, value in overrides.items():
            field_info = cls.model_fields.get(key)
            data[field_info.alias if field_info and field_info.alias else key] = value
        return cls.model_validate(data)

    @classmethod
    def coerce(cls, options: "FormOptions | Mapping[str, Any] | None") -> "FormOptions":
        """Normalize the option forms accepted by public entry points."""
        if isinstance(options, FormOptions):
            return options
        return cls.from_settings(**dict(options or {}))


# Global settings instance
settings = FormgenSettings()


def get_settings() -> FormgenSettings:
    """Return the process-wide settings."""
    return settings
