"""Unit tests for settings and per-call options."""

from pydantic import ValidationError
import pytest

from formgen.config import (
    FieldOptions,
    FormgenSettings,
    FormOptions,
    RuleOptions,
)


class TestFormgenSettings:
    """Test process-wide settings."""

    def test_defaults(self, monkeypatch):
        """Test default values without environment overrides."""
        for name in (
            "FORMGEN_ENVIRONMENT",
            "FORMGEN_DEFAULT_THEME",
            "FORMGEN_CACHE_TTL_SECONDS",
        ):
            monkeypatch.delenv(name, raising=False)
        settings = FormgenSettings()
        assert settings.environment == "development"
        assert settings.default_theme == "dark"
        assert settings.cache_ttl_seconds == 1800
        assert settings.is_development
        assert not settings.is_production

    def test_environment_variables(self, monkeypatch):
        """Test that FORMGEN_ variables override defaults."""
        monkeypatch.setenv("FORMGEN_ENVIRONMENT", "production")
        monkeypatch.setenv("FORMGEN_DEFAULT_THEME", "light")
        monkeypatch.setenv("FORMGEN_CACHE_TTL_SECONDS", "60")
        settings = FormgenSettings()
        assert settings.is_production
        assert settings.default_theme == "light"
        assert settings.cache_ttl_seconds == 60

    def test_invalid_theme_rejected(self, monkeypatch):
        """Test that unknown themes are rejected."""
        monkeypatch.setenv("FORMGEN_DEFAULT_THEME", "neon")
        with pytest.raises(ValidationError):
            FormgenSettings()


class TestFieldOptions:
    """Test field presentation hints."""

    def test_camel_case_aliases(self):
        """Test that camelCase keys are accepted."""
        options = FieldOptions.model_validate(
            {"addLabel": "Add tag", "imageUpload": True, "widget": "radio"}
        )
        assert options.add_label == "Add tag"
        assert options.image_upload is True
        assert options.kind == "radio"

    def test_option_shorthands(self):
        """Test that options accept strings and pairs."""
        options = FieldOptions(options=["red", ("gr", "Green")])
        assert [(o.value, o.label) for o in options.options] == [
            ("red", "Red"),
            ("gr", "Green"),
        ]

    def test_merged_applies_only_set_fields(self):
        """Test that merging keeps hints the override does not set."""
        base = FieldOptions(label="Name", description="Your name")
        merged = base.merged(FieldOptions(placeholder="Jane"))
        assert merged.label == "Name"
        assert merged.description == "Your name"
        assert merged.placeholder == "Jane"

    def test_frozen(self):
        """Test that hints are immutable."""
        options = FieldOptions(label="Name")
        with pytest.raises(ValidationError):
            options.label = "Other"


class TestRuleOptions:
    """Test conditional rule configuration."""

    def test_equals(self):
        """Test an equals rule."""
        rule = RuleOptions.model_validate({"controllingField": "employed", "equals": True})
        assert rule.controlling_field == "employed"
        assert rule.negated is False
        assert rule.value is True

    def test_not_equals(self):
        """Test a notEquals rule, including a None comparison value."""
        rule = RuleOptions.model_validate({"when": "role", "notEquals": None})
        assert rule.negated is True
        assert rule.value is None

    def test_requires_exactly_one_predicate(self):
        """Test that zero or two predicates are rejected."""
        with pytest.raises(ValidationError):
            RuleOptions.model_validate({"controllingField": "employed"})
        with pytest.raises(ValidationError):
            RuleOptions.model_validate(
                {"controllingField": "employed", "equals": 1, "notEquals": 2}
            )

    def test_unknown_keys_rejected(self):
        """Test that misspelled keys are reported."""
        with pytest.raises(ValidationError):
            RuleOptions.model_validate({"controllingField": "a", "equal": 1})


class TestFormOptions:
    """Test per-call form options."""

    def test_defaults(self):
        """Test default option values."""
        options = FormOptions()
        assert options.action == "#"
        assert options.method == "POST"
        assert options.interactive is True
        assert options.validate_url is None

    def test_from_settings(self):
        """Test that settings provide defaults and overrides win."""
        settings = FormgenSettings(default_theme="light", submit_label="Send")
        options = FormOptions.from_settings(settings, layout="horizontal")
        assert options.theme == "light"
        assert options.submit_label == "Send"
        assert options.layout == "horizontal"

    def test_from_settings_accepts_aliases(self):
        """Test that camelCase override keys are accepted."""
        options = FormOptions.from_settings(
            FormgenSettings(), submitLabel="Go", validate_url="/check"
        )
        assert options.submit_label == "Go"
        assert options.validate_url == "/check"

    def test_nested_configuration(self):
        """Test field options and conditional logic from a mapping."""
        options = FormOptions.coerce(
            {
                "fieldOptions": {"name": {"label": "Full name"}},
                "conditionalLogic": {
                    "company": {"controllingField": "employed", "equals": True}
                },
            }
        )
        assert options.field_options["name"].label == "Full name"
        assert options.conditional_logic["company"].controlling_field == "employed"

    def test_coerce_passes_instances_through(self):
        """Test that existing options are returned unchanged."""
        options = FormOptions(theme="light")
        assert FormOptions.coerce(options) is options
