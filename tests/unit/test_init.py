"""Test the main package initialization."""


def test_import_main_package() -> None:
    """Test that the main package can be imported without errors."""
    import formgen

    assert formgen.__version__ == "0.1.0"


class TestPackageStructure:
    """Test the package structure and imports."""

    def test_core_module_import(self) -> None:
        """Test that core module can be imported."""
        from formgen import core  # noqa: F401

    def test_behavior_module_import(self) -> None:
        """Test that behavior module can be imported."""
        from formgen import behavior  # noqa: F401

    def test_render_module_import(self) -> None:
        """Test that render module can be imported."""
        from formgen import render  # noqa: F401

    def test_validation_module_import(self) -> None:
        """Test that validation module can be imported."""
        from formgen import validation  # noqa: F401

    def test_cli_module_import(self) -> None:
        """Test that CLI module can be imported."""
        from formgen import cli  # noqa: F401

    def test_public_api(self) -> None:
        """Test that the top-level API is exported."""
        import formgen

        for name in ("generate_form", "validate", "validate_field", "FormInstanceCache"):
            assert name in formgen.__all__
            assert hasattr(formgen, name)
