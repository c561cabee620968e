"""Unit tests for run_wasm.page module."""

from __future__ import annotations

import pytest

from run_wasm.errors import GuardError
from run_wasm.page import (
    CSS_PLACEHOLDER,
    NAME_PLACEHOLDER,
    load_template,
    render_host_page,
    validate_css,
)


class TestTemplate:
    """Tests for the bundled template."""

    def test_template_has_both_placeholders(self) -> None:
        """Test the bundled template contains both tokens."""
        template = load_template()
        assert NAME_PLACEHOLDER in template
        assert CSS_PLACEHOLDER in template

    def test_css_placeholder_inside_style_element(self) -> None:
        """Test the CSS lands inside the style element."""
        template = load_template()
        start = template.index('<style type="text/css">')
        end = template.index("</style>")
        assert start < template.index(CSS_PLACEHOLDER) < end


class TestRenderHostPage:
    """Tests for render_host_page."""

    def test_render_demo(self) -> None:
        """Test rendering replaces every placeholder."""
        page = render_host_page("demo", "body{margin:0}")
        assert "demo" in page
        assert "body{margin:0}" in page
        assert NAME_PLACEHOLDER not in page
        assert CSS_PLACEHOLDER not in page

    def test_imports_generated_module(self) -> None:
        """Test the page loads the wasm-bindgen module for the unit."""
        page = render_host_page("demo", "")
        assert 'import init from "./demo.js";' in page

    def test_css_is_not_escaped(self) -> None:
        """Test CSS is embedded verbatim."""
        css = 'body > canvas { font-family: "Fira Sans"; }'
        assert css in render_host_page("demo", css)

    def test_css_containing_name_token_is_kept(self) -> None:
        """Test a literal {{name}} in the CSS is not substituted."""
        page = render_host_page("demo", "/* {{name}} */", template="{{name}}|{{css}}")
        assert page == "demo|/* {{name}} */"

    def test_custom_template(self) -> None:
        """Test an explicit template is used instead of the bundled one."""
        assert render_host_page("a", "b", template="[{{name}}][{{css}}]") == "[a][b]"


class TestValidateCss:
    """Tests for validate_css."""

    @pytest.mark.parametrize("css", ["", "body { margin: 0px; }", "p::after { content: '<b>'; }"])
    def test_accepts(self, css: str) -> None:
        """Test ordinary CSS passes."""
        validate_css(css)

    @pytest.mark.parametrize("css", ["</style>", "body{}</style><script>alert(1)</script>"])
    def test_rejects_closing_style_tag(self, css: str) -> None:
        """Test the closing style tag is rejected."""
        with pytest.raises(GuardError) as exc_info:
            validate_css(css)
        assert "</style>" in exc_info.value.user_message

    def test_only_exact_literal_rejected(self) -> None:
        """Test spacing and case variants are out of scope."""
        validate_css("</style >")
        validate_css("</STYLE>")
