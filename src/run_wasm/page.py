"""Host page rendering.

The host page is a fixed jinja2 template with two placeholders,
``{{name}}`` and ``{{css}}``. Values are inserted verbatim and are never
rendered again, so CSS containing ``{{`` comes through unchanged.
"""

from __future__ import annotations

from functools import lru_cache
from importlib import resources

from jinja2.sandbox import SandboxedEnvironment

from run_wasm.errors import GuardError

NAME_PLACEHOLDER = "{{name}}"
CSS_PLACEHOLDER = "{{css}}"
CLOSING_STYLE_TAG = "</style>"

TEMPLATE_RESOURCE = "index.template.html"


@lru_cache(maxsize=1)
def load_template() -> str:
    """Read the bundled host page template."""
    return resources.files("run_wasm").joinpath(TEMPLATE_RESOURCE).read_text(encoding="utf-8")


@lru_cache(maxsize=1)
def _environment() -> SandboxedEnvironment:
    return SandboxedEnvironment(autoescape=False, keep_trailing_newline=True)


def validate_css(css: str) -> None:
    """Reject CSS that would close the ``<style>`` element.

    Only the exact ``</style>`` literal is rejected. The CSS comes from the
    embedding application, not from untrusted input, so this is not a
    sanitizer: spacing variants such as ``</style >`` are not caught.

    Raises:
        GuardError: If the CSS contains ``</style>``.
    """
    if CLOSING_STYLE_TAG in css:
        raise GuardError(
            f"`{CLOSING_STYLE_TAG}` detected in the css. This is disallowed to "
            "prevent injecting elements into the DOM."
        )


def render_host_page(name: str, css: str, template: str | None = None) -> str:
    """Substitute the unit name and CSS into the host page template.

    Args:
        name: Package or example name; names the generated ``<name>.js``.
        css: CSS placed verbatim inside the ``<style>`` element.
        template: Template text, defaults to the bundled index.template.html.

    Returns:
        The rendered page.
    """
    text = load_template() if template is None else template
    return _environment().from_string(text).render(name=name, css=css)
