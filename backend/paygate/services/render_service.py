"""
Presentation Renderer

Renders the payer-facing transaction page and its companion script from
Jinja2 templates. Templates are loaded once at startup.
"""
import logging
from typing import Any, Dict

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from ..exceptions import RenderError
from ..models.transactions import Transaction

logger = logging.getLogger(__name__)

HTML_TEMPLATE = "transaction.html"
JS_TEMPLATE = "transaction.js"


def format_amount(amount: float) -> str:
    """Shortest text that round-trips the stored amount (4.95, 0.001, 10)."""
    text = repr(float(amount))
    if text.endswith(".0"):
        text = text[:-2]
    return text


class PresentationRenderer:
    """Renders transaction views; raises RenderError on template failure."""

    def __init__(self, template_dir: str):
        self._env = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html"]),
        )
        # Fail at startup rather than on the first payer request
        self._html = self._env.get_template(HTML_TEMPLATE)
        self._js = self._env.get_template(JS_TEMPLATE)
        logger.info(f"Loaded templates from {template_dir}")

    def render_html(self, transaction: Transaction) -> str:
        return self._render(self._html, {
            "amount": format_amount(transaction.amount),
            "id": transaction.id,
        })

    def render_js(self, transaction: Transaction) -> str:
        return self._render(self._js, {"id": transaction.id})

    def _render(self, template, context: Dict[str, Any]) -> str:
        try:
            return template.render(**context)
        except TemplateError as e:
            logger.error(f"Failed to render {template.name}: {e}")
            raise RenderError(
                f"Failed to render {template.name}",
                {"template": template.name}
            ) from e
