"""
FRAQTIV Email Rendering
Jinja2-based rendering of the intake notification emails.
"""
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import structlog
from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape

from backend.core.config import settings


logger = structlog.get_logger(__name__)


# Template directory path
TEMPLATES_DIR = Path(__file__).parent.parent / "templates"


class IntakeEmailRenderer:
    """
    Renders HTML and plain-text versions of the intake emails.

    Values reach the templates already sanitized. HTML templates are
    autoescaped; plain-text templates are rendered verbatim.
    """

    def __init__(self, templates_dir: Optional[Path] = None):
        self._templates_dir = templates_dir or TEMPLATES_DIR
        self._env: Optional[Environment] = None

    @property
    def env(self) -> Environment:
        """Lazy-loaded Jinja2 environment."""
        if self._env is None:
            self._env = Environment(
                loader=FileSystemLoader(str(self._templates_dir)),
                autoescape=select_autoescape(["html"]),
                trim_blocks=True,
                lstrip_blocks=True,
            )
        return self._env

    def _get_base_context(self) -> dict[str, Any]:
        """Context variables available in all templates."""
        now = datetime.now(timezone.utc)
        return {
            "app_name": settings.app_name,
            "site_url": settings.site_url,
            "contact_email": settings.admin_email,
            "contact_phone": settings.contact_phone,
            "current_year": now.year,
            "received_at": now.strftime("%A, %B %d, %Y %H:%M UTC"),
        }

    def render_template(self, template_name: str, context: dict[str, Any]) -> str:
        """
        Render a Jinja2 template with the given context.

        Raises:
            TemplateNotFound: If the template file doesn't exist.
        """
        full_context = {**self._get_base_context(), **context}
        template = self.env.get_template(template_name)
        return template.render(**full_context)

    def render_email(self, template_name: str, context: dict[str, Any]) -> tuple[str, str]:
        """
        Render both HTML and plain-text versions of an email template.

        Args:
            template_name: Base name of the template (without extension).
            context: Dictionary of variables to pass to the template.

        Returns:
            Tuple of (html_content, text_content).
        """
        html_content = self.render_template(f"{template_name}.html", context)

        try:
            text_content = self.render_template(f"{template_name}.txt", context)
        except TemplateNotFound:
            logger.warning("plain_text_template_not_found", template=f"{template_name}.txt")
            text_content = ""

        return html_content, text_content
