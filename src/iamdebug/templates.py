"""HTML template rendering for the diagram and login surfaces.

Templates use Jinja2 ``{{ name }}`` placeholders. Placeholders with no value
are left in the output verbatim instead of raising, so a template can be
rendered with a partial mapping. Templates that fail to parse raise
``TemplateError``. Substituted values are HTML-escaped.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from pathlib import Path

from jinja2 import Environment, TemplateSyntaxError, Undefined
from jinja2.exceptions import UndefinedError

from iamdebug.errors import TemplateError
from iamdebug.files import read_text_file

logger = logging.getLogger(__name__)


class _VerbatimUndefined(Undefined):
    """Renders a missing placeholder as its own source text."""

    def __str__(self) -> str:
        if self._undefined_name is None:
            return ""
        return "{{ %s }}" % self._undefined_name


class TemplateRenderer:
    def __init__(
        self,
        read_file: Callable[[str | Path], Awaitable[str]] = read_text_file,
    ) -> None:
        self._read_file = read_file
        self._env = Environment(autoescape=True, undefined=_VerbatimUndefined)

    def render(self, template: str, placeholders: Mapping[str, str]) -> str:
        """Substitute ``placeholders`` into ``template``."""
        try:
            compiled = self._env.from_string(template)
        except TemplateSyntaxError as e:
            raise TemplateError(f"Malformed template at line {e.lineno}: {e.message}") from e
        try:
            return compiled.render(**placeholders)
        except UndefinedError as e:
            raise TemplateError(str(e)) from e

    async def render_file(self, path: str | Path, placeholders: Mapping[str, str]) -> str:
        """Read a template from disk and render it."""
        template = await self._read_file(path)
        logger.debug("Rendering template %s", path)
        return self.render(template, placeholders)
