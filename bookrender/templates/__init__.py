"""Jinja page layouts used to wrap converted documents."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape

logger = logging.getLogger(__name__)

BUILTIN_TEMPLATES_DIR = Path(__file__).resolve().parent
PAGE_TEMPLATE = "page.html"
CONTENTS_TEMPLATE = "contents.html"
DEFAULT_LANG = "en"


class LayoutError(RuntimeError):
    """Raised when a page template cannot be loaded."""


@dataclass(frozen=True, slots=True)
class PageLink:
    """Title and relative href of another page in the book."""

    title: str
    href: str
    children: list["PageLink"] = field(default_factory=list)


class PageTemplates:
    """Load page layouts from an optional custom directory, falling back to built-ins."""

    def __init__(self, templates_dir: Path | None = None, *, lang: str = DEFAULT_LANG) -> None:
        self._lang = lang
        search_paths: list[Path] = []
        if templates_dir is not None:
            if templates_dir.is_dir():
                search_paths.append(templates_dir)
            else:
                logger.warning(
                    "Templates directory %s not found; using built-in layouts.", templates_dir
                )
        search_paths.append(BUILTIN_TEMPLATES_DIR)

        self._environment = Environment(
            loader=FileSystemLoader([str(path) for path in search_paths]),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

    def render_page(
        self,
        *,
        title: str,
        body: str,
        book_title: str | None,
        breadcrumbs: list[PageLink],
        previous: PageLink | None,
        next: PageLink | None,
    ) -> str:
        context: dict[str, Any] = {
            "lang": self._lang,
            "page": {"title": title},
            "body": body,
            "book_title": book_title,
            "breadcrumbs": breadcrumbs,
            "previous": previous,
            "next": next,
        }
        return self._render(PAGE_TEMPLATE, context)

    def render_contents(self, *, book_title: str | None, items: list[PageLink], summary: str) -> str:
        context: dict[str, Any] = {
            "lang": self._lang,
            "book_title": book_title,
            "items": items,
            "summary": summary,
        }
        return self._render(CONTENTS_TEMPLATE, context)

    def _render(self, name: str, context: dict[str, Any]) -> str:
        try:
            template = self._environment.get_template(name)
        except TemplateNotFound as exc:
            raise LayoutError(f"Required template '{name}' not found.") from exc
        return template.render(**context)
