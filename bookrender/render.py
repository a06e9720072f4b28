"""Convert a document tree into rendered files under an output root."""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Iterator

import jinja2

from .codecheck import CodeChecker
from .config import Config, PageLayout
from .errors import ConversionError
from .markdown import extract_code_samples, render_markdown
from .templates import LayoutError, PageLink, PageTemplates
from .tree import DocumentNode, DocumentTree
from .utils import pluralize
from .writer import write_atomic

logger = logging.getLogger(__name__)

CONTENTS_FILENAME = "index"


@dataclass(frozen=True, slots=True)
class PlannedPage:
    """A node paired with the output path it will be written to."""

    node: DocumentNode
    relative_path: PurePosixPath


@dataclass(slots=True)
class ConvertedDocument:
    """HTML body and display title produced for one node."""

    title: str
    html: str
    code_samples_checked: int = 0


@dataclass(slots=True)
class RenderedOutput:
    """Rendered bytes destined for a single output file."""

    path: Path
    content: bytes


@dataclass(slots=True)
class RenderResult:
    """Summary of a completed rendering run."""

    written: list[Path] = field(default_factory=list)
    documents: int = 0
    code_samples_checked: int = 0
    contents_path: Path | None = None

    def summary(self) -> str:
        text = (
            f"rendered {pluralize(self.documents, 'document')}, "
            f"checked {pluralize(self.code_samples_checked, 'code sample')}"
        )
        if self.contents_path is not None:
            text += ", wrote table of contents"
        return text


def plan_pages(tree: DocumentTree, suffix: str = ".html") -> list[PlannedPage]:
    """Assign every node an output path derived from its position and title.

    Leaves become ``NN-slug<suffix>``; nodes with children become
    ``NN-slug/index<suffix>`` with their children placed alongside.
    """
    planned: list[PlannedPage] = []

    def _plan(nodes: list[DocumentNode], prefix: PurePosixPath) -> None:
        for node in nodes:
            if node.children:
                directory = prefix / node.slug
                planned.append(PlannedPage(node, directory / f"index{suffix}"))
                _plan(node.children, directory)
            else:
                planned.append(PlannedPage(node, prefix / f"{node.slug}{suffix}"))

    _plan(tree.nodes, PurePosixPath())
    return planned


def relative_href(source: PurePosixPath, target: PurePosixPath) -> str:
    """Return the href that links from the page at ``source`` to ``target``."""
    start = source.parent.as_posix() or "."
    return posixpath.relpath(target.as_posix(), start)


class Renderer:
    """Walk a document tree depth-first, converting and writing each node."""

    def __init__(
        self,
        config: Config | None = None,
        *,
        templates: PageTemplates | None = None,
        checker: CodeChecker | None = None,
    ) -> None:
        self._config = config or Config()
        self._templates = templates or PageTemplates(self._config.templates_dir)
        self._checker = checker or CodeChecker(self._config.code_checks)

    def render(self, tree: DocumentTree, output_root: str | Path, *, book_title: str | None = None) -> RenderResult:
        """Render and persist every node; the first failure aborts the run."""
        output_root = Path(output_root)
        result = RenderResult()
        title = book_title if book_title is not None else (self._config.title or tree.title)

        for output, checked in self._iter_outputs(tree, output_root, title):
            write_atomic(output.path, output.content)
            logger.debug("Wrote %s", output.path)
            result.written.append(output.path)
            result.documents += 1
            result.code_samples_checked += checked

        if self._config.table_of_contents and result.documents:
            contents = self.render_contents(tree, output_root, title)
            result.contents_path = write_atomic(contents.path, contents.content)
            result.written.append(contents.path)

        logger.info("Finished rendering into %s: %s", output_root, result.summary())
        return result

    def iter_outputs(self, tree: DocumentTree, output_root: str | Path) -> Iterator[RenderedOutput]:
        """Yield rendered outputs lazily, in depth-first manifest order."""
        title = self._config.title or tree.title
        for output, _ in self._iter_outputs(tree, Path(output_root), title):
            yield output

    def convert(self, node: DocumentNode) -> ConvertedDocument:
        """Read a node's source, check its code samples, and convert it to HTML."""
        source = node.read_source()
        checked = 0
        if self._checker.enabled:
            samples = [
                sample
                for sample in extract_code_samples(source.body)
                if self._checker.handles(sample.language)
            ]
            issues = self._checker.check(samples)
            if issues:
                issue = issues[0]
                raise ConversionError(
                    f"{node.relative_path}: {issue.language} sample at line "
                    f"{issue.location(source.body_offset)} failed syntax check: {issue.message}",
                    path=node.relative_path,
                )
            # Languages whose checker turned out to be missing were skipped.
            checked = sum(1 for sample in samples if self._checker.handles(sample.language))

        return ConvertedDocument(
            title=source.title or node.title,
            html=render_markdown(source.body),
            code_samples_checked=checked,
        )

    def render_contents(self, tree: DocumentTree, output_root: Path, book_title: str | None) -> RenderedOutput:
        """Render the optional table of contents page at the output root."""
        contents_path = PurePosixPath(f"{CONTENTS_FILENAME}{self._config.output_suffix}")
        pages = plan_pages(tree, self._config.output_suffix)
        paths = {id(page.node): page.relative_path for page in pages}

        def _links(nodes: list[DocumentNode]) -> list[PageLink]:
            return [
                PageLink(
                    title=node.title,
                    href=relative_href(contents_path, paths[id(node)]),
                    children=_links(node.children),
                )
                for node in nodes
            ]

        try:
            html = self._templates.render_contents(
                book_title=book_title,
                items=_links(tree.nodes),
                summary=pluralize(len(pages), "document"),
            )
        except (LayoutError, jinja2.TemplateError) as exc:
            raise ConversionError(f"Unable to render table of contents: {exc}") from exc
        return RenderedOutput(path=output_root / contents_path, content=html.encode("utf-8"))

    def _iter_outputs(
        self,
        tree: DocumentTree,
        output_root: Path,
        book_title: str | None,
    ) -> Iterator[tuple[RenderedOutput, int]]:
        pages = plan_pages(tree, self._config.output_suffix)
        paths = {id(planned.node): planned.relative_path for planned in pages}
        for index, page in enumerate(pages):
            node = page.node
            logger.debug("Rendering %s -> %s", node.relative_path, page.relative_path)
            converted = self.convert(node)
            if self._config.layout is PageLayout.FRAGMENT:
                text = converted.html
            else:
                text = self._wrap_page(tree, pages, paths, index, converted, book_title)
            yield (
                RenderedOutput(path=output_root / page.relative_path, content=text.encode("utf-8")),
                converted.code_samples_checked,
            )

    def _wrap_page(
        self,
        tree: DocumentTree,
        pages: list[PlannedPage],
        paths: dict[int, PurePosixPath],
        index: int,
        converted: ConvertedDocument,
        book_title: str | None,
    ) -> str:
        page = pages[index]

        def _link(planned: PlannedPage) -> PageLink:
            return PageLink(
                title=planned.node.title,
                href=relative_href(page.relative_path, planned.relative_path),
            )

        breadcrumbs = [
            PageLink(title=ancestor.title, href=relative_href(page.relative_path, paths[id(ancestor)]))
            for ancestor in tree.ancestors(page.node)
        ]
        previous = _link(pages[index - 1]) if index > 0 else None
        following = _link(pages[index + 1]) if index + 1 < len(pages) else None

        try:
            return self._templates.render_page(
                title=converted.title,
                body=converted.html,
                book_title=book_title,
                breadcrumbs=breadcrumbs,
                previous=previous,
                next=following,
            )
        except (LayoutError, jinja2.TemplateError) as exc:
            raise ConversionError(
                f"{page.node.relative_path}: unable to apply page layout: {exc}",
                path=page.node.relative_path,
            ) from exc
