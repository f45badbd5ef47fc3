"""Convert a live-rendered tree into portable, static markup.

Every step is idempotent: running the pipeline over its own output leaves the
tree unchanged.
"""

from collections.abc import Callable
from typing import TYPE_CHECKING

import structlog
from bs4 import Tag

from src.renderer.constants import (
    ARROW_HTML,
    DOCUMENT_ROOT_CLASS,
    FOREIGN_DECORATION_PREFIX,
    LIST_INDICATOR_CLASSES,
    SIZER_CLASS,
    VIEW_CONTAINER_SELECTOR,
)
from src.renderer.dom import (
    add_class,
    class_starts_with,
    create_element,
    element_children,
    get_style,
    has_class,
    next_element_sibling,
    set_inner_html,
    set_style,
)
from src.renderer.inline_markdown import inline_text
from src.renderer.models import RenderOptions


if TYPE_CHECKING:
    from src.progress.log import ProgressLog


logger = structlog.get_logger()

FormValueReader = Callable[[Tag], str | None]


def _attribute_value(element: Tag) -> str | None:
    if element.name == "textarea":
        return element.get_text()
    value = element.get("value")
    return None if value is None else str(value)


class PostProcessor:
    """Pure tree transformation from rendered view to static document."""

    def __init__(
        self,
        log: "ProgressLog | None" = None,
        form_value_reader: FormValueReader | None = None,
    ) -> None:
        """Initialize the post-processor.

        Args:
            log: Progress log receiving non-fatal errors.
            form_value_reader: Reads the live value of a form control. Falls
                back to the value already stored in the tree.
        """
        self._progress = log
        self._read_form_value = form_value_reader or _attribute_value
        self._log = logger.bind(component="post_processor")

    def process(self, root: Tag, options: RenderOptions) -> Tag:
        """Run the full post-processing pipeline over ``root`` in place.

        Args:
            root: Rendered document root.
            options: Options of the render call.

        Returns:
            The same root element.
        """
        if not self._ensure_document_root(root):
            return root

        if not options.create_document_container:
            for decoration in root.select(".mod-header, .mod-footer"):
                if not decoration.decomposed:
                    decoration.decompose()

        self._fix_block_in_paragraph(root)
        self._serialize_form_values(root)
        self._rewrite_tag_links(root)
        self._convert_media_widths(root)
        self._replace_pdf_viewers(root)
        self._remove_foreign_decorations(root)
        self._relocate_frontmatter(root)

        for frame in root.find_all("iframe"):
            frame["loading"] = "lazy"

        self._add_list_collapse_indicators(root)
        self._render_toc_labels(root)
        return root

    def _ensure_document_root(self, root: Tag) -> bool:
        if has_class(root, DOCUMENT_ROOT_CLASS):
            return True

        if (
            has_class(root, "view-content")
            or has_class(root, "markdown-preview-view")
            or has_class(root, SIZER_CLASS)
        ):
            view_container: Tag | None = root
        else:
            view_container = root.select_one(VIEW_CONTAINER_SELECTOR)

        if view_container is None:
            self._log.error("document_root_not_found", root_tag=root.name)
            if self._progress is not None:
                self._progress.error("Failed to find view container in rendered HTML!")
            return False

        add_class(view_container, DOCUMENT_ROOT_CLASS)
        return True

    def _fix_block_in_paragraph(self, root: Tag) -> None:
        # transclusions put a div inside a p tag, which is invalid html
        for paragraph in root.select("p:has(div)"):
            paragraph.name = "span"
            paragraph.attrs = {}
            set_style(
                paragraph,
                display="block",
                margin_block_start="var(--p-spacing)",
                margin_block_end="var(--p-spacing)",
            )

    def _serialize_form_values(self, root: Tag) -> None:
        for field in root.select("input[type=text]"):
            value = self._read_form_value(field)
            if value is not None:
                field["value"] = value
        for area in root.find_all("textarea"):
            value = self._read_form_value(area)
            if value is not None:
                area.string = value

    def _rewrite_tag_links(self, root: Tag) -> None:
        for link in root.select("a.tag"):
            if link.has_attr("data-href"):
                continue
            href = str(link.get("href", ""))
            _, sep, fragment = href.partition("#")
            tag = fragment if sep else href[1:]
            link["data-href"] = href
            link["href"] = f"?query=tag:{tag}"

    def _convert_media_widths(self, root: Tag) -> None:
        for element in root.select("img, video, .media-embed:has(> :is(img, video))"):
            width = element.get("width")
            if width is None:
                continue
            del element["width"]
            width = str(width).strip()
            set_style(element, width=f"{width}px" if width else "", max_width="100%")

    def _replace_pdf_viewers(self, root: Tag) -> None:
        for pdf in root.select("span.internal-embed.pdf-embed"):
            style = get_style(pdf)
            embed = create_element("embed", attrs={"src": str(pdf.get("src", ""))})
            set_style(
                embed,
                width=style.get("width") or "100%",
                max_width="100%",
                height=style.get("height") or "800px",
            )
            container = pdf.parent.parent if pdf.parent is not None else None
            if container is None:
                pdf.replace_with(embed)
                continue
            container.clear()
            container.append(embed)

    def _remove_foreign_decorations(self, root: Tag) -> None:
        for element in root.find_all("div"):
            if not element.decomposed and class_starts_with(
                element, FOREIGN_DECORATION_PREFIX
            ):
                element.decompose()

    def _relocate_frontmatter(self, root: Tag) -> None:
        frontmatter = root.select_one(".frontmatter")
        sizer = root.select_one(f".{SIZER_CLASS}")
        if frontmatter is None or sizer is None:
            return
        if next_element_sibling(frontmatter) is sizer:
            return

        wrapper = frontmatter.parent
        sizer.insert_before(frontmatter.extract())
        if (
            wrapper is not None
            and wrapper is not root
            and not any(parent is wrapper for parent in sizer.parents)
        ):
            wrapper.decompose()

    def _add_list_collapse_indicators(self, root: Tag) -> None:
        for item in root.select("li:has(ul), li:has(ol)"):
            if any(has_class(child, "collapse-icon") for child in element_children(item)):
                continue
            indicator = create_element("div", LIST_INDICATOR_CLASSES)
            set_inner_html(indicator, ARROW_HTML)
            item.insert(0, indicator)

    def _render_toc_labels(self, root: Tag) -> None:
        for link in root.select(".block-language-toc.dynamic-toc li > a"):
            link.string = inline_text(link.get_text())


def post_process_html(
    root: Tag,
    options: RenderOptions,
    log: "ProgressLog | None" = None,
    form_value_reader: FormValueReader | None = None,
) -> Tag:
    """Pure function API for post-processing."""
    return PostProcessor(log, form_value_reader).process(root, options)
