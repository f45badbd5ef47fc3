"""Minimal markdown rendering for short labels (headings, TOC entries, file lists)."""

from bs4 import NavigableString, Tag
from markdown_it import MarkdownIt

from src.renderer.dom import create_element, element_children, parse_fragment


_md = MarkdownIt("commonmark")


def render_markdown_simple_into(markdown: str, container: Tag) -> None:
    """Render ``markdown`` into ``container`` as flat inline markup.

    A trailing paragraph wrapper is removed, tag links are dropped and lists
    are flattened into plain spans.

    Args:
        markdown: Markdown source.
        container: Element receiving the rendered nodes.
    """
    for node in parse_fragment(_md.render(markdown)):
        container.append(node)

    children = element_children(container)
    if children and children[-1].name == "p":
        children[-1].unwrap()

    for tag_link in container.select("a.tag"):
        tag_link.decompose()

    for list_el in container.find_all("ol"):
        if list_el.parent is None:
            continue
        start = list_el.get("start", "1")
        list_el.replace_with(NavigableString(f"{start}. {list_el.get_text()}"))

    for list_el in container.find_all("ul"):
        if list_el.parent is None:
            continue
        span = create_element("span", text="- ")
        for child in list(list_el.contents):
            span.append(child)
        list_el.replace_with(span)

    for item in container.find_all("li"):
        if item.parent is None:
            continue
        span = create_element("span")
        for child in list(item.contents):
            span.append(child)
        item.replace_with(span)


def render_markdown_simple(markdown: str) -> str:
    """Render ``markdown`` to flat inline HTML."""
    container = create_element("div")
    render_markdown_simple_into(markdown, container)
    return container.decode_contents()


def inline_text(markdown: str) -> str:
    """Render ``markdown`` and return only its text content."""
    container = create_element("div")
    render_markdown_simple_into(markdown, container)
    return container.get_text().strip()
