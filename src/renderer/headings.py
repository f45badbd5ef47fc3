"""Nest flat heading sequences into collapsible heading trees.

Output shape::

    div.heading-wrapper
        h2.heading
            div.heading-collapse-indicator.collapse-indicator.collapse-icon
            "Text"
        div.heading-children
            ...following siblings up to the next heading of equal or higher rank
"""

from bs4 import NavigableString, Tag

from src.renderer.constants import (
    ARROW_HTML,
    HEADING_CHILDREN_CLASS,
    HEADING_CLASS,
    HEADING_INDICATOR_CLASSES,
    HEADING_TAGS,
    HEADING_WRAPPER_CLASS,
    PLUGIN_BLOCK_PREFIX,
    SIZER_CLASS,
)
from src.renderer.dom import (
    add_class,
    class_starts_with,
    create_element,
    element_children,
    first_element_child,
    has_ancestor,
    has_class,
    next_element_sibling,
    set_inner_html,
)


def _heading_rank(element: Tag) -> int:
    return int(element.name[1])


def _heading_of(wrapper: Tag) -> Tag | None:
    first = first_element_child(wrapper)
    if first is not None and first.name in HEADING_TAGS:
        return first
    return None


def _is_wrapper_candidate(element: Tag, root: Tag) -> bool:
    if has_class(element, SIZER_CLASS):
        return False
    for child in element_children(element):
        if child.name in HEADING_TAGS and not has_ancestor(
            child, lambda el: class_starts_with(el, PLUGIN_BLOCK_PREFIX), stop=root
        ):
            return True
    return False


def _is_footer_boundary(element: Tag) -> bool:
    if has_class(element, "mod-footer"):
        return True
    return element.select_one("section.footnotes") is not None


def _collect_children(wrapper: Tag, heading: Tag, children: Tag) -> None:
    candidate = next_element_sibling(wrapper)
    while candidate is not None:
        if _is_footer_boundary(candidate):
            break
        candidate_heading = _heading_of(candidate)
        if candidate_heading is not None and _heading_rank(candidate_heading) <= _heading_rank(
            heading
        ):
            break
        following = next_element_sibling(candidate)
        children.append(candidate.extract())
        candidate = following


def make_heading_trees(root: Tag) -> Tag:
    """Restructure ``root`` in place into nested heading trees.

    Running the builder again on its own output changes nothing: headings
    already carrying the ``heading`` class are skipped.

    Args:
        root: Document root element.

    Returns:
        The same root element.
    """
    wrappers = [el for el in root.find_all("div") if _is_wrapper_candidate(el, root)]
    for wrapper in wrappers:
        add_class(wrapper, HEADING_WRAPPER_CLASS)
        heading = _heading_of(wrapper)
        if heading is None or has_class(heading, HEADING_CLASS):
            continue

        add_class(heading, HEADING_CLASS)
        if heading.select_one(".heading-collapse-indicator") is None:
            indicator = create_element("div", HEADING_INDICATOR_CLASSES)
            set_inner_html(indicator, ARROW_HTML)
            heading.insert(0, indicator)

        children = create_element("div", [HEADING_CHILDREN_CLASS])
        wrapper.append(children)
        _collect_children(wrapper, heading, children)

    for heading in root.find_all(HEADING_TAGS):
        add_class(heading, HEADING_CLASS)

    # top-level headings and inline titles never collapse
    for element in root.select("div h1, div .inline-title"):
        for indicator in element.select(".heading-collapse-indicator"):
            indicator.decompose()

    for heading in root.find_all(HEADING_TAGS):
        for text in list(heading.find_all(string=True)):
            if "\n" in text:
                text.replace_with(NavigableString(text.replace("\n", "")))

    return root
