"""Element helpers over BeautifulSoup trees."""

from collections.abc import Callable

from bs4 import BeautifulSoup, NavigableString, Tag


_factory = BeautifulSoup("", "html.parser")


def create_element(
    name: str,
    classes: list[str] | str | None = None,
    attrs: dict[str, str] | None = None,
    text: str | None = None,
) -> Tag:
    """Create a detached element.

    Args:
        name: Tag name.
        classes: Class list or space-separated class string.
        attrs: Additional attributes.
        text: Optional text content.

    Returns:
        The new element.
    """
    element = _factory.new_tag(name)
    if classes:
        element["class"] = classes.split() if isinstance(classes, str) else list(classes)
    for key, value in (attrs or {}).items():
        element[key] = value
    if text is not None:
        element.string = text
    return element


def parse_fragment(html: str) -> list[Tag | NavigableString]:
    """Parse an HTML fragment into detached top-level nodes."""
    soup = BeautifulSoup(html, "html.parser")
    return [node.extract() for node in list(soup.contents)]


def set_inner_html(element: Tag, html: str) -> None:
    """Replace the children of ``element`` with parsed ``html``."""
    element.clear()
    for node in parse_fragment(html):
        element.append(node)


def inner_html(element: Tag) -> str:
    """Serialize the children of ``element``."""
    return element.decode_contents()


def classes_of(element: Tag) -> list[str]:
    """Return the class list of ``element``."""
    value = element.get("class")
    if value is None:
        return []
    if isinstance(value, str):
        return value.split()
    return list(value)


def has_class(element: Tag, name: str) -> bool:
    return name in classes_of(element)


def add_class(element: Tag, *names: str) -> None:
    current = classes_of(element)
    for name in names:
        if name not in current:
            current.append(name)
    element["class"] = current


def class_starts_with(element: Tag, prefix: str) -> bool:
    """Match the ``[class^=prefix]`` attribute selector."""
    value = element.get("class")
    if value is None:
        return False
    raw = value if isinstance(value, str) else " ".join(value)
    return raw.startswith(prefix)


def get_style(element: Tag) -> dict[str, str]:
    """Parse the inline style attribute into an ordered mapping."""
    styles: dict[str, str] = {}
    for declaration in str(element.get("style", "")).split(";"):
        name, sep, value = declaration.partition(":")
        if sep and name.strip():
            styles[name.strip().lower()] = value.strip()
    return styles


def set_style(element: Tag, **properties: str) -> None:
    """Set inline style properties.

    Underscores in keyword names become dashes; an empty value removes the
    property.
    """
    styles = get_style(element)
    for key, value in properties.items():
        name = key.replace("_", "-")
        if value:
            styles[name] = value
        else:
            styles.pop(name, None)
    if styles:
        element["style"] = "; ".join(f"{k}: {v}" for k, v in styles.items()) + ";"
    elif element.has_attr("style"):
        del element["style"]


def is_empty(element: Tag) -> bool:
    """Match the ``:empty`` pseudo-class, ignoring whitespace-only text."""
    for child in element.children:
        if isinstance(child, Tag):
            return False
        if isinstance(child, NavigableString) and str(child).strip():
            return False
    return True


def element_children(element: Tag) -> list[Tag]:
    return [child for child in element.children if isinstance(child, Tag)]


def first_element_child(element: Tag) -> Tag | None:
    for child in element.children:
        if isinstance(child, Tag):
            return child
    return None


def next_element_sibling(element: Tag) -> Tag | None:
    sibling = element.next_sibling
    while sibling is not None and not isinstance(sibling, Tag):
        sibling = sibling.next_sibling
    return sibling


def has_ancestor(
    element: Tag, predicate: Callable[[Tag], bool], stop: Tag | None = None
) -> bool:
    """Check whether any ancestor (below ``stop``) satisfies ``predicate``."""
    parent = element.parent
    while parent is not None and parent is not stop:
        if predicate(parent):
            return True
        parent = parent.parent
    return False
