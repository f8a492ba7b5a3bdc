"""Node classification and annotation markers for BeautifulSoup trees."""

from typing import Any, Optional

from bs4 import NavigableString, Tag
from bs4.element import PreformattedString

MARKER_CLASS = "tim-converted-price"
MARKER_ATTRIBUTE = "data-tim-annotated"
ORIGINAL_PRICE_ATTRIBUTE = "data-original-price"
BADGE_CLASS = "tim-time-badge"

# Values of MARKER_ATTRIBUTE
MARK_TEXT = "text"
MARK_ELEMENT = "element"

# Elements whose content is never user-visible prose
IGNORED_TAGS = frozenset({
    "script",
    "style",
    "noscript",
    "template",
    "textarea",
    "input",
    "select",
    "option",
    "head",
    "title",
    "meta",
    "link",
    "svg",
    "iframe",
})


def is_element(node: Any) -> bool:
    return isinstance(node, Tag)


def is_text(node: Any) -> bool:
    """True for text nodes; comments, CDATA and doctypes are excluded."""
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def class_list(element: Tag) -> list[str]:
    """Classes of an element whether parsed (list) or assigned as a string."""
    classes = element.get("class")
    if not classes:
        return []
    if isinstance(classes, str):
        return classes.split()
    return list(classes)


def has_class(element: Any, name: str) -> bool:
    return is_element(element) and name in class_list(element)


def has_marker(node: Any) -> bool:
    """True when the node itself carries the annotation marker."""
    if not is_element(node):
        return False
    return MARKER_CLASS in class_list(node) or node.has_attr(MARKER_ATTRIBUTE)


def has_marked_ancestor(node: Any) -> bool:
    parent = node.parent
    while parent is not None:
        if has_marker(parent):
            return True
        parent = parent.parent
    return False


def is_within_marked(node: Any) -> bool:
    return has_marker(node) or has_marked_ancestor(node)


def is_ignored(element: Any) -> bool:
    return is_element(element) and element.name in IGNORED_TAGS


def has_ignored_ancestor(node: Any) -> bool:
    parent = node.parent
    while parent is not None:
        if is_ignored(parent):
            return True
        parent = parent.parent
    return False


def is_attached(node: Any, root: Any) -> bool:
    """True while ``node`` is ``root`` or still hangs somewhere below it."""
    current = node
    while current is not None:
        if current is root:
            return True
        current = current.parent
    return False


def mark(element: Tag, kind: str = MARK_ELEMENT, original_text: Optional[str] = None) -> None:
    """Apply the annotation marker to an element."""
    classes = class_list(element)
    if MARKER_CLASS not in classes:
        classes.append(MARKER_CLASS)
    element["class"] = classes
    element[MARKER_ATTRIBUTE] = kind
    if original_text is not None:
        element[ORIGINAL_PRICE_ATTRIBUTE] = original_text


def unmark(element: Tag) -> None:
    """Remove the annotation marker and the stored original price."""
    classes = [c for c in class_list(element) if c != MARKER_CLASS]
    if classes:
        element["class"] = classes
    elif element.has_attr("class"):
        del element["class"]
    for attribute in (MARKER_ATTRIBUTE, ORIGINAL_PRICE_ATTRIBUTE):
        if element.has_attr(attribute):
            del element[attribute]
