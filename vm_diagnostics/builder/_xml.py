"""lxml helpers for the configuration document.

Responsibilities:
- Hardened parser construction
- Local-name lookup that ignores namespaces
- Splicing a caller fragment under a namespaced parent
- Removing that namespace again when a fragment is read back
- Structural element comparison
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING

from lxml import etree

if TYPE_CHECKING:
    from lxml.etree import _Element


def make_parser(*, remove_blank_text: bool = True) -> etree.XMLParser:
    """Return an XML parser with entity resolution and network access disabled."""
    return etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        huge_tree=False,
        remove_blank_text=remove_blank_text,
    )


def local_name(element: _Element) -> str:
    """Return the tag of *element* without its namespace."""
    return etree.QName(element).localname


def find_by_local_name(
    root: _Element, name: str, *, exclude: _Element | None = None
) -> _Element | None:
    """Return the first element (document order) whose local name is *name*.

    Elements inside *exclude* are skipped, so content embedded in the
    document can never shadow the document's own elements.
    """
    for element in root.iter(etree.Element):
        if local_name(element) != name:
            continue
        if exclude is not None and (
            element is exclude or any(a is exclude for a in element.iterancestors())
        ):
            continue
        return element
    return None


def splice_fragment(parent: _Element, fragment: _Element) -> _Element:
    """Append a copy of *fragment* to *parent* and pull it into the parent's namespace.

    Every element of the copy that has no namespace takes the namespace of
    *parent*; namespaced elements and all attributes are left as they are.
    The caller's *fragment* is never modified.

    Returns:
        The spliced copy.
    """
    namespace = etree.QName(parent).namespace
    spliced = copy.deepcopy(fragment)
    spliced.tail = None
    parent.append(spliced)
    if namespace is None:
        return spliced

    # Rename after attaching so lxml reuses the parent's default declaration.
    for element in spliced.iter(etree.Element):
        if etree.QName(element).namespace is None:
            element.tag = f"{{{namespace}}}{local_name(element)}"
    return spliced


def detach_fragment(element: _Element, namespace: str) -> _Element:
    """Return a standalone copy of *element* with *namespace* removed.

    Inverse of ``splice_fragment``: elements in *namespace* become
    unqualified, other namespaces are kept, and the now unused
    declaration is dropped.
    """
    detached = copy.deepcopy(element)
    detached.tail = None
    for node in detached.iter(etree.Element):
        if etree.QName(node).namespace == namespace:
            node.tag = local_name(node)
    etree.cleanup_namespaces(detached)
    return detached


def elements_equal(left: _Element | None, right: _Element | None) -> bool:
    """Compare two element trees structurally.

    Tags (with namespace), attributes, text (whitespace stripped) and
    children in order must all match; child tails are compared too.
    """
    if left is None or right is None:
        return left is right
    if left.tag != right.tag:
        return False
    if dict(left.attrib) != dict(right.attrib):
        return False
    if _stripped(left.text) != _stripped(right.text):
        return False
    if len(left) != len(right):
        return False
    for a, b in zip(left, right, strict=True):
        if _stripped(a.tail) != _stripped(b.tail) or not elements_equal(a, b):
            return False
    return True


def _stripped(value: str | None) -> str:
    return (value or "").strip()
