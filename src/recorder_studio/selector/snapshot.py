"""
DOM Snapshot - Rebuild the page document as an lxml tree.

The in-page capture script serializes the live document into JSON so the
synthesizer can evaluate XPath candidates in Python:

    element: {"tag": "div", "attrs": {"id": "x"}, "children": [...]}
    text:    {"text": "Hello"}

The clicked element is addressed by a path of element-child indices
starting at the document element.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Sequence

from lxml import etree
from lxml import html as lxml_html

from recorder_studio.exceptions import NoLocatorError

logger = logging.getLogger(__name__)

# Attributes the synthesizer reads; everything else is left in the page
CARRIED_ATTRIBUTES = ("id", "data-testid", "name", "placeholder", "aria-label")

UNKNOWN_TAG = "unknown-element"

# Characters lxml refuses in text and attribute values
_XML_INVALID = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


def is_element(node: Any) -> bool:
    """True for lxml element nodes (not comments, PIs, entities or text)."""
    return isinstance(node, etree._Element) and isinstance(node.tag, str)


def local_name(element: etree._Element) -> str:
    """Lowercase tag name without namespace."""
    return element.tag.rsplit("}", 1)[-1].lower()


def element_children(element: etree._Element) -> List[etree._Element]:
    """Element children in document order."""
    return [child for child in element if is_element(child)]


class DomSnapshot:
    """
    A frozen copy of a page document.
    
    Example:
        >>> snapshot = DomSnapshot.from_html("<html><body><p>Hi</p></body></html>")
        >>> p = snapshot.resolve([1, 0])
        >>> p.tag
        'p'
    """
    
    def __init__(self, root: etree._Element):
        self.root = root
    
    @classmethod
    def from_html(cls, markup: str) -> "DomSnapshot":
        """Parse an HTML document string."""
        return cls(lxml_html.document_fromstring(markup))
    
    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "DomSnapshot":
        """
        Build the tree from the capture script's JSON serialization.
        
        Args:
            payload: Serialized document element
            
        Returns:
            DomSnapshot rooted at the document element
        """
        root = _make_element(None, payload.get("tag"))
        _apply_attributes(root, payload.get("attrs"))
        
        # Iterative build; real pages nest deeper than the recursion limit
        pending = [(payload, root)]
        while pending:
            node, element = pending.pop()
            last_child: Optional[etree._Element] = None
            for child in node.get("children") or []:
                if "text" in child:
                    text = _XML_INVALID.sub("", child.get("text") or "")
                    if last_child is None:
                        element.text = (element.text or "") + text
                    else:
                        last_child.tail = (last_child.tail or "") + text
                    continue
                sub = _make_element(element, child.get("tag"))
                _apply_attributes(sub, child.get("attrs"))
                pending.append((child, sub))
                last_child = sub
        
        return cls(root)
    
    def resolve(self, path: Sequence[int]) -> etree._Element:
        """
        Find the element addressed by an element-child index path.
        
        Raises:
            NoLocatorError: If the path leaves the document
        """
        element = self.root
        for depth, index in enumerate(path):
            children = element_children(element)
            if not 0 <= index < len(children):
                raise NoLocatorError(
                    f"Snapshot path {list(path)} has no element at depth {depth}",
                    node_type="missing",
                )
            element = children[index]
        return element
    
    def path_of(self, element: etree._Element) -> List[int]:
        """Inverse of resolve()."""
        path: List[int] = []
        current = element
        while current is not None and current is not self.root:
            parent = current.getparent()
            if parent is None:
                break
            path.append(element_children(parent).index(current))
            current = parent
        return list(reversed(path))
    
    def xpath(self, expression: str) -> Any:
        """Evaluate an XPath expression against the whole document."""
        return self.root.xpath(expression)


def _make_element(parent: Optional[etree._Element], tag: Optional[str]) -> etree._Element:
    tag = (tag or "").lower()
    try:
        if parent is None:
            return etree.Element(tag)
        return etree.SubElement(parent, tag)
    except ValueError:
        logger.debug(f"Unsupported tag name {tag!r} in snapshot")
    if parent is None:
        return etree.Element(UNKNOWN_TAG)
    return etree.SubElement(parent, UNKNOWN_TAG)


def _apply_attributes(element: etree._Element, attrs: Optional[Dict[str, Any]]) -> None:
    if not attrs:
        return
    for name in CARRIED_ATTRIBUTES:
        value = attrs.get(name)
        if value is not None:
            element.set(name, _XML_INVALID.sub("", str(value)))
