"""
Selector Synthesizer - Produce a unique, stable XPath for a DOM element.

Strategies are tried in priority order and the first one that identifies
exactly the target element wins:

    0. body                -> //body
    1. id                  (no ambiguity check)
    2. data-testid
    3. name                (input, select, textarea)
    4. placeholder         (input)
    5. aria-label
    6. direct text         (button, a, div, span, h1-h5, p)
    7. child delegation    (top-level call only): "<child locator>/.."
    8. ancestor path       "<parent locator>/*[local-name()="tag"][n]"
    9. absolute path       from the root, stopping at body

Every candidate of tiers 2-7 is evaluated against the whole document and
accepted only when it matches exactly one element and that element is the
target. Anything else, including an XPath that fails to evaluate, falls
through to the next tier.
"""

import logging
import re
from enum import Enum
from typing import Iterator, List, Optional, Tuple, Union

from lxml import etree

from recorder_studio.exceptions import AmbiguousLocatorError, NoLocatorError
from recorder_studio.selector.snapshot import (
    DomSnapshot,
    element_children,
    is_element,
    local_name,
)

logger = logging.getLogger(__name__)

TEXT_CONTAINERS = frozenset({"button", "a", "div", "span", "h1", "h2", "h3", "h4", "h5", "p"})
FORM_TAGS = frozenset({"input", "select", "textarea"})

# XPath whitespace; U+00A0 is not in it
_XPATH_SPACE = re.compile(r"[ \t\r\n]+")


class SynthesisMode(Enum):
    """How a recursive synthesis call may proceed."""
    ROOT = "root"                      # may delegate to children, then walk up
    DELEGATE_CHILD = "delegate_child"  # attribute/text tiers only
    ANCESTOR_WALK = "ancestor_walk"    # no delegation, walks up


def xpath_literal(value: str) -> str:
    """
    Quote a string as an XPath 1.0 literal.
    
    XPath 1.0 has no escape sequences, so a value holding both quote
    characters is assembled with concat().
    """
    if '"' not in value:
        return f'"{value}"'
    if "'" not in value:
        return f"'{value}'"
    parts = value.split('"')
    pieces = []
    for i, part in enumerate(parts):
        if part:
            pieces.append(f'"{part}"')
        if i < len(parts) - 1:
            pieces.append("'\"'")
    return "concat(" + ", ".join(pieces) + ")"


def normalize_space(text: str) -> str:
    """Same whitespace folding as XPath normalize-space()."""
    return _XPATH_SPACE.sub(" ", text).strip(" ")


def _text_nodes(element: etree._Element) -> List[str]:
    nodes = [element.text] + [child.tail for child in element]
    return [node for node in nodes if node]


def sole_text(element: etree._Element) -> Optional[str]:
    """
    Normalized text when the element has exactly one non-blank text node
    and it is the first one, i.e. what ``normalize-space(text())`` sees.
    """
    nodes = _text_nodes(element)
    filled = [i for i, node in enumerate(nodes) if normalize_space(node)]
    if filled != [0]:
        return None
    return normalize_space(nodes[0])


def is_transient_id(value: str) -> bool:
    """Framework-generated ids (React useId and friends) start or end with ':'."""
    return value.startswith(":") or value.endswith(":")


class SelectorSynthesizer:
    """
    Synthesizes XPath locators against one document.
    
    There is no caching: build a synthesizer per captured event so every
    locator reflects the DOM at capture time.
    
    Example:
        >>> snapshot = DomSnapshot.from_html('<body><button id="save-btn">Save</button></body>')
        >>> button = snapshot.xpath("//button")[0]
        >>> SelectorSynthesizer(snapshot).synthesize(button)
        '//*[@id="save-btn"]'
    """
    
    def __init__(self, document: Union[DomSnapshot, etree._Element, etree._ElementTree]):
        if isinstance(document, DomSnapshot):
            self._root = document.root
        elif isinstance(document, etree._ElementTree):
            self._root = document.getroot()
        else:
            self._root = document
    
    def synthesize(self, element: object) -> str:
        """
        Return a locator that resolves to exactly ``element``.
        
        Raises:
            NoLocatorError: If ``element`` is not an element node
        """
        if not is_element(element):
            node_type = type(element).__name__ if element is not None else "None"
            raise NoLocatorError("No locator for a non-element node", node_type=node_type)
        
        locator = self._synthesize(element, SynthesisMode.ROOT, 0)
        # ROOT mode always ends in the absolute path, never None
        assert locator is not None
        logger.debug(f"Synthesized locator {locator}")
        return locator
    
    def count_matches(self, locator: str) -> int:
        """Number of nodes the locator selects in the document."""
        result = self._root.xpath(locator)
        return len(result) if isinstance(result, list) else 0
    
    def ensure_unique(self, locator: str, element: etree._Element) -> None:
        """
        Check that ``locator`` selects exactly ``element``.
        
        Raises:
            AmbiguousLocatorError: On zero or several matches, on a single
                match that is another node, or on an XPath error
        """
        try:
            result = self._root.xpath(locator)
        except etree.XPathError as e:
            logger.debug(f"Invalid XPath {locator}: {e}")
            raise AmbiguousLocatorError(locator, 0)
        if not isinstance(result, list):
            raise AmbiguousLocatorError(locator, 0)
        if len(result) != 1 or result[0] is not element:
            raise AmbiguousLocatorError(locator, len(result))
    
    def _synthesize(
        self,
        element: etree._Element,
        mode: SynthesisMode,
        depth: int,
    ) -> Optional[str]:
        tag = local_name(element)
        if tag == "body":
            return "//body"
        
        locator = self._attribute_locator(element, tag)
        if locator:
            return locator
        
        if mode is SynthesisMode.DELEGATE_CHILD:
            return None
        
        if mode is SynthesisMode.ROOT:
            locator = self._delegated_locator(element, depth)
            if locator:
                return locator
        
        parent = element.getparent()
        if parent is not None and is_element(parent):
            parent_locator = self._synthesize(parent, SynthesisMode.ANCESTOR_WALK, depth + 1)
            if parent_locator:
                locator = parent_locator + self._step(element, tag, parent)
                logger.debug(f"Ancestor path at depth {depth}: {locator}")
                return locator
        
        return self._absolute_path(element)
    
    def _attribute_locator(self, element: etree._Element, tag: str) -> Optional[str]:
        """Tiers 1-6."""
        for strategy, locator, checked in self._candidates(element, tag):
            if not checked:
                return locator
            try:
                self.ensure_unique(locator, element)
            except AmbiguousLocatorError as e:
                logger.debug(f"Rejected {strategy} locator {locator} ({e.match_count} matches)")
                continue
            return locator
        return None
    
    def _candidates(self, element: etree._Element, tag: str) -> Iterator[Tuple[str, str, bool]]:
        element_id = element.get("id")
        if element_id and not is_transient_id(element_id):
            yield "id", f"//*[@id={xpath_literal(element_id)}]", False
        
        test_id = element.get("data-testid")
        if test_id:
            yield "data-testid", f"//*[@data-testid={xpath_literal(test_id)}]", True
        
        name = element.get("name")
        if name and tag in FORM_TAGS:
            yield "name", f'//*[local-name()="{tag}"][@name={xpath_literal(name)}]', True
        
        placeholder = normalize_space(element.get("placeholder") or "")
        if placeholder and tag == "input":
            yield (
                "placeholder",
                f'//*[local-name()="input"][normalize-space(@placeholder)={xpath_literal(placeholder)}]',
                True,
            )
        
        aria_label = normalize_space(element.get("aria-label") or "")
        if aria_label:
            yield "aria-label", f"//*[normalize-space(@aria-label)={xpath_literal(aria_label)}]", True
        
        if tag in TEXT_CONTAINERS:
            text = sole_text(element)
            if text:
                yield (
                    "text",
                    f'//*[local-name()="{tag}"][normalize-space(text())={xpath_literal(text)}]',
                    True,
                )
    
    def _delegated_locator(self, element: etree._Element, depth: int) -> Optional[str]:
        """Tier 7: identify a child, then step up to its parent."""
        for child in element_children(element):
            child_locator = self._synthesize(child, SynthesisMode.DELEGATE_CHILD, depth)
            if not child_locator:
                continue
            locator = f"{child_locator}/.."
            try:
                self.ensure_unique(locator, element)
            except AmbiguousLocatorError:
                continue
            logger.debug(f"Delegated locator via child: {locator}")
            return locator
        return None
    
    def _step(
        self,
        element: etree._Element,
        tag: str,
        parent: Optional[etree._Element],
    ) -> str:
        """One location step, indexed among same-tag siblings when needed."""
        step = f'/*[local-name()="{tag}"]'
        if parent is None:
            return step
        siblings = [child for child in element_children(parent) if local_name(child) == tag]
        if len(siblings) > 1:
            step += f"[{siblings.index(element) + 1}]"
        return step
    
    def _absolute_path(self, element: etree._Element) -> str:
        """Tier 9: fully indexed path; cannot fail."""
        steps = []
        current: Optional[etree._Element] = element
        while current is not None and is_element(current):
            tag = local_name(current)
            if tag == "body":
                steps.append("//body")
                break
            parent = current.getparent()
            steps.append(self._step(current, tag, parent))
            current = parent
        locator = "".join(reversed(steps))
        logger.debug(f"Absolute fallback locator: {locator}")
        return locator
