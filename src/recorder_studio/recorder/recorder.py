"""
Browser Recorder - Binds DOM event capture to a Playwright page.

An in-page script listens for clicks (capture phase), value changes and
content-editable edits, snapshots the document and forwards each event to
Python through an exposed function. The recorder state is pushed back into
the page after every transition so hover styling and gating follow it.
"""

import asyncio
import json
import logging
from typing import Optional, TYPE_CHECKING

from recorder_studio.recorder.capture import DomEventCapture
from recorder_studio.recorder.state import RecorderState

if TYPE_CHECKING:
    from playwright.async_api import Page

logger = logging.getLogger(__name__)

BINDING_NAME = "__recorderStudioEmit"
HOVER_CLASS = "recorder-studio-hover"
ASSERTION_CLASS_PREFIX = "recorder-studio-assertion-"

CAPTURE_JS = r"""
(function() {
  if (window.__recorderStudioCleanup) {
    window.__recorderStudioCleanup();
  }

  const CARRIED = ['id', 'data-testid', 'name', 'placeholder', 'aria-label'];
  const HOVER = '%(hover)s';
  const ASSERTION_PREFIX = '%(assertion_prefix)s';
  const ALL_CLASSES = [HOVER, 'text', 'color', 'background-color', 'visible'].map(
    (c, i) => i === 0 ? c : ASSERTION_PREFIX + c
  );
  let state = window.__recorderStudioState || { recording: false, armed: null };

  function serialize(rootEl) {
    const root = { tag: rootEl.tagName.toLowerCase(), attrs: {}, children: [] };
    const stack = [[rootEl, root]];
    while (stack.length) {
      const [el, out] = stack.pop();
      for (const name of CARRIED) {
        if (el.hasAttribute && el.hasAttribute(name)) out.attrs[name] = el.getAttribute(name);
      }
      for (const child of el.childNodes) {
        if (child.nodeType === Node.TEXT_NODE) {
          out.children.push({ text: child.nodeValue });
        } else if (child.nodeType === Node.ELEMENT_NODE) {
          const node = { tag: child.tagName.toLowerCase(), attrs: {}, children: [] };
          out.children.push(node);
          stack.push([child, node]);
        }
      }
    }
    return root;
  }

  function pathOf(el) {
    const path = [];
    let current = el;
    while (current && current !== document.documentElement) {
      const parent = current.parentElement;
      if (!parent) return null;
      path.unshift(Array.prototype.indexOf.call(parent.children, current));
      current = parent;
    }
    return current ? path : null;
  }

  function ancestors(el) {
    const chain = [];
    let current = el.parentElement;
    while (current && current.tagName !== 'BODY') {
      chain.push({
        tag: current.tagName.toLowerCase(),
        backgroundColor: window.getComputedStyle(current).backgroundColor
      });
      current = current.parentElement;
    }
    return chain;
  }

  function emit(data) {
    try {
      if (window.%(binding)s) window.%(binding)s(JSON.stringify(data));
    } catch (e) {
      console.warn('[Recorder Studio] Failed to send event:', e);
    }
  }

  function handleClick(e) {
    if (!state.recording) return;
    const el = e.target;
    if (!el || el.nodeType !== Node.ELEMENT_NODE) {
      e.stopImmediatePropagation();
      emit({ type: 'click', nodeType: el ? String(el.nodeName) : 'null' });
      return;
    }
    const path = pathOf(el);
    if (path === null) {
      e.stopImmediatePropagation();
      emit({ type: 'click', nodeType: 'element', path: null, tag: el.tagName.toLowerCase() });
      return;
    }
    const style = window.getComputedStyle(el);
    emit({
      type: 'click',
      nodeType: 'element',
      dom: serialize(document.documentElement),
      path: path,
      tag: el.tagName.toLowerCase(),
      text: el.textContent || '',
      color: style.color,
      backgroundColor: style.backgroundColor,
      ancestors: ancestors(el)
    });
  }

  function handleChange(e) {
    if (!state.recording || state.armed) return;
    const el = e.target;
    const tag = (el.tagName || '').toLowerCase();
    if (!['input', 'textarea', 'select'].includes(tag)) return;
    const data = {
      type: 'change',
      dom: serialize(document.documentElement),
      path: pathOf(el),
      tag: tag,
      value: el.value == null ? '' : String(el.value),
      placeholder: el.placeholder || null
    };
    if (tag === 'select' && el.selectedIndex >= 0) {
      data.optionText = el.options[el.selectedIndex].text;
    }
    emit(data);
  }

  const editStart = new WeakMap();

  function handleFocusIn(e) {
    const el = e.target;
    if (el && el.isContentEditable) editStart.set(el, el.textContent);
  }

  function handleFocusOut(e) {
    if (!state.recording || state.armed) return;
    const el = e.target;
    if (!el || !el.isContentEditable) return;
    if (editStart.get(el) === el.textContent) return;
    emit({
      type: 'contenteditable',
      dom: serialize(document.documentElement),
      path: pathOf(el),
      tag: el.tagName.toLowerCase(),
      value: el.textContent || ''
    });
  }

  function handleMouseOver(e) {
    if (!state.recording || !e.target.classList) return;
    e.target.classList.add(state.armed ? ASSERTION_PREFIX + state.armed : HOVER);
  }

  function handleMouseOut(e) {
    if (!state.recording || !e.target.classList) return;
    e.target.classList.remove(...ALL_CLASSES);
  }

  const style = document.createElement('style');
  style.id = 'recorder-studio-style';
  style.textContent = `
    .${HOVER} { outline: 2px solid #fb98a6 !important; cursor: pointer !important; }
    .${ASSERTION_PREFIX}text { outline: 2px solid #2196F3 !important; cursor: crosshair !important; }
    .${ASSERTION_PREFIX}color { outline: 2px solid #4CAF50 !important; cursor: crosshair !important; }
    .${ASSERTION_PREFIX}background-color { outline: 2px solid #FF9800 !important; cursor: crosshair !important; }
    .${ASSERTION_PREFIX}visible { outline: 2px solid #9C27B0 !important; cursor: crosshair !important; }
  `;
  (document.head || document.documentElement).appendChild(style);

  document.addEventListener('click', handleClick, true);
  document.addEventListener('change', handleChange);
  document.addEventListener('focusin', handleFocusIn, true);
  document.addEventListener('focusout', handleFocusOut, true);
  document.addEventListener('mouseover', handleMouseOver);
  document.addEventListener('mouseout', handleMouseOut);

  window.__recorderStudioSetState = function(next) {
    state = next;
    window.__recorderStudioState = next;
    if (!next.recording) {
      document.querySelectorAll(ALL_CLASSES.map(c => '.' + c).join(','))
        .forEach(el => el.classList.remove(...ALL_CLASSES));
    }
  };

  window.__recorderStudioCleanup = function() {
    document.removeEventListener('click', handleClick, true);
    document.removeEventListener('change', handleChange);
    document.removeEventListener('focusin', handleFocusIn, true);
    document.removeEventListener('focusout', handleFocusOut, true);
    document.removeEventListener('mouseover', handleMouseOver);
    document.removeEventListener('mouseout', handleMouseOut);
    style.remove();
  };

  console.log('[Recorder Studio] Capture installed');
})();
""" % {
    "binding": BINDING_NAME,
    "hover": HOVER_CLASS,
    "assertion_prefix": ASSERTION_CLASS_PREFIX,
}


class BrowserRecorder:
    """
    Attaches a DomEventCapture to a Playwright page.

    Example:
        >>> recorder = BrowserRecorder(capture)
        >>> await recorder.attach(page)
        >>> # user interacts, actions flow to the log channel
        >>> await recorder.detach()
    """

    def __init__(self, capture: DomEventCapture):
        self._capture = capture
        self._page: Optional["Page"] = None
        self._binding_exposed = False
        capture.on_state_change(self.push_state)
        capture.set_alert(self.alert)

    @property
    def page(self) -> Optional["Page"]:
        return self._page

    @property
    def is_attached(self) -> bool:
        return self._page is not None

    async def attach(self, page: "Page") -> None:
        """
        Install capture on ``page`` and keep it installed across navigations.
        """
        if self._page is not None:
            raise RuntimeError("Already attached. Call detach() first.")
        self._page = page

        if not self._binding_exposed:
            await page.expose_function(BINDING_NAME, self._handle_js_event)
            self._binding_exposed = True

        page.on("load", self._on_load)
        await self._inject()
        logger.info(f"Recorder attached to {page.url}")

    async def detach(self) -> None:
        """Remove the in-page listeners."""
        page = self._page
        if page is None:
            return
        self._page = None
        page.remove_listener("load", self._on_load)
        try:
            await page.evaluate("window.__recorderStudioCleanup && window.__recorderStudioCleanup()")
        except Exception as e:
            logger.debug(f"Cleanup script failed: {e}")
        logger.info("Recorder detached")

    async def push_state(self, state: RecorderState) -> None:
        """Mirror the recorder state into the page."""
        if self._page is None:
            return
        try:
            await self._page.evaluate(
                "state => { window.__recorderStudioState = state; "
                "window.__recorderStudioSetState && window.__recorderStudioSetState(state); }",
                state.to_dict(),
            )
        except Exception as e:
            logger.debug(f"State push failed: {e}")

    async def alert(self, message: str) -> None:
        """Show ``message`` as a page alert."""
        if self._page is None:
            return
        try:
            await self._page.evaluate("message => setTimeout(() => window.alert(message), 0)", message)
        except Exception as e:
            logger.debug(f"Alert failed: {e}")

    def _on_load(self, _page=None) -> None:
        asyncio.create_task(self._reinject())

    async def _reinject(self) -> None:
        # Small delay to ensure page is ready
        await asyncio.sleep(0.1)
        await self._inject()

    async def _inject(self) -> None:
        if self._page is None:
            return
        try:
            await self._page.evaluate(CAPTURE_JS)
            await self.push_state(self._capture.state)
        except Exception as e:
            logger.debug(f"Capture injection failed: {e}")

    async def _handle_js_event(self, event_json: str) -> None:
        """Receive an event from the page binding."""
        try:
            raw = json.loads(event_json)
        except (TypeError, json.JSONDecodeError) as e:
            logger.warning(f"Invalid event from page: {e}")
            return
        if not isinstance(raw, dict):
            logger.warning(f"Ignoring non-object event from page: {type(raw).__name__}")
            return
        await self._capture.handle_event(raw)
