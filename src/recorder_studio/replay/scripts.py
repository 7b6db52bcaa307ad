"""
In-page scripts evaluated through ``Runtime.evaluate`` during replay.

Both scripts resolve the element by XPath (first match in document order)
and return a plain object ``{ok, ...}``; ``reason`` tells why resolution
failed.
"""

import json

CLICK_POINT_SCRIPT = """(function() {
  const xpath = %(xpath)s;
  let el;
  try {
    el = document.evaluate(xpath, document, null, XPathResult.FIRST_ORDERED_NODE_TYPE, null).singleNodeValue;
  } catch (e) {
    return { ok: false, reason: 'invalid_xpath', error: 'Invalid XPath: ' + (e && e.message ? e.message : String(e)) };
  }
  if (!el) return { ok: false, reason: 'not_found', error: 'Element not found for XPath.' };
  if (el.scrollIntoView) el.scrollIntoView({ block: 'center', inline: 'center' });
  const rect = el.getBoundingClientRect();
  const style = window.getComputedStyle(el);
  if (!rect || rect.width === 0 || rect.height === 0) {
    return { ok: false, reason: 'zero_size', error: 'Element has zero size.' };
  }
  if (style && (style.visibility === 'hidden' || style.display === 'none' || style.pointerEvents === 'none')) {
    return { ok: false, reason: 'not_interactable', error: 'Element not interactable (hidden/display none/pointer-events none).' };
  }
  return {
    ok: true,
    x: Math.round(rect.left + rect.width / 2),
    y: Math.round(rect.top + rect.height / 2),
    tagName: el.tagName
  };
})()"""

SET_VALUE_SCRIPT = """(function() {
  const xpath = %(xpath)s;
  const value = %(value)s;
  let el;
  try {
    el = document.evaluate(xpath, document, null, XPathResult.FIRST_ORDERED_NODE_TYPE, null).singleNodeValue;
  } catch (e) {
    return { ok: false, reason: 'invalid_xpath', error: 'Invalid XPath: ' + (e && e.message ? e.message : String(e)) };
  }
  if (!el) return { ok: false, reason: 'not_found', error: 'Element not found for XPath.' };
  if (el.scrollIntoView) el.scrollIntoView({ block: 'center', inline: 'center' });
  if (el.focus) el.focus();

  const tag = (el.tagName || '').toUpperCase();
  const fire = () => {
    el.dispatchEvent(new Event('input', { bubbles: true }));
    el.dispatchEvent(new Event('change', { bubbles: true }));
  };

  if (tag === 'SELECT') {
    el.value = value;
    fire();
    return { ok: true, kind: 'select' };
  }

  if (tag === 'INPUT' || tag === 'TEXTAREA') {
    // Native setter so framework-controlled inputs see the change
    const proto = tag === 'TEXTAREA' ? HTMLTextAreaElement.prototype : HTMLInputElement.prototype;
    const desc = Object.getOwnPropertyDescriptor(proto, 'value');
    if (desc && typeof desc.set === 'function') desc.set.call(el, value);
    else el.value = value;
    fire();
    return { ok: true, kind: 'input' };
  }

  if (el.isContentEditable) {
    el.textContent = value;
    fire();
    return { ok: true, kind: 'contenteditable' };
  }

  return { ok: false, reason: 'unsupported', error: 'Unsupported element type for typing (not input/textarea/select/contenteditable).' };
})()"""


def click_point_expression(xpath: str) -> str:
    """Expression returning the viewport center of the element at ``xpath``."""
    return CLICK_POINT_SCRIPT % {"xpath": json.dumps(xpath)}


def set_value_expression(xpath: str, value: str) -> str:
    """Expression assigning ``value`` to the field at ``xpath``."""
    return SET_VALUE_SCRIPT % {"xpath": json.dumps(xpath), "value": json.dumps(value)}
