"""
Script Generator - Render an action log as browser-automation source code.

Dialects:
    playwright          Playwright Test (TypeScript/JavaScript), fluent locators
    puppeteer           Puppeteer, selector strings with the ``xpath/`` prefix
    playwright-python   Playwright for Python, async API
"""

import logging
from typing import Callable, Dict, Iterable, List, Type

from recorder_studio.exceptions import ConfigurationError
from recorder_studio.recorder.actions import Action, ActionKind

logger = logging.getLogger(__name__)

INHERITED_BACKGROUND_NOTE = (
    "Note: This element has a transparent background and inherits the "
    "background color from its parent"
)


def _plural(seconds: int) -> str:
    return f"{seconds} second{'' if seconds == 1 else 's'}"


class ScriptGenerator:
    """
    Base generator: one statement block per action, in log order.

    Subclasses provide the statements for each action kind in their
    dialect; the base class handles ordering, comments and spacing.
    """

    dialect = ""
    comment_prefix = "//"

    def __init__(self, page_name: str = "page"):
        self.page = page_name

    def generate(self, actions: Iterable[Action]) -> str:
        """
        Generate code for ``actions``.

        Args:
            actions: Actions in execution order

        Returns:
            Source code as a string
        """
        handlers: Dict[ActionKind, Callable[[Action], List[str]]] = {
            ActionKind.CLICK: self.click,
            ActionKind.TYPE: self.type,
            ActionKind.SELECT: self.select,
            ActionKind.ASSERT_TEXT: self.assert_text,
            ActionKind.ASSERT_COLOR: self.assert_color,
            ActionKind.ASSERT_BACKGROUND_COLOR: self.assert_background_color,
            ActionKind.ASSERT_VISIBLE: self.assert_visible,
            ActionKind.WAIT: self.wait,
        }

        lines: List[str] = []
        count = 0
        for action in actions:
            count += 1
            lines.append(self.comment(action.description))
            if action.kind is not ActionKind.COMMENT:
                lines.extend(handlers[action.kind](action))
            lines.append("")

        logger.debug(f"Generated {self.dialect} code for {count} actions")
        return "\n".join(lines)

    def comment(self, text: str) -> str:
        flat = " ".join((text or "").splitlines())
        return f"{self.comment_prefix} {flat}"

    def quote(self, value: str) -> str:
        """String literal in the target language."""
        raise NotImplementedError

    # Per-kind statements

    def click(self, action: Action) -> List[str]:
        raise NotImplementedError

    def type(self, action: Action) -> List[str]:
        raise NotImplementedError

    def select(self, action: Action) -> List[str]:
        raise NotImplementedError

    def assert_text(self, action: Action) -> List[str]:
        raise NotImplementedError

    def assert_color(self, action: Action) -> List[str]:
        raise NotImplementedError

    def assert_background_color(self, action: Action) -> List[str]:
        raise NotImplementedError

    def assert_visible(self, action: Action) -> List[str]:
        raise NotImplementedError

    def wait(self, action: Action) -> List[str]:
        raise NotImplementedError

    @staticmethod
    def is_contenteditable(action: Action) -> bool:
        return "contenteditable" in (action.description or "")

    @staticmethod
    def is_inherited_background(action: Action) -> bool:
        return bool(action.inherited_from) or "inherited" in (action.description or "")


class JavaScriptGenerator(ScriptGenerator):
    """Shared quoting for the JavaScript dialects."""

    def quote(self, value: str) -> str:
        escaped = (
            (value or "")
            .replace("\\", "\\\\")
            .replace("'", "\\'")
            .replace("\n", "\\n")
            .replace("\r", "\\r")
            .replace("\u2028", "\\u2028")
            .replace("\u2029", "\\u2029")
        )
        return f"'{escaped}'"


class PlaywrightGenerator(JavaScriptGenerator):
    """Playwright Test, ``page.locator('xpath=...')`` with ``expect``."""

    dialect = "playwright"

    def _locator(self, action: Action) -> str:
        return f"{self.page}.locator({self.quote('xpath=' + action.locator)})"

    def _wait_visible(self, action: Action) -> str:
        return f"await {self._locator(action)}.waitFor({{ state: 'visible' }});"

    def click(self, action: Action) -> List[str]:
        return [
            self._wait_visible(action),
            f"await {self._locator(action)}.click();",
        ]

    def type(self, action: Action) -> List[str]:
        value = self.quote(action.value or "")
        if self.is_contenteditable(action):
            statement = f"await {self._locator(action)}.evaluate(el => {{ el.innerHTML = {value}; }});"
        else:
            statement = f"await {self._locator(action)}.fill({value});"
        return [self._wait_visible(action), statement]

    def select(self, action: Action) -> List[str]:
        return [
            self._wait_visible(action),
            f"await {self._locator(action)}.selectOption({self.quote(action.value or '')});",
        ]

    def assert_text(self, action: Action) -> List[str]:
        return [f"await expect({self._locator(action)}).toHaveText({self.quote(action.value or '')});"]

    def assert_color(self, action: Action) -> List[str]:
        return [f"await expect({self._locator(action)}).toHaveCSS('color', {self.quote(action.value or '')});"]

    def assert_background_color(self, action: Action) -> List[str]:
        lines = []
        if self.is_inherited_background(action):
            lines.append(self.comment(INHERITED_BACKGROUND_NOTE))
        lines.append(
            f"await expect({self._locator(action)}).toHaveCSS('background-color', {self.quote(action.value or '')});"
        )
        return lines

    def assert_visible(self, action: Action) -> List[str]:
        return [f"await expect({self._locator(action)}).toBeVisible();"]

    def wait(self, action: Action) -> List[str]:
        seconds = action.duration_seconds or 0
        return [
            self.comment(f"Active wait for {_plural(seconds)}"),
            f"await {self.page}.waitForTimeout({seconds * 1000});",
        ]


class PuppeteerGenerator(JavaScriptGenerator):
    """Puppeteer, ``page.waitForSelector('xpath/...')`` and ``$eval``."""

    dialect = "puppeteer"

    def _selector(self, action: Action) -> str:
        return self.quote("xpath/" + action.locator)

    def _wait_visible(self, action: Action) -> str:
        return f"await {self.page}.waitForSelector({self._selector(action)}, {{ visible: true }});"

    def _style_check(self, action: Action, prop: str) -> str:
        return (
            f"expect(await {self.page}.$eval({self._selector(action)}, "
            f"el => getComputedStyle(el).getPropertyValue('{prop}'))).toBe({self.quote(action.value or '')});"
        )

    def click(self, action: Action) -> List[str]:
        return [
            self._wait_visible(action),
            f"await {self.page}.click({self._selector(action)});",
        ]

    def type(self, action: Action) -> List[str]:
        value = self.quote(action.value or "")
        if self.is_contenteditable(action):
            statement = f"await {self.page}.$eval({self._selector(action)}, (el, value) => {{ el.innerHTML = value; }}, {value});"
        else:
            statement = f"await {self.page}.type({self._selector(action)}, {value});"
        return [self._wait_visible(action), statement]

    def select(self, action: Action) -> List[str]:
        return [
            self._wait_visible(action),
            f"await {self.page}.select({self._selector(action)}, {self.quote(action.value or '')});",
        ]

    def assert_text(self, action: Action) -> List[str]:
        return [
            f"expect(await {self.page}.$eval({self._selector(action)}, el => el.textContent.trim()))"
            f".toBe({self.quote(action.value or '')});"
        ]

    def assert_color(self, action: Action) -> List[str]:
        return [self._style_check(action, "color")]

    def assert_background_color(self, action: Action) -> List[str]:
        lines = []
        if self.is_inherited_background(action):
            lines.append(self.comment(INHERITED_BACKGROUND_NOTE))
        lines.append(self._style_check(action, "background-color"))
        return lines

    def assert_visible(self, action: Action) -> List[str]:
        return [f"expect(await {self.page}.waitForSelector({self._selector(action)}, {{ visible: true }})).toBeTruthy();"]

    def wait(self, action: Action) -> List[str]:
        seconds = action.duration_seconds or 0
        return [
            self.comment(f"Active wait for {_plural(seconds)}"),
            f"await new Promise(resolve => setTimeout(resolve, {seconds * 1000}));",
        ]


class PlaywrightPythonGenerator(ScriptGenerator):
    """Playwright for Python (async API), ``expect`` from ``playwright.async_api``."""

    dialect = "playwright-python"
    comment_prefix = "#"

    def quote(self, value: str) -> str:
        escaped = (
            (value or "")
            .replace("\\", "\\\\")
            .replace('"', '\\"')
            .replace("\n", "\\n")
            .replace("\r", "\\r")
        )
        return f'"{escaped}"'

    def _locator(self, action: Action) -> str:
        return f"{self.page}.locator({self.quote('xpath=' + action.locator)})"

    def _wait_visible(self, action: Action) -> str:
        return f'await {self._locator(action)}.wait_for(state="visible")'

    def click(self, action: Action) -> List[str]:
        return [
            self._wait_visible(action),
            f"await {self._locator(action)}.click()",
        ]

    def type(self, action: Action) -> List[str]:
        value = self.quote(action.value or "")
        if self.is_contenteditable(action):
            statement = f'await {self._locator(action)}.evaluate("(el, value) => {{ el.innerHTML = value; }}", {value})'
        else:
            statement = f"await {self._locator(action)}.fill({value})"
        return [self._wait_visible(action), statement]

    def select(self, action: Action) -> List[str]:
        return [
            self._wait_visible(action),
            f"await {self._locator(action)}.select_option({self.quote(action.value or '')})",
        ]

    def assert_text(self, action: Action) -> List[str]:
        return [f"await expect({self._locator(action)}).to_have_text({self.quote(action.value or '')})"]

    def assert_color(self, action: Action) -> List[str]:
        return [f'await expect({self._locator(action)}).to_have_css("color", {self.quote(action.value or "")})']

    def assert_background_color(self, action: Action) -> List[str]:
        lines = []
        if self.is_inherited_background(action):
            lines.append(self.comment(INHERITED_BACKGROUND_NOTE))
        lines.append(
            f'await expect({self._locator(action)}).to_have_css("background-color", {self.quote(action.value or "")})'
        )
        return lines

    def assert_visible(self, action: Action) -> List[str]:
        return [f"await expect({self._locator(action)}).to_be_visible()"]

    def wait(self, action: Action) -> List[str]:
        seconds = action.duration_seconds or 0
        return [
            self.comment(f"Active wait for {_plural(seconds)}"),
            f"await {self.page}.wait_for_timeout({seconds * 1000})",
        ]


GENERATORS: Dict[str, Type[ScriptGenerator]] = {
    PlaywrightGenerator.dialect: PlaywrightGenerator,
    PuppeteerGenerator.dialect: PuppeteerGenerator,
    PlaywrightPythonGenerator.dialect: PlaywrightPythonGenerator,
}


def get_generator(dialect: str = "playwright", page_name: str = "page") -> ScriptGenerator:
    """
    Create the generator for ``dialect``.

    Raises:
        ConfigurationError: If the dialect is not supported
    """
    generator_cls = GENERATORS.get(dialect)
    if generator_cls is None:
        raise ConfigurationError(
            f"Unknown code dialect: {dialect}",
            details={"supported": sorted(GENERATORS)},
        )
    return generator_cls(page_name=page_name)


def generate(actions: Iterable[Action], dialect: str = "playwright", page_name: str = "page") -> str:
    """Render ``actions`` as source code in ``dialect``."""
    return get_generator(dialect, page_name).generate(actions)
