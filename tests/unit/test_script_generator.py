"""
Tests for code generation.
"""

import pytest

from recorder_studio.exceptions import ConfigurationError
from recorder_studio.recorder.actions import Action, ActionKind
from recorder_studio.recorder.script_generator import (
    INHERITED_BACKGROUND_NOTE,
    PlaywrightGenerator,
    generate,
    get_generator,
)

L1 = '//*[@id="save-btn"]'
L2 = '//*[@id="status"]'


@pytest.fixture
def click_then_assert():
    return [
        Action(kind=ActionKind.CLICK, locator=L1, description='Click on "Save"'),
        Action(kind=ActionKind.ASSERT_TEXT, locator=L2, value="Done", description='Assert text "Done" exists'),
    ]


class TestPlaywright:
    """Test the default fluent-locator dialect."""

    def test_click_then_text_assertion(self, click_then_assert):
        """Each action becomes one block, in log order."""
        code = generate(click_then_assert)
        blocks = code.strip().split("\n\n")

        assert blocks == [
            "// Click on \"Save\"\n"
            "await page.locator('xpath=//*[@id=\"save-btn\"]').waitFor({ state: 'visible' });\n"
            "await page.locator('xpath=//*[@id=\"save-btn\"]').click();",
            "// Assert text \"Done\" exists\n"
            "await expect(page.locator('xpath=//*[@id=\"status\"]')).toHaveText('Done');",
        ]

    def test_fill(self):
        action = Action(kind=ActionKind.TYPE, locator=L1, value="42", description='Type "42" into Amount')
        assert "await page.locator('xpath=//*[@id=\"save-btn\"]').fill('42');" in generate([action])

    def test_contenteditable(self):
        action = Action(
            kind=ActionKind.TYPE, locator=L1, value="Hi", description='Type "Hi" into contenteditable div',
        )
        assert ".evaluate(el => { el.innerHTML = 'Hi'; });" in generate([action])

    def test_select(self):
        action = Action(kind=ActionKind.SELECT, locator=L1, value="fr", description='Select "France" from dropdown')
        assert ".selectOption('fr');" in generate([action])

    def test_inherited_background_note(self):
        action = Action(
            kind=ActionKind.ASSERT_BACKGROUND_COLOR,
            locator=L2,
            value="rgb(255,255,255)",
            description='Assert inherited background color "rgb(255,255,255)" from parent div',
            inherited_from="div",
        )
        code = generate([action])

        assert f"// {INHERITED_BACKGROUND_NOTE}" in code
        assert ".toHaveCSS('background-color', 'rgb(255,255,255)');" in code

    def test_wait(self):
        code = generate([Action.wait(2)])

        assert "// Active wait for 2 seconds" in code
        assert "await page.waitForTimeout(2000);" in code

    def test_comment_only_emits_comment(self):
        code = generate([Action.comment("Checkout starts here")])
        assert code.strip() == "// Checkout starts here"

    def test_custom_page_name(self, click_then_assert):
        code = generate(click_then_assert, page_name="popup")
        assert "await popup.locator(" in code
        assert "page.locator" not in code

    def test_quote_escaping(self):
        generator = PlaywrightGenerator()
        assert generator.quote("it's\nback\\slash") == "'it\\'s\\nback\\\\slash'"

    def test_multiline_description_is_single_comment(self):
        action = Action(kind=ActionKind.CLICK, locator=L1, description="Click on\n\"Save\"")
        assert generate([action]).splitlines()[0] == '// Click on "Save"'


class TestPuppeteer:
    """Test the selector-string dialect."""

    def test_click_then_text_assertion(self, click_then_assert):
        code = generate(click_then_assert, dialect="puppeteer")

        assert "await page.waitForSelector('xpath///*[@id=\"save-btn\"]', { visible: true });" in code
        assert "await page.click('xpath///*[@id=\"save-btn\"]');" in code
        assert "el => el.textContent.trim())).toBe('Done');" in code
        assert code.index("page.click") < code.index("toBe('Done')")

    def test_type_and_wait(self):
        code = generate(
            [Action(kind=ActionKind.TYPE, locator=L1, value="42", description="Type"), Action.wait(1)],
            dialect="puppeteer",
        )

        assert "await page.type('xpath///*[@id=\"save-btn\"]', '42');" in code
        assert "// Active wait for 1 second" in code
        assert "setTimeout(resolve, 1000)" in code


class TestPlaywrightPython:
    """Test the Python dialect."""

    def test_click_then_text_assertion(self, click_then_assert):
        code = generate(click_then_assert, dialect="playwright-python")

        assert '# Click on "Save"' in code
        assert 'await page.locator("xpath=//*[@id=\\"save-btn\\"]").wait_for(state="visible")' in code
        assert 'await expect(page.locator("xpath=//*[@id=\\"status\\"]")).to_have_text("Done")' in code

    def test_wait(self):
        assert "await page.wait_for_timeout(3000)" in generate([Action.wait(3)], dialect="playwright-python")


class TestDialects:
    """Test dialect lookup."""

    def test_unknown_dialect(self):
        with pytest.raises(ConfigurationError):
            get_generator("selenium")

    def test_empty_log(self):
        assert generate([]) == ""
