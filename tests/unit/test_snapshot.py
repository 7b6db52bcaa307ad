"""
Tests for DOM snapshots rebuilt from the capture payload.
"""

import pytest

from recorder_studio.exceptions import NoLocatorError
from recorder_studio.selector import DomSnapshot
from recorder_studio.selector.snapshot import UNKNOWN_TAG, local_name


@pytest.fixture
def payload():
    """Serialized <html><head/><body><div id="app">Hi <b>there</b>!</div></body></html>."""
    return {
        "tag": "HTML",
        "attrs": {},
        "children": [
            {"tag": "head", "attrs": {}, "children": []},
            {
                "tag": "body",
                "attrs": {},
                "children": [
                    {
                        "tag": "div",
                        "attrs": {"id": "app", "class": "ignored", "data-testid": "root"},
                        "children": [
                            {"text": "Hi "},
                            {"tag": "b", "attrs": {}, "children": [{"text": "there"}]},
                            {"text": "!"},
                        ],
                    }
                ],
            },
        ],
    }


class TestFromPayload:
    """Test rebuilding the tree."""

    def test_structure(self, payload):
        snapshot = DomSnapshot.from_payload(payload)

        assert local_name(snapshot.root) == "html"
        div = snapshot.resolve([1, 0])
        assert div.get("id") == "app"
        assert div.text == "Hi "
        assert div[0].tail == "!"

    def test_only_carried_attributes(self, payload):
        div = DomSnapshot.from_payload(payload).resolve([1, 0])

        assert div.get("data-testid") == "root"
        assert div.get("class") is None

    def test_invalid_tag_name(self):
        snapshot = DomSnapshot.from_payload({
            "tag": "html",
            "children": [{"tag": "my:weird tag", "attrs": {}, "children": []}],
        })
        assert local_name(snapshot.resolve([0])) == UNKNOWN_TAG

    def test_control_characters_stripped(self):
        snapshot = DomSnapshot.from_payload({
            "tag": "html",
            "children": [{"tag": "p", "attrs": {"aria-label": "a\x01b"}, "children": [{"text": "x\x0by"}]}],
        })
        p = snapshot.resolve([0])
        assert p.get("aria-label") == "ab"
        assert p.text == "xy"

    def test_deep_nesting(self):
        """Deep documents do not hit the recursion limit."""
        root = {"tag": "html", "children": []}
        node = root
        for _ in range(1500):
            child = {"tag": "div", "children": []}
            node["children"].append(child)
            node = child

        snapshot = DomSnapshot.from_payload(root)
        assert len(snapshot.xpath("//div")) == 1500


class TestPaths:
    """Test resolve() and path_of()."""

    def test_round_trip(self, payload):
        snapshot = DomSnapshot.from_payload(payload)
        bold = snapshot.xpath("//b")[0]

        path = snapshot.path_of(bold)
        assert path == [1, 0, 0]
        assert snapshot.resolve(path) is bold

    def test_empty_path_is_root(self, payload):
        snapshot = DomSnapshot.from_payload(payload)
        assert snapshot.resolve([]) is snapshot.root

    def test_path_outside_document(self, payload):
        snapshot = DomSnapshot.from_payload(payload)

        with pytest.raises(NoLocatorError):
            snapshot.resolve([1, 5])
