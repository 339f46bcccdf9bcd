"""Tests for XPathContext, the per-side position tracker.

Covers:
- "/" for the empty stack and for the document node
- Per-name element counters, shared text()/CDATA counters
- comment() and processing-instruction() steps
- Attribute steps and parent_xpath
- Prefix rendering from the namespace context only
- at_child / at_attribute restore the position on every exit path
- append_children continues existing counters
"""

from __future__ import annotations

import pytest

from xml_structural_diff.engine.xpath import XPathContext
from xml_structural_diff.tree.nodes import QName, XmlNode


def _children() -> list[XmlNode]:
    return [
        XmlNode.element("b"),
        XmlNode.text("t"),
        XmlNode.element("c"),
        XmlNode.cdata("d"),
        XmlNode.element("b"),
        XmlNode.comment("x"),
        XmlNode.processing_instruction("pi"),
    ]


class TestRendering:
    def test_empty_context_is_root(self) -> None:
        assert XPathContext().xpath == "/"

    def test_document_renders_as_root(self) -> None:
        ctx = XPathContext(root=XmlNode.document(XmlNode.element("a")))
        assert ctx.xpath == "/"

    def test_root_element(self) -> None:
        ctx = XPathContext(root=XmlNode.element("a"))
        assert ctx.xpath == "/a[1]"
        assert ctx.parent_xpath == "/"

    def test_child_steps(self) -> None:
        ctx = XPathContext(root=XmlNode.element("a"))
        ctx.set_children(_children())
        rendered = []
        for i in range(7):
            with ctx.at_child(i):
                rendered.append(ctx.xpath)
        assert rendered == [
            "/a[1]/b[1]",
            "/a[1]/text()[1]",
            "/a[1]/c[1]",
            "/a[1]/text()[2]",
            "/a[1]/b[2]",
            "/a[1]/comment()[1]",
            "/a[1]/processing-instruction()[1]",
        ]

    def test_children_of_document(self) -> None:
        root = XmlNode.element("a")
        ctx = XPathContext(root=XmlNode.document(root))
        ctx.set_children([XmlNode.comment("c"), root])
        with ctx.at_child(1):
            assert ctx.xpath == "/a[1]"
            assert ctx.parent_xpath == "/"

    def test_attribute_step(self) -> None:
        ctx = XPathContext(root=XmlNode.element("a"))
        ctx.add_attributes([QName("id"), QName("lang", "urn:l")])
        with ctx.at_attribute(QName("id")):
            assert ctx.xpath == "/a[1]/@id"
            assert ctx.parent_xpath == "/a[1]"
        with ctx.at_attribute(QName("lang", "urn:l")):
            assert ctx.xpath == "/a[1]/@lang"

    def test_nested_parent_xpath(self) -> None:
        ctx = XPathContext(root=XmlNode.element("a"))
        ctx.set_children([XmlNode.element("b")])
        with ctx.at_child(0):
            ctx.set_children([XmlNode.text("x")])
            with ctx.at_child(0):
                assert ctx.xpath == "/a[1]/b[1]/text()[1]"
                assert ctx.parent_xpath == "/a[1]/b[1]"

    def test_deep_path_rendered_in_one_call(self) -> None:
        depth = 2000
        ctx = XPathContext(root=XmlNode.element("a"))
        for _ in range(depth):
            ctx.set_children([XmlNode.element("a")])
            ctx.navigate_to_child(0)
        assert ctx.xpath == "/a[1]" * (depth + 1)
        assert ctx.parent_xpath == "/a[1]" * depth


class TestNamespaces:
    def test_bound_uri_gets_prefix(self) -> None:
        ctx = XPathContext({"x": "urn:x"}, root=XmlNode.element("{urn:x}a", prefix="doc"))
        assert ctx.xpath == "/x:a[1]"

    def test_source_prefix_is_ignored(self) -> None:
        ctx = XPathContext(root=XmlNode.element("{urn:x}a", prefix="doc"))
        assert ctx.xpath == "/a[1]"

    def test_attribute_prefix(self) -> None:
        ctx = XPathContext({"x": "urn:x"}, root=XmlNode.element("a"))
        ctx.add_attribute(QName("id", "urn:x"))
        with ctx.at_attribute(QName("id", "urn:x")):
            assert ctx.xpath == "/a[1]/@x:id"


class TestScopes:
    def test_position_restored_after_exception(self) -> None:
        ctx = XPathContext(root=XmlNode.element("a"))
        ctx.set_children([XmlNode.element("b")])
        with pytest.raises(RuntimeError), ctx.at_child(0):
            raise RuntimeError
        assert ctx.xpath == "/a[1]"

    def test_explicit_navigation(self) -> None:
        ctx = XPathContext(root=XmlNode.element("a"))
        ctx.set_children([XmlNode.element("b")])
        ctx.navigate_to_child(0)
        assert ctx.xpath == "/a[1]/b[1]"
        ctx.navigate_to_parent()
        assert ctx.xpath == "/a[1]"

    def test_append_children_continues_counters(self) -> None:
        ctx = XPathContext(root=XmlNode.element("a"))
        ctx.set_children([XmlNode.element("b"), XmlNode.text("x")])
        ctx.append_children([XmlNode.element("b"), XmlNode.text("y")])
        with ctx.at_child(2):
            assert ctx.xpath == "/a[1]/b[2]"
        with ctx.at_child(3):
            assert ctx.xpath == "/a[1]/text()[2]"

    def test_set_children_resets_counters(self) -> None:
        ctx = XPathContext(root=XmlNode.element("a"))
        ctx.set_children([XmlNode.element("b")])
        ctx.set_children([XmlNode.element("b")])
        with ctx.at_child(0):
            assert ctx.xpath == "/a[1]/b[1]"
