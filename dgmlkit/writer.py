"""DGML writer - encode a finished graph as one XML document."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any

from .errors import EncodingError
from .model import Category, Graph, Link, Node, Property, Style

DGML_NAMESPACE = "http://schemas.microsoft.com/vs/2009/dgml"

# Characters outside the XML 1.0 Char production; no escape makes them legal.
_ILLEGAL_XML_CHARS = re.compile("[^\t\n\r\x20-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]")

RESERVED_ATTRIBUTES = frozenset({"Id", "Label", "Category", "Source", "Target"})

# Attributes DGML understands without a <Property> declaration.
BUILTIN_ATTRIBUTES = frozenset(
    {
        "Background",
        "Description",
        "FontSize",
        "Foreground",
        "Group",
        "Icon",
        "Reference",
        "Shape",
        "Stroke",
        "StrokeDashArray",
        "StrokeThickness",
        "Visibility",
    }
)


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "True" if value else "False"
    return str(value)


def _checked(el: ET.Element, owner: str) -> ET.Element:
    """Reject attribute values XML 1.0 cannot represent."""
    for sub in el.iter():
        for name, value in sub.attrib.items():
            bad = _ILLEGAL_XML_CHARS.search(value)
            if bad:
                raise EncodingError(
                    f"{owner}: attribute {name!r} contains character U+{ord(bad.group()):04X}, not allowed in XML"
                )
    return el


def _set_custom(el: ET.Element, owner: str, properties: dict[str, Any], declared: set[str], strict: bool) -> None:
    for key, value in properties.items():
        if value is None:
            continue
        if key in RESERVED_ATTRIBUTES:
            raise EncodingError(f"{owner}: custom property {key!r} collides with a reserved attribute")
        if strict and key not in declared and key not in BUILTIN_ATTRIBUTES:
            raise EncodingError(f"{owner}: property {key!r} has no schema entry")
        el.set(key, _format_value(value))


def _add_category_refs(el: ET.Element, refs: list[str]) -> None:
    for ref in refs:
        ET.SubElement(el, "Category", {"Ref": ref})


def _node_element(node: Node, declared: set[str], strict: bool) -> ET.Element:
    el = ET.Element("Node", {"Id": node.id})
    if node.label is not None:
        el.set("Label", node.label)
    if node.category is not None:
        el.set("Category", node.category)
    _set_custom(el, f"node {node.id!r}", node.properties, declared, strict)
    _add_category_refs(el, node.category_refs)
    return el


def _link_element(link: Link, declared: set[str], strict: bool) -> ET.Element:
    el = ET.Element("Link", {"Source": link.source, "Target": link.target})
    if link.label is not None:
        el.set("Label", link.label)
    if link.category is not None:
        el.set("Category", link.category)
    _set_custom(el, f"link {link.source!r}->{link.target!r}", link.properties, declared, strict)
    _add_category_refs(el, link.category_refs)
    return el


def _category_element(category: Category, declared: set[str], strict: bool) -> ET.Element:
    el = ET.Element("Category", {"Id": category.id})
    if category.label is not None:
        el.set("Label", category.label)
    _set_custom(el, f"category {category.id!r}", category.properties, declared, strict)
    return el


def _property_element(prop: Property) -> ET.Element:
    el = ET.Element("Property", {"Id": prop.id, "DataType": prop.data_type})
    if prop.label is not None:
        el.set("Label", prop.label)
    if prop.description is not None:
        el.set("Description", prop.description)
    return el


def _style_element(style: Style) -> ET.Element:
    if style.target_type not in ("Node", "Link"):
        raise EncodingError(f"style {style.group_label!r} has no target type")
    el = ET.Element("Style", {"TargetType": style.target_type})
    if style.group_label is not None:
        el.set("GroupLabel", style.group_label)
    if style.value_label is not None:
        el.set("ValueLabel", style.value_label)
    for condition in style.conditions:
        ET.SubElement(el, "Condition", {"Expression": condition.expression})
    for setter in style.setters:
        ET.SubElement(el, "Setter", {"Property": setter.property, "Value": setter.value})
    return el


def to_element(graph: Graph, *, strict: bool = False) -> ET.Element:
    """Build the ``DirectedGraph`` element tree for a graph.

    Args:
        graph: Finished graph
        strict: Reject custom properties without a schema entry
    """
    declared = {p.id for p in graph.properties}
    root = ET.Element("DirectedGraph")
    if graph.title:
        root.set("Title", graph.title)
    root.set("xmlns", DGML_NAMESPACE)
    _checked(root, "graph")

    nodes = [_checked(_node_element(n, declared, strict), f"node {n.id!r}") for n in graph.nodes]
    links = [
        _checked(_link_element(link, declared, strict), f"link {link.source!r}->{link.target!r}")
        for link in graph.links
    ]
    categories = [_checked(_category_element(c, declared, strict), f"category {c.id!r}") for c in graph.categories]
    properties = [_checked(_property_element(p), f"property {p.id!r}") for p in graph.properties]
    styles = [_checked(_style_element(s), f"style {s.group_label!r}") for s in graph.styles]

    groups = (
        ("Nodes", nodes),
        ("Links", links),
        ("Categories", categories),
        ("Properties", properties),
        ("Styles", styles),
    )
    for tag, children in groups:
        if not children:
            continue
        group = ET.SubElement(root, tag)
        group.extend(children)
    return root


def to_dgml(graph: Graph, *, strict: bool = False) -> str:
    root = to_element(graph, strict=strict)
    ET.indent(root, space="  ")
    body = ET.tostring(root, encoding="unicode")
    return '<?xml version="1.0" encoding="utf-8"?>\n' + body + "\n"


def write_dgml(graph: Graph, path: Path, *, strict: bool = False) -> Path:
    path.write_text(to_dgml(graph, strict=strict), encoding="utf-8")
    return path
