"""HTML parsing capability for LibScout.

The pipeline never talks to BeautifulSoup directly; it goes through three
small helpers so the rest of the code only needs:

* :func:`parse_html` — markup (``str`` or ``bytes``) to a queryable tree;
* :func:`select` — CSS selector query returning element tags;
* :func:`attr` — attribute value as a plain string (``""`` when absent).
"""
from __future__ import annotations

from collections.abc import Sequence
from typing import Union

from bs4 import BeautifulSoup
from bs4.element import Tag

__all__: Sequence[str] = ("parse_html", "select", "attr")

_PARSER = "html.parser"


def parse_html(markup: Union[str, bytes]) -> BeautifulSoup:
    """Parse raw HTML into a BeautifulSoup tree."""
    return BeautifulSoup(markup, _PARSER)


def select(tree: Union[BeautifulSoup, Tag], selector: str) -> list[Tag]:
    """Return every element matching *selector* in document order."""
    return [el for el in tree.select(selector) if isinstance(el, Tag)]


def attr(element: Tag, name: str) -> str:
    """Return attribute *name* of *element* as a string.

    Multi-valued attributes (``class`` and friends) are joined with a space.
    """
    value = element.get(name)
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return " ".join(value)
