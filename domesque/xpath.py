# Copyright (C) 2019-'26  Frank Sachsenheim
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
Nodes can be queried with XPath 1.0 expressions and CSS selectors, the latter are
converted to XPath expressions with a third-party library before evaluation. The
evaluation itself is done by *lxml*.

The type of an expression's result is requested by the caller with a member of
:class:`ResultType`:

- ``NODE``: the first node of a node-set in document order or :obj:`None` if the
  node-set is empty.
- ``NODESET``: all nodes of a node-set in document order.
- ``STRING``, ``NUMBER``, ``BOOLEAN``: the result converted with the corresponding
  XPath function to :class:`str`, :class:`float` resp. :class:`bool`.

Elements in node-sets are wrapped into :class:`domesque.XmlNode` instances, text,
attribute, comment and processing instruction nodes are represented by their string
value.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import TYPE_CHECKING, Final, Optional

from cssselect import GenericTranslator
from lxml import etree

from domesque.engines import get_xpath
from domesque.exceptions import XPathError

if TYPE_CHECKING:
    from domesque.typing import NamespaceContext, NodeSetItem, XPathResult, _Element


_css_translator: Final = GenericTranslator()


class ResultType(Enum):
    NODE = "node"
    NODESET = "nodeset"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"


_CONVERSION_FUNCTIONS: Final = {
    ResultType.STRING: "string",
    ResultType.NUMBER: "number",
    ResultType.BOOLEAN: "boolean",
}


@lru_cache(maxsize=64)
def css_to_xpath(expression: str) -> str:
    return _css_translator.css_to_xpath(expression, prefix="descendant::")


def _namespaces_key(
    expression: str, namespace_context: Optional[NamespaceContext]
) -> tuple[tuple[str, str], ...]:
    if not namespace_context:
        return ()
    for prefix in namespace_context:
        if not prefix:
            raise XPathError(
                expression,
                "The default namespace can't be addressed with an empty prefix in "
                "XPath 1.0, use an arbitrary prefix instead.",
            )
    return tuple(sorted(namespace_context.items()))


def _wrap(item: object) -> NodeSetItem:
    from domesque.nodes import XmlNode

    if isinstance(item, etree._Element):
        # comments and processing instructions are represented by their content
        if isinstance(item.tag, str):
            return XmlNode(item)
        return item.text or ""
    return item  # type: ignore


def evaluate(
    element: _Element,
    expression: str,
    result_type: ResultType = ResultType.NODESET,
    namespace_context: Optional[NamespaceContext] = None,
) -> XPathResult:
    """
    Evaluates an XPath expression with the given element as context node.

    :param element: The context node.
    :param expression: An XPath 1.0 expression.
    :param result_type: The type the result shall be returned as.
    :param namespace_context: A mapping of prefixes to namespace URIs that are used
                              in the expression.
    """
    if not isinstance(result_type, ResultType):
        raise TypeError(f"{result_type!r} is not a member of ResultType.")

    namespaces = _namespaces_key(expression, namespace_context)

    try:
        # the expression must be well-formed on its own, not only as an argument
        xpath = get_xpath(expression, namespaces)
        if (function := _CONVERSION_FUNCTIONS.get(result_type)) is not None:
            xpath = get_xpath(f"{function}({expression})", namespaces)
        result = xpath(element)
    except etree.XPathError as e:
        raise XPathError(expression, str(e)) from e

    if result_type is ResultType.STRING:
        return str(result)
    if result_type is ResultType.NUMBER:
        return float(result)  # type: ignore
    if result_type is ResultType.BOOLEAN:
        return bool(result)

    if not isinstance(result, list):
        raise XPathError(
            expression,
            f"The result is a {type(result).__name__} and can't be converted to a "
            "node-set.",
        )

    if result_type is ResultType.NODE:
        if not result:
            return None
        return _wrap(result[0])  # type: ignore

    assert result_type is ResultType.NODESET
    return [_wrap(x) for x in result]


__all__ = (
    ResultType.__name__,
    css_to_xpath.__name__,  # type: ignore
    evaluate.__name__,
)
