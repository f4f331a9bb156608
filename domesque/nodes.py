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

from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal, Optional, overload

from lxml import etree

from domesque.engines import DEFAULT_SERIALIZER_OPTIONS, get_serializer, get_xpath
from domesque.exceptions import SerializationError
from domesque.xpath import ResultType, css_to_xpath, evaluate

if TYPE_CHECKING:
    from typing import BinaryIO

    from domesque.engines import SerializerOptions
    from domesque.typing import (
        NamespaceContext,
        NodeSetItem,
        Self,
        XPathResult,
        _Element,
        _ElementTree,
    )


CDATA = etree.CDATA
QName = etree.QName


def _import_subtree(node: XmlNode) -> _Element:
    result = deepcopy(node._etree_obj)
    result.tail = None
    return result


class XmlNode:
    """
    A lightweight view on an element of a tree that is provided by *lxml*. The
    wrapper holds nothing but a reference to the element, any number of wrappers may
    refer to the same element and operate on the very same tree.

    Two instances are equal when their :meth:`canonical_text` representations are
    equal, regardless whether they wrap the same element or not. As the underlying
    tree is mutable, so are equality and hash value of a wrapper; mind that when
    instances are used as keys in mappings or as members of sets.

    :param etree_element: The wrapped element.
    """

    __slots__ = ("_etree_obj",)

    def __init__(self, etree_element: _Element):
        if not (
            isinstance(etree_element, etree._Element)
            and isinstance(etree_element.tag, str)
        ):
            raise TypeError(f"{etree_element!r} is not an lxml element.")
        self._etree_obj = etree_element

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, XmlNode):
            return NotImplemented
        return self.canonical_text() == other.canonical_text()

    def __hash__(self) -> int:
        return hash(self.canonical_text())

    def __repr__(self) -> str:
        return (
            f"<{self.__class__.__name__}('{self.qualified_name}', "
            f"{dict(self._etree_obj.attrib)}) [{hex(id(self))}]>"
        )

    def __str__(self) -> str:
        return self.to_text(omit_declaration=True, indent=True)

    # accessors

    def attribute(self, name: str) -> Optional[str]:
        """
        Returns an attribute's value or :obj:`None` if the node has no such attribute.

        :param name: The attribute's name, namespaced attributes are addressed in
                     Clark notation, e.g. ``{http://namespace}name``.
        """
        return self._etree_obj.get(name)

    @property
    def local_name(self) -> str:
        return QName(self._etree_obj).localname

    @property
    def namespace(self) -> Optional[str]:
        """The node's namespace URI or :obj:`None`."""
        return QName(self._etree_obj).namespace

    @property
    def owner_document(self) -> _ElementTree:
        """The tree that contains the wrapped element."""
        return self._etree_obj.getroottree()

    @property
    def qualified_name(self) -> str:
        """The node's name with its namespace prefix if it has one."""
        prefix = self._etree_obj.prefix
        if prefix:
            return f"{prefix}:{self.local_name}"
        return self.local_name

    @property
    def text(self) -> str:
        """
        The concatenated contents of all text nodes and CDATA sections in the node's
        subtree.
        """
        return get_xpath("string()")(self._etree_obj)

    @property
    def underlying(self) -> _Element:
        """The wrapped *lxml* element."""
        return self._etree_obj

    # mutators

    def append(self, *children: XmlNode) -> Self:
        """
        Appends copies of the given nodes' subtrees as last children. The given nodes
        and their trees remain untouched.
        """
        for child in children:
            if not isinstance(child, XmlNode):
                raise TypeError(f"{child!r} is not an XmlNode instance.")
            self._etree_obj.append(_import_subtree(child))
        return self

    def append_cdata(self, data: str) -> Self:
        """
        Adds a CDATA section to the node's content. As the underlying tree represents
        CDATA sections only as a node's leading text, the data is joined to the
        present text and both are serialized as one section.

        The data is kept as ordinary text in two cases: when the node has child
        nodes it is appended to the last one's tail, and when the joined text
        contains the section terminator ``]]>``.
        """
        etree_obj = self._etree_obj
        if len(etree_obj):
            last_child = etree_obj[-1]
            last_child.tail = (last_child.tail or "") + data
            return self

        text = (etree_obj.text or "") + data
        etree_obj.text = text if "]]>" in text else CDATA(text)
        return self

    def set_attribute(
        self, name: str, value: str, namespace_uri: Optional[str] = None
    ) -> Self:
        """
        Sets an attribute's value.

        :param name: The attribute's name. With a ``namespace_uri`` a prefix in the
                     name is ignored.
        :param value: The value.
        :param namespace_uri: The attribute's namespace. The serialization uses a
                              prefix that is bound to it in the node's scope or
                              generates one that is distinct from all others.
        """
        if namespace_uri:
            name = QName(namespace_uri, name.rpartition(":")[2]).text
        self._etree_obj.set(name, value)
        return self

    def set_text(self, content: str) -> Self:
        """Replaces the node's complete content with the given text."""
        etree_obj = self._etree_obj
        del etree_obj[:]
        etree_obj.text = content
        return self

    # lookup

    def find(
        self, tag_name: str, namespace_uri: Optional[str] = None
    ) -> Optional[XmlNode]:
        """
        Returns the first child element that matches the given name and namespace or
        :obj:`None`. See :meth:`find_all` regarding the matching.
        """
        for child in self._iter_matching_children(tag_name, namespace_uri):
            return XmlNode(child)
        return None

    def find_all(
        self, tag_name: str, namespace_uri: Optional[str] = None
    ) -> list[XmlNode]:
        """
        Returns all child elements that match the given name and namespace in document
        order.

        :param tag_name: The local name of the children to match.
        :param namespace_uri: When given, only children in that namespace match.
                              Otherwise the children's namespaces are ignored.
        """
        return [
            XmlNode(x) for x in self._iter_matching_children(tag_name, namespace_uri)
        ]

    def _iter_matching_children(self, tag_name: str, namespace_uri: Optional[str]):
        for child in self._etree_obj:
            # comments and processing instructions have callables as tag
            if not isinstance(child.tag, str):
                continue
            name = QName(child)
            if namespace_uri is not None and name.namespace != namespace_uri:
                continue
            if name.localname == tag_name:
                yield child

    @overload
    def xpath(
        self,
        expression: str,
        result_type: Literal[ResultType.NODE],
        namespace_context: Optional[NamespaceContext] = None,
    ) -> Optional[XmlNode | str]: ...

    @overload
    def xpath(
        self,
        expression: str,
        result_type: Literal[ResultType.NODESET] = ResultType.NODESET,
        namespace_context: Optional[NamespaceContext] = None,
    ) -> list[NodeSetItem]: ...

    @overload
    def xpath(
        self,
        expression: str,
        result_type: Literal[ResultType.STRING],
        namespace_context: Optional[NamespaceContext] = None,
    ) -> str: ...

    @overload
    def xpath(
        self,
        expression: str,
        result_type: Literal[ResultType.NUMBER],
        namespace_context: Optional[NamespaceContext] = None,
    ) -> float: ...

    @overload
    def xpath(
        self,
        expression: str,
        result_type: Literal[ResultType.BOOLEAN],
        namespace_context: Optional[NamespaceContext] = None,
    ) -> bool: ...

    def xpath(
        self,
        expression: str,
        result_type: ResultType = ResultType.NODESET,
        namespace_context: Optional[NamespaceContext] = None,
    ) -> XPathResult:
        """
        Evaluates an XPath 1.0 expression with this node as context node.

        Mind that, as per XPath's semantics, an expression that starts with a ``/`` is
        evaluated from the root of the node's tree.

        Only elements in node-sets are wrapped as :class:`XmlNode`. Text, attribute,
        comment and processing instruction nodes are returned as their string value.

        :param expression: The expression.
        :param result_type: The type of the result, see :mod:`domesque.xpath`.
        :param namespace_context: Prefixes that are used in the expression mapped to
                                  their namespace URIs.
        :raises XPathError: When the expression is malformed, uses prefixes that
                            aren't declared in the ``namespace_context`` or its result
                            can't be converted to the requested type.
        """
        return evaluate(self._etree_obj, expression, result_type, namespace_context)

    def css_select(
        self, expression: str, namespace_context: Optional[NamespaceContext] = None
    ) -> list[NodeSetItem]:
        """
        Returns all descendant nodes that match a CSS selector in document order.
        Namespaces are addressed in selectors with prefixes that are declared in the
        ``namespace_context``, e.g. ``p|a``.
        """
        return evaluate(
            self._etree_obj,
            css_to_xpath(expression),
            ResultType.NODESET,
            namespace_context,
        )  # type: ignore

    # serialization

    def canonical_text(self) -> str:
        """
        The serialization that is used to compare nodes. It has no XML declaration
        and no indentation.
        """
        return self.to_text(omit_declaration=True, indent=False)

    def save(
        self,
        path: Path | str,
        omit_declaration: bool = False,
        indent: bool = False,
        options: SerializerOptions = DEFAULT_SERIALIZER_OPTIONS,
    ):
        data = self.to_bytes(omit_declaration, indent, options)
        try:
            Path(path).write_bytes(data)
        except OSError as e:
            raise SerializationError(f"Couldn't write to {path}: {e}") from e

    def to_bytes(
        self,
        omit_declaration: bool = False,
        indent: bool = False,
        options: SerializerOptions = DEFAULT_SERIALIZER_OPTIONS,
    ) -> bytes:
        """
        Serializes the node and its descendants as UTF-8 encoded XML.

        :param omit_declaration: Emits no XML declaration if :obj:`True`.
        :param indent: Indents the descendants if :obj:`True`, the node's tree itself
                       isn't changed.
        :param options: Further formatting options.
        """
        return get_serializer(options).serialize(
            self._etree_obj, omit_declaration=omit_declaration, indent=indent
        )

    def to_text(
        self,
        omit_declaration: bool = False,
        indent: bool = False,
        options: SerializerOptions = DEFAULT_SERIALIZER_OPTIONS,
    ) -> str:
        """The same as :meth:`to_bytes`, but decoded to a :class:`str`."""
        return self.to_bytes(omit_declaration, indent, options).decode("utf-8")

    def write(
        self,
        buffer: BinaryIO,
        omit_declaration: bool = False,
        indent: bool = False,
        options: SerializerOptions = DEFAULT_SERIALIZER_OPTIONS,
    ) -> BinaryIO:
        """Writes the serialization into a binary :term:`file-like object`."""
        data = self.to_bytes(omit_declaration, indent, options)
        try:
            buffer.write(data)
        except (OSError, ValueError) as e:
            raise SerializationError(f"Couldn't write to {buffer!r}: {e}") from e
        return buffer


def element(
    tag_name: str, *children: XmlNode, namespace_uri: Optional[str] = None
) -> XmlNode:
    """
    Creates a node in a new document with copies of the given nodes' subtrees as
    children.

    :param tag_name: The node's name, optionally with a namespace prefix, e.g.
                     ``foo:document``.
    :param children: Nodes whose copies are appended.
    :param namespace_uri: The node's namespace. It is bound to the prefix of the
                          ``tag_name`` or becomes the default namespace if there's
                          none.
    """
    prefix, _, local_name = tag_name.rpartition(":")

    if namespace_uri:
        tag = QName(namespace_uri, local_name)
        nsmap = {prefix or None: namespace_uri}
    elif prefix:
        raise ValueError(
            f"The prefixed name `{tag_name}` requires a namespace to bind the prefix."
        )
    else:
        tag, nsmap = QName(local_name), None

    return XmlNode(etree.Element(tag, nsmap=nsmap)).append(*children)


__all__ = (XmlNode.__name__, element.__name__)
