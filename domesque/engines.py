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
The parser, serializer and XPath evaluator that the nodes' operations are delegated
to are expensive to set up and must not be used from more than one thread at once.
Hence each thread lazily creates its own set of handles on first use and keeps them
unaltered for its lifetime.
"""

from __future__ import annotations

import codecs
import logging
import threading
from copy import deepcopy
from functools import lru_cache
from typing import TYPE_CHECKING, NamedTuple, Optional

from lxml import etree

from domesque.exceptions import SerializationError, UnsupportedCharset

if TYPE_CHECKING:
    from domesque.typing import _Element


logger = logging.getLogger(__name__)


class ParserOptions(NamedTuple):
    """
    The configuration options that define the document builder's behaviour.

    Independent of these options the builder never resolves entities, loads or
    validates against DTDs, applies attribute defaults from DTDs or accesses the
    network. Documents that contain a document type declaration are refused
    altogether. CDATA sections are always retained.
    """

    encoding: Optional[str] = None
    """
    Overrides the encoding that is declared in a stream's XML declaration or
    indicated by a BOM.  Default: :obj:`None`.
    """
    huge_tree: bool = False
    """
    Disables the parser's limits on tree depth and text sizes.  Default: :obj:`False`.
    """
    remove_blank_text: bool = False
    """
    Drops whitespace-only text between tags so that indented serializations of
    element-only content can be parsed into the same tree as unindented ones. Mind
    that this also removes whitespace that is significant.  Default: :obj:`False`.
    """
    remove_comments: bool = False
    """Ignore comments.  Default: :obj:`False`."""
    remove_processing_instructions: bool = False
    """
    Don't include processing instructions in the parsed tree.  Default: :obj:`False`.
    """


class SerializerOptions(NamedTuple):
    indentation: str = "  "
    """ This string prefixes descending nodes' contents one time per depth level. """


DEFAULT_PARSER_OPTIONS = ParserOptions()
DEFAULT_SERIALIZER_OPTIONS = SerializerOptions()


class Serializer:
    """
    Renders elements as UTF-8 encoded bytes. The XML declaration, when emitted, always
    advertises UTF-8. An element's tail is never included. Of the namespaces that
    its ancestors declare only those that the element's subtree uses are declared.
    """

    __slots__ = ("options",)

    def __init__(self, options: SerializerOptions = DEFAULT_SERIALIZER_OPTIONS):
        self.options = options

    def serialize(
        self, element: _Element, omit_declaration: bool = False, indent: bool = False
    ) -> bytes:
        if indent or element.getparent() is not None:
            element = deepcopy(element)
        if indent:
            etree.indent(element, space=self.options.indentation)

        try:
            return etree.tostring(
                element,
                encoding="UTF-8",
                pretty_print=indent,
                with_tail=False,
                xml_declaration=not omit_declaration,
            )
        except etree.SerialisationError as e:
            raise SerializationError(str(e)) from e


def validate_charset(charset: str) -> str:
    """Returns the given charset name if it's a known one."""
    try:
        codecs.lookup(charset)
    except LookupError as e:
        raise UnsupportedCharset(charset) from e
    return charset


def _compile_xpath(
    expression: str, namespaces: tuple[tuple[str, str], ...]
) -> etree.XPath:
    return etree.XPath(
        expression, namespaces=dict(namespaces) or None, smart_strings=False
    )


def _make_parser(options: ParserOptions) -> etree.XMLParser:
    try:
        return etree.XMLParser(
            attribute_defaults=False,
            dtd_validation=False,
            encoding=options.encoding,
            huge_tree=options.huge_tree,
            load_dtd=False,
            no_network=True,
            remove_blank_text=options.remove_blank_text,
            remove_comments=options.remove_comments,
            remove_pis=options.remove_processing_instructions,
            resolve_entities=False,
            strip_cdata=False,
        )
    except LookupError as e:
        assert options.encoding is not None
        raise UnsupportedCharset(options.encoding) from e


class _EngineHandles(threading.local):
    # threading.local calls this once per thread on first attribute access
    def __init__(self):
        self.parsers: dict[ParserOptions, etree.XMLParser] = {}
        self.serializers: dict[SerializerOptions, Serializer] = {}
        self.xpath = lru_cache(maxsize=64)(_compile_xpath)
        logger.debug(
            "Initialized XML engine handles for thread %s.",
            threading.current_thread().name,
        )


_handles = _EngineHandles()


def get_parser(options: ParserOptions = DEFAULT_PARSER_OPTIONS) -> etree.XMLParser:
    """Returns the current thread's document builder for the given options."""
    parser = _handles.parsers.get(options)
    if parser is None:
        parser = _handles.parsers[options] = _make_parser(options)
        logger.debug("Created a document builder with %r.", options)
    return parser


def get_serializer(
    options: SerializerOptions = DEFAULT_SERIALIZER_OPTIONS,
) -> Serializer:
    """Returns the current thread's serializer for the given options."""
    serializer = _handles.serializers.get(options)
    if serializer is None:
        serializer = _handles.serializers[options] = Serializer(options)
    return serializer


def get_xpath(
    expression: str, namespaces: tuple[tuple[str, str], ...] = ()
) -> etree.XPath:
    """
    Returns a compiled XPath expression from the current thread's cache.

    :param expression: An XPath 1.0 expression.
    :param namespaces: The prefix to namespace URI mappings as sorted pairs.
    """
    return _handles.xpath(expression, namespaces)


__all__ = (
    ParserOptions.__name__,
    Serializer.__name__,
    SerializerOptions.__name__,
    get_parser.__name__,
    get_serializer.__name__,
    get_xpath.__name__,
    validate_charset.__name__,
)
