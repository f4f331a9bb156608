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
Trees are built from streams with :func:`from_stream`. :func:`parse` accepts a variety
of other sources and tries the :data:`configured_loaders` one after another until one
accepts the source. A loader returns either a tree or a string that explains why it
didn't load the source.

All parsing refuses documents with document type declarations and thereby also any
entity that isn't predefined by XML.
"""

from __future__ import annotations

import logging
import re
import warnings
from copy import deepcopy
from io import IOBase
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final, Optional

from lxml import etree

from domesque.engines import DEFAULT_PARSER_OPTIONS, get_parser, validate_charset
from domesque.exceptions import (
    DisallowedConstruct,
    FailedDocumentLoading,
    ParseError,
    ParsingEmptyStream,
)
from domesque.nodes import XmlNode

if TYPE_CHECKING:
    from domesque.engines import ParserOptions
    from domesque.typing import InputStream, Loader, LoaderResult, _ElementTree


logger = logging.getLogger(__name__)


_match_xml_declaration: Final = re.compile(r"\ufeff?<\?xml\s[^>]*\?>").match


# parsing


def _encode_text(text: str) -> bytes:
    # the declared encoding would contradict the encoding of the result
    if (match := _match_xml_declaration(text)) is not None:
        text = text[match.end() :]
    return text.encode("utf-8")


def _refuse_document_type_declaration(tree: _ElementTree):
    docinfo = tree.docinfo
    if (
        docinfo.internalDTD is not None
        or docinfo.externalDTD is not None
        or docinfo.public_id
        or docinfo.system_url
    ):
        logger.debug("Refused a document with a document type declaration.")
        raise DisallowedConstruct("document type declaration")


def parse_tree(
    data: bytes, options: ParserOptions = DEFAULT_PARSER_OPTIONS
) -> _ElementTree:
    """
    Parses a complete document.

    :param data: The document's serialization.
    :param options: The parser's configuration.
    :raises ParseError: When the data isn't a well-formed document or contains a
                        document type declaration.
    """
    if not data.strip():
        raise ParsingEmptyStream

    try:
        root = etree.fromstring(data, parser=get_parser(options))
    except etree.XMLSyntaxError as e:
        raise ParseError(str(e)) from e

    tree = root.getroottree()
    _refuse_document_type_declaration(tree)
    return tree


def _read_stream(
    stream: InputStream, charset: Optional[str], options: ParserOptions
) -> _ElementTree:
    data = stream.read()

    if isinstance(data, str):
        if charset is not None:
            warnings.warn(
                "The charset argument is ignored when reading from a text stream.",
                category=UserWarning,
                stacklevel=3,
            )
        data, charset = _encode_text(data), "utf-8"

    if charset is not None:
        options = options._replace(encoding=validate_charset(charset))

    return parse_tree(data, options)


def from_stream(
    stream: InputStream,
    charset: Optional[str] = None,
    options: ParserOptions = DEFAULT_PARSER_OPTIONS,
) -> XmlNode:
    """
    Parses a document from a :term:`file-like object` and returns its root node.

    :param stream: A binary or a text stream.
    :param charset: Overrides the encoding that is declared in a binary stream's
                    contents. It has no effect on text streams.
    :param options: The parser's configuration.
    :raises ParseError: When the stream can't be decoded with the charset, doesn't
                        contain a well-formed document or one with a document type
                        declaration.
    """
    return XmlNode(_read_stream(stream, charset, options).getroot())


# loaders


def buffer_loader(data: Any, options: ParserOptions) -> LoaderResult:
    """Loads a document from a :term:`file-like object`."""
    if isinstance(data, IOBase):
        return _read_stream(data, None, options)
    return "The input value is no buffer object."


def etree_loader(data: Any, options: ParserOptions) -> LoaderResult:
    """Loads a copy of an *lxml* tree or element."""
    if isinstance(data, etree._ElementTree):
        return deepcopy(data)
    if isinstance(data, etree._Element):
        root = deepcopy(data)
        root.tail = None
        return etree.ElementTree(root)
    return "The input value is no lxml element or tree."


def node_loader(data: Any, options: ParserOptions) -> LoaderResult:
    """Loads a copy of a :class:`domesque.XmlNode`'s subtree."""
    if isinstance(data, XmlNode):
        return etree_loader(data.underlying, options)
    return "The input value is not an XmlNode instance."


def path_loader(data: Any, options: ParserOptions) -> LoaderResult:
    """Loads a document from a file that is pointed at with a :class:`pathlib.Path`."""
    if isinstance(data, Path):
        return parse_tree(data.read_bytes(), options)
    return "The input value is not a pathlib.Path instance."


def text_loader(data: Any, options: ParserOptions) -> LoaderResult:
    """Parses a string or a byte sequence containing a full document."""
    if isinstance(data, str):
        return parse_tree(_encode_text(data), options._replace(encoding="utf-8"))
    if isinstance(data, bytes):
        return parse_tree(data, options)
    return "The input value is not a byte sequence or a string."


configured_loaders: list[Loader] = [
    path_loader,
    buffer_loader,
    text_loader,
    etree_loader,
    node_loader,
]


def parse(source: Any, options: ParserOptions = DEFAULT_PARSER_OPTIONS) -> XmlNode:
    """
    Loads a document from any source that one of the :data:`configured_loaders`
    accepts and returns its root node.

    :raises ParseError: When a loader accepts the source, but can't parse it.
    :raises FailedDocumentLoading: When no loader accepts the source.
    """
    excuses: dict[Loader, str | Exception] = {}

    for loader in configured_loaders:
        try:
            result = loader(source, options)
        except ParseError:
            raise
        except Exception as e:
            excuses[loader] = e
        else:
            if isinstance(result, str):
                excuses[loader] = result
            else:
                return XmlNode(result.getroot())

    raise FailedDocumentLoading(source, excuses)


__all__ = (
    "configured_loaders",
    buffer_loader.__name__,
    etree_loader.__name__,
    from_stream.__name__,
    node_loader.__name__,
    parse.__name__,
    parse_tree.__name__,
    path_loader.__name__,
    text_loader.__name__,
)
