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
*domesque* provides :class:`XmlNode`, a thin and freely repeatable view on elements
of *lxml* trees with a compact API to build, query, alter and serialize documents:

>>> from domesque import element, ResultType
>>> request = element("request", element("id").set_text("15"))
>>> request.find("id").text
'15'
>>> request.xpath("count(id)", ResultType.NUMBER)
1.0

The :mod:`domesque.sql` module offers equally compact helpers for the execution of
parameterized SQL statements.
"""

from __future__ import annotations

from domesque.engines import ParserOptions, Serializer, SerializerOptions
from domesque.exceptions import (
    DisallowedConstruct,
    DomesqueBaseException,
    FailedDocumentLoading,
    ParseError,
    ParsingEmptyStream,
    SerializationError,
    UnsupportedCharset,
    XPathError,
)
from domesque.loaders import from_stream, parse
from domesque.nodes import XmlNode, element
from domesque.xpath import ResultType


__all__ = (
    DisallowedConstruct.__name__,
    DomesqueBaseException.__name__,
    FailedDocumentLoading.__name__,
    ParseError.__name__,
    ParserOptions.__name__,
    ParsingEmptyStream.__name__,
    ResultType.__name__,
    SerializationError.__name__,
    Serializer.__name__,
    SerializerOptions.__name__,
    UnsupportedCharset.__name__,
    XPathError.__name__,
    XmlNode.__name__,
    element.__name__,
    from_stream.__name__,
    parse.__name__,
)
