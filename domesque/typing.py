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

import sys
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, BinaryIO, TextIO, TypeAlias, Union

from lxml import etree

if TYPE_CHECKING:
    from domesque.engines import ParserOptions
    from domesque.nodes import XmlNode


if sys.version_info < (3, 11):  # DROPWITH Python 3.10
    from typing_extensions import Self
else:
    from typing import Self


_Element: TypeAlias = etree._Element
_ElementTree: TypeAlias = etree._ElementTree

InputStream: TypeAlias = Union[BinaryIO, TextIO]

LoaderResult: TypeAlias = Union[_ElementTree, str]
Loader: TypeAlias = Callable[[Any, "ParserOptions"], LoaderResult]

NamespaceContext: TypeAlias = Mapping[str, str]
"""A mapping of prefixes to namespace URIs that is used to resolve prefixes in XPath
expressions."""

NodeSetItem: TypeAlias = Union["XmlNode", str, tuple[str, str]]
XPathResult: TypeAlias = Union[None, "XmlNode", list[NodeSetItem], str, float, bool]


__all__ = (
    "InputStream",
    "Loader",
    "LoaderResult",
    "NamespaceContext",
    "NodeSetItem",
    "Self",
    "XPathResult",
)
