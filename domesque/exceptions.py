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

"""These are the specific exceptions of *domesque*."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from domesque.typing import Loader


class DomesqueBaseException(Exception):
    pass


class FailedDocumentLoading(DomesqueBaseException):
    def __init__(self, source: Any, excuses: dict[Loader, str | Exception]):
        self.source = source
        self.excuses = excuses

    def __str__(self):
        excuses = ", ".join(
            f"{loader.__name__}: {excuse}" for loader, excuse in self.excuses.items()
        )
        return f"Couldn't load {self.source!r} with these loaders: {excuses}"


class ParseError(DomesqueBaseException):
    """
    Raised when a stream can't be parsed into a tree, either because it isn't
    well-formed or because it contains constructs that are refused.
    """

    pass


class DisallowedConstruct(ParseError):
    """Raised when a document contains a document type declaration."""

    def __init__(self, construct: str):
        self.construct = construct
        super().__init__(f"Documents must not contain a {construct}.")


class ParsingEmptyStream(ParseError):
    def __init__(self):
        super().__init__("The input stream is empty.")


class UnsupportedCharset(ParseError):
    def __init__(self, charset: str):
        self.charset = charset
        super().__init__(f"The charset `{charset}` is not supported.")


class SerializationError(DomesqueBaseException):
    """Raised when a tree can't be rendered to or written into its output."""

    pass


class XPathError(DomesqueBaseException):
    """
    Raised when an XPath expression can't be compiled or evaluated. That includes
    expressions that use namespace prefixes which aren't resolvable with the given
    namespace context.
    """

    def __init__(self, expression: str, message: str):
        self.expression = expression
        self.message = message
        super().__init__(expression, message)

    def __str__(self):
        return f"Failed XPath expression `{self.expression}`: {self.message}"


__all__ = (
    DisallowedConstruct.__name__,
    DomesqueBaseException.__name__,
    FailedDocumentLoading.__name__,
    ParseError.__name__,
    ParsingEmptyStream.__name__,
    SerializationError.__name__,
    UnsupportedCharset.__name__,
    XPathError.__name__,
)
