#  Linodyn - Linode Dynamic DNS record synchronizer
#  Copyright (C) 2026 Linodyn contributors
#
#  This program is free software: you can redistribute it and/or modify
#  it under the terms of the GNU General Public License as published by
#  the Free Software Foundation, either version 3 of the License, or
#  (at your option) any later version.
#
#  This program is distributed in the hope that it will be useful,
#  but WITHOUT ANY WARRANTY; without even the implied warranty of
#  MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
#  GNU General Public License for more details.
#
#  You should have received a copy of the GNU General Public License
#  along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""Decoder for the Linode API's response format

The API answers with a restricted JSON-like grammar::

    value  := object | array | string | number
    object := '{' [ string ':' value ( ',' string ':' value )* ] '}'
    array  := '[' [ value ( ',' value )* ] ']'
    string := '"' characters '"'
    number := '-'? digits ( '.' digits )?

Whitespace is allowed between tokens. Objects decode to
:class:`~requests.structures.CaseInsensitiveDict`, which preserves the key
casing the server sent while allowing lookups and comparisons in any casing
(the API is not consistent about key casing).
"""

from typing import Any, List, Tuple

from requests.structures import CaseInsensitiveDict

from .exceptions import MalformedResponse

_WHITESPACE = ' \t\r\n'

#: Deepest nesting of objects and arrays accepted in a response
MAX_DEPTH = 100

_ESCAPES = {
    '"': '"',
    '\\': '\\',
    '/': '/',
    'b': '\b',
    'f': '\f',
    'n': '\n',
    'r': '\r',
    't': '\t',
}


class ResponseDecoder:
    """Recursive descent decoder for a single response body

    :param text: The response body
    """

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.depth = 0

    def decode(self) -> Any:
        """Decode the whole body into a value tree

        :raises MalformedResponse: if the body is not exactly one well-formed
                                   value
        """
        value = self._value()
        self._skip_whitespace()
        if self.pos != len(self.text):
            self._fail("Unexpected trailing data")
        return value

    def _fail(self, message: str):
        raise MalformedResponse(f"{message} at offset {self.pos}", self.text)

    def _skip_whitespace(self):
        while self.pos < len(self.text) and self.text[self.pos] in _WHITESPACE:
            self.pos += 1

    def _peek(self) -> str:
        self._skip_whitespace()
        if self.pos >= len(self.text):
            self._fail("Unexpected end of input")
        return self.text[self.pos]

    def _expect(self, char: str):
        if self._peek() != char:
            self._fail(f"Expected '{char}'")
        self.pos += 1

    def _value(self) -> Any:
        char = self._peek()
        if char in '{[':
            self.depth += 1
            if self.depth > MAX_DEPTH:
                self._fail("Nesting too deep")
            value = self._object() if char == '{' else self._array()
            self.depth -= 1
            return value
        if char == '"':
            return self._string()
        if char == '-' or char.isdigit():
            return self._number()
        self._fail(f"Unexpected character {char!r}")

    def _object(self) -> CaseInsensitiveDict:
        self._expect('{')
        result: CaseInsensitiveDict = CaseInsensitiveDict()
        if self._peek() == '}':
            self.pos += 1
            return result
        while True:
            if self._peek() != '"':
                self._fail("Expected object key")
            key = self._string()
            self._expect(':')
            result[key] = self._value()
            if self._peek() == ',':
                self.pos += 1
                continue
            self._expect('}')
            return result

    def _array(self) -> List[Any]:
        self._expect('[')
        result: List[Any] = []
        if self._peek() == ']':
            self.pos += 1
            return result
        while True:
            result.append(self._value())
            if self._peek() == ',':
                self.pos += 1
                continue
            self._expect(']')
            return result

    def _string(self) -> str:
        self._expect('"')
        chars = []
        while True:
            if self.pos >= len(self.text):
                self._fail("Unterminated string")
            char = self.text[self.pos]
            self.pos += 1
            if char == '"':
                return ''.join(chars)
            if char == '\\':
                chars.append(self._escape())
            else:
                chars.append(char)

    def _escape(self) -> str:
        if self.pos >= len(self.text):
            self._fail("Unterminated escape")
        char = self.text[self.pos]
        self.pos += 1
        if char == 'u':
            digits = self.text[self.pos:self.pos + 4]
            try:
                code = int(digits, 16)
            except ValueError:
                code = -1
            if len(digits) != 4 or code < 0:
                self._fail("Invalid unicode escape")
            self.pos += 4
            return chr(code)
        try:
            return _ESCAPES[char]
        except KeyError:
            self._fail(f"Invalid escape '\\{char}'")

    def _number(self):
        start = self.pos
        if self.text[self.pos] == '-':
            self.pos += 1
        int_digits = self._digits()
        if int_digits == 0:
            self._fail("Expected digits")
        if self.pos < len(self.text) and self.text[self.pos] == '.':
            self.pos += 1
            if self._digits() == 0:
                self._fail("Expected digits after decimal point")
            return float(self.text[start:self.pos])
        return int(self.text[start:self.pos])

    def _digits(self) -> int:
        start = self.pos
        while (self.pos < len(self.text) and
               self.text[self.pos] in "0123456789"):
            self.pos += 1
        return self.pos - start


def decode(text: str) -> Any:
    """Decode a response body

    :param text: The response body
    :return: A tree of :class:`~requests.structures.CaseInsensitiveDict`,
             :class:`list`, :class:`str`, :class:`int`, and :class:`float`
    :raises MalformedResponse: if the body is not well formed
    """
    return ResponseDecoder(text).decode()


def error_messages(value: Any) -> Tuple[bool, List[str]]:
    """Pull the error messages out of a decoded response

    :param value: A decoded response
    :return: A tuple ``(has_errors, messages)``. ``has_errors`` is true if
             the response carries a non-empty ``ERRORARRAY``. ``messages``
             holds each entry's ``ERRORMESSAGE`` (or the entry itself, as a
             string, if it has none).
    """
    if not isinstance(value, CaseInsensitiveDict):
        return (False, [])
    errors = value.get('ERRORARRAY')
    if not isinstance(errors, list) or not errors:
        return (False, [])
    messages = []
    for entry in errors:
        if isinstance(entry, CaseInsensitiveDict) and 'ERRORMESSAGE' in entry:
            messages.append(str(entry['ERRORMESSAGE']))
        else:
            messages.append(str(entry))
    return (True, messages)
