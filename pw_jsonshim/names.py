# Copyright 2026 The Pigweed Authors
#
# Licensed under the Apache License, Version 2.0 (the "License"); you may not
# use this file except in compliance with the License. You may obtain a copy of
# the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
# WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
# License for the specific language governing permissions and limitations under
# the License.
"""Identifier transforms used to name generated Go symbols.

The generated code for a ``.proto`` file declares two file-scoped codec
variables whose names are derived from the file's base name. For example,
``foo/my-widgets.proto`` produces ``MyWidgetsMarshaler`` and
``MyWidgetsUnmarshaler``. These transforms operate on ASCII only; there is no
locale-aware case folding.
"""

import posixpath

PROTO_EXTENSION = '.proto'

# Go reserved words, which cannot be used as package names.
_GO_KEYWORDS = frozenset(
    (
        'break',
        'case',
        'chan',
        'const',
        'continue',
        'default',
        'defer',
        'else',
        'fallthrough',
        'for',
        'func',
        'go',
        'goto',
        'if',
        'import',
        'interface',
        'map',
        'package',
        'range',
        'return',
        'select',
        'struct',
        'switch',
        'type',
        'var',
    )
)


def _is_ascii_lower(char: str) -> bool:
    return 'a' <= char <= 'z'


def _is_ascii_digit(char: str) -> bool:
    return '0' <= char <= '9'


def camel_case(name: str) -> str:
    """Converts a snake_case identifier to CamelCase.

    An interior underscore followed by a lowercase letter is dropped and the
    letter is capitalized. Words are delimited by underscores or uppercase
    letters; runs of digits are treated as words of their own. A leading
    underscore is replaced by ``X`` so that the result starts with a capital
    letter. For example, ``_my_field_name_2`` becomes ``XMyFieldName_2``.

    Two distinct inputs can in theory map to the same output. Since proto
    identifiers are conventionally lowercase, this is not guarded against.
    """
    if not name:
        return ''

    result: list[str] = []
    i = 0
    if name[0] == '_':
        result.append('X')
        i += 1

    while i < len(name):
        char = name[i]
        if char == '_' and i + 1 < len(name) and _is_ascii_lower(name[i + 1]):
            i += 1
            continue

        if _is_ascii_digit(char):
            result.append(char)
            i += 1
            continue

        # Anything else starts a word, whether or not it is a letter.
        if _is_ascii_lower(char):
            char = char.upper()
        result.append(char)

        while i + 1 < len(name) and _is_ascii_lower(name[i + 1]):
            i += 1
            result.append(name[i])
        i += 1

    return ''.join(result)


def go_camel_case(name: str) -> str:
    """Converts a dotted, package-relative proto name to a Go identifier.

    This is camel_case extended to nested names: a dot before a lowercase
    letter is dropped, any other dot becomes an underscore, and an underscore
    at the start of a name component becomes ``X``. A nested message
    ``Widget.LabelsEntry`` is therefore named ``Widget_LabelsEntry``.
    """
    result: list[str] = []
    i = 0
    while i < len(name):
        char = name[i]
        if char == '.' and i + 1 < len(name) and _is_ascii_lower(name[i + 1]):
            pass
        elif char == '.':
            result.append('_')
        elif char == '_' and (i == 0 or name[i - 1] == '.'):
            result.append('X')
        elif (
            char == '_' and i + 1 < len(name) and _is_ascii_lower(name[i + 1])
        ):
            pass
        elif _is_ascii_digit(char):
            result.append(char)
        else:
            if _is_ascii_lower(char):
                char = char.upper()
            result.append(char)

            while i + 1 < len(name) and _is_ascii_lower(name[i + 1]):
                i += 1
                result.append(name[i])
        i += 1

    return ''.join(result)


def go_sanitized(name: str) -> str:
    """Converts an arbitrary string into a valid Go package name."""
    sanitized = ''.join(
        char if char.isalpha() or char.isdigit() else '_' for char in name
    )
    if (
        not sanitized
        or sanitized in _GO_KEYWORDS
        or not sanitized[0].isalpha()
    ):
        return '_' + sanitized
    return sanitized


def file_name_prefix(proto_file_name: str) -> str:
    """Derives the codec variable prefix for a .proto file.

    Only the last path component is used. Every occurrence of ``.proto`` is
    removed, not just a trailing one, so ``a.proto.v2.proto`` yields
    ``AV2``. Hyphens and any remaining dots become underscores before the
    result is passed through camel_case.
    """
    if not proto_file_name:
        return ''

    name = posixpath.basename(proto_file_name.rstrip('/'))
    name = name.replace(PROTO_EXTENSION, '')
    name = name.replace('-', '_')
    name = name.replace('.', '_')
    return camel_case(name)
