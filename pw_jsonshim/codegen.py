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
"""Generates Go JSON marshaling shims for protobuf messages.

For every message in a .proto file, a MarshalJSON and an UnmarshalJSON method
are emitted that delegate to jsonpb codecs shared by the whole file. This lets
the standard encoding/json package serialize generated protobuf types with
the canonical protobuf JSON mapping.
"""

import logging

from google.protobuf import descriptor_pb2

from pw_jsonshim.go_package import GeneratorOptions, GoPackage
from pw_jsonshim.go_package import resolve_go_package
from pw_jsonshim.names import file_name_prefix
from pw_jsonshim.output_file import OutputFile
from pw_jsonshim.proto_tree import ProtoFile, ProtoMessage, ProtoNode
from pw_jsonshim.proto_tree import build_node_tree, shimmed_messages

_LOG = logging.getLogger(__name__)

PLUGIN_NAME = 'protoc-gen-jsonshim'

_BYTES_PACKAGE = 'bytes'
_JSONPB_PACKAGE = 'github.com/golang/protobuf/jsonpb'


def marshaler_name(root: ProtoFile) -> str:
    return file_name_prefix(root.name()) + 'Marshaler'


def unmarshaler_name(root: ProtoFile) -> str:
    return file_name_prefix(root.name()) + 'Unmarshaler'


def generate_imports(has_messages: bool, output: OutputFile) -> None:
    """Imports the packages referenced by the generated code."""
    output.write_line('import (')
    with output.indent():
        if has_messages:
            output.write_line(f'bytes "{_BYTES_PACKAGE}"')
        output.write_line(f'jsonpb "{_JSONPB_PACKAGE}"')
    output.write_line(')')


def generate_code_for_message(
    message: ProtoMessage,
    root: ProtoFile,
    output: OutputFile,
) -> None:
    """Attaches MarshalJSON and UnmarshalJSON methods to a message type."""
    assert message.type() == ProtoNode.Type.MESSAGE

    type_name = message.go_name()
    _LOG.debug(
        'Generating JSON shims for %s as %s', message.proto_path(), type_name
    )

    output.write_line(f'// MarshalJSON is a custom marshaler for {type_name}')
    output.write_line(
        f'func (this *{type_name}) MarshalJSON() ([]byte, error) {{'
    )
    with output.indent():
        output.write_line(
            f'str, err := {marshaler_name(root)}.MarshalToString(this)'
        )
        output.write_line('return []byte(str), err')
    output.write_line('}')
    output.write_line()

    output.write_line(
        f'// UnmarshalJSON is a custom unmarshaler for {type_name}'
    )
    output.write_line(
        f'func (this *{type_name}) UnmarshalJSON(b []byte) error {{'
    )
    with output.indent():
        output.write_line(
            f'return {unmarshaler_name(root)}.Unmarshal('
            'bytes.NewReader(b), this)'
        )
    output.write_line('}')


def generate_codecs(root: ProtoFile, output: OutputFile) -> None:
    """Declares the jsonpb codecs shared by every message in the file.

    Unknown fields are ignored when decoding so that JSON produced by newer
    versions of a schema can still be read.
    """
    marshaler = marshaler_name(root)
    unmarshaler = unmarshaler_name(root)
    width = max(len(marshaler), len(unmarshaler))

    output.write_line('var (')
    with output.indent():
        output.write_line(f'{marshaler:<{width}} = &jsonpb.Marshaler{{}}')
        output.write_line(
            f'{unmarshaler:<{width}} = '
            '&jsonpb.Unmarshaler{AllowUnknownFields: true}'
        )
    output.write_line(')')


def generate_code_for_file(
    root: ProtoFile,
    go_package: GoPackage,
    output: OutputFile,
) -> None:
    """Generates the _json.gen.go file corresponding to a .proto file."""
    assert root.type() == ProtoNode.Type.FILE

    messages = list(shimmed_messages(root))

    output.write_line(f'// Code generated by {PLUGIN_NAME}. DO NOT EDIT.')
    output.write_line(f'package {go_package.package_name}')
    output.write_line()
    generate_imports(bool(messages), output)

    for message in messages:
        output.write_line()
        generate_code_for_message(message, root, output)

    output.write_line()
    generate_codecs(root, output)

    _LOG.debug(
        'Generated JSON shims for %d message(s) in %s',
        len(messages),
        root.name(),
    )


def process_proto_file(
    proto_file: descriptor_pb2.FileDescriptorProto,
    options: GeneratorOptions,
) -> OutputFile:
    """Generates code for a single .proto file.

    Raises:
      PluginError: The file's Go package could not be resolved.
    """
    go_package = resolve_go_package(proto_file, options)
    root = build_node_tree(proto_file)

    output_file = OutputFile(go_package.generated_filename())
    generate_code_for_file(root, go_package, output_file)

    return output_file
