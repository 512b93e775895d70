#!/usr/bin/env python3
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
"""protoc-gen-jsonshim compiler plugin.

This file implements a protobuf compiler plugin which generates Go
MarshalJSON/UnmarshalJSON methods for protobuf messages, backed by jsonpb.

Example:

  protoc --jsonshim_out=paths=source_relative:out widgets.proto
"""

import logging
from shlex import shlex
import sys

from google.protobuf.compiler import plugin_pb2

from pw_jsonshim import codegen
from pw_jsonshim.go_package import GeneratorOptions, PathType, PluginError

_LOG = logging.getLogger(__name__)

# Parameters accepted for compatibility with other Go generators but unused.
_IGNORED_PARAMETERS = frozenset(('annotate_code', 'plugins'))


def parse_parameter_options(parameter: str) -> GeneratorOptions:
    """Parses parameters passed through from protoc.

    These parameters come in via passing `--jsonshim_opt` or a prefix on
    `--jsonshim_out` to protoc, as comma-separated `key=value` pairs.

    Raises:
      PluginError: A parameter is unknown or has an invalid value.
    """
    # protoc passes the custom arguments in shell quoted form, separated by
    # commas. Use shlex to split them, correctly handling quoted sections, with
    # equivalent options to IFS=","
    lex = shlex(parameter)
    lex.whitespace_split = True
    lex.whitespace = ','
    lex.commenters = ''

    options = GeneratorOptions()
    for arg in lex:
        key, _, value = arg.partition('=')

        if key.startswith('M') and len(key) > 1:
            options.import_mappings[key[1:]] = value
        elif key == 'paths':
            try:
                options.path_type = PathType(value)
            except ValueError:
                raise PluginError(
                    f'unknown value for "paths" parameter: "{value}"'
                ) from None
        elif key == 'module':
            options.module = value
        elif key in _IGNORED_PARAMETERS:
            _LOG.debug('Ignoring parameter %s', arg)
        else:
            raise PluginError(f'unknown parameter "{key}"')

    if options.module and options.path_type is PathType.SOURCE_RELATIVE:
        raise PluginError('cannot use module= with paths=source_relative')

    return options


def process_proto_request(
    req: plugin_pb2.CodeGeneratorRequest, res: plugin_pb2.CodeGeneratorResponse
) -> bool:
    """Handles a protoc CodeGeneratorRequest message.

    Generates code for the files in the request and writes the output to the
    specified CodeGeneratorResponse message. Files which are only present as
    dependencies of the requested files are not generated.

    Args:
      req: A CodeGeneratorRequest for a proto compilation.
      res: A CodeGeneratorResponse to populate with the plugin's output.

    Returns:
      False if the request could not be handled, in which case res.error
      describes the problem and no files are added to res.
    """
    files_to_generate = set(req.file_to_generate)

    try:
        options = parse_parameter_options(req.parameter)
        output_files = []
        for proto_file in req.proto_file:
            if proto_file.name not in files_to_generate:
                _LOG.debug('Skipping dependency %s', proto_file.name)
                continue

            output_files.append(codegen.process_proto_file(proto_file, options))
    except PluginError as err:
        _LOG.error('%s', err)
        res.error = str(err)
        return False

    for output_file in output_files:
        fd = res.file.add()
        fd.name = output_file.name()
        fd.content = output_file.content()

    return True


def main() -> int:
    """Protobuf compiler plugin entrypoint.

    Reads a CodeGeneratorRequest proto from stdin and writes a
    CodeGeneratorResponse to stdout.
    """
    # protoc captures stdout, so logs must go to stderr.
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.WARNING,
        format=f'{codegen.PLUGIN_NAME}: %(levelname)s: %(message)s',
    )

    data = sys.stdin.buffer.read()
    request = plugin_pb2.CodeGeneratorRequest.FromString(data)
    response = plugin_pb2.CodeGeneratorResponse()

    # Declare that this plugin supports optional fields in proto3.
    response.supported_features |= (  # type: ignore[attr-defined]
        response.FEATURE_PROTO3_OPTIONAL
    )  # type: ignore[attr-defined]

    # Errors are reported to protoc through the response, not the exit status.
    process_proto_request(request, response)

    sys.stdout.buffer.write(response.SerializeToString())
    return 0


if __name__ == '__main__':
    sys.exit(main())
