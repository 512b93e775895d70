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
"""Resolves the Go package and output file name for a .proto file.

These rules mirror the ones used by the official Go protobuf generators, so
the JSON shims land in the same Go package and directory as the generated
``.pb.go`` files they extend.
"""

from dataclasses import dataclass, field
import enum
import logging
import posixpath

from google.protobuf import descriptor_pb2

from pw_jsonshim.names import go_sanitized

_LOG = logging.getLogger(__name__)

GENERATED_FILE_SUFFIX = '_json.gen.go'

_PROTO_EXTENSIONS = ('.proto', '.protodevel')


class PluginError(Exception):
    """Raised for plugin parameters or inputs that cannot be handled."""


class PathType(enum.Enum):
    """How output file names are derived.

    IMPORT places each file in a directory named after its Go import path.
    SOURCE_RELATIVE places it beside the .proto file it was generated from.
    """

    IMPORT = 'import'
    SOURCE_RELATIVE = 'source_relative'


@dataclass
class GeneratorOptions:
    """Options passed to the plugin through the protoc parameter string."""

    path_type: PathType = PathType.IMPORT
    module: str = ''
    # Maps .proto file names to `M` parameter values ("path" or "path;name").
    import_mappings: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class GoPackage:
    """Go package identity of a single .proto file."""

    import_path: str
    package_name: str
    filename_prefix: str

    def generated_filename(self) -> str:
        return self.filename_prefix + GENERATED_FILE_SUFFIX


def split_go_package(go_package: str) -> tuple[str, str]:
    """Splits a go_package value into its import path and package name.

    The package name is only present when given explicitly after a ';', as in
    "example.com/foo/v1;foopb".
    """
    import_path, _, package_name = go_package.partition(';')
    return import_path, package_name


def _strip_proto_extension(proto_file_name: str) -> str:
    root, ext = posixpath.splitext(proto_file_name)
    if ext in _PROTO_EXTENSIONS:
        return root
    return proto_file_name


def resolve_go_package(
    proto_file: descriptor_pb2.FileDescriptorProto,
    options: GeneratorOptions,
) -> GoPackage:
    """Determines where the generated code for a .proto file belongs.

    Raises:
      PluginError: The Go import path is missing or invalid, or the output
          file falls outside of the configured module.
    """
    import_path, package_name = split_go_package(
        proto_file.options.go_package
    )

    mapped_path, mapped_name = split_go_package(
        options.import_mappings.get(proto_file.name, '')
    )
    if mapped_path:
        import_path = mapped_path
    if mapped_name:
        package_name = mapped_name

    if not import_path:
        raise PluginError(
            f'unable to determine Go import path for "{proto_file.name}"; '
            'specify a "go_package" option in the .proto source file or '
            f'an "M{proto_file.name}=<import path>" plugin parameter'
        )

    if '.' not in import_path and '/' not in import_path:
        raise PluginError(
            f'invalid Go import path "{import_path}" for '
            f'"{proto_file.name}"; the import path must contain at least '
            'one period (".") or forward slash ("/") character'
        )

    if not package_name:
        package_name = go_sanitized(posixpath.basename(import_path))

    prefix = _strip_proto_extension(proto_file.name)
    if options.path_type is PathType.IMPORT:
        prefix = posixpath.join(import_path, posixpath.basename(prefix))

    if options.module:
        module_prefix = options.module + '/'
        if not prefix.startswith(module_prefix):
            raise PluginError(
                f'{prefix}{GENERATED_FILE_SUFFIX}: generated file does not '
                f'match prefix "{options.module}"'
            )
        prefix = prefix[len(module_prefix) :]

    _LOG.debug(
        'Resolved %s to Go package %s (%s)',
        proto_file.name,
        package_name,
        import_path,
    )
    return GoPackage(import_path, package_name, prefix)
