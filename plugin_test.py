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
"""Tests the protoc plugin request handling."""

import io
import sys
from types import SimpleNamespace
import unittest
from unittest import mock

from google.protobuf import descriptor_pb2
from google.protobuf.compiler import plugin_pb2

from pw_jsonshim import plugin
from pw_jsonshim.go_package import PathType, PluginError


def _widgets_file() -> descriptor_pb2.FileDescriptorProto:
    proto_file = descriptor_pb2.FileDescriptorProto(
        name='protos/widgets.proto', package='example.widgets'
    )
    proto_file.dependency.append('protos/common.proto')
    proto_file.options.go_package = 'example.com/widgets;widgetspb'
    widget = proto_file.message_type.add(name='Widget')
    widget.nested_type.add(name='WidgetMeta')
    entry = widget.nested_type.add(name='LabelsEntry')
    entry.options.map_entry = True
    return proto_file


def _common_file() -> descriptor_pb2.FileDescriptorProto:
    # No go_package; generating this file would fail.
    proto_file = descriptor_pb2.FileDescriptorProto(
        name='protos/common.proto', package='example.common'
    )
    proto_file.message_type.add(name='Empty')
    return proto_file


def _request(parameter: str = '') -> plugin_pb2.CodeGeneratorRequest:
    request = plugin_pb2.CodeGeneratorRequest(parameter=parameter)
    request.file_to_generate.append('protos/widgets.proto')
    request.proto_file.extend([_common_file(), _widgets_file()])
    return request


class ParseParameterOptionsTest(unittest.TestCase):
    """Tests for plugin.parse_parameter_options."""

    def test_empty(self):
        options = plugin.parse_parameter_options('')
        self.assertIs(options.path_type, PathType.IMPORT)
        self.assertEqual(options.module, '')
        self.assertEqual(options.import_mappings, {})

    def test_all_parameters(self):
        options = plugin.parse_parameter_options(
            'paths=import,module=example.com,'
            'Mprotos/common.proto=example.com/common;commonpb,annotate_code'
        )
        self.assertIs(options.path_type, PathType.IMPORT)
        self.assertEqual(options.module, 'example.com')
        self.assertEqual(
            options.import_mappings,
            {'protos/common.proto': 'example.com/common;commonpb'},
        )

    def test_shared_go_parameters_ignored(self):
        options = plugin.parse_parameter_options(
            'plugins=grpc,paths=source_relative,annotate_code'
        )
        self.assertIs(options.path_type, PathType.SOURCE_RELATIVE)
        self.assertEqual(options.module, '')
        self.assertEqual(options.import_mappings, {})

    def test_source_relative(self):
        options = plugin.parse_parameter_options('paths=source_relative')
        self.assertIs(options.path_type, PathType.SOURCE_RELATIVE)

    def test_unknown_parameter(self):
        with self.assertRaisesRegex(PluginError, 'unknown parameter "foo"'):
            plugin.parse_parameter_options('foo=bar')

    def test_unknown_paths_value(self):
        with self.assertRaisesRegex(PluginError, 'paths'):
            plugin.parse_parameter_options('paths=absolute')

    def test_module_with_source_relative(self):
        with self.assertRaisesRegex(PluginError, 'cannot use module='):
            plugin.parse_parameter_options(
                'paths=source_relative,module=example.com'
            )


class ProcessProtoRequestTest(unittest.TestCase):
    """Tests for plugin.process_proto_request."""

    def test_generates_requested_files_only(self):
        response = plugin_pb2.CodeGeneratorResponse()
        self.assertTrue(plugin.process_proto_request(_request(), response))

        self.assertFalse(response.error)
        self.assertEqual(
            [f.name for f in response.file],
            ['example.com/widgets/widgets_json.gen.go'],
        )
        content = response.file[0].content
        self.assertIn('package widgetspb\n', content)
        self.assertIn('func (this *Widget) MarshalJSON()', content)
        self.assertIn('func (this *Widget_WidgetMeta) UnmarshalJSON(', content)
        self.assertNotIn('Widget_LabelsEntry', content)
        self.assertIn('WidgetsMarshaler', content)
        self.assertIn('WidgetsUnmarshaler', content)

    def test_parameters_applied(self):
        response = plugin_pb2.CodeGeneratorResponse()
        self.assertTrue(
            plugin.process_proto_request(
                _request('paths=source_relative'), response
            )
        )
        self.assertEqual(
            [f.name for f in response.file], ['protos/widgets_json.gen.go']
        )

    def test_plugins_parameter_does_not_fail_request(self):
        response = plugin_pb2.CodeGeneratorResponse()
        self.assertTrue(
            plugin.process_proto_request(
                _request('plugins=grpc,paths=source_relative'), response
            )
        )
        self.assertFalse(response.error)
        self.assertEqual(
            [f.name for f in response.file], ['protos/widgets_json.gen.go']
        )

    def test_multiple_files(self):
        request = _request('Mprotos/common.proto=example.com/common')
        request.file_to_generate.append('protos/common.proto')
        response = plugin_pb2.CodeGeneratorResponse()

        self.assertTrue(plugin.process_proto_request(request, response))
        self.assertEqual(
            [f.name for f in response.file],
            [
                'example.com/common/common_json.gen.go',
                'example.com/widgets/widgets_json.gen.go',
            ],
        )
        self.assertIn('CommonMarshaler', response.file[0].content)

    def test_unresolvable_file_reports_error(self):
        request = _request()
        request.file_to_generate.append('protos/common.proto')
        response = plugin_pb2.CodeGeneratorResponse()

        with self.assertLogs('pw_jsonshim.plugin', level='ERROR'):
            self.assertFalse(plugin.process_proto_request(request, response))
        self.assertIn('protos/common.proto', response.error)
        self.assertEqual(len(response.file), 0)

    def test_bad_parameter_reports_error(self):
        response = plugin_pb2.CodeGeneratorResponse()
        with self.assertLogs('pw_jsonshim.plugin', level='ERROR'):
            self.assertFalse(
                plugin.process_proto_request(_request('bogus'), response)
            )
        self.assertIn('bogus', response.error)
        self.assertEqual(len(response.file), 0)


class MainTest(unittest.TestCase):
    """Tests the stdin/stdout plugin entrypoint."""

    def _run_main(
        self, request: plugin_pb2.CodeGeneratorRequest
    ) -> plugin_pb2.CodeGeneratorResponse:
        stdin = SimpleNamespace(buffer=io.BytesIO(request.SerializeToString()))
        stdout = SimpleNamespace(buffer=io.BytesIO())
        with mock.patch.object(sys, 'stdin', stdin), mock.patch.object(
            sys, 'stdout', stdout
        ):
            self.assertEqual(plugin.main(), 0)

        return plugin_pb2.CodeGeneratorResponse.FromString(
            stdout.buffer.getvalue()
        )

    def test_main(self):
        response = self._run_main(_request())

        self.assertTrue(
            response.supported_features
            & plugin_pb2.CodeGeneratorResponse.FEATURE_PROTO3_OPTIONAL
        )
        self.assertEqual(len(response.file), 1)
        self.assertEqual(
            response.file[0].name, 'example.com/widgets/widgets_json.gen.go'
        )

    def test_main_error(self):
        with self.assertLogs('pw_jsonshim.plugin', level='ERROR'):
            response = self._run_main(_request('paths=nowhere'))

        self.assertTrue(response.error)
        self.assertEqual(len(response.file), 0)


if __name__ == '__main__':
    unittest.main()
