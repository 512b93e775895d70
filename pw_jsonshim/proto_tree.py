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
"""This module defines the tree of message types in a .proto file."""

import abc
import collections
import enum
from typing import Iterator

from google.protobuf import descriptor_pb2

from pw_jsonshim.names import go_camel_case


class ProtoNode(abc.ABC):
    """A ProtoNode represents an entity declared in a .proto file.

    Nodes form a tree rooted at the file, descending into the hierarchy of
    messages declared within it and within each other.
    """

    class Type(enum.Enum):
        """The type of a ProtoNode.

        FILE is the root of the tree for a single .proto file.
        MESSAGE maps to a Go struct type.
        """

        FILE = 1
        MESSAGE = 2

    def __init__(self, name: str):
        self._name: str = name
        self._children: dict[str, 'ProtoNode'] = collections.OrderedDict()
        self._parent: 'ProtoNode | None' = None

    @abc.abstractmethod
    def type(self) -> 'ProtoNode.Type':
        """The type of the node."""

    def children(self) -> list['ProtoNode']:
        return list(self._children.values())

    def name(self) -> str:
        return self._name

    def parent(self) -> 'ProtoNode | None':
        return self._parent

    def relative_path(self) -> str:
        """Dotted path of the node below its file, e.g. Outer.Inner."""
        names = []
        node: 'ProtoNode | None' = self
        while node is not None and node.type() != ProtoNode.Type.FILE:
            names.append(node.name())
            node = node.parent()
        return '.'.join(reversed(names))

    def proto_path(self) -> str:
        """Fully-qualified package path of the node."""
        node: 'ProtoNode | None' = self
        while node is not None and node.type() != ProtoNode.Type.FILE:
            node = node.parent()

        package = node.package() if isinstance(node, ProtoFile) else ''
        parts = (package, self.relative_path())
        return '.'.join(part for part in parts if part)

    def add_child(self, child: 'ProtoNode') -> None:
        """Inserts a new node into the tree as a child of this node.

        Args:
          child: The node to insert.

        Raises:
          ValueError: This node does not allow nesting the given type of child.
        """
        if not self._supports_child(child):
            raise ValueError(
                'Invalid child %s for node of type %s'
                % (child.type(), self.type())
            )

        # pylint: disable=protected-access
        if child._parent is not None:
            del child._parent._children[child.name()]

        child._parent = self
        self._children[child.name()] = child
        # pylint: enable=protected-access

    def find(self, path: str) -> 'ProtoNode | None':
        """Finds a node within this node's subtree."""
        node = self

        # pylint: disable=protected-access
        for section in path.split('.'):
            child = node._children.get(section)
            if child is None:
                return None
            node = child
        # pylint: enable=protected-access

        return node

    def __iter__(self) -> Iterator['ProtoNode']:
        """Iterates depth-first through all nodes in this node's subtree."""
        yield self
        for child_iterator in self._children.values():
            yield from child_iterator

    @abc.abstractmethod
    def _supports_child(self, child: 'ProtoNode') -> bool:
        """Returns True if child is a valid child type for the current node."""


class ProtoFile(ProtoNode):
    """The root node for a single .proto file."""

    def __init__(self, name: str, package: str = ''):
        super().__init__(name)
        self._package = package

    def type(self) -> ProtoNode.Type:
        return ProtoNode.Type.FILE

    def package(self) -> str:
        return self._package

    def _supports_child(self, child: ProtoNode) -> bool:
        return child.type() == self.Type.MESSAGE


class ProtoMessage(ProtoNode):
    """Representation of a message in a .proto file."""

    def __init__(self, name: str, map_entry: bool = False):
        super().__init__(name)
        self._map_entry = map_entry

    def type(self) -> ProtoNode.Type:
        return ProtoNode.Type.MESSAGE

    def is_map_entry(self) -> bool:
        """True for the synthetic key/value message protoc creates for maps."""
        return self._map_entry

    def go_name(self) -> str:
        """The name of this message's struct type in generated Go code."""
        return go_camel_case(self.relative_path())

    def _supports_child(self, child: ProtoNode) -> bool:
        return child.type() == self.Type.MESSAGE


def shimmed_messages(node: ProtoNode) -> Iterator[ProtoMessage]:
    """Yields the messages that receive JSON methods, in pre-order.

    Map entry messages are skipped along with everything nested in them.
    """
    for child in node.children():
        if not isinstance(child, ProtoMessage) or child.is_map_entry():
            continue
        yield child
        yield from shimmed_messages(child)


def build_node_tree(
    file_descriptor_proto: descriptor_pb2.FileDescriptorProto,
) -> ProtoFile:
    """Creates a ProtoNode hierarchy from a proto file descriptor."""

    root = ProtoFile(file_descriptor_proto.name, file_descriptor_proto.package)

    def build_message_subtree(proto_message) -> ProtoMessage:
        node = ProtoMessage(
            proto_message.name, map_entry=proto_message.options.map_entry
        )
        for submessage in proto_message.nested_type:
            node.add_child(build_message_subtree(submessage))

        return node

    for message in file_descriptor_proto.message_type:
        root.add_child(build_message_subtree(message))

    return root
