"""Protobuf schema for Cortex/Loki storage chunks.

The message is built at runtime from a descriptor so no generated ``_pb2``
module has to be shipped. It mirrors ``cortexpb.Chunk``::

    message Chunk {
      int64 start_timestamp_ms = 1;
      int64 end_timestamp_ms = 2;
      int32 encoding = 3;
      bytes data = 4;
    }
"""

from functools import lru_cache

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

CHUNK_PACKAGE = "cortexpb"
CHUNK_MESSAGE = "Chunk"

_FIELDS = (
    ("start_timestamp_ms", 1, descriptor_pb2.FieldDescriptorProto.TYPE_INT64),
    ("end_timestamp_ms", 2, descriptor_pb2.FieldDescriptorProto.TYPE_INT64),
    ("encoding", 3, descriptor_pb2.FieldDescriptorProto.TYPE_INT32),
    ("data", 4, descriptor_pb2.FieldDescriptorProto.TYPE_BYTES),
)


def _chunk_file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="cortexpb/chunk.proto",
        package=CHUNK_PACKAGE,
        syntax="proto3",
    )
    message_proto = file_proto.message_type.add(name=CHUNK_MESSAGE)
    for name, number, field_type in _FIELDS:
        message_proto.field.add(
            name=name,
            number=number,
            type=field_type,
            label=descriptor_pb2.FieldDescriptorProto.LABEL_OPTIONAL,
        )
    return file_proto


@lru_cache(maxsize=1)
def chunk_message_class():
    """Return the generated message class for ``cortexpb.Chunk``.

    A private descriptor pool keeps this schema from clashing with any
    generated cortexpb module loaded into the default pool.
    """
    pool = descriptor_pool.DescriptorPool()
    pool.AddSerializedFile(_chunk_file_descriptor().SerializeToString())
    descriptor = pool.FindMessageTypeByName(f"{CHUNK_PACKAGE}.{CHUNK_MESSAGE}")
    return message_factory.GetMessageClass(descriptor)
