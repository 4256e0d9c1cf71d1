from __future__ import annotations

from pathlib import Path

import pytest

protoc = pytest.importorskip("grpc_tools.protoc")
descriptor_pb2 = pytest.importorskip("google.protobuf.descriptor_pb2")

from protoschema import Enum, Label, Message, ProtoFile, parse_file  # noqa: E402


DEP_PROTO = """\
syntax = "proto2";

package parity.dep;

message Shared {
  optional string id = 1;
}
"""

DEMO_PROTO = """\
syntax = "proto2";

package parity.demo;

import "parity/dep.proto";

option java_package = "com.example.parity";

// A search request.
message Request {
  required string query = 1;
  optional int32 page = 2 [default = 10];
  repeated int32 ids = 3 [packed = true];
  optional Kind kind = 4 [default = FAST];
  optional parity.dep.Shared shared = 5;
  optional Inner inner = 0x10;

  message Inner {
    optional bool flag = 1 [deprecated = true];
  }

  enum Kind {
    option allow_alias = true;
    FAST = 1;
    QUICK = 1;
    SLOW = 2;
  }

  extensions 100 to 199, 500;
  extensions 1000 to max;
}

message Response {
  repeated Request.Inner items = 1;
}

extend Request {
  optional string note = 100;
}

service Search {
  rpc Find (Request) returns (Response);
  rpc Slow (Request) returns (Response) {
    option deprecated = true;
  }
}
"""

_LABELS = {
    Label.OPTIONAL: descriptor_pb2.FieldDescriptorProto.LABEL_OPTIONAL,
    Label.REQUIRED: descriptor_pb2.FieldDescriptorProto.LABEL_REQUIRED,
    Label.REPEATED: descriptor_pb2.FieldDescriptorProto.LABEL_REPEATED,
}


@pytest.fixture
def fixture_root(tmp_path: Path) -> Path:
    (tmp_path / "parity").mkdir()
    (tmp_path / "parity" / "dep.proto").write_text(DEP_PROTO, encoding="utf-8")
    (tmp_path / "parity" / "demo.proto").write_text(DEMO_PROTO, encoding="utf-8")
    return tmp_path


def _compile_with_grpc_tools(root: Path, rel: str) -> descriptor_pb2.FileDescriptorProto:
    out = root / "out.pb"
    args = [
        "protoc",
        f"-I{root}",
        "--include_imports",
        f"--descriptor_set_out={out}",
        rel,
    ]
    # grpc_tools.protoc returns an exit code (0 success).
    rc = protoc.main(args)
    if rc != 0:
        raise AssertionError(f"grpc_tools.protoc failed for {rel} with rc={rc}")
    fds = descriptor_pb2.FileDescriptorSet()
    fds.ParseFromString(out.read_bytes())
    fd = next((f for f in fds.file if f.name == rel), None)
    assert fd is not None, f"missing {rel} in descriptor set"
    return fd


def _assert_message(ours: Message, truth: descriptor_pb2.DescriptorProto) -> None:
    assert ours.name == truth.name
    assert [(f.name, f.tag, _LABELS[f.label]) for f in ours.fields] == [
        (f.name, f.number, f.label) for f in truth.field
    ]
    for of, tf in zip(ours.fields, truth.field):
        assert of.deprecated == tf.options.deprecated
        assert of.packed == tf.options.packed
        if tf.HasField("default_value"):
            assert str(of.default) == tf.default_value
        else:
            assert of.default is None

    # Descriptor ranges are end-exclusive.
    assert [(e.start, e.end + 1) for e in ours.extensions] == [(r.start, r.end) for r in truth.extension_range]

    nested_messages = [t for t in ours.nested_types if isinstance(t, Message)]
    nested_enums = [t for t in ours.nested_types if isinstance(t, Enum)]
    assert [m.name for m in nested_messages] == [m.name for m in truth.nested_type]
    for om, tm in zip(nested_messages, truth.nested_type):
        _assert_message(om, tm)
    assert [e.name for e in nested_enums] == [e.name for e in truth.enum_type]
    for oe, te in zip(nested_enums, truth.enum_type):
        _assert_enum(oe, te)


def _assert_enum(ours: Enum, truth: descriptor_pb2.EnumDescriptorProto) -> None:
    assert [(v.name, v.tag) for v in ours.values] == [(v.name, v.number) for v in truth.value]
    assert ours.allow_alias == truth.options.allow_alias


def test_parity_with_descriptor_set(fixture_root: Path) -> None:
    rel = "parity/demo.proto"
    ours: ProtoFile = parse_file(fixture_root / rel)
    truth = _compile_with_grpc_tools(fixture_root, rel)

    assert ours.package_name == truth.package
    assert list(ours.dependencies) == list(truth.dependency)
    assert truth.options.java_package == "com.example.parity"

    messages = [t for t in ours.types if isinstance(t, Message)]
    assert [m.name for m in messages] == [m.name for m in truth.message_type]
    for om, tm in zip(messages, truth.message_type):
        _assert_message(om, tm)
    assert messages[0].fqname == "parity.demo.Request"
    assert messages[0].fields[5].tag == 16

    ext_fields = [(e.fqname, f) for e in ours.extend_declarations for f in e.fields]
    assert [("." + fq, f.name, f.tag) for fq, f in ext_fields] == [
        (e.extendee, e.name, e.number) for e in truth.extension
    ]

    (svc,) = ours.services
    (tsvc,) = truth.service
    assert svc.name == tsvc.name
    for rpc, method in zip(svc.rpcs, tsvc.method, strict=True):
        assert rpc.name == method.name
        assert method.input_type.endswith("." + rpc.request_type)
        assert method.output_type.endswith("." + rpc.response_type)
        assert any(o.name == "deprecated" for o in rpc.options) == method.options.deprecated
