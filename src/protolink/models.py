from dataclasses import dataclass

from google.protobuf import message_factory
from google.protobuf.descriptor import Descriptor, FieldDescriptor, FileDescriptor
from google.protobuf.descriptor_pb2 import DescriptorProto, FieldDescriptorProto, FileDescriptorProto
from pydantic import BaseModel, ConfigDict, Field, field_validator

from protolink.core.linker import PROTO_SUFFIX, Schema


class SchemaLoadRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    package_name: str | None = None
    file_name: str
    schema_text: str

    @field_validator("package_name")
    @classmethod
    def _blank_package_is_absent(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value

    @field_validator("file_name")
    @classmethod
    def _file_name_is_plain(cls, value: str) -> str:
        if not value or "/" in value or value in (".", ".."):
            raise ValueError(f"file name must be a single path component, got {value!r}")
        return value

    @property
    def normalized_file_name(self) -> str:
        if self.file_name.endswith(PROTO_SUFFIX):
            return self.file_name
        return self.file_name + PROTO_SUFFIX

    @property
    def package_segments(self) -> list[str]:
        if self.package_name is None:
            return []
        return self.package_name.split(".")

    @property
    def target_directory(self) -> str:
        return "/" + "/".join(self.package_segments)

    @property
    def target_path(self) -> str:
        return f"{self.target_directory.rstrip('/')}/{self.normalized_file_name}"

    @property
    def schema_path(self) -> str:
        """``target_path`` in the linker's convention, without the leading separator."""
        return self.target_path.replace("/", "", 1)


class FieldSummary(BaseModel):
    name: str
    number: int
    type: str
    label: str


class MessageSummary(BaseModel):
    full_name: str
    fields: list[FieldSummary] = Field(default_factory=list)
    nested: list["MessageSummary"] = Field(default_factory=list)


MessageSummary.model_rebuild()  # necessary for recursive types


class EnumSummary(BaseModel):
    full_name: str
    values: dict[str, int] = Field(default_factory=dict)


class ServiceSummary(BaseModel):
    full_name: str
    methods: list[str] = Field(default_factory=list)


class ProtoFileSummary(BaseModel):
    path: str
    package: str
    syntax: str
    dependencies: list[str] = Field(default_factory=list)
    messages: list[MessageSummary] = Field(default_factory=list)
    enums: list[EnumSummary] = Field(default_factory=list)
    services: list[ServiceSummary] = Field(default_factory=list)
    linked_files: list[str] = Field(default_factory=list)


_TYPE_NAMES = {value: name.removeprefix("TYPE_").lower() for name, value in FieldDescriptorProto.Type.items()}
_LABEL_NAMES = {value: name.removeprefix("LABEL_").lower() for name, value in FieldDescriptorProto.Label.items()}


def _summarize_field(descriptor: FieldDescriptor, proto: FieldDescriptorProto) -> FieldSummary:
    # Labels and declared types are read from the descriptor proto, which keeps them on every runtime.
    if descriptor.message_type is not None:
        type_name = descriptor.message_type.full_name
    elif descriptor.enum_type is not None:
        type_name = descriptor.enum_type.full_name
    else:
        type_name = _TYPE_NAMES.get(proto.type, str(proto.type))
    return FieldSummary(
        name=descriptor.name,
        number=descriptor.number,
        type=type_name,
        label=_LABEL_NAMES.get(proto.label, "optional"),
    )


def _summarize_message(descriptor: Descriptor) -> MessageSummary:
    message_proto = DescriptorProto()
    descriptor.CopyToProto(message_proto)
    field_protos = {f.name: f for f in message_proto.field}
    return MessageSummary(
        full_name=descriptor.full_name,
        fields=[_summarize_field(f, field_protos[f.name]) for f in descriptor.fields],
        nested=[_summarize_message(nested) for nested in descriptor.nested_types if not nested.GetOptions().map_entry],
    )


@dataclass(frozen=True)
class SchemaLoadResult:
    """A linked schema together with the file that was requested."""

    schema: Schema
    proto_file: FileDescriptor

    @property
    def path(self) -> str:
        return self.proto_file.name

    @property
    def package(self) -> str:
        return self.proto_file.package

    @property
    def syntax(self) -> str:
        fdp = FileDescriptorProto()
        self.proto_file.CopyToProto(fdp)
        return fdp.syntax or "proto2"

    def message_type(self, name: str) -> Descriptor:
        """Look up a message by full name, or by a name relative to the file's package."""
        top_level = self.proto_file.message_types_by_name.get(name)
        if top_level is not None:
            return top_level
        candidates = [name]
        if self.package:
            candidates.insert(0, f"{self.package}.{name}")
        for candidate in candidates:
            try:
                return self.schema.find_message_type(candidate)
            except KeyError:
                continue
        raise KeyError(f"Message type {name!r} not found in {self.path}")

    def message_class(self, name: str) -> type:
        """Dynamic message class for ``name``, usable to encode and decode payloads."""
        return message_factory.GetMessageClass(self.message_type(name))

    def summary(self) -> ProtoFileSummary:
        return ProtoFileSummary(
            path=self.path,
            package=self.package,
            syntax=self.syntax,
            dependencies=[dependency.name for dependency in self.proto_file.dependencies],
            messages=[_summarize_message(m) for m in self.proto_file.message_types_by_name.values()],
            enums=[
                EnumSummary(full_name=e.full_name, values={v.name: v.number for v in e.values})
                for e in self.proto_file.enum_types_by_name.values()
            ],
            services=[
                ServiceSummary(full_name=s.full_name, methods=[m.name for m in s.methods])
                for s in self.proto_file.services_by_name.values()
            ],
            linked_files=self.schema.paths,
        )
