"""Parse protobuf IDL text into ``FileDescriptorProto`` messages.

Parsing happens in two steps: the lark grammar in ``grammars/proto.lark``
produces a parse tree which ``_ProtoTransformer`` turns into the small AST
below, then ``_DescriptorBuilder`` lowers the AST into descriptor protos the
way protoc does (map entry messages, synthetic oneofs for proto3 ``optional``,
group messages, extension fields, option messages). Type references are kept as written; the descriptor pool
resolves them during linking.
"""

import logging
import re
from dataclasses import dataclass, field
from functools import cache
from pathlib import Path
from typing import Any

from google.protobuf.descriptor import FieldDescriptor
from google.protobuf.descriptor_pb2 import (
    DescriptorProto,
    EnumDescriptorProto,
    FieldDescriptorProto,
    FileDescriptorProto,
    ServiceDescriptorProto,
)
from google.protobuf.message import Message
from lark import Lark, Token, Transformer
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken, VisitError

from protolink.errors import SchemaParseError

logger = logging.getLogger(__name__)

_SCALAR_TYPES = {
    "double": FieldDescriptorProto.TYPE_DOUBLE,
    "float": FieldDescriptorProto.TYPE_FLOAT,
    "int64": FieldDescriptorProto.TYPE_INT64,
    "uint64": FieldDescriptorProto.TYPE_UINT64,
    "int32": FieldDescriptorProto.TYPE_INT32,
    "fixed64": FieldDescriptorProto.TYPE_FIXED64,
    "fixed32": FieldDescriptorProto.TYPE_FIXED32,
    "bool": FieldDescriptorProto.TYPE_BOOL,
    "string": FieldDescriptorProto.TYPE_STRING,
    "bytes": FieldDescriptorProto.TYPE_BYTES,
    "uint32": FieldDescriptorProto.TYPE_UINT32,
    "sfixed32": FieldDescriptorProto.TYPE_SFIXED32,
    "sfixed64": FieldDescriptorProto.TYPE_SFIXED64,
    "sint32": FieldDescriptorProto.TYPE_SINT32,
    "sint64": FieldDescriptorProto.TYPE_SINT64,
}

_MAP_KEY_TYPES = frozenset(_SCALAR_TYPES) - {"double", "float", "bytes"}

_LABELS = {
    "optional": FieldDescriptorProto.LABEL_OPTIONAL,
    "required": FieldDescriptorProto.LABEL_REQUIRED,
    "repeated": FieldDescriptorProto.LABEL_REPEATED,
}

_SYNTAXES = frozenset({"proto2", "proto3"})

# Upper bounds for "max" in reserved and extension ranges.
_MAX_FIELD_NUMBER = 536_870_911
_MAX_ENUM_NUMBER = 2_147_483_647

_ESCAPE_RE = re.compile(r"\\([xX][0-9A-Fa-f]{1,2}|[0-7]{1,3}|u[0-9A-Fa-f]{4}|U[0-9A-Fa-f]{8}|.)", re.DOTALL)
_SIMPLE_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "?": "?",
    "\\": "\\",
    "'": "'",
    '"': '"',
}


# ---------------------------------------------------------------------------
# AST
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Identifier:
    name: str


@dataclass(frozen=True)
class Aggregate:
    text: str


@dataclass
class ProtoOption:
    name: str
    value: Any
    custom: bool = False


@dataclass
class ProtoImport:
    path: str
    modifier: str | None = None


@dataclass
class ProtoPackage:
    name: str


@dataclass
class ProtoField:
    name: str
    number: int
    type: str
    label: str | None = None
    options: list[ProtoOption] = field(default_factory=list)


@dataclass
class ProtoMapField:
    name: str
    number: int
    key_type: str
    value_type: str
    options: list[ProtoOption] = field(default_factory=list)


@dataclass
class ProtoOneof:
    name: str
    fields: list[ProtoField] = field(default_factory=list)
    options: list[ProtoOption] = field(default_factory=list)


@dataclass
class ProtoReserved:
    ranges: list[tuple[int, int | None]] = field(default_factory=list)
    names: list[str] = field(default_factory=list)


@dataclass
class ProtoExtensions:
    ranges: list[tuple[int, int | None]]
    options: list[ProtoOption] = field(default_factory=list)


@dataclass
class ProtoEnumValue:
    name: str
    number: int
    options: list[ProtoOption] = field(default_factory=list)


@dataclass
class ProtoEnum:
    name: str
    elements: list[Any] = field(default_factory=list)


@dataclass
class ProtoMessage:
    name: str
    elements: list[Any] = field(default_factory=list)


@dataclass
class ProtoGroup:
    name: str
    number: int
    label: str
    elements: list[Any] = field(default_factory=list)
    options: list[ProtoOption] = field(default_factory=list)


@dataclass
class ProtoExtend:
    extendee: str
    elements: list[Any] = field(default_factory=list)


@dataclass
class ProtoMethod:
    name: str
    input_type: str
    output_type: str
    client_streaming: bool = False
    server_streaming: bool = False
    options: list[ProtoOption] = field(default_factory=list)


@dataclass
class ProtoService:
    name: str
    elements: list[Any] = field(default_factory=list)


@dataclass
class ProtoFile:
    syntax: str | None = None
    elements: list[Any] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Parse tree -> AST
# ---------------------------------------------------------------------------


def _parse_int(text: str) -> int:
    if text[:2] in ("0x", "0X"):
        return int(text[2:], 16)
    if len(text) > 1 and text.startswith("0"):
        return int(text, 8)
    return int(text)


def _unescape(match: re.Match[str]) -> str:
    escape = match.group(1)
    if escape[0] in "xX":
        return chr(int(escape[1:], 16))
    if escape[0] in "01234567":
        return chr(int(escape, 8))
    if escape[0] in "uU":
        return chr(int(escape[1:], 16))
    return _SIMPLE_ESCAPES.get(escape, escape)


def _split_sign(children: list[Any]) -> tuple[int, Token]:
    if len(children) == 2:
        return (-1 if children[0] == "-" else 1), children[1]
    return 1, children[0]


class _ProtoTransformer(Transformer):
    def start(self, children: list[Any]) -> ProtoFile:
        syntax = None
        if children and isinstance(children[0], tuple) and children[0][0] == "syntax":
            syntax = children.pop(0)[1]
        return ProtoFile(syntax=syntax, elements=children)

    def syntax_decl(self, children: list[Any]) -> tuple[str, str]:
        return ("syntax", children[0])

    def string_lit(self, children: list[Token]) -> str:
        return "".join(_ESCAPE_RE.sub(_unescape, str(token)[1:-1]) for token in children)

    def import_modifier(self, children: list[Token]) -> str:
        return str(children[0])

    def import_decl(self, children: list[Any]) -> ProtoImport:
        if len(children) == 2:
            return ProtoImport(path=children[1], modifier=children[0])
        return ProtoImport(path=children[0])

    def package_decl(self, children: list[str]) -> ProtoPackage:
        return ProtoPackage(name=children[0])

    def full_ident(self, children: list[Token]) -> str:
        return ".".join(str(token) for token in children if token != ".")

    def type_ref(self, children: list[Any]) -> str:
        return "".join(str(child) for child in children)

    def plain_option_name(self, children: list[str]) -> tuple[str, bool]:
        return children[0], False

    def custom_option_name(self, children: list[Any]) -> tuple[str, bool]:
        parts = [child for child in children if child != "."]
        name = f"({parts[0]})"
        if len(parts) == 2:
            name += f".{parts[1]}"
        return name, True

    def option_decl(self, children: list[Any]) -> ProtoOption:
        (name, custom), value = children
        return ProtoOption(name=name, value=value, custom=custom)

    field_option = option_decl

    def field_options(self, children: list[ProtoOption]) -> list[ProtoOption]:
        return list(children)

    def int_constant(self, children: list[Token]) -> int:
        sign, token = _split_sign(children)
        return sign * _parse_int(str(token))

    def float_constant(self, children: list[Token]) -> float:
        sign, token = _split_sign(children)
        return sign * float(str(token))

    def ident_constant(self, children: list[Token]) -> Any:
        sign, token = _split_sign(children)
        text = str(token)
        if text in ("inf", "nan"):
            return sign * float(text)
        if sign < 0:
            return Identifier(f"-{text}")
        if text == "true":
            return True
        if text == "false":
            return False
        return Identifier(text)

    def string_constant(self, children: list[str]) -> str:
        return children[0]

    def aggregate_constant(self, children: list[Token]) -> Aggregate:
        return Aggregate(str(children[0]))

    def field_label(self, children: list[Token]) -> str:
        return str(children[0])

    def field(self, children: list[Any]) -> ProtoField:
        options = children.pop() if isinstance(children[-1], list) else []
        label = children.pop(0) if len(children) == 4 else None
        type_name, name, number = children
        return ProtoField(
            name=str(name), number=_parse_int(str(number)), type=str(type_name), label=label, options=options
        )

    def group(self, children: list[Any]) -> ProtoGroup:
        label, name, number, *rest = children
        elements = rest.pop()
        return ProtoGroup(
            name=str(name),
            number=_parse_int(str(number)),
            label=label,
            elements=elements,
            options=rest[0] if rest else [],
        )

    def extend(self, children: list[Any]) -> ProtoExtend:
        return ProtoExtend(extendee=children[0], elements=list(children[1:]))

    def oneof_field(self, children: list[Any]) -> ProtoField:
        type_name, name, number, *rest = children
        options = rest[0] if rest else []
        return ProtoField(name=str(name), number=_parse_int(str(number)), type=str(type_name), options=options)

    def map_field(self, children: list[Any]) -> ProtoMapField:
        key_type, value_type, name, number, *rest = children
        return ProtoMapField(
            name=str(name),
            number=_parse_int(str(number)),
            key_type=str(key_type),
            value_type=str(value_type),
            options=rest[0] if rest else [],
        )

    def oneof(self, children: list[Any]) -> ProtoOneof:
        oneof = ProtoOneof(name=str(children[0]))
        for item in children[1:]:
            if isinstance(item, ProtoOption):
                oneof.options.append(item)
            else:
                oneof.fields.append(item)
        return oneof

    def range(self, children: list[Token]) -> tuple[int, int | None]:
        start = _parse_int(str(children[0]))
        if len(children) == 1:
            return start, start
        if children[1].type == "MAX":
            return start, None
        return start, _parse_int(str(children[1]))

    def ranges(self, children: list[tuple[int, int | None]]) -> list[tuple[int, int | None]]:
        return list(children)

    def reserved_names(self, children: list[Token]) -> list[str]:
        return [str(token)[1:-1] for token in children]

    def reserved(self, children: list[Any]) -> ProtoReserved:
        items = children[0]
        if items and isinstance(items[0], str):
            return ProtoReserved(names=items)
        return ProtoReserved(ranges=items)

    def extensions(self, children: list[Any]) -> ProtoExtensions:
        return ProtoExtensions(ranges=children[0], options=children[1] if len(children) > 1 else [])

    def message_body(self, children: list[Any]) -> list[Any]:
        return list(children)

    def message(self, children: list[Any]) -> ProtoMessage:
        return ProtoMessage(name=str(children[0]), elements=children[1])

    def enum_value(self, children: list[Any]) -> ProtoEnumValue:
        name = str(children[0])
        rest = children[1:]
        options: list[ProtoOption] = []
        if rest and isinstance(rest[-1], list):
            options = rest.pop()
        sign, token = _split_sign(rest)
        return ProtoEnumValue(name=name, number=sign * _parse_int(str(token)), options=options)

    def enum(self, children: list[Any]) -> ProtoEnum:
        return ProtoEnum(name=str(children[0]), elements=list(children[1:]))

    def rpc_type(self, children: list[Token]) -> tuple[str, bool]:
        return str(children[-1]), len(children) == 2

    def rpc_body(self, children: list[ProtoOption]) -> list[ProtoOption]:
        return list(children)

    def rpc(self, children: list[Any]) -> ProtoMethod:
        name, (input_type, client_streaming), (output_type, server_streaming), *rest = children
        return ProtoMethod(
            name=str(name),
            input_type=input_type,
            output_type=output_type,
            client_streaming=client_streaming,
            server_streaming=server_streaming,
            options=rest[0] if rest else [],
        )

    def service(self, children: list[Any]) -> ProtoService:
        return ProtoService(name=str(children[0]), elements=list(children[1:]))


# ---------------------------------------------------------------------------
# AST -> descriptors
# ---------------------------------------------------------------------------


def map_entry_name(field_name: str) -> str:
    """Name of the synthesized entry message for a map field, as protoc derives it."""
    parts: list[str] = []
    capitalize_next = True
    for char in field_name:
        if char == "_":
            capitalize_next = True
        elif capitalize_next:
            parts.append(char.upper())
            capitalize_next = False
        else:
            parts.append(char)
    return "".join(parts) + "Entry"


def _format_default(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Identifier):
        return value.name
    if isinstance(value, float):
        if value != value:
            return "nan"
        if value in (float("inf"), float("-inf")):
            return "inf" if value > 0 else "-inf"
    return str(value)


class _DescriptorBuilder:
    def __init__(self, path: str) -> None:
        self._path = path
        self._syntax = "proto2"

    def build(self, ast: ProtoFile) -> FileDescriptorProto:
        fdp = FileDescriptorProto(name=self._path)
        if ast.syntax is not None:
            if ast.syntax not in _SYNTAXES:
                self._fail(
                    f"Unrecognized syntax identifier {ast.syntax!r}. This parser only recognizes 'proto2' and 'proto3'."
                )
            self._syntax = ast.syntax
            fdp.syntax = ast.syntax

        for element in ast.elements:
            if isinstance(element, ProtoImport):
                if element.modifier == "public":
                    fdp.public_dependency.append(len(fdp.dependency))
                elif element.modifier == "weak":
                    fdp.weak_dependency.append(len(fdp.dependency))
                fdp.dependency.append(element.path)
            elif isinstance(element, ProtoPackage):
                if fdp.HasField("package"):
                    self._fail("Multiple package definitions.")
                fdp.package = element.name
            elif isinstance(element, ProtoOption):
                self._apply_option(fdp.options, element, "file")
            elif isinstance(element, ProtoMessage):
                self._build_message(fdp.message_type.add(), element)
            elif isinstance(element, ProtoEnum):
                self._build_enum(fdp.enum_type.add(), element)
            elif isinstance(element, ProtoService):
                self._build_service(fdp.service.add(), element)
            elif isinstance(element, ProtoExtend):
                self._build_extend(fdp.extension, fdp.message_type, element)
        return fdp

    def _build_message(self, target: DescriptorProto, message: ProtoMessage) -> None:
        target.name = message.name
        proto3_optional: list[FieldDescriptorProto] = []
        for element in message.elements:
            if isinstance(element, ProtoField):
                built = self._build_field(target.field.add(), element)
                if built.proto3_optional:
                    proto3_optional.append(built)
            elif isinstance(element, ProtoGroup):
                self._build_group(target.field, target.nested_type, element)
            elif isinstance(element, ProtoExtend):
                self._build_extend(target.extension, target.nested_type, element)
            elif isinstance(element, ProtoMapField):
                self._build_map_field(target, element)
            elif isinstance(element, ProtoOneof):
                oneof_index = len(target.oneof_decl)
                oneof_decl = target.oneof_decl.add(name=element.name)
                for option in element.options:
                    self._apply_option(oneof_decl.options, option, "oneof")
                for oneof_field in element.fields:
                    built = self._build_field(target.field.add(), oneof_field)
                    built.oneof_index = oneof_index
            elif isinstance(element, ProtoOption):
                self._apply_option(target.options, element, "message")
            elif isinstance(element, ProtoMessage):
                self._build_message(target.nested_type.add(), element)
            elif isinstance(element, ProtoEnum):
                self._build_enum(target.enum_type.add(), element)
            elif isinstance(element, ProtoReserved):
                target.reserved_name.extend(element.names)
                for start, end in element.ranges:
                    end = _MAX_FIELD_NUMBER if end is None else end
                    target.reserved_range.add(start=start, end=end + 1)
            elif isinstance(element, ProtoExtensions):
                for start, end in element.ranges:
                    end = _MAX_FIELD_NUMBER if end is None else end
                    extension_range = target.extension_range.add(start=start, end=end + 1)
                    for option in element.options:
                        self._apply_option(extension_range.options, option, "extension range")

        # Synthetic oneofs follow every declared oneof.
        for built in proto3_optional:
            built.oneof_index = len(target.oneof_decl)
            target.oneof_decl.add(name=f"_{built.name}")

    def _build_field(
        self, target: FieldDescriptorProto, proto_field: ProtoField, extendee: str | None = None
    ) -> FieldDescriptorProto:
        target.name = proto_field.name
        target.number = proto_field.number
        target.label = _LABELS.get(proto_field.label or "optional", FieldDescriptorProto.LABEL_OPTIONAL)
        if extendee is not None:
            target.extendee = extendee
        elif proto_field.label == "optional" and self._syntax == "proto3":
            target.proto3_optional = True
        self._set_type(target, proto_field.type)
        self._apply_field_options(target, proto_field.options)
        return target

    def _apply_field_options(self, target: FieldDescriptorProto, options: list[ProtoOption]) -> None:
        for option in options:
            if option.name == "json_name" and not option.custom:
                target.json_name = str(option.value)
            elif option.name == "default" and not option.custom:
                target.default_value = _format_default(option.value)
            else:
                self._apply_option(target.options, option, "field")

    def _build_group(
        self,
        fields: Any,
        nested_types: Any,
        group: ProtoGroup,
        extendee: str | None = None,
    ) -> None:
        """Lower a group into a nested message plus a ``TYPE_GROUP`` field named after it in lowercase."""
        if self._syntax == "proto3":
            self._fail(f"Groups are not supported in proto3 syntax (group {group.name!r}).")
        if not group.name[0].isupper():
            self._fail(f"Group names must start with a capital letter (group {group.name!r}).")

        self._build_message(nested_types.add(), ProtoMessage(name=group.name, elements=group.elements))
        target = fields.add(
            name=group.name.lower(),
            number=group.number,
            label=_LABELS[group.label],
            type=FieldDescriptorProto.TYPE_GROUP,
            type_name=group.name,
        )
        if extendee is not None:
            target.extendee = extendee
        self._apply_field_options(target, group.options)

    def _build_extend(self, fields: Any, nested_types: Any, extend: ProtoExtend) -> None:
        # Extension fields land next to the extend block; groups add their message to the same scope.
        for element in extend.elements:
            if isinstance(element, ProtoGroup):
                self._build_group(fields, nested_types, element, extendee=extend.extendee)
            else:
                self._build_field(fields.add(), element, extendee=extend.extendee)

    def _build_map_field(self, message: DescriptorProto, map_field: ProtoMapField) -> None:
        if map_field.key_type not in _MAP_KEY_TYPES:
            self._fail(f"Key in map fields cannot be {map_field.key_type!r} (field {map_field.name!r}).")

        entry = message.nested_type.add(name=map_entry_name(map_field.name))
        entry.options.map_entry = True
        key = entry.field.add(name="key", number=1, label=FieldDescriptorProto.LABEL_OPTIONAL)
        self._set_type(key, map_field.key_type)
        value = entry.field.add(name="value", number=2, label=FieldDescriptorProto.LABEL_OPTIONAL)
        self._set_type(value, map_field.value_type)

        target = message.field.add(
            name=map_field.name,
            number=map_field.number,
            label=FieldDescriptorProto.LABEL_REPEATED,
            type=FieldDescriptorProto.TYPE_MESSAGE,
            type_name=entry.name,
        )
        for option in map_field.options:
            if option.name == "json_name" and not option.custom:
                target.json_name = str(option.value)
            else:
                self._apply_option(target.options, option, "field")

    def _build_enum(self, target: EnumDescriptorProto, enum: ProtoEnum) -> None:
        target.name = enum.name
        for element in enum.elements:
            if isinstance(element, ProtoEnumValue):
                value = target.value.add(name=element.name, number=element.number)
                for option in element.options:
                    self._apply_option(value.options, option, "enum value")
            elif isinstance(element, ProtoOption):
                self._apply_option(target.options, element, "enum")
            elif isinstance(element, ProtoReserved):
                target.reserved_name.extend(element.names)
                for start, end in element.ranges:
                    target.reserved_range.add(start=start, end=_MAX_ENUM_NUMBER if end is None else end)

    def _build_service(self, target: ServiceDescriptorProto, service: ProtoService) -> None:
        target.name = service.name
        for element in service.elements:
            if isinstance(element, ProtoMethod):
                method = target.method.add(
                    name=element.name,
                    input_type=element.input_type,
                    output_type=element.output_type,
                )
                if element.client_streaming:
                    method.client_streaming = True
                if element.server_streaming:
                    method.server_streaming = True
                for option in element.options:
                    self._apply_option(method.options, option, "method")
            elif isinstance(element, ProtoOption):
                self._apply_option(target.options, element, "service")

    def _set_type(self, target: FieldDescriptorProto, type_name: str) -> None:
        scalar = _SCALAR_TYPES.get(type_name)
        if scalar is not None:
            target.type = scalar
        else:
            target.type_name = type_name

    def _apply_option(self, options: Message, option: ProtoOption, scope: str) -> None:
        if option.custom:
            logger.debug("Ignoring custom %s option %s in %s", scope, option.name, self._path)
            return

        descriptor = options.DESCRIPTOR.fields_by_name.get(option.name)
        if descriptor is None:
            self._fail(f"Option {option.name!r} unknown for {scope} options.")

        value = option.value
        if descriptor.enum_type is not None:
            name = value.name if isinstance(value, Identifier) else str(value)
            enum_value = descriptor.enum_type.values_by_name.get(name)
            if enum_value is None:
                self._fail(f"Value {name!r} is not valid for {scope} option {option.name!r}.")
            value = enum_value.number
        elif descriptor.type == FieldDescriptor.TYPE_BOOL and not isinstance(value, bool):
            self._fail(f"Value must be 'true' or 'false' for boolean {scope} option {option.name!r}.")
        elif isinstance(value, (Identifier, Aggregate)):
            self._fail(f"Value {value!r} is not valid for {scope} option {option.name!r}.")

        try:
            setattr(options, option.name, value)
        except (AttributeError, TypeError, ValueError) as e:
            raise SchemaParseError(
                f"Invalid value for {scope} option {option.name!r}: {e}", path=self._path
            ) from e

    def _fail(self, message: str) -> Any:
        raise SchemaParseError(message, path=self._path)


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def _load_grammar() -> str:
    grammar_path = Path(__file__).parent.parent / "grammars" / "proto.lark"
    if not grammar_path.exists():
        raise FileNotFoundError(f"Grammar file not found: {grammar_path}")
    return grammar_path.read_text(encoding="utf-8")


@cache
def get_parser() -> Lark:
    return Lark(_load_grammar(), parser="lalr", maybe_placeholders=False)


def _describe(error: UnexpectedInput) -> str:
    if isinstance(error, UnexpectedToken):
        if error.token.type == "$END":
            return "Unexpected end of input"
        expected = ", ".join(sorted(error.expected))
        return f"Unexpected token {str(error.token)!r}, expected one of: {expected}"
    if isinstance(error, UnexpectedCharacters):
        return f"Unexpected character {error.char!r}"
    if isinstance(error, UnexpectedEOF):
        return "Unexpected end of input"
    return str(error)


def parse_proto_ast(text: str, path: str = "<schema>") -> ProtoFile:
    try:
        tree = get_parser().parse(text)
    except UnexpectedInput as e:
        line = e.line if isinstance(e.line, int) and e.line > 0 else None
        column = e.column if isinstance(e.column, int) and e.column > 0 else None
        raise SchemaParseError(_describe(e), path=path, line=line, column=column) from None
    try:
        return _ProtoTransformer().transform(tree)
    except VisitError as e:
        raise SchemaParseError(f"Malformed schema: {e.orig_exc}", path=path) from e.orig_exc


def parse_proto(text: str, path: str = "<schema>") -> FileDescriptorProto:
    """Parse ``.proto`` source into an unlinked ``FileDescriptorProto`` named ``path``."""
    ast = parse_proto_ast(text, path)
    fdp = _DescriptorBuilder(path).build(ast)
    logger.debug(
        "Parsed %s: %d messages, %d enums, %d services, %d imports",
        path,
        len(fdp.message_type),
        len(fdp.enum_type),
        len(fdp.service),
        len(fdp.dependency),
    )
    return fdp
