"""Recursive-descent parser turning WebIDL text into ``Definition`` trees."""

from __future__ import annotations

from .constants import GENERIC_TYPES
from .idl_ast import (
    Argument,
    DefaultValue,
    Definition,
    ExtendedAttribute,
    IdlType,
    SourceLocation,
)
from .idl_lexer import IdlSyntaxError, Token, _format_context, tokenize

_ITERABLE_LIKE = ("iterable", "maplike", "setlike")
_SPECIALS = ("getter", "setter", "deleter")


def parse(text: str, source_name: str = "") -> list[Definition]:
    return _Parser(text, source_name).parse()


class _Parser:
    def __init__(self, text: str, source_name: str) -> None:
        self.text = text
        self.source_name = source_name
        self.lines = text.splitlines()
        self.tokens: list[Token] = []
        self.position = 0
        self._comments: dict[int, list[str]] = {}

        pending: list[str] = []
        for token in tokenize(text, source_name):
            if token.kind == "comment":
                pending.append(token.value)
                continue
            if pending:
                self._comments[len(self.tokens)] = pending
                pending = []
            self.tokens.append(token)

    # token helpers

    def _peek(self, offset: int = 0) -> Token:
        index = min(self.position + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def _advance(self) -> Token:
        token = self._peek()
        if token.kind != "eof":
            self.position += 1
        return token

    def _probe(self, value: str) -> bool:
        token = self._peek()
        return token.kind != "string" and token.value == value

    def _consume(self, *values: str) -> Token | None:
        token = self._peek()
        if token.kind != "string" and token.value in values:
            return self._advance()
        return None

    def _consume_kind(self, *kinds: str) -> Token | None:
        if self._peek().kind in kinds:
            return self._advance()
        return None

    def _expect(self, value: str, message: str) -> Token:
        token = self._consume(value)
        if token is None:
            self._error(message)
        return token

    def _identifier(self, message: str) -> str:
        token = self._consume_kind("identifier")
        if token is None:
            self._error(message)
        return token.value

    def _error(self, message: str) -> None:
        token = self._peek()
        raise IdlSyntaxError(
            message,
            line=token.line,
            context=_format_context(self.text, token.line, token.position),
            source_name=self.source_name,
        )

    def _location(self, token: Token) -> SourceLocation:
        line_text = ""
        if 0 < token.line <= len(self.lines):
            line_text = self.lines[token.line - 1]
        return SourceLocation(self.source_name, token.line, line_text)

    def _take_comments(self) -> list[str]:
        return self._comments.pop(self.position, [])

    # definitions

    def parse(self) -> list[Definition]:
        definitions: list[Definition] = []
        while self._peek().kind != "eof":
            comments = self._take_comments()
            ext_attrs = self._extended_attributes()
            definition = self._definition()
            definition.ext_attrs = ext_attrs
            definition.comments = comments
            definitions.append(definition)
        return definitions

    def _definition(self) -> Definition:
        start = self._peek()
        if self._consume("callback"):
            if self._consume("interface"):
                return self._container("callback interface", start)
            return self._callback_function(start)
        if self._consume("interface"):
            if self._consume("mixin"):
                return self._container("interface mixin", start)
            return self._container("interface", start)
        if self._consume("partial"):
            if self._consume("interface"):
                if self._consume("mixin"):
                    return self._container("interface mixin", start, partial=True)
                return self._container("interface", start, partial=True)
            if self._consume("dictionary"):
                return self._dictionary(start, partial=True)
            if self._consume("namespace"):
                return self._container("namespace", start, partial=True)
            self._error("Partial doesn't apply to anything")
        if self._consume("dictionary"):
            return self._dictionary(start)
        if self._consume("namespace"):
            return self._container("namespace", start)
        if self._consume("enum"):
            return self._enum(start)
        if self._consume("typedef"):
            return self._typedef(start)
        if start.kind == "identifier" and self._peek(1).value == "includes":
            return self._includes(start)
        self._error("Unrecognised tokens")

    def _container(
        self, type_: str, start: Token, partial: bool = False
    ) -> Definition:
        name = self._identifier(f"Missing name in {type_}")
        inheritance = ""
        if self._consume(":"):
            inheritance = self._identifier(f"Inheritance lacks a type in {type_}")
        self._expect("{", f"Bodyless {type_}")
        members: list[Definition] = []
        while not self._consume("}"):
            if self._peek().kind == "eof":
                self._error(f"Missing closing bracket in {type_}")
            members.append(self._member())
        self._expect(";", f"Missing semicolon after {type_}")
        return Definition(
            type=type_,
            name=name,
            partial=partial,
            inheritance=inheritance,
            members=members,
            location=self._location(start),
        )

    def _dictionary(self, start: Token, partial: bool = False) -> Definition:
        name = self._identifier("Missing name in dictionary")
        inheritance = ""
        if self._consume(":"):
            inheritance = self._identifier("Inheritance lacks a type in dictionary")
        self._expect("{", "Bodyless dictionary")
        fields: list[Definition] = []
        while not self._consume("}"):
            if self._peek().kind == "eof":
                self._error("Missing closing bracket in dictionary")
            comments = self._take_comments()
            ext_attrs = self._extended_attributes()
            field_start = self._peek()
            required = bool(self._consume("required"))
            idl_type = self._type("dictionary-type")
            field_name = self._identifier("Dictionary member lacks a name")
            default = None
            if self._consume("="):
                default = self._default_value()
            self._expect(";", "Unterminated dictionary member")
            fields.append(
                Definition(
                    type="field",
                    name=field_name,
                    required=required,
                    idl_type=idl_type,
                    default=default,
                    ext_attrs=ext_attrs,
                    comments=comments,
                    location=self._location(field_start),
                )
            )
        self._expect(";", "Missing semicolon after dictionary")
        return Definition(
            type="dictionary",
            name=name,
            partial=partial,
            inheritance=inheritance,
            members=fields,
            location=self._location(start),
        )

    def _enum(self, start: Token) -> Definition:
        name = self._identifier("No name for enum")
        self._expect("{", "Bodyless enum")
        values: list[Definition] = []
        while not self._consume("}"):
            token = self._consume_kind("string")
            if token is None:
                self._error("Unexpected value in enum")
            values.append(
                Definition(
                    type="enum-value",
                    value=token.value[1:-1],
                    location=self._location(token),
                )
            )
            if not self._consume(","):
                self._expect("}", "Unexpected value in enum")
                break
        if not values:
            self._error("No value in enum")
        self._expect(";", "No semicolon after enum")
        return Definition(
            type="enum", name=name, members=values, location=self._location(start)
        )

    def _typedef(self, start: Token) -> Definition:
        idl_type = self._type("typedef-type")
        name = self._identifier("Typedef lacks a name")
        self._expect(";", "Unterminated typedef")
        return Definition(
            type="typedef",
            name=name,
            idl_type=idl_type,
            location=self._location(start),
        )

    def _callback_function(self, start: Token) -> Definition:
        name = self._identifier("Callback lacks a name")
        self._expect("=", "Callback lacks an assignment")
        idl_type = self._type("return-type")
        arguments = self._argument_list()
        self._expect(";", "Unterminated callback")
        return Definition(
            type="callback",
            name=name,
            idl_type=idl_type,
            arguments=arguments,
            location=self._location(start),
        )

    def _includes(self, start: Token) -> Definition:
        target = self._identifier("Includes statement lacks a target")
        self._expect("includes", "Includes statement lacks the includes keyword")
        mixin = self._identifier("Incomplete includes statement")
        self._expect(";", "No terminating ; for includes statement")
        return Definition(
            type="includes",
            name=target,
            includes=mixin,
            location=self._location(start),
        )

    # members

    def _member(self) -> Definition:
        comments = self._take_comments()
        ext_attrs = self._extended_attributes()
        start = self._peek()
        member = self._member_body()
        member.ext_attrs = ext_attrs
        member.comments = comments
        member.location = self._location(start)
        return member

    def _member_body(self) -> Definition:
        if self._consume("const"):
            return self._const()
        if self._consume("constructor"):
            arguments = self._argument_list()
            self._expect(";", "Unterminated constructor")
            return Definition(type="constructor", arguments=arguments)
        if self._consume("stringifier"):
            if self._consume(";"):
                return Definition(type="operation", special="stringifier")
            member = self._attribute_or_operation()
            member.special = "stringifier"
            return member
        if self._consume("static"):
            member = self._attribute_or_operation()
            member.special = "static"
            return member
        if self._consume("inherit"):
            member = self._attribute()
            member.special = "inherit"
            return member
        if self._consume("readonly"):
            if self._probe("maplike") or self._probe("setlike"):
                member = self._iterable_like()
            else:
                member = self._attribute()
            member.readonly = True
            return member
        if self._probe("async") and self._peek(1).value == "iterable":
            self._advance()
            member = self._iterable_like()
            member.special = "async"
            return member
        if any(self._probe(keyword) for keyword in _ITERABLE_LIKE):
            return self._iterable_like()
        special = self._consume(*_SPECIALS)
        if special is not None:
            member = self._operation(allow_anonymous=True)
            member.special = special.value
            return member
        return self._attribute_or_operation()

    def _attribute_or_operation(self) -> Definition:
        if self._probe("readonly") or self._probe("attribute"):
            readonly = bool(self._consume("readonly"))
            member = self._attribute()
            member.readonly = readonly
            return member
        return self._operation()

    def _attribute(self) -> Definition:
        self._expect("attribute", "Attribute lacks the attribute keyword")
        idl_type = self._type("attribute-type")
        name = self._identifier("Attribute lacks a name")
        self._expect(";", "Unterminated attribute")
        return Definition(type="attribute", name=name, idl_type=idl_type)

    def _operation(self, allow_anonymous: bool = False) -> Definition:
        idl_type = self._type("return-type")
        name = ""
        token = self._consume_kind("identifier")
        if token is not None:
            name = token.value
        elif not allow_anonymous:
            self._error("Missing name in operation")
        arguments = self._argument_list()
        self._expect(";", "Unterminated operation")
        return Definition(
            type="operation", name=name, idl_type=idl_type, arguments=arguments
        )

    def _iterable_like(self) -> Definition:
        keyword = self._consume(*_ITERABLE_LIKE)
        if keyword is None:
            self._error("Expected iterable, maplike or setlike")
        self._expect("<", f"Missing less-than sign `<` in {keyword.value} declaration")
        types = [self._type(f"{keyword.value}-type")]
        if self._consume(","):
            types.append(self._type(f"{keyword.value}-type"))
        self._expect(">", f"Missing greater-than sign `>` in {keyword.value} declaration")
        expected = {"iterable": (1, 2), "maplike": (2,), "setlike": (1,)}[keyword.value]
        if len(types) not in expected:
            self._error(f"Unexpected number of types in {keyword.value}")
        self._expect(";", f"Missing semicolon after {keyword.value} declaration")
        return Definition(type=keyword.value, idl_types=types)

    def _const(self) -> Definition:
        idl_type = self._type("const-type")
        name = self._identifier("Const lacks a name")
        self._expect("=", "Const lacks value assignment")
        value = self._const_value()
        if value is None:
            self._error("Const lacks a value")
        self._expect(";", "Unterminated const")
        return Definition(
            type="const", name=name, idl_type=idl_type, value=value.value, default=value
        )

    # values

    def _const_value(self) -> DefaultValue | None:
        token = self._peek()
        if token.kind == "identifier":
            if token.value in ("true", "false"):
                return DefaultValue("boolean", self._advance().value)
            if token.value == "null":
                return DefaultValue("null", self._advance().value)
            if token.value in ("Infinity", "-Infinity"):
                return DefaultValue("Infinity", self._advance().value)
            if token.value == "NaN":
                return DefaultValue("NaN", self._advance().value)
            return None
        if token.kind in ("integer", "decimal"):
            return DefaultValue("number", self._advance().value)
        return None

    def _default_value(self) -> DefaultValue:
        value = self._const_value()
        if value is not None:
            return value
        token = self._consume_kind("string")
        if token is not None:
            return DefaultValue("string", token.value[1:-1])
        if self._consume("["):
            self._expect("]", "Default sequence value must be empty")
            return DefaultValue("sequence")
        if self._consume("{"):
            self._expect("}", "Default dictionary value must be empty")
            return DefaultValue("dictionary")
        self._error("No value for default")

    # types

    def _type(self, kind: str) -> IdlType:
        ext_attrs = self._extended_attributes()
        if self._consume("("):
            subtypes = [self._type(kind)]
            while self._consume("or"):
                subtypes.append(self._type(kind))
            if len(subtypes) < 2:
                self._error("At least two types are expected in a union type")
            self._expect(")", "Unterminated union type")
            idl_type = IdlType(union=True, subtypes=subtypes, type=kind)
        else:
            idl_type = self._single_type(kind)
        if self._consume("?"):
            idl_type.nullable = True
        idl_type.ext_attrs = ext_attrs
        return idl_type

    def _single_type(self, kind: str) -> IdlType:
        token = self._peek()
        if token.kind != "identifier":
            self._error(f"Missing {kind}")
        if token.value in GENERIC_TYPES and self._peek(1).value == "<":
            self._advance()
            self._advance()
            subtypes = [self._type(kind)]
            if self._consume(","):
                subtypes.append(self._type(kind))
            self._expect(">", f"Unterminated generic type {token.value}")
            return IdlType(generic=token.value, subtypes=subtypes, type=kind)

        words = [self._advance().value]
        if words[0] == "unsigned":
            size = self._consume("short", "long")
            if size is None:
                self._error("Failed to parse integer type")
            words.append(size.value)
            if size.value == "long" and self._consume("long"):
                words.append("long")
        elif words[0] == "unrestricted":
            size = self._consume("float", "double")
            if size is None:
                self._error("Failed to parse float type")
            words.append(size.value)
        elif words[0] == "long" and self._consume("long"):
            words.append("long")
        return IdlType(base=" ".join(words), type=kind)

    # arguments and extended attributes

    def _argument_list(self) -> list[Argument]:
        self._expect("(", "Missing argument list")
        arguments: list[Argument] = []
        if self._consume(")"):
            return arguments
        while True:
            arguments.append(self._argument())
            if self._consume(","):
                continue
            self._expect(")", "Unterminated argument list")
            return arguments

    def _argument(self) -> Argument:
        ext_attrs = self._extended_attributes()
        start = self._peek()
        if self._consume("optional"):
            idl_type = self._type("argument-type")
            name = self._identifier("Argument lacks a name")
            default = None
            if self._consume("="):
                default = self._default_value()
            return Argument(
                name=name,
                idl_type=idl_type,
                optional=True,
                default=default,
                ext_attrs=ext_attrs,
                location=self._location(start),
            )
        idl_type = self._type("argument-type")
        variadic = self._consume_kind("ellipsis") is not None
        name = self._identifier("Argument lacks a name")
        return Argument(
            name=name,
            idl_type=idl_type,
            variadic=variadic,
            ext_attrs=ext_attrs,
            location=self._location(start),
        )

    def _extended_attributes(self) -> list[ExtendedAttribute]:
        if not self._consume("["):
            return []
        attrs: list[ExtendedAttribute] = []
        while True:
            start = self._peek()
            name = self._identifier("Extended attribute name expected")
            attr = ExtendedAttribute(name=name, location=self._location(start))
            if self._consume("="):
                self._extended_attribute_rhs(attr)
            if self._probe("("):
                attr.arguments = self._argument_list()
                attr.has_arguments = True
            attrs.append(attr)
            if self._consume(","):
                continue
            self._expect("]", "Unexpected closing token of extended attribute")
            return attrs

    def _extended_attribute_rhs(self, attr: ExtendedAttribute) -> None:
        if self._consume("("):
            first = self._peek()
            kind = "string-list" if first.kind == "string" else "identifier-list"
            values: list[str] = []
            while True:
                token = self._consume_kind("identifier", "string")
                if token is None:
                    self._error("Expected identifiers but none found")
                values.append(token.value)
                if self._consume(","):
                    continue
                self._expect(")", "Unterminated extended attribute list")
                break
            attr.rhs_type = kind
            attr.rhs_value = values
            return
        if self._consume("*"):
            attr.rhs_type = "*"
            attr.rhs_value = "*"
            return
        token = self._consume_kind("identifier", "string", "integer", "decimal")
        if token is None:
            self._error("No right hand side to extended attribute assignment")
        attr.rhs_type = token.kind
        attr.rhs_value = token.value
