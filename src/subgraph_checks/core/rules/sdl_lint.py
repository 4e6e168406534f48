"""A small GraphQL SDL linter modelled on the ``schema-recommended`` bundle.

Each rule is a generator over a parsed document that yields ``LintFinding``s.
``lint_sdl`` runs every rule whose configured severity is not ``OFF`` and
stamps the finding with that severity.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Any

from graphql import GraphQLSyntaxError, parse
from graphql.language import (
    DirectiveDefinitionNode,
    DocumentNode,
    EnumTypeDefinitionNode,
    EnumTypeExtensionNode,
    FieldDefinitionNode,
    InputObjectTypeDefinitionNode,
    InputObjectTypeExtensionNode,
    InterfaceTypeDefinitionNode,
    InterfaceTypeExtensionNode,
    NamedTypeNode,
    Node,
    ObjectTypeDefinitionNode,
    ObjectTypeExtensionNode,
    SchemaDefinitionNode,
    SchemaExtensionNode,
    StringValueNode,
    TypeDefinitionNode,
    Visitor,
    visit,
)


class LintSeverity(IntEnum):
    OFF = 0
    WARN = 1
    ERROR = 2


@dataclass(frozen=True)
class LintFinding:
    rule_id: str | None
    message: str
    line: int
    column: int
    end_line: int | None = None
    end_column: int | None = None
    severity: LintSeverity = LintSeverity.ERROR


SCHEMA_RECOMMENDED: Mapping[str, LintSeverity] = {
    "naming-convention": LintSeverity.ERROR,
    "known-type-names": LintSeverity.ERROR,
    "no-case-insensitive-enum-values-duplicates": LintSeverity.ERROR,
    "require-description": LintSeverity.WARN,
    "description-style": LintSeverity.WARN,
    "no-typename-prefix": LintSeverity.WARN,
    "require-deprecation-reason": LintSeverity.WARN,
}

BUILTIN_SCALARS = frozenset({"Int", "Float", "String", "Boolean", "ID"})

# Types a federation subgraph may reference without defining them.
FEDERATION_TYPES = frozenset(
    {
        "_Any",
        "_Entity",
        "_FieldSet",
        "_Service",
        "FieldSet",
        "federation__FieldSet",
        "federation__Policy",
        "federation__Scope",
        "link__Import",
        "link__Purpose",
        "Import",
        "Purpose",
        "Policy",
        "Scope",
    }
)

_PASCAL_CASE = re.compile(r"^[A-Z][A-Za-z0-9]*$")
_CAMEL_CASE = re.compile(r"^[a-z][A-Za-z0-9]*$")
_UPPER_CASE = re.compile(r"^[A-Z][A-Z0-9]*(_[A-Z0-9]+)*$")

_OBJECT_LIKE = (
    ObjectTypeDefinitionNode,
    ObjectTypeExtensionNode,
    InterfaceTypeDefinitionNode,
    InterfaceTypeExtensionNode,
)
_INPUT_LIKE = (InputObjectTypeDefinitionNode, InputObjectTypeExtensionNode)
_ENUM_LIKE = (EnumTypeDefinitionNode, EnumTypeExtensionNode)

_ROOT_AFFIXES = {
    "query": (("query", "get"), "Query"),
    "mutation": (("mutation",), "Mutation"),
    "subscription": (("subscription",), "Subscription"),
}


@dataclass(frozen=True)
class LintContext:
    document: DocumentNode
    root_types: Mapping[str, str]
    context_type_names: frozenset[str] | None = None

    def definitions(self, *kinds: type[Node]) -> Iterator[Any]:
        for definition in self.document.definitions:
            if isinstance(definition, kinds):
                yield definition


def _span(node: Node) -> tuple[int, int, int, int]:
    loc = node.loc
    assert loc is not None
    start, end = loc.start_token, loc.end_token
    return start.line, start.column, end.line, end.column + (end.end - end.start)


def _finding(rule_id: str, message: str, node: Node) -> LintFinding:
    line, column, end_line, end_column = _span(node)
    return LintFinding(rule_id, message, line, column, end_line, end_column)


def _root_types(document: DocumentNode) -> dict[str, str]:
    """Map ``query``/``mutation``/``subscription`` to their type names."""
    roots = {"query": "Query", "mutation": "Mutation", "subscription": "Subscription"}
    for definition in document.definitions:
        if isinstance(definition, (SchemaDefinitionNode, SchemaExtensionNode)):
            for operation_type in definition.operation_types or ():
                roots[operation_type.operation.value] = operation_type.type.name.value
    return roots


def _defined_type_names(document: DocumentNode) -> set[str]:
    return {
        definition.name.value for definition in document.definitions if isinstance(definition, TypeDefinitionNode)
    }


def _fields(definition: Any) -> tuple[Any, ...]:
    return tuple(definition.fields or ())


# --- Rules ---


def _naming_convention(ctx: LintContext) -> Iterator[LintFinding]:
    rule = "naming-convention"

    def check(pattern: re.Pattern[str], style: str, label: str, name_node: Any) -> Iterator[LintFinding]:
        if not pattern.match(name_node.value):
            yield _finding(rule, f'{label} "{name_node.value}" should be in {style} format', name_node)

    root_by_name = {name: operation for operation, name in ctx.root_types.items()}
    for definition in ctx.document.definitions:
        if isinstance(definition, TypeDefinitionNode):
            yield from check(_PASCAL_CASE, "PascalCase", "Type", definition.name)
        elif isinstance(definition, DirectiveDefinitionNode):
            yield from check(_CAMEL_CASE, "camelCase", "Directive", definition.name)
            for argument in definition.arguments or ():
                yield from check(_CAMEL_CASE, "camelCase", "Input value", argument.name)

        if isinstance(definition, _OBJECT_LIKE):
            operation = root_by_name.get(definition.name.value)
            for field in _fields(definition):
                yield from check(_CAMEL_CASE, "camelCase", "Field", field.name)
                for argument in field.arguments or ():
                    yield from check(_CAMEL_CASE, "camelCase", "Input value", argument.name)
                if operation in _ROOT_AFFIXES:
                    yield from _root_field_affixes(rule, operation, field)
        elif isinstance(definition, _INPUT_LIKE):
            for field in _fields(definition):
                yield from check(_CAMEL_CASE, "camelCase", "Input value", field.name)
        elif isinstance(definition, _ENUM_LIKE):
            for value in definition.values or ():
                yield from check(_UPPER_CASE, "UPPER_CASE", "Enumeration value", value.name)


def _root_field_affixes(rule: str, operation: str, field: FieldDefinitionNode) -> Iterator[LintFinding]:
    prefixes, label = _ROOT_AFFIXES[operation]
    name = field.name.value
    for prefix in prefixes:
        if name.startswith(prefix) and name != prefix:
            yield _finding(rule, f'{label} "{name}" should not have "{prefix}" prefix', field.name)
            break
    if name.endswith(label) and name != label:
        yield _finding(rule, f'{label} "{name}" should not have "{label}" suffix', field.name)


def _known_type_names(ctx: LintContext) -> Iterator[LintFinding]:
    if ctx.context_type_names is None:
        return
    known = BUILTIN_SCALARS | FEDERATION_TYPES | ctx.context_type_names | _defined_type_names(ctx.document)
    findings: list[LintFinding] = []

    class _References(Visitor):
        def enter_named_type(self, node: NamedTypeNode, *_args: Any) -> None:
            if node.name.value not in known:
                findings.append(_finding("known-type-names", f'Unknown type "{node.name.value}".', node))

    visit(ctx.document, _References())
    yield from findings


def _enum_duplicates(ctx: LintContext) -> Iterator[LintFinding]:
    for definition in ctx.definitions(*_ENUM_LIKE):
        seen: set[str] = set()
        for value in definition.values or ():
            folded = value.name.value.lower()
            if folded in seen:
                yield _finding(
                    "no-case-insensitive-enum-values-duplicates",
                    f'Case-insensitive enum values duplicates are not allowed! Found: "{value.name.value}"',
                    value.name,
                )
            seen.add(folded)


def _require_description(ctx: LintContext) -> Iterator[LintFinding]:
    rule = "require-description"
    root_names = set(ctx.root_types.values())
    for definition in ctx.document.definitions:
        if isinstance(definition, (TypeDefinitionNode, DirectiveDefinitionNode)) and definition.description is None:
            kind = "directive" if isinstance(definition, DirectiveDefinitionNode) else "type"
            yield _finding(rule, f'Description is required for {kind} "{definition.name.value}"', definition.name)
        if isinstance(definition, _OBJECT_LIKE) and definition.name.value in root_names:
            for field in _fields(definition):
                if field.description is None:
                    yield _finding(
                        rule,
                        f'Description is required for field "{field.name.value}" in type "{definition.name.value}"',
                        field.name,
                    )


def _described_nodes(document: DocumentNode) -> Iterator[Any]:
    for definition in document.definitions:
        if isinstance(definition, (TypeDefinitionNode, DirectiveDefinitionNode, SchemaDefinitionNode)):
            yield definition
        for field in getattr(definition, "fields", None) or ():
            yield field
            if isinstance(field, FieldDefinitionNode):
                yield from field.arguments or ()
        yield from getattr(definition, "values", None) or ()
        if isinstance(definition, DirectiveDefinitionNode):
            yield from definition.arguments or ()


def _description_style(ctx: LintContext) -> Iterator[LintFinding]:
    for node in _described_nodes(ctx.document):
        description: StringValueNode | None = getattr(node, "description", None)
        if description is not None and not description.block:
            yield _finding("description-style", "Unexpected inline description", description)


def _no_typename_prefix(ctx: LintContext) -> Iterator[LintFinding]:
    for definition in ctx.definitions(*_OBJECT_LIKE):
        type_name = definition.name.value
        for field in _fields(definition):
            if field.name.value.lower().startswith(type_name.lower()):
                yield _finding(
                    "no-typename-prefix",
                    f'Field "{field.name.value}" starts with the name of the parent type "{type_name}"',
                    field.name,
                )


def _deprecation_reason_missing(node: Any) -> Any | None:
    for directive in node.directives or ():
        if directive.name.value != "deprecated":
            continue
        reason = next((arg.value for arg in directive.arguments or () if arg.name.value == "reason"), None)
        if not isinstance(reason, StringValueNode) or not reason.value.strip():
            return directive
    return None


def _require_deprecation_reason(ctx: LintContext) -> Iterator[LintFinding]:
    for definition in ctx.document.definitions:
        fields = getattr(definition, "fields", None) or ()
        members: list[Any] = [*fields, *(getattr(definition, "values", None) or ())]
        for field in fields:
            members.extend(getattr(field, "arguments", None) or ())
        for member in members:
            directive = _deprecation_reason_missing(member)
            if directive is not None:
                yield _finding(
                    "require-deprecation-reason",
                    f'Deprecation reason is required for "{member.name.value}" in type "{definition.name.value}"',
                    directive,
                )


LintRuleFn = Callable[[LintContext], Iterator[LintFinding]]

RULES: Mapping[str, LintRuleFn] = {
    "naming-convention": _naming_convention,
    "known-type-names": _known_type_names,
    "no-case-insensitive-enum-values-duplicates": _enum_duplicates,
    "require-description": _require_description,
    "description-style": _description_style,
    "no-typename-prefix": _no_typename_prefix,
    "require-deprecation-reason": _require_deprecation_reason,
}


def context_type_names(schema_text: str | None) -> frozenset[str] | None:
    """Collect type names from a contextual schema, or ``None`` if unusable."""
    if not schema_text or not schema_text.strip():
        return None
    try:
        return frozenset(_defined_type_names(parse(schema_text)))
    except GraphQLSyntaxError:
        return None


def lint_sdl(
    source_text: str,
    ruleset: Mapping[str, LintSeverity] = SCHEMA_RECOMMENDED,
    schema_context: str | None = None,
) -> list[LintFinding]:
    """Lint *source_text*; a syntax error is reported as a single rule-less finding."""
    try:
        document = parse(source_text)
    except GraphQLSyntaxError as exc:
        line, column = (exc.locations[0].line, exc.locations[0].column) if exc.locations else (1, 1)
        return [LintFinding(None, f"Parsing error: {exc.message}", line, column)]

    ctx = LintContext(document, _root_types(document), context_type_names(schema_context))
    findings: list[LintFinding] = []
    for rule_id, severity in ruleset.items():
        check = RULES.get(rule_id)
        if check is None or severity == LintSeverity.OFF:
            continue
        findings.extend(replace(finding, severity=severity) for finding in check(ctx))
    findings.sort(key=lambda f: (f.line, f.column))
    return findings
