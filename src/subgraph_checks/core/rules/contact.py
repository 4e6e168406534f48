"""Require every subgraph to declare ownership with ``@contact`` on its schema."""

from __future__ import annotations

from graphql import parse
from graphql.language import (
    ConstDirectiveNode,
    DocumentNode,
    SchemaDefinitionNode,
    SchemaExtensionNode,
    StringValueNode,
)

from subgraph_checks.core.locations import source_location
from subgraph_checks.models import Violation, ViolationLevel

CONTACT_RULE = "Must contain a properly formatted @contact directive for each subgraph"
REQUIRED_FIELDS = ("name", "url", "description")

MISSING_DIRECTIVE = "Subgraphs must contain a contact directive"
MISSING_FIELDS = "Contact directive must have a name, url, and description"
MISSING_VALUES = "Contact directive values are not all present"


def find_contact_directive(document: DocumentNode) -> ConstDirectiveNode | None:
    """Return the first ``@contact`` on any schema definition or extension."""
    for definition in document.definitions:
        if not isinstance(definition, (SchemaDefinitionNode, SchemaExtensionNode)):
            continue
        for directive in definition.directives or ():
            if directive.name.value == "contact":
                return directive
    return None


def contact_fields(directive: ConstDirectiveNode) -> list[tuple[str, str]]:
    """Return ``(field, value)`` pairs; non-string values read as empty."""
    return [
        (argument.name.value, argument.value.value if isinstance(argument.value, StringValueNode) else "")
        for argument in directive.arguments or ()
    ]


class ContactDirectiveRule:
    name = "contact"

    def evaluate(self, subgraph_name: str, source_text: str, supergraph_text: str | None = None) -> list[Violation]:
        directive = find_contact_directive(parse(source_text))
        if directive is None:
            return [Violation(level=ViolationLevel.ERROR, message=MISSING_DIRECTIVE, rule=CONTACT_RULE)]

        fields = contact_fields(directive)
        has_required_fields = set(REQUIRED_FIELDS) <= {field for field, _ in fields}
        all_values_present = all(field and value for field, value in fields)

        assert directive.loc is not None
        start, end = directive.loc.start_token, directive.loc.end_token
        location = source_location(subgraph_name, source_text, (start.line, start.column), (end.line, end.column))

        messages = []
        if not has_required_fields:
            messages.append(MISSING_FIELDS)
        if not all_values_present:
            messages.append(MISSING_VALUES)
        return [
            Violation(level=ViolationLevel.ERROR, message=message, rule=CONTACT_RULE, source_locations=[location])
            for message in messages
        ]
