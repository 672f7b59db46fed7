"""Suggestion engine for infrastructure-template documents.

Walks the ``Resources`` mapping and compares each resource against the
loaded resource spec: missing ``Type``, unknown types, unexpected resource
fields, missing required properties, misspelled properties and primitive or
container type mismatches.
"""

from __future__ import annotations

from typing import Any

from guardian.specs.template_spec import (
    ContainerType,
    PrimitiveType,
    PropertySpec,
    ResourceSpec,
    load_resource_spec,
)
from guardian.suggest.base import Findings, apply_with
from guardian.suggest.fuzzy import best_match
from guardian.suggest.models import (
    AnalysisResult,
    AppliedSuggestions,
    RenameField,
    SetField,
    SuggestionKind,
)
from guardian.suggest.nodes import (
    NodeKind,
    as_mapping,
    is_addressable,
    is_tagged,
    node_kind,
)

ALLOWED_RESOURCE_FIELDS = {
    "Type",
    "Properties",
    "Metadata",
    "DependsOn",
    "DeletionPolicy",
    "UpdateReplacePolicy",
    "Condition",
    "CreationPolicy",
    "UpdatePolicy",
}


def is_intrinsic(value: Any) -> bool:
    """``!Ref x`` style tags or ``{"Ref": ...}`` / ``{"Fn::GetAtt": ...}`` mappings.

    Their real type is only known at deploy time, so they satisfy any check.
    """
    if is_tagged(value):
        return True
    mapping = as_mapping(value)
    if mapping is None or len(mapping) != 1:
        return False
    key = next(iter(mapping))
    return isinstance(key, str) and (key == "Ref" or key.startswith("Fn::"))


def primitive_matches(value: Any, primitive: PrimitiveType) -> bool:
    kind = node_kind(value)
    if primitive == PrimitiveType.String:
        return kind == NodeKind.string
    if primitive in (PrimitiveType.Integer, PrimitiveType.Long):
        return kind == NodeKind.integer or (kind == NodeKind.float and float(value).is_integer())
    if primitive == PrimitiveType.Double:
        return kind in (NodeKind.integer, NodeKind.float)
    if primitive == PrimitiveType.Boolean:
        return kind == NodeKind.boolean
    return True


def container_matches(value: Any, container: ContainerType) -> bool:
    kind = node_kind(value)
    if container == ContainerType.List:
        return kind == NodeKind.sequence
    return kind == NodeKind.mapping


def _check_property_type(
    findings: Findings, path: list, name: str, value: Any, spec: PropertySpec,
) -> None:
    if is_intrinsic(value):
        return
    if spec.primitive_type is not None and not primitive_matches(value, spec.primitive_type):
        findings.suggest(
            path, f"Property {name} expects {spec.primitive_type.value}", SuggestionKind.type,
        )
    elif spec.container_type is not None and not container_matches(value, spec.container_type):
        findings.suggest(
            path, f"Property {name} expects {spec.container_type.value}", SuggestionKind.type,
        )


def _check_resource(
    findings: Findings, spec: ResourceSpec, logical_id: Any, resource: Any,
) -> None:
    base = ["Resources", logical_id]
    definition = as_mapping(resource)
    type_name = definition.get("Type") if definition is not None else None

    if node_kind(type_name) != NodeKind.string:
        findings.suggest(
            [*base, "Type"], f"Resource {logical_id} is missing Type", SuggestionKind.add,
        )
        return

    for field in definition:
        if field not in ALLOWED_RESOURCE_FIELDS:
            findings.warn([*base, field], f"Unexpected field {field} under resource")

    prop_specs = spec.properties_for(type_name)
    if prop_specs is None:
        guess = best_match(type_name, spec.type_names())
        if guess is None:
            findings.warn([*base, "Type"], f"Unknown resource type {type_name}")
        else:
            findings.suggest(
                [*base, "Type"],
                f"Unknown resource type {type_name}. Did you mean {guess}?",
                SuggestionKind.rename,
                fix=(
                    SetField(path=[*base, "Type"], value=guess)
                    if is_addressable(base) else None
                ),
            )
        return

    raw_props = definition.get("Properties")
    props = as_mapping(raw_props)
    if props is None:
        if raw_props is not None:
            findings.suggest(
                [*base, "Properties"],
                f"Properties of {logical_id} should be a mapping",
                SuggestionKind.type,
            )
        props = {}

    for name, prop_spec in prop_specs.items():
        if prop_spec.required and name not in props:
            path = [*base, "Properties", name]
            findings.suggest(
                path,
                f"Add required property {name}",
                SuggestionKind.add,
                fix=SetField(path=path, value=None) if is_addressable(path) else None,
            )

    for name, value in props.items():
        path = [*base, "Properties", name]
        if name in prop_specs:
            _check_property_type(findings, path, name, value, prop_specs[name])
            continue
        guess = best_match(str(name), prop_specs)
        if guess is None:
            findings.warn(path, f"Unknown property {name}")
        else:
            findings.suggest(
                path,
                f"Unknown property {name}. Did you mean {guess}?",
                SuggestionKind.rename,
                fix=(
                    RenameField(path=[*base, "Properties"], from_key=name, to_key=guess)
                    if is_addressable([*base, name]) else None
                ),
            )


def analyze(document: Any, spec: ResourceSpec | None = None) -> AnalysisResult:
    """Compare the document's resources against *spec* (embedded default when None)."""
    if spec is None:
        spec = load_resource_spec()
    findings = Findings()

    root = as_mapping(document)
    resources = as_mapping(root.get("Resources")) if root is not None else None
    if resources is None:
        return findings.result()

    for logical_id, resource in resources.items():
        _check_resource(findings, spec, logical_id, resource)
    return findings.result()


def apply_suggestions(
    content: str, selected: list[int], spec: ResourceSpec | None = None,
) -> AppliedSuggestions:
    return apply_with(content, selected, lambda doc: analyze(doc, spec))
