"""Tests for the template suggestion engine."""

from __future__ import annotations

import pytest

from guardian.specs.template_spec import (
    ContainerType,
    PrimitiveType,
    PropertySpec,
    ResourceSpec,
)
from guardian.suggest import template
from guardian.suggest.models import RenameField, SetField, SuggestionKind
from guardian.validator.models import LintSource, ValidationSeverity
from guardian.validator.parser import load_document


@pytest.fixture
def spec() -> ResourceSpec:
    return ResourceSpec(
        resource_types={
            "AWS::S3::Bucket": {
                "BucketName": PropertySpec(required=True, primitive_type=PrimitiveType.String),
                "Tags": PropertySpec(container_type=ContainerType.List),
            },
            "AWS::SQS::Queue": {
                "DelaySeconds": PropertySpec(primitive_type=PrimitiveType.Integer),
                "FifoQueue": PropertySpec(primitive_type=PrimitiveType.Boolean),
                "Ratio": PropertySpec(primitive_type=PrimitiveType.Double),
                "Attributes": PropertySpec(container_type=ContainerType.Map),
            },
        }
    )


def _analyze(content: str, spec: ResourceSpec):
    return template.analyze(load_document(content), spec)


class TestRequiredProperties:
    def test_missing_required_property(self, spec: ResourceSpec) -> None:
        result = _analyze("Resources:\n  B:\n    Type: AWS::S3::Bucket\n", spec)
        assert len(result.suggestions) == 1
        suggestion = result.suggestions[0]
        assert suggestion.kind == SuggestionKind.add
        assert suggestion.path == "Resources.B.Properties.BucketName"
        assert suggestion.fix == SetField(path=["Resources", "B", "Properties", "BucketName"])

    def test_every_suggestion_is_mirrored(self, spec: ResourceSpec) -> None:
        result = _analyze("Resources:\n  B:\n    Type: AWS::S3::Bucket\n", spec)
        assert len(result.messages) == 1
        assert result.messages[0].source == LintSource.dialect_schema
        assert result.messages[0].severity == ValidationSeverity.warning
        assert result.messages[0].path == "Resources.B.Properties.BucketName"

    def test_apply_creates_properties(self, spec: ResourceSpec) -> None:
        content = "Resources:\n  B:\n    Type: AWS::S3::Bucket\n"
        applied = template.apply_suggestions(content, [0], spec)
        assert applied.applied == [0]
        assert "Properties:\n      BucketName:" in applied.content


class TestTypes:
    def test_missing_type(self, spec: ResourceSpec) -> None:
        result = _analyze("Resources:\n  B:\n    Properties: {}\n", spec)
        assert [s.kind for s in result.suggestions] == [SuggestionKind.add]
        assert result.suggestions[0].fix is None

    def test_non_mapping_resource(self, spec: ResourceSpec) -> None:
        result = _analyze("Resources:\n  B: oops\n", spec)
        assert [s.kind for s in result.suggestions] == [SuggestionKind.add]

    def test_unknown_type_renamed(self, spec: ResourceSpec) -> None:
        content = "Resources:\n  B:\n    Type: AWS::S3::Buckett\n    Properties:\n      Nope: 1\n"
        result = _analyze(content, spec)
        assert len(result.suggestions) == 1
        suggestion = result.suggestions[0]
        assert suggestion.kind == SuggestionKind.rename
        assert suggestion.fix == SetField(path=["Resources", "B", "Type"], value="AWS::S3::Bucket")

    def test_unknown_type_without_candidates(self) -> None:
        result = _analyze("Resources:\n  B:\n    Type: X::Y\n", ResourceSpec())
        assert result.suggestions == []
        assert len(result.messages) == 1


class TestProperties:
    def test_misspelled_property(self, spec: ResourceSpec) -> None:
        content = "Resources:\n  B:\n    Type: AWS::S3::Bucket\n    Properties:\n      BucketNme: x\n"
        result = _analyze(content, spec)
        kinds = [s.kind for s in result.suggestions]
        assert kinds == [SuggestionKind.add, SuggestionKind.rename]
        rename = result.suggestions[1]
        assert rename.path == "Resources.B.Properties.BucketNme"
        assert rename.fix == RenameField(
            path=["Resources", "B", "Properties"], from_key="BucketNme", to_key="BucketName",
        )

    def test_unexpected_resource_field_is_warning_only(self, spec: ResourceSpec) -> None:
        content = (
            "Resources:\n  B:\n    Type: AWS::S3::Bucket\n    Propertes: {}\n"
            "    Properties:\n      BucketName: x\n"
        )
        result = _analyze(content, spec)
        assert result.suggestions == []
        assert len(result.messages) == 1
        assert "Propertes" in result.messages[0].message

    def test_properties_not_mapping(self, spec: ResourceSpec) -> None:
        content = "Resources:\n  Q:\n    Type: AWS::SQS::Queue\n    Properties: [1]\n"
        result = _analyze(content, spec)
        assert [s.kind for s in result.suggestions] == [SuggestionKind.type]

    @pytest.mark.parametrize(
        "body, mismatches",
        [
            ("DelaySeconds: 5", 0),
            ("DelaySeconds: 5.0", 0),
            ("DelaySeconds: '5'", 1),
            ("DelaySeconds: true", 1),
            ("FifoQueue: true", 0),
            ("FifoQueue: 1", 1),
            ("Ratio: 3", 0),
            ("Ratio: 0.5", 0),
            ("Ratio: x", 1),
            ("Attributes: {a: 1}", 0),
            ("Attributes: [a]", 1),
            ("DelaySeconds: !Ref Delay", 0),
            ("DelaySeconds: {Ref: Delay}", 0),
            ("Attributes: {'Fn::GetAtt': [X, Y]}", 0),
        ],
    )
    def test_type_checks(self, spec: ResourceSpec, body: str, mismatches: int) -> None:
        content = f"Resources:\n  Q:\n    Type: AWS::SQS::Queue\n    Properties:\n      {body}\n"
        result = _analyze(content, spec)
        assert [s.kind for s in result.suggestions] == [SuggestionKind.type] * mismatches
        assert all(s.fix is None for s in result.suggestions)

    def test_list_container(self, spec: ResourceSpec) -> None:
        content = (
            "Resources:\n  B:\n    Type: AWS::S3::Bucket\n    Properties:\n"
            "      BucketName: b\n      Tags: {a: 1}\n"
        )
        result = _analyze(content, spec)
        assert [s.kind for s in result.suggestions] == [SuggestionKind.type]


class TestShape:
    def test_no_resources(self, spec: ResourceSpec) -> None:
        assert _analyze("AWSTemplateFormatVersion: '2010-09-09'\n", spec).suggestions == []

    def test_deterministic(self, spec: ResourceSpec) -> None:
        content = "Resources:\n  B:\n    Type: AWS::S3::Bucket\n    Properties:\n      Bukket: x\n"
        first = _analyze(content, spec)
        second = _analyze(content, spec)
        assert first == second


class TestKeysWithoutPathForm:
    def test_null_property_key_has_no_fix(self, spec: ResourceSpec) -> None:
        content = (
            "Resources:\n  B:\n    Type: AWS::S3::Bucket\n"
            "    Properties:\n      BucketName: b\n      ~: x\n"
        )
        result = _analyze(content, spec)
        assert [s.kind for s in result.suggestions] == [SuggestionKind.rename]
        assert result.suggestions[0].fix is None

    def test_null_logical_id_has_no_fix(self, spec: ResourceSpec) -> None:
        result = _analyze("Resources:\n  ~:\n    Type: AWS::S3::Bucket\n", spec)
        assert [s.kind for s in result.suggestions] == [SuggestionKind.add]
        assert result.suggestions[0].fix is None

    def test_float_logical_id_unknown_type_has_no_fix(self, spec: ResourceSpec) -> None:
        result = _analyze("Resources:\n  1.5:\n    Type: AWS::S3::Buckt\n", spec)
        assert [s.kind for s in result.suggestions] == [SuggestionKind.rename]
        assert result.suggestions[0].fix is None

    def test_sequence_properties_kept_on_apply(self, spec: ResourceSpec) -> None:
        content = (
            "Resources:\n  B:\n    Type: AWS::S3::Bucket\n"
            "    Properties:\n      - BucketName\n"
        )
        indexes = list(range(len(_analyze(content, spec).suggestions)))
        applied = template.apply_suggestions(content, indexes, spec)
        assert applied.applied == []
        assert "- BucketName" in applied.content
        assert "BucketName:" not in applied.content
