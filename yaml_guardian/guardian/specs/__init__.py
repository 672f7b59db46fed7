"""Reference specifications for the template and pipeline dialects."""

from guardian.specs.pipeline_spec import (
    StepSchema,
    load_step_schema,
    reload_step_schema,
)
from guardian.specs.template_spec import (
    ContainerType,
    PrimitiveType,
    PropertySpec,
    ResourceSpec,
    load_resource_spec,
    reload_resource_spec,
)

__all__ = [
    "ContainerType",
    "PrimitiveType",
    "PropertySpec",
    "ResourceSpec",
    "StepSchema",
    "load_resource_spec",
    "load_step_schema",
    "reload_resource_spec",
    "reload_step_schema",
]
