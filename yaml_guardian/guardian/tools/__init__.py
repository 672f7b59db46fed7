"""External checker processes and the runner abstraction they share."""

from guardian.tools.checkers import (
    run_rules_checker,
    run_style_checker,
    run_template_checker,
)
from guardian.tools.runner import SubprocessToolRunner, ToolResult, ToolRunner

__all__ = [
    "SubprocessToolRunner",
    "ToolResult",
    "ToolRunner",
    "run_rules_checker",
    "run_style_checker",
    "run_template_checker",
]
