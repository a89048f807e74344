"""
Reporting module for Toolgate.

Renders lint results and single-call inspections for humans and machines.

Output formats:
    - Console: Rich tables and panels for the terminal
    - JSON: Structured output for scripts and CI

Example:
    from toolgate.lint import lint_config
    from toolgate.report import format_lint_json, print_lint_result

    result = lint_config("toolgate.yaml")
    print_lint_result(result)
    print(format_lint_json(result))
"""

from toolgate.report.console import print_inspection, print_lint_result
from toolgate.report.json import format_lint_human, format_lint_json, inspection_to_dict

__all__ = [
    "format_lint_human",
    "format_lint_json",
    "inspection_to_dict",
    "print_inspection",
    "print_lint_result",
]
