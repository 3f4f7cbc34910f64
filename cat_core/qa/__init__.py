"""Deterministic QA rule engine for translated segments."""

from cat_core.qa.checks import (
    DEFAULT_QA_CHECKS,
    QACheck,
    QAIssue,
    QAIssueType,
    QASeverity,
    active_issues,
    checks_with_disabled,
    enabled_types,
    issue_type_name,
    replace_segment_issues,
    run_full_qa,
    run_segment_qa,
    toggle_ignored,
)

__all__ = [
    "DEFAULT_QA_CHECKS",
    "QACheck",
    "QAIssue",
    "QAIssueType",
    "QASeverity",
    "active_issues",
    "checks_with_disabled",
    "enabled_types",
    "issue_type_name",
    "replace_segment_issues",
    "run_full_qa",
    "run_segment_qa",
    "toggle_ignored",
]
