"""Application use cases: orchestration of repositories for API and scripts."""

from automation.application.use_cases.workflow_rules import WorkflowRuleService

__all__ = ["WorkflowRuleService"]
