"""Application services: condition evaluation, action execution, workflow engine."""

from automation.application.services.action_executor import ActionExecutor
from automation.application.services.condition_evaluator import evaluate, evaluate_all
from automation.application.services.variable_substitution import substitute_variables
from automation.application.services.workflow_engine import WorkflowEngine

__all__ = [
    "ActionExecutor",
    "WorkflowEngine",
    "evaluate",
    "evaluate_all",
    "substitute_variables",
]
