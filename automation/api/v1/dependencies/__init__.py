"""Presentation-layer dependency injection (composition root).

Routes depend only on these dependencies, not on infrastructure directly.
"""

from automation.api.v1.dependencies.organization import get_organization_id
from automation.api.v1.dependencies.workflow import (
    get_read_repositories,
    get_repositories,
    get_rule_service,
    get_rule_service_read,
    get_workflow_engine,
)

__all__ = [
    "get_organization_id",
    "get_read_repositories",
    "get_repositories",
    "get_rule_service",
    "get_rule_service_read",
    "get_workflow_engine",
]
