"""Platform-facing services: cf command generation, workflows, log validation, orchestration."""

from services.app_log_validator import AppLogValidator
from services.cf_commands import CfCommandGenerator
from services.cf_workflow import CfWorkflow
from services.orchestrator import Orchestrator, OrchestratorState

__all__ = [
    "AppLogValidator",
    "CfCommandGenerator",
    "CfWorkflow",
    "Orchestrator",
    "OrchestratorState",
]
