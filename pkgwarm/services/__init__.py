"""服务层：环境准备与整体编排"""

from pkgwarm.services.environment import EnvironmentPreparer
from pkgwarm.services.orchestrator import InstallPlan, Orchestrator

__all__ = [
    "EnvironmentPreparer",
    "InstallPlan",
    "Orchestrator",
]
