"""
hostdeploy Commands

Deploy and cleanup run modes.
"""

from .deploy import DeployCommand, deploy_stages
from .cleanup import CleanupCommand, cleanup_stages

__all__ = [
    "DeployCommand",
    "CleanupCommand",
    "deploy_stages",
    "cleanup_stages",
]
