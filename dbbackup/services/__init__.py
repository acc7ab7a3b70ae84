"""
Servicios de la aplicación
"""
from .backup_executor import BackupExecutor
from .backup_service import BackupService
from .path_planner import PathPlanner

__all__ = [
    'BackupExecutor',
    'BackupService',
    'PathPlanner'
]
