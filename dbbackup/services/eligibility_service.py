"""
Evaluación de elegibilidad de cada base de datos para el tipo de backup
"""
from typing import Any, Iterable, List, Tuple
from ..exceptions import BackupConfigurationError
from ..models import (
    BackupHistoryFact, BackupRequestConfig, BackupType,
    DatabaseDescriptor, RecoveryModel, StepResult
)
from ..strategies.base_strategy import ServerGateway

NOT_FOUND = "database not found on instance"
TEMPDB_NOT_ALLOWED = "tempdb cannot be backed up"
SIMPLE_RECOVERY_LOG = "database is in simple recovery mode, cannot take a log backup"
NO_FULL_BACKUP = "no existing full backup; cannot take a log or differential backup"


def resolve_recovery_model(gateway: ServerGateway, connection: Any,
                           descriptor: DatabaseDescriptor) -> Tuple[DatabaseDescriptor, bool]:
    """
    Fase de resolución: consulta el modelo de recuperación una sola vez

    Args:
        gateway: Gateway del servidor
        connection: Conexión de la ejecución
        descriptor: Descriptor normalizado

    Returns:
        Tupla (descriptor resuelto, existe en la instancia)
    """
    if descriptor.recovery_model is not RecoveryModel.UNKNOWN:
        return descriptor, True

    recovery_model = gateway.get_recovery_model(connection, descriptor.name)
    if recovery_model is None:
        return descriptor, False
    return descriptor.with_recovery_model(recovery_model), True


def has_prior_full_backup(database_name: str, history: Iterable[BackupHistoryFact]) -> bool:
    name = database_name.lower()
    return any(
        fact.has_prior_full_backup and fact.database_name.lower() == name
        for fact in history
    )


def evaluate(descriptor: DatabaseDescriptor, request: BackupRequestConfig,
             history: Iterable[BackupHistoryFact], exists: bool = True) -> StepResult:
    """
    Determina si el backup solicitado puede ejecutarse

    Todas las reglas se evalúan; los fallos se acumulan en orden.

    Args:
        descriptor: Descriptor con el modelo de recuperación ya resuelto
        request: Configuración de la ejecución
        history: Hechos de backups completos previos
        exists: False si la base de datos no existe en la instancia

    Returns:
        StepResult sin fallos si es elegible
    """
    result = StepResult()

    if not exists:
        result.add_failure(NOT_FOUND)

    if descriptor.name.lower() == "tempdb":
        result.add_failure(TEMPDB_NOT_ALLOWED)

    if request.backup_type is BackupType.LOG and descriptor.recovery_model is RecoveryModel.SIMPLE:
        result.add_failure(SIMPLE_RECOVERY_LOG)

    if request.backup_type is not BackupType.FULL and not has_prior_full_backup(descriptor.name, history):
        result.add_failure(NO_FULL_BACKUP)

    return result


def check_run_request(descriptors: List[DatabaseDescriptor], request: BackupRequestConfig):
    """
    Validaciones que abortan toda la ejecución

    Raises:
        BackupConfigurationError: file_name indicado con más de una base de datos
    """
    if request.file_name and len(descriptors) > 1:
        raise BackupConfigurationError(
            "file_name solo puede usarse con una única base de datos "
            f"({len(descriptors)} solicitadas)"
        )
