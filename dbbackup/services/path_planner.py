"""
Planificación de los archivos destino de cada backup

Las rutas pertenecen al servidor (Windows), no a la máquina que ejecuta
este proceso, por eso se manipulan con PureWindowsPath.
"""
from datetime import datetime
from pathlib import PureWindowsPath
from typing import Any, List, Optional
from ..config import Config
from ..logger import LoggerService
from ..models import BackupRequestConfig, BackupType, DatabaseDescriptor, StepResult
from ..strategies.base_strategy import ServerGateway

NO_DIRECTORY = "no backup directory configured and the server reports no default backup directory"


def build_file_name(database_name: str, timestamp: datetime, backup_type: BackupType) -> str:
    """
    Nombre de archivo sin ruta: <base>_<yyyyMMddHHmm>.<ext>

    Args:
        database_name: Nombre de la base de datos
        timestamp: Momento de la ejecución
        backup_type: Determina la extensión (trn para log, bak en otro caso)

    Returns:
        Nombre de archivo determinista
    """
    return f"{database_name.strip()}_{timestamp.strftime(Config.TIMESTAMP_FORMAT)}.{backup_type.extension}"


def stripe_paths(paths: List[str], total: int) -> List[str]:
    """
    Marca cada dispositivo con su posición: nombre-<i>-of-<total>.<ext>

    Args:
        paths: Rutas en el orden en que se agregaron
        total: Número total de stripes

    Returns:
        Rutas renombradas, índice desde 1
    """
    striped = []
    for index, path in enumerate(paths, 1):
        device = PureWindowsPath(path)
        striped.append(str(device.with_name(f"{device.stem}-{index}-of-{total}{device.suffix}")))
    return striped


class PathPlanner:
    """Calcula la lista de dispositivos de backup para una base de datos"""

    def __init__(self, gateway: ServerGateway, connection: Any):
        self.gateway = gateway
        self.connection = connection
        self.logger = LoggerService.get_logger("PathPlanner")

    def plan(self, descriptor: DatabaseDescriptor, request: BackupRequestConfig,
             timestamp: datetime, default_directory: Optional[str] = None) -> StepResult:
        """
        Planifica las rutas finales de los dispositivos

        Args:
            descriptor: Base de datos elegible
            request: Configuración de la ejecución
            timestamp: Momento usado en los nombres generados
            default_directory: Directorio por defecto de la instancia, usado si no hay rutas

        Returns:
            StepResult con una ruta por stripe, o sin rutas y con los fallos
        """
        if request.file_name:
            result = self._plan_explicit_file(request, default_directory)
        else:
            result = self._plan_generated_files(descriptor, request, timestamp, default_directory)

        if not result.ok:
            result.paths = []
            return result

        total = request.effective_file_count
        if total >= 2:
            paths = result.paths
            if len(paths) == 1:
                # Una sola ruta con varios archivos: se repite la ruta base
                paths = paths * total
            result.paths = stripe_paths(paths, total)

        self.logger.debug(f"{descriptor.name}: {len(result.paths)} dispositivo(s) planificado(s)")
        return result

    def _plan_explicit_file(self, request: BackupRequestConfig,
                            default_directory: Optional[str]) -> StepResult:
        result = StepResult()
        target = PureWindowsPath(request.file_name.strip())

        if not target.anchor and len(target.parts) == 1:
            base = request.backup_paths[0] if request.backup_paths else default_directory
            if not base:
                result.add_failure(NO_DIRECTORY)
                return result
            target = PureWindowsPath(base) / target

        directory = str(target.parent)
        if not self.gateway.can_write_to_directory(self.connection, directory):
            self.logger.warning(f"Sin permiso de escritura en {directory}")
            result.add_failure(f"cannot write to directory {directory}")
            return result

        result.paths.append(str(target))
        return result

    def _plan_generated_files(self, descriptor: DatabaseDescriptor, request: BackupRequestConfig,
                              timestamp: datetime, default_directory: Optional[str]) -> StepResult:
        result = StepResult()
        directories = list(request.backup_paths)
        if not directories:
            if not default_directory:
                result.add_failure(NO_DIRECTORY)
                return result
            directories = [default_directory]

        file_name = build_file_name(descriptor.name, timestamp, request.backup_type)
        for configured in directories:
            directory = PureWindowsPath(configured.strip())
            if request.create_folder:
                directory = directory / descriptor.name.strip()

            if not self.gateway.ensure_directory(self.connection, str(directory)):
                self.logger.warning(f"No se pudo crear o escribir en {directory}")
                result.add_failure(f"cannot create or write to directory {directory}")
                continue

            result.paths.append(str(directory / file_name))

        return result
