"""
Ejecución del backup contra el motor del servidor
"""
from typing import Any, Callable, List, Optional
from ..exceptions import BackupEngineError
from ..logger import LoggerService
from ..models import BackupRequestConfig, BackupSpec, EngineResult
from ..strategies.base_strategy import ServerGateway

# Recibe (base de datos, porcentaje)
RunProgressCallback = Callable[[str, int], None]


class BackupExecutor:
    """Invoca el motor de backup y captura el resultado sin propagar errores"""

    def __init__(self, gateway: ServerGateway, connection: Any,
                 progress_callback: Optional[RunProgressCallback] = None):
        """
        Inicializa el ejecutor

        Args:
            gateway: Gateway del servidor
            connection: Conexión compartida de la ejecución
            progress_callback: Recibe (base de datos, porcentaje); por defecto se registra en el log
        """
        self.gateway = gateway
        self.connection = connection
        self.progress_callback = progress_callback
        self.logger = LoggerService.get_logger("BackupExecutor")

    def execute(self, database_name: str, request: BackupRequestConfig, devices: List[str]) -> EngineResult:
        """
        Ejecuta el backup sobre exactamente los dispositivos indicados

        Args:
            database_name: Base de datos
            request: Configuración de la ejecución
            devices: Rutas finales, una por stripe

        Returns:
            EngineResult; completed=False y error informado si el motor falla
        """
        spec = BackupSpec(
            database_name=database_name,
            backup_type=request.backup_type,
            copy_only=request.copy_only,
            devices=tuple(devices)
        )
        self.logger.info(
            f"Iniciando backup {spec.action.upper()}"
            f"{' DIFFERENTIAL' if spec.incremental else ''}"
            f"{' COPY_ONLY' if spec.copy_only else ''} de {database_name} "
            f"en {len(spec.devices)} dispositivo(s)"
        )

        def on_progress(percent: int):
            if self.progress_callback:
                self.progress_callback(database_name, percent)
            else:
                self.logger.info(f"  {database_name}: {percent}% procesado")

        try:
            result = self.gateway.execute_backup(self.connection, spec, on_progress)
        except BackupEngineError as e:
            self.logger.error(f"Backup fallido de {database_name}: {e}")
            return EngineResult(completed=False, command_trace=e.command_trace, error=str(e))
        except Exception as e:
            self.logger.error(f"Error inesperado en el backup de {database_name}: {e}")
            return EngineResult(completed=False, error=str(e) or type(e).__name__)

        if result.completed:
            self.logger.info(f"✓ Backup completado: {database_name}")
        else:
            self.logger.error(f"Backup no completado: {database_name}")
        return result
