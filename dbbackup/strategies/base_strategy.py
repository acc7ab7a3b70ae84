"""
Gateway base hacia el servidor de base de datos (Strategy Pattern)
"""
from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Optional, Set
from ..logger import LoggerService
from ..models import BackupHistoryFact, BackupSpec, Credential, EngineResult, RecoveryModel

ProgressCallback = Callable[[int], None]


class ServerGateway(ABC):
    """Interfaz abstracta para los servicios del servidor (Open/Closed Principle)"""

    def __init__(self):
        """Inicializa el gateway"""
        self.logger = LoggerService.get_logger(self.__class__.__name__)

    @abstractmethod
    def connect(self, instance: str, credential: Optional[Credential]) -> Any:
        """
        Abre la conexión que se reutiliza durante toda la ejecución

        Args:
            instance: Servidor o servidor\\instancia
            credential: Login SQL, o None para autenticación integrada

        Returns:
            Handle de conexión

        Raises:
            ServerConnectionError: si no es posible conectar
        """

    @abstractmethod
    def close(self, connection: Any):
        """Cierra la conexión"""

    @abstractmethod
    def get_recovery_model(self, connection: Any, database_name: str) -> Optional[RecoveryModel]:
        """
        Obtiene el modelo de recuperación

        Returns:
            RecoveryModel, o None si la base de datos no existe
        """

    @abstractmethod
    def get_last_full_backups(self, connection: Any, database_names: Iterable[str]) -> Set[BackupHistoryFact]:
        """Consulta en una sola llamada qué bases tienen un backup completo previo"""

    @abstractmethod
    def can_write_to_directory(self, connection: Any, directory: str) -> bool:
        """Verifica que la cuenta de servicio pueda escribir en el directorio"""

    @abstractmethod
    def ensure_directory(self, connection: Any, directory: str) -> bool:
        """Crea el directorio si no existe y verifica que sea escribible"""

    @abstractmethod
    def get_default_backup_directory(self, connection: Any) -> Optional[str]:
        """Directorio de backup por defecto de la instancia"""

    @abstractmethod
    def execute_backup(self, connection: Any, spec: BackupSpec,
                       progress_callback: Optional[ProgressCallback] = None) -> EngineResult:
        """
        Ejecuta el backup de forma síncrona

        Args:
            connection: Handle de conexión
            spec: Operación a ejecutar
            progress_callback: Recibe porcentajes 0-100 no decrecientes

        Returns:
            EngineResult con el script equivalente

        Raises:
            BackupEngineError: si el motor falla al escribir
        """
