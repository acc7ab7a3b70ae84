"""
Excepciones del orquestador de backups

Solo los errores a nivel de ejecución completa se lanzan al llamador.
Los fallos por base de datos viajan dentro de BackupOutcome.
"""
from typing import Optional


class BackupRunError(Exception):
    """Error fatal que aborta toda la ejecución antes de emitir resultados"""


class ServerConnectionError(BackupRunError):
    """No fue posible conectar con la instancia"""

    def __init__(self, instance: str, reason: str):
        self.instance = instance
        self.reason = reason
        super().__init__(f"No se pudo conectar a {instance}: {reason}")


class BackupConfigurationError(BackupRunError):
    """Configuración inválida para la ejecución solicitada"""


class BackupEngineError(Exception):
    """Fallo del motor de backup al escribir los dispositivos"""

    def __init__(self, message: str, command_trace: Optional[str] = None):
        self.command_trace = command_trace or ""
        super().__init__(message)
