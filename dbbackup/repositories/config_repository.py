"""
Repositorio para manejar configuración (Dependency Inversion)
"""
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional
from ..config import Config
from ..exceptions import BackupConfigurationError
from ..logger import LoggerService
from ..models import BackupRequestConfig, BackupType, Credential, ServerSettings


class ConfigRepository:
    """Repositorio para manejar configuración"""

    def __init__(self, config_file: Optional[Path] = None):
        """
        Inicializa el repositorio de configuración

        Args:
            config_file: Ruta al archivo de configuración (opcional)
        """
        self.config_file = config_file or Config.CONFIG_FILE
        self.logger = LoggerService.get_logger("ConfigRepository")
        self._raw_config = None

    def load(self) -> Dict:
        """
        Carga configuración desde archivo JSON

        Returns:
            Diccionario con la configuración
        """
        if not self.config_file.exists():
            self.logger.warning(f"El archivo de configuración no existe: {self.config_file}")
            self._raw_config = Config.DEFAULT_CONFIG
            return self._raw_config

        try:
            with open(self.config_file, "r", encoding='utf-8') as f:
                self._raw_config = json.load(f)
            self.logger.info(f"Configuración cargada exitosamente: {self.config_file}")
            return self._raw_config
        except json.JSONDecodeError as e:
            self.logger.error(f"Error al parsear JSON: {e}")
            self._raw_config = Config.DEFAULT_CONFIG
            return self._raw_config
        except OSError as e:
            self.logger.error(f"Error al cargar la configuración: {str(e)}")
            self._raw_config = Config.DEFAULT_CONFIG
            return self._raw_config

    def save(self, config: Dict) -> bool:
        """
        Guarda configuración en archivo JSON

        Args:
            config: Diccionario con la configuración

        Returns:
            True si se guardó exitosamente
        """
        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, "w", encoding='utf-8') as f:
                json.dump(config, f, indent=4, ensure_ascii=False)
            self.logger.info(f"Configuración guardada exitosamente: {self.config_file}")
            return True
        except OSError as e:
            self.logger.error(f"Error al guardar la configuración: {str(e)}")
            return False

    def get_server_settings(self) -> ServerSettings:
        """
        Obtiene la instancia destino y sus credenciales

        Returns:
            ServerSettings; sin usuario se asume autenticación integrada
        """
        if self._raw_config is None:
            self.load()

        server = self._raw_config.get('server', {})
        user = self._resolve_credential(server.get('user', '') or '')
        password = self._resolve_credential(server.get('password', '') or '')
        credential = Credential(user=user, password=password) if user else None

        return ServerSettings(
            instance=server.get('instance', 'localhost'),
            type=server.get('type', 'sqlserver'),
            credential=credential
        )

    def get_databases(self) -> List[Any]:
        """
        Obtiene la lista cruda de bases de datos (nombres u objetos)

        Returns:
            Lista tal como aparece en la configuración
        """
        if self._raw_config is None:
            self.load()
        return list(self._raw_config.get('databases', []))

    def get_backup_request(self, overrides: Optional[Dict] = None) -> BackupRequestConfig:
        """
        Construye la configuración de la ejecución

        Args:
            overrides: Valores que reemplazan a los del archivo (None se ignora)

        Returns:
            BackupRequestConfig validado

        Raises:
            BackupConfigurationError: si la configuración es inválida
        """
        if self._raw_config is None:
            self.load()

        settings = dict(self._raw_config.get('backup_settings', {}))
        for key, value in (overrides or {}).items():
            if value is not None:
                settings[key] = value

        try:
            return BackupRequestConfig(
                backup_type=BackupType.parse(settings.get('type', 'full')),
                copy_only=bool(settings.get('copy_only', False)),
                file_count=int(settings.get('file_count', 1)),
                backup_paths=tuple(settings.get('backup_paths') or ()),
                file_name=settings.get('file_name'),
                create_folder=bool(settings.get('create_folder', False))
            )
        except (TypeError, ValueError) as e:
            self.logger.error(f"Error al cargar configuración de backups: {str(e)}")
            raise BackupConfigurationError(str(e)) from e

    def _resolve_credential(self, value: str) -> str:
        """
        Resuelve credencial desde variable de entorno si es necesario

        Args:
            value: Valor que puede contener referencia a variable de entorno

        Returns:
            Valor resuelto
        """
        if value.startswith("${") and value.endswith("}"):
            env_var = value[2:-1]
            resolved = os.getenv(env_var, "")
            if not resolved:
                self.logger.warning(f"Variable de entorno no encontrada: {env_var}")
            return resolved
        return value

    def create_example_config(self) -> bool:
        """
        Crea un archivo de configuración de ejemplo

        Returns:
            True si se creó exitosamente
        """
        return self.save(Config.DEFAULT_CONFIG)
