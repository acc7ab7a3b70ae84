"""
Configuración centralizada del orquestador de backups
"""
import logging
import os
from pathlib import Path
from dotenv import load_dotenv, find_dotenv


class Config:
    """Configuración centralizada del sistema"""

    ENV_FILE = find_dotenv()

    # Cargar variables de entorno desde la raíz real del proyecto
    load_dotenv(ENV_FILE)

    # BASE_DIR debe ser la raíz donde está main.py
    BASE_DIR = Path(ENV_FILE).parent if ENV_FILE else Path(__file__).resolve().parents[1]

    LOG_DIR = Path(os.getenv("LOG_DIR")) if os.getenv("LOG_DIR") else (BASE_DIR / "Logs")
    CONFIG_FILE = Path(os.getenv("BACKUP_CONFIG_FILE")) if os.getenv("BACKUP_CONFIG_FILE") else (BASE_DIR / "config.json")

    # Consola en INFO; el archivo guarda también las transiciones de estado (DEBUG)
    LOG_LEVEL = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
    FILE_LOG_LEVEL = getattr(logging, os.getenv("FILE_LOG_LEVEL", "DEBUG").upper(), logging.DEBUG)
    LOG_TO_FILE = os.getenv("LOG_TO_FILE", "true").strip().lower() not in ("0", "false", "no")
    LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    # Conexión ODBC
    ODBC_DRIVER = os.getenv("ODBC_DRIVER", "ODBC Driver 17 for SQL Server")
    CONNECT_TIMEOUT = 30  # Solo afecta al login; las sentencias no tienen timeout

    # Formato del timestamp en los nombres de archivo (yyyyMMddHHmm)
    TIMESTAMP_FORMAT = "%Y%m%d%H%M"

    DEFAULT_CONFIG = {
        "server": {
            "instance": "localhost\\SQLEXPRESS",
            "type": "sqlserver",
            "user": "${MSSQL_USER}",
            "password": "${MSSQL_PASSWORD}"
        },
        "databases": [
            "HR",
            {"name": "Finance"}
        ],
        "backup_settings": {
            "type": "full",
            "copy_only": False,
            "file_count": 1,
            "backup_paths": ["C:\\Backups"],
            "file_name": None,
            "create_folder": True
        }
    }

    @classmethod
    def ensure_directories(cls):
        """Crea los directorios necesarios si no existen"""
        cls.LOG_DIR.mkdir(parents=True, exist_ok=True)
