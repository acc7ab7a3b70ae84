"""
Servicio de logging siguiendo principio Single Responsibility
"""
import logging
import sys
from datetime import datetime
from typing import List
from .config import Config


class LoggerService:
    """Servicio centralizado de logging"""

    _loggers = {}

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """
        Obtiene o crea un logger con el nombre especificado

        Args:
            name: Nombre del logger

        Returns:
            Logger configurado
        """
        if name in cls._loggers:
            return cls._loggers[name]

        logger = cls._setup_logger(name)
        cls._loggers[name] = logger
        return logger

    @classmethod
    def _setup_logger(cls, name: str) -> logging.Logger:
        """
        Configura un nuevo logger con un nivel propio por handler

        El logger deja pasar el nivel más bajo de sus handlers y cada
        handler filtra el suyo: la consola muestra el avance y los fallos,
        el archivo diario conserva también el detalle de cada base de datos.

        Args:
            name: Nombre del logger

        Returns:
            Logger configurado
        """
        logger = logging.getLogger(f"dbbackup.{name}")

        # Evitar duplicar handlers
        if logger.handlers:
            return logger

        handlers = cls._create_handlers(name)
        logger.setLevel(min(handler.level for handler in handlers))

        formatter = logging.Formatter(Config.LOG_FORMAT)
        for handler in handlers:
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        return logger

    @classmethod
    def _create_handlers(cls, name: str) -> List[logging.Handler]:
        """Handler de consola y, si está habilitado, archivo diario por logger"""
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(Config.LOG_LEVEL)
        handlers = [console_handler]

        if Config.LOG_TO_FILE:
            Config.ensure_directories()
            log_file = Config.LOG_DIR / f"{name}_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(Config.FILE_LOG_LEVEL)
            handlers.append(file_handler)

        return handlers
