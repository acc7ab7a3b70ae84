"""
Gateways hacia los servidores de base de datos

SQLServerGateway se importa desde sqlserver_strategy; depende de pyodbc
y del driver ODBC instalado en el sistema.
"""
from .base_strategy import ServerGateway, ProgressCallback

__all__ = [
    'ServerGateway',
    'ProgressCallback'
]
