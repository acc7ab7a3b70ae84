"""
Factory para crear gateways de servidor
"""
from typing import Optional
from ..strategies.base_strategy import ServerGateway
from ..strategies.sqlserver_strategy import SQLServerGateway


class GatewayFactory:
    """Factory para crear gateways de servidor (Factory Pattern)"""

    # Mapeo de tipos de servidor a gateways
    _gateways = {
        'sqlserver': SQLServerGateway,
        'mssql': SQLServerGateway,
    }

    @classmethod
    def create(cls, server_type: str) -> Optional[ServerGateway]:
        """
        Crea un gateway según el tipo de servidor

        Args:
            server_type: Tipo de servidor (sqlserver, mssql)

        Returns:
            Instancia de ServerGateway o None si el tipo no es soportado
        """
        gateway_class = cls._gateways.get((server_type or "").lower())
        if gateway_class:
            return gateway_class()
        return None

    @classmethod
    def register_gateway(cls, server_type: str, gateway_class: type):
        """
        Registra un nuevo gateway (permite extender sin modificar - Open/Closed)

        Args:
            server_type: Tipo de servidor
            gateway_class: Clase de gateway a registrar
        """
        cls._gateways[server_type.lower()] = gateway_class

    @classmethod
    def get_supported_types(cls) -> list:
        """
        Obtiene lista de tipos de servidor soportados

        Returns:
            Lista de tipos soportados
        """
        return list(cls._gateways.keys())
