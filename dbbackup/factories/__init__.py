"""
Factories de la aplicación
"""
from .gateway_factory import GatewayFactory

__all__ = ['GatewayFactory']
