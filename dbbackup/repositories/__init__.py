"""
Repositorios de la aplicación
"""
from .config_repository import ConfigRepository

__all__ = ['ConfigRepository']
