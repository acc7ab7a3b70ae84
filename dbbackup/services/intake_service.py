"""
Normalización de las bases de datos recibidas como entrada
"""
from collections.abc import Mapping
from typing import Any, Iterable, List, Optional, Union
from ..logger import LoggerService
from ..models import DatabaseDescriptor, DatabaseName, DatabaseObject

DatabaseInput = Union[DatabaseName, DatabaseObject]

logger = LoggerService.get_logger("IntakeService")


def to_database_input(raw: Any) -> Optional[DatabaseInput]:
    """
    Clasifica una entrada cruda como nombre plano u objeto

    Args:
        raw: str, dict con clave 'name' u objeto con atributo name

    Returns:
        DatabaseName / DatabaseObject, o None si no tiene un nombre válido
    """
    if isinstance(raw, str):
        name = raw
    elif isinstance(raw, Mapping):
        name = raw.get('name')
    else:
        # Se usa el nombre real del objeto, nunca un valor fijo
        name = getattr(raw, 'name', None)

    if not isinstance(name, str) or not name.strip():
        return None

    if isinstance(raw, (str, DatabaseName)):
        return DatabaseName(name.strip())
    if isinstance(raw, DatabaseObject):
        return DatabaseObject(name.strip(), raw.source)
    return DatabaseObject(name.strip(), raw)


def normalize_databases(raw_inputs: Optional[Iterable[Any]]) -> List[DatabaseDescriptor]:
    """
    Convierte la entrada heterogénea en descriptores uniformes

    Las entradas sin nombre se omiten; el orden de entrada se conserva.

    Args:
        raw_inputs: Secuencia de nombres u objetos

    Returns:
        Lista de DatabaseDescriptor con modelo de recuperación UNKNOWN
    """
    descriptors = []
    for raw in raw_inputs or []:
        database_input = to_database_input(raw)
        if database_input is None:
            logger.warning(f"Entrada de base de datos ignorada (sin nombre): {raw!r}")
            continue
        descriptors.append(DatabaseDescriptor(name=database_input.name))
    return descriptors
