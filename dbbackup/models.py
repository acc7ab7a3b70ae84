"""
Modelos de datos del sistema
"""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, List, Optional, Tuple

# Marca informativa cuando una base de datos no acumuló fallos
NO_ISSUES = "no issues"


class RecoveryModel(Enum):
    """Modelo de recuperación de una base de datos"""
    UNKNOWN = "UNKNOWN"
    SIMPLE = "SIMPLE"
    FULL = "FULL"
    BULK_LOGGED = "BULK_LOGGED"

    @classmethod
    def from_server(cls, value: Optional[str]) -> "RecoveryModel":
        """Convierte recovery_model_desc de sys.databases"""
        try:
            return cls((value or "").strip().upper())
        except ValueError:
            return cls.UNKNOWN


class BackupType(Enum):
    """Tipo de backup solicitado"""
    FULL = "full"
    DIFFERENTIAL = "differential"
    LOG = "log"

    @classmethod
    def parse(cls, value: str) -> "BackupType":
        """
        Interpreta el tipo de backup desde texto

        Args:
            value: full, diff, differential o log

        Returns:
            BackupType correspondiente
        """
        aliases = {
            'full': cls.FULL,
            'database': cls.FULL,
            'diff': cls.DIFFERENTIAL,
            'differential': cls.DIFFERENTIAL,
            'log': cls.LOG,
        }
        key = (value or "").strip().lower()
        if key not in aliases:
            raise ValueError(f"Tipo de backup no soportado: {value}")
        return aliases[key]

    @property
    def extension(self) -> str:
        return "trn" if self is BackupType.LOG else "bak"

    @property
    def action(self) -> str:
        # Un diferencial es un backup de base de datos con la marca incremental
        return "Log" if self is BackupType.LOG else "Database"

    @property
    def incremental(self) -> bool:
        return self is BackupType.DIFFERENTIAL


@dataclass(frozen=True)
class DatabaseName:
    """Entrada como nombre plano"""
    name: str


@dataclass(frozen=True)
class DatabaseObject:
    """Entrada como objeto con campo name; conserva el objeto original"""
    name: str
    source: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class DatabaseDescriptor:
    """Base de datos normalizada dentro de una ejecución"""
    name: str
    recovery_model: RecoveryModel = RecoveryModel.UNKNOWN

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("El nombre de la base de datos es obligatorio")

    def with_recovery_model(self, recovery_model: RecoveryModel) -> "DatabaseDescriptor":
        return replace(self, recovery_model=recovery_model)


@dataclass(frozen=True)
class Credential:
    """Login SQL; None en su lugar implica autenticación integrada"""
    user: str
    password: str = field(repr=False, default="")


@dataclass(frozen=True)
class ServerSettings:
    """Instancia destino tal como se lee de la configuración"""
    instance: str
    type: str = "sqlserver"
    credential: Optional[Credential] = None


@dataclass(frozen=True)
class BackupRequestConfig:
    """Configuración inmutable de una ejecución"""
    backup_type: BackupType = BackupType.FULL
    copy_only: bool = False
    file_count: int = 1
    backup_paths: Tuple[str, ...] = ()
    file_name: Optional[str] = None
    create_folder: bool = False

    def __post_init__(self):
        """Validación después de inicialización"""
        # Aceptar listas desde la configuración JSON
        object.__setattr__(self, 'backup_paths', tuple(self.backup_paths or ()))
        if not isinstance(self.backup_type, BackupType):
            raise ValueError(f"backup_type inválido: {self.backup_type}")
        if self.file_count < 1:
            raise ValueError("file_count debe ser mayor a 0")
        if any(not path or not str(path).strip() for path in self.backup_paths):
            raise ValueError("backup_paths no admite rutas vacías")
        if self.file_name is not None and not self.file_name.strip():
            raise ValueError("file_name no puede estar vacío")

    @property
    def effective_file_count(self) -> int:
        """Varias rutas imponen el número de stripes"""
        if len(self.backup_paths) > 1:
            return len(self.backup_paths)
        return self.file_count


@dataclass(frozen=True)
class BackupHistoryFact:
    """Existencia de un backup completo previo"""
    database_name: str
    has_prior_full_backup: bool


@dataclass
class StepResult:
    """Resultado acumulativo de evaluación y planificación"""
    failures: List[str] = field(default_factory=list)
    paths: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def add_failure(self, reason: str):
        self.failures.append(reason)


@dataclass(frozen=True)
class BackupSpec:
    """Operación que se entrega al motor de backup"""
    database_name: str
    backup_type: BackupType
    copy_only: bool
    devices: Tuple[str, ...]

    @property
    def action(self) -> str:
        return self.backup_type.action

    @property
    def incremental(self) -> bool:
        return self.backup_type.incremental


@dataclass(frozen=True)
class EngineResult:
    """Respuesta del motor de backup"""
    completed: bool
    command_trace: str = ""
    error: Optional[str] = None


@dataclass(frozen=True)
class BackupOutcome:
    """Resultado de una base de datos en una ejecución"""
    sql_instance: str
    database_name: str
    completed: bool
    file_count: int
    command_trace: str = ""
    failure_reasons: Tuple[str, ...] = (NO_ISSUES,)
    backup_files: Tuple[str, ...] = ()
    duration_seconds: float = 0.0

    @property
    def has_issues(self) -> bool:
        return tuple(self.failure_reasons) != (NO_ISSUES,)

    def __str__(self):
        if self.completed:
            return f"✓ {self.sql_instance}/{self.database_name}: {self.file_count} archivo(s) ({self.duration_seconds:.2f}s)"
        else:
            return f"✗ {self.sql_instance}/{self.database_name}: {'; '.join(self.failure_reasons)}"
