"""
Gateway para SQL Server
Ejecuta BACKUP DATABASE / BACKUP LOG nativo a través de pyodbc
"""
import re
from typing import Iterable, List, Optional, Set
import pyodbc
from .base_strategy import ServerGateway, ProgressCallback
from ..config import Config
from ..exceptions import BackupEngineError, ServerConnectionError
from ..models import BackupHistoryFact, BackupSpec, Credential, EngineResult, RecoveryModel

# Mensaje informativo que SQL Server emite con WITH STATS
PROGRESS_PATTERN = re.compile(r"(\d{1,3}) percent processed", re.IGNORECASE)

STATS_INTERVAL = 10


def quote_name(name: str) -> str:
    """Delimita un identificador como lo hace QUOTENAME"""
    return "[" + name.replace("]", "]]") + "]"


def quote_string(value: str) -> str:
    """Literal Unicode de T-SQL"""
    return "N'" + value.replace("'", "''") + "'"


def build_backup_script(spec: BackupSpec) -> str:
    """
    Genera el script T-SQL equivalente a la operación

    Args:
        spec: Operación de backup

    Returns:
        Sentencia BACKUP completa
    """
    devices = ",\n    ".join(f"DISK = {quote_string(device)}" for device in spec.devices)
    options = []
    if spec.copy_only:
        options.append("COPY_ONLY")
    if spec.incremental:
        options.append("DIFFERENTIAL")
    options.append(f"STATS = {STATS_INTERVAL}")

    return (
        f"BACKUP {spec.action.upper()} {quote_name(spec.database_name)} TO\n"
        f"    {devices}\n"
        f"WITH {', '.join(options)};"
    )


def parse_progress(messages: Iterable) -> List[int]:
    """
    Extrae los porcentajes de los mensajes informativos de pyodbc

    Args:
        messages: Tuplas (sqlstate, texto) de cursor.messages

    Returns:
        Porcentajes encontrados, en orden
    """
    percents = []
    for message in messages:
        text = message[1] if isinstance(message, (tuple, list)) else str(message)
        match = PROGRESS_PATTERN.search(str(text))
        if match:
            percents.append(min(int(match.group(1)), 100))
    return percents


class SQLServerGateway(ServerGateway):
    """Gateway de SQL Server sobre ODBC"""

    def connect(self, instance: str, credential: Optional[Credential]):
        conn_str = (
            f"DRIVER={{{Config.ODBC_DRIVER}}};"
            f"SERVER={instance};"
            f"DATABASE=master;"
            f"TrustServerCertificate=yes;"
        )
        if credential:
            conn_str += f"UID={credential.user};PWD={credential.password};"
        else:
            conn_str += "Trusted_Connection=yes;"

        self.logger.info(f"[SQLSERVER] Connecting to {instance}")
        try:
            # BACKUP no puede ejecutarse dentro de una transacción
            conn = pyodbc.connect(conn_str, autocommit=True, timeout=Config.CONNECT_TIMEOUT)
        except pyodbc.Error as e:
            self.logger.error(f"[SQLSERVER] Connection error: {e}")
            raise ServerConnectionError(instance, str(e)) from e

        # Sin timeout de sentencia: un backup puede durar lo que dure la E/S
        conn.timeout = 0
        return conn

    def close(self, connection):
        try:
            connection.close()
        except pyodbc.Error as e:
            self.logger.warning(f"[SQLSERVER] Error closing connection: {e}")

    def _close_cursor(self, cursor):
        try:
            cursor.close()
        except pyodbc.Error as e:
            self.logger.warning(f"[SQLSERVER] Error closing cursor: {e}")

    def get_recovery_model(self, connection, database_name: str) -> Optional[RecoveryModel]:
        cursor = connection.cursor()
        try:
            cursor.execute(
                "SELECT recovery_model_desc FROM sys.databases WHERE name = ?",
                database_name
            )
            row = cursor.fetchone()
        finally:
            self._close_cursor(cursor)
        if row is None:
            return None
        return RecoveryModel.from_server(row[0])

    def get_last_full_backups(self, connection, database_names: Iterable[str]) -> Set[BackupHistoryFact]:
        names = list(database_names)
        if not names:
            return set()

        placeholders = ", ".join("?" for _ in names)
        cursor = connection.cursor()
        try:
            cursor.execute(
                f"""
                SELECT database_name, MAX(backup_finish_date)
                FROM msdb.dbo.backupset
                WHERE type = 'D'
                AND is_copy_only = 0
                AND database_name IN ({placeholders})
                GROUP BY database_name
                """,
                *names
            )
            rows = cursor.fetchall()
        finally:
            self._close_cursor(cursor)

        found = {row[0].lower() for row in rows if row[1] is not None}
        return {
            BackupHistoryFact(database_name=name, has_prior_full_backup=name.lower() in found)
            for name in names
        }

    def can_write_to_directory(self, connection, directory: str) -> bool:
        cursor = connection.cursor()
        try:
            cursor.execute("EXEC master.dbo.xp_fileexist ?", directory)
            row = cursor.fetchone()
        except pyodbc.Error as e:
            self.logger.warning(f"[SQLSERVER] Cannot check {directory}: {e}")
            return False
        finally:
            self._close_cursor(cursor)
        # Columnas: File Exists, File is a Directory, Parent Directory Exists
        return bool(row and row[1])

    def ensure_directory(self, connection, directory: str) -> bool:
        if self.can_write_to_directory(connection, directory):
            return True
        cursor = connection.cursor()
        try:
            cursor.execute("EXEC master.sys.xp_create_subdir ?", directory)
        except pyodbc.Error as e:
            self.logger.warning(f"[SQLSERVER] Cannot create {directory}: {e}")
            return False
        finally:
            self._close_cursor(cursor)
        self.logger.info(f"[SQLSERVER] Created directory {directory}")
        return self.can_write_to_directory(connection, directory)

    def get_default_backup_directory(self, connection) -> Optional[str]:
        cursor = connection.cursor()
        try:
            cursor.execute("SELECT CAST(SERVERPROPERTY('InstanceDefaultBackupPath') AS NVARCHAR(4000))")
            row = cursor.fetchone()
        finally:
            self._close_cursor(cursor)
        if row is None or not row[0]:
            return None
        return row[0]

    def execute_backup(self, connection, spec: BackupSpec,
                       progress_callback: Optional[ProgressCallback] = None) -> EngineResult:
        script = build_backup_script(spec)
        self.logger.debug(f"[BACKUP] {script}")
        last_percent = 0

        def report(percents: List[int]):
            nonlocal last_percent
            for percent in percents:
                if percent < last_percent:
                    continue
                last_percent = percent
                if progress_callback:
                    progress_callback(percent)

        cursor = None
        try:
            cursor = connection.cursor()
            cursor.execute(script)
            # Cada bloque de mensajes STATS llega en un result set propio
            while True:
                report(parse_progress(cursor.messages or []))
                if not cursor.nextset():
                    break
        except pyodbc.Error as e:
            self.logger.error(f"[BACKUP] ERROR: {e}")
            raise BackupEngineError(str(e), command_trace=script) from e
        finally:
            if cursor is not None:
                self._close_cursor(cursor)

        if last_percent < 100:
            report([100])

        return EngineResult(completed=True, command_trace=script)
