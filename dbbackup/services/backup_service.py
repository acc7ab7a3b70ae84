"""
Servicio principal que orquesta los backups
"""
import time
from datetime import datetime
from typing import Any, Callable, Iterable, List, Optional, Set
from ..logger import LoggerService
from ..models import (
    NO_ISSUES, BackupHistoryFact, BackupOutcome, BackupRequestConfig,
    BackupType, Credential, DatabaseDescriptor, EngineResult
)
from ..strategies.base_strategy import ServerGateway
from .backup_executor import BackupExecutor, RunProgressCallback
from .eligibility_service import check_run_request, evaluate, resolve_recovery_model
from .intake_service import normalize_databases
from .path_planner import PathPlanner


def build_outcome(sql_instance: str, database_name: str, request: BackupRequestConfig,
                  failures: List[str], engine_result: Optional[EngineResult] = None,
                  backup_files: Iterable[str] = (), duration_seconds: float = 0.0) -> BackupOutcome:
    """
    Arma el registro de resultado de una base de datos

    Args:
        sql_instance: Instancia procesada
        database_name: Base de datos
        request: Configuración de la ejecución
        failures: Fallos acumulados; vacío se reemplaza por la marca "no issues"
        engine_result: Resultado del motor, None si no se ejecutó
        backup_files: Dispositivos usados
        duration_seconds: Duración del procesamiento

    Returns:
        BackupOutcome inmutable
    """
    completed = bool(engine_result and engine_result.completed)
    return BackupOutcome(
        sql_instance=sql_instance,
        database_name=database_name,
        completed=completed,
        file_count=request.effective_file_count,
        command_trace=engine_result.command_trace if engine_result else "",
        failure_reasons=tuple(failures) if failures else (NO_ISSUES,),
        backup_files=tuple(backup_files),
        duration_seconds=duration_seconds
    )


class BackupService:
    """Servicio principal que orquesta los backups"""

    def __init__(self, gateway: ServerGateway,
                 progress_callback: Optional[RunProgressCallback] = None,
                 clock: Callable[[], datetime] = datetime.now):
        """
        Inicializa el servicio de backup

        Args:
            gateway: Gateway del servidor (conexión, consultas y motor de backup)
            progress_callback: Recibe (base de datos, porcentaje) durante cada backup
            clock: Fuente del timestamp usado en los nombres de archivo
        """
        self.gateway = gateway
        self.progress_callback = progress_callback
        self.clock = clock
        self.logger = LoggerService.get_logger("BackupService")

    def backup_databases(self, databases: Iterable[Any], sql_instance: str,
                         credential: Optional[Credential],
                         request: BackupRequestConfig) -> List[BackupOutcome]:
        """
        Realiza el backup de las bases de datos indicadas, en orden

        Args:
            databases: Nombres u objetos con campo name
            sql_instance: Servidor o servidor\\instancia
            credential: Login SQL, o None para autenticación integrada
            request: Configuración de la ejecución

        Returns:
            Un BackupOutcome por base de datos válida, en el orden de entrada

        Raises:
            BackupConfigurationError: file_name con más de una base de datos
            ServerConnectionError: no se pudo conectar a la instancia
        """
        descriptors = normalize_databases(databases)
        check_run_request(descriptors, request)

        self.logger.info("=" * 70)
        self.logger.info(f"INICIANDO PROCESO DE BACKUP {request.backup_type.name} EN {sql_instance}")
        self.logger.info("=" * 70)

        if not descriptors:
            self.logger.warning("No se recibieron bases de datos para procesar")
            return []

        connection = self.gateway.connect(sql_instance, credential)
        try:
            history = self._load_history(connection, descriptors, request)
            default_directory = None
            if not request.backup_paths:
                default_directory = self.gateway.get_default_backup_directory(connection)
                self.logger.info(f"Directorio por defecto de la instancia: {default_directory}")

            timestamp = self.clock()
            planner = PathPlanner(self.gateway, connection)
            executor = BackupExecutor(self.gateway, connection, self.progress_callback)

            outcomes = []
            for descriptor in descriptors:
                self.logger.info("-" * 70)
                outcome = self._backup_single_database(
                    connection, sql_instance, descriptor, request, history,
                    planner, executor, timestamp, default_directory
                )
                outcomes.append(outcome)
        finally:
            self.gateway.close(connection)

        self._print_summary(outcomes, request)
        return outcomes

    def _load_history(self, connection: Any, descriptors: List[DatabaseDescriptor],
                      request: BackupRequestConfig) -> Set[BackupHistoryFact]:
        """Consulta única del historial; solo los backups no completos la necesitan"""
        if request.backup_type is BackupType.FULL:
            return set()
        history = self.gateway.get_last_full_backups(connection, [d.name for d in descriptors])
        self.logger.info(
            f"Historial: {sum(1 for f in history if f.has_prior_full_backup)} de "
            f"{len(descriptors)} base(s) con backup completo previo"
        )
        return history

    def _backup_single_database(self, connection: Any, sql_instance: str,
                                descriptor: DatabaseDescriptor, request: BackupRequestConfig,
                                history: Set[BackupHistoryFact], planner: PathPlanner,
                                executor: BackupExecutor, timestamp: datetime,
                                default_directory: Optional[str]) -> BackupOutcome:
        """
        Procesa una base de datos hasta un estado terminal

        Un error del servidor (p. ej. pérdida de conexión) termina solo el
        intento de esta base de datos; la ejecución continúa con la siguiente.

        Returns:
            Resultado del backup
        """
        start_time = time.time()
        try:
            return self._process_database(connection, sql_instance, descriptor, request, history,
                                          planner, executor, timestamp, default_directory, start_time)
        except Exception as e:
            self.logger.error(f"{descriptor.name}: error del servidor: {e}")
            return build_outcome(sql_instance, descriptor.name, request, [str(e) or type(e).__name__],
                                 duration_seconds=time.time() - start_time)

    def _process_database(self, connection: Any, sql_instance: str,
                          descriptor: DatabaseDescriptor, request: BackupRequestConfig,
                          history: Set[BackupHistoryFact], planner: PathPlanner,
                          executor: BackupExecutor, timestamp: datetime,
                          default_directory: Optional[str], start_time: float) -> BackupOutcome:
        name = descriptor.name
        self.logger.debug(f"{name}: Evaluating")

        descriptor, exists = resolve_recovery_model(self.gateway, connection, descriptor)
        eligibility = evaluate(descriptor, request, history, exists=exists)
        if not eligibility.ok:
            self.logger.warning(f"{name}: Ineligible - {'; '.join(eligibility.failures)}")
            return build_outcome(sql_instance, name, request, eligibility.failures,
                                 duration_seconds=time.time() - start_time)

        self.logger.debug(f"{name}: Planning")
        plan = planner.plan(descriptor, request, timestamp, default_directory)
        if not plan.ok:
            self.logger.warning(f"{name}: PlanFailed - {'; '.join(plan.failures)}")
            return build_outcome(sql_instance, name, request, plan.failures,
                                 duration_seconds=time.time() - start_time)

        self.logger.debug(f"{name}: Executing")
        engine_result = executor.execute(name, request, plan.paths)
        failures = [] if engine_result.completed else [engine_result.error or "backup did not complete"]
        self.logger.debug(f"{name}: {'Completed' if engine_result.completed else 'ExecutionFailed'}")

        return build_outcome(sql_instance, name, request, failures, engine_result,
                             backup_files=plan.paths, duration_seconds=time.time() - start_time)

    def _print_summary(self, outcomes: List[BackupOutcome], request: BackupRequestConfig):
        """
        Imprime resumen de la operación de backup

        Args:
            outcomes: Lista de resultados
            request: Configuración de la ejecución
        """
        success_count = sum(1 for o in outcomes if o.completed)
        failed_count = len(outcomes) - success_count
        total_time = sum(o.duration_seconds for o in outcomes)

        self.logger.info("=" * 70)
        self.logger.info(f"RESUMEN DEL PROCESO DE BACKUP {request.backup_type.name}")
        self.logger.info("=" * 70)

        for outcome in outcomes:
            status = "✓ EXITOSO" if outcome.completed else "✗ FALLIDO"
            self.logger.info(f"{status}: {outcome.database_name} ({outcome.duration_seconds:.2f}s)")
            for device in outcome.backup_files:
                self.logger.info(f"  Archivo: {device}")
            if outcome.has_issues:
                for reason in outcome.failure_reasons:
                    self.logger.error(f"  Error: {reason}")

        self.logger.info("-" * 70)
        self.logger.info(f"Total de bases de datos procesadas: {len(outcomes)}")
        self.logger.info(f"Backups exitosos: {success_count}")
        self.logger.info(f"Backups fallidos: {failed_count}")
        self.logger.info(f"Tiempo total: {total_time:.2f}s")
        self.logger.info("=" * 70)

        if failed_count > 0:
            self.logger.warning(
                f"ATENCIÓN: {failed_count} backup(s) fallaron. "
                "Revisa los errores arriba."
            )
