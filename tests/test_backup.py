"""
Tests unitarios para modelos, configuración y factory
"""
import logging
import os
import unittest
from pathlib import Path
import tempfile
import shutil
import sys
from unittest import mock

# Agregar el proyecto al path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dbbackup.config import Config
from dbbackup.exceptions import BackupConfigurationError
from dbbackup.logger import LoggerService
from dbbackup.models import (
    NO_ISSUES, BackupOutcome, BackupRequestConfig, BackupType,
    DatabaseDescriptor, RecoveryModel
)
from dbbackup.repositories.config_repository import ConfigRepository

try:
    import pyodbc  # noqa: F401
    PYODBC_AVAILABLE = True
except ImportError:
    PYODBC_AVAILABLE = False


class TestModels(unittest.TestCase):
    """Tests para modelos de datos"""

    def test_request_defaults(self):
        """Test valores por defecto de BackupRequestConfig"""
        request = BackupRequestConfig()
        self.assertIs(request.backup_type, BackupType.FULL)
        self.assertEqual(request.file_count, 1)
        self.assertEqual(request.backup_paths, ())
        self.assertEqual(request.effective_file_count, 1)

    def test_request_file_count_validation(self):
        """Test file_count debe ser al menos 1"""
        with self.assertRaises(ValueError):
            BackupRequestConfig(file_count=0)

    def test_request_blank_path_validation(self):
        """Test rutas vacías no permitidas"""
        with self.assertRaises(ValueError):
            BackupRequestConfig(backup_paths=("C:\\Backups", "  "))

    def test_request_blank_file_name_validation(self):
        """Test file_name vacío no permitido"""
        with self.assertRaises(ValueError):
            BackupRequestConfig(file_name="   ")

    def test_request_accepts_list_paths(self):
        """Test las rutas se guardan como tupla"""
        request = BackupRequestConfig(backup_paths=["C:\\A"])
        self.assertEqual(request.backup_paths, ("C:\\A",))

    def test_effective_file_count_uses_path_count(self):
        """Test varias rutas reemplazan file_count"""
        request = BackupRequestConfig(file_count=5, backup_paths=("P1", "P2", "P3"))
        self.assertEqual(request.effective_file_count, 3)

    def test_effective_file_count_single_path(self):
        """Test con una ruta manda file_count"""
        request = BackupRequestConfig(file_count=4, backup_paths=("P1",))
        self.assertEqual(request.effective_file_count, 4)

    def test_backup_type_parse(self):
        """Test alias de tipos de backup"""
        self.assertIs(BackupType.parse("FULL"), BackupType.FULL)
        self.assertIs(BackupType.parse("diff"), BackupType.DIFFERENTIAL)
        self.assertIs(BackupType.parse("Differential"), BackupType.DIFFERENTIAL)
        self.assertIs(BackupType.parse(" log "), BackupType.LOG)
        with self.assertRaises(ValueError):
            BackupType.parse("incremental")

    def test_backup_type_properties(self):
        """Test extensión, acción y marca incremental"""
        self.assertEqual(BackupType.LOG.extension, "trn")
        self.assertEqual(BackupType.FULL.extension, "bak")
        self.assertEqual(BackupType.DIFFERENTIAL.extension, "bak")
        self.assertEqual(BackupType.DIFFERENTIAL.action, "Database")
        self.assertEqual(BackupType.LOG.action, "Log")
        self.assertTrue(BackupType.DIFFERENTIAL.incremental)
        self.assertFalse(BackupType.FULL.incremental)

    def test_recovery_model_from_server(self):
        """Test conversión de recovery_model_desc"""
        self.assertIs(RecoveryModel.from_server("SIMPLE"), RecoveryModel.SIMPLE)
        self.assertIs(RecoveryModel.from_server("bulk_logged"), RecoveryModel.BULK_LOGGED)
        self.assertIs(RecoveryModel.from_server(None), RecoveryModel.UNKNOWN)
        self.assertIs(RecoveryModel.from_server("OTHER"), RecoveryModel.UNKNOWN)

    def test_descriptor_validation(self):
        """Test nombre obligatorio en el descriptor"""
        with self.assertRaises(ValueError):
            DatabaseDescriptor(name=" ")

    def test_descriptor_is_immutable(self):
        """Test la resolución produce un descriptor nuevo"""
        descriptor = DatabaseDescriptor("HR")
        resolved = descriptor.with_recovery_model(RecoveryModel.SIMPLE)
        self.assertIs(descriptor.recovery_model, RecoveryModel.UNKNOWN)
        self.assertIs(resolved.recovery_model, RecoveryModel.SIMPLE)

    def test_outcome_str(self):
        """Test representación del resultado"""
        ok = BackupOutcome("SQL01", "HR", True, 1, duration_seconds=1.5)
        failed = BackupOutcome("SQL01", "Sales", False, 1, failure_reasons=("boom",))
        self.assertIn("HR", str(ok))
        self.assertIn("boom", str(failed))
        self.assertFalse(ok.has_issues)
        self.assertTrue(failed.has_issues)
        self.assertEqual(ok.failure_reasons, (NO_ISSUES,))


class TestConfigRepository(unittest.TestCase):
    """Tests para ConfigRepository"""

    def setUp(self):
        """Setup para tests"""
        self.temp_dir = tempfile.mkdtemp()
        self.config_file = Path(self.temp_dir) / "test_config.json"
        self.repo = ConfigRepository(self.config_file)

    def tearDown(self):
        """Cleanup después de tests"""
        if Path(self.temp_dir).exists():
            shutil.rmtree(self.temp_dir)

    def test_load_nonexistent_config(self):
        """Test cargar configuración inexistente"""
        config = self.repo.load()
        self.assertIsNotNone(config)
        self.assertIn('databases', config)
        self.assertIn('backup_settings', config)

    def test_load_invalid_json(self):
        """Test JSON inválido usa la configuración por defecto"""
        self.config_file.write_text("{ invalid", encoding='utf-8')
        self.assertEqual(self.repo.load(), Config.DEFAULT_CONFIG)

    def test_save_and_load_config(self):
        """Test guardar y cargar configuración"""
        test_config = {
            "server": {"instance": "SQL01", "type": "sqlserver"},
            "databases": ["HR", {"name": "Finance"}],
            "backup_settings": {
                "type": "log",
                "backup_paths": ["D:\\Bak"],
                "create_folder": True
            }
        }

        self.assertTrue(self.repo.save(test_config))
        loaded = ConfigRepository(self.config_file)
        self.assertEqual(loaded.get_databases(), ["HR", {"name": "Finance"}])

        request = loaded.get_backup_request()
        self.assertIs(request.backup_type, BackupType.LOG)
        self.assertEqual(request.backup_paths, ("D:\\Bak",))
        self.assertTrue(request.create_folder)
        self.assertEqual(request.file_count, 1)

    def test_backup_request_overrides(self):
        """Test los overrides reemplazan valores salvo None"""
        self.repo.save({"backup_settings": {"type": "full", "file_count": 2, "copy_only": True}})
        request = ConfigRepository(self.config_file).get_backup_request({
            'type': 'diff',
            'file_count': None,
            'backup_paths': ['P1', 'P2'],
        })
        self.assertIs(request.backup_type, BackupType.DIFFERENTIAL)
        self.assertEqual(request.file_count, 2)
        self.assertTrue(request.copy_only)
        self.assertEqual(request.effective_file_count, 2)

    def test_invalid_backup_request(self):
        """Test configuración inválida lanza BackupConfigurationError"""
        self.repo.save({"backup_settings": {"type": "snapshot"}})
        with self.assertRaises(BackupConfigurationError):
            ConfigRepository(self.config_file).get_backup_request()

    def test_server_settings_resolve_env(self):
        """Test credenciales desde variables de entorno"""
        self.repo.save({"server": {
            "instance": "SQL01\\PROD",
            "user": "${TEST_MSSQL_USER}",
            "password": "${TEST_MSSQL_PASSWORD}"
        }})
        env = {"TEST_MSSQL_USER": "operator", "TEST_MSSQL_PASSWORD": "secret"}
        with mock.patch.dict(os.environ, env):
            server = ConfigRepository(self.config_file).get_server_settings()
        self.assertEqual(server.instance, "SQL01\\PROD")
        self.assertEqual(server.type, "sqlserver")
        self.assertEqual(server.credential.user, "operator")
        self.assertEqual(server.credential.password, "secret")

    def test_server_settings_integrated_auth(self):
        """Test sin usuario no hay credencial"""
        self.repo.save({"server": {"instance": "SQL01"}})
        server = ConfigRepository(self.config_file).get_server_settings()
        self.assertIsNone(server.credential)


@unittest.skipUnless(PYODBC_AVAILABLE, "pyodbc no disponible")
class TestGatewayFactory(unittest.TestCase):
    """Tests para GatewayFactory"""

    def test_create_sqlserver_gateway(self):
        """Test crear gateway SQL Server"""
        from dbbackup.factories.gateway_factory import GatewayFactory
        gateway = GatewayFactory.create('sqlserver')
        self.assertIsNotNone(gateway)
        self.assertEqual(gateway.__class__.__name__, 'SQLServerGateway')
        self.assertEqual(GatewayFactory.create('MSSQL').__class__.__name__, 'SQLServerGateway')

    def test_create_unsupported_gateway(self):
        """Test tipo no soportado"""
        from dbbackup.factories.gateway_factory import GatewayFactory
        self.assertIsNone(GatewayFactory.create('oracle'))

    def test_register_gateway(self):
        """Test registrar un gateway nuevo"""
        from dbbackup.factories.gateway_factory import GatewayFactory
        from tests.fakes import FakeGateway
        GatewayFactory.register_gateway('Fake', FakeGateway)
        try:
            self.assertIn('fake', GatewayFactory.get_supported_types())
            self.assertIsInstance(GatewayFactory.create('fake'), FakeGateway)
        finally:
            GatewayFactory._gateways.pop('fake', None)

    def test_supported_types(self):
        """Test los tipos soportados salen del registro de gateways"""
        from dbbackup.factories.gateway_factory import GatewayFactory
        self.assertEqual(sorted(GatewayFactory.get_supported_types()), ['mssql', 'sqlserver'])


class TestLoggerService(unittest.TestCase):
    """Tests para LoggerService"""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.names = []

    def tearDown(self):
        for name in self.names:
            logger = LoggerService._loggers.pop(name, None)
            if logger:
                for handler in list(logger.handlers):
                    handler.close()
                    logger.removeHandler(handler)
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def get_logger(self, name, **overrides):
        self.names.append(name)
        settings = {'LOG_DIR': self.temp_dir, 'LOG_LEVEL': logging.INFO,
                    'FILE_LOG_LEVEL': logging.DEBUG, 'LOG_TO_FILE': True}
        settings.update(overrides)
        with mock.patch.multiple(Config, **settings):
            return LoggerService.get_logger(name)

    def test_level_per_handler(self):
        """Test consola en INFO y archivo en DEBUG"""
        logger = self.get_logger("HandlerLevels")
        levels = {type(h).__name__: h.level for h in logger.handlers}
        self.assertEqual(levels, {'StreamHandler': logging.INFO, 'FileHandler': logging.DEBUG})
        self.assertEqual(logger.level, logging.DEBUG)

        logger.debug("HR: Planning")
        for handler in logger.handlers:
            handler.flush()
        log_files = list(self.temp_dir.glob("HandlerLevels_*.log"))
        self.assertEqual(len(log_files), 1)
        self.assertIn("HR: Planning", log_files[0].read_text(encoding='utf-8'))

    def test_console_only(self):
        """Test sin archivo de log"""
        logger = self.get_logger("ConsoleOnly", LOG_TO_FILE=False, LOG_LEVEL=logging.WARNING)
        self.assertEqual(len(logger.handlers), 1)
        self.assertEqual(logger.level, logging.WARNING)
        self.assertEqual(list(self.temp_dir.glob("ConsoleOnly_*.log")), [])

    def test_logger_is_cached(self):
        """Test el mismo nombre devuelve el mismo logger"""
        first = self.get_logger("Cached")
        self.assertIs(LoggerService.get_logger("Cached"), first)


if __name__ == "__main__":
    unittest.main(verbosity=2)
