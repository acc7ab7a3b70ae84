#!/usr/bin/env python3
"""
Orquestador de backups nativos de SQL Server
Punto de entrada principal

Uso:
    python main.py                          # Backup de las bases de config.json
    python main.py --db HR --db Finance     # Bases específicas
    python main.py --type log --path D:\\Bak  # Backup de log en otra ruta
    python main.py --init                   # Crear archivos de configuración
    python main.py --help                   # Ayuda
"""
import sys
import argparse
from pathlib import Path

# Agregar el directorio del proyecto al path
sys.path.insert(0, str(Path(__file__).parent))

from dbbackup.config import Config
from dbbackup.exceptions import BackupRunError
from dbbackup.factories.gateway_factory import GatewayFactory
from dbbackup.logger import LoggerService
from dbbackup.models import Credential
from dbbackup.repositories.config_repository import ConfigRepository
from dbbackup.services.backup_service import BackupService


def parse_arguments(argv=None):
    """
    Parsea argumentos de línea de comandos

    Returns:
        Namespace con los argumentos parseados
    """
    parser = argparse.ArgumentParser(
        description='Orquestador de backups nativos de SQL Server',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Ejemplos:
  python main.py                              # Backup según config.json
  python main.py --db HR --type diff          # Diferencial de HR
  python main.py --path D:\\B1 --path E:\\B2    # Backup en 2 stripes
  python main.py --db HR --file-name HR.bak   # Nombre de archivo explícito
  python main.py --init                       # Crear archivos de configuración
        """
    )

    parser.add_argument('--config', type=Path, metavar='ARCHIVO',
                        help='Archivo de configuración (default: config.json)')
    parser.add_argument('--instance', type=str, metavar='SERVIDOR',
                        help='Instancia SQL Server (reemplaza la de la configuración)')
    parser.add_argument('--user', type=str, help='Login SQL (por defecto el de la configuración)')
    parser.add_argument('--password', type=str, help='Contraseña del login SQL')
    parser.add_argument('--db', action='append', metavar='NOMBRE',
                        help='Base de datos a respaldar (repetible)')
    parser.add_argument('--type', choices=['full', 'diff', 'differential', 'log'],
                        help='Tipo de backup (default: el de la configuración)')
    parser.add_argument('--copy-only', action='store_true', default=None,
                        help='Backup COPY_ONLY (no altera la cadena de backups)')
    parser.add_argument('--file-count', type=int, metavar='N',
                        help='Número de archivos (stripes) por backup')
    parser.add_argument('--path', action='append', metavar='DIR',
                        help='Directorio destino en el servidor (repetible)')
    parser.add_argument('--file-name', type=str, metavar='ARCHIVO',
                        help='Nombre de archivo explícito (solo con una base de datos)')
    parser.add_argument('--create-folder', action='store_true', default=None,
                        help='Crear una subcarpeta por base de datos')
    parser.add_argument('--init', action='store_true',
                        help='Crear archivos de configuración de ejemplo')

    return parser.parse_args(argv)


def initialize_config(config_repo: ConfigRepository):
    """
    Inicializa archivos de configuración si no existen

    Returns:
        True si se creó algún archivo
    """
    logger = LoggerService.get_logger("Init")
    created_files = []

    if not config_repo.config_file.exists():
        if config_repo.create_example_config():
            created_files.append(str(config_repo.config_file))
            logger.info(f"Creado: {config_repo.config_file}")

    env_example = Config.BASE_DIR / ".env.example"
    if not env_example.exists():
        env_content = """# Variables de entorno para credenciales
# Copia este archivo como .env y completa con tus credenciales
# Sin MSSQL_USER se usa autenticación integrada de Windows

MSSQL_USER=backup_operator
MSSQL_PASSWORD=password_sqlserver

# Opcional
# ODBC_DRIVER=ODBC Driver 18 for SQL Server
# LOG_LEVEL=DEBUG
"""
        try:
            with open(env_example, 'w', encoding='utf-8') as f:
                f.write(env_content)
            created_files.append(str(env_example))
            logger.info(f"Creado: {env_example}")
        except OSError as e:
            logger.error(f"Error creando .env.example: {e}")

    if created_files:
        logger.info("=" * 70)
        logger.info("ARCHIVOS DE CONFIGURACIÓN CREADOS")
        logger.info("=" * 70)
        for file in created_files:
            logger.info(f"  - {file}")
        logger.info("")
        logger.info("IMPORTANTE:")
        logger.info("1. Copia .env.example como .env")
        logger.info("2. Edita .env con tus credenciales")
        logger.info("3. Edita config.json con la instancia y las bases de datos")
        logger.info("=" * 70)
        return True

    return False


def main(argv=None) -> int:
    """Función principal"""
    args = parse_arguments(argv)
    config_repo = ConfigRepository(args.config)

    if args.init:
        initialize_config(config_repo)
        return 0

    logger = LoggerService.get_logger("Main")
    server = config_repo.get_server_settings()
    instance = args.instance or server.instance
    credential = server.credential
    if args.user:
        credential = Credential(user=args.user, password=args.password or "")

    gateway = GatewayFactory.create(server.type)
    if not gateway:
        logger.error(f"Tipo de servidor no soportado: {server.type}")
        return 1

    try:
        request = config_repo.get_backup_request({
            'type': args.type,
            'copy_only': args.copy_only,
            'file_count': args.file_count,
            'backup_paths': args.path,
            'file_name': args.file_name,
            'create_folder': args.create_folder,
        })
        databases = args.db or config_repo.get_databases()
        outcomes = BackupService(gateway).backup_databases(databases, instance, credential, request)
    except BackupRunError as e:
        logger.error(f"Ejecución abortada: {e}")
        return 1

    for outcome in outcomes:
        print(outcome)

    # Exit code basado en resultados
    failed = sum(1 for o in outcomes if not o.completed)
    return 1 if failed > 0 else 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nPrograma interrumpido por el usuario")
        sys.exit(130)
