#!/usr/bin/env python3
"""
Sistema de Backup de Bases de Datos (SQLite, MySQL, PostgreSQL, MongoDB)
Punto de entrada principal

Uso:
    python main.py                       # Modo scheduler (automático)
    python main.py backup                # Ejecutar backup una vez
    python main.py backup --config x.json
    python main.py --help                # Ayuda
"""
import sys
import argparse
from pathlib import Path

# Agregar la raíz del proyecto al path
sys.path.insert(0, str(Path(__file__).parent))

from kronbackup.config import Config
from kronbackup.errors import KronBackupError
from kronbackup.factories.strategy_factory import DatabaseConnectionFactory
from kronbackup.logger import LoggerService
from kronbackup.repositories.config_repository import ConfigRepository
from kronbackup.services.backup_service import BackupService
from kronbackup.services.scheduler_service import SchedulerService


def parse_arguments(argv=None):
    """
    Parsea argumentos de línea de comandos

    Returns:
        Namespace con los argumentos parseados
    """
    parser = argparse.ArgumentParser(
        prog='kronbackup',
        description='Sistema de Backup de Bases de Datos',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Ejemplos:
  python main.py                    # Iniciar servicio automático
  python main.py backup             # Ejecutar backup una sola vez
  python main.py --stats            # Ver estadísticas de backups
  python main.py --init             # Crear archivo de configuración
        """
    )

    parser.add_argument(
        'mode',
        nargs='?',
        choices=['backup', 'scheduler'],
        default='scheduler',
        help='Modo de ejecución (default: scheduler)'
    )

    parser.add_argument(
        '--config',
        type=Path,
        default=Config.CONFIG_FILE,
        metavar='ARCHIVO',
        help=f'Archivo de configuración (default: {Config.CONFIG_FILE})'
    )

    parser.add_argument(
        '--stats',
        action='store_true',
        help='Mostrar estadísticas de backups'
    )

    parser.add_argument(
        '--init',
        action='store_true',
        help='Crear archivo de configuración de ejemplo'
    )

    parser.add_argument(
        '--now',
        action='store_true',
        help='Ejecutar backup inmediatamente al iniciar scheduler'
    )

    parser.add_argument(
        '--types',
        action='store_true',
        help='Mostrar los tipos de base de datos soportados'
    )

    return parser.parse_args(argv)


def initialize_config(config_file: Path) -> bool:
    """
    Crea el archivo de configuración de ejemplo si no existe

    Returns:
        True si se creó el archivo
    """
    logger = LoggerService.get_logger("Init")
    if config_file.exists():
        logger.info(f"Ya existe: {config_file}")
        return False

    if not ConfigRepository(config_file).create_example_config():
        return False

    logger.info("=" * 70)
    logger.info(f"Creado: {config_file}")
    logger.info("1. Define las credenciales en .env (MYSQL_USER, PG_PASSWORD, ...)")
    logger.info("2. Edita la sección 'databases' y borra los motores que no uses")
    logger.info("3. Ejecuta: python main.py backup")
    logger.info("=" * 70)
    return True


def show_statistics(backup_service: BackupService):
    """
    Muestra estadísticas de los backups almacenados

    Args:
        backup_service: Servicio de backup
    """
    logger = LoggerService.get_logger("Stats")
    storage_dir = Path(backup_service.run_config.storage.path or backup_service.storage_dir)
    stats = backup_service.cleanup_service.get_backup_stats(storage_dir)

    logger.info("=" * 70)
    logger.info("ESTADÍSTICAS DE BACKUPS")
    logger.info("=" * 70)
    logger.info(f"Directorio: {storage_dir}")
    logger.info(f"Total de archivos: {stats['total_files']}")
    logger.info(f"Espacio utilizado: {stats['total_size_mb']:.2f} MB")

    if stats['oldest_backup']:
        logger.info(f"Backup más antiguo: {stats['oldest_backup']}")
    if stats['newest_backup']:
        logger.info(f"Backup más reciente: {stats['newest_backup']}")

    logger.info(f"Retención configurada: {backup_service.backup_settings.retention_days} días")
    logger.info("=" * 70)


def main(argv=None) -> int:
    """Función principal"""
    args = parse_arguments(argv)

    if args.types:
        print(", ".join(DatabaseConnectionFactory.get_supported_types()))
        return 0

    Config.ensure_directories()

    if args.init:
        initialize_config(args.config)
        return 0

    run_config = ConfigRepository(args.config).get_run_config()
    backup_service = BackupService(run_config)

    if args.stats:
        show_statistics(backup_service)
        return 0

    if args.mode == 'backup':
        logger = LoggerService.get_logger("Main")
        logger.info("Modo: Ejecución única")
        archive = backup_service.run_backup()
        logger.info(f"✓ Backup almacenado: {archive}")
        return 0

    scheduler = SchedulerService(backup_service)
    scheduler.start(run_immediately=args.now)
    return 0


def cli():
    """Entrada de consola: el código de salida refleja el resultado"""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nPrograma interrumpido por el usuario")
        sys.exit(0)
    except KronBackupError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    cli()
