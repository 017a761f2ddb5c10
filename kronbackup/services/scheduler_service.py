"""
Servicio de programación de tareas de backup
"""
import signal
import time
from typing import Optional

import schedule

from ..errors import KronBackupError
from ..logger import LoggerService
from .backup_service import BackupService


class SchedulerService:
    """Ejecuta backups completos a las horas configuradas, todos los días"""

    def __init__(self, backup_service: BackupService, poll_interval: int = 60,
                 scheduler: Optional[schedule.Scheduler] = None):
        """
        Args:
            backup_service: Servicio de backup a ejecutar
            poll_interval: Segundos entre revisiones de trabajos pendientes
            scheduler: Programador propio; por defecto se crea uno aislado
        """
        self.backup_service = backup_service
        self.poll_interval = poll_interval
        self.scheduler = scheduler or schedule.Scheduler()
        self.logger = LoggerService.get_logger("SchedulerService")
        self.running = False

    def register_jobs(self):
        """Registra un trabajo diario por cada hora configurada"""
        self.scheduler.clear()
        for at in self.backup_service.backup_settings.schedule:
            self.scheduler.every().day.at(at).do(self.run_backup_job)
        return self.scheduler.get_jobs()

    def start(self, run_immediately: bool = False):
        """
        Inicia el programador y bloquea hasta recibir SIGINT o SIGTERM

        Args:
            run_immediately: Si es True, ejecuta un backup antes de esperar al primer horario
        """
        jobs = self.register_jobs()
        settings = self.backup_service.backup_settings

        # Shutdown ordenado: la ejecución en curso termina antes de salir
        previous_handlers = {
            signum: signal.signal(signum, self._signal_handler)
            for signum in (signal.SIGINT, signal.SIGTERM)
        }
        self.running = True

        self.logger.info("=" * 70)
        self.logger.info("SERVICIO DE BACKUP AUTOMÁTICO INICIADO")
        self.logger.info("=" * 70)
        self.logger.info(f"Backups diarios programados: {len(jobs)}")
        for at in settings.schedule:
            self.logger.info(f"  - A las {at}")
        self.logger.info(f"Retención de backups: {settings.retention_days} días")
        for db_type, backend_config in self.backup_service.configured_backends():
            self.logger.info(f"  - {db_type}: {', '.join(backend_config.databases)}")
        self.logger.info("-" * 70)
        self.logger.info(f"Próxima ejecución: {self.get_next_run()}")
        self.logger.info("Presiona Ctrl+C para detener el servicio")
        self.logger.info("=" * 70)

        try:
            if run_immediately:
                self.logger.info("Ejecutando backup inicial...")
                self.run_backup_job()

            while self.running:
                self.scheduler.run_pending()
                self._sleep()
        finally:
            self.running = False
            self.scheduler.clear()
            for signum, handler in previous_handlers.items():
                signal.signal(signum, handler)
        self.logger.info("Servicio detenido correctamente")

    def _sleep(self):
        # Dormir en pasos de un segundo para reaccionar rápido a stop()
        for _ in range(self.poll_interval):
            if not self.running:
                return
            time.sleep(1)

    def stop(self):
        self.logger.info("Deteniendo servicio de backup...")
        self.running = False

    def run_backup_job(self) -> bool:
        """
        Ejecuta un backup completo; un fallo se registra y no detiene el servicio

        Returns:
            True si el backup terminó correctamente
        """
        self.logger.info(f"Ejecutando backup programado a las {time.strftime('%Y-%m-%d %H:%M:%S')}")
        try:
            archive = self.backup_service.run_backup()
        except KronBackupError as e:
            self.logger.error(f"Backup programado fallido: {e}")
            return False
        except Exception as e:
            self.logger.error(f"Error crítico durante backup: {e}", exc_info=True)
            return False
        self.logger.info(f"Backup programado completado: {archive}")
        return True

    def _signal_handler(self, signum, frame):
        try:
            signal_name = signal.Signals(signum).name
        except ValueError:
            signal_name = str(signum)
        self.logger.info(f"Señal recibida: {signal_name}")
        self.stop()

    def get_next_run(self) -> str:
        """Fecha de la próxima ejecución programada"""
        next_run = self.scheduler.next_run
        if next_run:
            return next_run.strftime('%Y-%m-%d %H:%M:%S')
        return "No hay ejecuciones programadas"
