"""
Ejecución de herramientas externas con salida capturada
"""
import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from ..errors import DatabaseError


@dataclass
class ProcessResult:
    """Resultado de un proceso externo"""
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.returncode == 0


class ProcessRunner:
    """Ejecuta procesos externos; se reemplaza por un doble en los tests"""

    def __init__(self, timeout: Optional[int] = 3600):
        """
        Args:
            timeout: Límite en segundos para cada proceso (None = sin límite)
        """
        self.timeout = timeout

    def which(self, tool: str) -> Optional[str]:
        return shutil.which(tool)

    def run(
        self,
        args: List[str],
        env: Optional[Dict[str, str]] = None,
        stdout_path: Optional[Path] = None,
    ) -> ProcessResult:
        """
        Ejecuta un comando y captura su salida

        Args:
            args: Vector de argumentos (args[0] es el ejecutable)
            env: Variables adicionales solo para este proceso
            stdout_path: Si se indica, la salida estándar se escribe en este archivo

        Returns:
            Resultado con código de salida, stdout y stderr

        Raises:
            DatabaseError: si el proceso no puede iniciarse o excede el tiempo límite
        """
        process_env = None
        if env:
            # Copia local: nunca se modifica el entorno del proceso actual
            process_env = os.environ.copy()
            process_env.update(env)

        tool = args[0]
        try:
            if stdout_path is not None:
                with open(stdout_path, 'wb') as f:
                    result = subprocess.run(
                        args,
                        stdout=f,
                        stderr=subprocess.PIPE,
                        env=process_env,
                        timeout=self.timeout
                    )
                return ProcessResult(
                    returncode=result.returncode,
                    stderr=result.stderr.decode('utf-8', errors='replace')
                )

            result = subprocess.run(
                args,
                capture_output=True,
                env=process_env,
                timeout=self.timeout
            )
            return ProcessResult(
                returncode=result.returncode,
                stdout=result.stdout.decode('utf-8', errors='replace'),
                stderr=result.stderr.decode('utf-8', errors='replace')
            )
        except subprocess.TimeoutExpired:
            raise DatabaseError(f"Timeout: {tool} superó el límite de {self.timeout}s")
        except OSError as e:
            raise DatabaseError(f"Failed to execute {tool}: {e}")
