"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (cliente HTTP, submitter) lean config de forma consistente.

Nota: los flags de la CLI sobrescriben estos valores para una sola ejecución.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "formspray"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "formspray"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "formspray"
    return Path.home() / ".config" / "formspray"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="FORMSPRAY_",
        extra="ignore",
        case_sensitive=False,
        # Orden: primero el proyecto (dev), luego la config por usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout por envío completo (segundos). Las peticiones que no terminan se abandonan.",
    )
    user_agent: str = Field(
        default="formspray/0.1",
        min_length=1,
        description="User-Agent enviado en cada envío.",
    )

    max_concurrency: int = Field(
        default=20,
        ge=1,
        le=500,
        description="Tamaño del pool de workers: máximo de envíos en vuelo a la vez.",
    )
    max_attempts: int = Field(
        default=1,
        ge=1,
        le=10,
        description="Intentos por job (1 desactiva los reintentos).",
    )
    retry_backoff_seconds: float = Field(
        default=0.5,
        ge=0,
        description="Pausa base entre intentos; se duplica tras cada uno.",
    )
    retry_statuses: list[int] = Field(
        default_factory=list,
        description="Status HTTP que disparan un reintento (p.ej. 429, 503).",
    )

    expect_json: bool = Field(
        default=False,
        description="Tratar todo body como JSON; los fallos de parseo se marcan.",
    )
    verify_tls: bool = Field(
        default=True,
        description="Verificar certificados TLS del target.",
    )
    proxy: str | None = Field(
        default=None,
        description="URL de proxy opcional (p.ej. http://127.0.0.1:8080).",
    )

    wordlist_encoding: str = Field(
        default="utf-8",
        min_length=1,
        description="Encoding para leer las listas de usuarios/contraseñas.",
    )
    log_level: str = Field(
        default="WARNING",
        description="Nivel de logging del handler de consola.",
    )
