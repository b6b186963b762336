"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta y documentación autocontenida (Field) sin acoplar
  el Core a librerías de I/O.
- `frozen=True` en todos: jobs y campos se reparten entre workers concurrentes,
  nada aquí se modifica después de crearse.

Nota:
- Estos modelos describen *qué* es un envío, no *cómo* se envía.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class Credential(BaseModel):
    """Un par (usuario, contraseña) del producto cartesiano."""

    model_config = ConfigDict(frozen=True)

    username: str = Field(..., description="Entrada de la lista de usuarios.")
    password: str = Field(..., description="Entrada de la lista de contraseñas.")


class FieldTemplate(BaseModel):
    """Campo de formulario cuyo valor puede contener `{USER}` / `{PASS}`."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(
        ...,
        min_length=1,
        description="Nombre del campo del formulario.",
    )
    value_template: str = Field(
        default="",
        description="Valor con cero o más placeholders.",
    )


class SubstitutedField(BaseModel):
    """Un `FieldTemplate` resuelto contra una credencial."""

    model_config = ConfigDict(frozen=True)

    key: str
    value: str


class RequestJob(BaseModel):
    """Un envío pendiente.

    Lo crea el generador de combinaciones y el dispatcher lo consume una vez
    (la política de reintentos reenvía exactamente el mismo job).
    """

    model_config = ConfigDict(frozen=True)

    index: int = Field(
        ...,
        ge=0,
        description="Posición de emisión desde 0 (usuario fuera, contraseña dentro).",
    )
    target: str = Field(..., min_length=1, description="Endpoint del POST.")
    credential: Credential
    fields: tuple[SubstitutedField, ...] = Field(
        default_factory=tuple,
        description="Campos sustituidos, en el orden de los templates.",
    )
    launch_offset_seconds: float = Field(
        default=0.0,
        ge=0.0,
        description="Lanzamiento más temprano, relativo al inicio del dispatch.",
    )


class RequestResult(BaseModel):
    """Resultado de un job: una respuesta o un error de transporte."""

    model_config = ConfigDict(frozen=True)

    job_index: int = Field(..., ge=0)
    credential: Credential
    status: int | None = Field(
        default=None,
        description="Código HTTP; None si la petición nunca se completó.",
    )
    status_text: str = Field(default="", description="Reason phrase HTTP.")
    body: Any = Field(
        default=None,
        description="JSON parseado si se puede, si no el texto crudo.",
    )
    text: str = Field(default="", description="Body crudo de la respuesta.")
    error: str | None = Field(
        default=None,
        description="Fallo de transporte (DNS, conexión rechazada, timeout...).",
    )
    body_parse_error: str | None = Field(
        default=None,
        description="Presente cuando se esperaba JSON (o el content-type lo declaraba) y no parsea.",
    )
    attempts: int = Field(default=1, ge=1)
    elapsed_seconds: float = Field(default=0.0, ge=0.0)

    @property
    def ok(self) -> bool:
        return self.error is None

    def record(self) -> dict[str, Any]:
        """Registro para el operador: `{status, statusText, body}` o `{error}`."""

        if self.error is not None:
            return {"error": self.error}
        return {"status": self.status, "statusText": self.status_text, "body": self.body}


class FailureSignature(BaseModel):
    """Forma, declarada por el operador, de un login fallido conocido."""

    model_config = ConfigDict(frozen=True)

    status: int | None = Field(default=None, ge=100, le=599)
    message: str | None = Field(default=None, min_length=1)

    @property
    def is_configured(self) -> bool:
        return self.status is not None or self.message is not None


class Verdict(str, Enum):
    EXPECTED_FAILURE = "expected_failure"
    NOTABLE = "notable"


class Classification(BaseModel):
    model_config = ConfigDict(frozen=True)

    verdict: Verdict
    reason: str
    ambiguous: bool = False

    @property
    def notable(self) -> bool:
        return self.verdict is Verdict.NOTABLE


class SpraySummary(BaseModel):
    """Conteos de una ejecución terminada (o abortada)."""

    total: int = Field(default=0, ge=0, description="Jobs planificados.")
    dispatched: int = Field(default=0, ge=0, description="Resultados recibidos.")
    notable: int = Field(default=0, ge=0)
    expected_failures: int = Field(default=0, ge=0)
    transport_errors: int = Field(default=0, ge=0)
    notable_credentials: list[Credential] = Field(
        default_factory=list,
        description=(
            "Credenciales cuya respuesta no coincide con la firma de fallo. "
            "Solo se llena si hay firma configurada."
        ),
    )
