"""Contrato de envío de formularios.

Por qué Protocol:
- Define un contrato estructural (duck typing) sin herencia rígida.
- El dispatcher se testea con un submitter en memoria, sin red.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import RequestJob, RequestResult


@runtime_checkable
class FormSubmitter(Protocol):
    """Contrato mínimo para enviar un job.

    Reglas de diseño:
    - `submit` es async porque hace I/O de red.
    - Los fallos de transporte se devuelven como `RequestResult` con `error`,
      nunca se lanzan.
    """

    async def submit(self, job: RequestJob) -> RequestResult:
        """Envía `job` una vez y devuelve su resultado normalizado."""

        ...
