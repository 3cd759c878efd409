# src/deployflow/core/engine/context.py
"""
Contexto de execução de um pass.

Este módulo define o `PassContext`, a estrutura passada ao engine e aos
executores durante um pass. Ele concentra:

    - identidade da execução (run_id, created_at)
    - configuração efetiva
    - metadados livres (ex.: stack, projeto)
    - log estruturado de eventos
    - warnings não fatais por recurso
    - Manifest opcional para rastreabilidade

Decisões arquiteturais:
    - Cada pass possui seu próprio contexto (sem estado global)
    - `log` e `add_warning` são seguros sob chamadas concorrentes de
      workers do pool
    - Eventos sempre incluem `run_id` e `resource`

Limites explícitos:
    - Não executa recursos
    - Não decide ordem de liberação
    - Não persiste dados automaticamente
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from deployflow.core.traceability.manifest import DeployManifest


@dataclass
class PassContext:
    """
    Contexto compartilhado de um pass.

    `resource` nos eventos é a identidade do recurso ou ``"-"`` para
    eventos do pass como um todo.
    """
    run_id: str
    created_at: datetime
    config: Dict[str, Any]
    meta: Dict[str, Any] = field(default_factory=dict)
    manifest: Optional[DeployManifest] = None

    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    @classmethod
    def create(
        cls,
        *,
        config: Optional[Dict[str, Any]] = None,
        run_id: Optional[str] = None,
        meta: Optional[Dict[str, Any]] = None,
        manifest: Optional[DeployManifest] = None,
    ) -> "PassContext":
        return cls(
            run_id=run_id or uuid4().hex,
            created_at=datetime.now(timezone.utc),
            config=dict(config or {}),
            meta=dict(meta or {}),
            manifest=manifest,
        )

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, resource: str, level: str, message: str, **extra: Any) -> None:
        event = {
            "run_id": self.run_id,
            "resource": resource,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        with self._lock:
            self.events.append(event)

    def add_warning(self, *, resource: str, message: str) -> None:
        with self._lock:
            self.warnings.setdefault(resource, []).append(message)

    def events_for(self, resource: str) -> List[Dict[str, Any]]:
        with self._lock:
            return [e for e in self.events if e["resource"] == resource]
