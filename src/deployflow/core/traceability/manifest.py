# src/deployflow/core/traceability/manifest.py
"""
Manifest v1 — registro forense de um pass do deployflow.

O Manifest consolida, de forma determinística e auditável:
    - metadados do pass (run_id, operation, started_at, versão)
    - hashes de entrada (configuração e estrutura do grafo)
    - estado incremental de cada recurso
    - Event Log ordenado de eventos explícitos
    - resumo final (contagens succeeded/failed/skipped)

Princípios fundamentais:
    - Nenhum evento é emitido implicitamente
    - Toda mutação ocorre por chamadas explícitas da API
    - A ordem do Event Log reflete a ordem de chamada
    - O Manifest é serializável e reconstruível (round-trip JSON)

Limites explícitos:
    - Não é o snapshot de estado do deployment (propriedades, outputs)
    - Não decide políticas de execução
    - Não é thread-safe: o engine serializa as chamadas
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional


def _ensure_tzaware_utc(dt: datetime) -> datetime:
    """Timestamps timezone-naive são assumidos como UTC; os demais são convertidos."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: datetime) -> str:
    return _ensure_tzaware_utc(dt).isoformat()


def _ms_between(start: datetime, end: datetime) -> int:
    s = _ensure_tzaware_utc(start)
    e = _ensure_tzaware_utc(end)
    return max(0, int((e - s).total_seconds() * 1000))


@dataclass
class DeployManifest:
    """
    Estrutura canônica do Manifest de um pass.

    Campos principais:
        - run: metadados do pass
        - inputs: `config_hash` e `graph_hash`
        - resources: estado incremental por identidade
        - events: Event Log ordenado
        - summary: resumo final (vazio até `record_summary`)
    """

    run: Dict[str, Any]
    inputs: Dict[str, Any]
    resources: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)
    summary: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run": dict(self.run),
            "inputs": dict(self.inputs),
            "resources": {k: dict(v) for k, v in self.resources.items()},
            "events": [dict(e) for e in self.events],
            "summary": dict(self.summary),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeployManifest":
        """Reconstrução permissiva: campos ausentes viram estruturas vazias."""
        return cls(
            run=dict(data.get("run", {})),
            inputs=dict(data.get("inputs", {})),
            resources={k: dict(v) for k, v in (data.get("resources", {}) or {}).items()},
            events=[dict(e) for e in (data.get("events", []) or [])],
            summary=dict(data.get("summary", {}) or {}),
        )


def create_manifest(
    *,
    run_id: str,
    started_at: datetime,
    operation: str,
    version: str,
    config_hash: str,
    graph_hash: str,
) -> DeployManifest:
    """
    Cria o Manifest inicial de um pass.

    ⚠️ Esta função **não emite eventos**: o Event Log inicia vazio e só é
    preenchido pelas funções `add_event` e `resource_*`.
    """
    return DeployManifest(
        run={
            "run_id": run_id,
            "started_at": _iso(started_at),
            "operation": operation,
            "version": version,
        },
        inputs={
            "config_hash": config_hash,
            "graph_hash": graph_hash,
        },
    )


def add_event(
    manifest: DeployManifest,
    *,
    event_type: str,
    ts: datetime,
    resource: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    """Acrescenta um evento ao final do Event Log."""
    event: Dict[str, Any] = {"type": event_type, "ts": _iso(ts)}
    if resource is not None:
        event["resource"] = resource
    event["payload"] = dict(payload or {})
    manifest.events.append(event)


def resource_started(manifest: DeployManifest, *, resource: str, kind: str, ts: datetime) -> None:
    manifest.resources.setdefault(resource, {}).update(
        {
            "resource": resource,
            "kind": kind,
            "status": "running",
            "started_at": _iso(ts),
        }
    )
    add_event(manifest, event_type="resource_started", ts=ts, resource=resource, payload={"kind": kind})


def _duration(entry: Dict[str, Any], ts: datetime) -> int:
    started_iso = entry.get("started_at")
    if not started_iso:
        return 0
    return _ms_between(datetime.fromisoformat(started_iso), ts)


def resource_finished(
    manifest: DeployManifest,
    *,
    resource: str,
    ts: datetime,
    warnings: Optional[List[str]] = None,
) -> None:
    """Registra conclusão bem-sucedida (`succeeded`) de um recurso."""
    entry = manifest.resources.setdefault(resource, {"resource": resource})
    entry.update(
        {
            "status": "succeeded",
            "finished_at": _iso(ts),
            "duration_ms": _duration(entry, ts),
            "warnings": list(warnings or []),
        }
    )
    add_event(
        manifest,
        event_type="resource_finished",
        ts=ts,
        resource=resource,
        payload={"status": "succeeded", "duration_ms": entry["duration_ms"]},
    )


def resource_failed(manifest: DeployManifest, *, resource: str, ts: datetime, error: Dict[str, Any]) -> None:
    entry = manifest.resources.setdefault(resource, {"resource": resource})
    entry.update(
        {
            "status": "failed",
            "finished_at": _iso(ts),
            "duration_ms": _duration(entry, ts),
            "error": dict(error),
        }
    )
    add_event(manifest, event_type="resource_failed", ts=ts, resource=resource, payload={"error": dict(error)})


def resource_skipped(manifest: DeployManifest, *, resource: str, ts: datetime, reason: Dict[str, Any]) -> None:
    """Recurso nunca executado: predecessor falhou ou pass cancelado."""
    entry = manifest.resources.setdefault(resource, {"resource": resource})
    entry.update(
        {
            "status": "skipped",
            "finished_at": _iso(ts),
            "reason": dict(reason),
        }
    )
    add_event(manifest, event_type="resource_skipped", ts=ts, resource=resource, payload={"reason": dict(reason)})


def record_summary(manifest: DeployManifest, *, ts: datetime, summary: Dict[str, Any]) -> None:
    manifest.summary = {
        "succeeded": summary.get("succeeded", 0),
        "failed": summary.get("failed", 0),
        "skipped": summary.get("skipped", 0),
        "finished_at": _iso(ts),
    }
    add_event(manifest, event_type="pass_finished", ts=ts, payload=dict(manifest.summary))


def save_manifest(manifest: DeployManifest, path: Path) -> None:
    """
    Persiste o Manifest em JSON (chaves ordenadas, UTF-8, indentado).

    Raises:
        OSError: Falha ao criar diretórios ou escrever o arquivo.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(manifest.to_dict(), ensure_ascii=False, indent=2, sort_keys=True),
        encoding="utf-8",
    )


def load_manifest(path: Path) -> DeployManifest:
    """Restaura um Manifest salvo por `save_manifest`."""
    data = json.loads(path.read_text(encoding="utf-8"))
    return DeployManifest.from_dict(data)
