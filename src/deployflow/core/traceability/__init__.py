# src/deployflow/core/traceability/__init__.py
"""
Rastreabilidade do deployflow — Manifest v1.

API pública:
    - DeployManifest     → estrutura canônica do Manifest
    - create_manifest    → criação explícita (sem eventos)
    - add_event          → registro explícito no Event Log
    - resource_started / resource_finished / resource_failed / resource_skipped
    - record_summary     → resumo final do pass
    - save_manifest / load_manifest → persistência JSON (round-trip)
"""

from .manifest import (
    DeployManifest,
    add_event,
    create_manifest,
    load_manifest,
    record_summary,
    resource_failed,
    resource_finished,
    resource_skipped,
    resource_started,
    save_manifest,
)

__all__ = [
    "DeployManifest",
    "add_event",
    "create_manifest",
    "load_manifest",
    "record_summary",
    "resource_failed",
    "resource_finished",
    "resource_skipped",
    "resource_started",
    "save_manifest",
]
