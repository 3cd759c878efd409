# src/deployflow/core/config/settings.py
"""
Leitura tipada das chaves de configuração consumidas pelo engine.

Este módulo converte o dicionário efetivo (após `load_config`) em um
`EngineSettings` imutável, validando o domínio de cada valor. Chaves
ausentes assumem os defaults canônicos abaixo; valores presentes mas
inválidos são erro explícito, nunca coerção silenciosa.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .errors import InvalidConfigValueError

DEFAULT_MAX_WORKERS = 4

_OPERATIONS = ("create", "update", "delete")


@dataclass(frozen=True)
class EngineSettings:
    """
    Parâmetros de execução de um pass.

    Campos:
        - max_workers: tamanho do pool de execução
        - fail_fast: cancela o pass na primeira falha
        - execute_logical: envia recursos lógicos ao executor
        - operation: direção do pass (create | update | delete)
    """

    max_workers: int = DEFAULT_MAX_WORKERS
    fail_fast: bool = False
    execute_logical: bool = False
    operation: str = "create"


def _section(config: Optional[Dict[str, Any]], key: str) -> Dict[str, Any]:
    section = (config or {}).get(key, {}) or {}
    if not isinstance(section, dict):
        raise InvalidConfigValueError(
            f"Seção '{key}' deve ser dict, recebido: {type(section).__name__}"
        )
    return section


def _bool(section: Dict[str, Any], key: str, default: bool) -> bool:
    value = section.get(key, default)
    if not isinstance(value, bool):
        raise InvalidConfigValueError(
            f"engine.{key} deve ser bool, recebido: {type(value).__name__}"
        )
    return value


def resolve_engine_settings(config: Optional[Dict[str, Any]]) -> EngineSettings:
    """
    Extrai e valida `engine.*` da configuração efetiva.

    Raises:
        InvalidConfigValueError: Se algum valor estiver fora do domínio aceito.
    """
    engine_cfg = _section(config, "engine")

    max_workers = engine_cfg.get("max_workers", DEFAULT_MAX_WORKERS)
    if isinstance(max_workers, bool) or not isinstance(max_workers, int) or max_workers < 1:
        raise InvalidConfigValueError(
            f"engine.max_workers deve ser inteiro >= 1, recebido: {max_workers!r}"
        )

    operation = engine_cfg.get("operation", "create")
    if operation not in _OPERATIONS:
        raise InvalidConfigValueError(
            f"engine.operation deve ser um de {list(_OPERATIONS)}, recebido: {operation!r}"
        )

    return EngineSettings(
        max_workers=max_workers,
        fail_fast=_bool(engine_cfg, "fail_fast", False),
        execute_logical=_bool(engine_cfg, "execute_logical", False),
        operation=operation,
    )


def resource_enabled(config: Optional[Dict[str, Any]], identity: str) -> bool:
    """
    Retorna `resources.<identity>.enabled` (default True).

    Raises:
        InvalidConfigValueError: Entrada do recurso não é dict ou `enabled`
            não é bool.
    """
    resources_cfg = _section(config, "resources")
    resource_cfg = resources_cfg.get(identity, {}) or {}
    if not isinstance(resource_cfg, dict):
        raise InvalidConfigValueError(
            f"resources.{identity} deve ser dict, recebido: {type(resource_cfg).__name__}"
        )
    enabled = resource_cfg.get("enabled", True)
    if not isinstance(enabled, bool):
        raise InvalidConfigValueError(
            f"resources.{identity}.enabled deve ser bool, recebido: {type(enabled).__name__}"
        )
    return enabled
