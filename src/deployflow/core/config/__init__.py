# src/deployflow/core/config/__init__.py

"""
Camada de configuração do deployflow.

Este pacote carrega, mescla, valida estruturalmente e identifica a
configuração de um pass de deployment.

A configuração é:
    - declarativa (YAML ou JSON)
    - determinística (defaults + override local via deep-merge)
    - rastreável (hash canônico gravado no Manifest)

Chaves reconhecidas (v1):
    - engine.max_workers      → tamanho do pool de execução (int >= 1)
    - engine.fail_fast        → cancela o pass na primeira falha (bool)
    - engine.execute_logical  → envia recursos lógicos ao executor (bool)
    - engine.operation        → create | update | delete
    - resources.<id>.enabled  → desabilita a operação de um recurso (bool)

Limites explícitos:
    - Não decide se uma operação é necessária
    - Não interage com Scheduler ou executor diretamente
"""

from .errors import (
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidConfigValueError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash
from .loader import load_config
from .merge import deep_merge
from .settings import EngineSettings, resolve_engine_settings, resource_enabled

__all__ = [
    "ConfigError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "InvalidConfigRootTypeError",
    "InvalidConfigValueError",
    "UnsupportedConfigFormatError",
    "compute_config_hash",
    "load_config",
    "deep_merge",
    "EngineSettings",
    "resolve_engine_settings",
    "resource_enabled",
]
