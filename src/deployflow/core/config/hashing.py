# src/deployflow/core/config/hashing.py
"""
Hashing canônico de configuração do deployflow.

O hash representa a identidade estrutural da configuração efetiva de um
pass e é gravado em `inputs.config_hash` do Manifest.

Política de hashing (v1):
    - Serialização JSON canônica (chaves ordenadas, separadores compactos)
    - Codificação UTF-8
    - SHA-256, hexadecimal de 64 caracteres
"""


import hashlib
import json
from typing import Any, Dict


def canonical_sha256(data: Any) -> str:
    """Retorna o SHA-256 hexadecimal da serialização JSON canônica de `data`."""
    canonical_json = json.dumps(
        data,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera um hash determinístico da configuração efetiva do pass.

    Configurações estruturalmente equivalentes produzem o mesmo hash,
    independentemente da ordem original das chaves.

    Raises:
        TypeError: Se o objeto fornecido não for um dicionário.
    """

    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )

    return canonical_sha256(config)
