# tests/config/test_loader.py
"""
Testes do carregador de configuração (load_config).

Os testes asseguram que:
- o arquivo defaults é obrigatório
- o arquivo local é opcional e tem precedência quando existe
- formatos não suportados são rejeitados
- raízes que não são dicionário são detectadas precocemente

Invariantes:
    - A configuração final é sempre um dicionário
    - Nenhuma configuração parcial é retornada em caso de erro

Limites explícitos:
    - Não valida o domínio dos valores (ver test_settings)
"""

from pathlib import Path

import pytest

try:
    from deployflow.core.config.loader import load_config
    from deployflow.core.config.errors import (
        ConfigTypeConflictError,
        DefaultsNotFoundError,
        InvalidConfigRootTypeError,
        UnsupportedConfigFormatError,
    )
except Exception as e:  # noqa: BLE001
    load_config = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing loader/errors modules. Implement:\n"
            "- src/deployflow/core/config/loader.py (load_config)\n"
            "- src/deployflow/core/config/errors.py (typed exceptions)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_missing_defaults_raises(tmp_path: Path):
    """
    A ausência do arquivo defaults é erro fatal, antes de qualquer merge.
    """
    _require_imports()
    with pytest.raises(DefaultsNotFoundError):
        load_config(defaults_path=str(tmp_path / "defaults.yaml"))


def test_missing_local_is_ok(tmp_path: Path, config_defaults_yaml):
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text(config_defaults_yaml, encoding="utf-8")

    out = load_config(defaults_path=str(defaults), local_path=str(tmp_path / "local.yaml"))

    assert out["engine"]["max_workers"] == 4
    assert out["resources"] == {}


def test_local_overrides_defaults(tmp_path: Path, config_defaults_yaml, config_local_yaml):
    """
    Verifica a precedência do override local sobre os defaults.

    Chaves ausentes no local são preservadas; chaves presentes substituem
    o valor do defaults e dicionários aninhados são mesclados.
    """
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    local = tmp_path / "local.yaml"
    defaults.write_text(config_defaults_yaml, encoding="utf-8")
    local.write_text(config_local_yaml, encoding="utf-8")

    out = load_config(defaults_path=str(defaults), local_path=str(local))

    assert out["engine"] == {
        "max_workers": 8,
        "fail_fast": False,
        "execute_logical": False,
        "operation": "create",
    }
    assert out["resources"] == {"myresource": {"enabled": False}}


def test_json_defaults(tmp_path: Path):
    _require_imports()
    defaults = tmp_path / "defaults.json"
    defaults.write_text('{"engine": {"fail_fast": true}}', encoding="utf-8")

    assert load_config(defaults_path=str(defaults)) == {"engine": {"fail_fast": True}}


def test_empty_file_is_empty_dict(tmp_path: Path):
    _require_imports()
    defaults = tmp_path / "defaults.yml"
    defaults.write_text("", encoding="utf-8")

    assert load_config(defaults_path=str(defaults)) == {}


def test_unsupported_format(tmp_path: Path):
    _require_imports()
    defaults = tmp_path / "defaults.toml"
    defaults.write_text("[engine]\n", encoding="utf-8")

    with pytest.raises(UnsupportedConfigFormatError):
        load_config(defaults_path=str(defaults))


def test_root_must_be_mapping(tmp_path: Path):
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text("- engine\n- resources\n", encoding="utf-8")

    with pytest.raises(InvalidConfigRootTypeError):
        load_config(defaults_path=str(defaults))


def test_type_conflict_in_local(tmp_path: Path, config_defaults_yaml):
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    local = tmp_path / "local.yaml"
    defaults.write_text(config_defaults_yaml, encoding="utf-8")
    local.write_text("engine: fast\n", encoding="utf-8")

    with pytest.raises(ConfigTypeConflictError):
        load_config(defaults_path=str(defaults), local_path=str(local))
