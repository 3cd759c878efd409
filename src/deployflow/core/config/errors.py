# src/deployflow/core/config/errors.py
"""
Exceções canônicas da camada de configuração do deployflow.

Todas as falhas de carregamento, merge e validação de configuração
herdam de `ConfigError`, permitindo captura genérica e distinção clara
entre erro de configuração e erro estrutural do grafo de recursos.
"""


class ConfigError(Exception):
    """
    Exceção base para erros relacionados à configuração do deployflow.

    Limites explícitos:
        - Não representa erro estrutural do grafo
        - Não representa falha de execução de recurso
    """


class DefaultsNotFoundError(ConfigError):
    """
    Arquivo de configuração base (defaults) não encontrado.

    O arquivo de defaults é obrigatório; sem ele não existe configuração
    efetiva para o pass.
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Formato do arquivo de configuração não suportado.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """Conteúdo raiz da configuração não é um dicionário (`dict`)."""


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"engine": {"max_workers": 4}}
        - override: {"engine": "fast"}

    Nenhum merge parcial é produzido em caso de conflito.
    """


class InvalidConfigValueError(ConfigError):
    """
    Valor de configuração fora do domínio aceito.

    Exemplos:
        - engine.max_workers = 0
        - engine.operation = "destroy"
    """
