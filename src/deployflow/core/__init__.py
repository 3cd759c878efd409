# src/deployflow/core/__init__.py
"""
Core do deployflow.

Este pacote contém a implementação canônica do motor de planejamento e
agendamento de recursos, independente de providers, CLI ou formatos de
persistência de estado.

O core é projetado para ser:
    - determinístico na validação estrutural
    - seguro sob relatórios concorrentes de execução
    - testável de forma isolada
    - orientado a contratos explícitos

Componentes principais:
    - graph        → registro de recursos, construção do grafo, detecção de ciclos
    - engine       → scheduler, protocolo de executor e engine do pass
    - config       → resolução de configuração (merge, validação estrutural, hashing)
    - traceability → Manifest e Event Log para auditoria

Princípios fundamentais:
    - Nenhuma decisão silenciosa: toda operação termina em um estado explícito
    - Erros estruturais rejeitam o pass inteiro
    - Falhas de execução são locais e rastreáveis

Este pacote existe como a fonte de verdade operacional do deployflow.
"""
