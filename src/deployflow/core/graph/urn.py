# src/deployflow/core/graph/urn.py
"""
Identidades URN-like para recursos.

Formato:
    urn:pulumi:<stack>::<project>::<qualified-type>::<name>

O tipo qualificado de um child inclui a cadeia de tipos dos ancestrais,
separada por ``$`` (ex.: ``pkg:index:Parent$pkg:index:Child``), de modo
que dois recursos com o mesmo nome sob parents distintos não colidem.

O uso de URNs é opcional: o Registry aceita qualquer string não vazia
como identidade.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

URN_PREFIX = "urn:pulumi:"
_SEP = "::"


@dataclass(frozen=True)
class URN:
    stack: str
    project: str
    qualified_type: str
    name: str

    @property
    def type_token(self) -> str:
        """Último segmento do tipo qualificado (o tipo do próprio recurso)."""
        return self.qualified_type.rsplit("$", 1)[-1]

    @property
    def parent_type(self) -> Optional[str]:
        if "$" not in self.qualified_type:
            return None
        return self.qualified_type.rsplit("$", 1)[0]

    def __str__(self) -> str:
        return f"{URN_PREFIX}{self.stack}{_SEP}{self.project}{_SEP}{self.qualified_type}{_SEP}{self.name}"


def make_urn(
    *,
    stack: str,
    project: str,
    type_token: str,
    name: str,
    parent_type: Optional[str] = None,
) -> str:
    """
    Monta a identidade URN de um recurso.

    Args:
        stack: nome do stack.
        project: nome do projeto.
        type_token: tipo do recurso (ex.: ``test:index:MyCustomResource``).
        name: nome lógico do recurso.
        parent_type: tipo qualificado do parent, quando o recurso é child.

    Raises:
        ValueError: Se algum segmento obrigatório for vazio, ou se stack,
            projeto ou tipo contiverem ``::`` (o nome pode conter).
    """
    for label, value in (("stack", stack), ("project", project), ("type_token", type_token), ("name", name)):
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"{label} must be a non-empty string")
        if label != "name" and _SEP in value:
            raise ValueError(f"{label} must not contain '{_SEP}': {value!r}")

    qualified = f"{parent_type}${type_token}" if parent_type else type_token
    return str(URN(stack=stack, project=project, qualified_type=qualified, name=name))


def parse_urn(urn: str) -> URN:
    """
    Decompõe uma identidade URN.

    O nome é o restante após o terceiro separador e pode conter ``::``.

    Raises:
        ValueError: Se a string não seguir o formato URN.
    """
    if not isinstance(urn, str) or not urn.startswith(URN_PREFIX):
        raise ValueError(f"Not a URN: {urn!r}")

    parts = urn[len(URN_PREFIX):].split(_SEP, 3)
    if len(parts) != 4 or not all(parts):
        raise ValueError(f"Malformed URN: {urn!r}")

    stack, project, qualified_type, name = parts
    return URN(stack=stack, project=project, qualified_type=qualified_type, name=name)
