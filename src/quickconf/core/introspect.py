# src/quickconf/core/introspect.py
"""
Record Introspector do quickconf.

Enumera os campos nomeados e visíveis de um structured value, em ordem
de declaração, opcionalmente de forma recursiva.

No quickconf, structured value é sempre uma *instância* de dataclass:
`dataclasses.fields()` atua como a tabela uniforme de descrição de tipos,
evitando ramificações ad hoc por tipo concreto.

Regras de visibilidade:
    - Campos cujo nome começa com `_` são internos e nunca enumerados
    - Campos com `metadata={"json": "-"}` são ocultos

Política de recursão (`fields_deep`):
    - dataclass → recursão por campo (`Parent.Child`)
    - list/tuple → recursão por índice (`Items[0]`)
    - dict, str, bytes e escalares → folha

Limites explícitos:
    - Não detecta ciclos (dados de configuração não devem conter ciclos)
    - Não valida o campo `Version`
    - Não realiza I/O
"""

from __future__ import annotations

import dataclasses
import sys
import typing
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Tuple

from .errors import NotStructuredError
from .types import FieldDescriptor


HIDDEN_TAG = "-"


def is_structured(value: Any) -> bool:
    """Retorna True se `value` é uma instância (não a classe) de dataclass."""
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def require_structured(value: Any, *, role: str = "value") -> None:
    """
    Garante que `value` é um structured value.

    Args:
        value (Any): Valor a verificar.
        role (str): Nome do operando usado na mensagem de erro.

    Raises:
        NotStructuredError: Se `value` for None ou não for instância de dataclass.
    """
    if value is None:
        raise NotStructuredError(f"{role} não pode ser None")
    if not is_structured(value):
        raise NotStructuredError(
            f"{role} deve ser uma instância de dataclass, recebido: {type(value).__name__}"
        )


def is_visible(f: dataclasses.Field) -> bool:
    """Retorna True se o campo participa de enumeração, diff e persistência."""
    if f.name.startswith("_"):
        return False
    return f.metadata.get("json") != HIDDEN_TAG


def visible_fields(value_or_type: Any) -> Tuple[dataclasses.Field, ...]:
    """Campos visíveis de uma instância ou classe de dataclass, em ordem de declaração."""
    return tuple(f for f in dataclasses.fields(value_or_type) if is_visible(f))


@dataclass(frozen=True)
class UnresolvedAnnotation:
    """Anotação de campo que não pôde ser resolvida para um tipo."""

    text: str


_RESOLUTION_ERRORS = (NameError, AttributeError, SyntaxError, TypeError)


def _collect_types(value: Any, namespace: Dict[str, Any]) -> None:
    if is_structured(value):
        namespace.setdefault(type(value).__name__, type(value))
        for f in dataclasses.fields(value):
            _collect_types(getattr(value, f.name), namespace)
    elif isinstance(value, (list, tuple)):
        for item in value:
            _collect_types(item, namespace)
    elif isinstance(value, dict):
        for item in value.values():
            _collect_types(item, namespace)
    elif isinstance(value, Enum):
        namespace.setdefault(type(value).__name__, type(value))


def _local_namespace(cls: type, value: Any) -> Dict[str, Any]:
    namespace: Dict[str, Any] = dict(vars(cls))
    if value is not None:
        reachable: Dict[str, Any] = {}
        _collect_types(value, reachable)
        namespace.update(reachable)
    namespace[cls.__name__] = cls
    return namespace


def resolve_field_types(cls: type, value: Any = None) -> Dict[str, Any]:
    """
    Resolve o tipo declarado de cada campo de uma classe de dataclass.

    A resolução usa os globals do módulo da classe e um namespace local
    formado pelo `__dict__` da classe e pelos tipos de dataclass e enum
    alcançáveis a partir de `value`. Isso cobre classes locais com
    anotações adiadas (`from __future__ import annotations`), cujos
    nomes não existem no módulo.

    Cada campo é resolvido individualmente: uma anotação irresolvível
    não contamina as demais e é reportada como `UnresolvedAnnotation`.

    Args:
        cls (type): Classe de dataclass.
        value (Any): Instância atual, opcional, usada como fonte de tipos.

    Returns:
        Dict[str, Any]: Mapa nome do campo → tipo declarado.
    """
    globalns = getattr(sys.modules.get(cls.__module__), "__dict__", {})
    localns = _local_namespace(cls, value)

    try:
        hints = typing.get_type_hints(cls, localns=localns)
    except _RESOLUTION_ERRORS:
        hints = {}

    resolved: Dict[str, Any] = {}
    for f in dataclasses.fields(cls):
        if f.name in hints:
            resolved[f.name] = hints[f.name]
            continue
        declared = f.type
        if isinstance(declared, typing.ForwardRef):
            declared = declared.__forward_arg__
        if isinstance(declared, str):
            try:
                # mesma avaliação feita por typing.get_type_hints
                declared = eval(declared, globalns, localns)  # noqa: S307
            except _RESOLUTION_ERRORS:
                declared = UnresolvedAnnotation(declared)
        resolved[f.name] = declared
    return resolved


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def fields(value: Any) -> List[FieldDescriptor]:
    """
    Enumera os campos visíveis de um structured value em ordem de declaração.

    Args:
        value (Any): Instância de dataclass.

    Returns:
        List[FieldDescriptor]: Um descriptor por campo visível.

    Raises:
        NotStructuredError: Se `value` for None ou não for instância de dataclass.
    """
    require_structured(value)
    return [
        FieldDescriptor.describe(f.name, getattr(value, f.name))
        for f in visible_fields(value)
    ]


def _walk(prefix: str, value: Any, out: List[FieldDescriptor]) -> None:
    if is_structured(value):
        for f in visible_fields(value):
            _walk(f"{prefix}.{f.name}", getattr(value, f.name), out)
        return

    if _is_sequence(value):
        for index, item in enumerate(value):
            _walk(f"{prefix}[{index}]", item, out)
        return

    out.append(FieldDescriptor.describe(prefix, value))


def fields_deep(value: Any) -> List[FieldDescriptor]:
    """
    Enumera apenas as folhas de um structured value, com nomes qualificados.

    Campos cujo valor é outra dataclass ou uma sequência (list/tuple) são
    percorridos recursivamente; somente valores folha são reportados.
    Uma sequência vazia não contribui com nenhum descriptor.

    Exemplo:
        - `Address.City`
        - `Directories[1]`

    Raises:
        NotStructuredError: Se `value` não for um structured value.
    """
    require_structured(value)
    out: List[FieldDescriptor] = []
    for f in visible_fields(value):
        _walk(f.name, getattr(value, f.name), out)
    return out


__all__ = [
    "UnresolvedAnnotation",
    "fields",
    "fields_deep",
    "is_structured",
    "is_visible",
    "require_structured",
    "resolve_field_types",
    "visible_fields",
]
