# src/quickconf/core/types.py
"""
Tipos canônicos do quickconf.

Este módulo define as estruturas que padronizam a comunicação entre o
introspector, o diff engine e a Config Store.

Componentes principais:
    - FieldKind       → enum de classificação do valor de um campo
    - FieldDescriptor → tripla imutável (name, value, kind)
    - FieldFilter     → configuração opcional de filtro de campos para diff

Princípios fundamentais:
    - Tipos são estáveis e serializáveis
    - Nenhuma lógica de I/O vive neste módulo

Invariantes:
    - FieldDescriptor é imutável e recalculado a cada enumeração
    - FieldKind possui valores textuais canônicos

Limites explícitos:
    - Não enumera campos
    - Não compara valores
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, FrozenSet, Iterable


class FieldKind(str, Enum):
    """
    Classificação do valor de um campo.

    Representa a união tagueada de valores possíveis em um Field
    Descriptor, tornando o resultado do diff fortemente tipado.

    Tipos definidos:
        - STRING, INTEGER, FLOAT, BOOLEAN, NULL: folhas primitivas
        - SEQUENCE: list ou tuple
        - MAPPING: dict (tratado como folha pela enumeração recursiva)
        - STRUCT: instância de dataclass
        - OTHER: qualquer outro valor
    """
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    NULL = "null"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    STRUCT = "struct"
    OTHER = "other"

    @classmethod
    def of(cls, value: Any) -> "FieldKind":
        # bool é subclasse de int: precisa vir antes
        if value is None:
            return cls.NULL
        if isinstance(value, bool):
            return cls.BOOLEAN
        if isinstance(value, int):
            return cls.INTEGER
        if isinstance(value, float):
            return cls.FLOAT
        if isinstance(value, str):
            return cls.STRING
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            return cls.STRUCT
        if isinstance(value, (list, tuple)):
            return cls.SEQUENCE
        if isinstance(value, dict):
            return cls.MAPPING
        return cls.OTHER


@dataclass(frozen=True)
class FieldDescriptor:
    """
    Tripla (name, value, kind) produzida pelo introspector.

    Campos:
        - name: nome do campo; qualificado por caminho na enumeração
          recursiva (ex.: `Address.City`, `Directories[1]`)
        - value: valor do campo no operando de origem
        - kind: classificação do valor (`FieldKind`)

    Não é persistido; é recalculado a cada chamada de enumeração,
    validação ou diff.
    """

    name: str
    value: Any
    kind: FieldKind

    @classmethod
    def describe(cls, name: str, value: Any) -> "FieldDescriptor":
        return cls(name=name, value=value, kind=FieldKind.of(value))


@dataclass(frozen=True)
class FieldFilter:
    """
    Configuração opcional de filtro de campos da Config Store.

    `exclude` lista caminhos de campos (ex.: `Password`, `Address.City`)
    que nunca aparecem em resultados de diff. Um prefixo excluído oculta
    também todos os caminhos abaixo dele (`Address` oculta `Address.City`
    e `Directories` oculta `Directories[0]`).

    Limites explícitos:
        - Não afeta save/load (o round-trip permanece exato)
        - Nunca oculta o campo `Version` na validação
    """

    exclude: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def excluding(cls, names: Iterable[str]) -> "FieldFilter":
        return cls(exclude=frozenset(names))

    def allows(self, path: str) -> bool:
        for excluded in self.exclude:
            if path == excluded:
                return False
            if path.startswith(excluded) and path[len(excluded)] in ".[":
                return False
        return True


__all__ = ["FieldKind", "FieldDescriptor", "FieldFilter"]
