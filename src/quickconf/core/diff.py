# src/quickconf/core/diff.py
"""
Diff Engine do quickconf.

Compara dois structured values, de mesma forma ou de formas diferentes,
campo a campo, sem que um conheça o tipo do outro.

Política de diff (v1):
    - Projeção: apenas nomes presentes nos dois operandos são comparados;
      campos presentes em um único lado são ignorados (não é erro)
    - Ordem do resultado: ordem de declaração do operando `a`
    - Valor reportado: sempre o valor do operando `a`
    - Tipos diferentes entre campos homônimos → sempre divergentes
    - `diff`: apenas campos de topo, com igualdade estrutural profunda
    - `deep_diff`: recursão por campo em dataclasses e por índice em
      sequências; somente folhas divergentes são reportadas
    - `deep_diff` percorre dataclasses de tipos diferentes pelos nomes em
      comum (formas distintas da mesma configuração); já `list` x `tuple`
      é uma única divergência no caminho, como em `diff`

Invariantes:
    - Nenhum input é mutado
    - Formas incompatíveis produzem resultado, nunca exceção

Limites explícitos:
    - Não valida o campo `Version`
    - Não produz diferença simétrica de conjuntos
    - Não detecta ciclos
"""

from __future__ import annotations

from typing import Any, List, Optional

from .introspect import fields, is_structured, require_structured, visible_fields
from .types import FieldDescriptor, FieldFilter


def deep_equal(x: Any, y: Any) -> bool:
    """
    Igualdade estrutural estrita.

    Exige tipos idênticos em todos os níveis (`1` e `1.0` diferem, assim
    como `True` e `1`) e percorre dataclasses, listas, tuplas e dicts.
    """
    if type(x) is not type(y):
        return False

    if is_structured(x):
        return all(
            deep_equal(getattr(x, f.name), getattr(y, f.name))
            for f in visible_fields(x)
        )

    if isinstance(x, (list, tuple)):
        if len(x) != len(y):
            return False
        return all(deep_equal(a, b) for a, b in zip(x, y))

    if isinstance(x, dict):
        if x.keys() != y.keys():
            return False
        return all(deep_equal(x[k], y[k]) for k in x)

    return x == y


def _common_names(a: Any, b: Any) -> List[str]:
    names_b = {f.name for f in visible_fields(b)}
    return [f.name for f in visible_fields(a) if f.name in names_b]


def _filtered(out: List[FieldDescriptor], field_filter: Optional[FieldFilter]) -> List[FieldDescriptor]:
    if field_filter is None:
        return out
    return [d for d in out if field_filter.allows(d.name)]


def diff(a: Any, b: Any, field_filter: Optional[FieldFilter] = None) -> List[FieldDescriptor]:
    """
    Diff raso (apenas campos de topo) entre dois structured values.

    Args:
        a (Any): Operando de referência; seus valores compõem o resultado.
        b (Any): Operando comparado.
        field_filter (Optional[FieldFilter]): Caminhos a omitir do resultado.

    Returns:
        List[FieldDescriptor]: Campos comuns cujos valores divergem.

    Raises:
        NotStructuredError: Se algum operando não for um structured value.
    """
    require_structured(a, role="a")
    require_structured(b, role="b")

    values_b = {d.name: d.value for d in fields(b)}
    out = [
        d for d in fields(a)
        if d.name in values_b and not deep_equal(d.value, values_b[d.name])
    ]
    return _filtered(out, field_filter)


def _deep_compare(path: str, x: Any, y: Any, out: List[FieldDescriptor]) -> None:
    # struct x struct -> recursão por nome comum
    if is_structured(x) and is_structured(y):
        for name in _common_names(x, y):
            _deep_compare(f"{path}.{name}", getattr(x, name), getattr(y, name), out)
        return

    # sequência x sequência do mesmo tipo -> recursão por índice
    if isinstance(x, (list, tuple)) and type(x) is type(y):
        for index in range(max(len(x), len(y))):
            item_path = f"{path}[{index}]"
            if index >= len(x) or index >= len(y):
                out.append(FieldDescriptor.describe(item_path, x[index] if index < len(x) else None))
                continue
            _deep_compare(item_path, x[index], y[index], out)
        return

    # folha ou formas incompatíveis
    if not deep_equal(x, y):
        out.append(FieldDescriptor.describe(path, x))


def deep_diff(a: Any, b: Any, field_filter: Optional[FieldFilter] = None) -> List[FieldDescriptor]:
    """
    Diff recursivo entre dois structured values.

    Estruturas aninhadas são comparadas campo a campo em qualquer
    profundidade e sequências elemento a elemento por índice. Um índice
    presente em apenas um lado conta como divergência (com valor `None`
    quando `a` é o lado mais curto). Um campo de topo que diverge em duas
    folhas aninhadas contribui com duas entradas.

    Raises:
        NotStructuredError: Se algum operando não for um structured value.
    """
    require_structured(a, role="a")
    require_structured(b, role="b")

    out: List[FieldDescriptor] = []
    for name in _common_names(a, b):
        _deep_compare(name, getattr(a, name), getattr(b, name), out)
    return _filtered(out, field_filter)


__all__ = ["deep_equal", "diff", "deep_diff"]
