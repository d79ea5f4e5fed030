# src/quickconf/core/validation.py
"""
Version Validator do quickconf.

Todo structured value aceito pelo quickconf deve declarar um campo
visível chamado literalmente `Version`, com tipo declarado textual.

Decisões arquiteturais:
    - A versão é uma chave opaca de comparação ("1", "1.1", "2" são
      apenas strings distintas); não há parsing semântico
    - O tipo *declarado* é verificado, não o valor: `Version: int` é
      rejeitado mesmo que o valor seja conversível

Limites explícitos:
    - Não lê arquivos (ver `quickconf.persistence.version`)
    - Não compara versões nem executa migrações
"""

from __future__ import annotations

from typing import Any

from .errors import InvalidVersionTypeError, MissingVersionError
from .introspect import require_structured, resolve_field_types, visible_fields


VERSION_FIELD = "Version"


def is_textual(declared: Any) -> bool:
    """Retorna True se o tipo declarado é `str` ou subclasse de `str`."""
    return isinstance(declared, type) and issubclass(declared, str)


def check_data(value: Any) -> None:
    """
    Valida que `value` pode ser envolvido por uma Config Store.

    Args:
        value (Any): Structured value candidato.

    Raises:
        NotStructuredError: Se `value` for None ou não for instância de dataclass.
        MissingVersionError: Se não houver campo visível `Version`.
        InvalidVersionTypeError: Se o tipo declarado de `Version` não for textual.
    """
    require_structured(value)

    if VERSION_FIELD not in {f.name for f in visible_fields(value)}:
        raise MissingVersionError(
            f"{type(value).__name__} não declara o campo obrigatório '{VERSION_FIELD}'"
        )

    declared = resolve_field_types(type(value), value)[VERSION_FIELD]
    if not is_textual(declared):
        raise InvalidVersionTypeError(
            f"Campo '{VERSION_FIELD}' de {type(value).__name__} deve ser str, "
            f"declarado: {getattr(declared, '__name__', declared)}"
        )


def version_of(value: Any) -> str:
    """Retorna o conteúdo textual de `Version` de um value já validado."""
    check_data(value)
    return getattr(value, VERSION_FIELD)


__all__ = ["VERSION_FIELD", "check_data", "is_textual", "version_of"]
