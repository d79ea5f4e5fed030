# src/quickconf/persistence/version.py
"""
Leitura da versão de um arquivo de configuração sem conhecer sua forma.

Usado quando o chamador ainda não sabe qual dataclass se aplica ao
arquivo: apenas o campo `Version` é decodificado, com a mesma regra de
tipo textual aplicada por `check_data`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from quickconf.core.errors import ConfigDecodeError
from quickconf.core.types import FieldFilter

from .codec import apply_document, decode_document, format_for_path
from .store import read_config_bytes


logger = logging.getLogger(__name__)


@dataclass
class _VersionOnly:
    Version: str = ""


def get_version(path: Union[str, Path], field_filter: Optional[FieldFilter] = None) -> str:
    """
    Extrai a string de versão de `path`.

    Um documento sem chave de versão produz `""`. O `field_filter` é
    aceito por simetria com a Store e nunca oculta `Version`.

    Raises:
        ConfigFileNotFoundError: Se o arquivo não existir.
        EmptyConfigFileError: Se o arquivo estiver vazio.
        ConfigDecodeError: Se o conteúdo for malformado ou a versão não for textual.
    """
    path = Path(path)
    fmt = format_for_path(path)
    document = decode_document(read_config_bytes(path), fmt, source=str(path))

    shape = _VersionOnly()
    apply_document(shape, document, fmt)
    if not isinstance(shape.Version, str):
        raise ConfigDecodeError(f"Versão não textual em {path}: {shape.Version!r}")
    logger.debug("Versão de %s: %r", path, shape.Version)
    return shape.Version


__all__ = ["get_version"]
