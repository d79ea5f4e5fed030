# src/quickconf/__init__.py
"""
quickconf — persistência versionada de structured values de configuração.

Dado um structured value arbitrário do chamador (uma instância de
dataclass com campo `Version: str`), o quickconf o serializa em JSON ou
YAML (escolhido pela extensão do arquivo), o carrega de volta, valida o
marcador de versão e calcula diferenças estruturais entre duas instâncias
de formas possivelmente diferentes.

Arquitetura em alto nível:
    - core.introspect  → enumeração de campos (rasa e recursiva)
    - core.validation  → validação do campo `Version`
    - core.diff        → diff raso e diff recursivo
    - persistence      → codec, Config Store e leitura de versão

Limites explícitos:
    - Não executa migração de schema
    - Não coordena escritores concorrentes
    - Não oferece CLI
"""

from .core.diff import deep_diff, deep_equal, diff
from .core.errors import (
    ConfigDecodeError,
    ConfigEncodeError,
    ConfigError,
    ConfigFileNotFoundError,
    ConfigIOError,
    ConfigValidationError,
    DuplicateKeyError,
    EmptyConfigFileError,
    InvalidVersionTypeError,
    MissingVersionError,
    NotStructuredError,
)
from .core.introspect import fields, fields_deep
from .core.types import FieldDescriptor, FieldFilter, FieldKind
from .core.validation import check_data
from .persistence.codec import ConfigFormat
from .persistence.store import ConfigStore, load_config, save_config
from .persistence.version import get_version

__version__ = "0.1.0"

__all__ = [
    "ConfigDecodeError",
    "ConfigEncodeError",
    "ConfigError",
    "ConfigFileNotFoundError",
    "ConfigFormat",
    "ConfigIOError",
    "ConfigStore",
    "ConfigValidationError",
    "DuplicateKeyError",
    "EmptyConfigFileError",
    "FieldDescriptor",
    "FieldFilter",
    "FieldKind",
    "InvalidVersionTypeError",
    "MissingVersionError",
    "NotStructuredError",
    "check_data",
    "deep_diff",
    "deep_equal",
    "diff",
    "fields",
    "fields_deep",
    "get_version",
    "load_config",
    "save_config",
]
