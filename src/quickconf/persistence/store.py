# src/quickconf/persistence/store.py
"""
Config Store canônica do quickconf.

A Store envolve um único structured value do chamador (sem copiá-lo) e
oferece save/load versionados contra um arquivo nomeado, com o formato
escolhido pelo sufixo do caminho.

Protocolo de escrita (v1):
    1. Se o destino for um diretório → `ConfigIOError`
    2. O novo conteúdo é escrito em um arquivo temporário irmão (fsync)
    3. Se já existir um arquivo com bytes diferentes, ele é copiado
       para `<path>.old`; se a cópia falhar, o save é abortado
    4. O temporário recebe o modo do destino (ou `0666 & ~umask`) e o
       substitui via `os.replace`

Estados:
    - Construção inválida levanta exceção; nenhuma Store é criada
    - Uma Store válida aceita quantos save/load forem necessários
    - Nenhum recurso permanece aberto entre chamadas

Limites explícitos:
    - Não coordena escritores concorrentes (sem locks)
    - O backup não é crash-consistente entre processos
    - Nunca lê o backup automaticamente; rollback é manual
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
import tempfile
from pathlib import Path
from typing import Any, List, Optional, Union

from quickconf.core.diff import deep_diff as _deep_diff
from quickconf.core.diff import diff as _diff
from quickconf.core.errors import ConfigFileNotFoundError, ConfigIOError
from quickconf.core.types import FieldDescriptor, FieldFilter
from quickconf.core.validation import VERSION_FIELD, check_data

from .codec import ConfigFormat, apply_document, decode_document, encode, format_for_path


logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".old"

PathLike = Union[str, Path]


def backup_path_for(path: PathLike) -> Path:
    """Caminho do backup de `path`: o mesmo nome com o sufixo `.old`."""
    path = Path(path)
    return path.with_name(path.name + BACKUP_SUFFIX)


def read_config_bytes(path: PathLike) -> bytes:
    """
    Lê o conteúdo bruto de um arquivo de configuração.

    Raises:
        ConfigFileNotFoundError: Se o arquivo não existir.
        ConfigIOError: Para qualquer outra falha de sistema de arquivos.
    """
    path = Path(path)
    try:
        return path.read_bytes()
    except FileNotFoundError as exc:
        raise ConfigFileNotFoundError(f"Arquivo de configuração não encontrado: {path}") from exc
    except OSError as exc:
        raise ConfigIOError(f"Falha ao ler {path}: {exc}") from exc


def _file_mode(path: Path) -> int:
    if path.exists():
        return stat.S_IMODE(path.stat().st_mode)
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def _write_atomic(path: Path, payload: bytes) -> None:
    if path.is_dir():
        raise ConfigIOError(f"Destino é um diretório: {path}")

    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    except OSError as exc:
        raise ConfigIOError(f"Falha ao criar arquivo temporário para {path}: {exc}") from exc

    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        # mkstemp cria com 0600; o destino mantém o modo anterior
        os.chmod(tmp, _file_mode(path))

        if path.exists():
            previous = path.read_bytes()
            if previous != payload:
                backup = backup_path_for(path)
                shutil.copyfile(path, backup)
                logger.info("Backup criado: %s", backup)

        os.replace(tmp, path)
    except OSError as exc:
        tmp.unlink(missing_ok=True)
        raise ConfigIOError(f"Falha ao salvar {path}: {exc}") from exc


class ConfigStore:
    """
    Store versionada em torno de um structured value do chamador.

    A Store mantém apenas uma referência ao value: nunca o copia e só
    o altera em `load`, sobrescrevendo in-place os campos presentes no
    arquivo.

    Args:
        value (Any): Instância de dataclass com campo `Version: str`.
        field_filter (Optional[FieldFilter]): Caminhos omitidos dos diffs.

    Raises:
        ConfigValidationError: Se `value` não passar em `check_data`.
    """

    def __init__(self, value: Any, field_filter: Optional[FieldFilter] = None):
        check_data(value)
        self._value = value
        self.field_filter = field_filter

    # ------------------------------------------------------------------
    # Acesso
    # ------------------------------------------------------------------
    @property
    def data(self) -> Any:
        return self._value

    @property
    def version(self) -> str:
        return getattr(self._value, VERSION_FIELD)

    def __str__(self) -> str:
        return encode(self._value, ConfigFormat.JSON).decode("utf-8")

    def __repr__(self) -> str:
        return f"ConfigStore({type(self._value).__name__}, version={self.version!r})"

    # ------------------------------------------------------------------
    # Persist / Load
    # ------------------------------------------------------------------
    def save(self, path: PathLike) -> None:
        """
        Salva o value em `path` no formato implicado pelo sufixo.

        Salvar dados idênticos repetidamente produz bytes idênticos e
        nenhum backup. Se o arquivo existente divergir, seus bytes
        anteriores são preservados em `<path>.old`.

        Raises:
            ConfigEncodeError: Se o value não puder ser serializado no formato.
            ConfigIOError: Se `path` for um diretório ou não puder ser escrito.
        """
        path = Path(path)
        fmt = format_for_path(path)
        payload = encode(self._value, fmt)
        logger.debug("Salvando %s (%s, %d bytes)", path, fmt.value, len(payload))
        _write_atomic(path, payload)

    def load(self, path: PathLike) -> None:
        """
        Carrega `path` diretamente no value, sobrescrevendo seus campos.

        Em caso de falha o value permanece exatamente como antes.

        Raises:
            ConfigFileNotFoundError: Se o arquivo não existir.
            EmptyConfigFileError: Se o arquivo estiver vazio.
            ConfigDecodeError: Se o conteúdo for inválido para o formato ou para o value.
            ConfigIOError: Em outras falhas de leitura.
        """
        path = Path(path)
        fmt = format_for_path(path)
        raw = read_config_bytes(path)
        document = decode_document(raw, fmt, source=str(path))
        apply_document(self._value, document, fmt)
        logger.debug("Carregado %s (%s)", path, fmt.value)

    # ------------------------------------------------------------------
    # Diff
    # ------------------------------------------------------------------
    def diff(self, other: "ConfigStore") -> List[FieldDescriptor]:
        return _diff(self._value, other.data, self.field_filter)

    def deep_diff(self, other: "ConfigStore") -> List[FieldDescriptor]:
        return _deep_diff(self._value, other.data, self.field_filter)


def load_config(path: PathLike, value: Any, field_filter: Optional[FieldFilter] = None) -> ConfigStore:
    """
    Constrói uma Store em torno de `value` e carrega `path` nela.

    Se a construção falhar, o load nunca é tentado.
    """
    store = ConfigStore(value, field_filter)
    store.load(path)
    return store


def save_config(value: Any, path: PathLike, field_filter: Optional[FieldFilter] = None) -> ConfigStore:
    """Constrói uma Store em torno de `value` e salva em `path`."""
    store = ConfigStore(value, field_filter)
    store.save(path)
    return store


__all__ = [
    "BACKUP_SUFFIX",
    "ConfigStore",
    "backup_path_for",
    "load_config",
    "read_config_bytes",
    "save_config",
]
