# src/quickconf/persistence/codec.py
"""
Codec canônico do quickconf (JSON e YAML).

Este módulo implementa a seleção de formato por sufixo, a serialização
determinística de structured values e a conversão de documentos
decodificados de volta para dataclasses.

A validação tipada dos valores é delegada ao pydantic; este módulo só
traduz chaves de documento (tags, minúsculas) para nomes de campo e
mescla mapas parciais sobre o valor atual.

Política de formato (v1):
    - `.yaml` / `.yml` (case-insensitive) → YAML
    - qualquer outro sufixo, inclusive nenhum → JSON (default)
    - Nenhuma inferência por conteúdo

Política de serialização (v1):
    - JSON: chaves em ordem de declaração, um TAB por nível, sem newline final
    - YAML: estilo bloco, chaves em minúsculas (salvo tag `yaml`), listas
      indentadas com 4 espaços, strings ambíguas entre aspas duplas
    - Dados idênticos sempre produzem bytes idênticos
    - Duas chaves iguais no mesmo mapa (tags, minúsculas) são erro

Política de decodificação (v1):
    - Arquivo vazio é erro explícito
    - A raiz do documento deve ser um mapa
    - Chaves duplicadas no mesmo mapa são rejeitadas
    - Chaves casam com campos de forma exata e, na falta, case-insensitive
    - Chaves sem campo correspondente são ignoradas
    - Campos ausentes no documento preservam o valor atual
    - Valores são validados contra o tipo declarado com pydantic
      (`TypeAdapter`, modo estrito); `null` só vale em campos `Optional`
    - Toda validação ocorre antes de qualquer atribuição

Limites explícitos:
    - Não lê nem escreve arquivos
    - Não valida o campo `Version`
"""

from __future__ import annotations

import dataclasses
import json
import sys
import typing
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml  # PyYAML
from pydantic import PydanticUndefinedAnnotation, PydanticUserError, TypeAdapter, ValidationError

from quickconf.core.errors import (
    ConfigDecodeError,
    ConfigEncodeError,
    DuplicateKeyError,
    EmptyConfigFileError,
)
from quickconf.core.introspect import (
    UnresolvedAnnotation,
    is_structured,
    resolve_field_types,
    visible_fields,
)


JSON_INDENT = "\t"
YAML_INDENT = 4
YAML_WIDTH = 4096
YAML_SUFFIXES = frozenset({".yaml", ".yml"})

_UNION_ORIGINS: tuple = (Union,)
if sys.version_info >= (3, 10):
    import types as _types

    _UNION_ORIGINS = (Union, _types.UnionType)


class ConfigFormat(str, Enum):
    """Formatos suportados; o valor é também o nome da tag de metadata."""
    JSON = "json"
    YAML = "yaml"


def format_for_path(path: Union[str, Path]) -> ConfigFormat:
    """Escolhe o formato apenas pelo sufixo de `path`; JSON é o default."""
    if Path(path).suffix.lower() in YAML_SUFFIXES:
        return ConfigFormat.YAML
    return ConfigFormat.JSON


def key_for(f: dataclasses.Field, fmt: ConfigFormat) -> str:
    """
    Chave do campo `f` no documento do formato `fmt`.

    A tag de metadata do formato (`json` ou `yaml`) tem precedência; sem
    tag, YAML usa o nome em minúsculas e JSON o nome do campo.
    """
    tagged = f.metadata.get(fmt.value)
    if tagged:
        return tagged
    if fmt is ConfigFormat.YAML:
        return f.name.lower()
    return f.name


# ---------------------------------------------------------------------------
# YAML dumper / loader
# ---------------------------------------------------------------------------

class _BlockDumper(yaml.SafeDumper):
    """SafeDumper que indenta sequências dentro de mapas."""

    def increase_indent(self, flow=False, indentless=False):
        return super().increase_indent(flow, False)


def _represent_str(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    style = None
    if dumper.resolve(yaml.ScalarNode, data, (True, False)) != "tag:yaml.org,2002:str":
        style = '"'
    return dumper.represent_scalar("tag:yaml.org,2002:str", data, style=style)


_BlockDumper.add_representer(str, _represent_str)


class _StrictLoader(yaml.SafeLoader):
    """SafeLoader que rejeita chaves duplicadas no mesmo mapa."""

    def construct_mapping(self, node, deep=False):
        if not isinstance(node, yaml.MappingNode):
            return super().construct_mapping(node, deep=deep)
        seen = set()
        for key_node, _ in node.value:
            key = self.construct_object(key_node, deep=deep)
            try:
                duplicated = key in seen
            except TypeError:
                # chave não hashable: o SafeLoader reporta o erro adequado
                continue
            if duplicated:
                raise DuplicateKeyError(f"Chave duplicada no documento YAML: {key!r}")
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


def _reject_duplicate_keys(pairs: List[tuple]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in pairs:
        if key in out:
            raise DuplicateKeyError(f"Chave duplicada no documento JSON: {key!r}")
        out[key] = value
    return out


# ---------------------------------------------------------------------------
# Encode
# ---------------------------------------------------------------------------

def to_plain(value: Any, fmt: ConfigFormat) -> Any:
    """
    Converte um valor em estruturas nativas (dict/list/escalares).

    Dataclasses viram dicts com chaves em ordem de declaração, tuplas
    viram listas e enums viram seus valores.

    Raises:
        ConfigEncodeError: Se dois campos produzirem a mesma chave.
    """
    if is_structured(value):
        out: Dict[str, Any] = {}
        for f in visible_fields(value):
            key = key_for(f, fmt)
            if key in out:
                raise ConfigEncodeError(
                    f"{type(value).__name__}.{f.name}: chave {fmt.value.upper()} '{key}' já usada por outro campo"
                )
            out[key] = to_plain(getattr(value, f.name), fmt)
        return out
    if isinstance(value, (list, tuple)):
        return [to_plain(item, fmt) for item in value]
    if isinstance(value, dict):
        return {k: to_plain(v, fmt) for k, v in value.items()}
    if isinstance(value, Enum):
        return value.value
    return value


def encode(value: Any, fmt: ConfigFormat) -> bytes:
    """
    Serializa um structured value de forma determinística.

    Returns:
        bytes: Conteúdo UTF-8 pronto para escrita.

    Raises:
        ConfigEncodeError: Se algum valor não tiver representação no formato.
    """
    plain = to_plain(value, fmt)

    try:
        if fmt is ConfigFormat.YAML:
            text = yaml.dump(
                plain,
                Dumper=_BlockDumper,
                default_flow_style=False,
                sort_keys=False,
                allow_unicode=True,
                indent=YAML_INDENT,
                width=YAML_WIDTH,
            )
        else:
            text = json.dumps(plain, indent=JSON_INDENT, ensure_ascii=False)
    except (TypeError, ValueError, yaml.YAMLError) as exc:
        raise ConfigEncodeError(
            f"Falha ao serializar {type(value).__name__} como {fmt.value.upper()}: {exc}"
        ) from exc

    return text.encode("utf-8")


# ---------------------------------------------------------------------------
# Decode
# ---------------------------------------------------------------------------

def decode_document(raw: bytes, fmt: ConfigFormat, *, source: str = "<bytes>") -> Dict[str, Any]:
    """
    Decodifica bytes em um documento cuja raiz é um mapa.

    Raises:
        EmptyConfigFileError: Se o conteúdo estiver vazio.
        DuplicateKeyError: Se um mapa declarar a mesma chave duas vezes.
        ConfigDecodeError: Se o conteúdo for malformado ou a raiz não for um mapa.
    """
    if not raw.strip():
        raise EmptyConfigFileError(f"Arquivo de configuração vazio: {source}")

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ConfigDecodeError(f"Conteúdo não é UTF-8 válido: {source}") from exc

    try:
        if fmt is ConfigFormat.YAML:
            document = yaml.load(text, Loader=_StrictLoader)
        else:
            document = json.loads(text, object_pairs_hook=_reject_duplicate_keys)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigDecodeError(f"Conteúdo {fmt.value.upper()} malformado em {source}: {exc}") from exc

    if not isinstance(document, dict):
        raise ConfigDecodeError(
            f"Raiz do documento deve ser um mapa, recebido: {type(document).__name__} ({source})"
        )
    return document


def _lookup(document: Dict[str, Any], key: str) -> Optional[str]:
    if key in document:
        return key
    lowered = key.lower()
    for candidate in document:
        if isinstance(candidate, str) and candidate.lower() == lowered:
            return candidate
    return None


def _struct_type(declared: Any) -> Optional[type]:
    if typing.get_origin(declared) in _UNION_ORIGINS:
        structs = [a for a in typing.get_args(declared) if _struct_type(a) is not None]
        return structs[0] if len(structs) == 1 else None
    if isinstance(declared, type) and dataclasses.is_dataclass(declared):
        return declared
    return None


def _current_plain(value: Any) -> Any:
    if is_structured(value):
        return {
            f.name: _current_plain(getattr(value, f.name))
            for f in visible_fields(value)
            if f.init
        }
    if isinstance(value, (list, tuple)):
        return [_current_plain(item) for item in value]
    if isinstance(value, dict):
        return {k: _current_plain(v) for k, v in value.items()}
    if isinstance(value, Enum):
        return value.value
    return value


def _by_field_name(declared: Any, raw: Any, current: Any, fmt: ConfigFormat) -> Any:
    """
    Reescreve `raw` com as chaves de campo esperadas pelo validador.

    Mapas destinados a dataclasses têm suas chaves de documento (tags,
    minúsculas) trocadas pelos nomes dos campos e são mesclados sobre o
    valor atual, de modo que chaves ausentes preservam o que já existe.
    """
    cls = _struct_type(declared)
    if cls is not None:
        if not isinstance(raw, dict):
            return raw
        return _merged_struct(cls, raw, current if isinstance(current, cls) else None, fmt)

    origin = typing.get_origin(declared)
    args = typing.get_args(declared)
    if origin in (list, tuple) and args and isinstance(raw, list):
        if origin is tuple and args[-1] is not Ellipsis:
            return [_by_field_name(t, item, None, fmt) for t, item in zip(args, raw)] + raw[len(args):]
        return [_by_field_name(args[0], item, None, fmt) for item in raw]
    if origin is dict and len(args) == 2 and isinstance(raw, dict):
        return {k: _by_field_name(args[1], v, None, fmt) for k, v in raw.items()}
    return raw


def _merged_struct(cls: type, document: Dict[str, Any], current: Any, fmt: ConfigFormat) -> Dict[str, Any]:
    declared_types = resolve_field_types(cls, current)
    merged: Dict[str, Any] = {}
    for f in visible_fields(cls):
        if not f.init:
            continue
        key = _lookup(document, key_for(f, fmt))
        existing = getattr(current, f.name) if current is not None else None
        if key is not None:
            merged[f.name] = _by_field_name(declared_types[f.name], document[key], existing, fmt)
        elif current is not None:
            merged[f.name] = _current_plain(existing)
    return merged


def _validate(declared: Any, raw: Any, path: str) -> Any:
    if isinstance(declared, UnresolvedAnnotation):
        raise ConfigDecodeError(f"Campo '{path}': tipo declarado não resolvível: {declared.text!r}")

    try:
        payload = json.dumps(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigDecodeError(f"Campo '{path}': valor sem representação JSON: {exc}") from exc

    # modo JSON: em strict, dataclasses aceitam mapas apenas nesse modo
    try:
        return TypeAdapter(declared).validate_json(payload, strict=True)
    except ValidationError as exc:
        raise ConfigDecodeError(f"Campo '{path}': {exc}") from exc
    except (PydanticUserError, PydanticUndefinedAnnotation) as exc:
        raise ConfigDecodeError(f"Campo '{path}': tipo declarado não suportado ({declared!r}): {exc}") from exc


def apply_document(value: Any, document: Dict[str, Any], fmt: ConfigFormat) -> None:
    """
    Sobrescreve in-place os campos de `value` presentes em `document`.

    Cada campo presente é validado contra seu tipo declarado com
    `pydantic.TypeAdapter` em modo estrito: `null` só é aceito em campos
    `Optional`, `bool` nunca vale como número e `int` é aceito em `float`.
    Todas as validações são feitas antes da primeira atribuição, de modo
    que uma falha deixa `value` intacto.

    Raises:
        ConfigDecodeError: Se algum valor não corresponder ao tipo declarado.
    """
    cls = type(value)
    declared_types = resolve_field_types(cls, value)
    updates: Dict[str, Any] = {}

    for f in visible_fields(cls):
        key = _lookup(document, key_for(f, fmt))
        if key is None:
            continue
        declared = declared_types[f.name]
        raw = _by_field_name(declared, document[key], getattr(value, f.name), fmt)
        updates[f.name] = _validate(declared, raw, f.name)

    for name, converted in updates.items():
        setattr(value, name, converted)


__all__ = [
    "ConfigFormat",
    "JSON_INDENT",
    "YAML_INDENT",
    "YAML_SUFFIXES",
    "apply_document",
    "decode_document",
    "encode",
    "format_for_path",
    "key_for",
    "to_plain",
]
