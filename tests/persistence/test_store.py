# tests/persistence/test_store.py
"""
Testes da Config Store (save / load / backup / diff).

Os testes asseguram que:
- a construção valida o value e falha cedo
- save/load fazem round-trip exato em JSON e YAML
- saves repetidos produzem bytes idênticos e nenhum backup
- sobrescrever conteúdo diferente gera `<path>.old` com os bytes anteriores
- load de arquivo vazio, ausente ou malformado falha sem alterar o value
- save sobre diretório falha com ConfigIOError
- falhas de cópia ou substituição preservam o destino e removem o temporário
- o modo do arquivo existente é preservado; arquivo novo segue o umask
- load em dataclass frozen falha antes de qualquer alteração

Decisões arquiteturais:
    - Todo arquivo vive em `tmp_path`
    - Igualdade é sempre estrutural (dataclass eq)
"""

import dataclasses
import json
import os
import shutil
import stat
from dataclasses import dataclass, field

import pytest

from quickconf.core.errors import (
    ConfigDecodeError,
    ConfigEncodeError,
    ConfigFileNotFoundError,
    ConfigIOError,
    ConfigValidationError,
    EmptyConfigFileError,
    InvalidVersionTypeError,
)
from quickconf.core.types import FieldFilter
from quickconf.persistence.store import ConfigStore, backup_path_for, load_config, save_config


def test_store_rejects_invalid_values():
    @dataclass
    class IntVersion:
        Version: int = 1

    with pytest.raises(InvalidVersionTypeError):
        ConfigStore(IntVersion())
    with pytest.raises(ConfigValidationError):
        ConfigStore(None)


def test_store_keeps_reference(guest_config):
    store = ConfigStore(guest_config)

    assert store.data is guest_config
    assert store.version == "1"


@pytest.mark.parametrize("name", ["test.json", "test.yaml", "test.yml", "test.conf"])
def test_save_load_round_trip(tmp_path, guest_config, UserConfigType, name):
    path = tmp_path / name
    ConfigStore(guest_config).save(path)

    loaded = UserConfigType()
    ConfigStore(loaded).load(path)

    assert loaded == guest_config
    assert loaded is not guest_config


def test_save_load_round_trip_nested(tmp_path, service_config):
    for name in ("service.json", "service.yaml"):
        path = tmp_path / name
        ConfigStore(service_config).save(path)

        loaded = dataclasses.replace(service_config, Name="", Endpoints=[], Debug=False, Timeout=0.0)
        load_config(path, loaded)

        assert loaded == service_config


def test_save_json_layout(tmp_path, guest_config, plain_json):
    path = tmp_path / "test.json"
    ConfigStore(guest_config).save(path)

    assert path.read_bytes() == plain_json.encode("utf-8")


def test_save_yaml_layout(tmp_path, guest_config, plain_yaml):
    path = tmp_path / "test.yaml"
    ConfigStore(guest_config).save(path)

    assert path.read_bytes() == plain_yaml.encode("utf-8")


def test_repeated_save_is_byte_identical_without_backup(tmp_path, guest_config):
    path = tmp_path / "test.json"
    store = ConfigStore(guest_config)

    store.save(path)
    first = path.read_bytes()
    store.save(path)

    assert path.read_bytes() == first
    assert not backup_path_for(path).exists()


def test_save_backs_up_previous_content(tmp_path, guest_config, UserConfigType):
    path = tmp_path / "test.json"
    ConfigStore(guest_config).save(path)
    previous = path.read_bytes()

    mismatch = UserConfigType("1.1", "guest", "nopassword", ["Work", "Documents", "Music"])
    ConfigStore(mismatch).save(path)

    backup = tmp_path / "test.json.old"
    assert backup.read_bytes() == previous
    assert json.loads(path.read_text(encoding="utf-8"))["Version"] == "1.1"

    restored = UserConfigType()
    ConfigStore(restored).load(backup)
    assert restored == guest_config


def test_save_leaves_no_temporary_files(tmp_path, guest_config):
    path = tmp_path / "test.json"
    ConfigStore(guest_config).save(path)

    assert sorted(p.name for p in tmp_path.iterdir()) == ["test.json"]


def test_save_fails_on_directory(tmp_path, guest_config):
    target = tmp_path / "test-1.json"
    target.mkdir()

    with pytest.raises(ConfigIOError):
        ConfigStore(guest_config).save(target)
    assert target.is_dir()
    assert sorted(p.name for p in tmp_path.iterdir()) == ["test-1.json"]


def test_save_fails_on_missing_parent(tmp_path, guest_config):
    with pytest.raises(ConfigIOError):
        ConfigStore(guest_config).save(tmp_path / "missing" / "test.json")


def test_load_missing_file(tmp_path, UserConfigType):
    value = UserConfigType()

    with pytest.raises(ConfigFileNotFoundError):
        load_config(tmp_path / "test.json", value)
    with pytest.raises(ConfigDecodeError):
        ConfigStore(value).load(tmp_path / "test-non-exist.json")


@pytest.mark.parametrize("name", ["test.json", "test.yaml"])
def test_load_empty_file_fails_and_keeps_value(tmp_path, guest_config, name):
    path = tmp_path / name
    path.touch()
    before = dataclasses.replace(guest_config, Directories=list(guest_config.Directories))

    with pytest.raises(EmptyConfigFileError):
        ConfigStore(guest_config).load(path)
    assert guest_config == before


def test_load_malformed_file_keeps_value(tmp_path, guest_config):
    path = tmp_path / "test.json"
    path.write_text('{ "Version": "2", "Directories": ', encoding="utf-8")
    before = dataclasses.replace(guest_config, Directories=list(guest_config.Directories))

    with pytest.raises(ConfigDecodeError):
        ConfigStore(guest_config).load(path)
    assert guest_config == before


def test_load_config_never_loads_when_construction_fails(tmp_path):
    @dataclass
    class NoVersion:
        User: str = ""

    path = tmp_path / "test.json"
    path.write_text('{"User": "root"}', encoding="utf-8")
    value = NoVersion()

    with pytest.raises(ConfigValidationError):
        load_config(path, value)
    assert value.User == ""


def test_str_is_json_regardless_of_last_format(tmp_path, guest_config, plain_json, UserConfigType):
    path = tmp_path / "test.yaml"
    store = save_config(guest_config, path)

    assert str(store) == plain_json

    reparsed = UserConfigType(**json.loads(str(store)))
    assert reparsed == guest_config


def test_store_diff_and_deep_diff(guest_config, UserConfigType):
    store = ConfigStore(guest_config)
    other = ConfigStore(UserConfigType("1", "Guest", "nopassword", ["Work", "documents", "Music"]))

    assert [d.name for d in store.diff(other)] == ["User", "Directories"]
    assert [d.name for d in store.deep_diff(other)] == ["User", "Directories[1]"]


def test_store_diff_uses_own_filter(guest_config, UserConfigType):
    store = ConfigStore(guest_config, FieldFilter.excluding(["User"]))
    other = ConfigStore(UserConfigType("1", "Guest", "nopassword", ["Work", "documents", "Music"]))

    assert [d.name for d in store.deep_diff(other)] == ["Directories[1]"]


def test_store_diff_with_different_shape(guest_config):
    @dataclass
    class NewShape:
        Version: str = "1"
        Password: str = "nopassword"
        Directories: list = dataclasses.field(default_factory=lambda: ["Work", "documents", "Music"])

    fields = ConfigStore(guest_config).diff(ConfigStore(NewShape()))
    assert len(fields) == 1
    assert fields[0].name == "Directories"


@pytest.mark.parametrize(
    "module, name, remaining",
    [
        (os, "replace", ["test.json", "test.json.old"]),
        (shutil, "copyfile", ["test.json"]),
    ],
)
def test_save_failure_keeps_target_and_removes_temporary(
    tmp_path, guest_config, UserConfigType, monkeypatch, module, name, remaining
):
    path = tmp_path / "test.json"
    ConfigStore(guest_config).save(path)
    previous = path.read_bytes()

    def fail(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(module, name, fail)

    with pytest.raises(ConfigIOError):
        ConfigStore(UserConfigType("2", "root")).save(path)

    assert path.read_bytes() == previous
    assert sorted(p.name for p in tmp_path.iterdir()) == remaining


def test_save_encode_failure_writes_nothing(tmp_path):
    class Opaque:
        pass

    @dataclass
    class WithOpaque:
        Version: str = "1"
        Handle: object = field(default_factory=Opaque)

    with pytest.raises(ConfigEncodeError):
        ConfigStore(WithOpaque()).save(tmp_path / "test.json")
    assert list(tmp_path.iterdir()) == []


@pytest.mark.parametrize("mode", [0o644, 0o640, 0o600])
def test_save_preserves_existing_file_mode(tmp_path, guest_config, mode):
    path = tmp_path / "test.json"
    path.write_text("{}", encoding="utf-8")
    path.chmod(mode)

    ConfigStore(guest_config).save(path)

    assert stat.S_IMODE(path.stat().st_mode) == mode


def test_save_new_file_follows_umask(tmp_path, guest_config):
    path = tmp_path / "test.json"
    previous = os.umask(0o022)
    try:
        ConfigStore(guest_config).save(path)
    finally:
        os.umask(previous)

    assert stat.S_IMODE(path.stat().st_mode) == 0o644


def test_load_into_frozen_value_fails_before_any_change(tmp_path):
    @dataclass(frozen=True)
    class Frozen:
        Version: str = "1"
        Name: str = "a"

    path = tmp_path / "test.json"
    path.write_text('{"Version": "2", "Name": "b"}', encoding="utf-8")
    value = Frozen()

    with pytest.raises(dataclasses.FrozenInstanceError):
        load_config(path, value)
    assert value == Frozen()


def test_load_rebuilds_nested_frozen_values(tmp_path):
    @dataclass(frozen=True)
    class Point:
        X: int = 0
        Y: int = 0

    @dataclass
    class Canvas:
        Version: str = "1"
        Origin: Point = field(default_factory=Point)

    path = tmp_path / "test.yaml"
    path.write_text("origin:\n    y: 5\n", encoding="utf-8")
    value = Canvas(Origin=Point(1, 2))
    previous = value.Origin

    load_config(path, value)

    assert value.Origin == Point(1, 5)
    assert value.Origin is not previous
    assert previous == Point(1, 2)
