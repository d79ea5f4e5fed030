# tests/conftest.py
"""
Fixtures compartilhados para testes do quickconf.

Este módulo define as formas (dataclasses) usadas em vários módulos de
teste e fixtures que fornecem instâncias determinísticas delas.

Decisões arquiteturais:
    - Formas são declaradas no nível do módulo para que seus tipos
      declarados sejam resolvíveis por `typing.get_type_hints`
    - Fixtures de classe seguem o padrão factory (retornam o tipo)
    - Todo I/O dos testes acontece em `tmp_path`

Invariantes:
    - Nenhuma fixture escreve fora de `tmp_path`
    - Valores retornados são novos a cada teste
"""

from dataclasses import dataclass, field
from typing import List, Optional

import pytest


@dataclass
class UserConfig:
    Version: str = ""
    User: str = ""
    Password: str = ""
    Directories: List[str] = field(default_factory=list)


@dataclass
class AddressConfig:
    City: str = ""
    Zip: str = ""


@dataclass
class EndpointConfig:
    Host: str = ""
    Port: int = 0


@dataclass
class ServiceConfig:
    Version: str = ""
    Name: str = ""
    Address: AddressConfig = field(default_factory=AddressConfig)
    Endpoints: List[EndpointConfig] = field(default_factory=list)
    Timeout: float = 0.0
    Debug: bool = False
    Owner: Optional[str] = None


@pytest.fixture
def UserConfigType():
    """Fixture factory que fornece a forma `UserConfig`."""
    return UserConfig


@pytest.fixture
def guest_config() -> UserConfig:
    """
    Instância canônica usada nos exemplos de formato.

    Returns:
        UserConfig: Version "1", usuário guest, três diretórios.
    """
    return UserConfig("1", "guest", "nopassword", ["Work", "Documents", "Music"])


@pytest.fixture
def service_config() -> ServiceConfig:
    """Instância aninhada (struct + lista de structs) para testes recursivos."""
    return ServiceConfig(
        Version="2",
        Name="api",
        Address=AddressConfig(City="Recife", Zip="50000"),
        Endpoints=[EndpointConfig("a.local", 80), EndpointConfig("b.local", 443)],
        Timeout=2.5,
        Debug=True,
    )


@pytest.fixture
def plain_json() -> str:
    """JSON esperado para `guest_config`: TAB por nível, sem newline final."""
    return (
        "{\n"
        '\t"Version": "1",\n'
        '\t"User": "guest",\n'
        '\t"Password": "nopassword",\n'
        '\t"Directories": [\n'
        '\t\t"Work",\n'
        '\t\t"Documents",\n'
        '\t\t"Music"\n'
        "\t]\n"
        "}"
    )


@pytest.fixture
def plain_yaml() -> str:
    """YAML esperado para `guest_config`: chaves minúsculas, listas com 4 espaços."""
    return """\
version: "1"
user: guest
password: nopassword
directories:
    - Work
    - Documents
    - Music
"""
