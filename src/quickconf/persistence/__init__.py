# src/quickconf/persistence/__init__.py
"""
Persistência do quickconf: codec JSON/YAML, Config Store e leitura de versão.
"""

from .store import ConfigStore, load_config, save_config
from .version import get_version

__all__ = ["ConfigStore", "get_version", "load_config", "save_config"]
