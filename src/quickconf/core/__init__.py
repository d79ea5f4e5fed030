# src/quickconf/core/__init__.py
"""
Core do quickconf.

Reúne o motor genérico de reflexão de campos: enumeração, validação do
marcador de versão e diff. O core não realiza I/O e não depende do codec.

Componentes principais:
    - types      → FieldKind, FieldDescriptor, FieldFilter
    - errors     → hierarquia canônica de exceções
    - introspect → enumeração de campos de dataclasses
    - validation → regra do campo `Version`
    - diff       → diff raso e recursivo
"""
