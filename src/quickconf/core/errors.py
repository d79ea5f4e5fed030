# src/quickconf/core/errors.py
"""
Exceções canônicas do quickconf.

Este módulo define a hierarquia oficial de exceções utilizadas durante a
validação de structured values, a leitura/decodificação de arquivos de
configuração e a persistência em disco.

Princípios fundamentais:
    - Exceções são tipadas e semânticas
    - Nenhuma falha é silenciada ou reexecutada automaticamente
    - A exceção original é sempre encadeada (`raise ... from exc`)

Invariantes:
    - Todas as exceções do pacote herdam de `ConfigError`
    - Validação, codificação, decodificação e I/O possuem ramos distintos

Limites explícitos:
    - Não realiza fallback ou recovery
    - Não registra logs
"""


class ConfigError(Exception):
    """
    Exceção base para todos os erros do quickconf.

    Permite captura genérica de falhas de validação, decodificação
    e persistência com um único `except ConfigError`.
    """


# ---------------------------------------------------------------------------
# Validação
# ---------------------------------------------------------------------------

class ConfigValidationError(ConfigError):
    """
    O structured value recebido não é aceitável.

    Levantada imediatamente na construção da Store, em `check_data`
    e nas operações de diff. Nunca é reexecutada.
    """


class NotStructuredError(ConfigValidationError, TypeError):
    """
    O valor não é uma instância de dataclass (ex.: None, classe, dict).

    Também é um `TypeError`, pois representa um handle de tipo incorreto.
    """


class MissingVersionError(ConfigValidationError):
    """Nenhum campo visível chamado literalmente `Version` foi encontrado."""


class InvalidVersionTypeError(ConfigValidationError):
    """
    O campo `Version` existe, mas seu tipo declarado não é textual.

    Exemplo:
        - `Version: int` é rejeitado mesmo que o valor seja conversível
    """


# ---------------------------------------------------------------------------
# Decodificação
# ---------------------------------------------------------------------------

class ConfigDecodeError(ConfigError):
    """
    O conteúdo do arquivo não pôde ser interpretado no formato esperado.

    Inclui conteúdo malformado, raiz que não é mapa e valores cujo tipo
    não corresponde ao tipo declarado do campo de destino. O structured
    value de destino nunca é alterado quando esta exceção é levantada.
    """


class ConfigFileNotFoundError(ConfigDecodeError):
    """O arquivo de configuração não existe."""


class EmptyConfigFileError(ConfigDecodeError):
    """
    O arquivo de configuração existe, mas está vazio.

    Arquivo vazio é rejeitado explicitamente; nunca é tratado como no-op.
    """


class DuplicateKeyError(ConfigDecodeError):
    """O documento declara a mesma chave mais de uma vez no mesmo mapa."""


# ---------------------------------------------------------------------------
# Codificação
# ---------------------------------------------------------------------------

class ConfigEncodeError(ConfigError):
    """
    O structured value não pôde ser serializado no formato pedido.

    Exemplos:
        - campo com tipo sem representação JSON (ex.: `datetime.date`)
        - dois campos que produzem a mesma chave no documento

    Nenhum arquivo é escrito quando esta exceção é levantada.
    """


# ---------------------------------------------------------------------------
# I/O
# ---------------------------------------------------------------------------

class ConfigIOError(ConfigError):
    """
    Falha de sistema de arquivos durante save/load.

    Exemplos:
        - o caminho de destino é um diretório
        - permissão negada na escrita ou leitura

    Em `save`, o arquivo de destino nunca fica truncado ou corrompido.
    """
