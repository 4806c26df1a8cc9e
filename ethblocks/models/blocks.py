"""Block metadata models understood by the visual-programming host."""

from enum import Enum


class BlockType(str, Enum):
    """Kinds of block the host can render."""

    COMMAND = "command"
    REPORTER = "reporter"
    BOOLEAN = "Boolean"
    HAT = "hat"


class ArgumentType(str, Enum):
    """Shapes of block inputs."""

    STRING = "string"
    NUMBER = "number"
