from .definitions import (
    MAX_ENEMY_SLOTS,
    CharacterClassDefinition,
    CharacterDefinition,
    DungeonDefinition,
    EnemyDefinition,
    EnemyPartyDefinition,
)
from .loader import DefinitionLoader, SchemaRegistry

__all__ = [
    "MAX_ENEMY_SLOTS",
    "CharacterClassDefinition",
    "CharacterDefinition",
    "DungeonDefinition",
    "EnemyDefinition",
    "EnemyPartyDefinition",
    "DefinitionLoader",
    "SchemaRegistry",
]
