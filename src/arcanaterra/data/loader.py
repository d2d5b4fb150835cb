from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, TypeVar, Union

import yaml
from jsonschema import Draft7Validator

from ..combat.constants import DEFAULTS, CombatConstants
from ..combat.skills import SkillDefinition, SkillSet
from ..combat.traits import registry as trait_registry
from ..errors import ArcanaTerraError, DataValidationError
from .definitions import (
    CharacterClassDefinition,
    CharacterDefinition,
    DungeonDefinition,
    EnemyPartyDefinition,
    index_by_name,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

BUNDLED_CLASSES = "classes.yaml"
BUNDLED_SKILLS = "skills.yaml"


@dataclass(frozen=True)
class SchemaInfo:
    name: str
    uri: str
    schema: Dict[str, Any]


class SchemaRegistry:
    """Registry for the bundled JSON Schemas in ``arcanaterra.data.schemas``.

    A schema's name is its filename without the ``.schema.json`` suffix; its
    URI is the schema's ``$id``.
    """

    _PKG = "arcanaterra.data.schemas"

    def __init__(self) -> None:
        self._schemas_by_name: Dict[str, SchemaInfo] = {}
        self._schemas_by_uri: Dict[str, SchemaInfo] = {}
        self._load_all()

    def _load_all(self) -> None:
        for entry in resources.files(self._PKG).iterdir():
            if not entry.name.endswith(".schema.json"):
                continue
            name = entry.name[: -len(".schema.json")]
            with entry.open("rb") as fh:
                schema = json.load(fh)
            uri = schema.get("$id") or f"resource://{self._PKG}/{entry.name}"
            info = SchemaInfo(name=name, uri=uri, schema=schema)
            self._schemas_by_name[name] = info
            self._schemas_by_uri[uri] = info
            logger.debug("Registered schema '%s' (uri=%s)", name, uri)

    def get(self, name_or_uri: str) -> Optional[SchemaInfo]:
        return self._schemas_by_name.get(name_or_uri) or self._schemas_by_uri.get(name_or_uri)

    def names(self) -> list:
        return sorted(self._schemas_by_name.keys())

    def make_validator(self, name_or_uri: str) -> Draft7Validator:
        info = self.get(name_or_uri)
        if not info:
            raise KeyError(f"Schema not found: {name_or_uri}")
        return Draft7Validator(info.schema)


class DefinitionLoader:
    """Load YAML or JSON definition files, validate them and build records.

    Raw documents are cached per resolved path. A document naming its schema
    via a top-level ``$schema`` key is validated automatically; the typed
    ``load_*`` helpers always validate against the right schema and then
    check cross references (class names, skill names).

    Usage:
        loader = DefinitionLoader()
        skills = loader.load_skills()            # bundled catalog
        classes = loader.load_classes(skills=skills)
        crypt = loader.load_dungeon("data/crypt.yaml", classes=classes, skills=skills)
    """

    def __init__(
        self,
        schema_registry: Optional[SchemaRegistry] = None,
        constants: CombatConstants = DEFAULTS,
    ) -> None:
        self.schemas = schema_registry or SchemaRegistry()
        self.constants = constants
        self._cache: Dict[Path, Any] = {}

    def clear_cache(self) -> None:
        self._cache.clear()

    # --------------- Raw documents ---------------

    def load(self, path: Union[os.PathLike, str], *, validate: bool = True, schema: Optional[str] = None) -> Any:
        """Load a definition file and optionally validate it.

        Args:
            path: A ``.yaml``, ``.yml`` or ``.json`` file.
            validate: Whether to validate against a schema.
            schema: Explicit schema name or URI; defaults to the document's ``$schema``.
        Raises:
            DataValidationError: unparseable content or schema violations.
            FileNotFoundError: if the file does not exist.
        """
        abs_path = Path(path).resolve()
        if abs_path not in self._cache:
            if not abs_path.exists():
                raise FileNotFoundError(abs_path)
            logger.debug("Loading definitions: %s", abs_path)
            self._cache[abs_path] = _parse_text(abs_path.read_text(encoding="utf-8"), abs_path.suffix, str(abs_path))
        data = self._cache[abs_path]
        if validate:
            self._validate_document(data, schema, str(abs_path))
        return data

    def load_resource(self, name: str, *, schema: Optional[str] = None) -> Any:
        """Load and validate a file bundled in ``arcanaterra.resources``."""
        text = resources.files("arcanaterra.resources").joinpath(name).read_text(encoding="utf-8")
        data = _parse_text(text, Path(name).suffix, f"<bundled {name}>")
        self._validate_document(data, schema, f"<bundled {name}>")
        return data

    def validate_data(self, data: Any, schema_name_or_uri: str) -> None:
        try:
            validator = self.schemas.make_validator(schema_name_or_uri)
        except KeyError as e:
            raise DataValidationError(f"Unknown schema: {schema_name_or_uri}") from e

        errors = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path])
        if errors:
            message = f"Validation failed for schema '{schema_name_or_uri}'"
            raise DataValidationError(message, errors)

    def _validate_document(self, data: Any, schema: Optional[str], source: str) -> None:
        schema_name = schema or (isinstance(data, dict) and data.get("$schema"))
        if schema_name:
            self.validate_data(data, schema_name)
        else:
            logger.debug("No schema specified for %s; skipping validation", source)

    def _document(self, path: Optional[Union[os.PathLike, str]], resource: Optional[str], schema: str) -> Any:
        if path is None:
            if resource is None:
                raise ValueError(f"A path is required to load '{schema}' definitions")
            return self.load_resource(resource, schema=schema)
        return self.load(path, schema=schema)

    # --------------- Typed records ---------------

    def load_skills(self, path: Optional[Union[os.PathLike, str]] = None) -> Dict[str, SkillDefinition]:
        """Skill catalog keyed by name; the bundled one when ``path`` is None."""
        doc = self._document(path, BUNDLED_SKILLS, "skill")
        skills = _build(
            "skill", doc["skills"], lambda raw: SkillDefinition.from_dict(raw, self.constants)
        )
        logger.info("Loaded %d skills", len(skills))
        return skills

    def load_classes(
        self,
        path: Optional[Union[os.PathLike, str]] = None,
        *,
        skills: Optional[Mapping[str, SkillDefinition]] = None,
    ) -> Dict[str, CharacterClassDefinition]:
        """Character classes keyed by name; the bundled base classes when ``path`` is None.

        When ``skills`` is given, every skill a class lists must exist in it.
        """
        doc = self._document(path, BUNDLED_CLASSES, "character_class")
        classes = _build("character_class", doc["classes"], CharacterClassDefinition.from_dict)
        if skills is not None:
            for cls in classes.values():
                _check_skill_refs(cls.name, cls.skills, skills)
        logger.info("Loaded %d classes: %s", len(classes), ", ".join(classes))
        return classes

    def load_characters(
        self,
        path: Union[os.PathLike, str],
        *,
        classes: Mapping[str, CharacterClassDefinition],
        skills: Optional[Mapping[str, SkillDefinition]] = None,
    ) -> Dict[str, CharacterDefinition]:
        doc = self._document(path, None, "character")
        characters = _build("character", doc["characters"], CharacterDefinition.from_dict)
        for ch in characters.values():
            _check_character(ch, classes, skills)
        return characters

    def load_enemy_party(
        self,
        path: Union[os.PathLike, str],
        *,
        classes: Mapping[str, CharacterClassDefinition],
        skills: Optional[Mapping[str, SkillDefinition]] = None,
    ) -> EnemyPartyDefinition:
        doc = self._document(path, None, "enemy_party")
        return self._enemy_party(doc, classes, skills)

    def load_dungeon(
        self,
        path: Union[os.PathLike, str],
        *,
        classes: Mapping[str, CharacterClassDefinition],
        skills: Optional[Mapping[str, SkillDefinition]] = None,
    ) -> DungeonDefinition:
        """Load a dungeon; each encounter is validated as an enemy party."""
        doc = self._document(path, None, "dungeon")
        for i, enc in enumerate(doc["encounters"]):
            try:
                self.validate_data(enc, "enemy_party")
            except DataValidationError as e:
                raise DataValidationError(f"Dungeon '{doc['name']}' encounter #{i}: {e}", e.errors) from e
        encounters = [self._enemy_party(enc, classes, skills) for enc in doc["encounters"]]
        try:
            dungeon = DungeonDefinition(name=doc["name"], encounters=tuple(encounters))
            index_by_name(dungeon.encounters)
        except ArcanaTerraError as e:
            raise DataValidationError(f"Invalid dungeon '{doc['name']}': {e}") from e
        logger.info("Loaded dungeon %s with %d encounters", dungeon.name, len(dungeon.encounters))
        return dungeon

    def _enemy_party(
        self,
        raw: Mapping[str, Any],
        classes: Mapping[str, CharacterClassDefinition],
        skills: Optional[Mapping[str, SkillDefinition]],
    ) -> EnemyPartyDefinition:
        try:
            party = EnemyPartyDefinition.from_dict(raw)
        except (ArcanaTerraError, KeyError, TypeError, ValueError) as e:
            raise DataValidationError(f"Invalid encounter {raw.get('name')!r}: {e}") from e
        for enemy in party.enemies:
            _check_character(enemy.character, classes, skills)
        return party

    # --------------- Helpers ---------------

    def build_skill_set(self, names: Iterable[str], skills: Mapping[str, SkillDefinition]) -> SkillSet:
        """Resolve skill names against a catalog into a fresh SkillSet."""
        missing = [n for n in names if n not in skills]
        if missing:
            raise DataValidationError(f"Unknown skills: {', '.join(missing)}")
        return SkillSet((skills[n] for n in names), constants=self.constants)


def _parse_text(text: str, suffix: str, source: str) -> Any:
    suffix = suffix.lower()
    try:
        if suffix == ".json":
            return json.loads(text)
        if suffix in (".yaml", ".yml"):
            return yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise DataValidationError(f"Could not parse {source}: {e}") from e
    raise DataValidationError(f"Unsupported definition file type '{suffix}' for {source}")


def _build(kind: str, raw_items: Iterable[Mapping[str, Any]], parse: Callable[[Mapping[str, Any]], T]) -> Dict[str, T]:
    records = []
    for raw in raw_items:
        try:
            records.append(parse(raw))
        except (ArcanaTerraError, KeyError, TypeError, ValueError) as e:
            raise DataValidationError(f"Invalid {kind} {raw.get('name')!r}: {e}") from e
    try:
        return index_by_name(records)
    except ArcanaTerraError as e:
        raise DataValidationError(f"Invalid {kind} list: {e}") from e


def _check_skill_refs(owner: str, names: Iterable[str], skills: Mapping[str, SkillDefinition]) -> None:
    missing = [n for n in names if n not in skills]
    if missing:
        raise DataValidationError(f"'{owner}' references unknown skills: {', '.join(missing)}")


def _check_character(
    ch: CharacterDefinition,
    classes: Mapping[str, CharacterClassDefinition],
    skills: Optional[Mapping[str, SkillDefinition]],
) -> None:
    if ch.class_name not in classes:
        raise DataValidationError(f"'{ch.name}' references unknown class '{ch.class_name}'")
    for trait in ch.traits:
        if trait not in trait_registry:
            raise DataValidationError(f"'{ch.name}' references unknown trait '{trait}'")
    if skills is not None:
        _check_skill_refs(ch.name, ch.skills, skills)


__all__ = [
    "SchemaInfo",
    "SchemaRegistry",
    "DefinitionLoader",
]
