"""
Static catalog data for the Tesouro engine.

Cards, events, council decisions, disasters and biomes are read-only
input keyed by stable string identifiers. They ship as YAML under
tesouro/data/ and are validated into frozen pydantic models on load.

A missing identifier is a broken data contract, not a player mistake,
so lookups raise instead of degrading.

Usage:
    catalog = default_catalog()
    card = catalog.card("plant_tree")
    deck = catalog.starting_deck("praia")
"""

import logging
from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from .schema import BiomeDef, Card, CouncilDef, DisasterDef, EventDef

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent.parent / "data"

CATALOG_FILES = {
    "cards": "cards.yaml",
    "events": "events.yaml",
    "councils": "councils.yaml",
    "disasters": "disasters.yaml",
    "biomes": "biomes.yaml",
}


class CatalogError(Exception):
    """Catalog data is malformed or references something that does not exist."""
    pass


class UnknownCardError(CatalogError):
    """A card identifier was referenced but is not in the catalog."""
    def __init__(self, card_id: str, context: str = ""):
        self.card_id = card_id
        self.context = context
        where = f" (referenced by {context})" if context else ""
        super().__init__(f"Unknown card id: {card_id!r}{where}")


class Catalog(BaseModel):
    """Immutable collection of every definition the engine reads."""
    model_config = ConfigDict(frozen=True)

    cards: tuple[Card, ...]
    events: tuple[EventDef, ...]
    councils: tuple[CouncilDef, ...]
    disasters: tuple[DisasterDef, ...]     # Order is precedence: first match fires
    biomes: tuple[BiomeDef, ...]
    base_deck: tuple[str, ...] = ()        # Card ids every starting deck gets

    def card(self, card_id: str, context: str = "") -> Card:
        for card in self.cards:
            if card.id == card_id:
                return card
        raise UnknownCardError(card_id, context)

    def event(self, event_id: str) -> EventDef:
        for event in self.events:
            if event.id == event_id:
                return event
        raise CatalogError(f"Unknown event id: {event_id!r}")

    def council(self, council_id: str) -> CouncilDef:
        for council in self.councils:
            if council.id == council_id:
                return council
        raise CatalogError(f"Unknown council id: {council_id!r}")

    def biome(self, biome_id: str) -> BiomeDef:
        for biome in self.biomes:
            if biome.id == biome_id:
                return biome
        raise CatalogError(f"Unknown biome id: {biome_id!r}")

    def has_biome(self, biome_id: str) -> bool:
        return any(b.id == biome_id for b in self.biomes)

    @property
    def biome_ids(self) -> list[str]:
        return [b.id for b in self.biomes]

    def cards_by_ids(self, card_ids, context: str = "") -> list[Card]:
        """Resolve ids to cards, keeping order and duplicates."""
        return [self.card(card_id, context) for card_id in card_ids]

    def starting_deck(self, biome_id: str) -> list[Card]:
        """Unshuffled starting deck: base cards plus the biome's starters."""
        biome = self.biome(biome_id)
        return (
            self.cards_by_ids(self.base_deck, "base_deck")
            + self.cards_by_ids(biome.starter_cards, f"biome {biome_id}")
        )

    def validate_references(self) -> None:
        """
        Check cross-references between catalog files.

        Raises:
            CatalogError: duplicate ids, or a biome restriction naming a
                biome that does not exist
            UnknownCardError: a deck list names a missing card
        """
        for label, entries in (
            ("card", self.cards),
            ("event", self.events),
            ("council", self.councils),
            ("disaster", self.disasters),
            ("biome", self.biomes),
        ):
            seen: set[str] = set()
            for entry in entries:
                if entry.id in seen:
                    raise CatalogError(f"Duplicate {label} id: {entry.id!r}")
                seen.add(entry.id)

        self.cards_by_ids(self.base_deck, "base_deck")
        biome_ids = set(self.biome_ids)
        for biome in self.biomes:
            self.cards_by_ids(biome.starter_cards, f"biome {biome.id}")
        for card in self.cards:
            if card.biome_only and card.biome_only not in biome_ids:
                raise CatalogError(
                    f"Card {card.id!r} is restricted to unknown biome {card.biome_only!r}"
                )
        for event in self.events:
            if event.biome and event.biome not in biome_ids:
                raise CatalogError(
                    f"Event {event.id!r} is restricted to unknown biome {event.biome!r}"
                )


def _read_yaml(path: Path) -> dict:
    if not path.exists():
        raise CatalogError(f"Catalog file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise CatalogError(f"Malformed YAML in {path.name}: {e}") from e
    if not isinstance(data, dict):
        raise CatalogError(f"{path.name} must contain a mapping at the top level")
    return data


def load_catalog(data_dir: Path | str | None = None) -> Catalog:
    """
    Load and validate the catalog YAML files.

    Args:
        data_dir: Directory holding the catalog files (defaults to the
            bundled tesouro/data)

    Returns:
        Validated Catalog

    Raises:
        CatalogError: missing file, malformed YAML, schema violation or
            broken cross-reference
    """
    data_dir = Path(data_dir) if data_dir else DATA_DIR

    raw: dict = {}
    for key, filename in CATALOG_FILES.items():
        raw[key] = _read_yaml(data_dir / filename)

    try:
        catalog = Catalog(
            cards=raw["cards"].get("cards", []),
            base_deck=raw["cards"].get("base_deck", []),
            events=raw["events"].get("events", []),
            councils=raw["councils"].get("councils", []),
            disasters=raw["disasters"].get("disasters", []),
            biomes=raw["biomes"].get("biomes", []),
        )
    except ValidationError as e:
        raise CatalogError(f"Catalog data failed validation:\n{e}") from e

    catalog.validate_references()
    logger.debug(
        f"Loaded catalog from {data_dir}: {len(catalog.cards)} cards, "
        f"{len(catalog.events)} events, {len(catalog.councils)} councils, "
        f"{len(catalog.disasters)} disasters, {len(catalog.biomes)} biomes"
    )
    return catalog


@lru_cache(maxsize=1)
def default_catalog() -> Catalog:
    """The bundled catalog, loaded once."""
    return load_catalog()
