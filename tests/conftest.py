"""
Pytest configuration and fixtures for aetheria-lore tests.
"""

import sys
from pathlib import Path
import pytest

# Add src directory to Python path to allow importing aetheria_lore
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from aetheria_lore.cache import DocumentCache
from aetheria_lore.config import LoreConfig
from aetheria_lore.storage import LoreStorage
from aetheria_lore.templates import ContentRenderer


REGIONS_YAML = """\
regions:
  kingdoms:
    name: Kingdoms
    description: The great realms of the north.
    regions:
      north_reach:
        name: North Reach
        description: Frozen marches along the border.
        leader: Jarl Valora
        races:
          Elf: 10
          Human: 60
          Dwarf: 30
        regions:
          port_town:
            name: Port Town
            description: A busy harbor.
  free_cities:
    name: Free Cities
    description: Independent city states.
"""

CREATURES_YAML = """\
creatures:
  dragons:
    name: Dragons
    description: Ancient winged beasts.
    type: [Beast, Elemental]
    challenge_rating: 15
    subtypes:
      fire_drake:
        name: Fire Drake
        description: A drake wreathed in flame.
        abilities: [Fire Breath, Flight]
  elementals:
    name: Elementals
    description: Spirits of the elements.
    subtypes:
      fire:
        name: Fire
        description: A living flame.
  spirits:
    name: Spirits
    subtypes:
      fire_spirit:
        name: Fire
        description: A spirit of flame.
"""

CHARACTERS_YAML = """\
characters:
  valora:
    name: Valora Iceclaw
    race: Human
    class: Warden
    location: North Reach
    alignment:
      ideology:
        value: Order
        modifier: Stewardship
      temperament:
        value: Aether
    description: Warden of the northern marches.
  wanderer:
    name: The Wanderer
    location: Lost Isles
    description: A traveler from nowhere.
"""

MAGIC_SCHOOLS_YAML = """\
pyromancy:
  name: Pyromancy
  description: The art of fire.
  focus: [Flame, Heat]
  children:
    ember_weaving:
      name: Ember Weaving
      description: Subtle fire control.
"""

MAGIC_MD = """\
---
title: Magic of Aetheria
category: magic
---
# Magic

Magic flows from the Aether.

## Schools

| School | Element |
|---|---|
| Pyromancy | Fire |
| Hydromancy | Water |

Fire magic is volatile.
"""

POLITICS_MD = """\
---
title: Politics
---
# Politics

The Kingdoms are ruled by jarls.
"""

CREATURES_TEMPLATE = """\
# {{ name }}

*{{ type_display }}*

{{ description }}
"""

STAT_BLOCK_TEMPLATE = """\
# {{ name }} Stat Block

{{ description }}
{% if challenge_rating %}Challenge: {{ challenge_rating }}{% endif %}
"""


@pytest.fixture
def lore_dir(tmp_path: Path) -> Path:
    """Create a content tree with data files, documents and templates."""
    data = tmp_path / "data"
    docs = tmp_path / "docs"
    templates = tmp_path / "templates"
    for directory in (data, docs, templates):
        directory.mkdir()

    (data / "regions.yaml").write_text(REGIONS_YAML)
    (data / "creatures.yaml").write_text(CREATURES_YAML)
    (data / "characters.yaml").write_text(CHARACTERS_YAML)
    (data / "magic_schools.yaml").write_text(MAGIC_SCHOOLS_YAML)

    (docs / "magic.md").write_text(MAGIC_MD)
    (docs / "politics.md").write_text(POLITICS_MD)

    (templates / "creatures.md").write_text(CREATURES_TEMPLATE)
    (templates / "creature_stat_block.md").write_text(STAT_BLOCK_TEMPLATE)

    return tmp_path


@pytest.fixture
def lore_config(lore_dir: Path) -> LoreConfig:
    """Configuration pointing at the test content tree."""
    return LoreConfig(
        data_dir=lore_dir / "data",
        docs_dir=lore_dir / "docs",
        templates_dir=lore_dir / "templates",
        output_dir=lore_dir / "dist",
    )


@pytest.fixture
def storage(lore_config: LoreConfig) -> LoreStorage:
    """Storage over the test content tree with caching enabled."""
    return LoreStorage(lore_config, cache=DocumentCache(default_ttl=60))


@pytest.fixture
def renderer(lore_config: LoreConfig) -> ContentRenderer:
    """Template renderer using the test templates."""
    return ContentRenderer(lore_config.templates_dir)
