"""内置常见物种目录，首次启动时写入物种表。"""
import logging
from typing import List

from scalekeeper.animals.models import Species, SpeciesCategory

logger = logging.getLogger(__name__)

# (通用名, 学名, 大类, 默认喂食间隔天数)
SPECIES_CATALOGUE = [
    ("Ball Python", "Python regius", SpeciesCategory.SNAKE, 10),
    ("Carpet Python", "Morelia spilota", SpeciesCategory.SNAKE, 14),
    ("Green Tree Python", "Morelia viridis", SpeciesCategory.SNAKE, 14),
    ("Reticulated Python", "Malayopython reticulatus", SpeciesCategory.SNAKE, 21),
    ("Boa Constrictor", "Boa constrictor", SpeciesCategory.SNAKE, 14),
    ("Brazilian Rainbow Boa", "Epicrates cenchria", SpeciesCategory.SNAKE, 10),
    ("Kenyan Sand Boa", "Gongylophis colubrinus", SpeciesCategory.SNAKE, 10),
    ("Corn Snake", "Pantherophis guttatus", SpeciesCategory.SNAKE, 7),
    ("California Kingsnake", "Lampropeltis californiae", SpeciesCategory.SNAKE, 7),
    ("Milk Snake", "Lampropeltis triangulum", SpeciesCategory.SNAKE, 7),
    ("Hognose Snake", "Heterodon nasicus", SpeciesCategory.SNAKE, 7),
    ("Garter Snake", "Thamnophis sirtalis", SpeciesCategory.SNAKE, 5),
    ("Leopard Gecko", "Eublepharis macularius", SpeciesCategory.GECKO, 3),
    ("Crested Gecko", "Correlophus ciliatus", SpeciesCategory.GECKO, 2),
    ("Gargoyle Gecko", "Rhacodactylus auriculatus", SpeciesCategory.GECKO, 2),
    ("African Fat-Tailed Gecko", "Hemitheconyx caudicinctus", SpeciesCategory.GECKO, 3),
    ("Tokay Gecko", "Gekko gecko", SpeciesCategory.GECKO, 2),
    ("Bearded Dragon", "Pogona vitticeps", SpeciesCategory.LIZARD, 1),
    ("Blue Tongue Skink", "Tiliqua scincoides", SpeciesCategory.LIZARD, 2),
    ("Savannah Monitor", "Varanus exanthematicus", SpeciesCategory.LIZARD, 3),
    ("Argentine Black and White Tegu", "Salvator merianae", SpeciesCategory.LIZARD, 2),
    ("Veiled Chameleon", "Chamaeleo calyptratus", SpeciesCategory.LIZARD, 2),
    ("Russian Tortoise", "Testudo horsfieldii", SpeciesCategory.TORTOISE, 1),
    ("Sulcata Tortoise", "Centrochelys sulcata", SpeciesCategory.TORTOISE, 1),
    ("Red-Footed Tortoise", "Chelonoidis carbonarius", SpeciesCategory.TORTOISE, 1),
    ("Pacman Frog", "Ceratophrys ornata", SpeciesCategory.FROG, 5),
    ("Whites Tree Frog", "Litoria caerulea", SpeciesCategory.FROG, 2),
    ("African Bullfrog", "Pyxicephalus adspersus", SpeciesCategory.FROG, 5),
]


def default_species() -> List[Species]:
    """内置物种（每次调用生成新对象）。"""
    return [
        Species(
            common_name=common,
            scientific_name=scientific,
            category=category,
            default_feeding_interval_days=interval,
        )
        for common, scientific, category, interval in SPECIES_CATALOGUE
    ]


def search_species(species: List[Species], query: str) -> List[Species]:
    """按通用名或学名模糊匹配（不区分大小写）。"""
    q = query.strip().lower()
    if not q:
        return list(species)
    return [
        s for s in species
        if q in s.common_name.lower() or q in s.scientific_name.lower()
    ]
