"""爬宠个体与物种。"""
from scalekeeper.animals.models import Animal, AnimalSex, AnimalStatus, Species, SpeciesCategory

__all__ = [
    "Animal",
    "AnimalSex",
    "AnimalStatus",
    "Species",
    "SpeciesCategory",
]
