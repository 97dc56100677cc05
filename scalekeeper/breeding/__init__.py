"""繁殖配对与窝卵。"""
from scalekeeper.breeding.models import (
    Clutch,
    ClutchStatus,
    IncubationMethod,
    LockObservation,
    Pairing,
    PairingStatus,
)

__all__ = [
    "Clutch",
    "ClutchStatus",
    "IncubationMethod",
    "LockObservation",
    "Pairing",
    "PairingStatus",
]
