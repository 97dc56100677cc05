"""药品、疗程与剂量。"""
from scalekeeper.medication.models import (
    ActiveTreatmentSummary,
    DoseStatus,
    Medication,
    MedicationBoard,
    MedicationDose,
    MedicationProtocol,
    MedicationType,
    TreatmentPlan,
    TreatmentStatus,
)

__all__ = [
    "ActiveTreatmentSummary",
    "DoseStatus",
    "Medication",
    "MedicationBoard",
    "MedicationDose",
    "MedicationProtocol",
    "MedicationType",
    "TreatmentPlan",
    "TreatmentStatus",
]
