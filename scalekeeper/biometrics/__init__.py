"""体重、体长与生长分析。"""
from scalekeeper.biometrics.models import (
    BodyCondition,
    BodyConditionScore,
    GrowthData,
    GrowthRate,
    GrowthTrend,
    LengthChange,
    LengthRecord,
    MeasurementMethod,
    WeightChange,
    WeightRecord,
    WeightTrend,
)

__all__ = [
    "BodyCondition",
    "BodyConditionScore",
    "GrowthData",
    "GrowthRate",
    "GrowthTrend",
    "LengthChange",
    "LengthRecord",
    "MeasurementMethod",
    "WeightChange",
    "WeightRecord",
    "WeightTrend",
]
