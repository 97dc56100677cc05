"""全局配置、数据路径与业务常量。"""
import os
from pathlib import Path

from dotenv import load_dotenv

# 项目根目录（scalekeeper 包所在目录的上一级）
ROOT_DIR = Path(__file__).resolve().parent.parent
load_dotenv(ROOT_DIR / ".env")

# 数据目录：记录、提醒等；可用环境变量 SCALEKEEPER_DATA_DIR 覆盖
DATA_DIR = Path(os.getenv("SCALEKEEPER_DATA_DIR", str(ROOT_DIR / "data")))
RECORDS_DIR = DATA_DIR / "records"
REMINDERS_DIR = DATA_DIR / "reminders"

# 日志
LOG_LEVEL = os.getenv("SCALEKEEPER_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# 喂食（天）；物种与个体均未设置时的兜底间隔
DEFAULT_FEEDING_INTERVAL_DAYS = 7

# 饥饿时长分级（天）
HUNGER_NORMAL_MAX_DAYS = 14
HUNGER_EXTENDED_MAX_DAYS = 30
HUNGER_CONCERNING_MAX_DAYS = 60
FEEDING_INSIGHT_DAYS = 90

# 生长趋势：月增长率阈值（%），固定值
GROWTH_TREND_THRESHOLD = 2.0
DAYS_PER_MONTH = 30

# 体况：体重/体长比（g/cm）
BODY_CONDITION_UNDERWEIGHT = 1.5
BODY_CONDITION_OVERWEIGHT = 5.0

# 清洁提醒提前天数
DEFAULT_REMINDER_ADVANCE_DAYS = 1

# 免费版最多饲养数量
FREE_ANIMAL_LIMIT = 5


def ensure_dirs() -> None:
    """确保数据目录存在。"""
    for d in (DATA_DIR, RECORDS_DIR, REMINDERS_DIR):
        d.mkdir(parents=True, exist_ok=True)
