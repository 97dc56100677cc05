"""应用组装：一个记录存储、一个提醒服务，注入到各业务服务。"""
import logging
from pathlib import Path
from typing import List, Optional

from scalekeeper import __version__
from scalekeeper.animals.service import AnimalService
from scalekeeper.biometrics.service import BiometricsService
from scalekeeper.breeding.service import BreedingService
from scalekeeper.config import LOG_FORMAT, LOG_LEVEL
from scalekeeper.dates import Clock
from scalekeeper.dates import now as utc_now
from scalekeeper.enclosures.service import CleaningService
from scalekeeper.feeding.service import FeedingService
from scalekeeper.health.service import HealthService
from scalekeeper.medication.service import MedicationService
from scalekeeper.reminders.service import ReminderService
from scalekeeper.store.data_service import DataService
from scalekeeper.store.record_store import RecordStore
from scalekeeper.subscriptions.client import StoreClient
from scalekeeper.subscriptions.service import SubscriptionService

logger = logging.getLogger(__name__)


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(level=(level or LOG_LEVEL).upper(), format=LOG_FORMAT)


class ScaleKeeperApp:
    """data_dir 为空时使用配置里的默认数据目录。"""

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        clock: Optional[Clock] = None,
        store_client: Optional[StoreClient] = None,
    ):
        self.clock = clock or utc_now
        self.store = RecordStore(base_dir=data_dir / "records" if data_dir else None)
        self.data = DataService(self.store)
        self.reminders = ReminderService(data_dir=data_dir / "reminders" if data_dir else None)

        self.subscriptions = SubscriptionService(self.data, store_client)
        self.animals = AnimalService(
            self.data, self.reminders, self.clock,
            can_add_animal=self.subscriptions.can_add_animal,
        )
        self.feeding = FeedingService(self.data, self.reminders, self.clock)
        self.biometrics = BiometricsService(self.data, self.clock)
        self.health = HealthService(self.data, self.clock)
        self.cleaning = CleaningService(self.data, self.reminders, self.clock)
        self.medication = MedicationService(self.data, self.reminders, self.clock)
        self.breeding = BreedingService(self.data, self.clock)

    def refresh_all(self) -> None:
        """依次刷新喂食、清洁、用药看板。"""
        self.feeding.refresh()
        self.cleaning.refresh()
        self.medication.refresh()

    def summary_lines(self) -> List[str]:
        """今日待办摘要（命令行输出用）。"""
        feeding = self.feeding.board
        cleaning = self.cleaning.board
        medication = self.medication.board
        lines = [
            f"Overdue feedings: {', '.join(a.name for a in feeding.overdue) or '-'}",
            f"Due today: {', '.join(a.name for a in feeding.due_today) or '-'}",
            f"Fed today: {len(feeding.fed_today)}",
            f"Cleaning overdue: {len(cleaning.overdue)}, due soon: {len(cleaning.due_soon)}",
            f"Active treatments: {len(medication.active_treatments)}, "
            f"doses today: {len(medication.doses_today)}, overdue doses: {len(medication.overdue_doses)}",
        ]
        brumations = self.health.active_brumations()
        if brumations:
            lines.append(f"Brumation cycles in progress: {len(brumations)}")
        due = self.reminders.due_reminders(self.clock())
        if due:
            lines.append(f"Due reminders: {', '.join(r.title for r in due)}")
        return lines


def main() -> None:
    configure_logging()
    app = ScaleKeeperApp()
    app.animals.seed_species()
    app.refresh_all()
    logger.info("ScaleKeeper %s", __version__)
    for line in app.summary_lines():
        print(line)


if __name__ == "__main__":
    main()
