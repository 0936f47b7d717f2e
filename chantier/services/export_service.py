# chantier/services/export_service.py
import csv
import io
import json
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import pandas as pd

from chantier.db.enums import ENTITY_COLLECTIONS, CollectionKey
from chantier.errors import BackupFormatError
from chantier.logger import get_logger
from chantier.schemas.base import utcnow
from chantier.schemas.entities import Reserve, Task
from chantier.services.lookup_service import LookupService
from chantier.store.repository import Repositories

logger = get_logger(__name__)

RESERVE_COLUMNS = ["Title", "Project", "Block", "Apartment", "Description", "Priority", "Creation date"]
TASK_COLUMNS = [
    "Title", "Description", "Project", "Assigned to", "Start date",
    "End date", "Status", "Priority", "Progress",
]

# 备份文件中可导入的顶层键
BACKUP_KEYS = tuple(k.value for k in ENTITY_COLLECTIONS) + (CollectionKey.settings.value,)

CSV_DATE_FORMAT = "%d/%m/%Y"


def to_csv(df: pd.DataFrame) -> str:
    """UTF-8 text (no BOM), comma separated, every field quoted with "" escaping."""
    return df.to_csv(index=False, quoting=csv.QUOTE_ALL, lineterminator="\n")


class ExportService:
    """CSV / Excel exports and the JSON backup bundle."""

    def __init__(
        self,
        repos: Repositories,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.repos = repos
        self.clock = clock
        self.lookup = LookupService(repos)

    # =========
    # CSV / Excel
    # =========
    def reserves_dataframe(
        self,
        *,
        project_id: Optional[str] = None,
        category_id: Optional[str] = None,
        contractor_id: Optional[str] = None,
    ) -> pd.DataFrame:
        """
        One row per reserve in collection order.
        :param project_id: / category_id / contractor_id: optional filters
        """
        reserves: List[Reserve] = self.repos.reserves.filter(
            lambda r: (not project_id or r.project_id == project_id)
            and (not category_id or r.category_id == category_id)
            and (not contractor_id or r.contractor_id == contractor_id)
        )
        rows = [
            [
                r.title,
                self.lookup.project_name(r.project_id),
                self.lookup.block_name(r.block_id) or "",
                self.lookup.apartment_number(r.apartment_id) or "",
                r.description,
                r.priority.value,
                r.created_at.strftime(CSV_DATE_FORMAT),
            ]
            for r in reserves
        ]
        return pd.DataFrame(rows, columns=RESERVE_COLUMNS)

    def tasks_dataframe(self, tasks: List[Task]) -> pd.DataFrame:
        rows = [
            [
                t.title,
                t.description,
                self.lookup.project_name(t.project_id),
                t.assigned_to,
                t.start_date.isoformat(),
                t.end_date.isoformat(),
                t.status.value,
                t.priority.value,
                f"{t.progress}%",
            ]
            for t in tasks
        ]
        return pd.DataFrame(rows, columns=TASK_COLUMNS)

    def reserves_csv(self, **filters) -> str:
        df = self.reserves_dataframe(**filters)
        logger.info(f"Reserves CSV export: {len(df)} row(s)")
        return to_csv(df)

    def tasks_csv(self, tasks: List[Task]) -> str:
        df = self.tasks_dataframe(tasks)
        logger.info(f"Planning CSV export: {len(df)} row(s)")
        return to_csv(df)

    def tasks_excel(self, tasks: List[Task]) -> bytes:
        df = self.tasks_dataframe(tasks)
        output = io.BytesIO()
        with pd.ExcelWriter(output, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="Planning")
        logger.info(f"Planning Excel export: {len(df)} row(s)")
        return output.getvalue()

    # =========
    # 备份 / 恢复
    # =========
    def export_backup(self) -> Dict[str, Any]:
        """The eight collections, the settings and an ``exportDate`` ISO timestamp."""
        store = self.repos.store
        bundle: Dict[str, Any] = {key.value: store.get(key, []) for key in ENTITY_COLLECTIONS}
        bundle[CollectionKey.settings.value] = self.repos.settings.get().to_record()
        bundle["exportDate"] = self.clock().isoformat()
        return bundle

    def export_backup_json(self) -> str:
        return json.dumps(self.export_backup(), ensure_ascii=False, indent=2)

    def import_backup(self, document: Any) -> Dict[str, int]:
        """
        Overwrite every known top-level key present in ``document``; absent keys are untouched.
        :param document: JSON text, bytes or an already parsed dict
        :return: number of records written per key
        Raises BackupFormatError before writing anything when the document is unusable.
        """
        data = self._parse_backup(document)
        present = [key for key in BACKUP_KEYS if key in data]
        for key in present:
            expected = dict if key == CollectionKey.settings.value else list
            if not isinstance(data[key], expected):
                raise BackupFormatError(f"'{key}' must be a JSON {'object' if expected is dict else 'array'}")

        written = {}
        store = self.repos.store
        for key in present:
            store.set(key, data[key])
            written[key] = len(data[key]) if isinstance(data[key], list) else 1
        logger.info(f"Backup imported: {written}")
        return written

    @staticmethod
    def _parse_backup(document: Any) -> Dict[str, Any]:
        if isinstance(document, (bytes, bytearray)):
            try:
                document = document.decode("utf-8")
            except UnicodeDecodeError as e:
                raise BackupFormatError(f"Backup file is not UTF-8: {e}") from e
        if isinstance(document, str):
            try:
                document = json.loads(document)
            except ValueError as e:
                raise BackupFormatError(f"Backup file is not valid JSON: {e}") from e
        if not isinstance(document, dict):
            raise BackupFormatError("Backup document must be a JSON object")
        return document
