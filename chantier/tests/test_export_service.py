# chantier/tests/test_export_service.py
import io
import json

import pandas as pd
import pytest

from chantier.errors import BackupFormatError
from chantier.schemas.entities import AppSettings, Reserve
from chantier.services.export_service import RESERVE_COLUMNS, TASK_COLUMNS, ExportService


def read_csv(text):
    return pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False)


def test_reserves_csv_quotes_every_field(seeded, clock):
    seeded.reserves.create(Reserve(
        id="r4", project_id="p2", category_id="c3", contractor_id="k2",
        title='Joint "silicone", hall', description="ligne 1\nligne 2", created_at="2024-01-09T08:00:00Z",
    ))
    text = ExportService(seeded, clock=clock).reserves_csv()

    assert not text.startswith("\ufeff")
    assert text.splitlines()[0] == ",".join(f'"{c}"' for c in RESERVE_COLUMNS)
    assert '"Joint ""silicone"", hall"' in text

    df = read_csv(text)
    assert list(df.columns) == RESERVE_COLUMNS
    assert len(df) == 4
    row = df.iloc[3]
    assert row["Title"] == 'Joint "silicone", hall'
    assert row["Description"] == "ligne 1\nligne 2"
    assert row["Project"] == "Tour Beta"
    assert row["Apartment"] == ""
    assert row["Creation date"] == "09/01/2024"


def test_reserves_csv_filters(seeded, clock):
    export = ExportService(seeded, clock=clock)
    df = read_csv(export.reserves_csv(project_id="p1", contractor_id="k1"))
    assert list(df["Title"]) == ["Fuite salle de bain", "Prise défectueuse"]
    assert list(df["Priority"]) == ["urgent", "normal"]

    empty = read_csv(export.reserves_csv(category_id="nothing"))
    assert list(empty.columns) == RESERVE_COLUMNS
    assert len(empty) == 0


def test_tasks_csv_and_excel(seeded, clock):
    export = ExportService(seeded, clock=clock)
    tasks = seeded.tasks.list()

    df = read_csv(export.tasks_csv(tasks))
    assert list(df.columns) == TASK_COLUMNS
    assert df.iloc[0]["Progress"] == "0%"
    assert df.iloc[0]["Start date"] == "2024-01-01"

    content = export.tasks_excel(tasks)
    sheet = pd.read_excel(io.BytesIO(content), sheet_name="Planning", dtype=str)
    assert list(sheet["Title"]) == ["Plomberie Bloc A", "Câblage", "Peinture hall"]


def test_backup_round_trip(seeded, clock):
    export = ExportService(seeded, clock=clock)
    seeded.settings.update(compact_mode=True)
    document = json.loads(export.export_backup_json())

    assert document["exportDate"] == "2024-01-10T12:00:00+00:00"
    assert len(document["reserves"]) == 3
    assert document["settings"]["compactMode"] is True

    seeded.projects.clear()
    seeded.reserves.clear()
    written = export.import_backup(json.dumps(document))
    assert written["projects"] == 2
    assert written["settings"] == 1
    assert [r.id for r in seeded.reserves.list()] == ["r1", "r2", "r3"]


def test_partial_backup_leaves_other_keys(seeded, clock):
    export = ExportService(seeded, clock=clock)
    written = export.import_backup(b'{"categories": [], "settings": {"theme": "dark"}, "unknown": [1]}')
    assert written == {"categories": 0, "settings": 1}
    assert seeded.categories.list() == []
    assert len(seeded.projects.list()) == 2
    assert seeded.settings.get().theme.value == "dark"


@pytest.mark.parametrize("document", [
    "{not json",
    "[1, 2]",
    b"\xff\xfe",
    '{"projects": {"id": "p1"}}',
    '{"settings": []}',
])
def test_unusable_backup_changes_nothing(seeded, clock, document):
    export = ExportService(seeded, clock=clock)
    with pytest.raises(BackupFormatError):
        export.import_backup(document)
    assert len(seeded.projects.list()) == 2
    assert seeded.settings.get() == AppSettings()
