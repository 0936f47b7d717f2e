# chantier/tests/test_document_service.py
import json
import os

import pytest

from chantier.errors import DocumentGenerationError
from chantier.schemas.entities import Reception
from chantier.services.document_service import DocumentService, PVDocument, labels_for, qr_text
from chantier.tests.conftest import FIXED_NOW

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def test_qr_payload_keys(repos, clock):
    payload = DocumentService(repos, clock=clock).qr_payload(
        pv_number="PV-A-01-01-2024", date="01/01/2024", entity_id="rec1", title="Réception A",
    )
    assert set(payload) == {"pvNumber", "date", "id", "type", "title", "timestamp"}
    assert payload["type"] == "pv"
    assert payload["timestamp"] == int(FIXED_NOW.timestamp() * 1000)


def test_qr_png(repos, clock):
    documents = DocumentService(repos, clock=clock)
    content = documents.qr_png({"pvNumber": "PV-1", "title": "Réception"})
    assert content.startswith(PNG_SIGNATURE)


def test_qr_text_reproduces_payload(repos, clock):
    documents = DocumentService(repos, clock=clock)
    payload = documents.qr_payload(
        pv_number="PV-A-10-01-2024", date="10/01/2024", entity_id="rec1",
        title="Réception « Bloc É » – façade",
    )
    text = qr_text(payload)
    assert json.loads(text) == payload

    # 二维码中写入的字节就是这段 UTF-8 文本
    qr = documents.qr_code(payload)
    assert b"".join(chunk.data for chunk in qr.data_list) == text.encode("utf-8")


def test_reserve_pdf(seeded, clock):
    documents = DocumentService(seeded, clock=clock)
    reserve = seeded.reserves.get("r1")
    doc = documents.reserve_document(reserve, "PV-2024-01-001")

    assert doc.title == "Fuite salle de bain"
    assert doc.project_name == "Résidence Alpha"
    assert {d.label for d in doc.details} >= {"Bloc", "Catégorie", "Sous-traitant", "Priorité"}
    assert doc.qr_png.startswith(PNG_SIGNATURE)
    assert documents.pv_pdf(doc).startswith(b"%PDF")


def test_reception_pdf_with_long_text(seeded, clock):
    reception = Reception(
        id="rec1", project_id="p1", pv_number="PV-Résidence-Alpha-10-01-2024", date=FIXED_NOW,
        responsible_parties=["M. Alami"], has_reserves=True, reserve_count=2, urgent_count=1,
        is_on_time=False, delay_days=9, pv_content="Lorem ipsum dolor sit amet. " * 400,
    )
    documents = DocumentService(seeded, clock=clock, language="en")
    doc = documents.reception_document(reception)
    assert any(d.value == "Retard de 9 jours" for d in doc.details)
    assert documents.pv_pdf(doc).startswith(b"%PDF")


def test_save_pv_pdf_writes_file(repos, clock, tmp_path):
    documents = DocumentService(repos, clock=clock)
    doc = PVDocument(pv_number="PV-1", date="10/01/2024", title="Test", project_name="Projet")
    path = documents.save_pv_pdf(doc, str(tmp_path / "pv.pdf"))
    assert os.path.exists(path)
    with open(path, "rb") as f:
        assert f.read(4) == b"%PDF"


def test_broken_qr_image_raises_document_error(repos, clock, tmp_path):
    documents = DocumentService(repos, clock=clock)
    doc = PVDocument(pv_number="PV-1", date="10/01/2024", title="Test", project_name="Projet",
                     qr_png=b"not an image")
    with pytest.raises(DocumentGenerationError):
        documents.save_pv_pdf(doc, str(tmp_path / "pv.pdf"))
    # 失败时不留下文件
    assert os.listdir(tmp_path) == []


def test_labels_fall_back_to_french():
    assert labels_for("ar") == labels_for("fr")
    assert labels_for("xx") == labels_for("fr")
    assert labels_for("es")["pv_number"] == "N° Acta"
