# chantier/services/document_service.py
import io
import json
import os
import tempfile
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import qrcode
from qrcode.constants import ERROR_CORRECT_M
from pydantic import BaseModel, ConfigDict, Field
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas

from chantier.db.enums import DocumentType, Language
from chantier.errors import DocumentGenerationError
from chantier.logger import get_logger
from chantier.schemas.base import utcnow
from chantier.schemas.entities import Reception, Reserve
from chantier.services.lookup_service import LookupService
from chantier.store.repository import Repositories

logger = get_logger(__name__)

# PDF 标签；Helvetica 不含阿拉伯字形，ar 回退到 fr
PDF_LABELS = {
    Language.fr: {
        "title": "PROCÈS-VERBAL",
        "pv_number": "N° PV",
        "date": "Date",
        "project": "Projet",
        "description": "Description",
        "details": "Détails",
        "generated_on": "Généré le",
    },
    Language.en: {
        "title": "MINUTES",
        "pv_number": "PV Number",
        "date": "Date",
        "project": "Project",
        "description": "Description",
        "details": "Details",
        "generated_on": "Generated on",
    },
    Language.es: {
        "title": "ACTA",
        "pv_number": "N° Acta",
        "date": "Fecha",
        "project": "Proyecto",
        "description": "Descripción",
        "details": "Detalles",
        "generated_on": "Generado el",
    },
}

MARGIN = 20 * mm
BORDER_INSET = 10 * mm
QR_SIZE = 30 * mm
BODY_FONT_SIZES = (11, 10, 9, 8, 7, 6)
DATE_FORMAT = "%d/%m/%Y"
DATETIME_FORMAT = "%d/%m/%Y %H:%M:%S"


class DocumentDetail(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    value: str


class PVDocument(BaseModel):
    """Content of a one-page PV PDF."""

    model_config = ConfigDict(frozen=True)

    pv_number: str
    date: str
    title: str
    project_name: str
    description: str = ""
    details: List[DocumentDetail] = Field(default_factory=list)
    qr_png: Optional[bytes] = None


def labels_for(language: Any) -> Dict[str, str]:
    try:
        language = Language(language)
    except ValueError:
        language = Language.fr
    return PDF_LABELS.get(language, PDF_LABELS[Language.fr])


def qr_text(payload: Dict[str, Any]) -> str:
    """Text carried by the QR symbol: the payload as compact UTF-8 JSON."""
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


class DocumentService:
    """
    QR codes (qrcode) and single-page PV PDFs (reportlab).

    Failures are logged and raised as DocumentGenerationError; no file is
    written unless the whole document was produced.
    """

    def __init__(
        self,
        repos: Repositories,
        clock: Callable[[], datetime] = utcnow,
        language: str = Language.fr.value,
    ):
        self.repos = repos
        self.clock = clock
        self.language = language
        self.lookup = LookupService(repos)

    # =========
    # QR
    # =========
    def qr_payload(
        self,
        *,
        pv_number: str,
        date: str,
        entity_id: str,
        doc_type: DocumentType = DocumentType.pv,
        title: str = "",
    ) -> Dict[str, Any]:
        """The JSON object encoded in the QR symbol; ``timestamp`` is epoch milliseconds."""
        return {
            "pvNumber": pv_number,
            "date": date,
            "id": entity_id,
            "type": DocumentType(doc_type).value,
            "title": title,
            "timestamp": int(self.clock().timestamp() * 1000),
        }

    def qr_code(self, payload: Dict[str, Any], box_size: int = 10) -> qrcode.QRCode:
        qr = qrcode.QRCode(
            error_correction=ERROR_CORRECT_M,
            box_size=box_size,
            border=2,
        )
        qr.add_data(qr_text(payload))
        return qr

    def qr_png(self, payload: Dict[str, Any], box_size: int = 10) -> bytes:
        try:
            qr = self.qr_code(payload, box_size)
            qr.make(fit=True)
            img = qr.make_image(fill_color="black", back_color="white")
            output = io.BytesIO()
            img.save(output)
            return output.getvalue()
        except Exception as e:
            logger.exception(f"QR generation failed for {payload.get('pvNumber')}")
            raise DocumentGenerationError(f"QR code generation failed: {e}") from e

    # =========
    # PDF
    # =========
    def pv_pdf(self, doc: PVDocument, language: Optional[str] = None) -> bytes:
        try:
            return self._render_pdf(doc, labels_for(language or self.language))
        except Exception as e:
            logger.exception(f"PDF generation failed for {doc.pv_number}")
            raise DocumentGenerationError(f"PDF generation failed: {e}") from e

    def save_pv_pdf(self, doc: PVDocument, path: str, language: Optional[str] = None) -> str:
        """Render first, then move a complete temporary file into place."""
        content = self.pv_pdf(doc, language)
        directory = os.path.dirname(os.path.abspath(path))
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".pdf.tmp")
            with os.fdopen(fd, "wb") as f:
                f.write(content)
            os.replace(tmp_path, path)
        except OSError as e:
            logger.exception(f"Writing PDF to {path} failed")
            raise DocumentGenerationError(f"Could not write PDF file: {e}") from e
        logger.info(f"PV PDF written: {path}")
        return path

    def _render_pdf(self, doc: PVDocument, t: Dict[str, str]) -> bytes:
        buf = io.BytesIO()
        p = canvas.Canvas(buf, pagesize=A4)
        W, H = A4
        y = H - MARGIN

        # 标题
        p.setFont("Helvetica-Bold", 20)
        p.drawCentredString(W / 2, y, t["title"])
        y -= 20 * mm

        # PV 编号 / 日期
        p.setFont("Helvetica", 12)
        p.drawString(MARGIN, y, f"{t['pv_number']}: {doc.pv_number}")
        p.drawString(120 * mm, y, f"{t['date']}: {doc.date}")
        y -= 15 * mm

        p.setFont("Helvetica-Bold", 12)
        p.drawString(MARGIN, y, f"{t['project']}:")
        p.setFont("Helvetica", 12)
        p.drawString(60 * mm, y, doc.project_name)
        y -= 15 * mm

        p.setFont("Helvetica-Bold", 12)
        p.drawString(MARGIN, y, doc.title)
        y -= 15 * mm

        # 详情放在描述之前计算高度，描述字号随可用空间缩小
        details_height = (10 * mm + len(doc.details) * 6 * mm + 4 * mm) if doc.details else 0
        bottom = MARGIN + QR_SIZE + 10 * mm if doc.qr_png else MARGIN + 10 * mm

        if doc.description:
            p.setFont("Helvetica-Bold", 12)
            p.drawString(MARGIN, y, f"{t['description']}:")
            y -= 8 * mm
            available = y - bottom - details_height
            size, lines = self._fit_text(doc.description, W - 2 * MARGIN, available)
            p.setFont("Helvetica", size)
            for line in lines:
                p.drawString(MARGIN, y, line)
                y -= size * 1.25
            y -= 6 * mm

        if doc.details:
            p.setFont("Helvetica-Bold", 12)
            p.drawString(MARGIN, y, f"{t['details']}:")
            y -= 8 * mm
            p.setFont("Helvetica", 10)
            for detail in doc.details:
                p.drawString(25 * mm, y, f"• {detail.label}: {detail.value}")
                y -= 6 * mm

        # QR 右下角
        if doc.qr_png:
            p.drawImage(
                ImageReader(io.BytesIO(doc.qr_png)),
                W - QR_SIZE - 30 * mm,
                MARGIN + 5 * mm,
                QR_SIZE,
                QR_SIZE,
            )

        # 页脚
        p.setFont("Helvetica-Oblique", 10)
        p.drawCentredString(W / 2, MARGIN - 5 * mm, f"{t['generated_on']} {self.clock().strftime(DATETIME_FORMAT)}")

        # 页面边框
        p.setStrokeColorRGB(0, 0, 0)
        p.setLineWidth(0.5)
        p.rect(BORDER_INSET, BORDER_INSET, W - 2 * BORDER_INSET, H - 2 * BORDER_INSET)

        p.showPage()
        p.save()
        return buf.getvalue()

    @staticmethod
    def _fit_text(text: str, width: float, height: float):
        """Largest body font size whose wrapped lines fit ``height``; truncated at the smallest size."""
        lines: List[str] = []
        size = BODY_FONT_SIZES[-1]
        for size in BODY_FONT_SIZES:
            lines = []
            for paragraph in text.split("\n"):
                lines.extend(simpleSplit(paragraph, "Helvetica", size, width) or [""])
            if len(lines) * size * 1.25 <= height:
                return size, lines
        max_lines = max(int(height // (size * 1.25)), 1)
        if len(lines) > max_lines:
            lines = lines[: max_lines - 1] + ["…"]
        return size, lines

    # =========
    # 由实体构建文档
    # =========
    def reception_document(self, reception: Reception, with_qr: bool = True) -> PVDocument:
        day = reception.date.strftime(DATE_FORMAT)
        details = [DocumentDetail(label="Réserves", value=str(reception.reserve_count))]
        if reception.urgent_count:
            details.append(DocumentDetail(label="Réserves urgentes", value=str(reception.urgent_count)))
        details.append(DocumentDetail(
            label="Délai",
            value="Dans les délais" if reception.is_on_time else f"Retard de {reception.delay_days} jours",
        ))
        if reception.responsible_parties:
            details.append(DocumentDetail(label="Parties", value=", ".join(reception.responsible_parties)))
        qr = None
        if with_qr:
            qr = self.qr_png(self.reception_qr_payload(reception))
        return PVDocument(
            pv_number=reception.pv_number,
            date=day,
            title="Procès-verbal de réception",
            project_name=self.lookup.project_name(reception.project_id),
            description=reception.pv_content,
            details=details,
            qr_png=qr,
        )

    def reception_qr_payload(self, reception: Reception) -> Dict[str, Any]:
        return self.qr_payload(
            pv_number=reception.pv_number,
            date=reception.date.strftime(DATE_FORMAT),
            entity_id=reception.id,
            doc_type=DocumentType.pv,
            title=f"Réception {self.lookup.project_name(reception.project_id)}",
        )

    def reserve_document(self, reserve: Reserve, pv_number: str, with_qr: bool = True) -> PVDocument:
        details = [
            DocumentDetail(label=label, value=value)
            for label, value in (
                ("Bloc", self.lookup.block_name(reserve.block_id)),
                ("Appartement", self.lookup.apartment_number(reserve.apartment_id)),
                ("Catégorie", self.lookup.category_name(reserve.category_id)),
                ("Sous-traitant", self.lookup.contractor_name(reserve.contractor_id)),
                ("Priorité", reserve.priority.value),
                ("Statut", reserve.status.value),
            )
            if value
        ]
        if reserve.resolution_notes:
            details.append(DocumentDetail(label="Notes de résolution", value=reserve.resolution_notes))
        qr = None
        if with_qr:
            qr = self.qr_png(self.reserve_qr_payload(reserve, pv_number))
        return PVDocument(
            pv_number=pv_number,
            date=reserve.created_at.strftime(DATE_FORMAT),
            title=reserve.title,
            project_name=self.lookup.project_name(reserve.project_id),
            description=reserve.description,
            details=details,
            qr_png=qr,
        )

    def reserve_qr_payload(self, reserve: Reserve, pv_number: str) -> Dict[str, Any]:
        return self.qr_payload(
            pv_number=pv_number,
            date=reserve.created_at.strftime(DATE_FORMAT),
            entity_id=reserve.id,
            doc_type=DocumentType.reserve,
            title=reserve.title,
        )
