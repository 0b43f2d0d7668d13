"""Report data aggregation and PDF rendering."""
import logging
from datetime import datetime
from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.platypus import Image, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from sqlalchemy.orm import Session

from models import Condition, JournalEntry, Medication, SymptomEntry

logger = logging.getLogger(__name__)

BRAND = colors.HexColor("#00A7A0")
MUTED = colors.HexColor("#6b7280")


def _avg(values: list[float]) -> float | None:
    return sum(values) / len(values) if values else None


def _numbers(rows: list[dict], key: str) -> list[float]:
    out = []
    for r in rows:
        v = r.get(key)
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            out.append(float(v))
    return out


def summarize_vitals(vitals: list[dict]) -> dict:
    """Latest and average per vital; ``vitals`` are ordered newest first.

    Blood pressure is a "sys/dia" string, so only the latest reading is kept.
    """
    bp = [v["bp"] for v in vitals if v.get("bp")]
    hr = _numbers(vitals, "hr")
    temp = _numbers(vitals, "tempC")
    spo2 = _numbers(vitals, "spo2")

    return {
        "blood_pressure": {"latest": bp[0] if bp else None, "average": None},
        "heart_rate": {"latest": hr[0] if hr else None,
                       "average": round(_avg(hr)) if hr else None},
        "temperature": {"latest": temp[0] if temp else None,
                        "average": round(_avg(temp), 1) if temp else None},
        "spo2": {"latest": spo2[0] if spo2 else None,
                 "average": round(_avg(spo2)) if spo2 else None},
    }


def aggregate_report_data(db: Session, user, start: datetime, end: datetime) -> dict:
    def in_range(category):
        return (
            db.query(SymptomEntry)
            .filter(SymptomEntry.user_id == user.id,
                    SymptomEntry.category == category,
                    SymptomEntry.created_at >= start,
                    SymptomEntry.created_at <= end)
            .order_by(SymptomEntry.created_at.desc())
            .all()
        )

    conditions = (
        db.query(Condition)
        .filter(Condition.user_id == user.id, Condition.status == "ACTIVE")
        .order_by(Condition.created_at.desc())
        .all()
    )
    symptoms = in_range("SYMPTOM")
    vitals = [e.vitals_json or {} for e in in_range("VITAL")]
    activities = in_range("ACTIVITY")
    medications = (
        db.query(Medication)
        .filter(Medication.user_id == user.id, Medication.stopped_at.is_(None))
        .order_by(Medication.started_at.desc().nullslast())
        .all()
    )
    notes = (
        db.query(JournalEntry)
        .filter(JournalEntry.user_id == user.id,
                JournalEntry.created_at >= start,
                JournalEntry.created_at <= end)
        .order_by(JournalEntry.created_at.desc())
        .limit(3)
        .all()
    )

    return {
        "user": {"display_name": user.display_name or "Unknown", "email": user.email},
        "date_range": {"start": start, "end": end},
        "conditions": [{"name": c.name, "body_region": c.body_region, "onset_date": c.onset_date}
                       for c in conditions],
        "symptoms": [{"title": s.title, "body_region": s.body_region, "severity": s.severity,
                      "date": s.created_at} for s in symptoms],
        "vitals": summarize_vitals(vitals),
        "activities": [{"type": (a.activity_json or {}).get("type") or "Activity",
                        "date": a.created_at,
                        "distance_km": (a.activity_json or {}).get("distanceKm"),
                        "duration_min": (a.activity_json or {}).get("durationMin")}
                       for a in activities],
        "medications": [{"name": m.name, "dosage": m.dosage, "frequency": m.frequency}
                        for m in medications],
        "journal_notes": [{"date": n.created_at, "text": n.raw_text} for n in notes],
    }


# ════════════════════════════════════
#             PDF
# ════════════════════════════════════

def _fmt_date(d: datetime | None) -> str:
    return d.strftime("%b %d, %Y") if d else ""


def _region(r: str) -> str:
    return r.replace("_", " ")


def _styles():
    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle(name="Brand", parent=styles["Title"], textColor=BRAND, alignment=0))
    styles.add(ParagraphStyle(name="Section", parent=styles["Heading2"], textColor=BRAND, spaceBefore=12))
    styles.add(ParagraphStyle(name="Meta", parent=styles["BodyText"], fontSize=9, textColor=MUTED))
    styles.add(ParagraphStyle(name="Note", parent=styles["BodyText"], backColor=colors.HexColor("#fef3c7"),
                              borderPadding=6, spaceAfter=8))
    return styles


def _vital_lines(vitals: dict) -> list[str]:
    lines = []
    bp = vitals["blood_pressure"]["latest"]
    if bp:
        lines.append(f"<b>Blood Pressure:</b> {escape(str(bp))}")
    for key, label, unit in (("heart_rate", "Heart Rate", " bpm"), ("temperature", "Temperature", " °C"),
                             ("spo2", "SpO2", "%")):
        v = vitals[key]
        if v["latest"] is None:
            continue
        line = f"<b>{label}:</b> {v['latest']:g}{unit}"
        if v["average"] is not None:
            line += f" (avg: {v['average']:g})"
        lines.append(line)
    return lines


def _heatmap_image(png: bytes, max_width: float) -> Image | None:
    """Decode the uploaded heatmap up front; undecodable data is left out of the report."""
    try:
        reader = ImageReader(BytesIO(png))
        width, height = reader.getSize()
        reader.getRGBData()
    except (OSError, ValueError) as e:
        logger.warning("Heatmap image could not be decoded, report rendered without it: %s", e)
        return None
    scale = min(1.0, max_width / width, (120 * mm) / height)
    return Image(BytesIO(png), width=width * scale, height=height * scale)


def render_pdf(data: dict, heatmap_png: bytes | None = None) -> bytes:
    buf = BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=A4, leftMargin=15 * mm, rightMargin=15 * mm,
                            topMargin=15 * mm, bottomMargin=15 * mm,
                            title="Health Report", author="Health Heatmap Tracker")
    styles = _styles()
    story = []

    # Header
    story.append(Paragraph("Health Heatmap Tracker", styles["Brand"]))
    story.append(Paragraph(f"<b>{escape(data['user']['display_name'])}</b>", styles["BodyText"]))
    story.append(Paragraph(
        f"{_fmt_date(data['date_range']['start'])} - {_fmt_date(data['date_range']['end'])}", styles["Meta"]))
    rule = Table([[""]], colWidths=[doc.width], rowHeights=[1.5])
    rule.setStyle(TableStyle([("BACKGROUND", (0, 0), (-1, -1), BRAND)]))
    story.append(Spacer(1, 6))
    story.append(rule)

    if heatmap_png:
        img = _heatmap_image(heatmap_png, doc.width)
        if img is not None:
            story.append(Paragraph("Body Symptom Map", styles["Section"]))
            story.append(img)

    # Summary: conditions | vitals side by side
    story.append(Paragraph("Summary", styles["Section"]))
    cond_cell = [Paragraph("<b>Active Conditions</b>", styles["BodyText"])]
    if data["conditions"]:
        for c in data["conditions"]:
            cond_cell.append(Paragraph(escape(c["name"]), styles["BodyText"]))
            cond_cell.append(Paragraph(_region(c["body_region"]), styles["Meta"]))
    else:
        cond_cell.append(Paragraph("No active conditions", styles["Meta"]))

    vital_cell = [Paragraph("<b>Vitals Summary</b>", styles["BodyText"])]
    lines = _vital_lines(data["vitals"])
    vital_cell += [Paragraph(line, styles["BodyText"]) for line in lines] or \
        [Paragraph("No vitals recorded", styles["Meta"])]

    summary = Table([[cond_cell, vital_cell]], colWidths=[doc.width / 2] * 2)
    summary.setStyle(TableStyle([
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("BACKGROUND", (0, 0), (-1, -1), colors.HexColor("#f9fafb")),
        ("BOX", (0, 0), (0, 0), 0.5, colors.HexColor("#e5e7eb")),
        ("BOX", (1, 0), (1, 0), 0.5, colors.HexColor("#e5e7eb")),
    ]))
    story.append(summary)

    if data["symptoms"]:
        story.append(Paragraph(f"Recent Symptoms ({len(data['symptoms'])})", styles["Section"]))
        for s in data["symptoms"][:10]:
            sev = f" <font color='#f59e0b'>({s['severity']}/10)</font>" if s["severity"] else ""
            story.append(Paragraph(f"<b>{escape(s['title'])}</b>{sev}", styles["BodyText"]))
            story.append(Paragraph(f"{_region(s['body_region'])} • {_fmt_date(s['date'])}", styles["Meta"]))

    if data["activities"]:
        story.append(Paragraph("Activities", styles["Section"]))
        for a in data["activities"]:
            parts = []
            if a["distance_km"]:
                parts.append(f"{a['distance_km']}km")
            if a["duration_min"]:
                parts.append(f"{a['duration_min']}min")
            parts.append(_fmt_date(a["date"]))
            story.append(Paragraph(f"<b>{escape(str(a['type']))}</b>", styles["BodyText"]))
            story.append(Paragraph(" • ".join(parts), styles["Meta"]))

    if data["medications"]:
        story.append(Paragraph("Current Medications", styles["Section"]))
        for m in data["medications"]:
            meta = " • ".join(x for x in (m["dosage"], m["frequency"]) if x)
            story.append(Paragraph(f"<b>{escape(m['name'])}</b>", styles["BodyText"]))
            if meta:
                story.append(Paragraph(escape(meta), styles["Meta"]))

    if data["journal_notes"]:
        story.append(Paragraph("Recent Journal Notes", styles["Section"]))
        for n in data["journal_notes"]:
            story.append(Paragraph(
                f"<b>{_fmt_date(n['date'])}</b><br/>{escape(n['text'])}", styles["Note"]))

    doc.build(story)
    return buf.getvalue()
