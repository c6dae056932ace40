"""
Opportunity report export.

Writes a scanned opportunity list for offline review:
- Word documents (.docx) with a summary and an opportunity table
- CSV and Excel spreadsheets, one row per opportunity

Row numbers in every format match the indices accepted by approval.
"""

import re
from pathlib import Path
from typing import Optional, Sequence, Union

import pandas as pd
from docx import Document
from docx.shared import Pt

from .models import LinkOpportunity, ScanStats


class ReportWriteError(Exception):
    """Raised when a report cannot be written."""
    pass


REPORT_COLUMNS = [
    "index",
    "source_title",
    "source_slug",
    "target_title",
    "target_slug",
    "relevance_score",
    "tier",
    "matched_keywords",
    "context_snippet",
]

# Invalid XML 1.0 control characters that Word refuses to open
_INVALID_XML_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")


def sanitize_for_xml(text: str) -> str:
    """Remove control characters that would corrupt a DOCX file."""
    if not text:
        return text
    return _INVALID_XML_CHARS_RE.sub("", text)


def opportunities_to_rows(opportunities: Sequence[LinkOpportunity]) -> list[dict]:
    """Flatten opportunities into report rows."""
    return [
        {
            "index": i,
            "source_title": opp.source_post.title,
            "source_slug": opp.source_post.slug,
            "target_title": opp.target_post.title,
            "target_slug": opp.target_post.slug,
            "relevance_score": round(opp.relevance_score, 2),
            "tier": opp.tier.label,
            "matched_keywords": ", ".join(opp.matched_keywords),
            "context_snippet": opp.context_snippet,
        }
        for i, opp in enumerate(opportunities)
    ]


def opportunities_to_dataframe(opportunities: Sequence[LinkOpportunity]) -> pd.DataFrame:
    return pd.DataFrame(opportunities_to_rows(opportunities), columns=REPORT_COLUMNS)


def _write_docx(
    opportunities: Sequence[LinkOpportunity],
    path: Path,
    stats: Optional[ScanStats],
) -> None:
    doc = Document()
    doc.add_heading("Internal Link Opportunities", level=1)

    if stats is not None:
        doc.add_paragraph(
            f"Posts analyzed: {stats.posts_analyzed} of {stats.total_posts}. "
            f"Opportunities found: {stats.opportunities_found}. "
            f"Average links per post: {stats.avg_links_per_post:.1f}."
        )
    else:
        doc.add_paragraph(f"Opportunities found: {len(opportunities)}.")

    if not opportunities:
        doc.save(str(path))
        return

    headers = ["#", "Source", "Link to", "Score", "Matched Keywords", "Context"]
    table = doc.add_table(rows=1, cols=len(headers))
    table.style = "Table Grid"
    for cell, header in zip(table.rows[0].cells, headers):
        cell.text = header
        for run in cell.paragraphs[0].runs:
            run.bold = True

    for row in opportunities_to_rows(opportunities):
        cells = table.add_row().cells
        cells[0].text = str(row["index"])
        cells[1].text = sanitize_for_xml(row["source_title"])
        cells[2].text = sanitize_for_xml(row["target_title"])
        cells[3].text = f"{row['tier']} ({round(row['relevance_score'] * 100)}%)"
        cells[4].text = sanitize_for_xml(row["matched_keywords"])
        cells[5].text = sanitize_for_xml(row["context_snippet"])
        for run in cells[5].paragraphs[0].runs:
            run.font.size = Pt(8)

    doc.save(str(path))


def write_opportunity_report(
    opportunities: Sequence[LinkOpportunity],
    output_path: Union[str, Path],
    stats: Optional[ScanStats] = None,
) -> Path:
    """
    Write an opportunity report, choosing the format from the extension.

    Args:
        opportunities: Opportunities in the order shown to the user.
        output_path: Destination (.docx, .csv or .xlsx).
        stats: Optional scan counters included in the DOCX summary.

    Returns:
        Path to the written report.

    Raises:
        ReportWriteError: If the format is unsupported or writing fails.
    """
    path = Path(output_path)
    suffix = path.suffix.lower()

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        if suffix == ".docx":
            _write_docx(opportunities, path, stats)
        elif suffix == ".csv":
            opportunities_to_dataframe(opportunities).to_csv(path, index=False, encoding="utf-8")
        elif suffix == ".xlsx":
            opportunities_to_dataframe(opportunities).to_excel(path, index=False)
        else:
            raise ReportWriteError(
                f"Unsupported report format: {path.suffix}. Supported formats: .csv, .docx, .xlsx"
            )
    except ReportWriteError:
        raise
    except Exception as e:
        raise ReportWriteError(f"Failed to write report {path}: {e}")

    return path
