from __future__ import annotations

"""
covex report generator
----------------------
This module renders the report views into a DOCX document with charts.

Design goals:
- Keep covex usable even if report dependencies are missing (lazy imports).
- Every number in the document comes from a report view, so the document
  and `run_view` always agree.
- Charts only appear when there is something to compare (more than one bar).
"""

from dataclasses import dataclass, field
from collections import Counter
from typing import Any, Dict, List, Optional, Sequence, Tuple
import logging
import math
import os
import tempfile

from . import config as settings
from . import views
from .models import CovidTables

logger = logging.getLogger(__name__)


# -----------------------------
# Configuration / citation types
# -----------------------------

@dataclass
class DatasetCitation:
    """Minimal dataset citation metadata for the DOCX report."""
    database_name: str = "Coronavirus (COVID-19) Deaths and Vaccinations"
    institutional_author: str = "Our World in Data"
    website: str = "https://ourworldindata.org/covid-deaths"
    data_as_of: str = "2022-02-08"
    file_name: Optional[str] = None


@dataclass
class ReportConfig:
    """High-level knobs to control how the report is written."""
    title: str = "COVID-19 Data Exploration"
    subtitle: str = "Cases, deaths, infection and vaccination rates"
    citation: DatasetCitation = field(default_factory=DatasetCitation)

    # How many countries to show in top-n charts / tables
    top_n: int = settings.TOP_N

    # Countries compared side by side
    locations: Tuple[str, ...] = settings.DEFAULT_LOCATIONS

    # Cut-off for the "infection rate at least" table
    infection_threshold: float = settings.INFECTION_THRESHOLD


# -----------------------------
# Helpers
# -----------------------------

def _safe_floats(values: Sequence[Optional[float]]) -> List[float]:
    """Drop None/NaN/inf so values can be plotted."""
    out: List[float] = []
    for v in values:
        if v is None:
            continue
        fv = float(v)
        if math.isfinite(fv):
            out.append(fv)
    return out


def _choose_bins(n: int) -> int:
    """Simple bin heuristic (keeps charts readable for small samples)."""
    if n <= 20:
        return 10
    if n <= 100:
        return 15
    return 30


def _fmt(v: Any) -> str:
    if v is None:
        return ""
    if isinstance(v, float):
        return f"{v:,.4f}" if not v.is_integer() else f"{int(v):,}"
    if isinstance(v, int):
        return f"{v:,}"
    return str(v)


# -----------------------------
# Main entry point
# -----------------------------

def generate_docx_report(
    tables: CovidTables,
    out_path: str,
    *,
    config: Optional[ReportConfig] = None,
) -> str:
    """
    Generate a DOCX report + charts from the report views.

    The input tables are only read; nothing is written back.
    """
    config = config or ReportConfig()

    # Lazy imports: only required when a report is generated.
    try:
        from docx import Document
        from docx.shared import Pt, Inches
        from docx.enum.text import WD_ALIGN_PARAGRAPH
    except ImportError as e:
        raise ImportError(
            "Missing dependency: python-docx.\n"
            "Install it with: python -m pip install python-docx"
        ) from e

    try:
        import matplotlib.pyplot as plt
        import numpy as np
    except ImportError as e:
        raise ImportError(
            "Missing dependency: matplotlib (and numpy).\n"
            "Install with: python -m pip install matplotlib numpy"
        ) from e

    if not tables.deaths:
        raise ValueError("No rows to report on (deaths table is empty).")

    # -----------------------------
    # 1) Evaluate views
    # -----------------------------
    world = {}
    for name in ("worldwide_fatality", "worldwide_infection_rate", "worldwide_vaccination_rate"):
        world.update(views.run_view(name, tables)[0])
    by_continent = views.run_view("fatality_by_continent", tables)
    by_location = views.run_view("fatality_by_location", tables)
    top_infection = views.run_view("top_infection_rate", tables, n=config.top_n)
    top_fatality = views.run_view("top_fatality_rate", tables, n=config.top_n)
    selected = views.run_view("infection_rate_by_location", tables, locations=config.locations)
    above = views.run_view("infection_rate_at_least", tables, threshold=config.infection_threshold)

    levels = Counter(r["fatality_rate_level"] for r in by_location)

    # -----------------------------
    # 2) Create charts
    # -----------------------------
    tmpdir = tempfile.mkdtemp(prefix="covex_report_")
    # Each chart is: (title, file_path)
    chart_paths: List[Tuple[str, str]] = []

    def _save(filename: str) -> str:
        path = os.path.join(tmpdir, filename)
        plt.tight_layout()
        plt.savefig(path, dpi=200)
        plt.close()
        return path

    def _bar(title: str, rows: List[Dict[str, Any]], label: str, value: str, ylabel: str, filename: str) -> None:
        pairs = [(str(r[label]), r[value]) for r in rows if r[value] is not None]
        if len(pairs) < 2:
            return
        plt.figure()
        plt.bar([p[0] for p in pairs], [p[1] for p in pairs])
        plt.xticks(rotation=45, ha="right")
        plt.title(title)
        plt.ylabel(ylabel)
        chart_paths.append((title, _save(filename)))

    _bar(f"Top {config.top_n} countries by infection rate", top_infection,
         "location", "infection_rate", "Infection rate (%)", "top_infection.png")
    _bar("Fatality rate by continent", by_continent,
         "continent", "fatality_rate", "Fatality rate (%)", "continent_fatality.png")

    rates = _safe_floats([r["fatality_rate"] for r in by_location])
    if len(rates) >= 2:
        x = np.asarray(rates)
        plt.figure()
        plt.hist(x, bins=_choose_bins(len(x)), edgecolor="black", linewidth=0.8)
        # Medium band boundaries
        plt.axvline(2.0, color="C1", linestyle="--")
        plt.axvline(5.0, color="C3", linestyle="--")
        plt.title("Distribution of country fatality rates")
        plt.xlabel("Fatality rate (%)")
        plt.ylabel("Countries")
        chart_paths.append(("Distribution of country fatality rates", _save("hist_fatality.png")))

    # -----------------------------
    # 3) Build DOCX report
    # -----------------------------
    doc = Document()
    style = doc.styles["Normal"]
    style.font.name = "Calibri"
    style.font.size = Pt(11)

    def _center_title(text: str, size: int, bold: bool = False, italic: bool = False) -> None:
        p = doc.add_paragraph()
        r = p.add_run(text)
        r.bold = bold
        r.italic = italic
        r.font.size = Pt(size)
        p.alignment = WD_ALIGN_PARAGRAPH.CENTER

    def _kv(key: str, value: str) -> None:
        p = doc.add_paragraph()
        r = p.add_run(f"{key}: ")
        r.bold = True
        p.add_run(value)

    def _table(rows: List[Dict[str, Any]], columns: List[Tuple[str, str]]) -> None:
        t = doc.add_table(rows=1, cols=len(columns))
        for i, (_, header) in enumerate(columns):
            t.rows[0].cells[i].text = header
        for r in rows:
            cells = t.add_row().cells
            for i, (key, _) in enumerate(columns):
                cells[i].text = _fmt(r.get(key))

    _center_title(config.title, 22, bold=True)
    _center_title(config.subtitle, 12, italic=True)

    doc.add_paragraph("")
    _kv("Death rows", f"{len(tables.deaths):,}")
    _kv("Vaccination rows", f"{len(tables.vaccinations):,}")
    _kv("Countries", str(len(by_location)))

    doc.add_heading("Dataset citation", level=1)
    cit = config.citation
    if cit.file_name:
        doc.add_paragraph(f"Data file used: {cit.file_name}")
    doc.add_paragraph(
        f"{cit.institutional_author} (data as of {cit.data_as_of}). "
        f"{cit.database_name}. {cit.website}."
    )

    doc.add_heading("Worldwide", level=1)
    _kv("Total cases", _fmt(world["total_cases"]))
    _kv("Total deaths", _fmt(world["total_deaths"]))
    _kv("Fatality rate (%)", _fmt(world["fatality_rate"]))
    _kv("Infection rate (%)", _fmt(world["infection_rate"]))
    _kv("Fully vaccinated rate (%)", _fmt(world["vaccination_rate"]))

    doc.add_heading("Fatality rate levels", level=1)
    doc.add_paragraph("Low: below 2%. Medium: 2% to 5%. High: above 5%. None: no cases.")
    _table(
        [{"level": k, "count": levels.get(k, 0)} for k in ("Low", "Medium", "High", "None")],
        [("level", "Level"), ("count", "Countries")],
    )

    doc.add_heading("Visualizations", level=1)
    for title, path in chart_paths:
        doc.add_paragraph(title)
        doc.add_picture(path, width=Inches(6.5))

    doc.add_heading("Continents", level=1)
    _table(by_continent, [("continent", "Continent"), ("total_cases", "Cases"),
                          ("total_deaths", "Deaths"), ("fatality_rate", "Fatality rate (%)")])

    doc.add_heading(f"Top {config.top_n} countries by infection rate", level=1)
    _table(top_infection, [("location", "Country"), ("infection_rate", "Infection rate (%)")])

    doc.add_heading(f"Top {config.top_n} countries by fatality rate", level=1)
    _table(top_fatality, [("location", "Country"), ("total_cases", "Cases"),
                          ("total_deaths", "Deaths"), ("fatality_rate", "Fatality rate (%)")])

    doc.add_heading("Selected countries", level=1)
    if selected:
        _table(selected, [("location", "Country"), ("infection_rate", "Infection rate (%)")])
    else:
        doc.add_paragraph("None of the selected countries occur in the data.")

    doc.add_heading(f"Countries with an infection rate of at least {config.infection_threshold:g}%", level=1)
    _table(above, [("location", "Country"), ("population", "Population"),
                   ("total_cases", "Cases"), ("infection_rate", "Infection rate (%)")])

    # -----------------------------
    # Reproducibility footer
    # -----------------------------
    doc.add_heading("Reproducibility footer", level=1)
    from . import __version__ as covex_version
    from datetime import datetime as _dt
    doc.add_paragraph(f"covex version: {covex_version}")
    doc.add_paragraph(f"Report generated at: {_dt.now().isoformat(timespec='seconds')}")
    doc.add_paragraph(
        "Region aggregates (rows without a continent, such as 'World') are excluded "
        "from every figure to avoid double counting."
    )

    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    doc.save(out_path)
    logger.info("Report written to %s (%d charts)", out_path, len(chart_paths))
    return out_path
