# report_utils.py
#
# What this file is:
# Generates a PDF report of one AnalysisResult using ReportLab.
#
# How it works (high level):
# - Create the reports/ folder if it doesn't exist
# - Build a filename (with timestamp so it doesn't overwrite old files)
# - Use a ReportLab canvas and draw lines of text from top to bottom
# - If the page fills up, start a new page
# - Save the PDF and return the file path

import os
import textwrap
from datetime import datetime

from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

import config

WRAP_WIDTH = 95


def ensure_reports_dir(reports_dir):
    os.makedirs(reports_dir, exist_ok=True)


def export_analysis_pdf(result, reports_dir=None, output_name=None):
    """
    Create a PDF report file and return the saved file path.

    Sections: score + tier, key metrics, dimension breakdown, AI summary,
    strengths / weaknesses, improvement roadmap.

    ReportLab's drawString does not wrap, so long text goes through
    textwrap first.
    """
    reports_dir = reports_dir or config.REPORTS_DIR
    ensure_reports_dir(reports_dir)

    m = result.metrics
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    if not output_name:
        output_name = f"repograde-{m.owner}-{m.name}-{timestamp}.pdf"

    path = os.path.join(reports_dir, output_name)

    c = canvas.Canvas(path, pagesize=letter)
    width, height = letter

    x = 50
    y = height - 50
    line = 14

    def write(text, bold=False):
        nonlocal y
        chunks = textwrap.wrap(str(text), WRAP_WIDTH) or [""]
        for chunk in chunks:
            if y < 60:
                c.showPage()
                y = height - 50
            c.setFont("Helvetica-Bold" if bold else "Helvetica", 11)
            c.drawString(x, y, chunk)
            y -= line

    write("RepoGrade Report", bold=True)
    write(f"Repository: {m.full_name}")
    write(f"URL: {m.url or f'https://github.com/{m.full_name}'}")
    write(f"Generated: {timestamp}")
    write("")

    write("Repository Score", bold=True)
    write(f"Score: {result.score}/100 ({result.tier})")
    write("")

    write("Repository Metrics", bold=True)
    write(f"Stars: {m.stars} | Forks: {m.forks} | Contributors: {m.contributors}")
    write(f"Files: {m.file_count} | Directories: {m.directory_count} | Commits: {m.commit_count}")
    write(f"Primary language: {m.language}")
    write("")

    write("Dimension Breakdown", bold=True)
    for d in result.dimensions:
        write(f"{d.name}: {d.score}/100 - {d.description}")
    write("")

    write("AI Analysis Summary", bold=True)
    write(result.summary or "No summary available")
    write("")

    write("Strengths", bold=True)
    for s in result.strengths:
        write(f"- {s}")
    write("")

    write("Weaknesses", bold=True)
    for w in result.weaknesses:
        write(f"- {w}")
    write("")

    write("Improvement Roadmap", bold=True)
    for i, item in enumerate(result.roadmap, start=1):
        write(f"{i}. {item.title} [{item.priority} / {item.difficulty} / {item.time_estimate}]")
        write(f"   {item.description}")
        write(f"   Impact: {item.impact}")

    c.save()
    return path
