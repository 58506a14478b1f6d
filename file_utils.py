# file_utils.py
#
# Purpose:
# This file handles saving analysis outputs to disk in a few formats:
#   1) JSON (the full AnalysisResult, easy for code/tools to read later)
#   2) CSV (one row per dimension, easy to open in Excel/Sheets)
# It also loads repository URLs from a text file for batch runs.

import os                      # File paths + existence checks
import csv                     # Write CSV files (built-in)
import json                    # Write JSON files (built-in)
from datetime import datetime  # Timestamp for filenames

import config


def ensure_reports_dir(reports_dir):
    """Create the reports folder if it doesn't exist."""
    os.makedirs(reports_dir, exist_ok=True)


def _timestamp():
    """
    Return a timestamp string for filenames.

    Example: 20260228_014512
    """
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def _slug(result):
    m = result.metrics
    return f"{m.owner}_{m.name}"


def save_analysis_json(result, reports_dir=None):
    """
    Save result.to_dict() as JSON.
    Returns the saved file path.
    """
    reports_dir = reports_dir or config.REPORTS_DIR
    ensure_reports_dir(reports_dir)

    path = os.path.join(reports_dir, f"{_slug(result)}_analysis_{_timestamp()}.json")

    with open(path, "w", encoding="utf-8") as f:
        json.dump(result.to_dict(), f, indent=2)

    return path


def save_dimensions_csv(result, reports_dir=None):
    """
    Save the overall score and the five dimension scores as CSV rows.
    Returns the saved file path.
    """
    reports_dir = reports_dir or config.REPORTS_DIR
    ensure_reports_dir(reports_dir)

    path = os.path.join(reports_dir, f"{_slug(result)}_dimensions_{_timestamp()}.csv")

    fieldnames = ["repository", "dimension", "score", "description"]

    # newline="" prevents extra blank lines on Windows
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerow({
            "repository": result.metrics.full_name,
            "dimension": "Overall",
            "score": result.score,
            "description": f"{result.tier} tier",
        })
        for d in result.dimensions:
            writer.writerow({
                "repository": result.metrics.full_name,
                "dimension": d.name,
                "score": d.score,
                "description": d.description,
            })

    return path


def load_repo_urls(path="repos.txt"):
    """
    Load GitHub repository URLs from a text file (one per line).
    Blank lines and lines starting with '#' are skipped.

    Expected file format:
      https://github.com/psf/requests
      https://github.com/pallets/flask
    """
    if not os.path.exists(path):
        print(f"Error: file not found: {path}")
        return []

    urls = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            u = line.strip()
            if u != "" and not u.startswith("#"):
                urls.append(u)

    return urls
