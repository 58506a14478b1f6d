"""
test_file_utils.py

Exports (JSON, CSV, PDF) and the batch URL loader, written into a
temporary folder so the real reports/ directory is never touched.
"""

import csv
import json
import os
import tempfile
import unittest

from factories import make_metrics
from fallbacks import fallback_roadmap
from file_utils import load_repo_urls, save_analysis_json, save_dimensions_csv
from models import AnalysisResult
from report_utils import export_analysis_pdf
from scoring import compute_dimensions


def make_result():
    m = make_metrics(has_readme=True, stars=5, file_count=20, commit_count=4)
    return AnalysisResult(
        score=61,
        tier="Intermediate",
        summary="A small but tidy project. " * 20,
        strengths=["Has a README"],
        weaknesses=["No tests"],
        dimensions=compute_dimensions(m),
        metrics=m,
        roadmap=fallback_roadmap(m, 61),
    )


class TestExports(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.reports_dir = os.path.join(self._tmp.name, "reports")
        self.result = make_result()

    def tearDown(self):
        self._tmp.cleanup()

    def test_json_export(self):
        path = save_analysis_json(self.result, reports_dir=self.reports_dir)

        with open(path, encoding="utf-8") as f:
            data = json.load(f)

        self.assertEqual(data["score"], 61)
        self.assertEqual(data["metrics"]["owner"], "octocat")
        self.assertEqual(len(data["dimensions"]), 5)
        self.assertEqual(data["roadmap"][0]["time_estimate"], "4-6 hours")

    def test_csv_export(self):
        path = save_dimensions_csv(self.result, reports_dir=self.reports_dir)

        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.DictReader(f))

        self.assertEqual(len(rows), 6)
        self.assertEqual(rows[0]["dimension"], "Overall")
        self.assertEqual(rows[0]["score"], "61")
        self.assertEqual(rows[1]["dimension"], "Code Quality")

    def test_pdf_export(self):
        path = export_analysis_pdf(self.result, reports_dir=self.reports_dir, output_name="out.pdf")

        self.assertEqual(os.path.basename(path), "out.pdf")
        with open(path, "rb") as f:
            self.assertEqual(f.read(4), b"%PDF")


class TestLoadRepoUrls(unittest.TestCase):

    def test_skips_blank_and_comment_lines(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "repos.txt")
            with open(path, "w", encoding="utf-8") as f:
                f.write("# my list\nhttps://github.com/psf/requests\n\n  https://github.com/pallets/flask  \n")

            self.assertEqual(
                load_repo_urls(path),
                ["https://github.com/psf/requests", "https://github.com/pallets/flask"],
            )

    def test_missing_file(self):
        self.assertEqual(load_repo_urls("/nonexistent/repos.txt"), [])


if __name__ == "__main__":
    unittest.main()
