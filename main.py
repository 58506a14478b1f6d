# main.py
#
# What this file is:
# The command-line (terminal) version of RepoGrade.
# It uses a simple menu and prints results to the console.
#
# Big picture flow (Option 1):
#   GitHub API -> scoring + narrative -> exports (JSON/CSV/PDF)
#
# Options 2 and 3 only use the synchronous scorer, so they never call the LLM.

import argparse
import asyncio
import logging

from advanced_analysis import advanced_report
from analysis_engine import AnalysisEngine
from analytics import rank_rows
from file_utils import load_repo_urls, save_analysis_json, save_dimensions_csv
from github_api import GitHubFetchError, get_complete_metrics, parse_repo_url
from report_utils import export_analysis_pdf


def print_menu():
    print("\nRepoGrade")
    print("----------------------------")
    print("1. Analyze a GitHub repository (score + AI narrative + exports)")
    print("2. Compare repositories (score only)")
    print("3. Rank repositories from file (score only)")
    print("4. Advanced report (security, complexity, performance)")
    print("q. Quit")


def print_dimensions(dimensions):
    print("\nDIMENSIONS")
    print("----------------------------")
    for d in dimensions:
        print(f"{d.name:14} : {d.score:3}  {d.description}")


def print_result(result):
    m = result.metrics
    print(f"\n{m.full_name}: {result.score}/100 ({result.tier})")
    print_dimensions(result.dimensions)

    print("\nSUMMARY")
    print("----------------------------")
    print(result.summary)

    print("\nSTRENGTHS")
    for s in result.strengths:
        print("-", s)
    print("\nWEAKNESSES")
    for w in result.weaknesses:
        print("-", w)

    print("\nROADMAP")
    print("----------------------------")
    for i, item in enumerate(result.roadmap, start=1):
        print(f"{i}. [{item.priority}] {item.title} ({item.difficulty}, {item.time_estimate})")
        print(f"   {item.description}")


async def fetch_metrics(url):
    """URL -> RepositoryMetrics, or None after printing why it failed."""
    try:
        owner, repo = parse_repo_url(url)
    except ValueError as e:
        print(f"Error: {e}")
        return None
    try:
        return await get_complete_metrics(owner, repo)
    except GitHubFetchError as e:
        print(f"Could not fetch repository: {e}")
        return None


def analyze_one(engine):
    url = input("Enter GitHub repository URL: ").strip()
    if url == "":
        print("Error: URL cannot be empty.")
        return

    metrics = asyncio.run(fetch_metrics(url))
    if metrics is None:
        return

    result = asyncio.run(engine.analyze(metrics))
    print_result(result)

    if input("\nSave JSON/CSV/PDF exports? (y/N): ").strip().lower() == "y":
        print("\nEXPORTS")
        print("----------------------------")
        print("Analysis JSON :", save_analysis_json(result))
        print("Dimensions CSV:", save_dimensions_csv(result))
        print("PDF report    :", export_analysis_pdf(result))


async def score_many(engine, urls):
    """Fetch every repo concurrently, then score each one synchronously."""
    snapshots = await asyncio.gather(*(fetch_metrics(u) for u in urls))
    rows = []
    for metrics in snapshots:
        if metrics is None:
            continue
        scored = engine.score_only(metrics)
        rows.append({
            "repo": metrics.full_name,
            "score": scored["score"],
            "tier": scored["tier"],
            "stars": metrics.stars,
            "contributors": metrics.contributors,
        })
    return rows


def print_rows(title, rows):
    print(f"\n{title}")
    print("----------------------------")
    for i, r in enumerate(rows, start=1):
        print(
            f"{i}. {r['repo']} | score={r['score']} ({r['tier']}) | "
            f"stars={r['stars']} | contributors={r['contributors']}"
        )


def compare_option(engine):
    raw = input("Enter repository URLs separated by spaces: ").strip()
    urls = raw.split()
    if len(urls) < 2:
        print("Enter at least two repository URLs.")
        return

    rows = asyncio.run(score_many(engine, urls))
    if not rows:
        print("No repositories could be scored.")
        return
    print_rows("COMPARISON", rows)


def rank_option(engine):
    path = input("File with one repository URL per line [repos.txt]: ").strip() or "repos.txt"
    urls = load_repo_urls(path)
    if not urls:
        print("No repository URLs found.")
        return

    key = input("Rank by score, stars, or contributors [score]: ").strip().lower() or "score"
    if key not in ("score", "stars", "contributors"):
        print("Invalid ranking field. Using score.")
        key = "score"

    rows = asyncio.run(score_many(engine, urls))
    print_rows(f"LEADERBOARD (by {key})", rank_rows(rows, key=key))


def advanced_option():
    url = input("Enter GitHub repository URL: ").strip()
    if url == "":
        print("URL is required.")
        return

    metrics = asyncio.run(fetch_metrics(url))
    if metrics is None:
        return

    report = advanced_report(metrics)

    print("\nSECURITY")
    print("----------------------------")
    for v in report["vulnerabilities"]:
        print(f"[{v['severity']}] {v['title']}: {v['recommendation']}")
    if not report["vulnerabilities"]:
        print("No findings.")

    c = report["complexity"]
    print("\nCOMPLEXITY")
    print("----------------------------")
    print(f"Score: {c['score']} ({c['level']}) | avg complexity: {c['avg_complexity']}")

    p = report["performance"]
    print("\nPERFORMANCE")
    print("----------------------------")
    print(f"Score: {p['score']}")
    for issue in p["issues"]:
        print("-", issue)

    print("\nCODE REVIEW")
    print("----------------------------")
    for s in report["code_review"]:
        print(f"[{s['severity']}] {s['category']}: {s['title']}")


def main():
    """
    Sentinel-controlled main menu loop: keep going until the user enters "q".
    """
    parser = argparse.ArgumentParser(description="RepoGrade repository quality analyzer")
    parser.add_argument("-v", "--verbose", action="store_true", help="show info-level logs")
    args = parser.parse_args()
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # One engine for the whole session, so the narrative cache and
    # rate limiter carry over between menu choices.
    engine = AnalysisEngine()

    choice = ""
    while choice != "q":
        print_menu()
        choice = input("Choice: ").strip().lower()

        if choice == "1":
            analyze_one(engine)
        elif choice == "2":
            compare_option(engine)
        elif choice == "3":
            rank_option(engine)
        elif choice == "4":
            advanced_option()
        elif choice == "q":
            print("Goodbye!")
        else:
            print("Invalid option. Try again.")


if __name__ == "__main__":
    main()
