# app.py
#
# RepoGrade (Streamlit UI)
#
# Purpose:
# The Streamlit front-end. It takes one repository URL, runs the analysis
# engine, and shows the score, dimensions, AI narrative and roadmap.
# A second tab compares several repositories using the score-only path
# (no LLM calls).
#
# Design choice:
# All "business logic" (GitHub collection, scoring, narrative, exports)
# lives in separate modules; this file only renders.
#
# Run with:  streamlit run app.py

import asyncio
import os

import pandas as pd           # tables and chart-ready data
import streamlit as st

from advanced_analysis import advanced_report
from analysis_engine import AnalysisEngine
from github_api import GitHubFetchError, get_complete_metrics, parse_repo_url
from report_utils import export_analysis_pdf


st.set_page_config(page_title="RepoGrade", layout="wide")


TOOLTIPS = {
    "Score": "Overall score (0–100). Baseline 50 plus documentation, testing, community and activity bonuses, minus penalties.",
    "Tier": "Beginner < 50 ≤ Intermediate < 70 ≤ Advanced < 85 ≤ Expert.",
    "Stars": "Public interest signal.",
    "Contributors": "Distinct contributors (first page of the contributors API).",
}


# ----------------------------
# UI helpers
# ----------------------------
def score_color(score):
    """Green/blue/orange/red for quick interpretation."""
    try:
        s = float(score)
    except (TypeError, ValueError):
        return "#94A3B8"  # gray for invalid/unknown values

    if s >= 85:
        return "#22C55E"
    if s >= 70:
        return "#0EA5E9"
    if s >= 50:
        return "#F59E0B"
    return "#EF4444"


def render_score_bar(label, value, color=None):
    """Horizontal progress bar for one dimension score."""
    try:
        v = max(0, min(100, int(value)))
    except (TypeError, ValueError):
        v = 0

    bar_color = color or score_color(v)

    return f"""
    <div style="margin: 10px 0;">
        <div style="display:flex; justify-content:space-between; align-items:center;">
            <div style="font-weight:900;">{label}</div>
            <div style="font-weight:900;">{v}</div>
        </div>
        <div style="width:100%; height:12px; background:#F1F5F9; border-radius:999px;
                    overflow:hidden; border:1px solid #E2E8F0;">
            <div style="height:12px; width:{v}%; background:{bar_color}; border-radius:999px;"></div>
        </div>
    </div>
    """


@st.cache_resource
def get_engine():
    # One engine per server process: the narrative cache and rate limiter
    # are shared by every browser session.
    return AnalysisEngine()


def run_async(coro):
    return asyncio.run(coro)


def load_metrics(url):
    """URL -> RepositoryMetrics, or None after showing an error."""
    try:
        owner, repo = parse_repo_url(url)
    except ValueError as e:
        st.error(str(e))
        return None
    try:
        return run_async(get_complete_metrics(owner, repo))
    except GitHubFetchError as e:
        st.error(f"Could not fetch repository. {e}")
        return None


# ----------------------------
# Session state
# ----------------------------
if "result" not in st.session_state:
    st.session_state["result"] = None
if "comparison" not in st.session_state:
    st.session_state["comparison"] = []


st.title("RepoGrade")
st.caption("Repository quality scores, dimension breakdowns, and an AI-written improvement roadmap.")

analyze_tab, compare_tab = st.tabs(["Analyze", "Compare"])


# ----------------------------
# Analyze tab
# ----------------------------
with analyze_tab:
    url = st.text_input("GitHub repository URL", placeholder="https://github.com/owner/repo").strip()

    if st.button("Analyze", type="primary"):
        if url == "":
            st.error("Enter a repository URL.")
        else:
            with st.spinner("Collecting repository metrics..."):
                metrics = load_metrics(url)
            if metrics is not None:
                with st.spinner("Scoring and writing the narrative..."):
                    st.session_state["result"] = run_async(get_engine().analyze(metrics))

    result = st.session_state["result"]
    if result is not None:
        m = result.metrics

        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Score", result.score, help=TOOLTIPS["Score"])
        c2.metric("Tier", result.tier, help=TOOLTIPS["Tier"])
        c3.metric("Stars", m.stars, help=TOOLTIPS["Stars"])
        c4.metric("Contributors", m.contributors, help=TOOLTIPS["Contributors"])

        left, right = st.columns([1, 1])
        with left:
            st.subheader("Dimensions")
            for d in result.dimensions:
                st.markdown(render_score_bar(d.name, d.score, d.color), unsafe_allow_html=True)
                st.caption(d.description)
        with right:
            st.subheader("Summary")
            st.write(result.summary)
            st.subheader("Strengths")
            for s in result.strengths:
                st.write(f"- {s}")
            st.subheader("Weaknesses")
            for w in result.weaknesses:
                st.write(f"- {w}")

        st.subheader("Improvement Roadmap")
        roadmap_df = pd.DataFrame([item.to_dict() for item in result.roadmap])
        st.dataframe(roadmap_df, use_container_width=True, hide_index=True)

        with st.expander("Advanced report (security, complexity, performance)"):
            report = advanced_report(m)
            st.write("**Security findings**")
            if report["vulnerabilities"]:
                st.dataframe(pd.DataFrame(report["vulnerabilities"]), use_container_width=True, hide_index=True)
            else:
                st.write("No findings.")
            cx = report["complexity"]
            st.write(f"**Complexity:** {cx['score']} ({cx['level']})")
            perf = report["performance"]
            st.write(f"**Performance:** {perf['score']}")
            for issue in perf["issues"]:
                st.write(f"- {issue}")

        if st.button("Export PDF"):
            path = export_analysis_pdf(result)
            with open(path, "rb") as f:
                st.download_button(
                    "Download PDF",
                    data=f.read(),
                    file_name=os.path.basename(path),
                    mime="application/pdf",
                )


# ----------------------------
# Compare tab (score only, no LLM)
# ----------------------------
with compare_tab:
    raw_urls = st.text_area("Repository URLs (one per line)", height=120)

    if st.button("Compare"):
        rows = []
        for line in raw_urls.splitlines():
            line = line.strip()
            if line == "":
                continue
            metrics = load_metrics(line)
            if metrics is None:
                continue
            scored = get_engine().score_only(metrics)
            row = {"repo": metrics.full_name, "score": scored["score"], "tier": scored["tier"]}
            for d in scored["dimensions"]:
                row[d.name] = d.score
            rows.append(row)
        st.session_state["comparison"] = rows

    rows = st.session_state["comparison"]
    if rows:
        df = pd.DataFrame(rows).sort_values("score", ascending=False).set_index("repo")
        st.dataframe(df, use_container_width=True)
        st.bar_chart(df[["score"]])
