"""
mcd-gauge-core Result Viewer

Streamlit dashboard for comparative walkthrough results.
Displays approach rankings, success rates per tier and per-trial details.

Usage:
    pip install -e ".[viewer]"
    streamlit run src/mcd_gauge_core/viewer.py
    streamlit run src/mcd_gauge_core/viewer.py -- --results-dir results

Requires the package to be installed (e.g. via ``pip install -e .``).
"""

from __future__ import annotations

import argparse
from pathlib import Path

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from mcd_gauge_core.domain.constants import SUPPORTED_TIERS
from mcd_gauge_core.domain.value_objects import ApproachCategory
from mcd_gauge_core.use_cases.summary import summarize_by_tier

# -- Colors --
APPROACH_COLORS = {
    ApproachCategory.MCD.value: "#1a73e8",
    ApproachCategory.HYBRID.value: "#34a853",
    ApproachCategory.FEW_SHOT.value: "#e8710a",
    ApproachCategory.SYSTEM_ROLE.value: "#9334e6",
    ApproachCategory.CONVERSATIONAL.value: "#ea4335",
}

PERFORMANCE_TIER_COLORS = {
    "excellent": "#34a853",
    "good": "#1a73e8",
    "acceptable": "#fbbc04",
    "poor": "#ea4335",
}

RUN_INSTRUCTIONS = (
    "Run a comparison first:\n```\n"
    "python -m mcd_gauge_core.runner --catalog tasks/walkthrough_catalog.json\n```"
)


def _find_result_sets(results_dir: Path) -> list[dict]:
    """Find variant / trial / approach CSV sets in results_dir, newest first."""
    result_sets = []
    for variant_path in sorted(results_dir.glob("variant_results_*.csv"), reverse=True):
        run_id = variant_path.stem.replace("variant_results_", "")
        trial_path = results_dir / f"trial_results_{run_id}.csv"
        approach_path = results_dir / f"approach_summary_{run_id}.csv"
        result_sets.append({
            "run_id": run_id,
            "variant_path": variant_path,
            "trial_path": trial_path if trial_path.exists() else None,
            "approach_path": approach_path if approach_path.exists() else None,
        })
    return result_sets


def _load_data(result_set: dict) -> tuple[pd.DataFrame, pd.DataFrame | None, pd.DataFrame | None]:
    variant_df = pd.read_csv(result_set["variant_path"])
    trial_df = pd.read_csv(result_set["trial_path"]) if result_set["trial_path"] else None
    approach_df = pd.read_csv(result_set["approach_path"]) if result_set["approach_path"] else None
    return variant_df, trial_df, approach_df


def _render_success_by_tier(variant_df: pd.DataFrame) -> None:
    """Grouped bar chart of pooled success rate per tier and approach."""
    st.header("Success Rate by Tier")

    summary = summarize_by_tier(variant_df).reset_index()
    if summary.empty:
        st.info("No variant produced trial data.")
        return

    tiers = [t for t in SUPPORTED_TIERS if t in set(summary["tier"])]
    fig = go.Figure()
    for approach, color in APPROACH_COLORS.items():
        rows = summary[summary["approach"] == approach].set_index("tier")
        if rows.empty:
            continue
        fig.add_trace(go.Bar(
            x=tiers,
            y=[rows["success_rate"].get(t) for t in tiers],
            name=approach,
            marker_color=color,
            customdata=[
                f"{int(rows['successes'].get(t, 0))}/{int(rows['total_trials'].get(t, 0))}" for t in tiers
            ],
            hovertemplate="%{x}: %{y:.0%} (%{customdata})<extra>" + approach + "</extra>",
        ))

    fig.update_layout(
        barmode="group",
        xaxis_title="Resource tier",
        yaxis_title="Success rate",
        yaxis_range=[0, 1.05],
        yaxis_tickformat=".0%",
        legend_title="Approach",
        template="plotly_white",
        height=420,
    )
    st.plotly_chart(fig, use_container_width=True)


def _render_token_latency(variant_df: pd.DataFrame) -> None:
    """Scatter of average tokens against average latency, one point per variant."""
    st.header("Tokens vs Latency")

    measured = variant_df[variant_df["total_trials"] > 0]
    if measured.empty:
        st.info("No variant produced trial data.")
        return

    fig = go.Figure()
    for approach, color in APPROACH_COLORS.items():
        rows = measured[measured["approach"] == approach]
        if rows.empty:
            continue
        fig.add_trace(go.Scatter(
            x=rows["avg_tokens"],
            y=rows["avg_latency"],
            mode="markers",
            name=approach,
            marker=dict(color=color, size=11),
            text=rows["variant_id"] + " [" + rows["tier"] + "]",
            hovertemplate="%{text}<br>tokens %{x}<br>latency %{y}ms<extra></extra>",
        ))

    fig.update_layout(
        xaxis_title="Average tokens",
        yaxis_title="Average latency (ms)",
        legend_title="Approach",
        template="plotly_white",
        height=420,
    )
    st.plotly_chart(fig, use_container_width=True)


def _render_rankings(approach_df: pd.DataFrame) -> None:
    st.header("Approach Rankings")

    scores = (
        approach_df[["domain_id", "domain", "tier", "mcd_score", "mcd_validated"]]
        .drop_duplicates()
        .sort_values(["domain_id", "tier"])
    )
    invalid = scores[~scores["mcd_validated"].astype(bool)]
    if invalid.empty:
        st.success("MCD advantages validated for every domain and tier.")
    else:
        for _, row in invalid.iterrows():
            st.warning(f"**{row['domain']}** [{row['tier']}]: MCD advantages questioned (score {row['mcd_score']})")

    display_cols = [
        "domain_id", "tier", "rank", "approach", "success_rate", "avg_tokens", "avg_latency",
        "success_ratio", "token_efficiency_ratio", "latency_ratio",
    ]
    st.dataframe(
        approach_df[display_cols].rename(columns={"domain_id": "Domain", "tier": "Tier", "rank": "Rank"}),
        use_container_width=True,
        hide_index=True,
    )


def _render_trial_details(trial_df: pd.DataFrame) -> None:
    """Performance tier distribution and the raw trial table."""
    st.header("Trial Details")

    counts = trial_df.groupby(["approach", "performance_tier"]).size().unstack(fill_value=0)
    fig = go.Figure()
    for tier, color in PERFORMANCE_TIER_COLORS.items():
        if tier not in counts.columns:
            continue
        fig.add_trace(go.Bar(x=counts.index, y=counts[tier], name=tier, marker_color=color))
    fig.update_layout(
        barmode="stack",
        xaxis_title="Approach",
        yaxis_title="Trials",
        legend_title="Performance tier",
        template="plotly_white",
        height=380,
    )
    st.plotly_chart(fig, use_container_width=True)

    failed_only = st.checkbox("Failed trials only", value=False)
    shown = trial_df[~trial_df["success"].astype(bool)] if failed_only else trial_df
    st.dataframe(
        shown[["domain_id", "tier", "variant_id", "test_id", "output", "accuracy", "performance_tier", "failure_reasons"]],
        use_container_width=True,
        hide_index=True,
    )


def main() -> None:
    # Parse --results-dir from Streamlit args (after --)
    parser = argparse.ArgumentParser()
    parser.add_argument("--results-dir", default="results")
    args, _ = parser.parse_known_args()

    results_dir = Path(args.results_dir)

    st.set_page_config(page_title="mcd-gauge-core", layout="wide")
    st.title("mcd-gauge-core Results")

    if not results_dir.exists():
        st.error(f"Results directory not found: `{results_dir}`")
        st.info(RUN_INSTRUCTIONS)
        return

    result_sets = _find_result_sets(results_dir)
    if not result_sets:
        st.warning(f"No result files found in `{results_dir}/`")
        st.info(RUN_INSTRUCTIONS)
        return

    # Run selector
    run_ids = [r["run_id"] for r in result_sets]
    selected_run_id = st.sidebar.selectbox("Run", run_ids, index=0)
    selected = next(r for r in result_sets if r["run_id"] == selected_run_id)

    variant_df, trial_df, approach_df = _load_data(selected)

    # Sidebar: domain filter
    domains = sorted(variant_df["domain_id"].unique())
    selected_domain = st.sidebar.selectbox("Domain", options=["all"] + domains, index=0)
    if selected_domain != "all":
        variant_df = variant_df[variant_df["domain_id"] == selected_domain]
        if trial_df is not None:
            trial_df = trial_df[trial_df["domain_id"] == selected_domain]
        if approach_df is not None:
            approach_df = approach_df[approach_df["domain_id"] == selected_domain]

    # Sidebar info
    st.sidebar.markdown("---")
    st.sidebar.markdown(f"**Domains**: {variant_df['domain_id'].nunique()}")
    st.sidebar.markdown(f"**Tiers**: {', '.join(sorted(variant_df['tier'].unique()))}")
    st.sidebar.markdown(f"**Variants**: {len(variant_df)} rows")
    errors = variant_df[variant_df["error_details"].fillna("") != ""]
    if not errors.empty:
        st.sidebar.markdown(f"**Failed variants**: {len(errors)}")

    # Render sections
    _render_success_by_tier(variant_df)
    _render_token_latency(variant_df)
    if approach_df is not None and not approach_df.empty:
        _render_rankings(approach_df)
    if trial_df is not None and not trial_df.empty:
        _render_trial_details(trial_df)


if __name__ == "__main__":
    main()
