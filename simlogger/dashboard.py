"""Streamlit Dashboard for Flight Logs

Provides:
- Log picker over the log directory
- Verification verdict and the general checksum line
- Header and fingerprint lines
- Map of the track and an altitude chart

Run with: streamlit run simlogger/dashboard.py
"""

import sys
from pathlib import Path
from typing import Optional

# streamlit runs this file as a script
sys.path.insert(0, str(Path(__file__).parent.parent))

from config.constants import LOG_DIRECTORY, LOG_EXTENSION
from simlogger.replay import read_track
from simlogger.verify import VerificationResult, describe, verify_text


def list_logs(directory: Optional[Path] = None) -> list[Path]:
    """Logs in a directory, newest first."""
    directory = Path(directory or LOG_DIRECTORY)
    if not directory.is_dir():
        return []
    logs = [p for p in directory.iterdir() if p.suffix.lower() == LOG_EXTENSION]
    return sorted(logs, key=lambda p: p.stat().st_mtime, reverse=True)


def read_log(path) -> str:
    with open(path, "r", encoding="latin-1", newline="\n") as f:
        return f.read()


def summarize_log(text: str) -> dict:
    """Facts shown by both dashboards.

    Args:
        text: Log document

    Returns:
        Dict with the verification result, header lines, comment lines
        and the decoded track
    """
    lines = text.splitlines()
    track = read_track(text)
    return {
        "verification": verify_text(text),
        "headers": [line for line in lines if line.startswith(("A", "H"))],
        "comments": [line for line in lines if line.startswith("L")],
        "route": [line for line in lines if line.startswith("C")],
        "track": track,
    }


def run_dashboard(directory: Optional[Path] = None):
    """Run the Streamlit dashboard."""
    import streamlit as st

    st.set_page_config(page_title="sim_logger", layout="wide")
    st.title("Flight Log Inspector")

    logs = list_logs(directory)
    if not logs:
        st.info(f"No logs in {Path(directory or LOG_DIRECTORY)}")
        return

    selected = st.selectbox("Log", logs, format_func=lambda p: p.name)
    summary = summarize_log(read_log(selected))
    result: VerificationResult = summary["verification"]

    col1, col2, col3 = st.columns(3)
    with col1:
        if result.ok:
            st.success(describe(result, selected))
        else:
            st.error(describe(result, selected))
    with col2:
        st.metric("Positions", len(summary["track"]))
    with col3:
        st.metric("G record", result.expected or "missing")

    if result.general_checksum_line:
        st.code(result.general_checksum_line)

    st.divider()

    tab1, tab2, tab3 = st.tabs(["Track", "Header", "Fingerprints"])

    with tab1:
        track = summary["track"]
        if track.empty:
            st.info("No B records in this log")
        else:
            st.map(track.rename(columns={"latitude": "lat", "longitude": "lon"})[["lat", "lon"]])
            st.line_chart(track, x="time_of_day", y="altitude")

    with tab2:
        st.code("\n".join(summary["headers"] + summary["route"]))

    with tab3:
        st.code("\n".join(summary["comments"]))


# CLI mode for non-Streamlit environments
def print_dashboard_summary(path):
    """Print the dashboard facts for one log to the console.

    Args:
        path: Log file
    """
    summary = summarize_log(read_log(path))
    result = summary["verification"]
    track = summary["track"]

    print("\n" + "=" * 60)
    print(f"  sim_logger - {Path(path).name}")
    print("=" * 60)

    print(f"\n  {describe(result, path)}")
    if result.general_checksum_line:
        print(f"  {result.general_checksum_line}")

    print(f"\n  Positions: {len(track)}")
    if not track.empty:
        print(f"  Max altitude: {track['altitude'].max()} m")
        print(f"  First fix: {track['latitude'].iloc[0]:.5f}, {track['longitude'].iloc[0]:.5f}")

    print("\n  Fingerprints:")
    for line in summary["comments"]:
        print(f"    {line}")

    print("\n" + "=" * 60)


if __name__ == "__main__":
    run_dashboard()
