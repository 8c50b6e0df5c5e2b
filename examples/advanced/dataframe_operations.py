# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Remedy Client - DataFrame Operations Walkthrough

This example pulls incidents into a pandas DataFrame and summarizes them.

Prerequisites:
    pip install remedy-ars-client
    A settings script (default /etc/remedy/config, or $REMEDY_CONFIG)
"""

import sys

import pandas as pd

from remedy import RemedyClient, RemedyConfig
from remedy.core.errors import RemedyError

FORM = "HPD:Help Desk"
COLUMNS = ["Incident Number", "Status", "Priority", "Assigned Group", "Assignee Login ID", "Submit Date"]


def main():
    # ── Setup ─────────────────────────────────────────────────────
    try:
        config = RemedyConfig.load()
    except RemedyError as exc:
        print(f"[ERR] {exc}")
        sys.exit(1)

    group = input(f"Support group to summarize [default: {config.workgroup or '%'}]: ").strip()
    group = group or config.workgroup or "%"
    print(f"[INFO] Using group: {group}")

    with RemedyClient(config) as client:
        # ── 1. Query into a DataFrame ─────────────────────────────────
        print("\n" + "-" * 60)
        print("1. Query open incidents into a DataFrame")
        print("-" * 60)

        df = client.query.dataframe(
            FORM,
            {"Assigned Group": group, "Status": "-Resolved"},
            fields=COLUMNS,
            max=500,
        )
        print(f"[INFO] {len(df)} open incidents")
        if df.empty:
            print("[INFO] Nothing to summarize; exiting.")
            return
        print(df.head(10).to_string())

        # ── 2. Summaries ──────────────────────────────────────────────
        print("\n" + "-" * 60)
        print("2. Counts by status and assignee")
        print("-" * 60)

        print(df.groupby("Status").size().sort_values(ascending=False).to_string())
        print()
        print(df["Assignee Login ID"].fillna("(unassigned)").value_counts().to_string())

        # ── 3. Age of open incidents ──────────────────────────────────
        print("\n" + "-" * 60)
        print("3. Age of open incidents")
        print("-" * 60)

        submitted = pd.to_datetime(df["Submit Date"], errors="coerce")
        age_days = (pd.Timestamp.now() - submitted).dt.days
        print(age_days.describe().to_string())
        oldest = df.assign(age_days=age_days).sort_values("age_days", ascending=False).head(5)
        print(oldest[["Incident Number", "Status", "age_days"]].to_string())

    print("\n[INFO] Done.")


if __name__ == "__main__":
    main()
