# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Walkthrough demonstrating core Remedy client operations.

This example shows:
- Loading a settings script and configuring logging
- Describing a form schema
- Constraint-based queries against a raw form
- Reading incidents through the entity layer
- Adding a work log entry to an incident

Prerequisites:
- pip install remedy-ars-client
- A settings script (default /etc/remedy/config, or $REMEDY_CONFIG)
"""

import sys

from remedy import RemedyClient, RemedyConfig
from remedy.core.errors import RemedyError
from remedy.core.log import configure_from_config
from remedy.forms.base import Section
from remedy.forms.incident import Incident


# Simple logging helper
def log_call(description):
    print(f"\n→ {description}")


def main():
    print("=" * 80)
    print("Remedy Client Walkthrough")
    print("=" * 80)

    # ============================================================================
    # 1. CONFIGURATION
    # ============================================================================
    print("\n" + "=" * 80)
    print("1. Configuration")
    print("=" * 80)

    path = input("Settings script [default: $REMEDY_CONFIG or /etc/remedy/config]: ").strip() or None

    log_call("RemedyConfig.load(...)")
    try:
        config = RemedyConfig.load(path)
    except RemedyError as exc:
        print(f"✗ {exc}")
        sys.exit(1)
    configure_from_config(config)
    print(f"✓ Loaded: {config.config_file}")
    print(f"  Server: {config.remedy_host}  Transport: {config.session_type}")

    with RemedyClient(config) as client:
        # ========================================================================
        # 2. SCHEMA
        # ========================================================================
        print("\n" + "=" * 80)
        print("2. Schema")
        print("=" * 80)

        log_call(f"client.schema.get('{Incident.table}')")
        meta = client.schema.get(Incident.table)
        print(f"✓ {len(meta.field_name_to_id)} fields, {len(meta.field_to_updatable)} updatable")

        log_call(f"client.schema.qualifier('{Incident.table}').build({{...}})")
        qualifier = client.schema.build_qualifier(Incident.table, {"Status": "-Resolved", "Urgency": "+=2-High"})
        print(f"✓ Qualifier: {qualifier}")

        # ========================================================================
        # 3. RAW QUERIES
        # ========================================================================
        print("\n" + "=" * 80)
        print("3. Raw Queries")
        print("=" * 80)

        group = config.workgroup or "%"
        log_call(f"client.query.where('{Incident.table}', {{'Assigned Group': '{group}', ...}}, max=5)")
        entries = client.query.where(
            Incident.table,
            {"Assigned Group": group, "Status": "-Resolved"},
            fields=["Incident Number", "Status", "Description"],
            max=5,
        )
        for row in client.records.to_dicts(entries):
            print(f"  {row.get('Incident Number')}  {row.get('Status', ''):<12}  {row.get('Description')}")
        print(f"✓ {len(entries)} entries")

        # ========================================================================
        # 4. INCIDENTS
        # ========================================================================
        print("\n" + "=" * 80)
        print("4. Incidents")
        print("=" * 80)

        log_call("Incident.read(client, status='open', max=5)")
        incidents = Incident.read(client, status="open", max=5)
        for inc in incidents:
            print(inc.summary_text())
        print(f"✓ {len(incidents)} open incidents")

        if not incidents:
            print("No open incidents; done.")
            return

        inc = incidents[0]
        log_call(f"Incident.read_one(client, incnum='{inc.inc_num}')")
        inc = Incident.read_one(client, incnum=inc.inc_num)
        print(inc.print_text())

        # ========================================================================
        # 5. WORK LOG
        # ========================================================================
        print("\n" + "=" * 80)
        print("5. Work Log")
        print("=" * 80)

        answer = input(f"Add a work log entry to {inc.inc_num}? [y/N]: ").strip().lower()
        if answer == "y":
            log_call("inc.worklog_create(...).save()")
            worklog = inc.worklog_create(
                description="Walkthrough note",
                details="Added by the remedy client walkthrough.",
                submitter=config.acting_user,
            )
            worklog.save()
            print(f"✓ Saved work log {worklog.request_id}")

        log_call("inc.render(Section.WORKLOG)")
        print(inc.render(Section.WORKLOG))

    print("\n" + "=" * 80)
    print("Walkthrough complete")
    print("=" * 80)


if __name__ == "__main__":
    main()
