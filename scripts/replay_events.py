#!/usr/bin/env python3
"""Replay a JSON file of SDK events through the ingestion pipeline.

The file holds one event object or an array of them. Each event becomes one
Firehose-shaped record unless --single-record is given.
"""

import argparse
import base64
import json
import os
import sys

import boto3

# Add the shared layer to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src", "layers", "shared", "python"))

from abtrack.repositories.store import TrackingStore
from abtrack.services.ingestion import EventIngestionService


def build_records(events: list[dict], single_record: bool) -> list[dict]:
    """Wrap events into base64 Firehose records."""
    payloads = [events] if single_record else events
    return [
        {
            "recordId": f"replay-{index}",
            "data": base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii"),
        }
        for index, payload in enumerate(payloads)
    ]


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Replay tracking events")
    parser.add_argument("path", help="JSON file with one event or a list of events")
    parser.add_argument("--stage", default="dev", help="Deployment stage")
    parser.add_argument("--region", default="us-east-1", help="AWS region")
    parser.add_argument(
        "--single-record",
        action="store_true",
        help="Send all events in one record, processed in file order",
    )
    args = parser.parse_args()

    with open(args.path, encoding="utf-8") as f:
        loaded = json.load(f)
    events = loaded if isinstance(loaded, list) else [loaded]

    table_name = f"abtrack-{args.stage}"
    dynamodb = boto3.resource("dynamodb", region_name=args.region)

    with TrackingStore(table_name=table_name, dynamodb=dynamodb) as store:
        result = EventIngestionService(store).process_batch(
            build_records(events, args.single_record)
        )

    for record in result.records:
        statuses = ", ".join(e.status.value for e in record.events) or "-"
        print(f"{record.record_id}: {record.outcome.value} [{statuses}]")
    print(f"\nAccepted {result.accepted}, failed {result.failed}: {result.event_totals()}")


if __name__ == "__main__":
    main()
