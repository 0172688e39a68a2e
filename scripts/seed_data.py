#!/usr/bin/env python3
"""Seed a demo experiment into DynamoDB."""

import argparse
import os
import sys

import boto3

# Add the shared layer to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src", "layers", "shared", "python"))

from abtrack.models.experiment import Experiment, ExperimentGoal, ExperimentStatus, Variant
from abtrack.repositories.store import TrackingStore

DEMO_PROJECT_ID = "demo-project"


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Seed development data")
    parser.add_argument("--stage", default="dev", help="Deployment stage")
    parser.add_argument("--region", default="us-east-1", help="AWS region")
    args = parser.parse_args()

    table_name = f"abtrack-{args.stage}"
    print(f"Seeding data to table: {table_name}")

    dynamodb = boto3.resource("dynamodb", region_name=args.region)

    with TrackingStore(table_name=table_name, dynamodb=dynamodb) as store:
        seed(store)

    print("\nSeeding complete!")


def seed(store: TrackingStore) -> dict[str, str]:
    """Write the demo experiment, its variants and goal pairings.

    Returns:
        IDs of the seeded rows, keyed by role.
    """
    experiment = Experiment(
        id="exp-homepage-hero",
        project_id=DEMO_PROJECT_ID,
        name="Homepage Hero Test",
        status=ExperimentStatus.RUNNING,
        traffic_allocation=100,
        url_pattern="/*",
    )
    store.experiments.save_experiment(experiment)
    print(f"Created experiment: {experiment.name}")

    control = Variant(
        id="var-control",
        experiment_id=experiment.id,
        name="Control",
        is_control=True,
        traffic_weight=50,
    )
    test_variant = Variant(
        id="var-a",
        experiment_id=experiment.id,
        name="Variant A",
        is_control=False,
        traffic_weight=50,
        changes=[
            {"selector": "h1", "action": "setText", "value": "New design!"},
            {
                "selector": ".cta-button",
                "action": "setStyle",
                "value": "background-color: #10b981; color: white;",
            },
        ],
    )
    for variant in (control, test_variant):
        store.experiments.save_variant(variant)
        print(f"Created variant: {variant.name}")

    goals = [
        ExperimentGoal(experiment_id=experiment.id, goal_id="goal-cta-click", is_primary=True),
        ExperimentGoal(experiment_id=experiment.id, goal_id="goal-purchase", is_primary=False),
    ]
    for goal in goals:
        store.experiments.save_experiment_goal(goal)
    print("Linked goals to experiment")

    ids = {
        "project_id": DEMO_PROJECT_ID,
        "experiment_id": experiment.id,
        "control_id": control.id,
        "variant_id": test_variant.id,
    }
    for role, value in ids.items():
        print(f"  {role:<15} {value}")
    return ids


if __name__ == "__main__":
    main()
