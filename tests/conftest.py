"""Pytest configuration and fixtures."""

import base64
import json
import os

import pytest

# Set environment variables before imports
os.environ["TABLE_NAME"] = "abtrack-test"
os.environ["STAGE"] = "test"
os.environ["DEFAULT_CURRENCY"] = "TRY"
os.environ["AWS_DEFAULT_REGION"] = "us-east-1"
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"

PROJECT_ID = "proj-1"
EXPERIMENT_ID = "exp-1"
CONTROL_ID = "var-control"
VARIANT_ID = "var-b"
GOAL_ID = "goal-signup"


@pytest.fixture
def aws_credentials():
    """Mock AWS credentials for moto."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "us-east-1"


@pytest.fixture
def dynamodb_table(aws_credentials):
    """Create mocked DynamoDB table."""
    import boto3
    from moto import mock_aws

    with mock_aws():
        dynamodb = boto3.resource("dynamodb", region_name="us-east-1")

        table = dynamodb.create_table(
            TableName="abtrack-test",
            KeySchema=[
                {"AttributeName": "PK", "KeyType": "HASH"},
                {"AttributeName": "SK", "KeyType": "RANGE"},
            ],
            AttributeDefinitions=[
                {"AttributeName": "PK", "AttributeType": "S"},
                {"AttributeName": "SK", "AttributeType": "S"},
                {"AttributeName": "GSI1PK", "AttributeType": "S"},
                {"AttributeName": "GSI1SK", "AttributeType": "S"},
            ],
            GlobalSecondaryIndexes=[
                {
                    "IndexName": "GSI1",
                    "KeySchema": [
                        {"AttributeName": "GSI1PK", "KeyType": "HASH"},
                        {"AttributeName": "GSI1SK", "KeyType": "RANGE"},
                    ],
                    "Projection": {"ProjectionType": "ALL"},
                },
            ],
            BillingMode="PAY_PER_REQUEST",
        )

        table.wait_until_exists()

        yield table


@pytest.fixture
def store(dynamodb_table):
    """Create a TrackingStore bound to the mocked table."""
    from abtrack.repositories.store import TrackingStore

    return TrackingStore(table_name=dynamodb_table.name, region_name="us-east-1")


@pytest.fixture
def seeded_experiment(store):
    """Create a running experiment with two variants and one paired goal."""
    from abtrack.models.experiment import Experiment, ExperimentGoal, ExperimentStatus, Variant

    store.experiments.save_experiment(
        Experiment(
            id=EXPERIMENT_ID,
            project_id=PROJECT_ID,
            name="Checkout button",
            status=ExperimentStatus.RUNNING,
        )
    )
    store.experiments.save_variant(
        Variant(id=CONTROL_ID, experiment_id=EXPERIMENT_ID, name="Control", is_control=True)
    )
    store.experiments.save_variant(
        Variant(id=VARIANT_ID, experiment_id=EXPERIMENT_ID, name="Green button")
    )
    store.experiments.save_experiment_goal(
        ExperimentGoal(experiment_id=EXPERIMENT_ID, goal_id=GOAL_ID, is_primary=True)
    )

    return {
        "project_id": PROJECT_ID,
        "experiment_id": EXPERIMENT_ID,
        "control_id": CONTROL_ID,
        "variant_id": VARIANT_ID,
        "goal_id": GOAL_ID,
    }


@pytest.fixture
def sdk_event():
    """Create a tracking event as the client SDK sends it."""
    def _create_event(event_type: str = "SESSION_START", **fields):
        event = {
            "projectId": PROJECT_ID,
            "visitorId": "visitor-abc",
            "sessionId": "session-1",
            "timestamp": "2024-03-01T12:00:00.000Z",
            "eventType": event_type,
            "url": "https://shop.example.com/?utm_source=google&utm_medium=cpc&utm_campaign=spring",
            "userAgent": (
                "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
                "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
            ),
            "referrer": "https://www.google.com/",
        }
        event.update(fields)
        return event

    return _create_event


def encode_record(payload, record_id: str = "record-1") -> dict:
    """Wrap a JSON payload into a base64 Firehose record."""
    data = base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")
    return {"recordId": record_id, "data": data}


@pytest.fixture
def firehose_record():
    """Create a Firehose record from a payload."""
    return encode_record


class LambdaContext:
    """Mock Lambda context."""

    def __init__(self):
        self.function_name = "test-function"
        self.memory_limit_in_mb = 128
        self.invoked_function_arn = "arn:aws:lambda:us-east-1:123456789:function:test"
        self.aws_request_id = "test-request-id"

    def get_remaining_time_in_millis(self):
        return 30000


@pytest.fixture
def lambda_context():
    """Create a mock Lambda context."""
    return LambdaContext()
