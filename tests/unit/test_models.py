"""Tests for Pydantic models."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from abtrack.models.base import generate_ulid
from abtrack.models.conversion import GoalConversion
from abtrack.models.daily_stat import ExperimentDailyStat, utc_day
from abtrack.models.event import Event, IncomingEvent
from abtrack.models.live_log import LiveLog, LiveLogType
from abtrack.models.visitor import DeviceType, Visitor


class TestBaseModel:
    """Tests for BaseModel."""

    def test_generate_ulid(self):
        """Test ULID generation."""
        ulid1 = generate_ulid()
        ulid2 = generate_ulid()

        assert len(ulid1) == 26
        assert ulid1 != ulid2

    def test_model_timestamps(self):
        """Test automatic timestamps."""
        visitor = Visitor(project_id="proj-1", visitor_id="v-1")

        assert visitor.created_at is not None
        assert visitor.updated_at is not None
        assert visitor.version == 1

    def test_version_field_described(self):
        """Test that the schema version field defaults to 1 and is documented."""
        field = Visitor.model_fields["version"]

        assert field.default == 1
        assert field.description == "Item schema version"

    def test_floats_serialized_as_decimal(self):
        """Test that floats become Decimals for DynamoDB."""
        conversion = GoalConversion(
            goal_id="goal-1",
            experiment_id="exp-1",
            variant_id="var-1",
            visitor_id="visitor-db-1",
            value=19.99,
            currency="TRY",
            conversion_data={"url": "https://example.com", "discount": 0.5},
        )

        db_item = conversion.to_dynamodb()

        assert db_item["value"] == Decimal("19.99")
        assert db_item["conversion_data"]["discount"] == Decimal("0.5")
        assert isinstance(db_item["created_at"], str)

    def test_none_values_dropped(self):
        """Test that None attributes are not written."""
        visitor = Visitor(project_id="proj-1", visitor_id="v-1")

        db_item = visitor.to_dynamodb()

        assert "referrer" not in db_item
        assert "utm_source" not in db_item
        assert db_item["device_type"] == "desktop"

    def test_model_deserialization(self):
        """Test DynamoDB deserialization ignores key attributes."""
        db_item = {
            "PK": "PROJECT#proj-1",
            "SK": "VISITOR#v-1",
            "id": "visitor-db-1",
            "project_id": "proj-1",
            "visitor_id": "v-1",
            "device_type": "mobile",
            "visit_count": Decimal("3"),
            "page_views": Decimal("7"),
            "first_seen": "2024-01-01T12:00:00+00:00",
            "created_at": "2024-01-01T12:00:00+00:00",
            "updated_at": "2024-01-01T12:00:00+00:00",
        }

        visitor = Visitor.from_dynamodb(db_item)

        assert visitor.id == "visitor-db-1"
        assert visitor.device_type == DeviceType.MOBILE.value
        assert visitor.visit_count == 3
        assert visitor.page_views == 7
        assert visitor.first_seen == datetime(2024, 1, 1, 12, tzinfo=timezone.utc)


class TestKeys:
    """Tests for DynamoDB key derivation."""

    def test_visitor_keys(self):
        """Test visitor keys."""
        visitor = Visitor(project_id="proj-1", visitor_id="v-1")

        assert visitor.get_keys() == {"PK": "PROJECT#proj-1", "SK": "VISITOR#v-1"}

    def test_event_keys(self):
        """Test event keys and project index keys."""
        event = Event(
            id="01HEVENT",
            project_id="proj-1",
            visitor_id="visitor-db-1",
            event_type="PAGE_VIEW",
        )

        assert event.get_keys() == {"PK": "VISITOR#visitor-db-1", "SK": "EVENT#01HEVENT"}
        assert event.get_gsi1_keys() == {
            "GSI1PK": "PROJECT#proj-1#EVENTS",
            "GSI1SK": "01HEVENT",
        }

    def test_daily_stat_keys(self):
        """Test daily stat keys use the ISO day."""
        stat = ExperimentDailyStat(experiment_id="exp-1", day=date(2024, 3, 2))

        assert stat.get_sk() == "DAY#2024-03-02"
        assert stat.impressions == 0
        assert stat.revenue == 0


class TestIncomingEvent:
    """Tests for IncomingEvent."""

    def test_camel_case_aliases(self):
        """Test that SDK field names populate the model."""
        event = IncomingEvent.model_validate(
            {
                "projectId": "proj-1",
                "visitorId": "v-1",
                "eventType": "GOAL_CONVERSION",
                "goalId": "goal-1",
                "attributedExperiments": [
                    {"experimentId": "exp-1", "variantId": "var-1"},
                ],
            }
        )

        assert event.project_id == "proj-1"
        assert event.goal_id == "goal-1"
        assert event.attributed_experiments[0].variant_id == "var-1"

    def test_missing_fields(self):
        """Test detection of absent correlation fields."""
        event = IncomingEvent.model_validate({"projectId": "proj-1", "visitorId": ""})

        assert event.missing_fields() == ["visitorId", "eventType"]

    def test_unknown_fields_pass_through(self):
        """Test that unknown fields survive in the payload."""
        event = IncomingEvent.model_validate(
            {
                "projectId": "proj-1",
                "visitorId": "v-1",
                "eventType": "CLICK",
                "selector": "#buy",
            }
        )

        payload = event.payload()

        assert payload["selector"] == "#buy"
        assert payload["eventType"] == "CLICK"
        assert "goalId" not in payload

    @pytest.mark.parametrize(
        "timestamp,expected",
        [
            ("2024-03-01T12:00:00.000Z", datetime(2024, 3, 1, 12, tzinfo=timezone.utc)),
            ("2024-03-01T23:30:00-05:00", datetime(2024, 3, 2, 4, 30, tzinfo=timezone.utc)),
            ("2024-03-01T08:00:00", datetime(2024, 3, 1, 8, tzinfo=timezone.utc)),
        ],
    )
    def test_occurred_at_is_utc(self, timestamp, expected):
        """Test timestamp parsing normalizes to UTC."""
        event = IncomingEvent(timestamp=timestamp)

        assert event.occurred_at() == expected

    def test_occurred_at_falls_back_to_now(self):
        """Test that an unparseable timestamp uses the processing time."""
        before = datetime.now(timezone.utc)

        occurred_at = IncomingEvent(timestamp="yesterday-ish").occurred_at()

        assert occurred_at >= before
        assert occurred_at.tzinfo is not None


class TestDailyStatDay:
    """Tests for UTC day bucketing."""

    def test_utc_day_from_offset(self):
        """Test that a late local time lands on the next UTC day."""
        moment = datetime(2024, 3, 1, 23, 30, tzinfo=timezone(timedelta(hours=-5)))

        assert utc_day(moment) == date(2024, 3, 2)

    def test_utc_day_from_naive(self):
        """Test that naive datetimes are taken as UTC."""
        assert utc_day(datetime(2024, 3, 1, 23, 59)) == date(2024, 3, 1)


class TestLiveLog:
    """Tests for LiveLog."""

    def test_expires_after_a_day(self):
        """Test that entries expire 24 hours after creation."""
        entry = LiveLog(
            experiment_id="exp-1",
            visitor_id="v-1",
            log_type=LiveLogType.VISITOR_ASSIGNED,
            message="Visitor assigned to Control",
        )

        lifetime = entry.expires_at - entry.created_at
        assert abs(lifetime - timedelta(hours=24)) < timedelta(seconds=1)
        assert entry.ttl == int(entry.expires_at.timestamp())
        assert entry.log_type == "VISITOR_ASSIGNED"
