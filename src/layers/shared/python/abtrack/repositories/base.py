"""Base repository class for DynamoDB operations."""

import os
from typing import Any, Generic, TypeVar

import boto3
import structlog
from botocore.exceptions import ClientError

from abtrack.models.base import BaseModel
from abtrack.utils.exceptions import ConflictError

logger = structlog.get_logger()

T = TypeVar("T", bound=BaseModel)

DEFAULT_TABLE_NAME = "abtrack-dev"


def is_conditional_check_failure(error: ClientError) -> bool:
    """Whether a ClientError is a failed ConditionExpression."""
    return error.response["Error"]["Code"] == "ConditionalCheckFailedException"


class BaseRepository(Generic[T]):
    """Base repository for DynamoDB single-table design.

    Repositories built by ``TrackingStore`` share its table handle; a
    repository built on its own resolves the table lazily from TABLE_NAME.
    """

    def __init__(
        self,
        model_class: type[T],
        table_name: str | None = None,
        table: Any = None,
    ):
        """Initialize repository.

        Args:
            model_class: The Pydantic model class for this repository.
            table_name: DynamoDB table name. Defaults to TABLE_NAME env var.
            table: Optional shared boto3 Table resource.
        """
        self.model_class = model_class
        self.table_name = table_name or os.environ.get("TABLE_NAME", DEFAULT_TABLE_NAME)
        self._dynamodb = None
        self._table = table

    @property
    def dynamodb(self):
        """Get DynamoDB resource (lazy initialization)."""
        if self._dynamodb is None:
            self._dynamodb = boto3.resource("dynamodb")
        return self._dynamodb

    @property
    def table(self):
        """Get DynamoDB table (lazy initialization)."""
        if self._table is None:
            self._table = self.dynamodb.Table(self.table_name)
        return self._table

    def _build_key(self, pk: str, sk: str) -> dict[str, str]:
        """Build key dictionary for DynamoDB operations."""
        return {"PK": pk, "SK": sk}

    def get(self, pk: str, sk: str) -> T | None:
        """Get an item by its primary key.

        Args:
            pk: Partition key value.
            sk: Sort key value.

        Returns:
            Model instance or None if not found.
        """
        try:
            response = self.table.get_item(Key=self._build_key(pk, sk))
        except ClientError as e:
            logger.error("DynamoDB get_item failed", error=str(e), pk=pk, sk=sk)
            raise

        item = response.get("Item")
        if not item:
            return None
        return self.model_class.from_dynamodb(item)

    def put(
        self,
        item: T,
        condition_expression: str | None = None,
        extra_attributes: dict[str, Any] | None = None,
    ) -> T:
        """Put an item into DynamoDB.

        Args:
            item: Model instance to save.
            condition_expression: Optional condition expression.
            extra_attributes: Optional non-model attributes (GSI keys, ttl).

        Returns:
            The saved model instance.

        Raises:
            ConflictError: If the condition expression fails.
        """
        item.update_timestamp()

        db_item = item.to_dynamodb()
        db_item.update(item.get_keys())
        if extra_attributes:
            db_item.update(extra_attributes)

        kwargs: dict[str, Any] = {"Item": db_item}
        if condition_expression:
            kwargs["ConditionExpression"] = condition_expression

        try:
            self.table.put_item(**kwargs)
        except ClientError as e:
            if is_conditional_check_failure(e):
                raise ConflictError("Item already exists", conflict_type=self.model_class.__name__)
            logger.error("DynamoDB put_item failed", error=str(e), pk=db_item["PK"])
            raise

        logger.debug(
            "Item saved",
            pk=db_item["PK"],
            sk=db_item["SK"],
            model=self.model_class.__name__,
        )
        return item

    def create(self, item: T, extra_attributes: dict[str, Any] | None = None) -> T:
        """Create a new item (fails if exists).

        Raises:
            ConflictError: If item already exists.
        """
        return self.put(
            item,
            condition_expression="attribute_not_exists(PK)",
            extra_attributes=extra_attributes,
        )

    def update_attributes(
        self,
        pk: str,
        sk: str,
        set_values: dict[str, Any] | None = None,
        set_if_absent: dict[str, Any] | None = None,
        add_values: dict[str, Any] | None = None,
        condition_expression: str | None = None,
        return_values: str = "NONE",
    ) -> dict[str, Any]:
        """Apply one atomic UpdateItem.

        Every attribute name goes through an expression placeholder, so
        reserved words (``date``, ``ttl``, ``os``) need no special casing.

        Args:
            pk: Partition key value.
            sk: Sort key value.
            set_values: Attributes overwritten unconditionally.
            set_if_absent: Attributes written only when not already present.
            add_values: Numeric attributes incremented atomically (ADD).
            condition_expression: Optional condition expression.
            return_values: DynamoDB ReturnValues option.

        Returns:
            The returned attributes (empty when return_values is NONE).
        """
        names: dict[str, str] = {}
        values: dict[str, Any] = {}
        set_parts: list[str] = []
        add_parts: list[str] = []

        def placeholder(attr: str) -> tuple[str, str]:
            name_key = f"#{attr}"
            names[name_key] = attr
            return name_key, f":{attr}"

        for attr, value in (set_values or {}).items():
            name_key, value_key = placeholder(attr)
            set_parts.append(f"{name_key} = {value_key}")
            values[value_key] = value

        for attr, value in (set_if_absent or {}).items():
            name_key, value_key = placeholder(attr)
            set_parts.append(f"{name_key} = if_not_exists({name_key}, {value_key})")
            values[value_key] = value

        for attr, value in (add_values or {}).items():
            name_key, value_key = placeholder(attr)
            add_parts.append(f"{name_key} {value_key}")
            values[value_key] = value

        clauses = []
        if set_parts:
            clauses.append(f"SET {', '.join(set_parts)}")
        if add_parts:
            clauses.append(f"ADD {', '.join(add_parts)}")

        kwargs: dict[str, Any] = {
            "Key": self._build_key(pk, sk),
            "UpdateExpression": " ".join(clauses),
            "ExpressionAttributeNames": names,
            "ExpressionAttributeValues": values,
            "ReturnValues": return_values,
        }
        if condition_expression:
            kwargs["ConditionExpression"] = condition_expression

        response = self.table.update_item(**kwargs)
        return response.get("Attributes", {})

    def query(
        self,
        pk: str,
        sk_begins_with: str | None = None,
        index_name: str | None = None,
        limit: int | None = None,
        scan_forward: bool = True,
        last_key: dict | None = None,
    ) -> tuple[list[T], dict | None]:
        """Query items by partition key.

        Args:
            pk: Partition key value.
            sk_begins_with: Sort key prefix for begins_with condition.
            index_name: Optional GSI name (only GSI1 is defined).
            limit: Maximum items to return.
            scan_forward: Sort direction (True = ascending).
            last_key: Last evaluated key for pagination.

        Returns:
            Tuple of (items, last_evaluated_key).
        """
        pk_attr, sk_attr = ("GSI1PK", "GSI1SK") if index_name == "GSI1" else ("PK", "SK")

        if sk_begins_with:
            key_condition = f"{pk_attr} = :pk AND begins_with({sk_attr}, :sk_prefix)"
            expr_values = {":pk": pk, ":sk_prefix": sk_begins_with}
        else:
            key_condition = f"{pk_attr} = :pk"
            expr_values = {":pk": pk}

        kwargs: dict[str, Any] = {
            "KeyConditionExpression": key_condition,
            "ExpressionAttributeValues": expr_values,
            "ScanIndexForward": scan_forward,
        }
        if index_name:
            kwargs["IndexName"] = index_name
        if limit:
            kwargs["Limit"] = limit
        if last_key:
            kwargs["ExclusiveStartKey"] = last_key

        try:
            response = self.table.query(**kwargs)
        except ClientError as e:
            logger.error("DynamoDB query failed", error=str(e), pk=pk)
            raise

        items = [self.model_class.from_dynamodb(item) for item in response.get("Items", [])]
        return items, response.get("LastEvaluatedKey")
