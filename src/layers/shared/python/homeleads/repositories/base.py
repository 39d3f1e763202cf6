"""Base repository class for DynamoDB operations."""

import os
from typing import Any, Generic, TypeVar

import boto3
import structlog
from boto3.dynamodb.types import TypeSerializer
from botocore.exceptions import ClientError

from homeleads.models.base import BaseModel
from homeleads.utils.exceptions import ConflictError

logger = structlog.get_logger()

T = TypeVar("T", bound=BaseModel)

_serializer = TypeSerializer()


class BaseRepository(Generic[T]):
    """Base repository for the single-table design.

    Provides CRUD and GSI queries, plus transactional writes for
    uniqueness reservations.
    """

    def __init__(
        self,
        model_class: type[T],
        table_name: str | None = None,
    ):
        """Initialize repository.

        Args:
            model_class: The Pydantic model class for this repository.
            table_name: DynamoDB table name. Defaults to TABLE_NAME env var.
        """
        self.model_class = model_class
        self.table_name = table_name or os.environ.get("TABLE_NAME", "homeleads-dev")
        self._dynamodb = None
        self._table = None
        self._client = None

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

    @property
    def client(self):
        """Low-level client for transactions (lazy initialization)."""
        if self._client is None:
            self._client = boto3.client("dynamodb")
        return self._client

    def _build_key(self, pk: str, sk: str) -> dict[str, str]:
        return {"PK": pk, "SK": sk}

    def _to_item(self, item: T) -> dict[str, Any]:
        """Full DynamoDB item including primary and index keys."""
        db_item = item.to_dynamodb()
        db_item.update(item.get_keys())
        db_item.update(item.get_index_keys())
        return db_item

    def get(self, pk: str, sk: str) -> T | None:
        """Get an item by its primary key.

        Returns:
            Model instance or None if not found.
        """
        try:
            response = self.table.get_item(Key=self._build_key(pk, sk))
            item = response.get("Item")

            if not item:
                return None

            return self.model_class.from_dynamodb(item)

        except ClientError as e:
            logger.error("DynamoDB get_item failed", error=str(e), pk=pk, sk=sk)
            raise

    def put(self, item: T, condition_expression: str | None = None) -> T:
        """Put an item into DynamoDB.

        Args:
            item: Model instance to save.
            condition_expression: Optional condition expression.

        Returns:
            The saved model instance.

        Raises:
            ConflictError: If the condition fails.
        """
        try:
            item.update_timestamp()
            db_item = self._to_item(item)

            kwargs: dict[str, Any] = {"Item": db_item}
            if condition_expression:
                kwargs["ConditionExpression"] = condition_expression

            self.table.put_item(**kwargs)

            logger.debug(
                "Item saved",
                pk=db_item["PK"],
                sk=db_item["SK"],
                model=self.model_class.__name__,
            )

            return item

        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                raise ConflictError("Item already exists")
            logger.error("DynamoDB put_item failed", error=str(e))
            raise

    def create(self, item: T) -> T:
        """Create a new item (fails if exists).

        Raises:
            ConflictError: If item already exists.
        """
        return self.put(item, condition_expression="attribute_not_exists(PK)")

    def update(self, item: T) -> T:
        """Overwrite an existing item, bumping its version. Last write wins."""
        item.increment_version()
        item.update_timestamp()

        try:
            db_item = self._to_item(item)
            self.table.put_item(Item=db_item)

            logger.debug("Item updated", pk=db_item["PK"], sk=db_item["SK"], version=item.version)
            return item

        except ClientError as e:
            logger.error("DynamoDB update failed", error=str(e))
            raise

    def delete(self, pk: str, sk: str) -> bool:
        """Delete an item.

        Returns:
            True if deleted, False if not found.
        """
        try:
            self.table.delete_item(
                Key=self._build_key(pk, sk),
                ConditionExpression="attribute_exists(PK)",
            )
            logger.debug("Item deleted", pk=pk, sk=sk)
            return True

        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                return False
            logger.error("DynamoDB delete_item failed", error=str(e))
            raise

    def query(
        self,
        pk: str,
        sk_begins_with: str | None = None,
        sk_equals: str | None = None,
        index_name: str | None = None,
        limit: int | None = None,
        scan_forward: bool = True,
        filter_expression: str | None = None,
        expression_values: dict | None = None,
        expression_names: dict | None = None,
        last_key: dict | None = None,
    ) -> tuple[list[T], dict | None]:
        """Query items by partition key.

        Args:
            pk: Partition key value (of the index when index_name is set).
            sk_begins_with: Sort key prefix condition.
            sk_equals: Exact sort key condition.
            index_name: Optional GSI name ("GSI1" or "GSI2").
            limit: Maximum items to evaluate (applied before the filter).
            scan_forward: Sort direction (True = ascending).
            filter_expression: Optional filter expression.
            expression_values: Extra expression attribute values.
            expression_names: Expression attribute names.
            last_key: Last evaluated key for pagination.

        Returns:
            Tuple of (items, last_evaluated_key).
        """
        pk_attr, sk_attr = ("PK", "SK") if not index_name else (f"{index_name}PK", f"{index_name}SK")

        key_condition = f"{pk_attr} = :pk"
        expr_values: dict[str, Any] = {":pk": pk}
        if sk_equals is not None:
            key_condition += f" AND {sk_attr} = :sk"
            expr_values[":sk"] = sk_equals
        elif sk_begins_with:
            key_condition += f" AND begins_with({sk_attr}, :sk)"
            expr_values[":sk"] = sk_begins_with

        if expression_values:
            expr_values.update(expression_values)

        kwargs: dict[str, Any] = {
            "KeyConditionExpression": key_condition,
            "ExpressionAttributeValues": expr_values,
            "ScanIndexForward": scan_forward,
        }
        if index_name:
            kwargs["IndexName"] = index_name
        if limit:
            kwargs["Limit"] = limit
        if filter_expression:
            kwargs["FilterExpression"] = filter_expression
        if expression_names:
            kwargs["ExpressionAttributeNames"] = expression_names
        if last_key:
            kwargs["ExclusiveStartKey"] = last_key

        try:
            response = self.table.query(**kwargs)
        except ClientError as e:
            logger.error("DynamoDB query failed", error=str(e), pk=pk)
            raise

        items = [self.model_class.from_dynamodb(item) for item in response.get("Items", [])]
        return items, response.get("LastEvaluatedKey")

    def query_all(self, pk: str, **kwargs: Any) -> list[T]:
        """Query every page of results for a partition."""
        results: list[T] = []
        last_key = None
        while True:
            items, last_key = self.query(pk, last_key=last_key, **kwargs)
            results.extend(items)
            if not last_key:
                return results

    def transact_write(self, operations: list[dict[str, Any]]) -> None:
        """Run a TransactWriteItems call.

        Each operation is ``{"Put": {"Item": {...}, "ConditionExpression": ...}}``
        or ``{"Delete": {"Key": {...}}}`` with plain Python values; the table
        name and attribute serialization are filled in here.

        Raises:
            ClientError: TransactionCanceledException is left to the caller,
                which knows which reservation collided.
        """
        transact_items = []
        for op in operations:
            (action, params), = op.items()
            params = dict(params)
            params["TableName"] = self.table_name
            for attr in ("Item", "Key"):
                if attr in params:
                    params[attr] = {k: _serializer.serialize(v) for k, v in params[attr].items()}
            if "ExpressionAttributeValues" in params:
                params["ExpressionAttributeValues"] = {
                    k: _serializer.serialize(v) for k, v in params["ExpressionAttributeValues"].items()
                }
            transact_items.append({action: params})

        self.client.transact_write_items(TransactItems=transact_items)

    @staticmethod
    def cancellation_codes(error: ClientError) -> list[str]:
        """Per-operation failure codes of a cancelled transaction."""
        reasons = error.response.get("CancellationReasons", [])
        return [r.get("Code", "None") for r in reasons]

    def batch_delete(self, keys: list[tuple[str, str]]) -> None:
        """Delete many items by (pk, sk)."""
        if not keys:
            return
        try:
            with self.table.batch_writer() as batch:
                for pk, sk in keys:
                    batch.delete_item(Key=self._build_key(pk, sk))
            logger.debug("Batch delete completed", count=len(keys))
        except ClientError as e:
            logger.error("DynamoDB batch delete failed", error=str(e))
            raise
