"""Map Up Bank transaction resources onto Actual Budget's import schema.

Up id -> imported_id (the deduplication key), description -> payee_name, amount.valueInBaseUnits -> amount
(integer cents, copied as-is), the first 10 characters of createdAt -> date, message -> notes. Only settled
transactions reach this module, so every record is imported as cleared.
"""

from typing import Any

from pydantic import ValidationError

from up_actual_sync.core.errors import TransformContractViolation
from up_actual_sync.core.models import DestinationTransaction, SourceTransaction
from up_actual_sync.core.utils import format_cents, get_logger

logger = get_logger("up-actual-sync.transform")

DATE_LENGTH = len("YYYY-MM-DD")


def extract_date(iso_datetime: str) -> str:
    """Return the calendar date exactly as Up reported it, in Up's own offset.

    ``"2026-01-26T04:51:32+11:00"`` gives ``"2026-01-26"``. The string is sliced rather than parsed so the offset
    never shifts the date.
    """
    return iso_datetime[:DATE_LENGTH]


def parse_source(resource: dict[str, Any] | SourceTransaction) -> SourceTransaction:
    """Validate one API resource into a :class:`SourceTransaction`."""
    if isinstance(resource, SourceTransaction):
        return resource
    transaction_id = resource.get("id") if isinstance(resource, dict) else None
    try:
        return SourceTransaction.from_resource(resource)
    except KeyError as exc:
        raise TransformContractViolation(transaction_id, str(exc.args[0])) from exc
    except TypeError as exc:
        raise TransformContractViolation(transaction_id, "attributes") from exc
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        raise TransformContractViolation(transaction_id, field, first["msg"]) from exc


def transform_one(resource: dict[str, Any] | SourceTransaction) -> DestinationTransaction:
    """Transform a single Up Bank transaction into Actual Budget format."""
    source = parse_source(resource)
    return DestinationTransaction(
        imported_id=source.id,
        payee_name=source.description,
        amount=source.amount.value_in_base_units,
        date=extract_date(source.created_at),
        notes=source.message or None,
        cleared=True,
    )


def transform_batch(resources: list[dict[str, Any]] | list[SourceTransaction]) -> list[DestinationTransaction]:
    """Transform every transaction, preserving order, and log incoming/outgoing totals."""
    logger.info(f"Transforming {len(resources)} transactions from Up to Actual format")
    transformed = [transform_one(resource) for resource in resources]

    incoming = [txn.amount for txn in transformed if txn.amount > 0]
    outgoing = [txn.amount for txn in transformed if txn.amount < 0]
    logger.debug(
        f"Transformation summary: total={len(transformed)} "
        f"incoming={len(incoming)} ({format_cents(sum(incoming))}) "
        f"outgoing={len(outgoing)} ({format_cents(sum(outgoing))})"
    )
    return transformed
