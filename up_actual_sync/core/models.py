"""Pydantic models for the Up → Actual sync.

This module defines the records that flow through one sync attempt: the Up Bank transaction resource as fetched,
the Actual Budget transaction ready for import, the import outcome and the per-attempt result.
"""

from pydantic import BaseModel, ConfigDict, Field, StrictInt

SETTLED = "SETTLED"


class SourceMoney(BaseModel):
    """Up Bank money object. Only ``valueInBaseUnits`` is ever used for amounts."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    currency_code: str = Field(alias="currencyCode")
    value: str
    value_in_base_units: StrictInt = Field(alias="valueInBaseUnits")


class SourceTransaction(BaseModel):
    """A settled transaction resource as returned by the Up Bank API."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    status: str
    description: str
    message: str | None = None
    amount: SourceMoney
    # Kept as the raw ISO-8601 string; never parsed through a timezone-aware type
    created_at: str = Field(alias="createdAt")
    settled_at: str | None = Field(default=None, alias="settledAt")
    card_purchase_method: dict | None = Field(default=None, alias="cardPurchaseMethod")

    @classmethod
    def from_resource(cls, resource: dict) -> "SourceTransaction":
        """Flatten a JSON:API resource (``{"id": ..., "attributes": {...}}``) into the model."""
        return cls.model_validate({"id": resource["id"], **resource["attributes"]})


class DestinationTransaction(BaseModel):
    """A transaction in the shape Actual Budget's import expects."""

    model_config = ConfigDict(frozen=True)

    imported_id: str
    payee_name: str
    amount: StrictInt
    date: str
    notes: str | None = None
    cleared: bool = True


class ImportRecordError(BaseModel):
    """A single record the destination refused to import."""

    imported_id: str | None = None
    message: str


class ImportResult(BaseModel):
    """Outcome of one batch import, keyed by ``imported_id``."""

    added: list[str] = Field(default_factory=list)
    updated: list[str] = Field(default_factory=list)
    errors: list[ImportRecordError] = Field(default_factory=list)


class SyncAttemptResult(BaseModel):
    """Summary of one successful sync attempt."""

    result: ImportResult = Field(default_factory=ImportResult)
    fetched_count: int = 0
    duration_ms: int = 0

    @property
    def skipped(self) -> int:
        """Fetched records the destination neither added nor updated (already present and unchanged)."""
        return max(self.fetched_count - len(self.result.added) - len(self.result.updated), 0)

    def summary(self) -> dict:
        """Flat counts for logs and API responses."""
        return {
            "fetched": self.fetched_count,
            "added": len(self.result.added),
            "updated": len(self.result.updated),
            "skipped": self.skipped,
            "errors": len(self.result.errors),
            "duration_ms": self.duration_ms,
        }


class AccountSummary(BaseModel):
    """An Actual Budget account, as listed for finding ``ACTUAL_ACCOUNT_ID``."""

    id: str
    name: str | None = None
    closed: bool = False
    offbudget: bool = False
