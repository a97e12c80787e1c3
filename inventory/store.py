"""Storage abstraction for the stock-update protocol.

``StockStore`` and ``StockTransaction`` are the ports the protocol talks to;
``DjangoStockStore`` implements them on the ORM. Inside a transaction every
read must happen before the first write. Writes are compare-and-swap on the
row's ``version`` read earlier in the same transaction; a lost race rolls the
attempt back and the whole body is re-run with jittered backoff.
"""

import logging
import random
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Protocol, TypeVar

from common.choices import ItemType
from common.errors import Internal
from django.apps import apps
from django.conf import settings
from django.db import OperationalError, transaction
from django.db.models import F

from .records import MovementDraft, RecordDraft

logger = logging.getLogger("deerlab.inventory")

T = TypeVar("T")

ITEM_MODELS = {
    ItemType.MATERIAL: "materials.Material",
    ItemType.FRAGRANCE: "fragrances.Fragrance",
}

DOCUMENT_MODELS = {
    "purchase_order": "purchasing.PurchaseOrder",
    "work_order": "workorders.WorkOrder",
}


class StaleWriteError(Exception):
    """A compare-and-swap write found the row changed since it was read."""


class TransactionOrderError(Internal):
    default_message = "Read issued after a write in the same stock transaction"


@dataclass(frozen=True)
class ItemSnapshot:
    item_type: str
    item_id: int
    code: str
    name: str
    unit: str
    current_stock: Decimal
    version: int


@dataclass(frozen=True)
class DocumentSnapshot:
    doc_type: str
    doc_id: int
    code: str
    status: str
    version: int


class StockTransaction(Protocol):
    def get_document(self, doc_type: str, doc_id: int) -> DocumentSnapshot | None: ...

    def get_item(self, item_type: str, item_id: int) -> ItemSnapshot | None: ...

    def set_item_stock(self, item_type: str, item_id: int, new_stock: Decimal, timestamp: datetime) -> None: ...

    def append_movement(self, draft: MovementDraft) -> int: ...

    def append_audit_record(self, draft: RecordDraft) -> int: ...

    def update_document_status(self, doc_type: str, doc_id: int, new_status: str, metadata: dict) -> None: ...


class StockStore(Protocol):
    def run_transaction(self, body: Callable[[StockTransaction], T]) -> T: ...

    def find_item_by_code(self, item_type: str, code: str) -> int | None: ...

    def item_exists(self, item_type: str, item_id: int) -> bool: ...


def item_model(item_type: str):
    try:
        return apps.get_model(ITEM_MODELS[item_type])
    except KeyError:
        raise ValueError(f"Unknown item type: {item_type}")


def document_model(doc_type: str):
    try:
        return apps.get_model(DOCUMENT_MODELS[doc_type])
    except KeyError:
        raise ValueError(f"Unknown document type: {doc_type}")


class DjangoTransaction:
    """One attempt of a stock transaction, bound to an open ``atomic`` block."""

    def __init__(self):
        self._versions: dict[tuple[str, str, int], int] = {}
        self._writing = False

    def _read(self):
        if self._writing:
            raise TransactionOrderError()

    def _write(self):
        self._writing = True

    def get_document(self, doc_type, doc_id):
        self._read()
        model = document_model(doc_type)
        row = (
            model.objects.select_for_update()
            .filter(pk=doc_id)
            .values("pk", "code", "status", "version")
            .first()
        )
        if row is None:
            return None
        self._versions[("doc", doc_type, row["pk"])] = row["version"]
        return DocumentSnapshot(
            doc_type=doc_type,
            doc_id=row["pk"],
            code=row["code"],
            status=row["status"],
            version=row["version"],
        )

    def get_item(self, item_type, item_id):
        self._read()
        model = item_model(item_type)
        row = (
            model.objects.select_for_update()
            .filter(pk=item_id)
            .values("pk", "code", "name", "unit", "current_stock", "version")
            .first()
        )
        if row is None:
            return None
        self._versions[("item", item_type, row["pk"])] = row["version"]
        return ItemSnapshot(
            item_type=item_type,
            item_id=row["pk"],
            code=row["code"],
            name=row["name"],
            unit=row["unit"],
            current_stock=row["current_stock"],
            version=row["version"],
        )

    def _expected_version(self, kind, type_name, pk):
        try:
            return self._versions[(kind, type_name, pk)]
        except KeyError:
            raise TransactionOrderError(f"{type_name}:{pk} was not read in this transaction")

    def set_item_stock(self, item_type, item_id, new_stock, timestamp):
        self._write()
        version = self._expected_version("item", item_type, item_id)
        updated = (
            item_model(item_type)
            .objects.filter(pk=item_id, version=version)
            .update(
                current_stock=new_stock,
                last_stock_update=timestamp,
                updated_at=timestamp,
                version=F("version") + 1,
            )
        )
        if updated != 1:
            raise StaleWriteError(f"{item_type}:{item_id}")

    def append_movement(self, draft):
        from .models import StockMovement

        self._write()
        movement = StockMovement.objects.create(**vars(draft))
        return movement.pk

    def append_audit_record(self, draft):
        from .models import InventoryRecord

        self._write()
        record = InventoryRecord.objects.create(**vars(draft))
        return record.pk

    def update_document_status(self, doc_type, doc_id, new_status, metadata):
        self._write()
        version = self._expected_version("doc", doc_type, doc_id)
        model = document_model(doc_type)
        metadata = dict(metadata)
        lines = metadata.pop("lines", None)
        updated = model.objects.filter(pk=doc_id, version=version).update(
            status=new_status,
            version=F("version") + 1,
            **metadata,
        )
        if updated != 1:
            raise StaleWriteError(f"{doc_type}:{doc_id}")
        if lines:
            model.stamp_lines(doc_id, lines)


class DjangoStockStore:
    def __init__(self, *, max_attempts: int | None = None, backoff_base: float | None = None, backoff_max: float | None = None):
        self.max_attempts = max(1, int(max_attempts or getattr(settings, "INVENTORY_TXN_MAX_ATTEMPTS", 5)))
        self.backoff_base = (
            backoff_base if backoff_base is not None else getattr(settings, "INVENTORY_TXN_BACKOFF_BASE", 0.05)
        )
        self.backoff_max = backoff_max if backoff_max is not None else getattr(settings, "INVENTORY_TXN_BACKOFF_MAX", 1.0)

    def backoff(self, attempt: int) -> float:
        delay = min(self.backoff_max, self.backoff_base * (1.8 ** attempt))
        return delay * (0.6 + 0.4 * random.random())

    def run_transaction(self, body):
        attempt = 0
        while True:
            attempt += 1
            try:
                with transaction.atomic():
                    return body(DjangoTransaction())
            except (StaleWriteError, OperationalError) as exc:
                logger.warning(
                    "stock.txn_conflict",
                    extra={
                        "event": "stock.txn_conflict",
                        "attempt": attempt,
                        "max_attempts": self.max_attempts,
                        "error": str(exc),
                    },
                )
                if attempt >= self.max_attempts:
                    raise Internal(
                        "Stock update kept conflicting with concurrent changes",
                        details={"attempts": attempt},
                    ) from exc
                time.sleep(self.backoff(attempt))

    def find_item_by_code(self, item_type, code):
        if not code:
            return None
        return item_model(item_type).objects.filter(code=code).values_list("pk", flat=True).first()

    def item_exists(self, item_type, item_id):
        return item_model(item_type).objects.filter(pk=item_id).exists()


def default_store() -> DjangoStockStore:
    return DjangoStockStore()
