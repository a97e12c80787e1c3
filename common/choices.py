"""Shared enumerations and choices used across apps."""

from django.db import models


class ActiveInactive(models.TextChoices):
    ACTIVE = "active", "Active"
    INACTIVE = "inactive", "Inactive"


class ItemType(models.TextChoices):
    """Kinds of stock-bearing items."""

    MATERIAL = "material", "Material"
    FRAGRANCE = "fragrance", "Fragrance"


class StockDirection(models.TextChoices):
    ADD = "add", "Add"
    SUBTRACT = "subtract", "Subtract"
    SET = "set", "Set"


class MovementType(models.TextChoices):
    PURCHASE_INBOUND = "purchase_inbound", "Purchase inbound"
    WORKORDER = "workorder", "Work order consumption"
    MANUAL_ADJUST = "manual_adjust", "Manual adjustment"
    QUICK_UPDATE = "quick_update", "Quick update"
    STOCKTAKE = "stocktake", "Stocktake adjustment"


class ChangeReason(models.TextChoices):
    """Reasons recorded on audit records (one per logical operation)."""

    PURCHASE = "purchase", "Purchase receipt"
    WORKORDER = "workorder", "Work order completion"
    MANUAL_ADJUSTMENT = "manual_adjustment", "Manual adjustment"
    QUICK_UPDATE = "quick_update", "Quick update"
    STOCKTAKE = "stocktake", "Stocktake"


class RelatedDocType(models.TextChoices):
    PURCHASE_ORDER = "purchase_order", "Purchase order"
    WORK_ORDER = "work_order", "Work order"
    MATERIAL_EDIT = "material_edit", "Material edit"
    FRAGRANCE_EDIT = "fragrance_edit", "Fragrance edit"
    MANUAL_ADJUST = "manual_adjust", "Manual adjustment"
    QUICK_UPDATE = "quick_update", "Quick update"
    STOCKTAKE = "stocktake", "Stocktake"


class PurchaseOrderStatus(models.TextChoices):
    """Lifecycle statuses for purchase orders."""

    DRAFT = "預報單", "Draft"
    ORDERED = "已訂購", "Ordered"
    RECEIVED = "已收貨", "Received"
    CANCELLED = "已取消", "Cancelled"


class WorkOrderStatus(models.TextChoices):
    """Lifecycle statuses for work orders."""

    UNCONFIRMED = "未確認", "Unconfirmed"
    FORECAST = "預報", "Forecast"
    IN_PROGRESS = "進行", "In progress"
    COMPLETED = "完工", "Completed"
    STOCKED = "入庫", "Stocked"


class QcStatus(models.TextChoices):
    PENDING = "未檢驗", "Not inspected"
    IN_INSPECTION = "檢驗中", "Inspecting"
    PASSED = "檢驗合格", "Passed"
    FAILED = "檢驗不合格", "Failed"


class FragranceType(models.TextChoices):
    COTTON = "棉芯", "Cotton wick"
    CERAMIC = "陶瓷芯", "Ceramic wick"
    UNIVERSAL = "棉陶芯通用", "Cotton/ceramic"


class FragranceStatus(models.TextChoices):
    ACTIVE = "啟用", "Active"
    STANDBY = "備用", "Standby"
    DISCARDED = "棄用", "Discarded"


class ProductStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    INACTIVE = "inactive", "Inactive"
    DISCONTINUED = "discontinued", "Discontinued"
