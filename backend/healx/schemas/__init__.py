from healx.schemas.surgical_item import (
    SurgicalItemCreate,
    SurgicalItemResponse,
    SurgicalItemListResponse,
    StockUpdateRequest,
    StockUpdateResponse,
    AutoRestockPolicyView,
)
from healx.schemas.restock import (
    RestockRunOptions,
    RestockComputation,
    RestockApplication,
    RestockResult,
    BatchReport,
    RestockTriggerResponse,
    NotificationResult,
    SchedulerStatus,
    AutoRestockConfigureRequest,
    AutoRestockItemStatus,
    AutoRestockStatusSummary,
    RestockHistoryView,
    NotificationView,
)
