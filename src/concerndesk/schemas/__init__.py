"""Public schema exports."""

from .bulk_import import BulkImportOutcome, BulkImportRequest, BulkImportRowError
from .quota import (
	PackagePurchaseRequest,
	PackagePurchaseResult,
	QuotaStatus,
	UsageIncrementRequest,
	UsageIncrementResult,
)
from .support_request import SupportRequestCreate, SupportRequestRead
from .teacher import (
	PasswordResetRequest,
	PasswordResetResult,
	TeacherBulkChanges,
	TeacherBulkDeleteRequest,
	TeacherBulkDeleteResult,
	TeacherBulkUpdateRequest,
	TeacherBulkUpdateResult,
	TeacherCreate,
	TeacherRead,
	TeacherUpdate,
)

__all__ = [
	"BulkImportOutcome",
	"BulkImportRequest",
	"BulkImportRowError",
	"PackagePurchaseRequest",
	"PackagePurchaseResult",
	"PasswordResetRequest",
	"PasswordResetResult",
	"QuotaStatus",
	"SupportRequestCreate",
	"SupportRequestRead",
	"TeacherBulkChanges",
	"TeacherBulkDeleteRequest",
	"TeacherBulkDeleteResult",
	"TeacherBulkUpdateRequest",
	"TeacherBulkUpdateResult",
	"TeacherCreate",
	"TeacherRead",
	"TeacherUpdate",
	"UsageIncrementRequest",
	"UsageIncrementResult",
]
