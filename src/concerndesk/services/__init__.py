"""Service layer exports."""

from . import (
	bulk_import_service,
	monthly_reset_service,
	quota_service,
	support_request_service,
	teacher_service,
)

__all__ = [
	"bulk_import_service",
	"monthly_reset_service",
	"quota_service",
	"support_request_service",
	"teacher_service",
]
