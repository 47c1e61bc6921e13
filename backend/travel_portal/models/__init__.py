from travel_portal.models.user import User, Role, Permission, role_permissions
from travel_portal.models.travel_request import TravelRequest, TrfApprovalStep
from travel_portal.models.expense_claim import ExpenseClaim, ExpenseClaimItem, ClaimApprovalStep
from travel_portal.models.visa import VisaApplication, VisaDocument, VisaApprovalStep
from travel_portal.models.transport import TransportRequest, TransportApprovalStep
from travel_portal.models.accommodation import AccommodationRequest, AccommodationApprovalStep
from travel_portal.models.notification import Notification
from travel_portal.models.audit import AuditLog

__all__ = [
    "User", "Role", "Permission", "role_permissions",
    "TravelRequest", "TrfApprovalStep",
    "ExpenseClaim", "ExpenseClaimItem", "ClaimApprovalStep",
    "VisaApplication", "VisaDocument", "VisaApprovalStep",
    "TransportRequest", "TransportApprovalStep",
    "AccommodationRequest", "AccommodationApprovalStep",
    "Notification",
    "AuditLog",
]
