"""ORM models for authorization policies and the denial audit log."""

from authz_kernel.models.authorization_audit import AuthorizationAuditLogModel
from authz_kernel.models.policy import OrganizationPolicyModel

__all__ = [
    "OrganizationPolicyModel",
    "AuthorizationAuditLogModel",
]
