"""
Typed Exception Hierarchy for the Authorization Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Authorization outcomes are compliance-relevant. Callers must be able to tell
"the user may not do this" apart from "we could not find out" without parsing
message strings:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example - WRONG way to handle errors:
    try:
        authz.check_permission("journal_entry:post", resource)
    except Exception as e:
        if "denied" in str(e):  # FRAGILE - also catches load failures
            return forbidden()

Example - RIGHT way (what this module enables):
    try:
        authz.check_permission("journal_entry:post", resource)
    except PermissionDeniedError as e:
        return forbidden(code=e.code, action=e.action, reason=e.reason)
    except PolicyLoadError:
        return unavailable()  # never fail open

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from AuthorizationKernelError:

    AuthorizationKernelError (base)
    |
    +-- AccessError
    |   +-- PermissionDeniedError
    |   +-- MembershipInvalidError
    |
    +-- PolicyError
    |   +-- PolicyLoadError
    |   +-- PolicyNotFoundError
    |   +-- SystemPolicyProtectionError
    |   +-- DuplicatePolicyNameError
    |   +-- DuplicatePolicyIdError
    |   +-- PolicyValidationError
    |       +-- InvalidPolicyIdError
    |       +-- InvalidPolicyConditionError
    |       +-- PolicyPriorityError
    |       +-- UnknownResourceTypeError
    |
    +-- AuditError
        +-- AuditWriteError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category   | Code                       | When Raised
-----------|----------------------------|--------------------------------------------
Access     | PERMISSION_DENIED          | RBAC and ABAC refused the action (403)
           | MEMBERSHIP_INVALID         | No active membership in the organization
-----------|----------------------------|--------------------------------------------
Policy     | POLICY_LOAD_FAILED         | Policy set could not be fetched
           | POLICY_NOT_FOUND           | Policy ID doesn't exist
           | SYSTEM_POLICY_PROTECTED    | Update/delete of a system policy
           | DUPLICATE_POLICY_NAME      | Name already used in the organization
           | DUPLICATE_POLICY_ID        | Policy ID already stored
           | POLICY_VALIDATION_FAILED   | Malformed policy (base)
           | INVALID_POLICY_ID          | Policy ID is not a UUID
           | INVALID_POLICY_CONDITION   | Condition has an invalid shape/value
           | POLICY_PRIORITY_OUT_OF_RANGE | Priority outside the allowed band
           | UNKNOWN_RESOURCE_TYPE      | Resource type not in the vocabulary
-----------|----------------------------|--------------------------------------------
Audit      | AUDIT_WRITE_FAILED         | Denial could not be recorded

===============================================================================
HANDLING PATTERNS
===============================================================================

1. NEVER TREAT LOAD FAILURES AS "NO POLICIES":

    except PolicyLoadError:
        raise  # the protected operation fails; it does not fall back to RBAC

2. AUDIT FAILURES ARE FATAL:

    except AuditWriteError as e:
        alert_compliance(e)  # the denial happened but was not recorded
        raise

3. VALIDATION ERRORS ARE AUTHORING-TIME ONLY:

    PolicyValidationError subclasses come from policy CRUD and pack loading,
    never from evaluation.
"""


class AuthorizationKernelError(Exception):
    """
    Base exception for all authorization kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "AUTHORIZATION_KERNEL_ERROR"


# Access exceptions


class AccessError(AuthorizationKernelError):
    """Base exception for access decisions."""

    code: str = "ACCESS_ERROR"


class PermissionDeniedError(AccessError):
    """The subject is not allowed to perform the action."""

    code: str = "PERMISSION_DENIED"

    def __init__(
        self,
        action: str,
        resource_type: str,
        reason: str,
        resource_id: str | None = None,
        denied_by_policy: bool = False,
        policy_ids: tuple[str, ...] = (),
    ):
        self.action = action
        self.resource_type = resource_type
        self.resource_id = resource_id
        self.reason = reason
        self.denied_by_policy = denied_by_policy
        self.policy_ids = policy_ids
        target = resource_type if resource_id is None else f"{resource_type} {resource_id}"
        super().__init__(f"Permission denied for '{action}' on {target}: {reason}")


class MembershipInvalidError(AccessError):
    """
    Subject has no active membership in the target organization.

    Distinct from PermissionDeniedError: the question "may this subject act"
    cannot even be asked.
    """

    code: str = "MEMBERSHIP_INVALID"

    def __init__(self, user_id: str, organization_id: str, status: str | None = None):
        self.user_id = user_id
        self.organization_id = organization_id
        self.status = status
        detail = "no membership" if status is None else f"membership is {status}"
        super().__init__(
            f"User {user_id} has no active membership in organization "
            f"{organization_id} ({detail})"
        )


# Policy exceptions


class PolicyError(AuthorizationKernelError):
    """Base exception for policy-related errors."""

    code: str = "POLICY_ERROR"


class PolicyLoadError(PolicyError):
    """
    The active policy set for an organization could not be loaded.

    Must never be interpreted as "the organization has no policies".
    """

    code: str = "POLICY_LOAD_FAILED"

    def __init__(self, organization_id: str, reason: str):
        self.organization_id = organization_id
        self.reason = reason
        super().__init__(
            f"Failed to load policies for organization {organization_id}: {reason}"
        )


class PolicyNotFoundError(PolicyError):
    """Policy with given ID was not found."""

    code: str = "POLICY_NOT_FOUND"

    def __init__(self, policy_id: str):
        self.policy_id = policy_id
        super().__init__(f"Policy not found: {policy_id}")


class SystemPolicyProtectionError(PolicyError):
    """System policies cannot be modified or deleted by ordinary callers."""

    code: str = "SYSTEM_POLICY_PROTECTED"

    def __init__(self, policy_id: str, operation: str):
        self.policy_id = policy_id
        self.operation = operation
        super().__init__(f"Cannot {operation} system policy: {policy_id}")


class DuplicatePolicyNameError(PolicyError):
    """A policy with the same name already exists in the organization."""

    code: str = "DUPLICATE_POLICY_NAME"

    def __init__(self, organization_id: str, name: str):
        self.organization_id = organization_id
        self.name = name
        super().__init__(
            f"Policy named '{name}' already exists in organization {organization_id}"
        )


class DuplicatePolicyIdError(PolicyError):
    """A policy with the same ID is already stored; create never overwrites."""

    code: str = "DUPLICATE_POLICY_ID"

    def __init__(self, policy_id: str):
        self.policy_id = policy_id
        super().__init__(f"Policy already exists: {policy_id}")


class PolicyValidationError(PolicyError):
    """Base exception for malformed policies (authoring-time only)."""

    code: str = "POLICY_VALIDATION_FAILED"

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class InvalidPolicyIdError(PolicyValidationError):
    """Policy identifier is not a valid UUID."""

    code: str = "INVALID_POLICY_ID"

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Invalid policy id: {value!r}", field="id")


class InvalidPolicyConditionError(PolicyValidationError):
    """A policy condition has an invalid shape or value."""

    code: str = "INVALID_POLICY_CONDITION"

    def __init__(self, field: str, reason: str):
        self.reason = reason
        super().__init__(f"Invalid condition '{field}': {reason}", field=field)


class PolicyPriorityError(PolicyValidationError):
    """Policy priority is outside the allowed band."""

    code: str = "POLICY_PRIORITY_OUT_OF_RANGE"

    def __init__(self, priority: object, min_allowed: int, max_allowed: int):
        self.priority = priority
        self.min_allowed = min_allowed
        self.max_allowed = max_allowed
        super().__init__(
            f"Priority {priority!r} must be an integer in [{min_allowed}, {max_allowed}]",
            field="priority",
        )


class UnknownResourceTypeError(PolicyValidationError):
    """Resource type is not part of the closed resource vocabulary."""

    code: str = "UNKNOWN_RESOURCE_TYPE"

    def __init__(self, resource_type: str, valid_types: tuple[str, ...]):
        self.resource_type = resource_type
        self.valid_types = valid_types
        super().__init__(
            f"Unknown resource type {resource_type!r}; "
            f"valid types: {', '.join(valid_types)}",
            field="resource.type",
        )


# Audit exceptions


class AuditError(AuthorizationKernelError):
    """Base exception for audit-related errors."""

    code: str = "AUDIT_ERROR"


class AuditWriteError(AuditError):
    """
    A denial could not be recorded in the authorization audit log.

    Authorization denials are compliance-relevant events; a failed write is
    surfaced to the caller and never downgraded to a warning.
    """

    code: str = "AUDIT_WRITE_FAILED"

    def __init__(self, action: str, organization_id: str, reason: str):
        self.action = action
        self.organization_id = organization_id
        self.reason = reason
        super().__init__(
            f"Failed to record authorization denial for '{action}' in "
            f"organization {organization_id}: {reason}"
        )
