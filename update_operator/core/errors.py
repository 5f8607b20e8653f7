# update_operator/core/errors.py

# -----------------------------
# Base Errors
# -----------------------------

class UpdateOperatorError(Exception):
    """Base class for all update operator errors."""
    pass


# -----------------------------
# Intent / Policy Errors
# -----------------------------

class IntentValidationError(UpdateOperatorError):
    """Intent is structurally invalid (unknown state or sub-state)."""
    pass


class PolicyEvaluationError(UpdateOperatorError):
    """Policy could not evaluate a check. Never a denial."""
    pass


class InvalidIntentTransition(UpdateOperatorError):
    """Illegal lifecycle transition attempted."""
    pass


# -----------------------------
# Persistence Errors
# -----------------------------

class NodePersistenceError(UpdateOperatorError):
    pass


class NodeAlreadyExists(NodePersistenceError):
    pass


class NodeNotFound(NodePersistenceError):
    pass


class NodeConcurrencyError(NodePersistenceError):
    """Stored record version does not match the update."""
    pass
