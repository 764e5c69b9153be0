"""Provider-level exceptions raised by the reconciler and lookups."""
from __future__ import annotations
from typing import Any, Optional


class ProviderError(Exception):
    """Base exception for provider operations.
    
    Attributes:
        state: Recorded state at the time of failure, when the operation had
            already committed remote changes (None otherwise)
    """
    
    def __init__(self, message: str = "", state: Optional[Any] = None):
        self.state = state
        super().__init__(message)


class ValidationError(ProviderError, ValueError):
    """Configuration or request rejected by a local rule."""
    pass


class ReconcileError(ProviderError):
    """A remote step failed part-way through create, update, read or delete.
    
    Attributes:
        step: Name of the step that failed (e.g., "assign admin roles")
        detail: Error message from the underlying failure
        state: Recorded state carrying the identifier and every change
            committed by earlier steps
    """
    
    def __init__(self, step: str, detail: str, state: Optional[Any] = None):
        self.step = step
        self.detail = detail
        super().__init__(f"failed to {step}: {detail}", state)


class StatusTransitionTimeout(ProviderError):
    """User never left its transitioning status within the allotted time."""
    
    def __init__(self, user_id: str, target: str, waited: float):
        self.user_id = user_id
        self.target = target
        self.waited = waited
        super().__init__(f"user {user_id} still transitioning to {target} after {waited:.1f}s")
