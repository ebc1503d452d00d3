"""
Exception hierarchy for relational neural gas
"""

from typing import Any, Optional


class RelationalGasError(Exception):
    """Base class for all errors raised by this package"""

    def __init__(self, message: str, component: Optional[Any] = None):
        self.message = message
        self.component = self._component_name(component)
        if self.component:
            message = f"{message} [{self.component}]"
        super().__init__(message)

    @staticmethod
    def _component_name(component: Optional[Any]) -> Optional[str]:
        if component is None or isinstance(component, str):
            return component
        if isinstance(component, type):
            return component.__name__
        return type(component).__name__


class InvalidConstructionError(RelationalGasError, ValueError):
    """Raised when a prototype set cannot be built from the given sizes"""


class PreconditionViolationError(RelationalGasError, ValueError):
    """Raised when training or assignment input violates a precondition"""


class UnknownConfigurationError(RelationalGasError, ValueError):
    """Raised for unrecognized strategy names or configuration values"""
