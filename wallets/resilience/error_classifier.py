"""
Error Classifier - wallet connectors

Clasificación de errores ocurridos durante ``connect()``.

Categorías:
- USER_REJECTED: el usuario rechazó la solicitud en su wallet
- RESOURCE_UNAVAILABLE: la wallet ya está procesando otra solicitud (-32002)
- UNCATEGORIZED: cualquier otro error, se propaga sin modificar

No hay reintentos: cada fallo termina el ``connect()`` en curso con
exactamente un error.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional

from core.exceptions import (
    RESOURCE_UNAVAILABLE_CODE,
    ResourceUnavailableRpcError,
    UserRejectedRequestError,
    rpc_error_code,
)


class ErrorCategory(Enum):
    """Categorías de errores de conexión."""

    USER_REJECTED = "user_rejected"  # "User said no"
    RESOURCE_UNAVAILABLE = "resource_unavailable"  # "Check your wallet"
    UNCATEGORIZED = "uncategorized"  # Technical failure, propagated as is


class ErrorClassification:
    """Resultado de clasificación de un error."""

    def __init__(self, category: ErrorCategory, error: BaseException, code: Optional[int] = None):
        """
        Initialize error classification.

        Args:
            category: Categoría del error
            error: Excepción original
            code: Código RPC del proveedor (si existe)
        """
        self.category = category
        self.error = error
        self.code = code

    def to_exception(self) -> BaseException:
        """
        Exception to raise for this classification.

        Typed wrappers for rejections and busy wallets; the original object
        for everything else.
        """
        if self.category == ErrorCategory.USER_REJECTED:
            if isinstance(self.error, UserRejectedRequestError):
                return self.error
            return UserRejectedRequestError(self.error)
        if self.category == ErrorCategory.RESOURCE_UNAVAILABLE:
            return ResourceUnavailableRpcError(self.error)
        return self.error

    def __repr__(self) -> str:
        return f"ErrorClassification(category={self.category.value}, code={self.code})"


class ConnectErrorClassifier:
    """
    Clasificador de errores de ``connect()``.

    Ejemplo:
        classifier = ConnectErrorClassifier(connector.is_user_rejected_request_error)

        try:
            ...
        except Exception as e:
            raise classifier.classify(e).to_exception()
    """

    def __init__(self, is_user_rejected: Callable[[BaseException], bool], name: str = "ConnectErrorClassifier"):
        """
        Initialize error classifier.

        Args:
            is_user_rejected: Predicado de rechazo del conector
            name: Nombre del logger
        """
        self.logger = logging.getLogger(name)
        self._is_user_rejected = is_user_rejected

        # Métricas
        self._total_classified = 0
        self._category_counts: Dict[ErrorCategory, int] = {}

    def classify(self, error: BaseException) -> ErrorClassification:
        """
        Clasifica un error.

        El predicado de rechazo tiene prioridad sobre el código -32002.
        """
        self._total_classified += 1
        code = rpc_error_code(error)

        if self._is_user_rejected(error):
            classification = ErrorClassification(ErrorCategory.USER_REJECTED, error, code)
            self.logger.info(f"🙅 User rejected request: {error}")
        elif code == RESOURCE_UNAVAILABLE_CODE:
            classification = ErrorClassification(ErrorCategory.RESOURCE_UNAVAILABLE, error, code)
            self.logger.warning(f"⏳ Wallet busy with a pending request: {error}")
        else:
            classification = ErrorClassification(ErrorCategory.UNCATEGORIZED, error, code)
            self.logger.error(f"❌ Connection error ({type(error).__name__}): {str(error)[:100]}")

        self._category_counts[classification.category] = self._category_counts.get(classification.category, 0) + 1
        return classification

    def get_metrics(self) -> Dict[str, Any]:
        """Obtiene métricas del clasificador."""
        return {
            "total_classified": self._total_classified,
            "category_counts": {cat.value: count for cat, count in self._category_counts.items()},
        }

    def reset_metrics(self) -> None:
        """Resetea métricas."""
        self._total_classified = 0
        self._category_counts.clear()
        self.logger.info("🔄 Metrics reset")
