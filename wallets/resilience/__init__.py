"""
Resilience Package - clasificación de errores de conexión.

Este paquete contiene:
- ConnectErrorClassifier: rechazo del usuario / wallet ocupada / resto
"""

from .error_classifier import ConnectErrorClassifier, ErrorCategory, ErrorClassification

__all__ = [
    "ConnectErrorClassifier",
    "ErrorCategory",
    "ErrorClassification",
]
