from .reconcile import reconcile_processing_transformations

__all__ = [
    "reconcile_processing_transformations",
]
