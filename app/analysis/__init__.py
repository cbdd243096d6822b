from app.analysis.analyzer import Instruction, StructuredExtractionClient
from app.analysis.factory import AnalysisClientFactory
from app.analysis.reconciler import BoundaryPolicy, BoundaryReconciler
from app.analysis.sanitizer import parse_structured

__all__ = [
    "AnalysisClientFactory",
    "BoundaryPolicy",
    "BoundaryReconciler",
    "Instruction",
    "StructuredExtractionClient",
    "parse_structured",
]
