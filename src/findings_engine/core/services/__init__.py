from __future__ import annotations

from .cvss_scorer import CVSSScorer
from .knowledge import KnowledgeLookup
from .report_assembler import ReportAssembler
from .result_reader import ResultReader

__all__ = [
    "CVSSScorer",
    "KnowledgeLookup",
    "ReportAssembler",
    "ResultReader",
]
