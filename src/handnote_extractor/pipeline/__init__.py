"""Dual-model stages and the orchestrator that sequences them."""
from handnote_extractor.pipeline.arbitrate import Selection, select_best
from handnote_extractor.pipeline.confidence import DEFAULT_CONFIDENCE, extract_confidence
from handnote_extractor.pipeline.parse import parse_model_json
from handnote_extractor.pipeline.runner import run_multi_agent_pipeline, run_pipeline

__all__ = [
    "DEFAULT_CONFIDENCE",
    "Selection",
    "extract_confidence",
    "parse_model_json",
    "run_multi_agent_pipeline",
    "run_pipeline",
    "select_best",
]
