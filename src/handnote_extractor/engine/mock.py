from __future__ import annotations

import json
import logging

from handnote_extractor.engine.base import Content, ModelAdapter, ModelResponse

logger = logging.getLogger(__name__)

MOCK_OCR_TEXT = (
    "Pt: 45M c/o chest pain x2d, worse on exertion\n"
    "Hx: HTN, DM2\n"
    "BP 14O/9O  HR 88  T 37.1\n"
    "FBS 182 mg/dl  HbA1c 8.1%  S6PT 54\n"
    "A: ?Stable angina\n"
    "P: Aspirin 75mg OD, Atorvastatin 2Omg HS, ECG, review 1/52"
)

MOCK_CORRECTED_TEXT = (
    "Pt: 45M c/o chest pain x2d, worse on exertion\n"
    "Hx: HTN, DM2\n"
    "BP 140/90  HR 88  T 37.1\n"
    "FBS 182 mg/dl  HbA1c 8.1%  SGPT 54\n"
    "A: ?Stable angina\n"
    "P: Aspirin 75mg OD, Atorvastatin 20mg HS, ECG, review 1/52"
)


class MockAdapter(ModelAdapter):
    """Deterministic stand-in for a provider, used for dry runs.

    Detects the stage from the confidence field its prompt asks for and
    returns realistic mock JSON carrying this adapter's confidence.
    """

    provider = "mock"

    def __init__(self, model: str, display_name: str, confidence: float = 0.9) -> None:
        super().__init__(model, display_name)
        self.confidence = confidence

    async def invoke(self, prompt: str, content: Content) -> ModelResponse:
        return ModelResponse(text=self._mock_response(prompt), latency_ms=0)

    def _mock_response(self, prompt: str) -> str:
        if "overall_labs_confidence" in prompt:
            return json.dumps(
                {
                    "diagnostics_and_labs": [
                        {
                            "test_name": "Fasting Blood Sugar",
                            "value": "182",
                            "unit": "mg/dL",
                            "flag": "High",
                            "original_text": "FBS 182 mg/dl",
                            "confidence_score": 0.93,
                        },
                        {
                            "test_name": "HbA1c",
                            "value": "8.1",
                            "unit": "%",
                            "flag": "High",
                            "original_text": "HbA1c 8.1%",
                            "confidence_score": 0.9,
                        },
                        {
                            "test_name": "ALT/SGPT",
                            "value": "54",
                            "unit": "U/L",
                            "flag": "High",
                            "original_text": "S6PT 54",
                            "confidence_score": 0.78,
                        },
                    ],
                    "metadata": {
                        "overall_labs_confidence": self.confidence,
                        "ocr_quality_check": "Readable",
                        "extraction_notes": "SGPT read from S6PT",
                    },
                }
            )

        if "overall_extraction_confidence" in prompt:
            return json.dumps(
                {
                    "soap_note": {
                        "subjective": {
                            "chief_complaint": "Chest pain for 2 days",
                            "hpi": "Chest pain worse on exertion",
                            "symptoms": ["chest pain"],
                            "patient_history": "HTN, DM2",
                        },
                        "objective": {
                            "vitals": {"bp": "140/90", "hr": "88", "temp": "37.1", "rr": None, "weight": None},
                            "physical_exam": {"findings": [], "text_raw": "Unknown"},
                            "labs_imaging": "FBS 182 mg/dl, HbA1c 8.1%, SGPT 54",
                        },
                        "assessment": {
                            "primary_diagnosis": {
                                "value": "Stable angina (suspected)",
                                "certainty_degree": 0.6,
                                "evidence_text": "A: ?Stable angina",
                            },
                            "differential_diagnosis": [],
                        },
                        "plan": {
                            "medications": [
                                {"drug": "Aspirin", "dosage": "75mg", "sig": "OD", "handwriting_confidence": 0.9},
                                {"drug": "Atorvastatin", "dosage": "20mg", "sig": "HS", "handwriting_confidence": 0.8},
                            ],
                            "procedures_ordered": ["ECG"],
                            "patient_instructions": "Review in 1 week",
                        },
                    },
                    "metadata": {
                        "overall_extraction_confidence": self.confidence,
                        "ocr_quality_comment": "Mostly legible",
                        "critical_ambiguities": [],
                    },
                }
            )

        if "classification_confidence" in prompt:
            return json.dumps(
                {
                    "scenario": "SOAP_NOTE",
                    "corrected_text": MOCK_CORRECTED_TEXT,
                    "classification_confidence": self.confidence,
                }
            )

        if "ocr_confidence" in prompt:
            return json.dumps({"raw_text": MOCK_OCR_TEXT, "ocr_confidence": self.confidence})

        logger.debug("mock: unrecognized prompt, returning generic response")
        return json.dumps(
            {
                "response": "Mock response for unrecognized prompt type",
                "prompt_received": prompt[:100],
            }
        )
