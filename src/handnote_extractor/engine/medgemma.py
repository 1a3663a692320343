from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

import torch
from PIL import Image

from handnote_extractor.engine.base import Content, ImagePayload, ModelAdapter, ModelResponse
from handnote_extractor.engine.errors import ProviderCallError
from handnote_extractor.preprocessing import decode_image, prepare_for_vlm
from handnote_extractor.schemas.config import PipelineConfig

if TYPE_CHECKING:
    from transformers import Pipeline

logger = logging.getLogger(__name__)


class MedGemmaAdapter(ModelAdapter):
    """Local MedGemma via HuggingFace transformers.

    The model is loaded on first use, in the worker thread that runs
    inference, so building a registry never blocks on weights.
    """

    provider = "medgemma"

    def __init__(self, model: str, display_name: str, config: PipelineConfig) -> None:
        super().__init__(model, display_name)
        self.config = config
        self.pipe: Pipeline | tuple | None = None

    def _load_model(self) -> None:
        """Load MedGemma via HuggingFace pipeline."""
        from transformers import pipeline

        logger.info("Loading MedGemma model: %s", self.model)

        if self.config.quantize_4bit:
            from transformers import (
                AutoModelForImageTextToText,
                AutoProcessor,
                BitsAndBytesConfig,
            )

            bnb_config = BitsAndBytesConfig(
                load_in_4bit=True,
                bnb_4bit_quant_type="nf4",
                bnb_4bit_compute_dtype=torch.bfloat16,
            )
            model = AutoModelForImageTextToText.from_pretrained(
                self.model,
                quantization_config=bnb_config,
                device_map="auto",
            )
            processor = AutoProcessor.from_pretrained(self.model)
            self.pipe = (model, processor)
        else:
            dtype = (
                torch.bfloat16
                if self.config.torch_dtype == "bfloat16"
                else torch.float16
            )
            self.pipe = pipeline(
                "image-text-to-text",
                model=self.model,
                torch_dtype=dtype,
                device=self.config.device,
            )
        logger.info("Model loaded successfully")

    def query(self, image: Image.Image | None, prompt: str) -> str:
        """Blocking inference: prompt (and optional image) in, generated text out."""
        if self.pipe is None:
            self._load_model()

        if isinstance(self.pipe, tuple):
            model, processor = self.pipe
            inputs = processor(images=image, text=prompt, return_tensors="pt").to(
                model.device
            )
            output_ids = model.generate(
                **inputs, max_new_tokens=self.config.max_new_tokens
            )
            return processor.decode(output_ids[0], skip_special_tokens=True)

        parts: list[dict] = []
        if image is not None:
            parts.append({"type": "image", "image": image})
        parts.append({"type": "text", "text": prompt})
        messages = [{"role": "user", "content": parts}]
        output = self.pipe(text=messages, max_new_tokens=self.config.max_new_tokens)
        return output[0]["generated_text"][-1]["content"]

    async def invoke(self, prompt: str, content: Content) -> ModelResponse:
        # filled text prompts already carry the input text
        image = None
        if isinstance(content, ImagePayload):
            image = prepare_for_vlm(decode_image(content), self.config.image_size)

        start = time.perf_counter()
        try:
            text = await asyncio.to_thread(self.query, image, prompt)
        except (RuntimeError, ValueError, OSError) as exc:
            raise ProviderCallError(self.provider, f"{self.model} inference failed: {exc}") from exc
        return ModelResponse(text=text, latency_ms=int((time.perf_counter() - start) * 1000))
