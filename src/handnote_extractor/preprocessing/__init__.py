"""Image loading and preparation for handwritten note photos."""

from handnote_extractor.preprocessing.image_ops import (
    convert_pdf_to_images,
    decode_image,
    detect_mime_type,
    load_image_payload,
    prepare_for_vlm,
)

__all__ = [
    "convert_pdf_to_images",
    "decode_image",
    "detect_mime_type",
    "load_image_payload",
    "prepare_for_vlm",
]
