from __future__ import annotations

import io
import logging
from pathlib import Path

from PIL import Image, ImageEnhance, ImageOps, UnidentifiedImageError

from handnote_extractor.engine.base import ImagePayload
from handnote_extractor.engine.errors import ImageInputError

logger = logging.getLogger(__name__)


def detect_mime_type(data: bytes) -> str:
    """Identify an image's mime type from its bytes.

    Raises ImageInputError if Pillow cannot read the data as an image.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            image_format = img.format
    except (UnidentifiedImageError, OSError) as exc:
        raise ImageInputError(f"Unreadable image data: {exc}") from exc
    mime = Image.MIME.get(image_format or "")
    if mime is None:
        raise ImageInputError(f"Unsupported image format: {image_format}")
    return mime


def decode_image(payload: ImagePayload) -> Image.Image:
    try:
        img = Image.open(io.BytesIO(payload.data))
        img.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise ImageInputError(f"Unreadable image data: {exc}") from exc
    return img


def prepare_for_vlm(image: Image.Image, target_size: int = 896) -> Image.Image:
    """Prepare a photographed note for a local vision-language model.

    Steps:
    1. Auto-orient using EXIF data (handles rotated mobile photos)
    2. Convert to RGB if grayscale or RGBA
    3. Resize to target_size x target_size maintaining aspect ratio (pad with white)
    4. Apply contrast enhancement (factor 1.4 for pen on paper)

    Returns: PIL Image, RGB mode, target_size x target_size pixels
    """
    img = ImageOps.exif_transpose(image)

    if img.mode != "RGB":
        img = img.convert("RGB")

    img.thumbnail((target_size, target_size), Image.Resampling.LANCZOS)
    canvas = Image.new("RGB", (target_size, target_size), (255, 255, 255))
    offset = ((target_size - img.width) // 2, (target_size - img.height) // 2)
    canvas.paste(img, offset)
    img = canvas

    enhancer = ImageEnhance.Contrast(img)
    return enhancer.enhance(1.4)


def convert_pdf_to_images(pdf_path: str | Path) -> list[Image.Image]:
    """Convert a PDF file to a list of PIL Images (one per page).

    Uses pdf2image.convert_from_path (the `pdf` extra).
    """
    from pdf2image import convert_from_path

    path = Path(pdf_path)
    if not path.exists():
        raise FileNotFoundError(f"PDF not found: {pdf_path}")
    images = convert_from_path(str(path))
    return [img.convert("RGB") for img in images]


def load_image_payload(path: str | Path) -> ImagePayload:
    """Read an image file into an ImagePayload, keeping the original bytes.

    For PDFs the first page is rendered and re-encoded as PNG.
    Raises FileNotFoundError if path does not exist and ImageInputError if
    it is not an image.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    if path.suffix.lower() == ".pdf":
        pages = convert_pdf_to_images(path)
        if not pages:
            raise ImageInputError(f"PDF has no pages: {path}")
        buffer = io.BytesIO()
        pages[0].save(buffer, format="PNG")
        logger.info("preprocess: rendered page 1/%d of %s", len(pages), path.name)
        return ImagePayload(data=buffer.getvalue(), mime_type="image/png")

    data = path.read_bytes()
    if not data:
        raise ImageInputError(f"Empty image file: {path}")
    return ImagePayload(data=data, mime_type=detect_mime_type(data))
