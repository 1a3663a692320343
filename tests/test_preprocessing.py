"""Tests for image loading and preparation."""

import pytest
from PIL import Image

from handnote_extractor.engine.base import ImagePayload
from handnote_extractor.engine.errors import ImageInputError
from handnote_extractor.preprocessing import (
    decode_image,
    detect_mime_type,
    load_image_payload,
    prepare_for_vlm,
)


def test_load_image_payload_keeps_original_bytes(sample_image_path, png_bytes):
    payload = load_image_payload(sample_image_path)
    assert payload.data == png_bytes
    assert payload.mime_type == "image/png"


def test_load_image_payload_detects_jpeg(tmp_path):
    path = tmp_path / "note.bin"
    Image.new("RGB", (20, 20), "white").save(path, format="JPEG")
    assert load_image_payload(path).mime_type == "image/jpeg"


def test_load_image_raises_for_missing_file():
    with pytest.raises(FileNotFoundError):
        load_image_payload("/nonexistent/path/image.png")


def test_load_image_rejects_empty_file(tmp_path):
    path = tmp_path / "empty.png"
    path.write_bytes(b"")
    with pytest.raises(ImageInputError):
        load_image_payload(path)


def test_detect_mime_type_rejects_non_images():
    with pytest.raises(ImageInputError):
        detect_mime_type(b"%PDF-1.4 not an image")


def test_prepare_for_vlm_pads_non_square_to_896():
    result = prepare_for_vlm(Image.new("L", (400, 600), 200))
    assert result.size == (896, 896)
    assert result.mode == "RGB"


def test_decode_image_roundtrip(image_payload):
    img = decode_image(image_payload)
    assert img.size == (64, 48)


def test_decode_image_rejects_garbage():
    with pytest.raises(ImageInputError):
        decode_image(ImagePayload(data=b"garbage", mime_type="image/png"))


def test_payload_data_url(png_bytes):
    payload = ImagePayload(data=png_bytes, mime_type="image/png")
    assert payload.data_url().startswith("data:image/png;base64,iVBOR")
