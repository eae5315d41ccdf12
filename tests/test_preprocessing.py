"""
Unit tests for the preprocessing module: behavioral tests only.

Covers: MIME checks, decoding, the average-grayscale transform, encoding,
the step pipeline, and artifact saving.
"""

import io

import numpy as np
import pytest
from PIL import Image

from errors import ImageDecodeError, InvalidInput, UnsupportedFormat
from preprocessing import (
    AverageGrayscaleStep,
    EncodedImage,
    Pipeline,
    PixelBuffer,
    PreprocessConfig,
    RawImage,
    average_grayscale_,
    average_grayscale_inplace,
    decode_image,
    decode_to_rgba,
    encode_image,
    is_image_type,
    normalize_image,
    run_pipeline,
)


class TestIsImageType:
    """Tests for the declared-MIME image check."""

    @pytest.mark.parametrize("mime", ["image/png", "image/jpeg", "image/webp", "IMAGE/GIF"])
    def test_image_types_accepted(self, mime):
        assert is_image_type(mime)

    @pytest.mark.parametrize("mime", ["text/plain", "application/pdf", "", None])
    def test_other_types_rejected(self, mime):
        assert not is_image_type(mime)


class TestDecodeImage:
    """Tests for decode_image."""

    def test_decodes_png_to_rgba_buffer(self, png_bytes):
        raw = RawImage(png_bytes((10, 20, 30, 255), size=(5, 2)), "image/png")
        buffer = decode_image(raw)
        assert buffer.dimensions == (5, 2)
        assert buffer.data.shape == (2, 5, 4)
        assert buffer.data[0, 0].tolist() == [10, 20, 30, 255]

    def test_flat_length_is_width_height_four(self, png_bytes):
        buffer = decode_image(RawImage(png_bytes(size=(7, 3)), "image/png"))
        assert buffer.flat.size == 7 * 3 * 4

    def test_rgb_input_gets_opaque_alpha(self, png_bytes):
        raw = RawImage(png_bytes((1, 2, 3), size=(2, 2), mode="RGB"), "image/png")
        buffer = decode_image(raw)
        assert np.all(buffer.data[..., 3] == 255)

    def test_jpeg_decodes(self):
        img = Image.new("RGB", (8, 8), (200, 200, 200))
        out = io.BytesIO()
        img.save(out, format="JPEG")
        buffer = decode_image(RawImage(out.getvalue(), "image/jpeg"))
        assert buffer.dimensions == (8, 8)

    def test_non_image_type_raises_unsupported_format(self):
        with pytest.raises(UnsupportedFormat) as excinfo:
            decode_image(RawImage(b"hello", "text/plain", "notes.txt"))
        assert excinfo.value.mime_type == "text/plain"

    def test_unsupported_format_is_invalid_input(self):
        with pytest.raises(InvalidInput):
            decode_image(RawImage(b"hello", "text/plain"))

    def test_corrupt_bytes_raise_decode_error(self):
        with pytest.raises(ImageDecodeError):
            decode_image(RawImage(b"\x89PNG not really", "image/png"))

    def test_truncated_png_raises_decode_error(self):
        rng = np.random.default_rng(0)
        noise = rng.integers(0, 256, size=(50, 50, 4), dtype=np.uint8)
        out = io.BytesIO()
        Image.fromarray(noise).save(out, format="PNG")
        data = out.getvalue()
        with pytest.raises(ImageDecodeError):
            decode_image(RawImage(data[: len(data) // 2], "image/png"))


class TestPixelBuffer:
    """Tests for PixelBuffer validation."""

    def test_from_flat_reshapes(self):
        buffer = PixelBuffer.from_flat(2, 1, [1, 2, 3, 4, 5, 6, 7, 8])
        assert buffer.data.shape == (1, 2, 4)
        assert buffer.data[0, 1].tolist() == [5, 6, 7, 8]

    def test_wrong_length_raises(self):
        with pytest.raises(ValueError, match="expected"):
            PixelBuffer.from_flat(2, 2, [0] * 15)

    def test_zero_dimension_raises(self):
        with pytest.raises(ValueError, match="positive"):
            PixelBuffer(0, 1, np.zeros((0,), dtype=np.uint8))

    def test_non_uint8_raises(self):
        with pytest.raises(ValueError, match="uint8"):
            PixelBuffer(1, 1, np.zeros((1, 1, 4), dtype=np.float32))

    def test_non_array_raises(self):
        with pytest.raises(TypeError, match="Expected numpy.ndarray"):
            PixelBuffer(1, 1, [0, 0, 0, 0])


class TestAverageGrayscale:
    """Tests for the average-grayscale transform."""

    def test_rgb_become_rounded_mean(self):
        img = np.array([[[10, 20, 40, 7]]], dtype=np.uint8)
        average_grayscale_inplace(img)
        assert img[0, 0].tolist() == [23, 23, 23, 7]

    def test_mean_rounds_up_from_two_thirds(self):
        img = np.array([[[1, 1, 0, 255]]], dtype=np.uint8)
        average_grayscale_inplace(img)
        assert img[0, 0, 0] == 1

    def test_no_overflow_at_full_white(self):
        img = np.full((1, 1, 4), 255, dtype=np.uint8)
        average_grayscale_inplace(img)
        assert img[0, 0].tolist() == [255, 255, 255, 255]

    def test_alpha_untouched(self):
        rng = np.random.default_rng(0)
        img = rng.integers(0, 256, size=(6, 5, 4), dtype=np.uint8)
        alpha = img[..., 3].copy()
        average_grayscale_inplace(img)
        assert np.array_equal(img[..., 3], alpha)

    def test_channels_equal_after_transform(self):
        rng = np.random.default_rng(1)
        img = rng.integers(0, 256, size=(4, 4, 4), dtype=np.uint8)
        average_grayscale_inplace(img)
        assert np.array_equal(img[..., 0], img[..., 1])
        assert np.array_equal(img[..., 1], img[..., 2])

    def test_idempotent(self):
        rng = np.random.default_rng(2)
        img = rng.integers(0, 256, size=(3, 3, 4), dtype=np.uint8)
        once = average_grayscale_inplace(img.copy())
        twice = average_grayscale_inplace(once.copy())
        assert np.array_equal(once, twice)

    def test_inplace_mutates_and_returns_same_array(self):
        img = np.full((2, 2, 4), 90, dtype=np.uint8)
        img[..., 0] = 0
        result = average_grayscale_inplace(img)
        assert result is img
        assert img[0, 0, 0] == 60

    def test_buffer_variant_mutates_buffer(self):
        buffer = PixelBuffer.from_flat(1, 1, [30, 60, 90, 128])
        data = buffer.data
        average_grayscale_(buffer)
        assert buffer.data is data
        assert buffer.data[0, 0].tolist() == [60, 60, 60, 128]

    def test_rgb_array_raises(self):
        with pytest.raises(ValueError, match="Unsupported number of channels"):
            average_grayscale_inplace(np.zeros((2, 2, 3), dtype=np.uint8))

    def test_2d_array_raises(self):
        with pytest.raises(ValueError, match="3D"):
            average_grayscale_inplace(np.zeros((2, 2), dtype=np.uint8))

    def test_invalid_type_raises(self):
        with pytest.raises(TypeError, match="Expected numpy.ndarray"):
            average_grayscale_inplace([[1, 2, 3, 4]])


class TestEncoding:
    """Tests for PNG encode/decode of pixel buffers."""

    def test_encode_is_lossless(self):
        rng = np.random.default_rng(3)
        data = rng.integers(0, 256, size=(5, 7, 4), dtype=np.uint8)
        encoded = encode_image(PixelBuffer(7, 5, data.copy()))
        assert encoded.mime_type == "image/png"
        assert (encoded.width, encoded.height) == (7, 5)
        assert np.array_equal(decode_to_rgba(encoded), data)

    def test_encoded_bytes_are_png(self):
        encoded = encode_image(PixelBuffer.from_flat(1, 1, [1, 2, 3, 4]))
        assert encoded.data.startswith(b"\x89PNG\r\n\x1a\n")

    def test_unsupported_format_raises(self):
        with pytest.raises(ValueError, match="Unsupported output format"):
            encode_image(PixelBuffer.from_flat(1, 1, [0, 0, 0, 0]), fmt="jpeg")

    def test_decode_garbage_raises(self):
        with pytest.raises(ImageDecodeError):
            decode_to_rgba(EncodedImage(b"nope", "image/png", 1, 1))


class TestPipeline:
    """Tests for the Pipeline class and run_pipeline."""

    def test_single_white_pixel_stays_white(self):
        encoded = normalize_image(PixelBuffer.from_flat(1, 1, [255, 255, 255, 255]))
        assert decode_to_rgba(encoded)[0, 0].tolist() == [255, 255, 255, 255]

    def test_dimensions_preserved(self, png_bytes):
        buffer = decode_image(RawImage(png_bytes((200, 10, 10, 255), size=(9, 4)), "image/png"))
        result = run_pipeline(buffer)
        assert result.dimensions == (9, 4)

    def test_output_is_average_grayscale(self):
        buffer = PixelBuffer.from_flat(2, 1, [255, 0, 0, 255, 0, 0, 255, 100])
        decoded = decode_to_rgba(normalize_image(buffer))
        assert decoded[0, 0].tolist() == [85, 85, 85, 255]
        assert decoded[0, 1].tolist() == [85, 85, 85, 100]

    def test_step_metadata_recorded(self):
        result = run_pipeline(PixelBuffer.from_flat(1, 1, [0, 0, 0, 255]))
        assert list(result.step_metadata) == ["grayscale"]

    def test_pipeline_applies_in_place(self):
        data = np.full((2, 2, 4), 30, dtype=np.uint8)
        data[..., 0] = 0
        result = Pipeline(steps=[AverageGrayscaleStep()]).run(data)
        assert result.final is data
        assert data[0, 0, 0] == 20

    def test_artifacts_saved(self, tmp_path):
        buffer = PixelBuffer.from_flat(2, 2, [10] * 16)
        result = run_pipeline(buffer, artifact_dir=str(tmp_path))
        assert set(result.artifact_paths) == {"original", "grayscale"}
        for path in result.artifact_paths.values():
            assert (tmp_path / path.split("/")[-1]).exists()

    def test_no_artifacts_by_default(self):
        result = run_pipeline(PixelBuffer.from_flat(1, 1, [1, 2, 3, 4]))
        assert result.artifact_paths == {}

    def test_pipeline_len_and_iter(self):
        pipeline = Pipeline(steps=[AverageGrayscaleStep()])
        assert len(pipeline) == 1
        assert [s.name for s in pipeline] == ["grayscale"]


class TestPreprocessConfig:
    """Tests for PreprocessConfig validation."""

    def test_default_is_valid(self):
        PreprocessConfig().validate()

    def test_lossy_format_rejected(self):
        with pytest.raises(ValueError, match="output_format"):
            PreprocessConfig(output_format="jpeg").validate()

    def test_compression_out_of_range_rejected(self):
        with pytest.raises(ValueError, match="png_compression"):
            PreprocessConfig(png_compression=10).validate()

    def test_run_pipeline_validates_config(self):
        with pytest.raises(ValueError):
            run_pipeline(PixelBuffer.from_flat(1, 1, [0, 0, 0, 0]), PreprocessConfig(png_compression=-1))


class TestRawImage:
    """Tests for RawImage constructors."""

    def test_from_path_guesses_mime(self, tmp_path, png_bytes):
        path = tmp_path / "scan.png"
        path.write_bytes(png_bytes())
        raw = RawImage.from_path(path)
        assert raw.mime_type == "image/png"
        assert raw.name == "scan.png"

    def test_from_path_unknown_extension(self, tmp_path):
        path = tmp_path / "blob.unknownext"
        path.write_bytes(b"x")
        assert RawImage.from_path(path).mime_type == "application/octet-stream"

    def test_from_pil_is_png(self):
        raw = RawImage.from_pil(Image.new("RGB", (3, 3)))
        assert raw.mime_type == "image/png"
        assert raw.data.startswith(b"\x89PNG")
