"""Image preprocessing functions for the image-to-sound pipeline.

This module provides the numeric steps that turn raw image data into the
per-cell average colors of the pixel grid: decoding encoded bytes, fitting
the image into the canvas footprint, and averaging every cell of a
``cell_size`` square partition.
"""

import logging

import cv2
import numpy as np

from image_to_sound.exceptions import ImageLoadError

logger = logging.getLogger(__name__)


def decode_image(data: bytes) -> np.ndarray:
    """Decode encoded image bytes (PNG, JPEG, WebP, ...) into an RGB array.

    Transparent regions are composited over white, the same background the
    canvas is cleared to.

    Args:
        data: Encoded image file contents.

    Returns:
        RGB image as an H x W x 3 uint8 NumPy array.

    Raises:
        ImageLoadError: If the bytes are empty or cannot be decoded.
    """
    if not data:
        raise ImageLoadError("No image data provided")

    buffer = np.frombuffer(data, dtype=np.uint8)
    decoded = cv2.imdecode(buffer, cv2.IMREAD_UNCHANGED)
    if decoded is None:
        raise ImageLoadError("Failed to decode image data")

    if decoded.dtype == np.uint16:
        decoded = (decoded // 257).astype(np.uint8)

    logger.debug(f"Decoded image with shape {decoded.shape}")

    # OpenCV decodes to BGR(A) channel order
    if decoded.ndim == 2:
        return cv2.cvtColor(decoded, cv2.COLOR_GRAY2RGB)
    if decoded.shape[2] == 4:
        rgba = cv2.cvtColor(decoded, cv2.COLOR_BGRA2RGBA)
        return as_rgb_array(rgba)
    return cv2.cvtColor(decoded, cv2.COLOR_BGR2RGB)


def as_rgb_array(image: np.ndarray) -> np.ndarray:
    """Normalize a decoded image array to H x W x 3 uint8 RGB.

    Accepts grayscale (H x W), RGB (H x W x 3) and RGBA (H x W x 4) arrays.
    Alpha is composited over a white background.

    Args:
        image: Decoded image array.

    Returns:
        RGB image as an H x W x 3 uint8 NumPy array.

    Raises:
        ImageLoadError: If the array does not have a supported shape.
    """
    array = np.asarray(image)
    if array.ndim == 2:
        array = np.repeat(array[:, :, None], 3, axis=2)
    if array.ndim != 3 or array.shape[2] not in (3, 4):
        raise ImageLoadError(f"Unsupported image shape: {array.shape}")
    if array.shape[0] == 0 or array.shape[1] == 0:
        raise ImageLoadError("Image has no pixels")

    if array.dtype != np.uint8:
        array = np.clip(array, 0, 255).astype(np.uint8)

    if array.shape[2] == 4:
        alpha = array[:, :, 3:4].astype(np.float64) / 255.0
        color = array[:, :, :3].astype(np.float64)
        blended = color * alpha + 255.0 * (1.0 - alpha)
        array = np.floor(blended + 0.5).astype(np.uint8)

    return np.ascontiguousarray(array)


def fit_to_canvas(
    width: int,
    height: int,
    canvas_width: int,
    canvas_height: int,
    upscale: bool = False,
) -> tuple[int, int, int, int]:
    """Compute the display size and centering offset of an image.

    The image keeps its aspect ratio. Wide images are limited by the canvas
    width, tall ones by the canvas height. Unless ``upscale`` is set, images
    that already fit are left at their native size.

    Args:
        width: Source image width in pixels.
        height: Source image height in pixels.
        canvas_width: Canvas width in pixels.
        canvas_height: Canvas height in pixels.
        upscale: Whether to enlarge images smaller than the canvas.

    Returns:
        Tuple of (display_width, display_height, offset_x, offset_y).
    """
    if width <= 0 or height <= 0:
        return 0, 0, 0, 0

    fits = width <= canvas_width and height <= canvas_height
    if fits and not upscale:
        display_width, display_height = width, height
    else:
        aspect_ratio = width / height
        if aspect_ratio > canvas_width / canvas_height:
            # Landscape: limited by width
            display_width = canvas_width
            display_height = canvas_width / aspect_ratio
        else:
            # Portrait: limited by height
            display_height = canvas_height
            display_width = canvas_height * aspect_ratio
        display_width = max(1, min(canvas_width, int(round(display_width))))
        display_height = max(1, min(canvas_height, int(round(display_height))))

    offset_x = max(0, (canvas_width - display_width) // 2)
    offset_y = max(0, (canvas_height - display_height) // 2)
    return display_width, display_height, offset_x, offset_y


def resize_image(image: np.ndarray, width: int, height: int) -> np.ndarray:
    """Resize an RGB image to exactly ``width`` x ``height``.

    Uses area interpolation when shrinking and bilinear when enlarging.
    """
    source_height, source_width = image.shape[:2]
    if (source_width, source_height) == (width, height):
        return image
    shrinking = width < source_width or height < source_height
    interpolation = cv2.INTER_AREA if shrinking else cv2.INTER_LINEAR
    return cv2.resize(image, (width, height), interpolation=interpolation)


def cell_bounds(length: int, cell_size: int) -> np.ndarray:
    """Start offsets of every cell along one axis of ``length`` pixels."""
    if length <= 0:
        return np.array([], dtype=np.int64)
    return np.arange(0, length, cell_size, dtype=np.int64)


def average_cells(image: np.ndarray, cell_size: int) -> np.ndarray:
    """Average every ``cell_size`` square of an RGB image.

    Each cell's color is the arithmetic mean of all pixels inside it, rounded
    half up. Cells on the right and bottom edges are clamped to the image
    extent, so they average fewer pixels rather than being padded.

    Args:
        image: RGB image as an H x W x 3 uint8 NumPy array.
        cell_size: Edge length of a full cell in pixels.

    Returns:
        Array of shape (ceil(H / cell_size), ceil(W / cell_size), 3) with the
        uint8 average color of each cell.
    """
    height, width = image.shape[:2]
    if height == 0 or width == 0 or cell_size <= 0:
        return np.zeros((0, 0, 3), dtype=np.uint8)

    row_starts = cell_bounds(height, cell_size)
    column_starts = cell_bounds(width, cell_size)

    # Sum whole cell blocks in two passes, one per axis
    totals = np.add.reduceat(image[:, :, :3].astype(np.int64), row_starts, axis=0)
    totals = np.add.reduceat(totals, column_starts, axis=1)

    cell_heights = np.diff(np.append(row_starts, height))
    cell_widths = np.diff(np.append(column_starts, width))
    counts = np.outer(cell_heights, cell_widths)[:, :, None]

    means = np.floor(totals / counts + 0.5)
    return means.astype(np.uint8)
