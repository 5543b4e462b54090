"""
Query image requirements for single and multi recognition modes.
"""

import io
import logging
from dataclasses import dataclass
from typing import List, Optional

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageLimits:
    """Bounds a query image must satisfy."""
    mode: str
    max_file_size: float  # KBytes
    min_dimension: int    # pix
    min_image_area: float  # Mpix
    max_image_area: float  # Mpix


SINGLE_LIMITS = ImageLimits(mode="single", max_file_size=500, min_dimension=100,
                            min_image_area=0.05, max_image_area=0.31)
MULTI_LIMITS = ImageLimits(mode="multi", max_file_size=3500, min_dimension=100,
                           min_image_area=0.1, max_image_area=5.1)


@dataclass
class ImageInfo:
    """Measured properties of a query image."""
    width: int
    height: int
    size: float  # KBytes

    @property
    def area(self) -> float:
        """Image area in megapixels."""
        return self.width * self.height / 1000000.0


def read_image_info(data: bytes) -> ImageInfo:
    """
    Measure an encoded image without decoding its pixel data.

    Raises:
        ValueError: If the data is not a readable image or claims more
            pixels than Pillow will open
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            width, height = image.size
    except Image.DecompressionBombError as e:
        raise ValueError(f"Image is too large: {e}")
    except (UnidentifiedImageError, OSError) as e:
        raise ValueError(f"Unable to read image: {e}")
    return ImageInfo(width=width, height=height, size=len(data) / 1024.0)


def limits_for(multi: bool) -> ImageLimits:
    return MULTI_LIMITS if multi else SINGLE_LIMITS


def check_image_limits(data: bytes, multi: bool = False) -> Optional[str]:
    """
    Check whether a query image follows the requirements of the given mode.

    Args:
        data: Raw image bytes
        multi: True for multi mode, False for single mode

    Returns:
        None if the image is acceptable, otherwise a description of the
        violated requirements
    """
    limits = limits_for(multi)
    header = f"Image does not meet the requirements of {limits.mode} mode query image"

    try:
        info = read_image_info(data)
    except ValueError as e:
        return f"{header}: {e}"

    problems: List[str] = []
    if info.size > limits.max_file_size:
        problems.append(f"file size {info.size:.1f}KB exceeds {limits.max_file_size}KB")
    if info.width < limits.min_dimension:
        problems.append(f"width {info.width}px is below {limits.min_dimension}px")
    if info.height < limits.min_dimension:
        problems.append(f"height {info.height}px is below {limits.min_dimension}px")
    if info.area < limits.min_image_area:
        problems.append(f"area {info.area:.4f}Mpix is below {limits.min_image_area}Mpix")
    if info.area > limits.max_image_area:
        problems.append(f"area {info.area:.4f}Mpix exceeds {limits.max_image_area}Mpix")

    if not problems:
        return None

    logger.debug(f"Rejected {limits.mode} query image: {problems}")
    return f"{header}: {'; '.join(problems)}"
