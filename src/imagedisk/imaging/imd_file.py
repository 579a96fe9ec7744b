"""
File loading for IMD images.

Resolves a path, opens it and hands the stream to the decoder. The decoder
itself never touches the filesystem.
"""

import logging
import time
from pathlib import Path
from typing import Union

from .imd_decoder import decode_image
from .imd_format import FormatError, ImageReadError
from .imd_image import Image

logger = logging.getLogger(__name__)


def load_imd(filepath: Union[str, Path]) -> Image:
    """
    Load and decode an IMD file.

    Args:
        filepath: Path to the .imd file

    Returns:
        The decoded Image

    Raises:
        ImageReadError: If the file does not exist or cannot be read
        FormatError: If the file is not a well-formed IMD image; the
            error carries the file path
    """
    path = Path(filepath)

    if not path.exists():
        raise ImageReadError("File does not exist", str(filepath))

    if not path.is_file():
        raise ImageReadError("Path is not a file", str(filepath))

    logger.info("Loading IMD image: %s", filepath)
    started = time.monotonic()

    try:
        with open(path, 'rb') as f:
            image = decode_image(f)
    except FormatError as e:
        logger.error("Failed to decode %s: %s", filepath, e)
        raise e.with_filepath(str(filepath))
    except OSError as e:
        raise ImageReadError(f"Failed to read file: {e}", str(filepath)) from e

    logger.debug("Loaded %s in %.3fs", filepath, time.monotonic() - started)
    return image
