from __future__ import annotations

import logging
import os
import uuid

from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)


def save_design_image(file: FileStorage | None, folder: str) -> str | None:
    if not file or not file.filename:
        return None
    os.makedirs(folder, exist_ok=True)
    filename = f"{uuid.uuid4().hex}_{secure_filename(file.filename) or 'design'}"
    file.save(os.path.join(folder, filename))
    logger.info("Saved design image %s", filename)
    return filename


def remove_design_image(folder: str, filename: str | None) -> bool:
    """Delete an uploaded image; a file that is already gone is not an error."""
    if not filename:
        return False
    path = os.path.join(folder, secure_filename(filename))
    try:
        os.remove(path)
    except FileNotFoundError:
        return False
    except OSError:
        logger.exception("Error deleting design image %s", path)
        return False
    logger.info("Deleted design image %s", path)
    return True
