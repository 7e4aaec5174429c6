"""
Recipe Image Handling

Checks uploaded recipe photos and stores them as ``recipe_<id>.jpg``.
Every upload is decoded and re-encoded through Pillow, so whatever was
in the original file besides the pixels never reaches the upload folder.
"""

import os
from io import BytesIO

from PIL import Image


class ImageValidationError(Exception):
    """Raised when an upload is not a usable image."""
    pass


# PIL format names accepted on upload
ALLOWED_FORMATS = {'JPEG', 'PNG', 'GIF', 'WEBP'}

# Anything bigger than this is refused before decoding
MAX_SOURCE_DIMENSION = 4096
MAX_FILE_SIZE = 10 * 1024 * 1024

# Stored images are shrunk to fit inside this box
STORED_MAX_SIZE = (2048, 2048)
JPEG_QUALITY = 85


def allowed_file(filename, allowed_extensions):
    """True when ``filename`` has one of the allowed extensions."""
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in allowed_extensions


def recipe_image_name(recipe_id):
    return f"recipe_{recipe_id}.jpg"


def _read_upload(upload):
    if isinstance(upload, bytes):
        content = upload
    else:
        upload.seek(0)
        content = upload.read()
    if not content:
        raise ImageValidationError("Empty file")
    if len(content) > MAX_FILE_SIZE:
        raise ImageValidationError(f"Image too large: {len(content)} bytes (max {MAX_FILE_SIZE})")
    return content


def _decode(content):
    """Open and fully check the image; verify() consumes the file so it is opened twice."""
    Image.open(BytesIO(content)).verify()
    img = Image.open(BytesIO(content))

    if img.format not in ALLOWED_FORMATS:
        raise ImageValidationError(
            f"Unsupported format {img.format}. Use one of: {', '.join(sorted(ALLOWED_FORMATS))}"
        )
    width, height = img.size
    if width > MAX_SOURCE_DIMENSION or height > MAX_SOURCE_DIMENSION:
        raise ImageValidationError(
            f"Image is {width}x{height}, larger than {MAX_SOURCE_DIMENSION}x{MAX_SOURCE_DIMENSION}"
        )
    return img


def _as_rgb(img):
    """JPEG has no alpha channel: transparent areas become white."""
    if img.mode == 'P':
        img = img.convert('RGBA')
    if img.mode in ('RGBA', 'LA'):
        background = Image.new('RGB', img.size, (255, 255, 255))
        background.paste(img, mask=img.getchannel('A'))
        return background
    if img.mode != 'RGB':
        return img.convert('RGB')
    return img


def save_recipe_image(upload, upload_folder, recipe_id):
    """
    Validate an upload and write it as the recipe's JPEG.

    Args:
        upload: raw bytes or a file-like object such as werkzeug's FileStorage
        upload_folder: directory for stored images, created if missing
        recipe_id: id of the recipe the image belongs to

    Returns:
        The stored file name (not the full path).

    Raises:
        ImageValidationError: the upload is empty, too large, not an image,
            or in a format we do not accept.
    """
    content = _read_upload(upload)
    try:
        img = _as_rgb(_decode(content))
        img.thumbnail(STORED_MAX_SIZE, Image.Resampling.LANCZOS)
    except ImageValidationError:
        raise
    except Image.DecompressionBombError:
        raise ImageValidationError("Image appears to be a decompression bomb")
    except Exception as e:
        raise ImageValidationError(f"Invalid or corrupted image: {e}")

    os.makedirs(upload_folder, exist_ok=True)
    filename = recipe_image_name(recipe_id)
    img.save(os.path.join(upload_folder, filename), 'JPEG', quality=JPEG_QUALITY, optimize=True)
    return filename


def remove_recipe_image(upload_folder, filename):
    """Delete a stored image; returns False when there was nothing to delete."""
    path = os.path.join(upload_folder, os.path.basename(filename))
    if not os.path.exists(path):
        return False
    os.remove(path)
    return True
