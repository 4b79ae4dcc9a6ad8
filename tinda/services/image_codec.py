import io

from PIL import Image, ImageOps, UnidentifiedImageError


class ImageDecodeError(Exception):
    """Uploaded bytes are not a readable image."""
    pass


def compress_image(data: bytes, max_width: int = 800, quality: int = 70) -> bytes:
    """
    Decode an uploaded image, shrink it to at most ``max_width`` pixels wide
    (aspect ratio kept, never enlarged) and re-encode it as JPEG.
    """
    if not data:
        raise ImageDecodeError("Empty image upload")

    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        ValueError,
        SyntaxError,
        EOFError,
    ) as e:
        raise ImageDecodeError(f"Could not decode image: {e}") from e

    # re-encoding drops EXIF, so bake the orientation into the pixels
    img = ImageOps.exif_transpose(img)

    if img.width > max_width:
        height = max(1, round(img.height * max_width / img.width))
        img = img.resize((max_width, height), Image.LANCZOS)

    # JPEG has no alpha / palette
    if img.mode != "RGB":
        img = img.convert("RGB")

    out = io.BytesIO()
    img.save(out, format="JPEG", quality=quality, optimize=True)
    return out.getvalue()
