import io
from dataclasses import dataclass

from PIL import Image, ImageOps, UnidentifiedImageError
from pillow_heif import register_heif_opener

from shared.exceptions import ValidationError

# HEIC/HEIF decoding is not built into Pillow.
register_heif_opener()

NORMALIZED_MIME = "image/jpeg"
NORMALIZED_EXTENSION = ".jpg"


@dataclass(frozen=True)
class NormalizedImage:
    data: bytes
    width: int
    height: int
    mime: str = NORMALIZED_MIME

    @property
    def size(self) -> int:
        return len(self.data)


def normalize_image(data: bytes, quality: int = 75) -> NormalizedImage:
    """Apply EXIF orientation and re-encode as an optimized RGB JPEG."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            image = ImageOps.exif_transpose(image)
            if image.mode != "RGB":
                image = image.convert("RGB")
            out = io.BytesIO()
            image.save(out, format="JPEG", quality=quality, optimize=True)
            width, height = image.size
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise ValidationError(f"Unreadable image: {exc}") from exc
    return NormalizedImage(data=out.getvalue(), width=width, height=height)
