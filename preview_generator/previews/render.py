"""
Pillow helpers for decoding sources and producing resized renditions.
"""
from pathlib import Path
from typing import Tuple

from PIL import Image, ImageOps
from psd_tools import PSDImage

from .. import config
from ..exceptions import InvalidPreviewArgumentError
from ..models import PreviewSpecification


def load_image(path: Path, mime_type: str) -> Image.Image:
    """
    Decodes a source file into an RGB/RGBA image with EXIF orientation applied.
    Decoding failures surface as the library's own exceptions.
    """
    if mime_type == config.PSD_MIME:
        psd = PSDImage.open(path)
        img = psd.composite()
        if img is None:
            raise ValueError(f"{path.name} has no renderable content")
        return img

    with Image.open(path) as im:
        im.load()
        img = ImageOps.exif_transpose(im)

    if img.mode not in ("RGB", "RGBA", "LA", "L"):
        has_alpha = img.mode == "P" and "transparency" in img.info
        img = img.convert("RGBA" if has_alpha else "RGB")
    return img


def max_preview_size(width: int, height: int, max_x: int, max_y: int) -> Tuple[int, int]:
    """Fits the source into the max preview box. Never upscales."""
    if width <= 0 or height <= 0:
        raise InvalidPreviewArgumentError(f"Max preview size {width}x{height}, invalid!")
    scale = min(1.0, max_x / width, max_y / height)
    return max(1, round(width * scale)), max(1, round(height * scale))


def _check_dimension(value: int, name: str):
    if value != config.UNBOUNDED and value <= 0:
        raise InvalidPreviewArgumentError(f"Preview {name} must be positive or {config.UNBOUNDED}, got {value}")


def target_size(max_w: int, max_h: int, spec: PreviewSpecification) -> Tuple[int, int]:
    """
    Computes the final size of a rendition derived from a max preview of
    max_w x max_h. Results never exceed the max preview.
    """
    _check_dimension(spec.width, "width")
    _check_dimension(spec.height, "height")

    w, h = spec.width, spec.height
    if w == config.UNBOUNDED and h == config.UNBOUNDED:
        return max_w, max_h

    if w == config.UNBOUNDED:
        h = min(h, max_h)
        return max(1, round(max_w * h / max_h)), h

    if h == config.UNBOUNDED:
        w = min(w, max_w)
        return w, max(1, round(max_h * w / max_w))

    if spec.crop:
        # Keep the requested aspect ratio, shrinking the box if it exceeds the source
        scale = min(1.0, max_w / w, max_h / h)
        return max(1, round(w * scale)), max(1, round(h * scale))

    scale = min(1.0, w / max_w, h / max_h)
    return max(1, round(max_w * scale)), max(1, round(max_h * scale))


def resize(img: Image.Image, size: Tuple[int, int], crop: bool) -> Image.Image:
    if img.size == size:
        return img.copy()
    if crop:
        return ImageOps.fit(img, size, Image.Resampling.LANCZOS)
    return img.resize(size, Image.Resampling.LANCZOS)


def has_alpha(img: Image.Image) -> bool:
    return img.mode in ("LA", "RGBA")


def preview_suffix(img: Image.Image) -> str:
    return ".png" if has_alpha(img) else ".jpg"


def save_preview(img: Image.Image, dest: Path, quality: int) -> Path:
    dest.parent.mkdir(parents=True, exist_ok=True)
    if has_alpha(img):
        img.save(dest, "PNG", optimize=True)
    else:
        if img.mode != "RGB":
            img = img.convert("RGB")
        img.save(dest, "JPEG", quality=quality, optimize=True, progressive=True)
    return dest
