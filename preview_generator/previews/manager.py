import hashlib
import logging
import struct
from functools import cached_property
from pathlib import Path
from typing import List, Optional, Sequence

from PIL import Image

from .. import config
from ..database.ops import DBOperations
from ..exceptions import ConfigurationError, InvalidPreviewArgumentError, NotFoundError
from ..models import PreviewSpecification
from ..sizes import max_preview_size as configured_max_preview
from ..storage.nodes import File
from . import render

# Errors raised by Pillow / psd-tools for files they cannot decode
DECODE_ERRORS = (OSError, ValueError, SyntaxError, struct.error, Image.DecompressionBombError)


class PreviewManager:
    """
    Local preview capability.

    Previews are written below <data_dir>/appdata/preview/<key>/ and recorded
    in the catalog so that unchanged sources are not rendered twice.
    """

    def __init__(self, data_dir: Path, db_ops: DBOperations, app_config):
        self.preview_root = data_dir.joinpath(*config.APPDATA_PREVIEW_DIR)
        self.db = db_ops
        self.app_config = app_config

    # Read on first use; constructing the manager does not touch configuration.
    @cached_property
    def max_size(self):
        return configured_max_preview(self.app_config)

    @cached_property
    def quality(self) -> int:
        raw = self.app_config.get_system_value(config.KEY_JPEG_QUALITY, str(config.DEFAULT_JPEG_QUALITY))
        try:
            quality = int(raw)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Invalid {config.KEY_JPEG_QUALITY}: {raw!r}")
        if not 1 <= quality <= 100:
            raise ConfigurationError(f"Invalid {config.KEY_JPEG_QUALITY}: {raw!r} (expected 1-100)")
        return quality

    def is_mime_supported(self, mime_type: str) -> bool:
        return mime_type in config.SUPPORTED_MIMES

    def preview_dir(self, file: File) -> Path:
        key = hashlib.sha256(file.path.encode('utf-8')).hexdigest()[:16]
        return self.preview_root / key

    def generate_previews(self, file: File, specifications: Sequence[PreviewSpecification]) -> List[Path]:
        """
        Ensures a preview exists for every specification.

        Raises NotFoundError when the source vanished and
        InvalidPreviewArgumentError when it cannot be rendered or a
        specification cannot be satisfied.
        """
        if not self.is_mime_supported(file.mime_type):
            raise InvalidPreviewArgumentError(f"No preview provider for {file.mime_type} ({file.path})")

        mtime, size = file.stat()

        pending = []
        results: List[Path] = []
        for spec in specifications:
            existing = self._existing_preview(file.path, spec, mtime, size)
            if existing is not None:
                results.append(existing)
            else:
                pending.append(spec)

        if not pending:
            logging.debug(f"Previews for {file.path} are up to date")
            return results

        max_img = self._get_max_preview(file, mtime, size)
        max_w, max_h = max_img.size
        out_dir = self.preview_dir(file)

        for spec in pending:
            w, h = render.target_size(max_w, max_h, spec)
            crop_tag = "-crop" if spec.crop else ""
            dest = out_dir / f"{w}-{h}{crop_tag}{render.preview_suffix(max_img)}"
            render.save_preview(render.resize(max_img, (w, h), spec.crop), dest, self.quality)
            self.db.record_preview(file.path, mtime, size, spec.width, spec.height, spec.crop, dest)
            results.append(dest)

        return results

    def _existing_preview(self, source_path: str, spec: PreviewSpecification,
                          mtime: float, size: int) -> Optional[Path]:
        row = self.db.fetch_preview(source_path, spec.width, spec.height, spec.crop)
        if row is None:
            return None
        rec_mtime, rec_size, preview_path = row
        if rec_mtime != mtime or rec_size != size:
            return None
        path = Path(preview_path)
        return path if path.exists() else None

    def _get_max_preview(self, file: File, mtime: float, size: int) -> Image.Image:
        try:
            img = render.load_image(file.real_path, file.mime_type)
        except FileNotFoundError as e:
            raise NotFoundError(f"{file.path} no longer exists") from e
        except DECODE_ERRORS as e:
            raise InvalidPreviewArgumentError(f"Could not decode {file.path}: {e}") from e

        w, h = render.max_preview_size(img.width, img.height, *self.max_size)
        if (w, h) != img.size:
            img = img.resize((w, h), Image.Resampling.LANCZOS)

        dest = self.preview_dir(file) / f"{w}-{h}-max{render.preview_suffix(img)}"
        render.save_preview(img, dest, self.quality)
        self.db.record_preview(file.path, mtime, size, w, h, False, dest, is_max=True)
        return img
