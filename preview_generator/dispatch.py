import logging
from typing import Sequence

from . import config
from .exceptions import InvalidPreviewArgumentError, NotFoundError
from .models import DispatchOutcome, PreviewSpecification
from .storage.nodes import File


class FileDispatcher:
    """
    Hands one file at a time to the preview capability and turns its expected
    failures into a DispatchOutcome. Anything unexpected propagates.
    """

    def __init__(self, preview_manager, verbosity: int = config.VERBOSITY_NORMAL):
        self.previews = preview_manager
        self.verbosity = verbosity

    def dispatch(self, file: File, specifications: Sequence[PreviewSpecification]) -> DispatchOutcome:
        if not self.previews.is_mime_supported(file.mime_type):
            return DispatchOutcome.UNSUPPORTED

        if self.verbosity > config.VERBOSITY_VERBOSE:
            logging.info(f"Generating previews for {file.path}")

        try:
            self.previews.generate_previews(file, specifications)
        except NotFoundError as e:
            # Deleted while the sweep was running
            logging.debug(f"Skipping {file.path}: {e}")
            return DispatchOutcome.NOT_FOUND
        except InvalidPreviewArgumentError as e:
            logging.error(str(e))
            return DispatchOutcome.INVALID

        return DispatchOutcome.GENERATED
