"""Resize orchestration.

One resize runs detect -> measure -> ask -> build -> replace. Only the dialog
step is serialized through the dialog lock; the document is protected by the
expected-text check in replace_range().
"""

from dataclasses import dataclass
from enum import Enum

from .builder import build_new_syntax
from .clipboard import Clipboard, copy_image
from .config import Config
from .dialog import PresetDialog, ResizeDialog
from .dimensions import DimensionResolver
from .document import Document
from .errors import ExternalImageError, ImageResizeError, InvalidDimensionsError
from .locator import locate_image, locate_selection
from .lock import DialogLock
from .logging import debug, info
from .models import Detection, ImageContext, Position, ResizeChoice, SyntaxKind
from .notify import Notifier, Severity, send_notice
from .replacer import replace_range
from .storage import ResourceStore

NO_IMAGE_MESSAGE = "No valid image found. Place cursor inside an image embed."
SELECTION_MESSAGE = "Selection must contain exactly one image."
BUSY_MESSAGE = "Resize dialog is already open."
STALE_MESSAGE = "The image changed while resizing; nothing was replaced."
SUCCESS_MESSAGE = "Image resized successfully!"
MARKDOWN_MESSAGE = "Custom size removed - converted to Markdown syntax."


# (start, end) of a selected range, end exclusive
Selection = tuple[Position, Position]


class OutcomeStatus(str, Enum):
    APPLIED = "applied"
    NO_IMAGE = "no_image"
    BUSY = "busy"
    CANCELLED = "cancelled"
    STALE = "stale"
    FAILED = "failed"


@dataclass(frozen=True)
class ResizeOutcome:
    """What a resize attempt did."""

    status: OutcomeStatus
    syntax: str | None = None
    message: str = ""

    @property
    def applied(self) -> bool:
        return self.status is OutcomeStatus.APPLIED


class ImageResizeService:
    """Resizes the image under a document's cursor."""

    def __init__(
        self,
        document: Document,
        store: ResourceStore,
        config: Config | None = None,
        dialog: ResizeDialog | None = None,
        notifier: Notifier | None = None,
        lock: DialogLock | None = None,
        resolver: DimensionResolver | None = None,
    ):
        self.document = document
        self.store = store
        self.config = config or Config()
        self.dialog = dialog or PresetDialog()
        self.notifier = notifier
        self.lock = lock or DialogLock()
        self.notices_enabled = self.config.notifications.enabled
        self.resolver = resolver or DimensionResolver(
            store,
            self.config.dimensions,
            notifier=notifier,
            notices_enabled=self.notices_enabled,
        )
        self.default_mode = self.config.resize.mode
        self.html_style = self.config.resize.style

    def _notice(self, message: str, severity: Severity = Severity.INFO) -> None:
        send_notice(self.notifier, message, severity, self.notices_enabled)

    def detect(self, selection: Selection | None = None) -> Detection | None:
        """Find the image under the cursor, or the image forming a selection."""
        if selection is not None:
            return locate_selection(self.document, *selection)
        return locate_image(self.document)

    @staticmethod
    def _no_image_message(selection: Selection | None) -> str:
        return NO_IMAGE_MESSAGE if selection is None else SELECTION_MESSAGE

    def is_on_image(self) -> bool:
        return self.detect() is not None

    def detect_and_prepare(
        self, selection: Selection | None = None
    ) -> tuple[Detection, ImageContext] | None:
        """Detect the image under the cursor (or in a selection) and measure it.

        Returns:
            (detection, context), or None with a notice when there is no image

        Raises:
            ImageResizeError: If the image cannot be measured
        """
        detection = self.detect(selection)
        if detection is None:
            self._notice(self._no_image_message(selection))
            return None

        reference = detection.reference
        debug(f"Detected {reference.kind.value} image: {reference.source}")
        try:
            original = self.resolver.resolve(reference.source, reference.source_kind)
        except ExternalImageError as e:
            if not self.config.dimensions.external_fallback:
                raise
            original = self.resolver.fallback
            self._notice(
                f"{e}; using default dimensions ({original.width}×{original.height}).",
                Severity.WARNING,
            )

        return detection, ImageContext(reference=reference, original=original)

    def _apply(
        self, detection: Detection, context: ImageContext, choice: ResizeChoice, message: str
    ) -> ResizeOutcome:
        syntax = build_new_syntax(context, choice, self.html_style)
        replaced = replace_range(
            self.document,
            syntax,
            detection.range.start,
            detection.range.end,
            detection.text,
        )
        if not replaced:
            self._notice(STALE_MESSAGE, Severity.ERROR)
            return ResizeOutcome(OutcomeStatus.STALE, message=STALE_MESSAGE)

        self._notice(message, Severity.SUCCESS)
        return ResizeOutcome(OutcomeStatus.APPLIED, syntax=syntax, message=message)

    def _failed(self, e: Exception) -> ResizeOutcome:
        message = f"Operation failed: {e}"
        debug(f"Resize failed: {e!r}")
        self._notice(message, Severity.ERROR)
        return ResizeOutcome(OutcomeStatus.FAILED, message=message)

    def resize_image(self, selection: Selection | None = None) -> ResizeOutcome:
        """Resize the image under the cursor through the dialog.

        With a selection, the selected text must be exactly one image and is
        resized instead.

        Never raises for expected failures; the outcome says what happened.
        """
        acquired = False
        try:
            prepared = self.detect_and_prepare(selection)
            if prepared is None:
                message = self._no_image_message(selection)
                return ResizeOutcome(OutcomeStatus.NO_IMAGE, message=message)
            detection, context = prepared

            if not self.lock.try_acquire():
                info(BUSY_MESSAGE)
                self._notice(BUSY_MESSAGE)
                return ResizeOutcome(OutcomeStatus.BUSY, message=BUSY_MESSAGE)
            acquired = True

            choice = self.dialog.ask(context, self.default_mode)
            if choice is None:
                debug("Resize cancelled")
                return ResizeOutcome(OutcomeStatus.CANCELLED)

            return self._apply(detection, context, choice, SUCCESS_MESSAGE)
        except (ImageResizeError, InvalidDimensionsError, OSError) as e:
            return self._failed(e)
        finally:
            if acquired:
                self.lock.release()

    def quick_resize(
        self, percentage: float, selection: Selection | None = None
    ) -> ResizeOutcome:
        """Resize the image under the cursor to a percentage, without a dialog.

        100% means "no custom size" and converts the image to Markdown.
        """
        try:
            prepared = self.detect_and_prepare(selection)
            if prepared is None:
                message = self._no_image_message(selection)
                return ResizeOutcome(OutcomeStatus.NO_IMAGE, message=message)
            detection, context = prepared

            if percentage == 100:
                choice = ResizeChoice(
                    target=SyntaxKind.MARKDOWN, alt_text=context.reference.alt_text
                )
                message = MARKDOWN_MESSAGE
            else:
                choice = ResizeChoice(
                    target=SyntaxKind.HTML,
                    alt_text=context.reference.alt_text,
                    percentage=percentage,
                )
                message = f"Image resized to {percentage:g}%."

            return self._apply(detection, context, choice, message)
        except (ImageResizeError, InvalidDimensionsError, OSError) as e:
            return self._failed(e)

    def copy_image(self, clipboard: Clipboard) -> str | None:
        """Copy the image under the cursor to a clipboard as PNG.

        Returns:
            The PNG data URI, or None when there is no image under the cursor

        Raises:
            ImageResizeError: If the image cannot be loaded
            OSError: If it cannot be decoded or written
        """
        detection = self.detect()
        if detection is None:
            self._notice(NO_IMAGE_MESSAGE)
            return None

        reference = detection.reference
        return copy_image(
            reference.source,
            reference.source_kind,
            self.store,
            clipboard,
            self.notifier,
            timeout=self.config.dimensions.external_timeout,
            notices_enabled=self.notices_enabled,
        )
