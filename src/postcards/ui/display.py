"""Scoped storage for the card currently on display.

Each generated card is written to its own file so it can be opened by an
image viewer.  :class:`CardDisplay` keeps exactly one such file alive: showing
a new card deletes the previous file, and closing the display deletes the last
one, so repeated generations never accumulate files.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from postcards.core.content_type import extension_for
from postcards.core.image_client import GeneratedImage

logger = logging.getLogger(__name__)


class CardDisplay:
    """Holds the file of the most recently shown card.

    Args:
        directory: Where card files are written.  Defaults to the system
            temporary directory.

    Usage::

        with CardDisplay() as display:
            path = display.show(card)
            ...
    """

    def __init__(self, directory: Path | str | None = None) -> None:
        self._directory = Path(directory) if directory is not None else None
        self._current: Path | None = None

    @property
    def current(self) -> Path | None:
        """Path of the card on display, or ``None``."""
        return self._current

    def show(self, image: GeneratedImage) -> Path:
        """Write *image* to a new file and release the previous one.

        Returns:
            Path of the newly written file.
        """
        with tempfile.NamedTemporaryFile(
            prefix="postcard-",
            suffix=extension_for(image.content_type),
            dir=self._directory,
            delete=False,
        ) as f:
            f.write(image.data)
            path = Path(f.name)

        self._release()
        self._current = path
        logger.debug("Displaying card %s", path)
        return path

    def close(self) -> None:
        """Delete the file of the card on display, if any."""
        self._release()

    def _release(self) -> None:
        if self._current is not None:
            self._current.unlink(missing_ok=True)
            self._current = None

    def __enter__(self) -> CardDisplay:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
