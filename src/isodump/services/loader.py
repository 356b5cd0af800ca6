import logging
import mmap
import os
from contextlib import contextmanager
from typing import Iterator, Union

from ..errors import InputUnavailable

logger = logging.getLogger(__name__)


@contextmanager
def open_container(path: Union[str, os.PathLike]) -> Iterator[mmap.mmap]:
    """
    Map a container file read-only for the duration of the block

    Raises:
        InputUnavailable: If the file cannot be opened or mapped, empty files included
    """
    try:
        with open(path, "rb") as f:
            # mmap refuses zero-length files with ValueError
            data = mmap.mmap(f.fileno(), 0, access=mmap.ACCESS_READ)
    except (OSError, ValueError) as e:
        logger.debug(f"Failed to map {path}: {e}")
        raise InputUnavailable(f"cannot open {path}") from e

    try:
        yield data
    finally:
        data.close()
