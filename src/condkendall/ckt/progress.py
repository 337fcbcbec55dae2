from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

from tqdm.auto import tqdm

from .types import ProgressCallback


@contextmanager
def progress_reporter(enabled: bool, total: int, desc: str) -> Iterator[Optional[ProgressCallback]]:
    """
    Yield a callback advancing a tqdm bar by one unit, or None when disabled.
    """
    if not enabled:
        yield None
        return
    with tqdm(total=total, desc=desc, leave=False) as bar:
        yield bar.update
