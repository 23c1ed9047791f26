"""Shared type aliases for lnksweep modules."""

from collections.abc import Callable
from pathlib import Path

PathLike = str | Path
Resolver = Callable[[Path], str]
Prompt = Callable[[str], str]
