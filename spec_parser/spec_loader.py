# spec_parser/spec_loader.py
import asyncio
import os
from pathlib import Path
from typing import Union

from spec_parser.dsl_models import Specification
from spec_parser.spec_parser import parse_spec


def _read_text(path: Path) -> str:
    with open(path, encoding="utf-8") as f:
        return f.read()


async def parse_spec_file(path: Union[str, os.PathLike]) -> Specification:
    """
    Read a markdown spec without blocking the event loop and parse it.
    """
    content = await asyncio.to_thread(_read_text, Path(path))
    return parse_spec(content)


class SpecLoader:

    def __init__(self, spec_dir: str):
        self.spec_dir = spec_dir

    def resolve(self, spec_name: str) -> Path:
        filename = spec_name if spec_name.endswith(".md") else f"{spec_name}.md"
        path = Path(self.spec_dir) / filename

        if not path.exists():
            raise FileNotFoundError(f"Spec not found: {path}")
        return path

    async def load(self, spec_name: str) -> Specification:
        """
        Load spec by name (".md" optional) from the spec directory
        """
        return await parse_spec_file(self.resolve(spec_name))
