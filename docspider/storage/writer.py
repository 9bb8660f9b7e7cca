"""On-disk writer for chunk artifacts and the retrieval manifest.

Output layout:

    <output_dir>/
        manifest.json           chunk metadata index (no content)
        chunks/<chunk-id>.json  one full record per chunk

The chunks directory is removed and recreated on every write so the output
always reflects exactly one run.
"""

import json
import logging
import shutil
from collections.abc import Sequence
from pathlib import Path

from docspider.processing.models import DocChunk, Manifest

logger = logging.getLogger(__name__)


class OutputWriter:
    """Writes chunks and the manifest under one output directory.

    Args:
        output_dir: Root output directory

    Example:
        >>> writer = OutputWriter(Path("docs"))
        >>> writer.write(chunks, manifest)
        PosixPath('docs/manifest.json')
    """

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = output_dir
        self.chunks_dir = output_dir / "chunks"
        self.manifest_path = output_dir / "manifest.json"

    def write(self, chunks: Sequence[DocChunk], manifest: Manifest) -> Path:
        """Replace the chunk artifacts and write the manifest.

        Args:
            chunks: Chunks to persist, one file each
            manifest: Manifest describing the same chunks

        Returns:
            Path of the written manifest
        """
        if self.chunks_dir.exists():
            shutil.rmtree(self.chunks_dir)
        self.chunks_dir.mkdir(parents=True, exist_ok=True)

        for chunk in chunks:
            self._write_json(self.output_dir / chunk.file, chunk.to_dict())
        self._write_json(self.manifest_path, manifest.to_dict())

        logger.info(f"Wrote {len(chunks)} chunks and manifest to {self.output_dir}")
        return self.manifest_path

    def _write_json(self, path: Path, data: dict) -> None:
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
