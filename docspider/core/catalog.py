"""Seed catalog loading.

The seed catalog is a YAML mapping from documentation section name to an
ordered list of page paths. It defines the initial crawl frontier; pages found
through links while crawling are added on top of it.

Example seeds.yaml:

    Getting Started:
      - /docs/getting-started
      - /docs/security
    OAuth and OIDC:
      - /docs/oauth-oidc-overview
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path

import yaml

from docspider.crawl.models import PageTask


class SeedCatalogError(ValueError):
    """Raised when a seed catalog is missing or malformed."""


class SeedCatalog:
    """Ordered mapping of section name to page paths.

    Attributes:
        entries: Section name -> tuple of paths, in file order
    """

    def __init__(self, entries: Mapping[str, Sequence[str]]) -> None:
        self.entries: dict[str, tuple[str, ...]] = {
            section: tuple(paths) for section, paths in entries.items()
        }

    @classmethod
    def load(cls, path: Path) -> SeedCatalog:
        """Load a catalog from a YAML file.

        Args:
            path: YAML file mapping section name to a list of paths

        Returns:
            Parsed SeedCatalog

        Raises:
            SeedCatalogError: If the file is missing, is not valid YAML, or
                does not have the section -> list-of-paths shape
        """
        if not path.exists():
            raise SeedCatalogError(f"Seed catalog not found: {path}")

        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise SeedCatalogError(f"Invalid seed catalog {path}: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise SeedCatalogError(
                f"Seed catalog {path} must map section names to path lists"
            )

        entries: dict[str, list[str]] = {}
        for section, paths in data.items():
            if not isinstance(paths, list) or not all(
                isinstance(p, str) for p in paths
            ):
                raise SeedCatalogError(
                    f"Section {section!r} in {path} must be a list of paths"
                )
            for page_path in paths:
                if not page_path.startswith("/"):
                    raise SeedCatalogError(
                        f"Seed path {page_path!r} in section {section!r} "
                        "must start with '/'"
                    )
            entries[str(section)] = paths

        return cls(entries)

    @property
    def sections(self) -> list[str]:
        """Section names in catalog order."""
        return list(self.entries)

    def tasks(self) -> list[PageTask]:
        """Flatten the catalog into ordered crawl tasks.

        Duplicate paths are kept; the crawl frontier deduplicates them so
        the first occurrence decides the section tag.
        """
        return [
            PageTask(path=page_path, section=section)
            for section, paths in self.entries.items()
            for page_path in paths
        ]

    def __len__(self) -> int:
        return sum(len(paths) for paths in self.entries.values())
