"""Tree-structured site registry used to exercise the instrumentation engine."""

from dataclasses import dataclass, field
from typing import Dict, Optional, Set

from objdiag import ensure


@dataclass
class Site:
    id: int
    name: str
    parent_id: Optional[int] = None
    children: Set[int] = field(default_factory=set)

    def self_check(self) -> None:
        ensure(self.id != self.parent_id, f"Site {self.name} cannot be its own parent.")


class SiteOrganizer:
    """Flat map of sites whose parent/child links must stay consistent."""

    def __init__(self) -> None:
        self._sites: Dict[int, Site] = {}

    def self_check(self) -> None:
        for site in self._sites.values():
            ensure(site.id != site.parent_id, f"Site {site.name} cannot be its own parent.")
            ensure(
                site.parent_id is None or site.parent_id in self._sites,
                f"Parent site of {site.name} must exist.",
            )
            ensure(
                all(child in self._sites for child in site.children),
                f"Site {site.name} must have valid children.",
            )

    def add_site(self, site_id: int, name: str, parent_id: Optional[int] = None) -> "SiteOrganizer":
        ensure(site_id not in self._sites, f"Site {name} should not have been added before.")
        ensure(site_id != parent_id, f"Site {name} cannot be its own parent.")
        ensure(parent_id is None or parent_id in self._sites, f"Parent site of {name} must exist.")

        self._sites[site_id] = Site(site_id, name, parent_id)
        if parent_id is not None:
            self._sites[parent_id].children.add(site_id)
        return self

    def remove_site(self, site_id: int) -> "SiteOrganizer":
        ensure(site_id in self._sites, f"Site #{site_id} must exist.")
        ensure(not self._sites[site_id].children, f"Site #{site_id} must have no children.")

        site = self._sites.pop(site_id)
        if site.parent_id is not None:
            self._sites[site.parent_id].children.discard(site_id)
        return self

    def reparent(self, site_id: int, parent_id: Optional[int]) -> None:
        # Moves the site without validating the new parent
        self._sites[site_id].parent_id = parent_id

    def get_site(self, site_id: int) -> Optional[Site]:
        return self._sites.get(site_id)

    def get_sites(self) -> Dict[int, Site]:
        return self._sites


def make_sample_sites() -> SiteOrganizer:
    """HQ with two regional offices, each with one local site."""
    return (
        SiteOrganizer()
        .add_site(1, "HQ")
        .add_site(2, "Regional Office A", parent_id=1)
        .add_site(3, "Regional Office B", parent_id=1)
        .add_site(4, "Local Site A1", parent_id=2)
        .add_site(5, "Local Site B1", parent_id=3)
    )
