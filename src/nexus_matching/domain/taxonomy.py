"""Sector taxonomy: industry verticals with bilingual names and cultural keywords.

Usage example:
    from nexus_matching.domain.taxonomy import DEFAULT_SECTOR_CATALOG

    sector = DEFAULT_SECTOR_CATALOG.get_sector("oil-gas")
    assert sector.name_en == "Oil & Gas"
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from types import MappingProxyType

from ..exceptions import SectorNotFoundError


@dataclass(frozen=True)
class Sector:
    """An industry vertical.

    ``keywords`` identify the sector in free text (job postings);
    ``cultural_keywords`` signal localisation or regulatory familiarity.
    """

    id: str
    name_en: str
    name_ar: str
    keywords: tuple[str, ...] = ()
    cultural_keywords: tuple[str, ...] = ()


class SectorCatalog:
    """Read-only, id-indexed sector catalogue."""

    def __init__(self, sectors: Iterable[Sector]) -> None:
        ordered = tuple(sectors)
        by_id: dict[str, Sector] = {}
        for sector in ordered:
            if sector.id in by_id:
                raise ValueError(f"Duplicate sector id: {sector.id!r}")
            by_id[sector.id] = sector
        self._sectors = ordered
        self._by_id = MappingProxyType(by_id)

    def list_sectors(self) -> tuple[Sector, ...]:
        return self._sectors

    def get_sector(self, sector_id: str) -> Sector:
        try:
            return self._by_id[sector_id]
        except KeyError:
            raise SectorNotFoundError(sector_id) from None

    def has_sector(self, sector_id: str) -> bool:
        return sector_id in self._by_id

    def __len__(self) -> int:
        return len(self._sectors)


DEFAULT_SECTORS: tuple[Sector, ...] = (
    Sector(
        id="technology",
        name_en="Technology",
        name_ar="التكنولوجيا",
        keywords=(
            "software",
            "digital transformation",
            "cybersecurity",
            "data analytics",
            "cloud computing",
            "blockchain",
            "fintech",
        ),
        cultural_keywords=("smart city", "uae digital government", "tdra", "pdpl", "arabic nlp"),
    ),
    Sector(
        id="finance",
        name_en="Finance & Banking",
        name_ar="المالية والمصرفية",
        keywords=("banking", "finance", "accounting", "investment", "risk management"),
        cultural_keywords=(
            "islamic finance",
            "islamic banking",
            "sharia compliance",
            "difc",
            "adgm",
            "central bank",
        ),
    ),
    Sector(
        id="healthcare",
        name_en="Healthcare",
        name_ar="الرعاية الصحية",
        keywords=("healthcare", "medical", "pharmaceutical", "patient care", "clinical"),
        cultural_keywords=("dha", "doh abu dhabi", "mohap", "jci accreditation"),
    ),
    Sector(
        id="oil-gas",
        name_en="Oil & Gas",
        name_ar="النفط والغاز",
        keywords=("oil", "gas", "petroleum", "drilling", "refining", "petrochemicals"),
        cultural_keywords=("adnoc", "hse", "iosh", "nebosh", "upstream", "downstream"),
    ),
    Sector(
        id="leadership",
        name_en="Leadership & Management",
        name_ar="القيادة والإدارة",
        keywords=("leadership", "management", "executive coaching", "change management"),
        cultural_keywords=("cross-cultural", "gcc", "middle east", "emiratisation"),
    ),
    Sector(
        id="hospitality",
        name_en="Hospitality",
        name_ar="الضيافة",
        keywords=("hospitality", "hotel management", "guest relations", "customer service"),
        cultural_keywords=("arabic hospitality", "dtcm", "ramadan service", "emirati culture"),
    ),
    Sector(
        id="retail",
        name_en="Retail",
        name_ar="التجزئة",
        keywords=("retail", "merchandising", "e-commerce", "sales", "supply chain"),
        cultural_keywords=("gcc retail", "arabic customer service", "mall operations"),
    ),
    Sector(
        id="real-estate",
        name_en="Real Estate",
        name_ar="العقارات",
        keywords=("real estate", "property management", "construction", "development"),
        cultural_keywords=("rera", "dubai land department", "emaar"),
    ),
    Sector(
        id="tourism",
        name_en="Tourism",
        name_ar="السياحة",
        keywords=("tourism", "travel", "heritage", "events"),
        cultural_keywords=("cultural tourism", "expo", "emirati heritage"),
    ),
    Sector(
        id="education",
        name_en="Education",
        name_ar="التعليم",
        keywords=("education", "curriculum", "instructional design", "teaching"),
        cultural_keywords=("khda", "adek", "moe curriculum", "arabic curriculum"),
    ),
    Sector(
        id="government",
        name_en="Government",
        name_ar="القطاع الحكومي",
        keywords=("government", "public sector", "policy", "ministry"),
        cultural_keywords=("uae vision 2031", "federal authority", "emiratisation", "arabic"),
    ),
    Sector(
        id="logistics",
        name_en="Logistics",
        name_ar="الخدمات اللوجستية",
        keywords=("logistics", "shipping", "freight", "warehouse", "ports"),
        cultural_keywords=("jafza", "dp world", "customs", "free zone"),
    ),
    Sector(
        id="manufacturing",
        name_en="Manufacturing",
        name_ar="التصنيع",
        keywords=("manufacturing", "lean", "six sigma", "production", "quality control"),
        cultural_keywords=("esma", "in-country value", "icv", "make it in the emirates"),
    ),
)

DEFAULT_SECTOR_CATALOG = SectorCatalog(DEFAULT_SECTORS)
