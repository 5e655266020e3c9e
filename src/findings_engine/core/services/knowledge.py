from __future__ import annotations

from typing import Mapping

from ..domain.exceptions import EntityNotFound
from ..domain.knowledge import LicenseRecord, NvdRecord, OsvRecord, OwaspCategory, WeaknessRecord
from ..domain.owasp import OWASP_TOP_10_2021
from ..ports import KnowledgePort


def normalize_cwe_id(weakness_id: str) -> str:
    """``"CWE-79"`` and ``"79"`` both become ``"79"``."""
    value = weakness_id.strip()
    if value.upper().startswith("CWE-"):
        value = value[4:]
    return value


class KnowledgeLookup:
    """Read access to weakness, advisory and OWASP knowledge.

    The OWASP table is immutable and injected at construction; records come
    from the knowledge port.
    """

    def __init__(
        self,
        *,
        knowledge: KnowledgePort,
        owasp_table: Mapping[str, OwaspCategory] = OWASP_TOP_10_2021,
    ) -> None:
        self._knowledge = knowledge
        self._owasp = owasp_table

    def get_weakness(self, weakness_id: str) -> WeaknessRecord:
        """Return the CWE record for ``CWE-79`` or ``79``.

        Raises:
            EntityNotFound: If the knowledge base has no such weakness
        """
        record = self._knowledge.get_weakness(normalize_cwe_id(weakness_id))
        if record is None:
            raise EntityNotFound(f"Weakness not found: {weakness_id}")
        return record

    def find_weakness(self, weakness_id: str) -> WeaknessRecord | None:
        return self._knowledge.get_weakness(normalize_cwe_id(weakness_id))

    def get_owasp_category(self, category_id: str) -> OwaspCategory:
        """Return the OWASP Top 10 category of a CWE category-list id.

        Raises:
            EntityNotFound: If the id is not one of the ten categories
        """
        category = self._owasp.get(category_id)
        if category is None:
            raise EntityNotFound(f"OWASP category not found: {category_id}")
        return category

    def find_owasp_category(self, category_id: str | None) -> OwaspCategory | None:
        if not category_id:
            return None
        return self._owasp.get(category_id)

    def get_osv(self, osv_id: str) -> OsvRecord | None:
        return self._knowledge.get_osv(osv_id)

    def find_osv_by_cve(self, cve: str) -> OsvRecord | None:
        return self._knowledge.find_osv_by_cve(cve)

    def get_nvd(self, cve: str) -> NvdRecord | None:
        return self._knowledge.get_nvd(cve)

    def get_license(self, license_id: str) -> LicenseRecord | None:
        return self._knowledge.get_license(license_id)

    def advisory_records(self, vulnerability_id: str) -> tuple[OsvRecord | None, NvdRecord | None]:
        """Resolve both advisory records of a vulnerability id.

        GHSA ids are looked up directly in OSV and their CVE alias (if any)
        in NVD; CVE ids are looked up in NVD and via alias in OSV.
        """
        if vulnerability_id.upper().startswith("GHSA-"):
            osv = self._knowledge.get_osv(vulnerability_id)
            nvd = self._knowledge.get_nvd(osv.cve) if osv is not None and osv.cve else None
        else:
            osv = self._knowledge.find_osv_by_cve(vulnerability_id)
            nvd = self._knowledge.get_nvd(vulnerability_id)
        return osv, nvd
