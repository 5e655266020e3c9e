import json

import pytest

from findings_engine.infra.adapters.knowledge_base import JsonKnowledgeBase
from tests.findings_engine.fakes import FakeLogger

OSV_DOC = {
    "schema_version": "1.4.0",
    "id": "GHSA-jf85-cpcp-j695",
    "summary": "Prototype Pollution in lodash",
    "details": "Versions of lodash before 4.17.12 are vulnerable.",
    "aliases": ["CVE-2019-10744"],
    "published": "2019-07-10T19:45:23Z",
    "modified": "2023-01-01T00:00:00Z",
    "severity": [{"type": "CVSS_V3", "score": "CVSS:3.1/AV:N/AC:L/PR:N/UI:N/S:U/C:H/I:H/A:H"}],
    "references": [{"type": "ADVISORY", "url": "https://nvd.nist.gov/vuln/detail/CVE-2019-10744"}],
    "affected": [{"package": {"ecosystem": "npm", "name": "lodash"}}],
}

NVD_DOC = {
    "id": "CVE-2019-10744",
    "published": "2019-07-26T00:15:11.217",
    "lastModified": "2024-11-21T04:19:53.843",
    "descriptions": [{"lang": "en", "value": "Versions of lodash lower than 4.17.12 are vulnerable."}],
    "metrics": {
        "cvssMetricV31": [{
            "source": "nvd@nist.gov",
            "type": "Primary",
            "cvssData": {"version": "3.1", "vectorString": "CVSS:3.1/AV:N/AC:L/PR:N/UI:N/S:U/C:N/I:H/A:H", "baseScore": 9.1},
        }],
        "cvssMetricV2": [{
            "source": "nvd@nist.gov",
            "cvssData": {"version": "2.0", "vectorString": "AV:N/AC:L/Au:N/C:N/I:P/A:P"},
            "userInteractionRequired": False,
        }],
    },
    "references": [{"url": "https://github.com/lodash/lodash/pull/4336", "tags": ["Patch", "Third Party Advisory"]}],
}

CWE_DOC = {
    "ID": "1321",
    "Name": "Improperly Controlled Modification of Object Prototype Attributes ('Prototype Pollution')",
    "Description": "The product receives input that specifies attributes to be added to a prototype.",
    "CommonConsequences": [{"Scope": ["Integrity"], "Impact": ["Modify Application Data"], "Note": "An attacker can inject attributes."}],
}

PACKAGE_DOC = {
    "name": "request",
    "description": "Simplified HTTP request client.",
    "dist-tags": {"latest": "2.88.2"},
    "time": {"modified": "2023-06-22T16:32:50.000Z", "2.88.0": "2018-08-10T18:00:00.000Z", "2.88.2": "2020-02-11T16:00:00.000Z"},
    "repository": {"type": "git", "url": "git+https://github.com/request/request.git"},
    "versions": {
        "2.88.0": {"name": "request", "version": "2.88.0", "deprecated": "request has been deprecated"},
        "2.88.2": {"name": "request", "version": "2.88.2", "deprecated": True},
    },
}

LICENSE_DOC = {
    "licenseId": "MIT",
    "name": "MIT License",
    "seeAlso": ["https://opensource.org/license/mit/"],
    "isOsiApproved": True,
    "classification": "permissive",
    "properties": {"permissions": ["commercial-use", "modifications"]},
}


def _write(base, kind, record_id, payload):
    fp = base / kind / f"{record_id}.json"
    fp.parent.mkdir(parents=True, exist_ok=True)
    fp.write_text(payload if isinstance(payload, str) else json.dumps(payload), encoding="utf-8")


@pytest.fixture
def kb(tmp_path):
    _write(tmp_path, "osv", "GHSA-jf85-cpcp-j695", OSV_DOC)
    _write(tmp_path, "nvd", "CVE-2019-10744", NVD_DOC)
    _write(tmp_path, "cwe", "1321", CWE_DOC)
    _write(tmp_path, "packages", "request", PACKAGE_DOC)
    _write(tmp_path, "licenses", "MIT", LICENSE_DOC)
    return JsonKnowledgeBase(knowledge_dir=tmp_path, logger=FakeLogger())


def test_get_osv(kb):
    record = kb.get_osv("GHSA-jf85-cpcp-j695")
    assert record.cve == "CVE-2019-10744"
    assert record.severity[0].type == "CVSS_V3"
    assert record.references[0].type == "ADVISORY"


def test_find_osv_by_cve(kb):
    assert kb.find_osv_by_cve("CVE-2019-10744").osv_id == "GHSA-jf85-cpcp-j695"
    assert kb.find_osv_by_cve("CVE-2000-0001") is None


def test_get_nvd(kb):
    record = kb.get_nvd("CVE-2019-10744")
    assert record.english_description.startswith("Versions of lodash")
    assert record.last_modified == "2024-11-21T04:19:53.843"
    assert record.cvss_v31[0].vector.endswith("A:H")
    assert record.cvss_v2[0].user_interaction_required is False
    assert record.cvss_v30 == ()
    assert record.references[0].tags == ("Patch", "Third Party Advisory")


def test_get_weakness(kb):
    record = kb.get_weakness("1321")
    assert record.name.endswith("('Prototype Pollution')")
    assert record.common_consequences[0].scope == ("Integrity",)
    assert record.common_consequences[0].description == "An attacker can inject attributes."


def test_get_package(kb):
    record = kb.get_package("request")
    assert record.latest_version == "2.88.2"
    assert record.time == "2023-06-22T16:32:50.000Z"
    assert record.repository_url == "git+https://github.com/request/request.git"
    assert record.version("2.88.0").deprecated == "request has been deprecated"
    assert record.version("2.88.0").time == "2018-08-10T18:00:00.000Z"
    assert record.version("2.88.2").deprecated == "deprecated"


def test_get_license(kb):
    record = kb.get_license("MIT")
    assert record.classification == "permissive"
    assert record.properties == {"permissions": ("commercial-use", "modifications")}
    assert record.see_also == ("https://opensource.org/license/mit/",)


def test_missing_records(kb):
    assert kb.get_osv("GHSA-none") is None
    assert kb.get_nvd("CVE-2000-0001") is None
    assert kb.get_weakness("79") is None
    assert kb.get_license("Apache-2.0") is None
    assert kb.get_package("left-pad") is None


def test_path_traversal_is_rejected(kb):
    assert kb.get_package("../packages/request") is None


def test_invalid_record_is_logged(tmp_path):
    _write(tmp_path, "nvd", "CVE-2020-0001", {"descriptions": []})
    _write(tmp_path, "osv", "GHSA-bad", "[1, 2")
    logger = FakeLogger()
    kb = JsonKnowledgeBase(knowledge_dir=tmp_path, logger=logger)

    assert kb.get_nvd("CVE-2020-0001") is None
    assert kb.get_osv("GHSA-bad") is None
    assert logger.messages("warning") == ["knowledge_record_invalid", "knowledge_record_invalid"]
