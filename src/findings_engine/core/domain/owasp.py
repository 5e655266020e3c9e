"""OWASP Top 10 (2021) categories keyed by their CWE category-list id."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from .knowledge import OwaspCategory


def _category(cwe_category_id: str, id: str, title: str, description: str) -> OwaspCategory:
    return OwaspCategory(
        id=id,
        name=f"{id}: {title}",
        description=description,
        cwe_category_id=cwe_category_id,
    )


OWASP_TOP_10_2021: Mapping[str, OwaspCategory] = MappingProxyType({
    "1345": _category(
        "1345", "A01", "Broken Access Control",
        "Improper enforcement of access restrictions on what authenticated users are allowed "
        "to access or perform within a system, may lead to loss of confidentiality, integrity "
        "and availability of sensitive resources, tampering with or destruction of data, and "
        "may allow users to act outside of their intended privileges.",
    ),
    "1346": _category(
        "1346", "A02", "Cryptographic Failures",
        "Weaknesses or misuse of cryptographic algorithms, protocols, or implementations may "
        "lead to exposure or tampering of sensitive data or systems.",
    ),
    "1347": _category(
        "1347", "A03", "Injection",
        "Improper handling of untrusted input, be it user-supplied or data fetched from "
        "external and internal sources, may lead to control-flow manipulation or code "
        "execution on the vulnerable system if the injected data is interpreted.",
    ),
    "1348": _category(
        "1348", "A04", "Insecure Design",
        "Insecure design is a broad category encompassing weaknesses that result from missing "
        "or ineffective control design, made during software or system design rather than "
        "during implementation.",
    ),
    "1349": _category(
        "1349", "A05", "Security Misconfiguration",
        "Poorly configured security settings, default configurations, or mismanagement of "
        "security-related controls, may lead to vulnerabilities and potential unauthorized access.",
    ),
    "1352": _category(
        "1352", "A06", "Vulnerable and Outdated Components",
        "Use of vulnerable or outdated components, frameworks, or libraries, which may introduce "
        "security weaknesses into an application that may be exploited by an attacker.",
    ),
    "1353": _category(
        "1353", "A07", "Identification and Authentication Failures",
        "Insufficiently secure implementation of user identification and authentication within "
        "an application or system can lead to unauthorized access, identity theft, or account "
        "compromise.",
    ),
    "1354": _category(
        "1354", "A08", "Software and Data Integrity Failures",
        "Insufficient detection or preventive measures against unauthorized modification, "
        "tampering, or corruption of data or software results in integrity failures, potential "
        "malfunctions or security breaches.",
    ),
    "1355": _category(
        "1355", "A09", "Security Logging and Monitoring Failures",
        "Insufficient or missing security logging and monitoring may result in delayed detection "
        "and reaction to active attacks and breaches, or complete failure thereof.",
    ),
    "1356": _category(
        "1356", "A10", "Server-Side Request Forgery",
        "Insufficient or missing validation of user-supplied URLs or service-requests may lead "
        "to Server-Side Request Forgery (SSRF), where an attacker tricks a server into making "
        "unauthorized requests on behalf of the server itself.",
    ),
})

# filter/counter suffix ("a1".."a10") per category id
OWASP_FILTER_SUFFIX: Mapping[str, str] = MappingProxyType({
    cwe_category_id: f"a{int(category.id[1:])}"
    for cwe_category_id, category in OWASP_TOP_10_2021.items()
})
