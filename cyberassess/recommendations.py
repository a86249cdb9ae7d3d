"""Static recommendation text, keyed by framework id and section id.

``GENERATORS`` maps a framework id to the function that produces guidance for
one of its sections. Unknown frameworks use ``generic_guidance``; unknown
section ids yield empty lists and the generic business-impact sentence.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional


DEFAULT_IMPACT = "Implementation gap increases overall cybersecurity risk exposure"


@dataclass
class Guidance:
    recommendations: List[str] = field(default_factory=list)
    required_actions: List[str] = field(default_factory=list)
    business_impact: str = DEFAULT_IMPACT


NIST_RECS = {
    "govern": [
        "Establish formal cybersecurity governance framework",
        "Define clear roles and responsibilities for cybersecurity",
        "Implement risk management strategy and procedures",
        "Develop cybersecurity policies aligned with business objectives",
    ],
    "identify": [
        "Complete comprehensive asset inventory and classification",
        "Conduct thorough risk assessments across all business functions",
        "Implement continuous asset discovery and monitoring",
        "Establish risk tolerance and acceptance criteria",
    ],
    "protect": [
        "Deploy identity and access management controls",
        "Implement data protection and encryption measures",
        "Establish security awareness training programs",
        "Deploy protective technologies and monitoring tools",
    ],
    "detect": [
        "Implement continuous monitoring capabilities",
        "Deploy security event detection and analysis tools",
        "Establish security operations center (SOC) capabilities",
        "Implement threat intelligence and anomaly detection",
    ],
    "respond": [
        "Develop comprehensive incident response plans",
        "Establish incident response team and procedures",
        "Implement communication and coordination protocols",
        "Conduct regular incident response exercises",
    ],
    "recover": [
        "Develop business continuity and disaster recovery plans",
        "Implement backup and recovery procedures",
        "Establish recovery time and point objectives",
        "Conduct regular recovery testing and validation",
    ],
}

NIST_ACTIONS = {
    "govern": [
        "Appoint cybersecurity governance committee",
        "Develop cybersecurity strategy document",
        "Establish policy review and approval process",
        "Implement governance metrics and reporting",
    ],
    "identify": [
        "Deploy automated asset discovery tools",
        "Conduct comprehensive risk assessment",
        "Implement vulnerability management program",
        "Establish threat intelligence capabilities",
    ],
    "protect": [
        "Deploy multi-factor authentication",
        "Implement data loss prevention (DLP)",
        "Establish security training program",
        "Deploy endpoint protection platforms",
    ],
    "detect": [
        "Deploy SIEM/SOAR platforms",
        "Implement network monitoring tools",
        "Establish 24/7 monitoring capabilities",
        "Deploy threat hunting capabilities",
    ],
    "respond": [
        "Create incident response playbooks",
        "Establish incident response team",
        "Implement crisis communication plan",
        "Conduct tabletop exercises",
    ],
    "recover": [
        "Develop business continuity plans",
        "Implement backup and recovery systems",
        "Establish recovery testing schedule",
        "Create communication and coordination procedures",
    ],
}

NIST_IMPACTS = {
    "govern": "Lack of governance increases regulatory compliance risks and reduces executive oversight of cybersecurity initiatives",
    "identify": "Poor asset and risk visibility increases likelihood of undetected vulnerabilities and compliance gaps",
    "protect": "Inadequate protective measures significantly increase risk of successful cyberattacks and data breaches",
    "detect": "Limited detection capabilities result in longer dwell time for threats and increased incident impact",
    "respond": "Ineffective response capabilities lead to extended downtime and greater business disruption during incidents",
    "recover": "Poor recovery capabilities result in prolonged business disruption and potential revenue loss",
}

CMMC_RECS = {
    "access-control": [
        "Enforce least privilege and separate duties for CUI systems",
        "Control and monitor remote access sessions",
    ],
    "awareness-training": [
        "Run role-based security awareness training annually",
        "Add insider-threat indicators to the training curriculum",
    ],
    "audit-accountability": [
        "Centralize audit logs and protect them from tampering",
        "Alert on audit logging failures",
    ],
    "configuration-management": [
        "Maintain baseline configurations for all CUI systems",
        "Route system changes through a change control board",
    ],
    "identification-authentication": [
        "Require multifactor authentication for privileged and network access",
        "Store and transmit only cryptographically protected passwords",
    ],
    "incident-response": [
        "Stand up an incident-handling capability covering the full lifecycle",
        "Test the incident response capability at least annually",
    ],
    "maintenance": ["Control maintenance tools and supervise maintenance personnel"],
    "media-protection": ["Sanitize media containing CUI before disposal or reuse"],
    "personnel-security": ["Screen personnel before granting access to CUI systems"],
    "physical-protection": ["Limit and log physical access to CUI environments"],
    "risk-assessment": [
        "Perform periodic risk assessments of CUI systems",
        "Scan for and remediate vulnerabilities on a defined cadence",
    ],
    "security-assessment": [
        "Maintain the system security plan and plans of action",
    ],
    "system-communications-protection": [
        "Use FIPS-validated cryptography for CUI in transit",
        "Monitor and protect system boundaries",
    ],
    "system-information-integrity": [
        "Patch system flaws within defined timeframes",
        "Deploy malicious code protection and traffic monitoring",
    ],
}

CMMC_ACTIONS = {
    "access-control": ["Document authorized users and access rights", "Deploy session lock and termination"],
    "identification-authentication": ["Roll out MFA for all privileged accounts"],
    "incident-response": ["Write incident-handling procedures", "Define DoD reporting channels"],
    "system-communications-protection": ["Inventory cryptographic modules and FIPS status"],
}

PRIVACY_RECS = {
    "identify-p": [
        "Inventory systems, data elements and data flows that process PII",
        "Assess privacy risks of problematic data actions",
    ],
    "govern-p": [
        "Publish and periodically review the organizational privacy policy",
        "Monitor privacy program performance",
    ],
    "control-p": [
        "Limit PII processing to identified purposes",
        "Implement retention and disposal schedules for PII",
    ],
    "communicate-p": [
        "Provide data subject participation and preference mechanisms",
    ],
    "protect-p": [
        "Protect PII at rest and in transit",
        "Verify data and software integrity",
    ],
}

PRIVACY_ACTIONS = {
    "identify-p": ["Build a PII data map"],
    "govern-p": ["Appoint a privacy program owner"],
    "control-p": ["Define a PII retention matrix"],
    "communicate-p": ["Stand up a data subject request workflow"],
    "protect-p": ["Enable encryption for PII stores"],
}


def _table_guidance(recs, actions, impacts=None) -> Callable[[str, int], Guidance]:
    impacts = impacts or {}

    def generate(section_id: str, gap: int) -> Guidance:
        return Guidance(
            recommendations=list(recs.get(section_id, [])),
            required_actions=list(actions.get(section_id, [])),
            business_impact=impacts.get(section_id, DEFAULT_IMPACT),
        )

    return generate


def generic_guidance(section_id: str, gap: int) -> Guidance:
    return Guidance()


GENERATORS: Dict[str, Callable[[str, int], Guidance]] = {
    "nist-csf-v2": _table_guidance(NIST_RECS, NIST_ACTIONS, NIST_IMPACTS),
    "cmmc": _table_guidance(CMMC_RECS, CMMC_ACTIONS),
    "privacy": _table_guidance(PRIVACY_RECS, PRIVACY_ACTIONS),
}


def guidance_for(framework_id: Optional[str], section_id: str, gap: int) -> Guidance:
    return GENERATORS.get(framework_id or "nist-csf-v2", generic_guidance)(section_id, gap)


def table_section_ids() -> Dict[str, List[str]]:
    """Section ids referenced by each framework's recommendation tables."""
    return {
        "nist-csf-v2": sorted(set(NIST_RECS) | set(NIST_ACTIONS) | set(NIST_IMPACTS)),
        "cmmc": sorted(set(CMMC_RECS) | set(CMMC_ACTIONS)),
        "privacy": sorted(set(PRIVACY_RECS) | set(PRIVACY_ACTIONS)),
    }
