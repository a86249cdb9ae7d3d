# --- CMMC 2.0 (NIST SP 800-171 practices) --------------------------------------------------------


def _practices(prefix, items):
    """Expand ``(number, text)`` pairs into question dicts with CMMC ids."""
    return [
        {"id": f"cmmc.{prefix}.{num}", "text": text, "references": [f"NIST SP 800-171 {num}"]}
        for num, text in items
    ]


CMMC = {
    "id": "cmmc",
    "name": "CMMC (Cybersecurity Maturity Model Certification)",
    "description": "Department of Defense cybersecurity standard for contractors",
    "version": "2.0",
    "maturity_levels": [
        {"level": 1, "name": "Foundational", "description": "Basic cyber hygiene", "color": "#22c55e", "min_score": 0, "max_score": 50},
        {"level": 2, "name": "Advanced", "description": "Intermediate cyber hygiene", "color": "#eab308", "min_score": 51, "max_score": 80},
        {"level": 3, "name": "Expert", "description": "Advanced/progressive cybersecurity", "color": "#3b82f6", "min_score": 81, "max_score": 100},
    ],
    "sections": [
        {
            "id": "access-control",
            "name": "Access Control (AC)",
            "weight": 20,
            "categories": [
                {
                    "id": "access-control",
                    "name": "Access Control",
                    "questions": _practices("ac", [
                        ("3.1.1", "Limit system access to authorized users, processes acting on behalf of authorized users, and devices (including other systems)."),
                        ("3.1.2", "Limit system access to the types of transactions and functions that authorized users are permitted to execute."),
                        ("3.1.3", "Control the flow of CUI in accordance with approved authorizations."),
                        ("3.1.5", "Employ the principle of least privilege, including for specific security functions and privileged accounts."),
                        ("3.1.12", "Monitor and control remote access sessions."),
                    ]),
                },
            ],
        },
        {
            "id": "awareness-training",
            "name": "Awareness and Training (AT)",
            "weight": 8,
            "categories": [
                {
                    "id": "security-training",
                    "name": "Security Training",
                    "questions": _practices("at", [
                        ("3.2.1", "Ensure that managers, systems administrators, and users of organizational systems are made aware of the security risks associated with their activities."),
                        ("3.2.2", "Ensure that personnel are trained to carry out their assigned information security-related duties and responsibilities."),
                        ("3.2.3", "Provide security awareness training on recognizing and reporting potential indicators of insider threat."),
                    ]),
                },
            ],
        },
        {
            "id": "audit-accountability",
            "name": "Audit and Accountability (AU)",
            "weight": 12,
            "categories": [
                {
                    "id": "audit-logging",
                    "name": "Audit Logging",
                    "questions": _practices("au", [
                        ("3.3.1", "Create and retain system audit logs and records to the extent needed to enable the monitoring, analysis, investigation, and reporting of unauthorized system activity."),
                        ("3.3.2", "Ensure that the actions of individual system users can be uniquely traced to those users, so they can be held accountable for their actions."),
                        ("3.3.4", "Alert in the event of an audit logging process failure."),
                        ("3.3.8", "Protect audit information and audit logging tools from unauthorized access, modification, and deletion."),
                    ]),
                },
            ],
        },
        {
            "id": "configuration-management",
            "name": "Configuration Management (CM)",
            "weight": 12,
            "categories": [
                {
                    "id": "configuration-control",
                    "name": "Configuration Control",
                    "questions": _practices("cm", [
                        ("3.4.1", "Establish and maintain baseline configurations and inventories of organizational systems throughout the respective system development life cycles."),
                        ("3.4.2", "Establish and enforce security configuration settings for information technology products employed in organizational systems."),
                        ("3.4.3", "Track, review, approve or disapprove, and log changes to organizational systems."),
                        ("3.4.6", "Employ the principle of least functionality by configuring organizational systems to provide only essential capabilities."),
                    ]),
                },
            ],
        },
        {
            "id": "identification-authentication",
            "name": "Identification and Authentication (IA)",
            "weight": 15,
            "categories": [
                {
                    "id": "user-identification",
                    "name": "User Identification",
                    "questions": _practices("ia", [
                        ("3.5.1", "Identify system users, processes acting on behalf of users, and devices."),
                        ("3.5.2", "Authenticate (or verify) the identities of users, processes, or devices, as a prerequisite to allowing access to organizational systems."),
                        ("3.5.3", "Use multifactor authentication for local and network access to privileged accounts and for network access to non-privileged accounts."),
                        ("3.5.10", "Store and transmit only cryptographically-protected passwords."),
                    ]),
                },
            ],
        },
        {
            "id": "incident-response",
            "name": "Incident Response (IR)",
            "weight": 10,
            "categories": [
                {
                    "id": "incident-handling",
                    "name": "Incident Handling",
                    "questions": _practices("ir", [
                        ("3.6.1", "Establish an operational incident-handling capability for organizational systems that includes preparation, detection, analysis, containment, recovery, and user response activities."),
                        ("3.6.2", "Track, document, and report incidents to designated officials and/or authorities both internal and external to the organization."),
                        ("3.6.3", "Test the organizational incident response capability."),
                    ]),
                },
            ],
        },
        {
            "id": "maintenance",
            "name": "Maintenance (MA)",
            "weight": 8,
            "categories": [
                {
                    "id": "system-maintenance",
                    "name": "System Maintenance",
                    "questions": _practices("ma", [
                        ("3.7.1", "Perform maintenance on organizational systems."),
                        ("3.7.2", "Provide controls on the tools, techniques, mechanisms, and personnel used to conduct system maintenance."),
                    ]),
                },
            ],
        },
        {
            "id": "media-protection",
            "name": "Media Protection (MP)",
            "weight": 12,
            "categories": [
                {
                    "id": "media-handling",
                    "name": "Media Handling",
                    "questions": _practices("mp", [
                        ("3.8.1", "Protect (i.e., physically control and securely store) system media containing CUI, both paper and digital."),
                        ("3.8.3", "Sanitize or destroy system media containing CUI before disposal or release for reuse."),
                    ]),
                },
            ],
        },
        {
            "id": "personnel-security",
            "name": "Personnel Security (PS)",
            "weight": 6,
            "categories": [
                {
                    "id": "personnel-screening",
                    "name": "Personnel Screening",
                    "questions": _practices("ps", [
                        ("3.9.1", "Screen individuals prior to authorizing access to organizational systems containing CUI."),
                        ("3.9.2", "Ensure that organizational systems containing CUI are protected during and after personnel actions such as terminations and transfers."),
                    ]),
                },
            ],
        },
        {
            "id": "physical-protection",
            "name": "Physical Protection (PE)",
            "weight": 8,
            "categories": [
                {
                    "id": "physical-access",
                    "name": "Physical Access",
                    "questions": _practices("pe", [
                        ("3.10.1", "Limit physical access to organizational systems, equipment, and the respective operating environments to authorized individuals."),
                        ("3.10.3", "Escort visitors and monitor visitor activity."),
                    ]),
                },
            ],
        },
        {
            "id": "risk-assessment",
            "name": "Risk Assessment (RA)",
            "weight": 10,
            "categories": [
                {
                    "id": "risk-assessment",
                    "name": "Risk Assessment",
                    "questions": _practices("ra", [
                        ("3.11.1", "Periodically assess the risk to organizational operations, organizational assets, and individuals resulting from the operation of organizational systems."),
                        ("3.11.2", "Scan for vulnerabilities in organizational systems and applications periodically and when new vulnerabilities are identified."),
                        ("3.11.3", "Remediate vulnerabilities in accordance with risk assessments."),
                    ]),
                },
            ],
        },
        {
            "id": "security-assessment",
            "name": "Security Assessment (CA)",
            "weight": 8,
            "categories": [
                {
                    "id": "security-assessment",
                    "name": "Security Assessment",
                    "questions": _practices("ca", [
                        ("3.12.1", "Periodically assess the security controls in organizational systems to determine if the controls are effective in their application."),
                        ("3.12.2", "Develop and implement plans of action designed to correct deficiencies and reduce or eliminate vulnerabilities."),
                        ("3.12.4", "Develop, document, and periodically update system security plans."),
                    ]),
                },
            ],
        },
        {
            "id": "system-communications-protection",
            "name": "System and Communications Protection (SC)",
            "weight": 15,
            "categories": [
                {
                    "id": "communications-protection",
                    "name": "Communications Protection",
                    "questions": _practices("sc", [
                        ("3.13.1", "Monitor, control, and protect communications at the external boundaries and key internal boundaries of organizational systems."),
                        ("3.13.8", "Implement cryptographic mechanisms to prevent unauthorized disclosure of CUI during transmission."),
                        ("3.13.11", "Employ FIPS-validated cryptography when used to protect the confidentiality of CUI."),
                    ]),
                },
            ],
        },
        {
            "id": "system-information-integrity",
            "name": "System and Information Integrity (SI)",
            "weight": 12,
            "categories": [
                {
                    "id": "information-integrity",
                    "name": "Information Integrity",
                    "questions": _practices("si", [
                        ("3.14.1", "Identify, report, and correct system flaws in a timely manner."),
                        ("3.14.2", "Provide protection from malicious code at designated locations within organizational systems."),
                        ("3.14.6", "Monitor organizational systems, including inbound and outbound communications traffic, to detect attacks and indicators of potential attacks."),
                    ]),
                },
            ],
        },
    ],
}
