# --- NIST CSF v2.0 Quick Check -------------------------------------------------------------------

NIST_CSF_V2 = {
    "id": "nist-csf-v2",
    "name": "NIST CSF v2.0 - Quick Check",
    "description": (
        "A rapid assessment covering essential aspects of the NIST Cybersecurity "
        "Framework v2.0 for quick organizational evaluation."
    ),
    "version": "2.0",
    "maturity_levels": [
        {"level": 1, "name": "Partial", "description": "Some cybersecurity activities are performed but not formalized.", "color": "#FF6B6B", "min_score": 0, "max_score": 25},
        {"level": 2, "name": "Risk Informed", "description": "Cybersecurity activities are informed by risk management processes.", "color": "#FFD166", "min_score": 26, "max_score": 50},
        {"level": 3, "name": "Repeatable", "description": "Cybersecurity activities are consistently performed and documented.", "color": "#3A9CA8", "min_score": 51, "max_score": 75},
        {"level": 4, "name": "Adaptive", "description": "Cybersecurity activities are continuously improved and adapted.", "color": "#4CAF50", "min_score": 76, "max_score": 100},
    ],
    "sections": [
        {
            "id": "govern",
            "name": "Govern (GV)",
            "description": "Establishes the organization's cybersecurity strategy, expectations, and policy to manage cybersecurity risk.",
            "weight": 20,
            "categories": [
                {
                    "id": "gv.oc",
                    "name": "Organizational Context",
                    "questions": [
                        {
                            "id": "gv.oc-q1",
                            "text": "Has your organization established cybersecurity governance and oversight?",
                            "guidance": "Governance aligns cybersecurity activities with business objectives and risk tolerance through executive oversight, policy and strategic planning.",
                            "references": ["NIST CSF v2.0 GV.OC-01"],
                        },
                        {
                            "id": "gv.oc-q2",
                            "text": "Are cybersecurity roles, responsibilities, and authorities clearly defined throughout the organization?",
                            "guidance": "Clear role definitions give accountability across all organizational levels.",
                            "references": ["NIST CSF v2.0 GV.OC-02"],
                        },
                    ],
                },
                {
                    "id": "gv.rm",
                    "name": "Risk Management Strategy",
                    "questions": [
                        {
                            "id": "gv.rm-q1",
                            "text": "Has your organization established a comprehensive cybersecurity risk management strategy?",
                            "guidance": "The strategy defines how risks are identified, analyzed, evaluated and treated in line with business objectives.",
                            "references": ["NIST CSF v2.0 GV.RM-01"],
                        },
                    ],
                },
            ],
        },
        {
            "id": "identify",
            "name": "Identify (ID)",
            "description": "Develops an organizational understanding to manage cybersecurity risk to systems, people, assets, data, and capabilities.",
            "weight": 20,
            "categories": [
                {
                    "id": "id.am",
                    "name": "Asset Management",
                    "questions": [
                        {
                            "id": "id.am-q1",
                            "text": "Are organizational assets inventoried and managed throughout their lifecycle?",
                            "guidance": "Identify and maintain awareness of hardware, software, systems, data and facilities.",
                            "references": ["NIST CSF v2.0 ID.AM-01"],
                        },
                        {
                            "id": "id.am-q2",
                            "text": "Are software platforms and applications within the organization inventoried and managed?",
                            "guidance": "A software inventory underpins license, vulnerability and patch management.",
                            "references": ["NIST CSF v2.0 ID.AM-02"],
                        },
                    ],
                },
                {
                    "id": "id.ra",
                    "name": "Risk Assessment",
                    "questions": [
                        {
                            "id": "id.ra-q1",
                            "text": "Are cybersecurity risks regularly identified, analyzed, and documented across the organization?",
                            "guidance": "Regular assessments prioritize improvement by business impact and likelihood.",
                            "references": ["NIST CSF v2.0 ID.RA-01"],
                        },
                    ],
                },
            ],
        },
        {
            "id": "protect",
            "name": "Protect (PR)",
            "description": "Implements appropriate safeguards to ensure delivery of critical infrastructure services.",
            "weight": 25,
            "categories": [
                {
                    "id": "pr.ac",
                    "name": "Identity Management and Access Control",
                    "questions": [
                        {
                            "id": "pr.ac-q1",
                            "text": "Are access controls implemented to manage authorized access to assets and associated facilities?",
                            "references": ["NIST CSF v2.0 PR.AA-01"],
                        },
                        {
                            "id": "pr.ac-q2",
                            "text": "Is physical access to assets managed and restricted to authorized personnel?",
                            "references": ["NIST CSF v2.0 PR.AA-06"],
                        },
                    ],
                },
                {
                    "id": "pr.ds",
                    "name": "Data Security",
                    "questions": [
                        {
                            "id": "pr.ds-q1",
                            "text": "Is data protected both at rest and in transit?",
                            "references": ["NIST CSF v2.0 PR.DS-01", "NIST CSF v2.0 PR.DS-02"],
                        },
                    ],
                },
            ],
        },
        {
            "id": "detect",
            "name": "Detect (DE)",
            "description": "Develops and implements appropriate activities to identify the occurrence of a cybersecurity event.",
            "weight": 15,
            "categories": [
                {
                    "id": "de.ae",
                    "name": "Anomalies and Events",
                    "questions": [
                        {
                            "id": "de.ae-q1",
                            "text": "Are systems monitored to detect cybersecurity events and anomalies?",
                            "references": ["NIST CSF v2.0 DE.AE-02"],
                        },
                        {
                            "id": "de.ae-q2",
                            "text": "Are cybersecurity event detection processes documented and understood by relevant personnel?",
                            "references": ["NIST CSF v2.0 DE.AE-06"],
                        },
                    ],
                },
                {
                    "id": "de.cm",
                    "name": "Security Continuous Monitoring",
                    "questions": [
                        {
                            "id": "de.cm-q1",
                            "text": "Are networks and systems continuously monitored for cybersecurity events?",
                            "references": ["NIST CSF v2.0 DE.CM-01"],
                        },
                    ],
                },
            ],
        },
        {
            "id": "respond",
            "name": "Respond (RS)",
            "description": "Develops and implements appropriate activities regarding a detected cybersecurity event.",
            "weight": 12,
            "categories": [
                {
                    "id": "rs.rp",
                    "name": "Response Planning",
                    "questions": [
                        {
                            "id": "rs.rp-q1",
                            "text": "Are incident response procedures established and maintained?",
                            "references": ["NIST CSF v2.0 RS.MA-01"],
                        },
                        {
                            "id": "rs.rp-q2",
                            "text": "Are communication plans established for cybersecurity incident response?",
                            "references": ["NIST CSF v2.0 RS.CO-02"],
                        },
                    ],
                },
            ],
        },
        {
            "id": "recover",
            "name": "Recover (RC)",
            "description": "Maintains plans for resilience and restores capabilities or services impaired by a cybersecurity event.",
            "weight": 8,
            "categories": [
                {
                    "id": "rc.rp",
                    "name": "Recovery Planning",
                    "questions": [
                        {
                            "id": "rc.rp-q1",
                            "text": "Are recovery procedures established and maintained for cybersecurity incidents?",
                            "references": ["NIST CSF v2.0 RC.RP-01"],
                        },
                        {
                            "id": "rc.rp-q2",
                            "text": "Are backup and restoration procedures tested and validated regularly?",
                            "references": ["NIST CSF v2.0 RC.RP-02"],
                        },
                    ],
                },
            ],
        },
    ],
}
