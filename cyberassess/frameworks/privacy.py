# --- NIST Privacy Framework v1.0 -----------------------------------------------------------------

PRIVACY = {
    "id": "privacy",
    "name": "NIST Privacy Framework",
    "description": "A tool for improving privacy through enterprise risk management",
    "version": "1.0",
    "maturity_levels": [
        {"level": 1, "name": "Partial", "description": "Ad hoc privacy practices", "color": "#ef4444", "min_score": 0, "max_score": 20},
        {"level": 2, "name": "Risk Informed", "description": "Privacy risk management practices approved by management", "color": "#f97316", "min_score": 21, "max_score": 40},
        {"level": 3, "name": "Repeatable", "description": "Organization-wide approach to managing privacy risk", "color": "#eab308", "min_score": 41, "max_score": 60},
        {"level": 4, "name": "Adaptive", "description": "Organization adapts its privacy practices", "color": "#22c55e", "min_score": 61, "max_score": 80},
        {"level": 5, "name": "Optimized", "description": "Continuous improvement based on privacy lessons learned", "color": "#3b82f6", "min_score": 81, "max_score": 100},
    ],
    "sections": [
        {
            "id": "identify-p",
            "name": "Identify-P",
            "weight": 25,
            "categories": [
                {
                    "id": "inventory-mapping",
                    "name": "Inventory and Mapping (ID.IM-P)",
                    "questions": [
                        {"id": "privacy.id.im.p1", "text": "Are systems/products/services that process personally identifiable information (PII) inventoried?"},
                        {"id": "privacy.id.im.p5", "text": "Are purposes for which PII is processed by systems/products/services inventoried?"},
                        {"id": "privacy.id.im.p8", "text": "Are data flows among systems/products/services that process PII inventoried?"},
                    ],
                },
                {
                    "id": "risk-assessment-p",
                    "name": "Risk Assessment (ID.RA-P)",
                    "questions": [
                        {"id": "privacy.id.ra.p1", "text": "Are potential problematic data actions and associated problems identified?"},
                        {"id": "privacy.id.ra.p4", "text": "Are privacy risks associated with external sharing of PII identified?"},
                    ],
                },
            ],
        },
        {
            "id": "govern-p",
            "name": "Govern-P",
            "weight": 20,
            "categories": [
                {
                    "id": "policy-p",
                    "name": "Policy (GV.PO-P)",
                    "questions": [
                        {"id": "privacy.gv.po.p1", "text": "Is organizational privacy policy developed, disseminated, and implemented?"},
                        {"id": "privacy.gv.po.p2", "text": "Are privacy policies regularly reviewed and updated?"},
                    ],
                },
                {
                    "id": "monitoring-p",
                    "name": "Monitoring (GV.MT-P)",
                    "questions": [
                        {"id": "privacy.gv.mt.p1", "text": "Are privacy program performance monitored and evaluated?"},
                    ],
                },
            ],
        },
        {
            "id": "control-p",
            "name": "Control-P",
            "weight": 25,
            "categories": [
                {
                    "id": "data-processing-management",
                    "name": "Data Processing Management (CT.DM-P)",
                    "questions": [
                        {"id": "privacy.ct.dm.p1", "text": "Are data processing practices managed to limit PII processing to the identified purpose(s)?"},
                        {"id": "privacy.ct.dm.p3", "text": "Are data retention and disposal practices implemented for PII?"},
                        {"id": "privacy.ct.dm.p4", "text": "Are PII processing activities limited to the minimum necessary to achieve the identified purpose?"},
                    ],
                },
            ],
        },
        {
            "id": "communicate-p",
            "name": "Communicate-P",
            "weight": 15,
            "categories": [
                {
                    "id": "data-subject-participation",
                    "name": "Data Subject Participation (CM.DS-P)",
                    "questions": [
                        {"id": "privacy.cm.ds.p1", "text": "Are mechanisms for data subject participation and control provided?"},
                        {"id": "privacy.cm.ds.p2", "text": "Are individuals' privacy preferences respected and implemented?"},
                    ],
                },
            ],
        },
        {
            "id": "protect-p",
            "name": "Protect-P",
            "weight": 15,
            "categories": [
                {
                    "id": "data-processing-ecosystem",
                    "name": "Data Processing Ecosystem (PR.DS-P)",
                    "questions": [
                        {"id": "privacy.pr.ds.p1", "text": "Are data-at-rest and data-in-transit protected?"},
                        {"id": "privacy.pr.ds.p2", "text": "Are integrity checking mechanisms used to verify data and software integrity?"},
                    ],
                },
            ],
        },
    ],
}
