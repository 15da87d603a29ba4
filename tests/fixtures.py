"""Canned Taxo API payloads used across the test suite."""

from __future__ import annotations

APP_BASE_URL = "https://app.test.taxo"
DEMO_BASE_URL = "https://demo.test.taxo"

EXTRACTION_ACCEPTED = {
    "status": "accepted",
    "message": "Extraction queued",
    "job_id": "4f1c2a",
}

COMPLIANCE_OPINION = {
    "rfc": "ZAHM8212203I2",
    "sentido": "Positivo",
    "fecha_emision": "2025-04-02",
    "folio": "25NB1234567",
}

MONTHLY_TAX_REPORT = {
    "rfc": "ZAHM8212203I2",
    "period": "2025-04",
    "isr": {"causado": 1520.55, "retenido": 0},
    "iva": {"trasladado": 4800.0, "acreditable": 3120.4},
}

CATEGORIES = [
    {"id": 1, "name": "Nómina", "children": []},
    {"id": 2, "name": "Servicios profesionales", "children": [{"id": 21, "name": "Honorarios"}]},
]

INVOICES_PAGE = {
    "count": 2,
    "results": [
        {"uuid": "6F9B-01", "total": "1160.00", "type": "I"},
        {"uuid": "6F9B-02", "total": "580.00", "type": "E"},
    ],
}

NOT_FOUND_BODY = {"detail": "not found"}
