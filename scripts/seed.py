"""Seed script: creates sample documents with a first version via the REST API.

Tokens are minted locally with the same JWT_SECRET the server uses, so run it
after `pip install -e .[dev]` from an environment that shares the server's
settings (.env).

Usage:
    python scripts/seed.py              # uses http://localhost:8000
    python scripts/seed.py http://host  # custom base URL
"""

import sys

import httpx

from auth.application.services import issue_token
from auth.domain.entities import Subject

BASE_URL = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8000"

SUBJECTS = {
    "alice": Subject.build(
        "alice", permission_codes=["DOC_CREATE", "DOC_READ"], unit_ids=["quality"]
    ),
    "bob": Subject.build(
        "bob", permission_codes=["DOC_CREATE", "DOC_READ", "DOC_REVIEW"], unit_ids=["production"]
    ),
}

DOCUMENTS = [
    {"title": "Quality Manual", "unit_id": "quality", "visibility": "INTERNAL", "owner": "alice", "tags": ["qms"]},
    {"title": "Calibration Procedure", "unit_id": "quality", "visibility": "RESTRICTED", "owner": "alice"},
    {"title": "Line Clearance SOP", "unit_id": "production", "visibility": "PUBLIC", "owner": "bob", "tags": ["sop"]},
]

SAMPLE_PDF = b"%PDF-1.4\n1 0 obj << /Type /Catalog >> endobj\n%%EOF\n"


def create_document(client: httpx.Client, headers: dict, doc: dict) -> str:
    payload = {k: v for k, v in doc.items() if k != "owner"}
    resp = client.post(f"{BASE_URL}/api/documents/", json=payload, headers=headers)
    resp.raise_for_status()
    doc_id = resp.json()["id"]
    print(f"  Created document '{doc['title']}' ({doc_id})")
    return doc_id


def upload_version(client: httpx.Client, headers: dict, doc_id: str) -> None:
    resp = client.post(
        f"{BASE_URL}/api/documents/{doc_id}/versions",
        files={"file": ("sample.pdf", SAMPLE_PDF, "application/pdf")},
        data={"change_type": "MAJOR", "change_log": "Initial issue"},
        headers=headers,
    )
    resp.raise_for_status()
    print(f"    uploaded version {resp.json()['version_label']}")


def main() -> None:
    print(f"Seeding against {BASE_URL}\n")
    headers = {
        name: {"Authorization": f"Bearer {issue_token(subject)}"}
        for name, subject in SUBJECTS.items()
    }

    with httpx.Client(timeout=10) as client:
        print("Documents:")
        for doc in DOCUMENTS:
            owner_headers = headers[doc["owner"]]
            doc_id = create_document(client, owner_headers, doc)
            upload_version(client, owner_headers, doc_id)

    print("\nTokens:")
    for name, h in headers.items():
        print(f"  {name}: {h['Authorization']}")
    print("\nDone!")


if __name__ == "__main__":
    main()
