"""Offline analysis client.

Returns a canned reply that satisfies every instruction template, so the
service can run locally without credentials. Select it with
``ANALYSIS_PROVIDER=example``.
"""

import json
from typing import ClassVar

from app.analysis.client_base import BaseAnalysisClient, ContentPart

_EXAMPLE_SENDER: dict[str, object] = {
    "name": "Example Supplies Ltd",
    "address": "1 Example Street, London",
    "companyNumber": "01234567",
    "email": "accounts@example.com",
    "phone": None,
}
_EXAMPLE_RECEIVER: dict[str, object] = {"name": "Example Customer", "address": None}
_EXAMPLE_DETAILS: dict[str, object] = {
    "caseNumber": "INV-0001",
    "invoiceAmount": 100.0,
    "dueDate": None,
    "dateCreated": None,
    "dateSent": None,
    "summary": "Example invoice.",
    "documentType": "invoice",
}


class ExampleClientAdapter(BaseAnalysisClient):
    """Adapter that never touches the network."""

    DEFAULT_RESPONSE: ClassVar[dict[str, object]] = {
        "totalPages": 1,
        "uniquePages": 1,
        "totalDocuments": 1,
        "documentBoundaries": [{"documentNumber": 1, "startPage": 1}],
        "documents": [
            {
                "startPage": 1,
                "endPage": 1,
                "sender": _EXAMPLE_SENDER,
                "receiver": _EXAMPLE_RECEIVER,
                "documentDetails": _EXAMPLE_DETAILS,
            }
        ],
        "sender": _EXAMPLE_SENDER,
        "receiver": _EXAMPLE_RECEIVER,
        "documentDetails": _EXAMPLE_DETAILS,
    }

    async def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_content: str | list[ContentPart],
        json_mode: bool,
    ) -> str:
        _ = model, temperature, system_prompt, user_content, json_mode
        return json.dumps(self.DEFAULT_RESPONSE)
