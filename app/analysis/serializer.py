from app.analysis.models import (
    AnalysisResult,
    BoundaryResult,
    DocumentDetails,
    DocumentRecord,
    DocumentSummary,
    PartyInfo,
    ReceiverInfo,
)


class ResultSerializer:
    """Converts analysis results into the camelCase JSON shape clients expect."""

    def summary(self, summary: DocumentSummary) -> dict[str, object]:
        return {
            "sender": self._sender(summary.sender),
            "receiver": self._receiver(summary.receiver),
            "documentDetails": self._details(summary.document_details),
        }

    def analysis(self, result: AnalysisResult) -> dict[str, object]:
        payload: dict[str, object] = {"totalPages": result.total_pages}
        if result.unique_pages is not None:
            payload["uniquePages"] = result.unique_pages
        payload["documents"] = [self._record(doc) for doc in result.documents]
        return payload

    def boundaries(self, result: BoundaryResult) -> dict[str, object]:
        return {
            "totalPages": result.total_pages,
            "totalDocuments": result.total_documents,
            "documentBoundaries": [
                {"documentNumber": b.document_number, "startPage": b.start_page}
                for b in result.document_boundaries
            ],
        }

    def _record(self, record: DocumentRecord) -> dict[str, object]:
        return {
            "startPage": record.start_page,
            "endPage": record.end_page,
            "sender": self._sender(record.sender),
            "receiver": self._receiver(record.receiver),
            "documentDetails": self._details(record.document_details),
        }

    def _sender(self, party: PartyInfo) -> dict[str, object]:
        return {
            "name": party.name,
            "address": party.address,
            "companyNumber": party.company_number,
            "email": party.email,
            "phone": party.phone,
        }

    def _receiver(self, receiver: ReceiverInfo) -> dict[str, object]:
        return {"name": receiver.name, "address": receiver.address}

    def _details(self, details: DocumentDetails) -> dict[str, object]:
        return {
            "caseNumber": details.case_number,
            "invoiceAmount": details.invoice_amount,
            "dueDate": details.due_date,
            "dateCreated": details.date_created,
            "dateSent": details.date_sent,
            "summary": details.summary,
            "documentType": details.document_type,
        }
