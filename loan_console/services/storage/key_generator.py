import re
from pathlib import Path
from uuid import UUID


class KeyGenerator:
    @staticmethod
    def _safe_filename(filename: str) -> str:
        # Simple sanitization
        name = Path(filename or "").name or "upload.bin"
        return re.sub(r"[^a-zA-Z0-9_.-]", "_", name)

    @staticmethod
    def _safe_segment(value: str, label: str) -> str:
        if not value or not re.fullmatch(r"[A-Za-z0-9_-]+", value):
            raise ValueError(f"{label} must be alphanumeric")
        return value

    @staticmethod
    def generate_object_key(kind: str, owner_id: str, upload_id: UUID, filename: str) -> str:
        safe_filename = KeyGenerator._safe_filename(filename)

        if kind == "payment_attachment":
            repayment_id = KeyGenerator._safe_segment(owner_id, "ownerId")
            return f"repayments/{repayment_id}/attachments/{upload_id}/{safe_filename}"

        elif kind == "kyc_document":
            borrower_id = KeyGenerator._safe_segment(owner_id, "ownerId")
            return f"borrowers/{borrower_id}/kyc/{upload_id}/{safe_filename}"

        elif kind == "loan_document":
            application_id = KeyGenerator._safe_segment(owner_id, "ownerId")
            return f"loan-applications/{application_id}/documents/{upload_id}/{safe_filename}"

        else:
            raise ValueError(f"Unknown upload kind: {kind}")
