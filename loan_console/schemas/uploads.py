from enum import Enum

from loan_console.schemas.common import ConsoleModel


class UploadKind(str, Enum):
    PAYMENT_ATTACHMENT = "payment_attachment"
    KYC_DOCUMENT = "kyc_document"
    LOAN_DOCUMENT = "loan_document"


class UploadResult(ConsoleModel):
    url: str
    object_key: str
    storage_provider: str
    storage_bucket: str | None = None
    file_name: str
    content_type: str
    size_bytes: int
