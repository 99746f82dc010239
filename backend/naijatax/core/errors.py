class TaxValidationError(Exception):
    """A required field is missing or malformed; no computation is attempted."""

    def __init__(self, message: str, field: str | None = None):
        self.message = message
        self.field = field
        super().__init__(message)


class UnknownPaymentTypeError(TaxValidationError):
    """WHT payment type has no row in the active rule snapshot."""

    def __init__(self, payment_type: str, index: int | None = None):
        self.payment_type = payment_type
        field = f"payments.{index}.payment_type" if index is not None else "payment_type"
        super().__init__(f"{field}: unknown payment type '{payment_type}'", field=field)


class UnknownDocumentTypeError(TaxValidationError):
    """Stamp duty document type has no row in the active rule snapshot."""

    def __init__(self, document_type: str, index: int | None = None):
        self.document_type = document_type
        field = f"documents.{index}.document_type" if index is not None else "document_type"
        super().__init__(f"{field}: unknown document type '{document_type}'", field=field)


class ComputationError(Exception):
    """Unexpected failure inside a calculator. Details are logged, never returned."""

    GENERIC_MESSAGE = "Unable to compute tax. Please try again."

    def __init__(self, message: str = GENERIC_MESSAGE):
        self.message = message
        super().__init__(message)
