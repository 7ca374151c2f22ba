from typing import Any, Dict, Optional


class ResumeOptimizerError(Exception):
    """Base for failures that are reported to the caller as a JSON error."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, **extra: Any):
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, **self.extra}


class MissingField(ResumeOptimizerError):
    status_code = 400
    default_message = "Text and job title are required"


class MissingFile(ResumeOptimizerError):
    status_code = 400
    default_message = "No file uploaded"


class PayloadTooLarge(ResumeOptimizerError):
    status_code = 413
    default_message = "PDF must be under 5 MB."


class UnsupportedType(ResumeOptimizerError):
    status_code = 415
    default_message = "Only PDF files are allowed"


class EmptyContent(ResumeOptimizerError):
    status_code = 422
    default_message = "No text content found in PDF"


class ExtractionFailure(ResumeOptimizerError):
    status_code = 500
    default_message = "Error processing PDF"


class Unconfigured(ResumeOptimizerError):
    status_code = 500
    default_message = "OpenRouter API key not configured"


class ProviderError(ResumeOptimizerError):
    """The model provider failed or returned an error payload.

    ``upstream_status`` is the HTTP status of the provider response, or the
    numeric ``error.code`` the provider embedded in a 200 body. It is
    ``None`` for transport failures.
    """

    status_code = 502
    default_message = "AI provider error. Please try again in a minute."

    def __init__(self, detail: str, upstream_status: Optional[int] = None):
        super().__init__(detail=detail)
        self.detail = detail
        self.upstream_status = upstream_status

    def __str__(self) -> str:
        return self.detail

    @property
    def is_rate_limited(self) -> bool:
        return self.upstream_status == 429


class EmptyReply(ResumeOptimizerError):
    status_code = 500
    default_message = "Empty response from AI provider"


class UnparseableResponse(ResumeOptimizerError):
    status_code = 500
    default_message = "Failed to parse AI response"

    # Leading slice of the raw reply echoed back for debugging
    DEBUG_CHARS = 200

    def __init__(self, raw: str):
        super().__init__(debug=raw[: self.DEBUG_CHARS])
        self.raw = raw
