class CertificateRenderError(RuntimeError):
    """Raised when a certificate cannot be produced; no output file is valid."""


class CertificateEncodingError(CertificateRenderError):
    """Raised when the verification URL cannot be turned into a QR code."""


class CertificateWriteError(CertificateRenderError):
    """Raised when the rendered PDF cannot be written to its destination."""
