"""Certificate Signing Request utilities."""

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.x509.oid import NameOID

from acmeflow.exceptions import ConfigurationError
from acmeflow.models import CsrDomains

# Type alias for private keys
PrivateKey = rsa.RSAPrivateKey | ec.EllipticCurvePrivateKey

_PEM_MARKER = b"-----BEGIN"


def generate_rsa_key(key_size: int = 2048) -> rsa.RSAPrivateKey:
    """Generate an RSA private key.

    Args:
        key_size: Key size in bits (2048 or 4096 recommended).

    Returns:
        RSA private key.
    """
    return rsa.generate_private_key(
        public_exponent=65537,
        key_size=key_size,
    )


def create_csr(
    key: PrivateKey,
    domains: list[str],
) -> bytes:
    """Create a PEM-encoded Certificate Signing Request (CSR).

    Args:
        key: Private key to sign the CSR.
        domains: List of domain names to include in the CSR.

    Returns:
        The CSR in PEM format.

    Raises:
        ValueError: If domains list is empty.
    """
    if not domains:
        raise ValueError("At least one domain is required")

    # Use first domain as Common Name
    subject = x509.Name(
        [
            x509.NameAttribute(NameOID.COMMON_NAME, domains[0]),
        ]
    )

    # Build SAN extension with all domains
    san = x509.SubjectAlternativeName([x509.DNSName(domain) for domain in domains])

    csr = (
        x509.CertificateSigningRequestBuilder()
        .subject_name(subject)
        .add_extension(san, critical=False)
        .sign(key, hashes.SHA256())
    )
    return csr.public_bytes(serialization.Encoding.PEM)


def load_csr(csr: bytes | str) -> x509.CertificateSigningRequest:
    """Load a CSR from PEM or DER data.

    Args:
        csr: PEM bytes, PEM string, or DER bytes.

    Returns:
        The parsed Certificate Signing Request.

    Raises:
        ConfigurationError: If the data is empty or not a valid CSR.
    """
    if isinstance(csr, str):
        csr = csr.encode("utf-8")
    if not csr:
        raise ConfigurationError("Certificate Signing Request is empty")

    try:
        if csr.lstrip().startswith(_PEM_MARKER):
            return x509.load_pem_x509_csr(csr)
        return x509.load_der_x509_csr(csr)
    except ValueError as e:
        raise ConfigurationError(f"Invalid Certificate Signing Request: {e}") from e


def read_csr_domains(csr: bytes | str) -> CsrDomains:
    """Read the common name and DNS alternative names from a CSR.

    Args:
        csr: PEM bytes, PEM string, or DER bytes.

    Returns:
        CsrDomains with the subject common name (None when absent) and the
        DNS names of the subjectAltName extension, in CSR order.

    Raises:
        ConfigurationError: If the CSR cannot be parsed.
    """
    request = load_csr(csr)

    common_names = request.subject.get_attributes_for_oid(NameOID.COMMON_NAME)
    common_name = str(common_names[0].value) if common_names else None

    try:
        san = request.extensions.get_extension_for_class(x509.SubjectAlternativeName)
        alt_names = san.value.get_values_for_type(x509.DNSName)
    except x509.ExtensionNotFound:
        alt_names = []

    return CsrDomains(common_name=common_name, alt_names=alt_names)
