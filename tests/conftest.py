import datetime

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from entra_oauth.primitives.assertion import ClientCertificate


@pytest.fixture(scope="session")
def rsa_key_pair():
    """Throwaway RSA key and self-signed certificate as PEM bytes."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "entra-oauth-test")])
    now = datetime.datetime.now(datetime.timezone.utc)
    certificate = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now)
        .not_valid_after(now + datetime.timedelta(days=1))
        .sign(key, hashes.SHA256())
    )
    private_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )
    public_pem = key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    certificate_pem = certificate.public_bytes(serialization.Encoding.PEM)
    return private_pem, public_pem, certificate_pem, certificate


@pytest.fixture
def client_certificate(rsa_key_pair):
    private_pem, _, certificate_pem, _ = rsa_key_pair
    return ClientCertificate(private_key_pem=private_pem, certificate_pem=certificate_pem)
