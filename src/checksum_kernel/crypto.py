"""
Default signing and verification capability backed by ``cryptography``.

Supports:
- ed25519
- rsa-sha256 (PKCS#1 v1.5)
- ecdsa-p256

The algorithm is taken from the key type, so signatures carry no
algorithm field. Signatures are exchanged as armored text so they can be
stored next to the manifest inside a bundle.
"""

import base64
import binascii
import logging
import textwrap

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, padding, rsa

from .errors import PassphraseRequired, SigningError

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "-----BEGIN CHECKSUM SIGNATURE-----"
SIGNATURE_FOOTER = "-----END CHECKSUM SIGNATURE-----"


def armor_signature(raw: bytes) -> bytes:
    """Wrap raw signature bytes in the armored text envelope."""
    body = textwrap.fill(base64.b64encode(raw).decode("ascii"), 64)
    return f"{SIGNATURE_HEADER}\n{body}\n{SIGNATURE_FOOTER}\n".encode("ascii")


def dearmor_signature(armored: bytes) -> bytes:
    """
    Extract raw signature bytes from the armored envelope.

    Raises:
        ValueError: If the envelope or its base64 body is malformed
    """
    try:
        text = armored.decode("ascii").strip()
    except UnicodeDecodeError:
        raise ValueError("signature is not ASCII armored text")

    if not text.startswith(SIGNATURE_HEADER) or not text.endswith(SIGNATURE_FOOTER):
        raise ValueError("signature armor header or footer missing")

    body = "".join(text[len(SIGNATURE_HEADER):-len(SIGNATURE_FOOTER)].split())
    try:
        return base64.b64decode(body, validate=True)
    except binascii.Error:
        raise ValueError("signature body is not valid base64")


def load_private_key(armored: bytes, passphrase: str | bytes | None = None):
    """
    Load and decrypt a PEM private key.

    Args:
        armored: PEM-encoded private key text
        passphrase: Passphrase for an encrypted key

    Returns:
        Ed25519, RSA or P-256 ECDSA private key object

    Raises:
        PassphraseRequired: If the key is encrypted and no passphrase was given
        SigningError: If the key cannot be parsed, the passphrase is wrong,
            or the key type is unsupported
    """
    if isinstance(passphrase, str):
        passphrase = passphrase.encode("utf-8")

    try:
        key = serialization.load_pem_private_key(armored, password=passphrase or None)
    except TypeError as exc:
        # Raised both for a missing passphrase and for an unneeded one
        if not passphrase:
            raise PassphraseRequired("Private key is encrypted; a passphrase is required") from exc
        raise SigningError(f"Cannot load private key: {exc}") from exc
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise SigningError(f"Cannot load private key: {exc}") from exc

    if isinstance(key, ec.EllipticCurvePrivateKey) and not isinstance(key.curve, ec.SECP256R1):
        raise SigningError("ECDSA private keys must use the P-256 curve")
    if not isinstance(key, (ed25519.Ed25519PrivateKey, rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey)):
        raise SigningError(f"Unsupported private key type: {type(key).__name__}")
    return key


def load_public_key(armored: bytes | str):
    """
    Load a public key from PEM text, base64 DER, or base64 raw Ed25519 bytes.

    Raises:
        ValueError: If the key cannot be parsed or its type is unsupported
    """
    if isinstance(armored, bytes):
        try:
            armored = armored.decode("utf-8")
        except UnicodeDecodeError:
            raise ValueError("public key is not text")

    key_text = armored.strip()
    if not key_text:
        raise ValueError("empty public key")

    if "BEGIN" in key_text:
        try:
            key_obj = serialization.load_pem_public_key(key_text.encode("utf-8"))
        except (ValueError, UnsupportedAlgorithm) as exc:
            raise ValueError(f"invalid PEM public key ({exc})")
    else:
        try:
            decoded = base64.b64decode(key_text, validate=True)
        except binascii.Error:
            raise ValueError("public key must be PEM or base64")

        # Ed25519 commonly uses raw 32-byte public key encoding.
        if len(decoded) == 32:
            key_obj = ed25519.Ed25519PublicKey.from_public_bytes(decoded)
        else:
            try:
                key_obj = serialization.load_der_public_key(decoded)
            except (ValueError, UnsupportedAlgorithm) as exc:
                raise ValueError(f"invalid DER public key ({exc})")

    if not isinstance(key_obj, (ed25519.Ed25519PublicKey, rsa.RSAPublicKey, ec.EllipticCurvePublicKey)):
        raise ValueError(f"unsupported public key type: {type(key_obj).__name__}")
    return key_obj


def _verify_with_key(public_key, signature: bytes, content: bytes) -> None:
    if isinstance(public_key, ed25519.Ed25519PublicKey):
        public_key.verify(signature, content)
        return
    if isinstance(public_key, rsa.RSAPublicKey):
        public_key.verify(signature, content, padding.PKCS1v15(), hashes.SHA256())
        return
    if isinstance(public_key, ec.EllipticCurvePublicKey):
        if not isinstance(public_key.curve, ec.SECP256R1):
            raise ValueError("ecdsa-p256 requires P-256 public key")
        public_key.verify(signature, content, ec.ECDSA(hashes.SHA256()))
        return
    raise ValueError(f"unsupported public key type: {type(public_key).__name__}")


class CryptographySigner:
    """ManifestSigner producing armored detached signatures."""

    def sign(self, message: bytes, private_key) -> bytes:
        if isinstance(private_key, ed25519.Ed25519PrivateKey):
            raw = private_key.sign(message)
        elif isinstance(private_key, rsa.RSAPrivateKey):
            raw = private_key.sign(message, padding.PKCS1v15(), hashes.SHA256())
        elif isinstance(private_key, ec.EllipticCurvePrivateKey):
            raw = private_key.sign(message, ec.ECDSA(hashes.SHA256()))
        else:
            raise SigningError(f"Unsupported private key type: {type(private_key).__name__}")
        return armor_signature(raw)


class CryptographyVerifier:
    """
    SignatureVerifier for armored detached signatures.

    Malformed signatures, unusable keys and key mismatches all verify as
    False; nothing is raised for untrusted input.
    """

    def verify(self, message: bytes, signature: bytes, public_keys: list[bytes]) -> bool:
        try:
            raw = dearmor_signature(signature)
        except ValueError as exc:
            logger.debug("Rejecting signature: %s", exc)
            return False

        for armored_key in public_keys:
            try:
                public_key = load_public_key(armored_key)
                _verify_with_key(public_key, raw, message)
            except InvalidSignature:
                logger.debug("Signature does not match public key")
                continue
            except ValueError as exc:
                logger.debug("Skipping public key: %s", exc)
                continue
            return True

        return False


def generate_key_pair(passphrase: str | bytes | None = None) -> tuple[bytes, bytes]:
    """
    Generate a new Ed25519 key pair.

    Args:
        passphrase: Encrypt the private key with this passphrase if given

    Returns:
        Tuple of (private_key_pem, public_key_pem)
    """
    if isinstance(passphrase, str):
        passphrase = passphrase.encode("utf-8")

    private_key = ed25519.Ed25519PrivateKey.generate()
    encryption = (
        serialization.BestAvailableEncryption(passphrase)
        if passphrase
        else serialization.NoEncryption()
    )
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=encryption,
    )
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return private_pem, public_pem
