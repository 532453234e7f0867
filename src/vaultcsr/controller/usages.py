"""
Key usage translation between Kubernetes certificate requests and vault's PKI
engine. Usages present in neither table are dropped.
"""

from enum import Enum
from typing import Dict, Iterable, List, Mapping, Union


class KeyUsage(str, Enum):
    """Usages a certificate signing request may ask for."""

    SIGNING = "signing"
    DIGITAL_SIGNATURE = "digital signature"
    CONTENT_COMMITMENT = "content commitment"
    KEY_ENCIPHERMENT = "key encipherment"
    KEY_AGREEMENT = "key agreement"
    DATA_ENCIPHERMENT = "data encipherment"
    CERT_SIGN = "cert sign"
    CRL_SIGN = "crl sign"
    ENCIPHER_ONLY = "encipher only"
    DECIPHER_ONLY = "decipher only"
    ANY = "any"
    SERVER_AUTH = "server auth"
    CLIENT_AUTH = "client auth"
    CODE_SIGNING = "code signing"
    EMAIL_PROTECTION = "email protection"
    SMIME = "s/mime"
    IPSEC_END_SYSTEM = "ipsec end system"
    IPSEC_TUNNEL = "ipsec tunnel"
    IPSEC_USER = "ipsec user"
    TIMESTAMPING = "timestamping"
    OCSP_SIGNING = "ocsp signing"
    MICROSOFT_SGC = "microsoft sgc"
    NETSCAPE_SGC = "netscape sgc"


KEY_USAGES: Mapping[str, str] = {
    "signing": "DigitalSignature",
    "digital signature": "DigitalSignature",
    "content commitment": "ContentCommitment",
    "key encipherment": "KeyEncipherment",
    "key agreement": "KeyAgreement",
    "data encipherment": "DataEncipherment",
    "cert sign": "CertSign",
    "crl sign": "CRLSign",
    "encipher only": "EncipherOnly",
    "decipher only": "DecipherOnly",
}

EXT_KEY_USAGES: Mapping[str, str] = {
    "any": "Any",
    "server auth": "ServerAuth",
    "client auth": "ClientAuth",
    "code signing": "CodeSigning",
    "email protection": "EmailProtection",
    "s/mime": "EmailProtection",
    "ipsec end system": "IPSECEndSystem",
    "ipsec tunnel": "IPSECTunnel",
    "ipsec user": "IPSECUser",
    "timestamping": "TimeStamping",
    "ocsp signing": "OCSPSigning",
    "microsoft sgc": "MicrosoftServerGatedCrypto",
    "netscape sgc": "NetscapeServerGatedCrypto",
}


def _translate(usages: Iterable[Union[KeyUsage, str]], table: Mapping[str, str]) -> List[str]:
    translated: Dict[str, None] = {}
    for usage in usages:
        name = usage.value if isinstance(usage, KeyUsage) else usage
        mapped = table.get(name)
        if mapped is not None:
            translated[mapped] = None
    return list(translated)


def parse_key_usages(usages: Iterable[Union[KeyUsage, str]]) -> List[str]:
    """Vault key_usage strings for the requested usages."""
    return _translate(usages, KEY_USAGES)


def parse_ext_key_usages(usages: Iterable[Union[KeyUsage, str]]) -> List[str]:
    """Vault ext_key_usage strings for the requested usages."""
    return _translate(usages, EXT_KEY_USAGES)
