"""Family detectors for clipsift."""

from __future__ import annotations

from clipsift.detectors.api_key import ApiKeyDetector
from clipsift.detectors.base import BaseDetector, blank_spans
from clipsift.detectors.code_detector import CodeDetector
from clipsift.detectors.email_detector import EmailDetector
from clipsift.detectors.env_var import EnvVarDetector
from clipsift.detectors.file_path import FilePathDetector
from clipsift.detectors.hashes import HashDetector
from clipsift.detectors.ip_address import IpAddressDetector
from clipsift.detectors.jwt import JwtDetector
from clipsift.detectors.phone import PhoneNumberDetector
from clipsift.detectors.prose import ProseDetector
from clipsift.detectors.shell import ShellCommandDetector
from clipsift.detectors.url import UrlDetector
from clipsift.detectors.uuid_detector import UuidDetector

__all__ = [
    "ApiKeyDetector",
    "BaseDetector",
    "CodeDetector",
    "EmailDetector",
    "EnvVarDetector",
    "FilePathDetector",
    "HashDetector",
    "IpAddressDetector",
    "JwtDetector",
    "PhoneNumberDetector",
    "ProseDetector",
    "ShellCommandDetector",
    "UrlDetector",
    "UuidDetector",
    "blank_spans",
]
