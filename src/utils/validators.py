"""Validation utilities for business rules and data formats."""

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import phonenumbers


@dataclass
class ValidationError:
    """Validation error details."""
    field: str
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None


@dataclass
class ValidationResult:
    """Result of validation operation."""
    is_valid: bool
    errors: List[ValidationError]


class PhoneValidator:
    """Validator for local mobile numbers (Bangladesh numbering plan).

    Numbers are parsed by ``phonenumbers`` with ``BD`` as the default region, so
    they may be written with or without ``+880`` or the trunk ``0``. A number is
    accepted only when the library considers it a valid mobile number and its
    national significant number starts ``1`` then ``3``-``9``.
    """

    REGION = "BD"
    MOBILE_PREFIX = re.compile(r"^1[3-9]\d{8}$")

    @classmethod
    def parse(cls, phone: Optional[str]) -> Optional[phonenumbers.PhoneNumber]:
        """Return the parsed number, or ``None`` when it is not an accepted mobile number."""
        if not phone:
            return None
        try:
            parsed = phonenumbers.parse(phone, cls.REGION)
        except phonenumbers.NumberParseException:
            return None

        if phonenumbers.region_code_for_number(parsed) != cls.REGION:
            return None
        if not phonenumbers.is_valid_number(parsed):
            return None
        if phonenumbers.number_type(parsed) != phonenumbers.PhoneNumberType.MOBILE:
            return None
        if not cls.MOBILE_PREFIX.match(phonenumbers.national_significant_number(parsed)):
            return None
        return parsed

    @classmethod
    def is_valid(cls, phone: Optional[str]) -> bool:
        return cls.parse(phone) is not None

    @classmethod
    def to_e164(cls, phone: str) -> str:
        """Canonical ``+880...`` representation of a valid number."""
        parsed = cls.parse(phone)
        if parsed is None:
            raise ValueError(f"Not a valid mobile number: {phone!r}")
        return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)

    @classmethod
    def validate(cls, phone: Optional[str]) -> List[ValidationError]:
        if cls.is_valid(phone):
            return []
        return [ValidationError(
            field="phone",
            code="INVALID_PHONE",
            message="Invalid Bangladeshi phone number. Use format: 01XXXXXXXXX or +8801XXXXXXXXX",
            details={"provided": phone},
        )]


class SlugValidator:
    """Validator for store and product URL slugs."""

    SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")
    MIN_LENGTH = 2

    @classmethod
    def validate(cls, slug: Optional[str], field: str = "slug") -> List[ValidationError]:
        errors = []
        if not slug or len(slug) < cls.MIN_LENGTH:
            errors.append(ValidationError(
                field=field,
                code="SLUG_TOO_SHORT",
                message=f"Slug must be at least {cls.MIN_LENGTH} characters",
            ))
        elif not cls.SLUG_PATTERN.match(slug):
            errors.append(ValidationError(
                field=field,
                code="INVALID_SLUG",
                message="Slug can only contain lowercase letters, numbers, and hyphens",
            ))
        return errors


class EmailValidator:
    """Basic email address format check."""

    EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

    @classmethod
    def is_valid(cls, email: Optional[str]) -> bool:
        return bool(email) and bool(cls.EMAIL_PATTERN.match(email))


class DomainValidator:
    """Hostname validation for custom storefront domains."""

    HOSTNAME_PATTERN = re.compile(r"^(?!-)[a-z0-9-]{1,63}(?<!-)(\.[a-z0-9-]{1,63})+$")
    MIN_LENGTH = 4
    MAX_LENGTH = 253

    @classmethod
    def normalize(cls, domain: Optional[str]) -> str:
        return (domain or "").strip().lower()

    @classmethod
    def validate(cls, domain: Optional[str]) -> List[ValidationError]:
        value = cls.normalize(domain)
        if len(value) < cls.MIN_LENGTH or len(value) > cls.MAX_LENGTH:
            return [ValidationError(
                field="domain",
                code="INVALID_DOMAIN_LENGTH",
                message="Invalid domain name length",
            )]
        if not cls.HOSTNAME_PATTERN.match(value):
            return [ValidationError(
                field="domain",
                code="INVALID_DOMAIN_FORMAT",
                message="Invalid domain format. Use format like shop.yourdomain.com",
            )]
        return []


class AttributeMapValidator:
    """Validates free-form variant attributes (size, colour, ...).

    Any keys are allowed; the map only has to be a JSON object with string keys
    and scalar values.
    """

    SCALAR_TYPES = (str, int, float, bool, type(None))

    @classmethod
    def coerce(cls, attributes: Any) -> Dict[str, Any]:
        """Return a validated attribute dict, decoding JSON text if needed."""
        if attributes is None:
            return {}
        if isinstance(attributes, str):
            try:
                attributes = json.loads(attributes or "{}")
            except json.JSONDecodeError:
                raise ValueError("Attributes must be a JSON object")
        if not isinstance(attributes, dict):
            raise ValueError("Attributes must be a JSON object")
        for key, value in attributes.items():
            if not isinstance(key, str) or not key.strip():
                raise ValueError("Attribute names must be non-empty strings")
            if not isinstance(value, cls.SCALAR_TYPES):
                raise ValueError(f"Attribute '{key}' must be a scalar value")
        return dict(attributes)
