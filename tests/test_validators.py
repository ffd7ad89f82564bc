"""Tests for field validators."""

import pytest

from src.utils.validators import (
    AttributeMapValidator,
    DomainValidator,
    EmailValidator,
    PhoneValidator,
    SlugValidator,
)


class TestPhoneValidator:

    @pytest.mark.parametrize("phone", [
        "01712345678",
        "+8801712345678",
        "8801712345678",
        "017-1234-5678",
        "0171 234 5678",
        "1912345678",
    ])
    def test_accepts_local_mobile_formats(self, phone):
        assert PhoneValidator.is_valid(phone)
        assert PhoneValidator.validate(phone) == []

    @pytest.mark.parametrize("phone", [
        "",
        None,
        "0171234567",
        "017123456789",
        "01212345678",
        "+4401712345678",
        "abcdefghijk",
    ])
    def test_rejects_other_numbers(self, phone):
        assert not PhoneValidator.is_valid(phone)
        errors = PhoneValidator.validate(phone)
        assert errors[0].code == "INVALID_PHONE"
        assert errors[0].field == "phone"

    @pytest.mark.parametrize("phone", ["01712345678", "+880 1712-345678", "8801712345678"])
    def test_normalizes_to_e164(self, phone):
        assert PhoneValidator.to_e164(phone) == "+8801712345678"

    @pytest.mark.parametrize("phone", [
        "+919812345678",
        "02-9112233",
        "+880",
        "not a phone",
    ])
    def test_rejects_numbers_the_numbering_plan_rejects(self, phone):
        assert PhoneValidator.parse(phone) is None
        assert PhoneValidator.validate(phone)[0].code == "INVALID_PHONE"

    def test_parse_returns_bangladeshi_mobile(self):
        parsed = PhoneValidator.parse("01812345678")

        assert parsed.country_code == 880
        assert parsed.national_number == 1812345678

    def test_to_e164_refuses_invalid_numbers(self):
        with pytest.raises(ValueError):
            PhoneValidator.to_e164("0171234567")


class TestSlugValidator:

    def test_valid_slug(self):
        assert SlugValidator.validate("my-store-2") == []

    @pytest.mark.parametrize("slug,code", [
        ("a", "SLUG_TOO_SHORT"),
        ("", "SLUG_TOO_SHORT"),
        ("My-Store", "INVALID_SLUG"),
        ("my store", "INVALID_SLUG"),
        ("my_store", "INVALID_SLUG"),
    ])
    def test_invalid_slugs(self, slug, code):
        errors = SlugValidator.validate(slug, field="store_slug")
        assert errors[0].code == code
        assert errors[0].field == "store_slug"


class TestDomainValidator:

    def test_valid_domain_is_normalized(self):
        assert DomainValidator.validate(" Shop.Example.COM ") == []
        assert DomainValidator.normalize(" Shop.Example.COM ") == "shop.example.com"

    @pytest.mark.parametrize("domain,code", [
        ("a.b", "INVALID_DOMAIN_LENGTH"),
        ("localhost", "INVALID_DOMAIN_FORMAT"),
        ("-bad.example.com", "INVALID_DOMAIN_FORMAT"),
        ("shop..example.com", "INVALID_DOMAIN_FORMAT"),
        ("https://shop.example.com", "INVALID_DOMAIN_FORMAT"),
    ])
    def test_invalid_domains(self, domain, code):
        assert DomainValidator.validate(domain)[0].code == code


class TestEmailValidator:

    def test_email_format(self):
        assert EmailValidator.is_valid("owner@shop.example.com")
        assert not EmailValidator.is_valid("owner@")
        assert not EmailValidator.is_valid(None)


class TestAttributeMapValidator:

    def test_accepts_free_form_scalars(self):
        attributes = {"size": "XL", "color": "red", "weight_grams": 250}

        assert AttributeMapValidator.coerce(attributes) == attributes

    def test_decodes_json_text(self):
        assert AttributeMapValidator.coerce('{"size": "M"}') == {"size": "M"}

    def test_missing_map_is_empty(self):
        assert AttributeMapValidator.coerce(None) == {}

    @pytest.mark.parametrize("attributes", ["[1, 2]", "not json", ["size"], {"size": ["S", "M"]}, {"": "x"}])
    def test_rejects_non_scalar_maps(self, attributes):
        with pytest.raises(ValueError):
            AttributeMapValidator.coerce(attributes)
