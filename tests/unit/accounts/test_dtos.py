import pytest
from pydantic import ValidationError

from modules.accounts.dtos import ChangePasswordDTO, CreateUserDTO, UpdateProfileDTO

pytestmark = pytest.mark.unit


def _signup(**overrides):
    data = {"email": "ann@example.com", "password": "Shop2025!Secure", "name": "Ann"}
    data.update(overrides)
    return data


class TestCreateUserDTO:
    def test_accepts_camel_case_payload(self):
        dto = CreateUserDTO.model_validate(
            _signup(phoneNumber="010-1234-5678", bankName="Hana")
        )
        assert dto.phone_number == "010-1234-5678"
        assert dto.bank_name == "Hana"
        assert dto.account_number == ""

    @pytest.mark.parametrize("password", ["Short1!A", "Twenty2Chars!abcdefg"])
    def test_accepts_passwords_at_the_length_bounds(self, password):
        assert CreateUserDTO.model_validate(_signup(password=password)).password

    @pytest.mark.parametrize(
        "password",
        [
            "Short1!",
            "alllowercase1!",
            "ALLUPPERCASE1!",
            "NoDigits!!",
            "NoSpecial123",
            "Way2Long!" * 3,
            "Bad#Special1",
        ],
    )
    def test_rejects_weak_passwords(self, password):
        with pytest.raises(ValidationError, match="Password must be 8-20"):
            CreateUserDTO.model_validate(_signup(password=password))

    def test_rejects_malformed_email(self):
        with pytest.raises(ValidationError):
            CreateUserDTO.model_validate(_signup(email="not-an-email"))

    @pytest.mark.parametrize("name", ["A", "x" * 51])
    def test_name_length(self, name):
        with pytest.raises(ValidationError):
            CreateUserDTO.model_validate(_signup(name=name))


class TestUpdateProfileDTO:
    def test_changes_skip_absent_and_null_fields(self):
        dto = UpdateProfileDTO.model_validate({"name": "Annie", "phoneNumber": None})
        assert dto.changes() == {"name": "Annie"}

    def test_empty_payload_changes_nothing(self):
        assert UpdateProfileDTO.model_validate({}).changes() == {}


class TestChangePasswordDTO:
    def test_new_password_follows_strength_rule(self):
        with pytest.raises(ValidationError):
            ChangePasswordDTO.model_validate(
                {"currentPassword": "whatever", "newPassword": "weak"}
            )
        dto = ChangePasswordDTO.model_validate(
            {"currentPassword": "whatever", "newPassword": "Shop2025!Secure"}
        )
        assert dto.current_password == "whatever"
