import pytest

from accounts.core.request import PayloadRequest
from accounts.exceptions import ValidationError
from accounts.validators.user_validator import UserValidator, coerce_gender

PASSWORD_LENGTH_MESSAGE = (
    "User password must have length greater or equal to 6 chars and less or equal to 255 chars!"
)


class TestValidateAuthRequest:
    def test_passes_with_email_and_password(self, user_validator: UserValidator):
        user_validator.validate_auth_request(PayloadRequest({"email": "x", "password": "y"}))

    def test_missing_email_reported_first(self, user_validator: UserValidator):
        with pytest.raises(ValidationError) as exc:
            user_validator.validate_auth_request(PayloadRequest({}))
        assert exc.value.message == "Missing email!"

    def test_missing_password(self, user_validator: UserValidator):
        with pytest.raises(ValidationError) as exc:
            user_validator.validate_auth_request(PayloadRequest({"email": "x"}))
        assert exc.value.message == "Missing password!"

    def test_no_format_checks(self, user_validator: UserValidator, user_lookup):
        # presence only: garbage values pass and the repository is never asked
        user_validator.validate_auth_request(PayloadRequest({"email": "not-an-email", "password": "1"}))
        assert user_lookup.calls == []


class TestValidateUserInput:
    """
    Full validation for account creation.

    Covers the required-field gate, the fixed check order and fail-fast
    behaviour (the first violated rule is the one reported).
    """

    def test_valid_request_passes(self, user_validator: UserValidator, valid_user_payload):
        user_validator.validate_user_input(PayloadRequest(valid_user_payload))

    def test_valid_request_with_phone_passes(self, user_validator: UserValidator, valid_user_payload):
        user_validator.validate_user_input(PayloadRequest({**valid_user_payload, "phone": "+1234567"}))

    def test_missing_fields_listed_in_declared_order(self, user_validator: UserValidator, valid_user_payload):
        payload = {k: v for k, v in valid_user_payload.items() if k not in ("gender", "dob")}

        with pytest.raises(ValidationError) as exc:
            user_validator.validate_user_input(PayloadRequest(payload))

        assert exc.value.message == "Missing fields: [dob, gender]"
        assert exc.value.fields == ["dob", "gender"]

    def test_all_fields_missing(self, user_validator: UserValidator, user_lookup):
        with pytest.raises(ValidationError) as exc:
            user_validator.validate_user_input(PayloadRequest({"phone": "+1234567"}))

        assert exc.value.message == "Missing fields: [email, name, password, dob, gender]"
        # gate runs before any repository lookup
        assert user_lookup.calls == []

    def test_taken_email_fails_before_password_is_checked(
        self, user_validator: UserValidator, user_lookup, valid_user_payload
    ):
        user_lookup.add(7, "a@b.com", "someone")
        payload = {**valid_user_payload, "password": "12345"}

        with pytest.raises(ValidationError) as exc:
            user_validator.validate_user_input(PayloadRequest(payload))

        assert exc.value.message == "User with this email already exists!"
        assert user_lookup.called == ["has_email"]

    def test_short_password_fails_after_email_and_name(
        self, user_validator: UserValidator, user_lookup, valid_user_payload
    ):
        payload = {**valid_user_payload, "password": "12345"}

        with pytest.raises(ValidationError) as exc:
            user_validator.validate_user_input(PayloadRequest(payload))

        assert exc.value.message == PASSWORD_LENGTH_MESSAGE
        assert user_lookup.called == ["has_email", "has_name"]

    def test_uniqueness_checked_without_exclusion(self, user_validator: UserValidator, user_lookup, valid_user_payload):
        user_validator.validate_user_input(PayloadRequest(valid_user_payload))
        assert [c[2] for c in user_lookup.calls] == [0, 0]

    def test_invalid_gender_before_dob(self, user_validator: UserValidator, valid_user_payload):
        payload = {**valid_user_payload, "gender": "3", "dob": "garbage"}

        with pytest.raises(ValidationError) as exc:
            user_validator.validate_user_input(PayloadRequest(payload))

        assert exc.value.message == "User gender must be one of [0, 1, 2]"

    def test_invalid_dob(self, user_validator: UserValidator, valid_user_payload):
        with pytest.raises(ValidationError) as exc:
            user_validator.validate_user_input(PayloadRequest({**valid_user_payload, "dob": "2020-02-30T00:00:00+00:00"}))
        assert exc.value.message == "Seem`s that date of birth has wrong format!"

    def test_invalid_phone_checked_last(self, user_validator: UserValidator, valid_user_payload):
        with pytest.raises(ValidationError) as exc:
            user_validator.validate_user_input(PayloadRequest({**valid_user_payload, "phone": "12345678"}))
        assert exc.value.message == "Seem`s that phone not in international phone number format!"

    def test_non_numeric_gender_is_coerced_to_zero_and_accepted(self, user_validator: UserValidator, valid_user_payload):
        # "abc" has no leading integer -> 0, which is an allowed gender
        user_validator.validate_user_input(PayloadRequest({**valid_user_payload, "gender": "abc"}))

    def test_integer_gender_from_json(self, user_validator: UserValidator, valid_user_payload):
        user_validator.validate_user_input(PayloadRequest({**valid_user_payload, "gender": 2}))


class TestValidateOptionalUserInput:
    def test_empty_request_passes_without_lookups(self, user_validator: UserValidator, user_lookup):
        user_validator.validate_optional_user_input(PayloadRequest({}))
        assert user_lookup.calls == []

    def test_only_name_present_runs_only_name_check(self, user_validator: UserValidator, user_lookup):
        user_validator.validate_optional_user_input(PayloadRequest({"name": "ok-name"}))
        assert user_lookup.calls == [("has_name", "ok-name", 0)]

    def test_only_name_present_fails_when_taken(self, user_validator: UserValidator, user_lookup):
        user_lookup.add(3, "x@y.com", "ok-name")
        with pytest.raises(ValidationError) as exc:
            user_validator.validate_optional_user_input(PayloadRequest({"name": "ok-name"}))
        assert exc.value.message == "User with this name already exists!"

    def test_current_user_keeps_own_email_and_name(self, user_validator: UserValidator, user_lookup):
        user_lookup.add(5, "me@mail.com", "me")
        request = PayloadRequest({"email": "me@mail.com", "name": "me"})

        user_validator.validate_optional_user_input(request, current_user_id=5)

        assert user_lookup.calls == [("has_email", "me@mail.com", 5), ("has_name", "me", 5)]

    def test_other_users_email_still_rejected(self, user_validator: UserValidator, user_lookup):
        user_lookup.add(5, "me@mail.com", "me")
        user_lookup.add(6, "other@mail.com", "other")

        with pytest.raises(ValidationError) as exc:
            user_validator.validate_optional_user_input(PayloadRequest({"email": "other@mail.com"}), current_user_id=5)
        assert exc.value.message == "User with this email already exists!"

    def test_each_present_field_is_checked(self, user_validator: UserValidator):
        cases = [
            ({"password": "short"}, PASSWORD_LENGTH_MESSAGE),
            ({"gender": "9"}, "User gender must be one of [0, 1, 2]"),
            ({"dob": "2020-01-01"}, "Seem`s that date of birth has wrong format!"),
            ({"phone": "+12"}, "Seem`s that phone not in international phone number format!"),
            ({"email": "nope"}, "Seem`s user email is not an email!"),
            ({"name": "bad name"}, "User name must contain only latin or russian characters, digits and . and -"),
        ]
        for payload, message in cases:
            with pytest.raises(ValidationError) as exc:
                user_validator.validate_optional_user_input(PayloadRequest(payload))
            assert exc.value.message == message

    def test_order_email_before_phone(self, user_validator: UserValidator):
        with pytest.raises(ValidationError) as exc:
            user_validator.validate_optional_user_input(PayloadRequest({"phone": "bad", "email": "bad"}))
        assert exc.value.fields == ["email"]


class TestIsValidEmail:
    @pytest.mark.parametrize("email", ["a@b.com", "john.doe@mail.example.org", "x+tag@sub.domain.io"])
    def test_well_formed_unregistered(self, user_validator: UserValidator, email):
        assert user_validator.is_valid_email(email) is True

    @pytest.mark.parametrize("email", ["", "plainaddress", "missing-at.com", "a@", "@b.com", "a b@c.com", "a@b@c.com"])
    def test_malformed_fails_without_lookup(self, user_validator: UserValidator, user_lookup, email):
        user_lookup.add(1, "a@b.com", "x")
        with pytest.raises(ValidationError) as exc:
            user_validator.is_valid_email(email)
        assert exc.value.message == "Seem`s user email is not an email!"
        assert exc.value.http_status() == 400
        assert user_lookup.calls == []

    def test_quoted_local_part_is_accepted(self, user_validator: UserValidator):
        assert user_validator.is_valid_email('"q"@b.com') is True

    @pytest.mark.parametrize("email", ["a@b.test", "a@b.invalid", "a@host.localhost"])
    def test_special_use_domains_are_rejected(self, user_validator: UserValidator, email):
        with pytest.raises(ValidationError):
            user_validator.is_valid_email(email)

    def test_registered_email_fails_for_everyone_else(self, user_validator: UserValidator, user_lookup):
        user_lookup.add(42, "taken@mail.com", "owner")
        with pytest.raises(ValidationError) as exc:
            user_validator.is_valid_email("taken@mail.com", 0)
        assert exc.value.message == "User with this email already exists!"

    def test_registered_email_passes_for_owner(self, user_validator: UserValidator, user_lookup):
        user_lookup.add(42, "taken@mail.com", "owner")
        assert user_validator.is_valid_email("taken@mail.com", 42) is True


class TestIsValidName:
    @pytest.mark.parametrize("name", ["john", "John.Doe-2", "иван", "Иван-Петров.1", "Ёжик", "ёлка", "42", "."])
    def test_allowed_characters(self, user_validator: UserValidator, name):
        assert user_validator.is_valid_name(name) is True

    @pytest.mark.parametrize("name", ["", "john doe", "john_doe", "user@x", "naïve", "名前", "john\n"])
    def test_disallowed_characters(self, user_validator: UserValidator, name):
        with pytest.raises(ValidationError) as exc:
            user_validator.is_valid_name(name)
        assert exc.value.message == "User name must contain only latin or russian characters, digits and . and -"

    def test_taken_name(self, user_validator: UserValidator, user_lookup):
        user_lookup.add(2, "x@y.com", "john")
        with pytest.raises(ValidationError) as exc:
            user_validator.is_valid_name("john")
        assert exc.value.message == "User with this name already exists!"
        assert user_validator.is_valid_name("john", 2) is True


class TestIsValidPassword:
    @pytest.mark.parametrize("length", [6, 7, 254, 255])
    def test_lengths_within_bounds(self, user_validator: UserValidator, length):
        assert user_validator.is_valid_password("p" * length) is True

    @pytest.mark.parametrize("length", [0, 5, 256, 1000])
    def test_lengths_out_of_bounds(self, user_validator: UserValidator, length):
        with pytest.raises(ValidationError) as exc:
            user_validator.is_valid_password("p" * length)
        assert exc.value.message == PASSWORD_LENGTH_MESSAGE

    def test_counts_characters_not_bytes(self, user_validator: UserValidator):
        # 6 Cyrillic letters are 12 bytes in UTF-8 but 6 characters
        assert user_validator.is_valid_password("пароль") is True
        assert user_validator.is_valid_password("я" * 255) is True

        with pytest.raises(ValidationError):
            user_validator.is_valid_password("ёёёёё")
        with pytest.raises(ValidationError):
            user_validator.is_valid_password("я" * 256)


class TestIsValidPhone:
    @pytest.mark.parametrize("phone", ["+1234567", "+4915112345678", "+1234567890123456"])
    def test_international_format(self, user_validator: UserValidator, phone):
        assert user_validator.is_valid_phone(phone) is True

    @pytest.mark.parametrize(
        "phone",
        ["+123456", "1234567890", "+12345678901234567", "+123 4567", "+1234567a", "++1234567", ""],
    )
    def test_rejected(self, user_validator: UserValidator, phone):
        with pytest.raises(ValidationError) as exc:
            user_validator.is_valid_phone(phone)
        assert exc.value.message == "Seem`s that phone not in international phone number format!"


class TestIsValidGender:
    @pytest.mark.parametrize("gender", [0, 1, 2])
    def test_allowed(self, user_validator: UserValidator, gender):
        assert user_validator.is_valid_gender(gender) is True

    @pytest.mark.parametrize("gender", [3, -1, 100, True])
    def test_rejected(self, user_validator: UserValidator, gender):
        with pytest.raises(ValidationError) as exc:
            user_validator.is_valid_gender(gender)
        assert exc.value.message == "User gender must be one of [0, 1, 2]"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("1", 1),
        (" 2", 2),
        ("3x", 3),
        ("-1", -1),
        ("abc", 0),
        ("", 0),
        (None, 0),
        (2, 2),
        (1.9, 1),
        (float("nan"), 0),
        (True, 1),
        ([1], 0),
        ("\u0662", 0),  # Arabic-Indic two is not an ASCII digit
        ("1e1", 1),  # exponent notation is not parsed
    ],
)
def test_coerce_gender_is_total(raw, expected):
    assert coerce_gender(raw) == expected


class TestDates:
    @pytest.mark.parametrize(
        "value",
        [
            "2020-01-01T00:00:00+00:00",
            "1990-12-31T23:59:59-05:30",
            "2020-02-29T12:00:00+03:00",
            "0999-01-01T00:00:00+00:00",   # four-digit year below 1000
        ],
    )
    def test_atom_dates_accepted(self, user_validator: UserValidator, value):
        assert user_validator.is_valid_date(value) is True
        assert user_validator.is_valid_date_of_birth(value) is True

    @pytest.mark.parametrize(
        "value",
        [
            "2020-02-30T00:00:00+00:00",   # no such day
            "2019-02-29T00:00:00+00:00",   # not a leap year
            "2020-01-01",                  # date only
            "2020-1-01T00:00:00+00:00",    # lenient month would round-trip differently
            "2020-01-01T00:00:00+0000",    # offset without colon
            "2020-01-01 00:00:00+00:00",
            "2020-01-01T00:00:00",
            "",
        ],
    )
    def test_atom_dates_rejected(self, user_validator: UserValidator, value):
        assert user_validator.is_valid_date(value) is False
        with pytest.raises(ValidationError) as exc:
            user_validator.is_valid_date_of_birth(value)
        assert exc.value.message == "Seem`s that date of birth has wrong format!"
        assert exc.value.fields == ["dob"]

    def test_custom_format(self, user_validator: UserValidator):
        assert user_validator.is_valid_date("2020-02-29", "%Y-%m-%d") is True
        assert user_validator.is_valid_date("2020-02-30", "%Y-%m-%d") is False
        assert user_validator.is_valid_date("01.02.2020", "%d.%m.%Y") is True
        assert user_validator.is_valid_date("1.2.2020", "%d.%m.%Y") is False


def test_validator_keeps_the_repository_it_was_given(user_lookup):
    validator = UserValidator(user_lookup)
    assert validator.repository is user_lookup
    with pytest.raises(AttributeError):
        validator.repository = object()
