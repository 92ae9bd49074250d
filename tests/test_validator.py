# =============================================================================
# XET COMPOSER VALIDATOR TESTS
# =============================================================================
# Tests for schema and constraint checks on raw deployment parameters.
# =============================================================================

from unittest.mock import patch

import pytest
from eth_utils import is_checksum_address

from helpers import BENEFICIARY, NOW, OWNER, SENDER, TOKEN
from xet_composer.core.validator import KIND_MAX, ParameterValidator, validate
from xet_composer.domain.errors import ValidationError
from xet_composer.domain.models import ParameterKind


class TestAcceptedParameters:
    """Tests for parameter sets that satisfy every rule."""

    def test_valid_params_produce_parameter_set(self, descriptor, vesting_params):
        """Test a valid set is bound to its template."""
        result = validate(descriptor, vesting_params, now=NOW)

        assert result.template_id == "token_vesting"
        assert result.validated_at == NOW
        assert set(result.values) == set(descriptor.parameter_names)

    def test_addresses_are_checksummed(self, descriptor, vesting_params):
        """Test address values come back in EIP-55 form."""
        result = validate(descriptor, vesting_params, now=NOW)

        for name in ("token_address", "beneficiary", "initial_owner"):
            assert is_checksum_address(result.values[name])
        assert result.values["token_address"].lower() == TOKEN

    def test_digit_strings_are_coerced(self, descriptor, vesting_params):
        """Test integers may arrive as decimal strings from a form."""
        vesting_params["duration"] = "31536000"
        vesting_params["start_time"] = str(NOW)

        result = validate(descriptor, vesting_params, now=NOW)

        assert result.values["duration"] == 31_536_000
        assert result.values["start_time"] == NOW

    def test_cliff_equal_to_duration_is_allowed(self, descriptor, vesting_params):
        """Test the cliff rule is inclusive."""
        vesting_params["cliff_duration"] = vesting_params["duration"]

        result = validate(descriptor, vesting_params, now=NOW)

        assert result.values["cliff_duration"] == result.values["duration"]

    def test_zero_cliff_is_allowed(self, descriptor, vesting_params):
        """Test a schedule without a cliff."""
        vesting_params["cliff_duration"] = 0

        assert validate(descriptor, vesting_params, now=NOW).values["cliff_duration"] == 0

    def test_start_exactly_now_is_allowed(self, descriptor, vesting_params):
        """Test start_time may equal the validation time."""
        vesting_params["start_time"] = NOW

        assert validate(descriptor, vesting_params, now=NOW).values["start_time"] == NOW

    def test_validation_is_idempotent(self, descriptor, vesting_params):
        """Test re-validating an accepted set yields the same values."""
        first = validate(descriptor, vesting_params, now=NOW)
        second = validate(descriptor, dict(first.values), now=NOW)

        assert second == first

    def test_clock_read_once_when_now_omitted(self, descriptor, vesting_params):
        """Test the validation time is taken from the clock exactly once."""
        with patch("xet_composer.core.validator.time") as clock:
            clock.time.return_value = float(NOW)
            result = ParameterValidator().validate(descriptor, vesting_params)

        assert clock.time.call_count == 1
        assert result.validated_at == NOW


class TestCrossFieldConstraints:
    """Tests for the declared constraints."""

    @pytest.mark.parametrize(
        "cliff,duration",
        [(40_000_000, 31_536_000), (2, 1), (2**64 - 1, 2**64 - 2)],
    )
    def test_cliff_exceeding_duration_names_both_fields(
        self, descriptor, vesting_params, cliff, duration
    ):
        """Test cliff > duration rejects and names cliff and duration."""
        vesting_params["cliff_duration"] = cliff
        vesting_params["duration"] = duration

        with pytest.raises(ValidationError) as exc_info:
            validate(descriptor, vesting_params, now=NOW)

        assert exc_info.value.fields == ("cliff_duration", "duration")
        assert exc_info.value.rule == "cliff_duration<=duration"
        assert exc_info.value.stage == "validate"

    def test_zero_duration_rejected(self, descriptor, vesting_params):
        """Test duration must be positive."""
        vesting_params["cliff_duration"] = 0
        vesting_params["duration"] = 0

        with pytest.raises(ValidationError) as exc_info:
            validate(descriptor, vesting_params, now=NOW)

        assert exc_info.value.field == "duration"
        assert exc_info.value.rule == "duration>0"

    def test_start_in_past_rejected(self, descriptor, vesting_params):
        """Test start_time before the validation time."""
        vesting_params["start_time"] = NOW - 1

        with pytest.raises(ValidationError) as exc_info:
            validate(descriptor, vesting_params, now=NOW)

        assert exc_info.value.field == "start_time"
        assert exc_info.value.rule == "start_time>=now"


    def test_schedule_end_overflowing_uint64_rejected(self, descriptor, vesting_params):
        """Test start_time + duration must fit the contract's uint64 arithmetic."""
        vesting_params["start_time"] = KIND_MAX[ParameterKind.TIMESTAMP] - 10
        vesting_params["cliff_duration"] = 0
        vesting_params["duration"] = 100

        with pytest.raises(ValidationError) as exc_info:
            validate(descriptor, vesting_params, now=NOW)

        assert exc_info.value.fields == ("start_time", "duration")
        assert exc_info.value.rule == "start_time+duration<=uint64"

    def test_schedule_ending_at_uint64_max_allowed(self, descriptor, vesting_params):
        """Test the overflow rule is inclusive of the largest uint64."""
        vesting_params["start_time"] = KIND_MAX[ParameterKind.TIMESTAMP] - 100
        vesting_params["cliff_duration"] = 0
        vesting_params["duration"] = 100

        result = validate(descriptor, vesting_params, now=NOW)

        assert result.values["start_time"] + result.values["duration"] == 2**64 - 1


class TestAddressFields:
    """Tests for address-kind parameters."""

    def test_zero_address_rejected(self, descriptor, vesting_params):
        """Test the zero address is never accepted."""
        vesting_params["beneficiary"] = "0x" + "0" * 40

        with pytest.raises(ValidationError) as exc_info:
            validate(descriptor, vesting_params, now=NOW)

        assert exc_info.value.field == "beneficiary"
        assert exc_info.value.rule == "address_nonzero"

    @pytest.mark.parametrize(
        "value",
        [
            "0x1234",
            "0x" + "g1" * 20,
            "0x" + "a1" * 20 + "; selfdestruct(payable(msg.sender));",
            12345,
            "",
        ],
    )
    def test_malformed_address_rejected(self, descriptor, vesting_params, value):
        """Test values that are not 20-byte hex addresses."""
        vesting_params["token_address"] = value

        with pytest.raises(ValidationError) as exc_info:
            validate(descriptor, vesting_params, now=NOW)

        assert exc_info.value.field == "token_address"
        assert exc_info.value.rule == "address_format"

    def test_bad_mixed_case_checksum_rejected(self, descriptor, vesting_params):
        """Test a mixed-case address with a wrong checksum."""
        vesting_params["initial_owner"] = "0xf39fd6e51aad88F6F4ce6aB8827279cffFb92266"

        with pytest.raises(ValidationError) as exc_info:
            validate(descriptor, vesting_params, now=NOW)

        assert exc_info.value.field == "initial_owner"
        assert exc_info.value.rule == "address_format"

    def test_valid_mixed_case_checksum_accepted(self, descriptor, vesting_params):
        """Test a correctly checksummed address passes unchanged."""
        vesting_params["initial_owner"] = SENDER

        assert validate(descriptor, vesting_params, now=NOW).values["initial_owner"] == SENDER

    def test_all_upper_case_accepted(self, descriptor, vesting_params):
        """Test single-case hex carries no checksum claim."""
        vesting_params["beneficiary"] = "0x" + BENEFICIARY[2:].upper()

        result = validate(descriptor, vesting_params, now=NOW)

        assert result.values["beneficiary"].lower() == BENEFICIARY


class TestIntegerFields:
    """Tests for uint, duration and timestamp parameters."""

    def test_bool_rejected(self, descriptor, vesting_params):
        """Test True is not accepted as a duration."""
        vesting_params["duration"] = True

        with pytest.raises(ValidationError) as exc_info:
            validate(descriptor, vesting_params, now=NOW)

        assert exc_info.value.rule == "integer"

    @pytest.mark.parametrize(
        "value", ["1e6", "12.5", 12.5, "-5", "ten", [1], "\u00b2", "\u00b9\u00b2", "\u0661\u0662"]
    )
    def test_non_integer_rejected(self, descriptor, vesting_params, value):
        """Test values with no exact integer reading."""
        vesting_params["cliff_duration"] = value

        with pytest.raises(ValidationError) as exc_info:
            validate(descriptor, vesting_params, now=NOW)

        assert exc_info.value.field == "cliff_duration"
        assert exc_info.value.rule == "integer"

    def test_negative_rejected(self, descriptor, vesting_params):
        """Test negative ints."""
        vesting_params["cliff_duration"] = -1

        with pytest.raises(ValidationError) as exc_info:
            validate(descriptor, vesting_params, now=NOW)

        assert exc_info.value.rule == "non_negative"

    def test_duration_above_uint64_rejected(self, descriptor, vesting_params):
        """Test durations must fit the on-chain uint64."""
        vesting_params["duration"] = KIND_MAX[ParameterKind.DURATION] + 1

        with pytest.raises(ValidationError) as exc_info:
            validate(descriptor, vesting_params, now=NOW)

        assert exc_info.value.field == "duration"
        assert exc_info.value.rule == "range"


class TestFieldNames:
    """Tests for unknown and missing fields."""

    def test_unknown_field_rejected(self, descriptor, vesting_params):
        """Test undeclared parameters are not ignored."""
        vesting_params["revocable"] = True

        with pytest.raises(ValidationError) as exc_info:
            validate(descriptor, vesting_params, now=NOW)

        assert exc_info.value.field == "revocable"
        assert exc_info.value.rule == "unknown_field"

    @pytest.mark.parametrize("missing", ["token_address", "duration", "initial_owner"])
    def test_missing_field_rejected(self, descriptor, vesting_params, missing):
        """Test every declared parameter is required."""
        del vesting_params[missing]

        with pytest.raises(ValidationError) as exc_info:
            validate(descriptor, vesting_params, now=NOW)

        assert exc_info.value.field == missing
        assert exc_info.value.rule == "required"

    def test_none_counts_as_missing(self, descriptor, vesting_params):
        """Test an explicit null is treated as absent."""
        vesting_params["beneficiary"] = None

        with pytest.raises(ValidationError) as exc_info:
            validate(descriptor, vesting_params, now=NOW)

        assert exc_info.value.rule == "required"

    def test_empty_params_rejected(self, descriptor):
        """Test an empty submission."""
        with pytest.raises(ValidationError):
            validate(descriptor, {}, now=NOW)


def test_same_input_same_result(descriptor):
    """Test validation is a pure function of its inputs."""
    params = {
        "token_address": TOKEN,
        "beneficiary": BENEFICIARY,
        "start_time": NOW,
        "cliff_duration": 10,
        "duration": 100,
        "initial_owner": OWNER,
    }
    assert validate(descriptor, params, now=NOW) == validate(descriptor, dict(params), now=NOW)
