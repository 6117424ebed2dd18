import pytest

from vabridge.exceptions import ValidationError
from vabridge.numbering import BLOCK_DIGITS, account_seed, generate, strip_prefix


class TestAccountSeed:
    def test_payer_number_comes_before_bill_type_code(self):
        assert account_seed("2024001", "SPP") == "2024001SPP"

    def test_seed_is_not_symmetric(self):
        assert account_seed("SPP", "2024001") != account_seed("2024001", "SPP")


class TestGenerate:
    def test_generates_exactly_the_requested_number_of_digits(self):
        number = generate("2024001SPP", 10)

        assert len(number) == 10
        assert number.isdigit()

    def test_same_seed_and_length_give_the_same_number(self):
        assert generate("2024001SPP", 10) == generate("2024001SPP", 10)

    def test_different_seeds_give_different_numbers(self):
        assert generate("2024001SPP", 16) != generate("2024002SPP", 16)

    def test_shorter_number_is_a_prefix_of_a_longer_one(self):
        short = generate("2024001SPP", 6)
        long = generate("2024001SPP", 12)

        assert long.startswith(short)

    def test_numbers_longer_than_one_block_span_blocks(self):
        number = generate("2024001SPP", BLOCK_DIGITS * 2 + 5)

        assert len(number) == BLOCK_DIGITS * 2 + 5
        assert number.isdigit()
        assert number.startswith(generate("2024001SPP", BLOCK_DIGITS))

    def test_single_digit_number(self):
        number = generate("2024001SPP", 1)

        assert len(number) == 1
        assert number.isdigit()

    def test_empty_seed_is_rejected(self):
        with pytest.raises(ValidationError) as exc:
            generate("", 10)

        assert exc.value.messages == {"seed": ["Seed cannot be empty"]}

    @pytest.mark.parametrize("length", [0, -1, None])
    def test_non_positive_length_is_rejected(self, length):
        with pytest.raises(ValidationError) as exc:
            generate("2024001SPP", length)

        assert "length" in exc.value.messages


class TestStripPrefix:
    def test_prefix_digits_are_removed(self):
        assert strip_prefix("9912345678", 2) == "12345678"

    def test_zero_prefix_keeps_the_number(self):
        assert strip_prefix("9912345678", 0) == "9912345678"

    def test_number_equal_to_prefix_length_is_rejected(self):
        with pytest.raises(ValidationError) as exc:
            strip_prefix("99", 2)

        assert "too short" in exc.value.messages["number"][0]

    def test_number_shorter_than_prefix_is_rejected(self):
        with pytest.raises(ValidationError):
            strip_prefix("9", 2)

    @pytest.mark.parametrize("number", ["", None])
    def test_empty_number_is_rejected(self, number):
        with pytest.raises(ValidationError) as exc:
            strip_prefix(number, 2)

        assert exc.value.messages == {"number": ["Virtual account number is empty"]}
