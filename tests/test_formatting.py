from savings.formatting import (
    format_currency,
    mask_balance,
    parse_amount,
    format_amount_input,
    format_card_number,
    format_expiry,
    validate_card,
)


def test_format_currency():
    assert format_currency(45750) == "₦45,750"
    assert format_currency(50) == "₦50"
    assert format_currency(1000, symbol="$") == "$1,000"


def test_mask_balance():
    assert mask_balance(45750) == "₦45,750"
    assert mask_balance(45750, visible=False) == "₦••••••"


def test_parse_amount():
    assert parse_amount("5,000") == 5000
    assert parse_amount("₦ 12,345") == 12345
    assert parse_amount("") is None
    assert parse_amount(None) is None
    assert parse_amount("abc") is None


def test_format_amount_input():
    assert format_amount_input("1234567") == "1,234,567"
    assert format_amount_input("12a34") == "1,234"
    assert format_amount_input("") == ""


def test_format_card_number():
    assert format_card_number("1234567890123456") == "1234 5678 9012 3456"
    assert format_card_number("1234 56") == "1234 56"
    assert format_card_number("") == ""
    full = "1234 5678 9012 3456"
    assert format_card_number(full + "7", previous=full) == full


def test_format_expiry():
    assert format_expiry("1") == "1"
    assert format_expiry("12") == "12/"
    assert format_expiry("1225") == "12/25"
    assert format_expiry("12/2599") == "12/25"


def test_validate_card():
    ok = validate_card("1234 5678 9012 3456", "12/25", "123", "John Doe")
    assert ok.is_right()
    assert ok.get_or_else({})["last_four"] == "3456"

    assert validate_card("", "12/25", "123", "John").get_error() == "Please fill in all card details"
    assert validate_card("1234 5678", "12/25", "123", "John").get_error() == "Please enter a valid 16-digit card number"
    assert validate_card("1234 5678 9012 3456", "12/25", "12", "John").get_error() == "Please enter a valid 3-digit CVV"
    # only the CVV length is checked
    assert validate_card("1234 5678 9012 3456", "12/25", "1a3", "John").is_right()
