"""Currency validation using ISO 4217 codes."""


class CurrencyValidator:
    """Validates and normalizes currency codes."""

    def validate(self, currency: str | None) -> tuple[bool, str | None, str | None]:
        """
        Validate and normalize a currency code.

        Args:
            currency: Currency code to validate

        Returns:
            Tuple of (is_valid, normalized_currency, error_message)
        """
        if currency is None:
            return False, None, "Currency is required"

        if not isinstance(currency, str):
            return False, None, f"Currency must be a string, got {type(currency).__name__}"

        normalized = self.normalize(currency)

        if not normalized:
            return False, None, "Currency cannot be empty"

        if len(normalized) != 3 or not normalized.isalpha():
            return False, None, f"Currency must be a 3-letter code, got {normalized!r}"

        return True, normalized, None

    def is_valid(self, currency: str | None) -> bool:
        """Check if a currency code is valid."""
        is_valid, _, _ = self.validate(currency)
        return is_valid

    def normalize(self, currency: str) -> str:
        """Normalize a currency code to uppercase."""
        return currency.upper().strip()
