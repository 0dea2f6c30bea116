"""Phone number normalization for lookups and display.

Profiles were stored with whatever the user typed at signup over several
releases, so the same number can appear as '+263773049503', '263773049503',
'0773049503', '773049503' or even the typo '2630773049503'. Search therefore
never compares a single canonical string: it matches the whole set returned
by `all_lookup_formats`.

Numbers without a dial code are parsed in the home region (settings.HOME_REGION).
"""

import re

import phonenumbers
from phonenumbers import NumberParseException, PhoneNumberFormat

from config.settings import settings

# Home-region subscriber numbers are 9 digits (773049503)
LOCAL_SUBSCRIBER_DIGITS = 9

_NON_DIAL_CHARS = re.compile(r"[^\d+]")
_NON_DIGITS = re.compile(r"\D")
_E164 = re.compile(r"\+\d{8,15}")


class PhoneNormalizer:
    def __init__(self, region: str | None = None) -> None:
        self.region = (region or settings.HOME_REGION).upper()
        self.country_code = str(phonenumbers.country_code_for_region(self.region))
        if self.country_code == "0":
            raise ValueError(f"Unknown phone region: {self.region}")

    def fix_common_typos(self, raw: str) -> str:
        """Pre-clean input before parsing.

        '263 077 304 9503' -> '+263773049503'  (country code + local leading zero)
        '+2630773049503'   -> '+263773049503'
        '00263773049503'   -> '+263773049503'  (double-zero international prefix)
        """
        if not raw:
            return ""
        cleaned = _NON_DIAL_CHARS.sub("", raw)
        cc = self.country_code
        min_len = len(cc) + 1 + LOCAL_SUBSCRIBER_DIGITS - 1

        if cleaned.startswith(cc + "0") and len(cleaned) >= min_len:
            return "+" + cc + cleaned[len(cc) + 1:]
        if cleaned.startswith("+" + cc + "0") and len(cleaned) >= min_len + 1:
            return "+" + cc + cleaned[len(cc) + 2:]
        if cleaned.startswith("00"):
            return "+" + cleaned[2:]
        return cleaned

    def _parse(self, raw: str) -> phonenumbers.PhoneNumber:
        return phonenumbers.parse(self.fix_common_typos(raw), self.region)

    def normalize(self, raw: str) -> str:
        """Return E.164 ('+263773049503') when possible, else the input unchanged."""
        try:
            number = self._parse(raw)
            if phonenumbers.is_valid_number(number):
                return phonenumbers.format_number(number, PhoneNumberFormat.E164)
        except NumberParseException:
            pass

        # Strict parsing failed: best-effort cleanup for home-region numbers
        digits = _NON_DIGITS.sub("", raw or "")
        if len(digits) == LOCAL_SUBSCRIBER_DIGITS or (
            digits.startswith("0") and len(digits) == LOCAL_SUBSCRIBER_DIGITS + 1
        ):
            return "+" + self.country_code + (digits[1:] if digits.startswith("0") else digits)
        if digits.startswith(self.country_code) and len(digits) > LOCAL_SUBSCRIBER_DIGITS:
            return "+" + digits
        return raw

    def all_lookup_formats(self, raw: str) -> set[str]:
        """Every format the number may have been stored under.

        Unparseable input yields {raw} so a lookup degrades to an exact match
        instead of matching nothing or everything.
        """
        e164 = self.normalize(raw)
        if not e164 or not _E164.fullmatch(e164):
            return {raw}

        digits_only = e164[1:]
        formats = {e164, digits_only}
        if digits_only.startswith(self.country_code):
            local = digits_only[len(self.country_code):]
            formats.update({
                "0" + local,
                local,
                # Typo variants that made it into the table
                self.country_code + "0" + local,
                "+" + self.country_code + "0" + local,
            })
        return formats

    def is_valid(self, raw: str) -> bool:
        try:
            return phonenumbers.is_valid_number(self._parse(raw))
        except NumberParseException:
            return False

    def format_for_display(self, raw: str) -> str:
        """'+263773049503' -> '+263 77 304 9503'."""
        try:
            number = self._parse(raw)
        except NumberParseException:
            return raw
        return phonenumbers.format_number(number, PhoneNumberFormat.INTERNATIONAL)

    def phones_equal(self, first: str, second: str) -> bool:
        return self.normalize(first) == self.normalize(second)


_default = PhoneNormalizer()

normalize = _default.normalize
all_lookup_formats = _default.all_lookup_formats
is_valid = _default.is_valid
format_for_display = _default.format_for_display
phones_equal = _default.phones_equal
