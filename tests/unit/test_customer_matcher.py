"""
Unit tests for customer matching.

Run: pytest tests/unit/test_customer_matcher.py -v
"""

from models.matching import MatchConfidence, MatchTag
from services.customer_matcher import match_customer
from tests.factories import CustomerFactory


def _directory():
    return [
        CustomerFactory.create(id="cust-1", business_name="Acme Co", contact_name="Jane Doe", full_name="Jane Q Doe"),
        CustomerFactory.create(id="cust-2", business_name="Bolt Supplies", contact_name=None, full_name="Sam Smith"),
    ]


class TestMatchCustomer:
    """Tests for match_customer()"""

    def test_exact_business_name(self):
        """Equal business name is an exact match."""
        result = match_customer("ACME  co", _directory())

        assert result.customer.id == "cust-1"
        assert result.confidence == MatchConfidence.EXACT
        assert result.matched_field == "business_name"

    def test_exact_contact_or_full_name(self):
        """Contact and full names also match exactly."""
        assert match_customer("jane doe", _directory()).matched_field == "contact_name"
        assert match_customer("Sam Smith", _directory()).matched_field == "full_name"

    def test_business_name_checked_before_other_fields(self):
        """A business name hit wins over a full-name hit on another customer."""
        directory = [
            CustomerFactory.create(id="cust-a", business_name="Other", full_name="Delta Ltd"),
            CustomerFactory.create(id="cust-b", business_name="Delta Ltd"),
        ]

        result = match_customer("Delta Ltd", directory)

        assert result.customer.id == "cust-b"
        assert result.matched_field == "business_name"

    def test_containment_is_high_partial(self):
        """Name containing a field matches with high confidence."""
        result = match_customer("Bolt Supplies Pty", _directory())

        assert result.customer.id == "cust-2"
        assert result.confidence == MatchConfidence.HIGH
        assert result.matched_by == MatchTag.PARTIAL

    def test_empty_fields_never_contain(self):
        """A customer with an empty field must not match everything."""
        directory = [CustomerFactory.create(id="cust-1", business_name="", contact_name=None, full_name="Zed")]

        result = match_customer("Completely Different", directory)

        assert result.confidence == MatchConfidence.NONE

    def test_fuzzy_at_threshold_is_low(self):
        """Similarity exactly 0.7 should match with low confidence."""
        directory = [CustomerFactory.create(id="cust-1", business_name="abcdefghij")]

        result = match_customer("abcdefgXYZ", directory)

        assert result.customer.id == "cust-1"
        assert result.confidence == MatchConfidence.LOW
        assert result.matched_by == MatchTag.PARTIAL

    def test_fuzzy_below_threshold_is_none(self):
        """31 substitutions in 100 characters score 0.69, just under 0.7."""
        directory = [CustomerFactory.create(id="cust-1", business_name="a" * 100)]

        result = match_customer("a" * 69 + "b" * 31, directory)

        assert result.confidence == MatchConfidence.NONE
        assert result.customer is None

    def test_empty_input_short_circuits(self):
        assert match_customer("", _directory()).confidence == MatchConfidence.NONE
        assert match_customer(None, _directory()).confidence == MatchConfidence.NONE
        assert match_customer("Acme Co", []).confidence == MatchConfidence.NONE
