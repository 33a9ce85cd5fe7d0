"""Predicate builders for filtering contacts."""

from collections.abc import Callable
from datetime import date

from contact_index.contacts.schemas import Contact, DateComparison

ContactPredicate = Callable[[Contact], bool]


def created_date_filter(target: date, comparison: DateComparison) -> ContactPredicate:
    """Build a predicate comparing a contact's creation date to a target.

    Only the calendar date of created_at is compared; time of day is
    ignored.

    Args:
        target: Date to compare against.
        comparison: Whether to match dates before, after, or on the target.

    Returns:
        Predicate returning True for matching contacts.
    """

    def predicate(contact: Contact) -> bool:
        created = contact.created_at.date()
        if comparison is DateComparison.BEFORE:
            return created < target
        if comparison is DateComparison.AFTER:
            return created > target
        return created == target

    return predicate
