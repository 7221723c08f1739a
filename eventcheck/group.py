from dataclasses import dataclass


class Group:
    """
    A base class representing a collection of attendees.
    Provides methods for querying and filtering based on record attributes.

    Subclasses provide the `attendees` sequence.
    """

    @property
    def total(self):
        """Returns the total number of attendees in the group."""
        return len(self.attendees)

    def get_attendees_by_attribute(self, attribute, value=True):
        """
        Returns all attendees with a specific attribute value.

        Args:
            attribute (str): The attribute to check.
            value (any): The expected value of the attribute.

        Returns:
            tuple: Matching attendees, in collection order.
        """
        return tuple(a for a in self.attendees if getattr(a, attribute, None) == value)

    def get_attendee_by_id(self, id):
        """
        Returns the attendee with the specified ID.

        Raises:
            ValueError if no attendee with the given ID is found.
        """
        attendee = self.find_attendee(id)
        if attendee is None:
            raise ValueError(f"Attendee ID {id} not found")
        return attendee

    def find_attendee(self, id):
        """
        Looks up an attendee by ID without failing.

        Used to resolve soft references such as `primary_attendee_id`, whose target may
        have been deleted or filtered out of the snapshot.

        Returns:
            Attendee or None: The attendee, or None when the reference is unresolved.
        """
        if id is None:
            return None
        for a in self.attendees:
            if a.id == id:
                return a
        return None


@dataclass(frozen=True)
class Roster(Group):
    """A read-only snapshot of attendee records."""

    attendees: tuple = ()

    def __repr__(self):
        return f"Roster({self.total} attendees)"
