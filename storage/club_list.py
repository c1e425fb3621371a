"""User profile and club membership list."""
from dataclasses import dataclass, field
from typing import List

COLLEGES = ("CAS", "CALS", "AAP", "CoE", "CHE", "Dyson", "ILR")


class ClubList:
    """Editable, ordered list of club names entered on the profile screen."""

    def __init__(self, clubs: List[str] = None):
        self._clubs: List[str] = list(clubs or [])

    @property
    def entries(self) -> List[str]:
        """All entries, including blank ones still being edited."""
        return list(self._clubs)

    def add_club(self) -> int:
        """
        Append one empty entry for the user to fill in.

        Returns:
            Index of the new entry
        """
        self._clubs.append("")
        return len(self._clubs) - 1

    def update_club(self, index: int, name: str) -> None:
        """
        Set the name of an existing entry.

        Args:
            index: Position of the entry
            name: Club name as typed by the user

        Raises:
            IndexError: If index does not refer to an existing entry
        """
        if not 0 <= index < len(self._clubs):
            raise IndexError(f"No club entry at index {index}")

        self._clubs[index] = name

    def remove_club(self, index: int) -> str:
        if not 0 <= index < len(self._clubs):
            raise IndexError(f"No club entry at index {index}")

        return self._clubs.pop(index)

    def memberships(self) -> List[str]:
        """
        Club names to filter on.

        Returns:
            Non-empty entries in list order
        """
        return [club for club in self._clubs if club]


@dataclass
class UserProfile:
    """Profile details shown on the profile screen."""
    name: str = ""
    college: str = ""
    clubs: ClubList = field(default_factory=ClubList)

    def __post_init__(self):
        self._validate_college(self.college)

    def set_college(self, college: str) -> None:
        """
        Select the user's college.

        Args:
            college: One of COLLEGES, or "" to clear

        Raises:
            ValueError: If the college is not offered
        """
        self._validate_college(college)
        self.college = college

    @staticmethod
    def _validate_college(college: str) -> None:
        if college and college not in COLLEGES:
            raise ValueError(f"Unknown college: {college}")
