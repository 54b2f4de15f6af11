"""Issues found while checking an inbound order."""

from dataclasses import asdict, dataclass, field

from ..core.exceptions import OrderValidationError

MISSING_FIELD = "MISSING_FIELD"


@dataclass(frozen=True)
class FieldIssue:
    """A problem with one order field."""

    field: str
    code: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


@dataclass
class OrderCheck:
    """
    Issues collected over one order, in the order they were found.

    The first issue is the one reported to the caller; the rest travel
    along in OrderValidationError.errors.
    """

    issues: list[FieldIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues

    @property
    def codes(self) -> list[str]:
        return [issue.code for issue in self.issues]

    @property
    def first(self) -> FieldIssue | None:
        return self.issues[0] if self.issues else None

    def missing(self, field_name: str) -> None:
        self.issues.append(FieldIssue(field_name, MISSING_FIELD, f"{field_name} is required"))

    def invalid(self, field_name: str, code: str, message: str) -> None:
        self.issues.append(FieldIssue(field_name, code, message))

    def to_exception(self, message: str | None = None) -> OrderValidationError:
        """Build the error for a failed check; message defaults to the first issue's."""
        first = self.first
        return OrderValidationError(
            message or (first.message if first else "Invalid order"),
            field=first.field if first else None,
            errors=[issue.to_dict() for issue in self.issues],
        )
