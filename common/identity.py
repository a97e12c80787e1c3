from dataclasses import dataclass


@dataclass(frozen=True)
class Operator:
    """Caller identity recorded on audit records and status metadata."""

    id: str
    name: str

    @classmethod
    def from_user(cls, user) -> "Operator":
        name = getattr(user, "name", "") or user.get_username()
        return cls(id=str(user.pk), name=name)


SYSTEM_OPERATOR = Operator(id="system", name="System")
