from dataclasses import dataclass


@dataclass(frozen=True)
class CreationState:
    """
    The notification-relevant fields of a creation at one point in time.

    Captured from the stored row before an update so that hooks can
    compare what the creation was with what it is about to become.
    """

    posted: bool = False
    in_anon_collection: bool = False
    in_unrevealed_collection: bool = False

    @classmethod
    def of(cls, creation):
        return cls(
            posted=bool(creation.posted),
            in_anon_collection=bool(getattr(creation, "in_anon_collection", False)),
            in_unrevealed_collection=bool(
                getattr(creation, "in_unrevealed_collection", False)
            ),
        )

    @classmethod
    def stored(cls, creation):
        """State of the persisted row, or a blank state for unsaved creations."""
        if not creation.pk:
            return cls()

        try:
            stored = type(creation).objects.get(pk=creation.pk)
        except type(creation).DoesNotExist:
            return cls()

        return cls.of(stored)

    @property
    def concealed(self):
        return self.in_anon_collection or self.in_unrevealed_collection
