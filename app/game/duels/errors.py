class DuelError(Exception):
    pass


class DuelNotFoundError(DuelError):
    pass


class DuelInvalidOpponentError(DuelError):
    pass


class DuelQuizSetNotFoundError(DuelError):
    pass


class DuelNotParticipantError(DuelError):
    pass


class DuelInvalidStateError(DuelError):
    pass


class DuelExpiredError(DuelError):
    pass


class DuelAlreadySubmittedError(DuelError):
    pass


class DuelInvalidScoreError(DuelError):
    pass


class DuelInvalidDurationError(DuelInvalidScoreError):
    pass


class DuelStorageConflictError(DuelError):
    """A conditional write lost to a concurrent writer; the other writer's result stands."""
