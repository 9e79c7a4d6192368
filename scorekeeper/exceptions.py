class ScoringError(Exception):
    pass


class ConfigurationError(ScoringError):
    pass


class TemporalError(ScoringError):
    pass


class InvalidStateError(ScoringError):
    pass


class InvalidWinnerError(ScoringError, ValueError):
    pass


class ReplayDivergenceError(ScoringError):

    def __init__(self, index: int, reason: str):
        super().__init__(f"Point {index} cannot be replayed: {reason}")
        self.index = index
        self.reason = reason
