class PopGenKitError(Exception):
    """Base exception class for all popgenkit errors."""

    def __init__(self, message: str = "A popgenkit-related error occurred.") -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class InsufficientSamplesError(PopGenKitError):
    """Raised when a statistic is requested for fewer samples than it needs."""

    def __init__(self, n: int, minimum: int = 2, message: str = None) -> None:
        self.n = n
        self.minimum = minimum
        msg = (
            message
            or f"At least {minimum} samples are required, but got {n} samples."
        )
        super().__init__(msg)


class InsufficientPopulationsError(PopGenKitError):
    """Raised when a between-population statistic receives fewer than two populations."""

    def __init__(self, n_pops: int, message: str = None) -> None:
        self.n_pops = n_pops
        msg = (
            message
            or f"At least 2 populations are required, but got {n_pops} population(s)."
        )
        super().__init__(msg)


class InvalidSampleSizeError(PopGenKitError):
    """Raised when a coalescent simulation is configured with an invalid sample size."""

    def __init__(self, sample_size, message: str = None) -> None:
        self.sample_size = sample_size
        msg = (
            message
            or f"Coalescent sample size must be an integer >= 2, but got: {sample_size!r}."
        )
        super().__init__(msg)
